"""
Tests for the transport invoker's response handling.
"""

import json
from unittest.mock import Mock

import pytest

import wsman_fixtures as wf
from winrmexec.domain.errors import (
    MalformedResponseError,
    PathNotFoundError,
    SoapFaultError,
    WinRMTransportError,
)
from winrmexec.domain.models import RequestDescriptor
from winrmexec.infrastructure.http_transport import HttpResponse
from winrmexec.infrastructure.wsman.constants import ACTION_CREATE
from winrmexec.infrastructure.wsman.invoker import TransportInvoker
from winrmexec.infrastructure.wsman.request_builder import RequestBuilder
from winrmexec.infrastructure.wsman.responses import decode_fault, parse_document


class TestHandleResponse:
    """Test cases for TransportInvoker.handle_response."""

    def setup_method(self):
        self.invoker = TransportInvoker(wf.ScriptedTransport(), max_workers=1)
        self.request = RequestBuilder().start_session()

    def teardown_method(self):
        self.invoker.shutdown()

    def test_success_runs_parser(self):
        assert self.invoker.handle_response(self.request, 200, wf.shell_created("s-1")) == "s-1"

    def test_any_2xx_is_success(self):
        assert self.invoker.handle_response(self.request, 204, wf.shell_created("s-1")) == "s-1"

    def test_non_2xx_is_transport_error(self):
        with pytest.raises(WinRMTransportError) as exc_info:
            self.invoker.handle_response(self.request, 401, "Unauthorized")

        assert exc_info.value.status_code == 401
        assert exc_info.value.body == "Unauthorized"
        assert str(exc_info.value) == (
            "Failed to process the request, status Code: 401 - response body: Unauthorized"
        )

    def test_http_500_with_fault_stays_transport_error(self):
        """Status is checked before the body is looked at."""
        with pytest.raises(WinRMTransportError) as exc_info:
            self.invoker.handle_response(self.request, 500, wf.fault())
        assert exc_info.value.status_code == 500

    def test_invalid_xml(self):
        with pytest.raises(MalformedResponseError) as exc_info:
            self.invoker.handle_response(self.request, 200, "<s:Envelope><oops")
        assert "Invalid XML" in str(exc_info.value)
        assert exc_info.value.raw == "<s:Envelope><oops"

    def test_fault_wins_over_parser(self):
        parser = Mock()
        request = RequestDescriptor(
            correlation_id="id-1", action=ACTION_CREATE, response_parser=parser
        )

        with pytest.raises(SoapFaultError) as exc_info:
            self.invoker.handle_response(request, 200, wf.fault(code="2150858843"))

        parser.assert_not_called()
        error = exc_info.value
        assert error.code == "s:Receiver"
        assert error.wsman_code == "2150858843"
        assert "shell was not found" in error.reason
        assert str(error).startswith("Server responded SOAP Fault: ")
        assert json.loads(str(error)[len("Server responded SOAP Fault: "):]) == error.fault

    def test_parser_failure_is_malformed_response(self):
        """A missing ShellId surfaces with the raw body attached."""
        body = wf.envelope("<rsp:Shell><rsp:Owner>x</rsp:Owner></rsp:Shell>")

        with pytest.raises(MalformedResponseError) as exc_info:
            self.invoker.handle_response(self.request, 200, body)

        assert str(exc_info.value).startswith("Malformed Server response, Path ")
        assert exc_info.value.raw == body
        assert isinstance(exc_info.value.__cause__, PathNotFoundError)

    def test_missing_relates_to_is_tolerated(self):
        body = wf.envelope(
            "<rsp:Shell><rsp:ShellId>s-2</rsp:ShellId></rsp:Shell>",
            action=f"{ACTION_CREATE}Response",
            relates_to=None,
        )
        assert self.invoker.handle_response(self.request, 200, body) == "s-2"

    def test_no_parser_returns_none(self):
        request = RequestBuilder().close_session("s-1")
        assert self.invoker.handle_response(request, 200, wf.deleted()) is None


class TestInvoke:
    """Test cases for the asynchronous round trip."""

    def test_future_resolves_with_parsed_result(self):
        transport = wf.ScriptedTransport({ACTION_CREATE: [wf.ok(wf.shell_created("s-3"))]})
        invoker = TransportInvoker(transport)
        try:
            assert invoker.invoke(RequestBuilder().start_session()).result(timeout=5) == "s-3"
        finally:
            invoker.shutdown()

        assert transport.actions() == [ACTION_CREATE]

    def test_transport_error_fails_future(self):
        error = WinRMTransportError(None, "Connection refused")
        transport = wf.ScriptedTransport({ACTION_CREATE: [error]})
        invoker = TransportInvoker(transport)
        try:
            future = invoker.invoke(RequestBuilder().start_session())
            assert future.exception(timeout=5) is error
        finally:
            invoker.shutdown()

    def test_payload_is_utf8_bytes(self):
        transport = Mock()
        transport.target = "h:5985/wsman"
        transport.post.return_value = HttpResponse(200, wf.command_started("c-1"))
        invoker = TransportInvoker(transport)
        try:
            invoker.exchange(RequestBuilder().execute_command("echo Grüße", "s-1"))
        finally:
            invoker.shutdown()

        payload = transport.post.call_args[0][0]
        assert isinstance(payload, bytes)
        assert "echo Grüße" in payload.decode("utf-8")

    def test_injected_executor_left_running(self):
        executor = Mock()
        invoker = TransportInvoker(wf.ScriptedTransport(), executor=executor)
        invoker.shutdown()
        executor.shutdown.assert_not_called()


class TestDecodeFault:
    """Test cases for decode_fault."""

    def test_all_parts(self):
        fault = parse_document(wf.fault(reason="Access denied", code="5"))["Envelope"]["Body"][0]["Fault"]
        detail = decode_fault(fault)

        assert detail.code == "s:Receiver"
        assert detail.subcode == "w:InvalidSelectors"
        assert detail.reason == "Access denied"
        assert detail.wsman_code == "5"
        assert detail.message == "Access denied"

    def test_bare_fault(self):
        detail = decode_fault([None])
        assert detail.code is None
        assert detail.reason is None
