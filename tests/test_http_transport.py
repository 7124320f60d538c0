"""
Tests for the Basic-auth HTTP transport.
"""

from unittest.mock import Mock

import pytest
import requests

from winrmexec.domain.config import TransportOptions
from winrmexec.domain.errors import AuthenticationNotSupportedError, WinRMTransportError
from winrmexec.infrastructure.http_transport import HttpResponse, HttpTransport


def _response(status_code=200, chunks=(b"<ok/>",)):
    response = Mock()
    response.status_code = status_code
    response.iter_content.return_value = iter(chunks)
    return response


class TestHttpTransport:
    """Test cases for HttpTransport.post."""

    def setup_method(self):
        self.session = Mock(spec=requests.Session)
        self.options = TransportOptions(host="10.0.0.5", username="administrator", password="pw")
        self.transport = HttpTransport(self.options, session=self.session)

    def test_post_request(self):
        self.session.post.return_value = _response()
        payload = "<s:Envelope/>".encode("utf-8")

        self.transport.post(payload)

        args, kwargs = self.session.post.call_args
        assert args == ("http://10.0.0.5:5985/wsman",)
        assert kwargs["data"] == payload
        assert kwargs["headers"] == {
            "Content-Type": "application/soap+xml;charset=UTF-8",
            "User-Agent": "winrmexec WinRM Client",
            "Content-Length": str(len(payload)),
        }
        assert kwargs["auth"].username == "administrator"
        assert kwargs["auth"].password == "pw"
        assert kwargs["timeout"] == 60.0
        assert kwargs["verify"] is True

    def test_body_is_buffered(self):
        response = _response(chunks=(b"<a>", "é".encode("utf-8"), b"</a>"))
        self.session.post.return_value = response

        result = self.transport.post(b"x")

        assert result == HttpResponse(200, "<a>é</a>")
        assert result.ok
        response.close.assert_called_once()

    def test_error_status_is_returned(self):
        """Status interpretation is left to the invoker."""
        self.session.post.return_value = _response(status_code=401, chunks=(b"denied",))
        result = self.transport.post(b"x")
        assert result.status_code == 401
        assert not result.ok

    def test_connection_failure(self):
        self.session.post.side_effect = requests.ConnectionError("Connection refused")

        with pytest.raises(WinRMTransportError) as exc_info:
            self.transport.post(b"x")

        assert exc_info.value.status_code is None
        assert "Connection refused" in exc_info.value.body

    def test_domain_account_rejected(self):
        options = TransportOptions(host="10.0.0.5", username="CORP\\admin", password="pw")
        transport = HttpTransport(options, session=self.session)

        with pytest.raises(AuthenticationNotSupportedError):
            transport.post(b"x")
        self.session.post.assert_not_called()

    def test_target(self):
        assert self.transport.target == "10.0.0.5:5985/wsman"

    def test_close(self):
        self.transport.close()
        self.session.close.assert_called_once()
