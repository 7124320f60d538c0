"""
SOAP transport invoker.

Renders a RequestDescriptor, posts it on a worker thread and resolves the
returned future with whatever the descriptor's parser makes of the answer.

Response handling, in order:
    1. non-2xx status           -> WinRMTransportError(status, body)
    2. XML that does not parse  -> MalformedResponseError
    3. Fault in the SOAP Body   -> SoapFaultError (wins over the parser)
    4. parser raises            -> MalformedResponseError with the raw body
    5. otherwise                -> parser result
"""

from __future__ import annotations

import json
import logging
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import TYPE_CHECKING, Any
from xml.parsers.expat import ExpatError

from winrmexec.domain.errors import (
    MalformedResponseError,
    SoapFaultError,
    WinRMTransportError,
)
from winrmexec.domain.models import RequestDescriptor
from winrmexec.infrastructure.wsman.envelope import render_envelope
from winrmexec.infrastructure.wsman.extractor import extract_optional
from winrmexec.infrastructure.wsman.responses import decode_fault, parse_document, text_of

if TYPE_CHECKING:
    from winrmexec.infrastructure.http_transport import HttpPoster

logger = logging.getLogger(__name__)


class TransportInvoker:
    """
    Runs request/response exchanges against one WinRM endpoint.

    Exchanges never wait on each other, so a single small pool is enough.
    An injected executor is left running on shutdown().
    """

    def __init__(
        self,
        transport: HttpPoster,
        executor: Executor | None = None,
        log: logging.Logger | None = None,
        max_workers: int = 4,
    ) -> None:
        self.transport = transport
        self.log = log or logger
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="winrm-http"
        )

    def invoke(self, request: RequestDescriptor) -> Future:
        """Send ``request`` asynchronously; the future carries the parsed result."""
        return self._executor.submit(self.exchange, request)

    def exchange(self, request: RequestDescriptor) -> Any:
        """Synchronous round trip for ``request``."""
        payload = render_envelope(request).encode("utf-8")
        self.log.debug(
            "Sending %s bytes to %s, action: %s, messageId: %s",
            len(payload),
            self.transport.target,
            request.action,
            request.correlation_id,
        )
        response = self.transport.post(payload)
        return self.handle_response(request, response.status_code, response.text)

    def handle_response(self, request: RequestDescriptor, status_code: int, body: str) -> Any:
        """
        Interpret a buffered HTTP response for ``request``.

        Raises:
            WinRMTransportError: status outside 200-299
            MalformedResponseError: unparsable XML or parser failure
            SoapFaultError: the Body holds a Fault
        """
        if not 200 <= status_code <= 299:
            self.log.debug(
                "HTTP %s from %s for messageId %s",
                status_code,
                self.transport.target,
                request.correlation_id,
            )
            raise WinRMTransportError(status_code, body)

        try:
            document = parse_document(body)
        except ExpatError as e:
            self.log.debug("Error converting %s bytes of XML: %s", len(body), e)
            raise MalformedResponseError(f"Invalid XML in server response: {e}", body) from e

        self.log.debug(
            "Successfully converted %s bytes of XML from %s (%s), responding to: %s",
            len(body),
            self.transport.target,
            request.action,
            text_of(extract_optional(document, "Envelope/Header/0/RelatesTo/0")),
        )

        soap_body = extract_optional(document, "Envelope/Body/0")
        if isinstance(soap_body, dict) and "Fault" in soap_body:
            raise self._fault_error(soap_body["Fault"])

        if request.response_parser is None:
            return None
        try:
            return request.response_parser(document)
        except Exception as e:  # pylint: disable=broad-except
            raise MalformedResponseError(f"Malformed Server response, {e} in {body}", body) from e

    @staticmethod
    def _fault_error(fault: Any) -> SoapFaultError:
        detail = decode_fault(fault)
        return SoapFaultError(
            fault,
            json.dumps(fault),
            code=detail.code,
            reason=detail.reason or detail.message,
            wsman_code=detail.wsman_code,
        )

    def shutdown(self, wait: bool = True) -> None:
        """Stop the worker pool if this invoker created it."""
        if self._owns_executor:
            self._executor.shutdown(wait=wait)
