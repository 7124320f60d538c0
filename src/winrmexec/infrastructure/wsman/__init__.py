"""
WS-Management protocol package.

Envelope rendering, request builders, response decoding and the invoker
that ties them to an HTTP transport.
"""

from winrmexec.infrastructure.wsman.envelope import render_envelope
from winrmexec.infrastructure.wsman.extractor import extract, extract_optional
from winrmexec.infrastructure.wsman.identifiers import uuid4
from winrmexec.infrastructure.wsman.invoker import TransportInvoker
from winrmexec.infrastructure.wsman.request_builder import RequestBuilder
from winrmexec.infrastructure.wsman.responses import parse_document

__all__ = [
    "RequestBuilder",
    "TransportInvoker",
    "extract",
    "extract_optional",
    "parse_document",
    "render_envelope",
    "uuid4",
]
