"""
SOAP envelope rendering.

Turns a RequestDescriptor into the XML document posted to the WinRM
endpoint. The header layout is fixed; only Action, MessageID, the ShellId
selector and the option set vary per request.

Body templates follow the xmltodict convention used throughout this package:
``@key`` is an attribute, ``_`` is the element text, anything else is a
child element and a list renders repeated elements.
"""

from __future__ import annotations

from typing import Any

import xmltodict

from winrmexec.domain.models import RequestDescriptor
from winrmexec.infrastructure.wsman.constants import (
    ANONYMOUS_ADDRESS,
    LOCALE,
    MAX_ENVELOPE_SIZE,
    NAMESPACES,
    OPERATION_TIMEOUT_SECONDS,
    RESOURCE_URI_CMD,
    TO_ADDRESS,
)

ATTR_PREFIX = "@"
TEXT_KEY = "_"

MUST_UNDERSTAND = {"@mustUnderstand": "true"}


def _stringify(value: Any) -> Any:
    """Convert scalar leaves to text so attributes and text nodes render."""
    if isinstance(value, dict):
        return {key: _stringify(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_stringify(item) for item in value]
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _header(request: RequestDescriptor) -> dict[str, Any]:
    header: dict[str, Any] = {
        "wsa:To": TO_ADDRESS,
        "wsman:ResourceURI": {**MUST_UNDERSTAND, TEXT_KEY: RESOURCE_URI_CMD},
        "wsa:ReplyTo": {
            "wsa:Address": {**MUST_UNDERSTAND, TEXT_KEY: ANONYMOUS_ADDRESS},
        },
        "wsman:MaxEnvelopeSize": {**MUST_UNDERSTAND, TEXT_KEY: str(MAX_ENVELOPE_SIZE)},
        "wsa:MessageID": f"urn:uuid:{request.correlation_id}",
        "wsman:Locale": {"@mustUnderstand": "false", "@xml:lang": LOCALE},
        "wsman:OperationTimeout": f"PT{OPERATION_TIMEOUT_SECONDS}S",
        "wsa:Action": {**MUST_UNDERSTAND, TEXT_KEY: request.action},
    }
    if request.shell_id:
        header["wsman:SelectorSet"] = {
            "wsman:Selector": {"@Name": "ShellId", TEXT_KEY: request.shell_id},
        }
    if request.options:
        header["wsman:OptionSet"] = {
            "wsman:Option": [
                {"@Name": name, TEXT_KEY: value}
                for name, value in request.options.items()
            ],
        }
    return header


def build_document(request: RequestDescriptor) -> dict[str, Any]:
    """Return the envelope as an xmltodict-style tree."""
    envelope: dict[str, Any] = {
        f"@xmlns:{prefix}": uri for prefix, uri in NAMESPACES.items()
    }
    envelope["s:Header"] = _header(request)
    envelope["s:Body"] = request.body or None
    return {"s:Envelope": _stringify(envelope)}


def render_envelope(request: RequestDescriptor) -> str:
    """Serialize ``request`` as a complete SOAP 1.2 document."""
    return xmltodict.unparse(
        build_document(request),
        full_document=True,
        attr_prefix=ATTR_PREFIX,
        cdata_key=TEXT_KEY,
    )
