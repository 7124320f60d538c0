"""
Response parsing and typed decoders.

``parse_document`` converts a raw SOAP response into the generic tree the
extractor walks: namespace prefixes are stripped from tag names, every
element is a list of its occurrences (the root excepted), attributes live
under ``@Name`` keys and text sits under ``_`` when attributes are present.

The ``decode_*`` functions map that tree onto one typed record per action so
callers never index ``[0]`` themselves.
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass, field
from typing import Any

import xmltodict

from winrmexec.infrastructure.wsman.extractor import extract, extract_optional

ATTR_PREFIX = "@"
TEXT_KEY = "_"


# =============================================================================
# Generic XML -> tree conversion
# =============================================================================

def _strip_prefix(_path: list, key: str, value: Any) -> tuple[str, Any]:
    """Drop ``ns:`` from element names; attributes keep their names."""
    if key.startswith(ATTR_PREFIX) or key == TEXT_KEY:
        return key, value
    return key.rsplit(":", 1)[-1], value


def _force_list(path: list, key: str, _value: Any) -> bool:
    """Wrap every element but the root in a list."""
    if key.startswith(ATTR_PREFIX) or key == TEXT_KEY:
        return False
    return len(path) > 0


def parse_document(payload: str | bytes) -> dict[str, Any]:
    """
    Parse a SOAP response into a prefix-agnostic tree.

    Raises:
        xml.parsers.expat.ExpatError: when the payload is not well-formed XML
    """
    return xmltodict.parse(
        payload,
        attr_prefix=ATTR_PREFIX,
        cdata_key=TEXT_KEY,
        force_list=_force_list,
        postprocessor=_strip_prefix,
    )


def text_of(node: Any) -> str | None:
    """Text content of an element whether or not it carries attributes."""
    if isinstance(node, dict):
        return node.get(TEXT_KEY)
    return node


def attribute(node: Any, name: str) -> str | None:
    """Attribute value of an element, None when absent."""
    if isinstance(node, dict):
        return node.get(f"{ATTR_PREFIX}{name}")
    return None


# =============================================================================
# Typed responses
# =============================================================================

@dataclass(frozen=True)
class ShellCreated:
    """Create response: the new shell and who owns it."""

    shell_id: str
    owner: str | None = None
    client_ip: str | None = None


@dataclass(frozen=True)
class CommandStarted:
    """Command response."""

    command_id: str


@dataclass(frozen=True)
class StreamChunk:
    """One ``Stream`` element of a Receive response."""

    name: str
    ended: bool
    data: bytes = b""

    def text(self, encoding: str = "utf-8") -> str:
        """Decoded chunk; undecodable bytes are replaced."""
        return self.data.decode(encoding, errors="replace")


@dataclass(frozen=True)
class ReceiveResult:
    """Receive response: output chunks and, once done, the exit code."""

    streams: list[StreamChunk] = field(default_factory=list)
    exit_code: int | None = None
    state: str | None = None


@dataclass(frozen=True)
class FaultDetail:
    """Decoded parts of a SOAP Fault, every field best-effort."""

    code: str | None = None
    subcode: str | None = None
    reason: str | None = None
    wsman_code: str | None = None
    message: str | None = None


def decode_shell_created(document: dict[str, Any]) -> ShellCreated:
    """Map a Create response; the ShellId is mandatory."""
    shell = extract(document, "Envelope/Body/0/Shell/0")
    shell_id = text_of(extract(shell, "ShellId/0"))
    if not shell_id:
        raise ValueError("Empty ShellId in Create response")
    return ShellCreated(
        shell_id=shell_id,
        owner=text_of(extract_optional(shell, "Owner/0")),
        client_ip=text_of(extract_optional(shell, "ClientIP/0")),
    )


def decode_command_started(document: dict[str, Any]) -> CommandStarted:
    """Map a Command response."""
    command = extract(document, "Envelope/Body/0/CommandResponse/0")
    return CommandStarted(command_id=text_of(extract(command, "CommandId/0")))


def decode_receive(document: dict[str, Any]) -> ReceiveResult:
    """
    Map a Receive response.

    A missing ``CommandState/ExitCode`` means the process is still running,
    and so does an empty ``<rsp:ExitCode/>``: completion needs a numeric
    code, even when ``State`` already reads Done.
    A response without any ``Stream`` element carries no output.
    """
    received = extract(document, "Envelope/Body/0/ReceiveResponse/0")

    chunks = []
    for stream in extract_optional(received, "Stream", []):
        name = attribute(stream, "Name")
        if name is None:
            raise ValueError("Stream element without Name attribute")
        ended = attribute(stream, "End") == "true"
        payload = text_of(stream) or ""
        try:
            data = base64.b64decode(payload)
        except (binascii.Error, ValueError) as e:
            raise ValueError(f"Invalid base64 in {name} stream: {e}") from e
        chunks.append(StreamChunk(name=name, ended=ended, data=data))

    exit_code = None
    raw_exit_code = text_of(extract_optional(received, "CommandState/0/ExitCode/0"))
    if raw_exit_code is not None:
        exit_code = int(raw_exit_code.strip())

    return ReceiveResult(
        streams=chunks,
        exit_code=exit_code,
        state=attribute(extract_optional(received, "CommandState/0"), "State"),
    )


def decode_fault(fault: Any) -> FaultDetail:
    """Pull code, reason and the WS-Management error code out of a Fault."""
    body = fault[0] if isinstance(fault, list) and fault else fault
    return FaultDetail(
        code=text_of(extract_optional(body, "Code/0/Value/0")),
        subcode=text_of(extract_optional(body, "Code/0/Subcode/0/Value/0")),
        reason=text_of(extract_optional(body, "Reason/0/Text/0")),
        wsman_code=attribute(extract_optional(body, "Detail/0/WSManFault/0"), "Code"),
        message=text_of(extract_optional(body, "Detail/0/WSManFault/0/Message/0")),
    )
