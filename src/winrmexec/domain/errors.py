"""
WinRM error taxonomy.

Every failure of a command execution surfaces as one of these exceptions,
set on the future returned by the session orchestrator.

Hierarchy:
    WinRMError
        WinRMTransportError          - HTTP failure or non-2xx status
            AuthenticationNotSupportedError
        MalformedResponseError       - unparsable XML or unexpected shape
        PathNotFoundError            - expected element missing
        SoapFaultError               - server answered with a SOAP Fault
        RemoteCommandError           - remote process exited non-zero
        PollLimitExceededError       - configured poll bound reached
"""

from __future__ import annotations

from typing import Any


class WinRMError(Exception):
    """Base class for all WinRM client errors."""


class WinRMTransportError(WinRMError):
    """
    HTTP-level failure.

    ``status_code`` is None when no response was received at all
    (connection refused, DNS failure, read timeout).
    """

    def __init__(self, status_code: int | None, body: str = "") -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(
            f"Failed to process the request, status Code: {status_code} - response body: {body}"
        )


class AuthenticationNotSupportedError(WinRMTransportError):
    """Domain accounts need NTLM, which this client does not speak."""

    def __init__(self, username: str) -> None:
        self.username = username
        super().__init__(None, "Domain account authentication is not supported on this platform")


class MalformedResponseError(WinRMError):
    """The server answered 2xx but the payload could not be understood."""

    def __init__(self, message: str, raw: str = "") -> None:
        self.raw = raw
        super().__init__(message)


class PathNotFoundError(WinRMError):
    """
    A pseudo-XPath lookup hit a missing segment.

    Attributes:
        segment: the first segment that could not be resolved
        path: the resolved prefix including the missing segment
        requested: the full path that was asked for
    """

    def __init__(self, segment: str, path: str, requested: str) -> None:
        self.segment = segment
        self.path = path
        self.requested = requested
        super().__init__(f"Path {path} is undefined ({requested} requested)")


class SoapFaultError(WinRMError):
    """The response body carried a SOAP Fault element."""

    def __init__(
        self,
        fault: Any,
        serialized: str,
        code: str | None = None,
        reason: str | None = None,
        wsman_code: str | None = None,
    ) -> None:
        self.fault = fault
        self.code = code
        self.reason = reason
        self.wsman_code = wsman_code
        super().__init__(f"Server responded SOAP Fault: {serialized}")


class RemoteCommandError(WinRMError):
    """The remote process exited with a non-zero code while failOnErrors was set."""

    def __init__(
        self,
        command: str,
        exit_code: int,
        stdout: str | None = None,
        stderr: str | None = None,
    ) -> None:
        self.command = command
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(
            f"Command {command} failed with exit code: {exit_code} - {stdout or ''} {stderr or ''}"
        )


class PollLimitExceededError(WinRMError):
    """The command was still running after the configured number of polls."""

    def __init__(self, command_id: str, polls: int) -> None:
        self.command_id = command_id
        self.polls = polls
        super().__init__(f"Command {command_id} still running after {polls} output polls")
