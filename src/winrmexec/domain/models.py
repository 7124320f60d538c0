"""
WinRM domain models.

Pure data definitions shared by the protocol layer and the session
orchestrator. No I/O happens here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

# Streams requested from the remote shell; anything else is ignored
OUTPUT_STREAMS = ("stdout", "stderr")


class SessionState(str, Enum):
    """
    Lifecycle of a single command execution.

    IDLE -> SHELL_OPENING -> COMMAND_STARTING -> OUTPUT_POLLING -> DONE
    Any state may move to FAILED.
    """

    IDLE = "idle"
    SHELL_OPENING = "shell_opening"
    COMMAND_STARTING = "command_starting"
    OUTPUT_POLLING = "output_polling"
    DONE = "done"
    FAILED = "failed"

    def is_terminal(self) -> bool:
        """DONE and FAILED end the lifecycle."""
        return self in (SessionState.DONE, SessionState.FAILED)


@dataclass(frozen=True)
class RequestDescriptor:
    """
    One protocol step, ready to be rendered as a SOAP envelope.

    Built fresh for every request and consumed once by the transport invoker.
    ``body`` is an XML template: ``@key`` entries become attributes, ``_``
    sets the element text and any other key becomes a child element.
    """

    correlation_id: str
    action: str
    shell_id: str | None = None
    options: dict[str, str | int] | None = None
    body: dict[str, Any] | None = None
    response_parser: Callable[[dict[str, Any]], Any] | None = field(
        default=None, compare=False, repr=False
    )


@dataclass(frozen=True)
class CommandHandle:
    """A command accepted by a remote shell."""

    command_id: str
    shell_id: str


@dataclass
class CommandOutput:
    """
    Accumulator filled by successive Receive responses.

    Streams stay None until a chunk arrives. Once the server flags a stream
    as ended its value is frozen; chunks arriving afterwards are dropped.
    The execution is complete once ``exit_code`` is set.
    """

    command_id: str
    shell_id: str
    stdout: str | None = None
    stderr: str | None = None
    exit_code: int | None = None
    ended_streams: set[str] = field(default_factory=set, repr=False)

    @property
    def finished(self) -> bool:
        """True once the remote process reported an exit code."""
        return self.exit_code is not None

    def append(self, stream: str, text: str) -> None:
        """Append decoded text to ``stream`` unless it already ended."""
        if stream not in OUTPUT_STREAMS or stream in self.ended_streams:
            return
        setattr(self, stream, (getattr(self, stream) or "") + text)

    def end(self, stream: str) -> None:
        """Freeze ``stream`` at its current value (None if nothing arrived)."""
        if stream in OUTPUT_STREAMS and stream not in self.ended_streams:
            setattr(self, stream, getattr(self, stream) or None)
        self.ended_streams.add(stream)

    def to_dict(self) -> dict[str, Any]:
        """Result shape exposed to sandbox callers."""
        return {
            "commandId": self.command_id,
            "shellId": self.shell_id,
            "stdout": self.stdout,
            "stderr": self.stderr,
            "exitCode": self.exit_code,
        }
