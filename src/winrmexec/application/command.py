"""
Sandbox-facing WinRM command.

Wraps a Remote behind the callback contract used by device drivers:
the callback receives either ``outcome`` (the command result, optionally
run through a parser) or ``error``, never both.
"""

from __future__ import annotations

import json
import logging
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr

from winrmexec.application.remote import Remote, create_remote
from winrmexec.domain.models import CommandOutput

logger = logging.getLogger(__name__)


class WinRMCommandPayload(BaseModel):
    """Parameters of a single sandbox WinRM execution."""

    model_config = ConfigDict(extra="ignore")

    command: str = Field(..., description="Command to execute against the device")
    host: str = Field(..., description="Device IP address or host name")
    username: str = Field(..., description="Device username")
    password: SecretStr = Field(..., description="Device password")
    port: int = Field(5985, description="WinRM port")
    hw_address: Optional[str] = Field(None, description="Device MAC address, informational")

    def without_password(self) -> dict[str, Any]:
        """Payload as a dict, password removed."""
        return self.model_dump(exclude={"password"})


@dataclass(frozen=True)
class CommandOutcome:
    """What the sandbox callback receives."""

    outcome: Any = None
    error: Optional[BaseException] = None


OutcomeCallback = Callable[[CommandOutcome], None]
RemoteFactory = Callable[[str, int, str, str], Remote]


class WinRMCommand:
    """One WinRM command bound to a device."""

    def __init__(
        self,
        payload: WinRMCommandPayload,
        remote_factory: RemoteFactory | None = None,
        parser: Callable[[dict[str, Any]], Any] | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        self.payload = payload
        self.log = log or logger
        self._remote_factory = remote_factory or create_remote
        self._parser = parser or (lambda output: output)

    def execute(self, callback: OutcomeCallback) -> Future:
        """
        Run the command and report through ``callback``.

        The returned future resolves once the callback has been invoked; it
        never fails because errors are delivered to the callback instead.
        """
        payload = self.payload
        self.log.info(
            "Executing command `%s` on %s:%s with username %s",
            payload.command,
            payload.host,
            payload.port,
            payload.username,
        )
        remote = self._remote_factory(
            payload.host,
            payload.port,
            payload.username,
            payload.password.get_secret_value(),  # pylint: disable=no-member
        )
        reported: Future = Future()

        def report(future: Future) -> None:
            try:
                error = future.exception()
                if error is None:
                    output: CommandOutput = future.result()
                    result = CommandOutcome(outcome=self._parser(output.to_dict()))
                else:
                    result = CommandOutcome(error=error)
            except Exception as e:  # pylint: disable=broad-except
                # parser failures are reported like remote failures
                result = CommandOutcome(error=e)
            try:
                callback(result)
            finally:
                reported.set_result(result)
                remote.shutdown(wait=False)

        remote.execute_command(payload.command).add_done_callback(report)
        return reported

    def describe(self) -> str:
        """Loggable description, password excluded."""
        return "winrmExecute" + json.dumps(self.payload.without_password())


def send_winrm_command(
    options: dict[str, Any],
    callback: OutcomeCallback,
    log: logging.Logger | None = None,
) -> Future:
    """Module-level entry point: validate ``options`` and execute."""
    command = WinRMCommand(WinRMCommandPayload(**options), log=log)
    return command.execute(callback)
