"""
WinRM shell request builders.

Each builder returns a fresh RequestDescriptor carrying the action URI,
header options, body template and the parser applied to the response.

    start_session()                  -> parser yields the ShellId
    execute_command(command, shell)  -> parser yields a CommandHandle
    get_command_output(output)       -> parser merges into ``output``
    close_session(shell)             -> no parser
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from winrmexec.domain.models import CommandHandle, CommandOutput, RequestDescriptor
from winrmexec.infrastructure.wsman.constants import (
    ACTION_COMMAND,
    ACTION_CREATE,
    ACTION_DELETE,
    ACTION_RECEIVE,
)
from winrmexec.infrastructure.wsman.identifiers import uuid4
from winrmexec.infrastructure.wsman.responses import (
    decode_command_started,
    decode_receive,
    decode_shell_created,
)

logger = logging.getLogger(__name__)

Parser = Callable[[dict[str, Any]], Any]


class RequestBuilder:
    """
    Factory for the four shell protocol requests.

    Builders share no state; the only mutable object involved is the
    accumulator handed to get_command_output().
    """

    def __init__(
        self,
        log: logging.Logger | None = None,
        id_factory: Callable[[], str] = uuid4,
    ) -> None:
        self.log = log or logger
        self._id_factory = id_factory

    def _create(
        self,
        action: str,
        shell_id: str | None = None,
        options: dict[str, str | int] | None = None,
        body: dict[str, Any] | None = None,
        parser: Parser | None = None,
    ) -> RequestDescriptor:
        return RequestDescriptor(
            correlation_id=self._id_factory(),
            action=action,
            shell_id=shell_id,
            options=options,
            body=body,
            response_parser=parser,
        )

    # -------------------------------------------------------------------------
    # Parsers
    # -------------------------------------------------------------------------

    def _parse_start_session(self, response: dict[str, Any]) -> str:
        shell = decode_shell_created(response)
        self.log.info(
            "Shell created for user %s on host %s; shellId: %s",
            shell.owner,
            shell.client_ip,
            shell.shell_id,
        )
        return shell.shell_id

    def _parse_execute_command(self, shell_id: str) -> Parser:
        def parse(response: dict[str, Any]) -> CommandHandle:
            started = decode_command_started(response)
            self.log.info("command %s executed on shellId %s", started.command_id, shell_id)
            return CommandHandle(command_id=started.command_id, shell_id=shell_id)

        return parse

    def _parse_get_command_output(self, output: CommandOutput) -> Parser:
        def parse(response: dict[str, Any]) -> CommandOutput:
            received = decode_receive(response)
            self.log.debug(
                "commandId %s state %s, exit code %s",
                output.command_id,
                received.state,
                received.exit_code,
            )
            for chunk in received.streams:
                if chunk.ended:
                    output.end(chunk.name)
                else:
                    output.append(chunk.name, chunk.text())
            if received.exit_code is not None:
                output.exit_code = received.exit_code
            return output

        return parse

    # -------------------------------------------------------------------------
    # Builders
    # -------------------------------------------------------------------------

    def start_session(self) -> RequestDescriptor:
        """Open a cmd shell with stdin in and stdout/stderr out."""
        return self._create(
            ACTION_CREATE,
            options={
                "WINRS_NOPROFILE": "FALSE",
                "WINRS_CODEPAGE": 437,
            },
            body={
                "rsp:Shell": {
                    "rsp:InputStreams": "stdin",
                    "rsp:OutputStreams": "stderr stdout",
                },
            },
            parser=self._parse_start_session,
        )

    def execute_command(self, command: str, shell_id: str) -> RequestDescriptor:
        """Start ``command`` inside the shell."""
        return self._create(
            ACTION_COMMAND,
            shell_id=shell_id,
            options={
                "WINRS_CONSOLEMODE_STDIN": "TRUE",
                "WINRS_SKIP_CMD_SHELL": "TRUE",
            },
            body={
                "rsp:CommandLine": {
                    "rsp:Command": command,
                },
            },
            parser=self._parse_execute_command(shell_id),
        )

    def get_command_output(self, output: CommandOutput) -> RequestDescriptor:
        """Fetch pending output; the parser mutates and returns ``output``."""
        return self._create(
            ACTION_RECEIVE,
            shell_id=output.shell_id,
            body={
                "rsp:Receive": {
                    "rsp:DesiredStream": {
                        "_": "stdout stderr",
                        "@CommandId": output.command_id,
                    },
                },
            },
            parser=self._parse_get_command_output(output),
        )

    def close_session(self, shell_id: str) -> RequestDescriptor:
        """Delete the shell."""
        return self._create(ACTION_DELETE, shell_id=shell_id)
