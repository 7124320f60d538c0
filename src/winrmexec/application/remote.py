"""
Remote command execution over WinRM.

A Remote is a host in the LAN that exposes WinRM and accepts Basic
authentication over HTTP. ``execute_command`` opens a shell, launches the
command, polls its output until an exit code shows up and closes the shell:

    IDLE -> SHELL_OPENING -> COMMAND_STARTING -> OUTPUT_POLLING -> DONE
                 \\                  \\                  \\
                  +------------------+------------------+--> FAILED

Shell deletion is fire-and-forget: it is submitted once the outcome is known
and never delays or alters that outcome.
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from winrmexec.domain.config import ExecutionSettings, TransportOptions
from winrmexec.domain.errors import PollLimitExceededError, RemoteCommandError
from winrmexec.domain.models import (
    CommandHandle,
    CommandOutput,
    RequestDescriptor,
    SessionState,
)
from winrmexec.infrastructure.http_transport import HttpPoster, HttpTransport
from winrmexec.infrastructure.wsman.invoker import TransportInvoker
from winrmexec.infrastructure.wsman.request_builder import RequestBuilder

logger = logging.getLogger(__name__)

TransitionListener = Callable[["CommandSession", SessionState], None]


def wrap_powershell(command: str) -> str:
    """Run ``command`` through powershell.exe, escaping embedded quotes."""
    escaped = command.replace('"', '\\"')
    return f'powershell.exe "{escaped}"'


@dataclass
class CommandSession:
    """
    State carried through one execute_command call.

    Owned by a single worker thread; never shared between calls.
    """

    command: str
    state: SessionState = SessionState.IDLE
    shell_id: Optional[str] = None
    output: Optional[CommandOutput] = None
    polls: int = 0
    error: Optional[BaseException] = None
    history: list[SessionState] = field(default_factory=lambda: [SessionState.IDLE])


class Remote:
    """
    WinRM client for one host.

    Commands run concurrently on a session pool; each session waits on HTTP
    exchanges running on the invoker's own pool, which never waits back.
    """

    def __init__(
        self,
        options: TransportOptions,
        settings: ExecutionSettings | None = None,
        transport: HttpPoster | None = None,
        log: logging.Logger | None = None,
        on_transition: TransitionListener | None = None,
    ) -> None:
        self.options = options
        self.settings = settings or ExecutionSettings()
        self.log = log or logger
        self._on_transition = on_transition
        self._transport = transport or HttpTransport(options, log=self.log)
        self._requests = RequestBuilder(log=self.log)
        self._invoker = TransportInvoker(
            self._transport, log=self.log, max_workers=self.settings.max_workers
        )
        self._sessions = ThreadPoolExecutor(
            max_workers=self.settings.max_workers, thread_name_prefix="winrm-session"
        )
        self._lock = threading.Lock()
        self._pending_closes: set[Future] = set()
        self._closing = False
        self._transport_closed = False

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def execute_command(
        self,
        command: str,
        fail_on_errors: bool | None = None,
        powershell: bool | None = None,
    ) -> Future:
        """
        Execute ``command`` on the remote host.

        Args:
            command: command line to run
            fail_on_errors: fail when the exit code is not 0 (settings default: True)
            powershell: run through powershell.exe instead of cmd (settings default: True)

        Returns:
            Future resolving to the CommandOutput, or failing with a WinRMError.
        """
        if fail_on_errors is None:
            fail_on_errors = self.settings.fail_on_errors
        if powershell is None:
            powershell = self.settings.powershell
        if powershell:
            command = wrap_powershell(command)

        self.log.info("EXECUTING %s on %s:%s", command, self.options.host, self.options.port)
        return self._sessions.submit(self._run, CommandSession(command=command), fail_on_errors)

    def shutdown(self, wait: bool = True) -> None:
        """
        Finish in-flight commands and pending shell deletions, then release resources.

        With ``wait=False`` this returns at once; the transport is closed by
        whichever queued shell deletion finishes last.
        """
        self._sessions.shutdown(wait=wait)
        self._invoker.shutdown(wait=wait)
        with self._lock:
            self._closing = True
            release = not self._pending_closes
        if release:
            self._close_transport()

    def __enter__(self) -> Remote:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.shutdown(wait=True)

    # -------------------------------------------------------------------------
    # State machine
    # -------------------------------------------------------------------------

    def _transition(self, session: CommandSession, state: SessionState) -> None:
        self.log.debug(
            "shellId %s: %s -> %s", session.shell_id, session.state.value, state.value
        )
        session.state = state
        session.history.append(state)
        if self._on_transition is not None:
            self._on_transition(session, state)

    def _send(self, request: RequestDescriptor) -> Any:
        return self._invoker.invoke(request).result()

    def _run(self, session: CommandSession, fail_on_errors: bool) -> CommandOutput:
        try:
            return self._drive(session, fail_on_errors)
        except Exception as e:
            session.error = e
            if not session.state.is_terminal():
                self._transition(session, SessionState.FAILED)
            raise
        finally:
            if session.shell_id is not None:
                self._close_shell(session.shell_id)

    def _drive(self, session: CommandSession, fail_on_errors: bool) -> CommandOutput:
        self._transition(session, SessionState.SHELL_OPENING)
        shell_id: str = self._send(self._requests.start_session())
        session.shell_id = shell_id
        self.log.debug("Session SUCCESS - shellId: %s", shell_id)

        self._transition(session, SessionState.COMMAND_STARTING)
        handle: CommandHandle = self._send(
            self._requests.execute_command(session.command, shell_id)
        )
        self.log.debug(
            "Command SUCCESS - shellId: %s, commandId %s", handle.shell_id, handle.command_id
        )

        output = CommandOutput(command_id=handle.command_id, shell_id=handle.shell_id)
        session.output = output
        self._transition(session, SessionState.OUTPUT_POLLING)
        self._poll_until_exit(session, output)

        self._transition(session, SessionState.DONE)
        if fail_on_errors and output.exit_code != 0:
            self.log.error(
                "Command %s exited with error code: %s", output.command_id, output.exit_code
            )
            raise RemoteCommandError(
                session.command, output.exit_code, output.stdout, output.stderr
            )

        output.stdout = output.stdout or ""
        self.log.debug(
            "Get Output SUCCESS - shellId: %s, commandId %s, output size: %s",
            output.shell_id,
            output.command_id,
            len(output.stdout),
        )
        return output

    def _poll_until_exit(self, session: CommandSession, output: CommandOutput) -> None:
        max_polls = self.settings.max_polls
        interval = self.settings.poll_interval_seconds
        while not output.finished:
            if max_polls is not None and session.polls >= max_polls:
                raise PollLimitExceededError(output.command_id, session.polls)
            if session.polls and interval:
                time.sleep(interval)
            self._send(self._requests.get_command_output(output))
            session.polls += 1

    def _close_shell(self, shell_id: str) -> None:
        """Submit shell deletion without waiting; failures are only logged."""

        def done(future: Future) -> None:
            error = future.exception()
            if error is not None:
                self.log.error("Cannot close shell shellId: %s - %s", shell_id, error)
            else:
                self.log.debug("Close Shell SUCCESS, shellId: %s", shell_id)
            with self._lock:
                self._pending_closes.discard(future)
                release = self._closing and not self._pending_closes
            if release:
                self._close_transport()

        try:
            future = self._invoker.invoke(self._requests.close_session(shell_id))
        except RuntimeError as e:
            # invoker pool already shut down
            self.log.error("Cannot close shell shellId: %s - %s", shell_id, e)
            return
        with self._lock:
            self._pending_closes.add(future)
        future.add_done_callback(done)

    def _close_transport(self) -> None:
        with self._lock:
            if self._transport_closed:
                return
            self._transport_closed = True
        close = getattr(self._transport, "close", None)
        if callable(close):
            close()
        self.log.debug("Transport to %s:%s closed", self.options.host, self.options.port)


def create_remote(
    host: str,
    port: int,
    username: str,
    password: str,
    settings: ExecutionSettings | None = None,
    log: logging.Logger | None = None,
    **transport_options: Any,
) -> Remote:
    """Build a Remote from plain connection parameters."""
    options = TransportOptions(
        host=host,
        port=port,
        username=username,
        password=password,
        **transport_options,
    )
    return Remote(options, settings=settings, log=log)
