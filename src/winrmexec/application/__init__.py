"""
Application layer package.

Session orchestration and the sandbox command facade.
"""

from winrmexec.application.command import (
    CommandOutcome,
    WinRMCommand,
    WinRMCommandPayload,
    send_winrm_command,
)
from winrmexec.application.remote import (
    CommandSession,
    Remote,
    create_remote,
    wrap_powershell,
)

__all__ = [
    "CommandOutcome",
    "CommandSession",
    "Remote",
    "WinRMCommand",
    "WinRMCommandPayload",
    "create_remote",
    "send_winrm_command",
    "wrap_powershell",
]
