"""
winrmexec - WinRM remote command execution.

Speaks WS-Management over Basic-auth HTTP: opens a remote shell, runs a
command, polls its output until it exits and deletes the shell.

Usage:
    # CLI
    winrmexec run "Get-Service WinRM" --host 10.0.0.5 -u administrator

    # Programmatic
    from winrmexec import create_remote

    with create_remote("10.0.0.5", 5985, "administrator", "secret") as remote:
        output = remote.execute_command("hostname").result()
        print(output.stdout)
"""

__version__ = "0.1.0"

from winrmexec.application.command import send_winrm_command
from winrmexec.application.remote import Remote, create_remote
from winrmexec.domain.models import CommandOutput

__all__ = ["CommandOutput", "Remote", "create_remote", "send_winrm_command", "__version__"]
