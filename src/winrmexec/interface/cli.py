"""
CLI main entry point.

    winrmexec run "Get-Service WinRM" --host 10.0.0.5 -u administrator
    winrmexec run "ipconfig /all" --cmd --config ./winrm_config.json --json

Settings come from an optional config file; CLI flags override it and the
password may be supplied through WINRM_PASSWORD.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import typer
from rich.console import Console
from rich.markup import escape

from winrmexec.application.remote import Remote
from winrmexec.domain.config import ClientSettings
from winrmexec.domain.errors import RemoteCommandError, WinRMError
from winrmexec.infrastructure.config import CONFIG_NAME, ConfigRepository
from winrmexec.infrastructure.logging_config import setup_logging

logger = logging.getLogger(__name__)

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    name="winrmexec",
    help="Run commands on Windows hosts over WinRM (WS-Management)",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True
)


@app.callback()
def main_callback():
    """
    WinRM remote command execution over Basic-auth HTTP.
    """


def resolve_settings(
    config: Optional[Path],
    transport_overrides: Dict[str, Any],
    execution_overrides: Dict[str, Any],
) -> ClientSettings:
    """
    Merge config file values with CLI overrides.

    Config file settings come first, non-None CLI values win. An explicit
    ``config`` is read from exactly that path, whatever its extension;
    otherwise ``winrm_config.json`` (or ``.jsonc``) in the working directory
    is used when present.
    """
    overrides = {"transport": transport_overrides, "execution": execution_overrides}
    if config is None:
        try:
            return ConfigRepository(Path.cwd()).load_settings(CONFIG_NAME, overrides)
        except FileNotFoundError:
            return ConfigRepository.build_settings({}, overrides)
    return ConfigRepository(config.parent).load_settings_path(Path(config.name), overrides)


def _print_streams(stdout: Optional[str], stderr: Optional[str]) -> None:
    if stdout:
        console.print(stdout, markup=False, highlight=False, soft_wrap=True, end="")
    if stderr:
        err_console.print(stderr, markup=False, highlight=False, soft_wrap=True, style="red", end="")


@app.command("run")
def run_command(
    command: str = typer.Argument(..., help="Command line to execute on the remote host"),
    host: Optional[str] = typer.Option(None, "--host", "-H", help="Remote host name or IP"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="WinRM port (default 5985)"),
    username: Optional[str] = typer.Option(None, "--username", "-u", help="Account name"),
    password: Optional[str] = typer.Option(
        None, "--password", envvar="WINRM_PASSWORD", help="Account password"
    ),
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", exists=True, dir_okay=False, help="JSON/JSONC settings file (default: ./winrm_config.json if present)"
    ),
    cmd: bool = typer.Option(False, "--cmd", help="Run the command as-is instead of through powershell.exe"),
    ignore_exit_code: bool = typer.Option(
        False, "--ignore-exit-code", help="Do not treat a non-zero exit code as a failure"
    ),
    https: Optional[bool] = typer.Option(None, "--https/--http", help="Endpoint scheme"),
    insecure: bool = typer.Option(False, "--insecure", help="Skip certificate validation"),
    poll_interval: Optional[float] = typer.Option(
        None, "--poll-interval", help="Seconds between output polls"
    ),
    max_polls: Optional[int] = typer.Option(None, "--max-polls", help="Give up after this many polls"),
    as_json: bool = typer.Option(False, "--json", help="Print the full result as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Also log to this file"),
):
    """
    Execute COMMAND on a Windows host and print its output.

    Exits with 0 on success, the remote exit code when the command fails,
    1 on transport or protocol errors and 2 on invalid settings.
    """
    setup_logging(logging.DEBUG if verbose else logging.WARNING, str(log_file) if log_file else None)

    try:
        settings = resolve_settings(
            config,
            {
                "host": host,
                "port": port,
                "username": username,
                "password": password,
                "use_https": https,
                "verify_ssl": False if insecure else None,
            },
            {
                "fail_on_errors": False if ignore_exit_code else None,
                "powershell": False if cmd else None,
                "poll_interval_seconds": poll_interval,
                "max_polls": max_polls,
            },
        )
    except (ValueError, FileNotFoundError) as e:
        err_console.print(f"[red]Invalid settings:[/red] {escape(str(e))}")
        raise typer.Exit(2)

    with Remote(settings.transport, settings.execution) as remote:
        try:
            output = remote.execute_command(command).result()
        except RemoteCommandError as e:
            _print_streams(e.stdout, e.stderr)
            err_console.print(f"[red]Command failed with exit code {e.exit_code}[/red]")
            raise typer.Exit(e.exit_code if 0 < e.exit_code < 256 else 1)
        except WinRMError as e:
            logger.debug("Execution failed", exc_info=True)
            err_console.print(f"[red]Error:[/red] {escape(str(e))}", highlight=False)
            raise typer.Exit(1)

    if as_json:
        typer.echo(json.dumps(output.to_dict()))
    else:
        _print_streams(output.stdout, output.stderr)


def main() -> int:
    """
    Main entry point for the winrmexec CLI.

    Returns:
        int: Exit code
    """
    app()
    return 0
