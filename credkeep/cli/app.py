"""Typer application for the credential registry.

Entry point: ``credkeep`` (configured via pyproject.toml scripts).

Commands: supported, list, detail, import, verify, token.  Engine errors are
printed and mapped to their ``exit_code``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from credkeep.config import CredkeepSettings
from credkeep.core.manager import CredentialManager
from credkeep.core.registry import CredentialRegistry
from credkeep.errors import CredentialError, VerificationFailure
from credkeep.models.credentials import CredentialStatus
from credkeep.plugins.loader import load_credential_plugins

app = typer.Typer(
    name="credkeep",
    help="credkeep: local registry of host credentials and their verification status.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

console = Console()
err_console = Console(stderr=True)

_STATUS_STYLES: dict[CredentialStatus, str] = {
    CredentialStatus.NOT_SET: "dim",
    CredentialStatus.SET_BUT_UNTESTED: "yellow",
    CredentialStatus.SET_AND_VERIFIED: "green",
    CredentialStatus.SET_BUT_INVALID: "red",
    CredentialStatus.SET_BUT_EXPIRED: "red",
}


def build_manager(settings: CredkeepSettings | None = None) -> CredentialManager:
    """Create a manager with every installed credential plugin registered."""
    settings = settings or CredkeepSettings()
    registry = CredentialRegistry()
    load_credential_plugins(registry, group=settings.plugin_group)
    return CredentialManager(registry, db_path=settings.db_path)


@contextmanager
def _handle_errors() -> Iterator[None]:
    try:
        yield
    except CredentialError as exc:
        err_console.print(f"[red]{type(exc).__name__}:[/red] {exc}")
        raise typer.Exit(code=exc.exit_code) from exc


def _styled(status: CredentialStatus) -> str:
    style = _STATUS_STYLES.get(status, "")
    return f"[{style}]{status.value}[/{style}]" if style else status.value


@app.callback()
def main_callback() -> None:
    """Configure logging from settings."""
    logging.basicConfig(level=CredkeepSettings().log_level.upper())


@app.command(name="supported", help="List credential types provided by plugins.")
def supported_cmd() -> None:
    with _handle_errors():
        manager = build_manager()
    specs = manager.list_supported()
    if not specs:
        console.print("[dim]No credential plugins installed.[/dim]")
        return

    table = Table(title="Supported Credentials")
    table.add_column("Key", style="cyan")
    table.add_column("Name")
    table.add_column("Type")
    table.add_column("Token", justify="center")
    for spec in specs:
        token = "[green]Yes[/green]" if spec.get_token else "[dim]No[/dim]"
        table.add_row(spec.key, spec.name, spec.type, token)
    console.print(table)


@app.command(name="list", help="List stored credentials and their status.")
def list_cmd() -> None:
    with _handle_errors():
        manager = build_manager()
        details = manager.list()
    if not details:
        console.print("[dim]No credentials stored.[/dim]")
        return

    table = Table(title="Stored Credentials")
    table.add_column("Key", style="cyan")
    table.add_column("Name")
    table.add_column("Status")
    table.add_column("Files")
    for detail in details:
        table.add_row(detail.key, detail.name, _styled(detail.status), "\n".join(detail.files))
    console.print(table)


@app.command(name="detail", help="Show one stored credential.")
def detail_cmd(key: str = typer.Argument(..., help="Credential key.")) -> None:
    with _handle_errors():
        manager = build_manager()
        detail = manager.detail(key)
    console.print(f"[bold cyan]{detail.key}[/bold cyan] — {detail.name}")
    if detail.description:
        console.print(detail.description)
    console.print(f"Type:   {detail.type}")
    console.print(f"Status: {_styled(detail.status)}")
    for path in detail.files:
        console.print(f"  {path}")


@app.command(name="import", help="Import a credential file.")
def import_cmd(
    key: str = typer.Argument(..., help="Credential key."),
    src_path: Path = typer.Argument(..., help="Credential file (SSH public key is SRC_PATH.pub)."),
    dest_path: Optional[Path] = typer.Option(None, help="Copy the files into this directory."),
    replace: bool = typer.Option(False, help="Replace an existing credential."),
    no_verify: bool = typer.Option(False, help="Skip verification."),
) -> None:
    with _handle_errors():
        manager = build_manager()
        detail = asyncio.run(
            manager.import_credential(
                key, src_path, dest_path, replace=replace, no_verify=no_verify
            )
        )
    console.print(f"Imported [cyan]{detail.key}[/cyan]: {_styled(detail.status)}")


@app.command(name="verify", help="Verify stored credentials.")
def verify_cmd(
    keys: Optional[List[str]] = typer.Argument(None, help="Keys to verify (default: all)."),
    re_verify: bool = typer.Option(False, help="Re-verify credentials already verified."),
) -> None:
    with _handle_errors():
        manager = build_manager()
        failed = asyncio.run(manager.verify_creds(keys or None, re_verify=re_verify))
    if failed:
        err_console.print(f"[red]Verification failed:[/red] {', '.join(failed)}")
        raise typer.Exit(code=VerificationFailure.exit_code)
    console.print("[green]All attempted credentials verified.[/green]")


@app.command(name="token", help="Print the token for an auth token credential.")
def token_cmd(key: str = typer.Argument(..., help="Credential key.")) -> None:
    with _handle_errors():
        manager = build_manager()
        token = asyncio.run(manager.get_token(key))
    typer.echo(token)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
