"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import httpx
import typer
from rich.console import Console
from rich.table import Table

from adapters.git_history import GitRangeResolver
from adapters.http_client import build_async_client, describe_transport_error
from cli.ui_components import load_settings
from core.config import AppSettings, write_user_env_vars
from core.errors import ConfigurationError, RangeResolutionError

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()
_err_console = Console(stderr=True)

SERVER_INFO_PATH = "/rest/api/2/serverInfo"


async def _check_http(url: str, settings: AppSettings) -> tuple[bool, str]:
    try:
        async with build_async_client(settings) as client:
            response = await client.get(url)
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        return False, describe_transport_error(exc)
    return response.status_code < 500, f"HTTP {response.status_code}"


def _check_repository(path: Path) -> tuple[bool, str]:
    try:
        GitRangeResolver(path).ensure_repository()
    except RangeResolutionError as exc:
        return False, str(exc)
    return True, str(path.resolve())


@app.command()
def run(
    repo: Optional[Path] = typer.Option(None, "--repo", help="Repository to check (default: settings/cwd)."),
) -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = load_settings(_err_console)
    repo_path = repo or settings.repo_path

    table = Table(title="TICKET-GATE Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    ok_repo, detail_repo = _check_repository(repo_path)
    table.add_row("Git repository", "OK" if ok_repo else "FAIL", detail_repo)

    # Config
    try:
        tracker = settings.tracker_config()
    except ConfigurationError as exc:
        tracker = None
        table.add_row("Tracker settings", "FAIL", str(exc))
    else:
        table.add_row("Tracker settings", "OK", f"{tracker.base_url} as {tracker.credentials.username}")

    table.add_row("HTTP timeout", "OK", f"{settings.http_timeout_seconds:g}s")
    table.add_row("Concurrency", "OK", str(settings.max_concurrency))

    # Connectivity (best-effort, unauthenticated)
    ok_http = False
    if tracker is not None:
        ok_http, detail_http = asyncio.run(_check_http(f"{tracker.api_root}{SERVER_INFO_PATH}", settings))
        table.add_row("Tracker connectivity", "OK" if ok_http else "FAIL", detail_http)

    _console.print(table)

    if tracker is None:
        _console.print("\n[yellow]Note:[/yellow] Run `ticket-gate doctor setup` to store tracker settings.")

    if not (ok_repo and ok_http):
        raise typer.Exit(code=1)


@app.command()
def setup() -> None:
    """Interactive tracker setup (stores config in the user config .env).

    Designed for CI images and shared runners: no manual .env editing.
    """

    settings = load_settings(_err_console)

    jira_url = typer.prompt("Jira base URL", default=settings.jira_url or "", show_default=True).strip()
    username = typer.prompt("Jira username", default=settings.jira_username or "", show_default=True).strip()
    api_token = typer.prompt("Jira API token", hide_input=True, confirmation_prompt=False).strip()

    if not jira_url or not username or not api_token:
        raise typer.BadParameter("Jira URL, username and API token are required")

    env_path = write_user_env_vars(
        {
            "TICKET_GATE_JIRA_URL": jira_url,
            "TICKET_GATE_JIRA_USERNAME": username,
            "TICKET_GATE_JIRA_API_TOKEN": api_token,
        }
    )

    _console.print(f"[green]Saved tracker config to:[/green] {env_path}")
