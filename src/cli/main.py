"""Aplicación Typer de TICKET-GATE.

Códigos de salida:
- 0: todos los commits del rango referencian un ticket existente (o el rango está vacío).
- 1: algún commit es inválido, el rango no se pudo resolver o faltan settings
  del tracker.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from adapters.json_exporter import export_report_json
from cli import doctor
from cli.ui_components import (
    load_settings,
    print_banner,
    print_commit_result,
    print_commit_started,
    print_final_result,
    print_run_header,
    print_step,
    print_summary,
)
from core.domain.models import CommitRecord, ValidationRecord
from core.errors import ConfigurationError, RangeResolutionError
from core.services.validation_pipeline import PipelineHooks, ValidationRequest, run_validation

app = typer.Typer(
    no_args_is_help=True,
    help="Check that every commit in a revision range references an existing Jira ticket.",
)
app.add_typer(doctor.app, name="doctor")

_console = Console(soft_wrap=True)
_err_console = Console(stderr=True, soft_wrap=True)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=_err_console, show_path=False, rich_tracebacks=True)],
        force=True,
    )
    # httpx loguea cada request en INFO; se silencia salvo con --verbose.
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


@app.command()
def check(
    start_ref: str = typer.Option(..., "--start-ref", help="Exclusive lower boundary (e.g. origin/main)."),
    end_ref: str = typer.Option(..., "--end-ref", help="Tip of the range to validate (e.g. HEAD)."),
    jira_url: Optional[str] = typer.Option(None, "--jira-url", help="Jira base URL."),
    username: Optional[str] = typer.Option(None, "--username", help="Jira username."),
    api_token: Optional[str] = typer.Option(None, "--api-token", help="Jira API token."),
    repo: Optional[Path] = typer.Option(None, "--repo", help="Path inside the repository (default: cwd)."),
    concurrency: Optional[int] = typer.Option(
        None,
        "--concurrency",
        min=1,
        max=32,
        help="Tracker lookups in flight (default 1: strictly sequential).",
    ),
    json_output: Optional[Path] = typer.Option(None, "--json-output", help="Also write the report as JSON."),
    quiet: bool = typer.Option(False, "--quiet", help="Skip the banner."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging on stderr."),
) -> None:
    """Validate every commit in START_REF..END_REF against Jira."""

    _configure_logging(verbose)
    settings = load_settings(
        _err_console,
        jira_url=jira_url,
        jira_username=username,
        jira_api_token=api_token,
        repo_path=repo,
        max_concurrency=concurrency,
    )

    try:
        tracker = settings.tracker_config()
    except ConfigurationError as exc:
        _err_console.print(f"Error: {exc}", markup=False)
        raise typer.Exit(code=1) from exc

    if not quiet:
        print_banner(_console)
    print_run_header(
        _console,
        jira_url=tracker.base_url,
        username=tracker.credentials.username,
        start_ref=start_ref,
        end_ref=end_ref,
    )
    print_step(_console, "Step 1: Fetching commit information from Git repository...")

    def on_range_resolved(commits: list[CommitRecord]) -> None:
        if not commits:
            return
        _console.print(f"Found {len(commits)} commits to validate.", highlight=False)
        print_step(_console, "Step 2: Validating individual commits...")

    def on_commit_started(index: int, total: int, commit: CommitRecord) -> None:
        print_commit_started(_console, index, total, commit)

    def on_commit_validated(index: int, total: int, record: ValidationRecord) -> None:
        print_commit_result(_console, record)

    hooks = PipelineHooks(
        range_resolved=on_range_resolved,
        commit_started=on_commit_started,
        commit_validated=on_commit_validated,
    )
    request = ValidationRequest(start_ref=start_ref, end_ref=end_ref)

    try:
        report = asyncio.run(run_validation(settings=settings, request=request, tracker=tracker, hooks=hooks))
    except RangeResolutionError as exc:
        _err_console.print(f"Error fetching commit information from Git: {exc}", markup=False)
        raise typer.Exit(code=1) from exc

    if json_output:
        path = export_report_json(report=report, output_path=json_output)
        _console.print(f"JSON report written to: {path}", markup=False, highlight=False)

    if not report.records:
        _console.print(
            f"No commits found in the specified range ({start_ref}..{end_ref}).",
            markup=False,
            highlight=False,
        )
        print_final_result(_console, success=True, note="No commits to validate")
        raise typer.Exit(code=0)

    print_summary(_console, report)
    print_final_result(_console, success=report.summary.success)
    raise typer.Exit(code=0 if report.summary.success else 1)


def run() -> None:
    app()


if __name__ == "__main__":
    run()
