"""Componentes de UI para CLI (Rich).

Por qué componentes separados:
- Mantiene la lógica de comandos separada de los detalles visuales.
- Las líneas quedan en texto plano (sin wrapping ni markup de los subjects)
  para que los logs de CI se puedan filtrar con grep.
"""

from __future__ import annotations

from typing import Any

import typer
from pydantic import ValidationError
from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from core.config import AppSettings
from core.domain.models import CommitRecord, ValidationRecord, ValidationReport


def load_settings(console: Console, **overrides: Any) -> AppSettings:
    """Settings desde env/.env; los flags de la CLI tienen prioridad.

    Un valor inválido termina con un diagnóstico de una línea en lugar de un traceback.
    """

    values = {k: v for k, v in overrides.items() if v is not None}
    try:
        return AppSettings(**values)
    except ValidationError as exc:
        console.print(f"Invalid configuration: {exc}", markup=False, highlight=False)
        raise typer.Exit(code=1) from exc


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida.

    Por qué aquí:
    - Evita dependencias circulares (main <-> doctor).
    - Se puede omitir en modos no interactivos (`--quiet`).
    """

    title = Text("TICKET-GATE", style="bold cyan")
    subtitle = Text("Every commit references a real ticket", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def print_run_header(
    console: Console,
    *,
    jira_url: str,
    username: str,
    start_ref: str,
    end_ref: str,
) -> None:
    # El API token nunca se imprime.
    console.print(f"Jira URL: {jira_url}", markup=False, highlight=False)
    console.print(f"Username: {username}", markup=False, highlight=False)
    console.print(f"Start Ref: {start_ref}", markup=False, highlight=False)
    console.print(f"End Ref: {end_ref}", markup=False, highlight=False)


def print_step(console: Console, text: str) -> None:
    console.print()
    console.print(Text(f">>> {text}", style="bold"))


def first_line(text: str) -> str:
    lines = text.splitlines()
    return lines[0] if lines else ""


def print_commit_started(console: Console, index: int, total: int, commit: CommitRecord) -> None:
    console.print(
        Text(f"  ({index}/{total}) Validating commit {commit.id} ('{first_line(commit.summary)}')... "),
        end="",
    )


def print_commit_result(console: Console, record: ValidationRecord) -> None:
    if record.is_valid:
        console.print(Text(f"VALID (Jira Key: {record.checked_key})", style="green"))
    else:
        console.print(Text(f"INVALID - Error: {record.reason}", style="red"))


def print_summary(console: Console, report: ValidationReport) -> None:
    summary = report.summary

    console.print()
    console.print("-------------------------------------", markup=False)
    console.print(Text(">>> Step 3: Final Validation Summary", style="bold"))
    console.print("-------------------------------------", markup=False)
    console.print(f"Total commits scanned: {summary.total}", highlight=False)
    console.print(f"Valid commits: {summary.valid}", highlight=False)
    console.print(f"Invalid commits: {summary.invalid}", highlight=False)

    invalid = report.invalid_records
    if not invalid:
        return

    console.print()
    console.print("Details of INVALID commits:")
    for record in invalid:
        keys = ", ".join(record.ticket_keys) if record.ticket_keys else "None"
        console.print(Text(f"  - Commit: {record.commit.id} ('{first_line(record.commit.summary)}')"))
        console.print(Text(f"    Error: {record.reason}"))
        console.print(Text(f"    Jira Keys Found: {keys}"))


def print_final_result(console: Console, *, success: bool, note: str | None = None) -> None:
    console.print()
    if success:
        suffix = f" ({note})" if note else ""
        console.print(Text(f">>> Final Result: Validation SUCCESSFUL{suffix}.", style="bold green"))
    else:
        console.print(Text(">>> Final Result: Validation FAILED.", style="bold red"))
