"""Scan command: analyze a directory or a single file."""

from pathlib import Path
from typing import List, Optional

import click
import typer
from rich.markup import escape
from rich.table import Table

from ..config import REPORT_FORMATS, SORT_KEYS
from ..exceptions import ErrorScopeError
from ..formatters import ReportGenerator, sort_records
from ..models import ErrorRecord, ScanResult
from ..logging_config import get_logger
from . import app
from ._common import build_scope, console, severity_label

logger = get_logger(__name__)


def run_scan(scope, path: Path) -> ScanResult:
    if path.is_dir():
        return scope.engine.scan_project(path)
    return scope.engine.scan_file(path)


def _print_table(result: ScanResult, records: List[ErrorRecord]) -> None:
    metrics = result.metrics
    console.print(
        f"[bold cyan]{escape(result.target)}[/bold cyan]: "
        f"[red]{metrics.errors} errors[/red], "
        f"[yellow]{metrics.warnings} warnings[/yellow] "
        f"in {metrics.files_affected} files ({result.duration_seconds:.2f}s)"
    )
    if not records:
        console.print("[green]No issues found[/green]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Severity")
    table.add_column("Location")
    table.add_column("Category")
    table.add_column("Message")
    table.add_column("Analyzer", style="dim")
    for r in records:
        table.add_row(
            severity_label(r.severity),
            escape(str(r.location)),
            r.category.value,
            escape(r.message),
            r.detected_by,
        )
    console.print(table)


@app.command()
def scan(
    ctx: typer.Context,
    path: Path = typer.Argument(
        Path("."),
        help="Project directory or single file to analyze",
        exists=True,
        readable=True,
    ),
    fmt: Optional[str] = typer.Option(
        None,
        "--format",
        "-f",
        help="Report format instead of the terminal table",
        click_type=click.Choice(list(REPORT_FORMATS)),
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write the report to a file"
    ),
    sort_by: Optional[str] = typer.Option(
        None,
        "--sort-by",
        help="Record ordering",
        click_type=click.Choice(list(SORT_KEYS)),
    ),
    workers: Optional[int] = typer.Option(
        None, "-w", "--workers", help="Run analyzers in parallel", min=1, max=32
    ),
    fail_on: Optional[str] = typer.Option(
        None,
        "--fail-on",
        help="Exit 1 if any issue meets the threshold: error | warning",
        click_type=click.Choice(["error", "warning"]),
    ),
):
    """
    Analyze a project directory or a single file.

    [bold cyan]Examples:[/bold cyan]

      errorscope scan src/

      errorscope scan app.py --format json -o report.json
    """
    try:
        scope = build_scope(ctx, workers=workers, report_sort_by=sort_by)
        with scope:
            result = run_scan(scope, path)
            records = list(result.records)

            if fmt is None and output is None:
                sort_key = sort_by or scope.config.report_sort_by
                _print_table(result, sort_records(records, sort_key))
            else:
                generator = ReportGenerator.from_config(scope.config)
                options = {"format": fmt} if fmt else {}
                content = generator.generate(records, options)
                if output is not None:
                    output.write_text(content, encoding="utf-8")
                    console.print(f"[green]Report written to {escape(str(output))}[/green]")
                else:
                    typer.echo(content, nl=False)

    except ErrorScopeError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    if fail_on == "error" and result.errors:
        raise typer.Exit(1)
    if fail_on == "warning" and (result.errors or result.warnings):
        raise typer.Exit(1)
