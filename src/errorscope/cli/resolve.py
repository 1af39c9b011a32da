"""Resolve command: scan, then print the best-ranked fix for each issue."""

from pathlib import Path

import typer
from rich.markup import escape

from ..exceptions import ErrorScopeError
from ..logging_config import get_logger
from ..formatters import sort_records
from . import app
from ._common import build_scope, console, severity_label
from .scan import run_scan

logger = get_logger(__name__)


@app.command()
def resolve(
    ctx: typer.Context,
    path: Path = typer.Argument(
        Path("."), help="Project directory or file", exists=True, readable=True
    ),
    limit: int = typer.Option(20, "--limit", "-n", help="Maximum issues to show", min=1),
    explain: bool = typer.Option(
        False, "--explain", "-e", help="Also print impact, urgency and diagnostic steps"
    ),
):
    """Scan a path and suggest a resolution for each issue found."""
    try:
        scope = build_scope(ctx)
        with scope:
            result = run_scan(scope, path)
            records = sort_records(list(result.records), "severity")
            if not records:
                console.print("[green]No issues found[/green]")
                return

            for record in records[:limit]:
                resolution = scope.resolution.generate_complete_resolution(record)
                console.print(
                    f"{severity_label(record.severity)} "
                    f"[bold]{escape(str(record.location))}[/bold] {escape(record.message)}"
                )
                primary = resolution.primary
                if primary is not None:
                    console.print(
                        f"  [green]Fix:[/green] {escape(primary.solution.title)} "
                        f"[dim](confidence {primary.score:.2f})[/dim]"
                    )
                    for i, step in enumerate(primary.solution.steps, start=1):
                        console.print(f"    {i}. {escape(step)}")
                console.print(f"  [cyan]{escape(resolution.recommended_approach)}[/cyan]")
                if explain:
                    _print_explanation(scope, record)
                console.print()

            if len(records) > limit:
                console.print(f"[dim]{len(records) - limit} more issues not shown[/dim]")

    except ErrorScopeError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)


def _print_explanation(scope, record) -> None:
    info = scope.information.generate_complete_info(record)
    explanation = info.explanation
    console.print(f"  [bold]{escape(explanation.title)}[/bold]: {escape(explanation.description)}")
    console.print(f"  Impact: {escape(explanation.impact)}")
    console.print(f"  Urgency: {escape(explanation.urgency)}")
    for step in info.diagnostic_steps:
        console.print(f"    {step.step}. {escape(step.action)} [dim]{escape(step.question)}[/dim]")
    if info.related_errors:
        names = ", ".join(r.name for r in info.related_errors)
        console.print(f"  [dim]Related: {escape(names)}[/dim]")
