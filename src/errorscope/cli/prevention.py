"""Prevention command: strategies for an error category."""

import typer
from rich.markup import escape
from rich.panel import Panel

from ..models import Category
from ..prevention import PreventionStrategyService, estimate_effort, estimate_impact
from . import app
from ._common import console


@app.command()
def prevention(
    category: str = typer.Argument(..., help="Error category, e.g. syntax or security"),
):
    """Show prevention strategies and tools for an error category."""
    service = PreventionStrategyService()
    strategies = service.get_strategies_for_type(category)
    if not strategies:
        known = ", ".join(c.value for c in Category)
        console.print(f"[red]No strategies for {escape(category)!r}.[/red] Known: {known}")
        raise typer.Exit(1)

    for s in strategies:
        body = [escape(s.description), ""]
        body += [f"{i}. {escape(step)}" for i, step in enumerate(s.steps, start=1)]
        body += [
            "",
            f"[bold]Tools:[/bold] {escape(', '.join(s.tools))}",
            f"[bold]Effort:[/bold] {estimate_effort(s)}  [bold]Impact:[/bold] {estimate_impact(s)}",
            f"[dim]{escape(s.tradeoffs)}[/dim]",
        ]
        console.print(Panel("\n".join(body), title=f"[bold]{escape(s.title)}[/bold]"))

    tools = service.get_tool_recommendations(category)
    console.print(f"[bold cyan]Recommended tools:[/bold cyan] {escape(', '.join(tools))}")
