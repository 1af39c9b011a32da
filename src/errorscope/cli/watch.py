"""Watch command: rescan a project whenever its sources change."""

import time
from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape

from ..exceptions import ErrorScopeError
from ..logging_config import get_logger
from ..monitor import MonitorOptions
from . import app
from ._common import build_scope, console

logger = get_logger(__name__)

POLL_INTERVAL = 0.5


@app.command()
def watch(
    ctx: typer.Context,
    path: Path = typer.Argument(
        Path("."),
        help="Project directory to watch",
        exists=True,
        file_okay=False,
        dir_okay=True,
        readable=True,
    ),
    debounce: Optional[float] = typer.Option(
        None, "--debounce", "-d", help="Seconds to wait after the last change", min=0.0
    ),
):
    """Watch a project and print a summary after every rescan. Ctrl+C stops."""
    try:
        scope = build_scope(ctx)
        with scope:
            handle = scope.monitor.start(
                path, MonitorOptions(debounce_seconds=debounce, initial_scan=True)
            )
            console.print(
                f"[bold cyan]Watching[/bold cyan] {escape(handle.project_path)} "
                f"[dim]({handle.id})[/dim]"
            )
            seen = 0
            try:
                while True:
                    time.sleep(POLL_INTERVAL)
                    status = scope.monitor.get_status(path)
                    if status.scans_completed == seen:
                        continue
                    seen = status.scans_completed
                    if status.last_error:
                        console.print(f"[red]Scan failed:[/red] {escape(status.last_error)}")
                    elif status.last_result is not None:
                        metrics = status.last_result.metrics
                        console.print(
                            f"[dim]scan {seen}[/dim] "
                            f"[red]{metrics.errors} errors[/red], "
                            f"[yellow]{metrics.warnings} warnings[/yellow]"
                        )
            except KeyboardInterrupt:
                console.print("\n[yellow]Stopped watching[/yellow]")

    except ErrorScopeError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)
