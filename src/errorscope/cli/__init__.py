"""CLI entry point. Registers all subcommands."""

from pathlib import Path
from typing import Optional

import typer

from ..logging_config import setup_logging

app = typer.Typer(
    name="errorscope",
    help="errorscope - source analysis, resolution and prevention",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)


@app.callback(invoke_without_command=True)
def callback(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors"),
    config: Optional[Path] = typer.Option(
        None,
        "-c",
        "--config",
        help="Configuration file (TOML)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    version: bool = typer.Option(False, "--version", help="Show version and exit"),
):
    """Detect, explain and prevent defects in a source tree."""
    if version:
        from .. import __version__

        typer.echo(f"errorscope {__version__}")
        raise typer.Exit(0)

    setup_logging(verbose=verbose, quiet=quiet)
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["config"] = config

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(0)


def main() -> None:
    app()


# Import subcommands to register them
from .scan import scan as _scan  # noqa: F401, E402
from .watch import watch as _watch  # noqa: F401, E402
from .knowledge import patterns as _patterns  # noqa: F401, E402
from .prevention import prevention as _prevention  # noqa: F401, E402
from .resolve import resolve as _resolve  # noqa: F401, E402
