"""Shared CLI helpers."""

from typing import Any, Dict, Optional

import typer
from rich.console import Console

from ..api import ErrorScope
from ..config import AnalysisConfig, load_config
from ..models import Severity

console = Console()

SEVERITY_STYLES = {
    Severity.CRITICAL: "red bold",
    Severity.ERROR: "red",
    Severity.WARNING: "yellow",
    Severity.INFO: "cyan",
}


def resolve_config(ctx: typer.Context, **overrides: Any) -> AnalysisConfig:
    """Build configuration from the global options plus command overrides."""
    obj: Dict[str, Any] = ctx.obj or {}
    return load_config(
        config_file=obj.get("config"),
        verbose=obj.get("verbose", False),
        quiet=obj.get("quiet", False),
        **overrides,
    )


def build_scope(ctx: typer.Context, **overrides: Any) -> ErrorScope:
    return ErrorScope(config=resolve_config(ctx, **overrides))


def severity_label(severity: Severity, text: Optional[str] = None) -> str:
    style = SEVERITY_STYLES[severity]
    return f"[{style}]{text or severity.value}[/{style}]"
