"""Process-level prevention strategies."""

from .service import (
    PreventionStrategyService,
    estimate_effort,
    estimate_impact,
    priority_score,
)

__all__ = [
    "PreventionStrategyService",
    "estimate_effort",
    "estimate_impact",
    "priority_score",
]
