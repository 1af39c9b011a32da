"""Remediation synthesis."""

from .engine import MANUAL_INVESTIGATION, ResolutionEngine, recommended_approach
from .validation import VALIDATION_TEMPLATES, build_validation_steps

__all__ = [
    "ResolutionEngine",
    "MANUAL_INVESTIGATION",
    "recommended_approach",
    "VALIDATION_TEMPLATES",
    "build_validation_steps",
]
