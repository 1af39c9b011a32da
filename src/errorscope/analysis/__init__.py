"""Scan orchestration."""

from .engine import AnalysisEngine

__all__ = ["AnalysisEngine"]
