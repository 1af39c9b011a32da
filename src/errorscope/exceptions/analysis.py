"""Analysis-related exceptions: scan targets and analyzer failures."""

from pathlib import Path
from typing import Union

from .base import ErrorScopeError


class AnalysisError(ErrorScopeError):
    """Base class for analysis-related errors."""
    pass


class PathError(AnalysisError):
    """Raised when a scan target is missing, of the wrong kind, or unreadable."""

    def __init__(self, path: Union[str, Path], reason: str):
        super().__init__(
            f"Invalid scan target: {path}",
            details={"path": str(path), "reason": reason},
        )
        self.path = Path(path)
        self.reason = reason


class AnalyzerFailure(AnalysisError):
    """One analyzer raised during a scan.

    Never propagated to scan callers: the engine turns it into a synthetic
    ``analyzer-failure`` record.
    """

    def __init__(self, analyzer: str, reason: str):
        super().__init__(
            f"Analyzer {analyzer} failed",
            details={"analyzer": analyzer, "reason": reason},
        )
        self.analyzer = analyzer
        self.reason = reason
