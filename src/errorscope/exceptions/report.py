"""Report rendering exceptions."""

from typing import Iterable

from .base import ErrorScopeError


class ReportError(ErrorScopeError):
    """Base class for report generation errors."""
    pass


class FormatError(ReportError):
    """Raised for an unsupported report format."""

    def __init__(self, fmt: str, supported: Iterable[str]):
        supported = sorted(supported)
        super().__init__(
            f"Unsupported report format: {fmt!r}",
            details={"format": str(fmt), "supported": ", ".join(supported)},
        )
        self.format = fmt
        self.supported = supported
