"""Explanations and diagnostics for individual errors."""

from .service import ErrorInformationService, as_record, format_location

__all__ = ["ErrorInformationService", "as_record", "format_location"]
