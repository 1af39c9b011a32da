"""Exception hierarchy for errorscope."""

from .analysis import AnalysisError, AnalyzerFailure, PathError
from .base import ErrorScopeError
from .config import ConfigurationError, InvalidConfigError, ValidationError
from .monitor import AlreadyMonitoringError, MonitorError, UnknownMonitorError
from .report import FormatError, ReportError

__all__ = [
    "ErrorScopeError",
    "AnalysisError",
    "PathError",
    "AnalyzerFailure",
    "MonitorError",
    "AlreadyMonitoringError",
    "UnknownMonitorError",
    "ReportError",
    "FormatError",
    "ConfigurationError",
    "ValidationError",
    "InvalidConfigError",
]
