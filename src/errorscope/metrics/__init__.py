"""Error history metrics."""

from .analyzer import MetricsAnalyzer
from .events import ErrorEvent, EventLog, ResolutionEvent
from .periods import TimePeriod, bucket_key, parse_period

__all__ = [
    "MetricsAnalyzer",
    "EventLog",
    "ErrorEvent",
    "ResolutionEvent",
    "TimePeriod",
    "bucket_key",
    "parse_period",
]
