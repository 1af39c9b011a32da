"""Bounded event log backing the metrics analyzer."""

from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Deque, Dict, Iterable, Mapping, Optional, Tuple

from ..exceptions import ValidationError
from ..models import Category, Severity
from .periods import as_utc

DEFAULT_MAX_EVENTS = 10000


@dataclass(frozen=True)
class ErrorEvent:
    error_id: str
    category: Category
    severity: Severity
    file_path: str
    timestamp: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_id": self.error_id,
            "category": self.category.value,
            "severity": self.severity.value,
            "file_path": self.file_path,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ErrorEvent":
        """Inverse of ``to_dict``.

        Raises:
            ValidationError: If a field is missing or malformed
        """
        if not isinstance(data, Mapping):
            raise ValidationError("errors", "expected objects")
        try:
            return cls(
                error_id=_required_str("error_id", data.get("error_id")),
                category=Category.parse(data.get("category")),
                severity=Severity.parse(data.get("severity")),
                file_path=_required_str("file_path", data.get("file_path")),
                timestamp=_timestamp("timestamp", data.get("timestamp")),
            )
        except (TypeError, ValueError) as e:
            raise ValidationError("errors", f"malformed error event: {e}")


@dataclass(frozen=True)
class ResolutionEvent:
    """A resolution. ``detected_at`` and ``category`` are None for orphans
    (resolutions of ids that were never tracked or are not open)."""

    error_id: str
    timestamp: datetime
    details: Optional[str] = None
    detected_at: Optional[datetime] = None
    category: Optional[Category] = None

    @property
    def is_orphan(self) -> bool:
        return self.detected_at is None

    @property
    def elapsed_seconds(self) -> Optional[float]:
        if self.detected_at is None:
            return None
        return max(0.0, (self.timestamp - self.detected_at).total_seconds())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_id": self.error_id,
            "timestamp": self.timestamp.isoformat(),
            "details": self.details,
            "detected_at": self.detected_at.isoformat() if self.detected_at else None,
            "category": self.category.value if self.category else None,
            "elapsed_seconds": self.elapsed_seconds,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ResolutionEvent":
        if not isinstance(data, Mapping):
            raise ValidationError("resolutions", "expected objects")
        details = data.get("details")
        detected_at = data.get("detected_at")
        category = data.get("category")
        try:
            return cls(
                error_id=_required_str("error_id", data.get("error_id")),
                timestamp=_timestamp("timestamp", data.get("timestamp")),
                details=str(details) if details is not None else None,
                detected_at=_timestamp("detected_at", detected_at) if detected_at else None,
                category=Category.parse(category) if category else None,
            )
        except (TypeError, ValueError) as e:
            raise ValidationError("resolutions", f"malformed resolution event: {e}")


def _required_str(field: str, value: Any) -> str:
    if not isinstance(value, str) or not value:
        raise ValidationError(field, "required non-empty string")
    return value


def _timestamp(field: str, value: Any) -> datetime:
    if isinstance(value, datetime):
        return as_utc(value)
    if not isinstance(value, str):
        raise ValidationError(field, "required ISO-8601 timestamp")
    try:
        return as_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
    except ValueError:
        raise ValidationError(field, f"not an ISO-8601 timestamp: {value!r}")


class EventLog:
    """Lock-guarded store of error and resolution events.

    An id is *open* from its error event until its resolution. Tracking an
    id that is already open is ignored, so a defect reported by several
    consecutive scans counts once; an id that reappears after resolution
    counts again.

    Each list keeps at most ``max_size`` events, dropping the oldest. Open
    ids are not trimmed, so a late resolution still finds its detection time.
    """

    def __init__(self, max_size: int = DEFAULT_MAX_EVENTS) -> None:
        if isinstance(max_size, bool) or not isinstance(max_size, int) or max_size < 1:
            raise ValidationError("max_size", "must be a positive integer")
        self.max_size = max_size
        self._lock = threading.Lock()
        self._errors: Deque[ErrorEvent] = deque(maxlen=max_size)
        self._resolutions: Deque[ResolutionEvent] = deque(maxlen=max_size)
        self._open: Dict[str, ErrorEvent] = {}

    def add_error(self, event: ErrorEvent) -> bool:
        with self._lock:
            if event.error_id in self._open:
                return False
            self._errors.append(event)
            self._open[event.error_id] = event
            return True

    def add_resolution(
        self, error_id: str, timestamp: datetime, details: Optional[str] = None
    ) -> ResolutionEvent:
        with self._lock:
            opened = self._open.pop(error_id, None)
            event = ResolutionEvent(
                error_id=error_id,
                timestamp=timestamp,
                details=details,
                detected_at=opened.timestamp if opened else None,
                category=opened.category if opened else None,
            )
            self._resolutions.append(event)
            return event

    def errors(self) -> Tuple[ErrorEvent, ...]:
        with self._lock:
            return tuple(self._errors)

    def resolutions(self) -> Tuple[ResolutionEvent, ...]:
        with self._lock:
            return tuple(self._resolutions)

    def open_ids(self) -> Tuple[str, ...]:
        with self._lock:
            return tuple(sorted(self._open))

    def replace(
        self,
        errors: Iterable[ErrorEvent],
        resolutions: Iterable[ResolutionEvent],
        open_ids: Iterable[str],
    ) -> None:
        """Swap in a whole history at once. ``open_ids`` not found among
        ``errors`` are dropped."""
        errors = sorted(errors, key=lambda e: e.timestamp)
        resolutions = sorted(resolutions, key=lambda r: r.timestamp)
        latest = {e.error_id: e for e in errors}
        opened = {i: latest[i] for i in open_ids if i in latest}
        with self._lock:
            self._errors = deque(errors, maxlen=self.max_size)
            self._resolutions = deque(resolutions, maxlen=self.max_size)
            self._open = opened

    def clear(self) -> None:
        with self._lock:
            self._errors.clear()
            self._resolutions.clear()
            self._open.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._errors)
