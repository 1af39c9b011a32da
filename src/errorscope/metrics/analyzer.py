"""Metrics analyzer: frequencies, trends, resolution times and process
suggestions over the tracked error history."""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from datetime import datetime
from pathlib import PurePosixPath
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

import numpy as np

from ..exceptions import ValidationError
from ..models import Category, ErrorRecord, MetricsSnapshot, Severity, utcnow
from .events import DEFAULT_MAX_EVENTS, ErrorEvent, EventLog, ResolutionEvent
from .periods import (
    PERIOD_LENGTH,
    TimePeriod,
    as_utc,
    bucket_key,
    iter_bucket_keys,
    parse_period,
)

logger = logging.getLogger(__name__)

TREND_THRESHOLD_PCT = 5.0
CONCENTRATION_PCT = 30.0
SLOW_RESOLUTION_SECONDS = 3600.0
MANY_SYNTAX_ERRORS = 10

QUALITY_PENALTY = {
    Severity.CRITICAL: 10.0,
    Severity.ERROR: 5.0,
    Severity.WARNING: 2.0,
    Severity.INFO: 0.5,
}

_PRIORITY_ORDER = {"high": 0, "medium": 1, "low": 2}


def _parse_category(category: "str | Category | None") -> Optional[Category]:
    if category is None:
        return None
    try:
        return Category.parse(category)
    except ValueError:
        raise ValidationError("category", f"unknown category {category!r}")


def _in_window(ts: datetime, since: Optional[datetime], until: Optional[datetime]) -> bool:
    if since is not None and ts < as_utc(since):
        return False
    if until is not None and ts >= as_utc(until):
        return False
    return True


def _direction(change_pct: float) -> str:
    if change_pct > TREND_THRESHOLD_PCT:
        return "increasing"
    if change_pct < -TREND_THRESHOLD_PCT:
        return "decreasing"
    return "flat"


def _change_pct(current: int, previous: int) -> float:
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return (current - previous) / previous * 100.0


def _describe(durations: List[float]) -> Dict[str, float]:
    if not durations:
        return {"count": 0, "min": 0.0, "median": 0.0, "p90": 0.0, "max": 0.0, "mean": 0.0}
    values = np.asarray(durations, dtype=float)
    return {
        "count": int(values.size),
        "min": float(np.min(values)),
        "median": float(np.median(values)),
        "p90": float(np.percentile(values, 90)),
        "max": float(np.max(values)),
        "mean": float(np.mean(values)),
    }


class MetricsAnalyzer:
    """Tracks error and resolution events and derives quality metrics.

    ``clock`` supplies "now" for trend windows and default timestamps; tests
    pass a fixed clock.
    """

    def __init__(
        self,
        clock: Optional[Callable[[], datetime]] = None,
        log: Optional[EventLog] = None,
        max_events: int = DEFAULT_MAX_EVENTS,
    ) -> None:
        self.clock = clock or utcnow
        self.log = log or EventLog(max_events)

    def _now(self) -> datetime:
        return as_utc(self.clock())

    # ── Tracking ──────────────────────────────────────────────────

    def track_error(self, record: ErrorRecord, timestamp: Optional[datetime] = None) -> bool:
        """Record a detected error. Never raises; returns False when the
        record was not tracked (already open, or malformed)."""
        try:
            event = ErrorEvent(
                error_id=record.id,
                category=record.category,
                severity=record.severity,
                file_path=record.location.file_path,
                timestamp=as_utc(timestamp or record.timestamp),
            )
            return self.log.add_error(event)
        except Exception as e:
            logger.warning(f"Failed to track error: {e}")
            return False

    def track_errors(self, records: Iterable[ErrorRecord]) -> int:
        return sum(1 for record in records if self.track_error(record))

    def track_resolution(
        self,
        error_id: str,
        details: Optional[str] = None,
        timestamp: Optional[datetime] = None,
    ) -> ResolutionEvent:
        """Record that an error was resolved. Unknown ids are kept as orphans."""
        if not isinstance(error_id, str) or not error_id:
            raise ValidationError("error_id", "required non-empty string")
        event = self.log.add_resolution(error_id, as_utc(timestamp or self._now()), details)
        if event.is_orphan:
            logger.debug(f"Resolution for untracked error {error_id}")
        return event

    # ── Queries ───────────────────────────────────────────────────

    def _errors(
        self,
        category: Optional[Category] = None,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
    ) -> List[ErrorEvent]:
        return [
            e
            for e in self.log.errors()
            if (category is None or e.category is category) and _in_window(e.timestamp, since, until)
        ]

    def get_frequency(
        self,
        period: "str | TimePeriod" = TimePeriod.DAY,
        category: "str | Category | None" = None,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """Error counts per time bucket over the window [since, until).

        When both bounds are given every bucket in the window is present,
        including empty ones.
        """
        period = parse_period(period)
        events = self._errors(_parse_category(category), since, until)

        buckets: Dict[str, int] = {}
        if since is not None and until is not None:
            buckets = {key: 0 for key in iter_bucket_keys(since, until, period)}
        for event in events:
            key = bucket_key(event.timestamp, period)
            buckets[key] = buckets.get(key, 0) + 1

        total = len(events)
        return {
            "period": period.value,
            "buckets": dict(sorted(buckets.items())),
            "total": total,
            "average": round(total / len(buckets), 3) if buckets else 0.0,
        }

    def get_trends(self, period: "str | TimePeriod" = TimePeriod.WEEK) -> Dict[str, Any]:
        """Compare the window ending now with the one before it."""
        period = parse_period(period)
        now = self._now()
        length = PERIOD_LENGTH[period]
        current = self._errors(since=now - length, until=now)
        previous = self._errors(since=now - 2 * length, until=now - length)

        change = _change_pct(len(current), len(previous))
        cur_by_cat = Counter(e.category.value for e in current)
        prev_by_cat = Counter(e.category.value for e in previous)
        by_category = {}
        for name in sorted(set(cur_by_cat) | set(prev_by_cat)):
            cat_change = _change_pct(cur_by_cat[name], prev_by_cat[name])
            by_category[name] = {
                "current": cur_by_cat[name],
                "previous": prev_by_cat[name],
                "change_percentage": round(cat_change, 1),
                "direction": _direction(cat_change),
            }

        penalty = sum(QUALITY_PENALTY[e.severity] for e in current)
        return {
            "period": period.value,
            "current_window": {
                "start": (now - length).isoformat(),
                "end": now.isoformat(),
                "count": len(current),
            },
            "previous_window": {
                "start": (now - 2 * length).isoformat(),
                "end": (now - length).isoformat(),
                "count": len(previous),
            },
            "change_percentage": round(change, 1),
            "direction": _direction(change),
            "by_category": by_category,
            "quality_score": round(max(0.0, 100.0 - penalty), 1),
        }

    def get_most_common_categories(
        self,
        category: "str | Category | None" = None,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
    ) -> List[Dict[str, Any]]:
        events = self._errors(_parse_category(category), since, until)
        counts = Counter(e.category.value for e in events)
        total = len(events)
        ranked = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
        return [
            {
                "category": name,
                "count": count,
                "percentage": round(count / total * 100.0, 1),
            }
            for name, count in ranked
        ]

    def get_resolution_times(
        self,
        category: "str | Category | None" = None,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """Seconds from detection to resolution for matched pairs whose
        detection time lies in [since, until)."""
        wanted = _parse_category(category)
        durations: List[float] = []
        per_category: Dict[str, List[float]] = defaultdict(list)
        for event in self.log.resolutions():
            if event.is_orphan:
                continue
            if wanted is not None and event.category is not wanted:
                continue
            if not _in_window(event.detected_at, since, until):
                continue
            durations.append(event.elapsed_seconds)
            per_category[event.category.value].append(event.elapsed_seconds)

        stats: Dict[str, Any] = _describe(durations)
        stats["by_category"] = {
            name: _describe(values) for name, values in sorted(per_category.items())
        }
        return stats

    def get_hotspots(
        self,
        limit: int = 10,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
    ) -> List[Dict[str, Any]]:
        """Directories ranked by error count."""
        by_dir: Dict[str, Counter] = defaultdict(Counter)
        for event in self._errors(since=since, until=until):
            directory = PurePosixPath(event.file_path.replace("\\", "/")).parent.as_posix()
            by_dir[directory][event.category.value] += 1

        ranked = sorted(by_dir.items(), key=lambda kv: (-sum(kv[1].values()), kv[0]))
        return [
            {
                "path": path,
                "error_count": sum(counts.values()),
                "top_category": sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))[0][0],
            }
            for path, counts in ranked[:limit]
        ]

    def get_suggestions(self) -> List[Dict[str, Any]]:
        """Process improvement hints, highest priority first."""
        suggestions: List[Dict[str, Any]] = []
        trends = self.get_trends(TimePeriod.WEEK)
        common = self.get_most_common_categories()
        resolution = self.get_resolution_times()

        for name, trend in trends["by_category"].items():
            median = resolution["by_category"].get(name, {}).get("median", 0.0)
            if trend["direction"] == "increasing" and median > SLOW_RESOLUTION_SECONDS:
                suggestions.append(
                    {
                        "priority": "high",
                        "kind": "priority",
                        "error_category": name,
                        "title": f"Prioritise {name} issues",
                        "description": (
                            f"{name} issues are increasing ({trend['change_percentage']:+.1f}%) "
                            f"and take a median of {median / 60:.0f} minutes to resolve"
                        ),
                        "action": f"Schedule dedicated time for {name} fixes and add prevention tooling",
                    }
                )

        if trends["direction"] == "increasing":
            suggestions.append(
                {
                    "priority": "high",
                    "kind": "quality",
                    "title": "Error rate is increasing",
                    "description": (
                        f"Errors increased by {trends['change_percentage']:.1f}% "
                        f"compared to last period"
                    ),
                    "action": "Review recent changes and consider adding more tests",
                }
            )

        if common and common[0]["percentage"] > CONCENTRATION_PCT:
            top = common[0]
            suggestions.append(
                {
                    "priority": "medium",
                    "kind": "prevention",
                    "error_category": top["category"],
                    "title": f"High concentration of {top['category']} errors",
                    "description": (
                        f"{top['category']} errors make up {top['percentage']:.1f}% of all errors"
                    ),
                    "action": (
                        f"Consider adding linting rules or tooling to prevent "
                        f"{top['category']} errors"
                    ),
                }
            )

        if resolution["mean"] > SLOW_RESOLUTION_SECONDS:
            suggestions.append(
                {
                    "priority": "medium",
                    "kind": "process",
                    "title": "Long error resolution times",
                    "description": (
                        f"Average resolution time is {resolution['mean'] / 60:.0f} minutes"
                    ),
                    "action": "Consider improving documentation or adding automated fixes",
                }
            )

        counts = {c["category"]: c["count"] for c in common}
        if counts.get(Category.SYNTAX.value, 0) > MANY_SYNTAX_ERRORS:
            suggestions.append(
                {
                    "priority": "low",
                    "kind": "tooling",
                    "title": "Many syntax errors detected",
                    "description": f"{counts[Category.SYNTAX.value]} syntax errors found",
                    "action": "Enable a linter and formatter with format-on-save",
                }
            )

        if counts.get(Category.SECURITY.value, 0) > 0:
            suggestions.append(
                {
                    "priority": "high",
                    "kind": "security",
                    "title": "Security vulnerabilities detected",
                    "description": f"{counts[Category.SECURITY.value]} security issues found",
                    "action": "Address security vulnerabilities immediately",
                }
            )

        return sorted(suggestions, key=lambda s: _PRIORITY_ORDER[s["priority"]])

    # ── Aggregates ────────────────────────────────────────────────

    def snapshot(self, period: "str | TimePeriod" = TimePeriod.WEEK) -> MetricsSnapshot:
        period = parse_period(period)
        now = self._now()
        return MetricsSnapshot(
            frequency=self.get_frequency(period, since=now - 4 * PERIOD_LENGTH[period], until=now),
            trends=self.get_trends(period),
            common_categories=self.get_most_common_categories(),
            resolution_times=self.get_resolution_times(),
            suggestions=self.get_suggestions(),
        )

    def export_data(self) -> Dict[str, Any]:
        return {
            "exported_at": self._now().isoformat(),
            "errors": [e.to_dict() for e in self.log.errors()],
            "resolutions": [r.to_dict() for r in self.log.resolutions()],
            "open_errors": list(self.log.open_ids()),
        }


    def import_data(self, data: Mapping[str, Any]) -> Dict[str, int]:
        """Replace the tracked history with an ``export_data`` payload.

        The payload is validated in full before anything changes.

        Raises:
            ValidationError: If the payload or any event in it is malformed
        """
        if not isinstance(data, Mapping):
            raise ValidationError("data", "expected an object")
        for key in ("errors", "resolutions", "open_errors"):
            if not isinstance(data.get(key, []), list):
                raise ValidationError(key, "expected a list")

        errors = [ErrorEvent.from_dict(e) for e in data.get("errors", [])]
        resolutions = [ResolutionEvent.from_dict(r) for r in data.get("resolutions", [])]
        open_ids = [i for i in data.get("open_errors", []) if isinstance(i, str)]
        self.log.replace(errors, resolutions, open_ids)

        logger.info(f"Imported {len(errors)} error and {len(resolutions)} resolution events")
        return {
            "errors": len(self.log.errors()),
            "resolutions": len(self.log.resolutions()),
            "open_errors": len(self.log.open_ids()),
        }

    def clear(self) -> None:
        self.log.clear()
        logger.debug("Cleared metrics history")
