"""Time buckets for frequency and trend metrics.

Bucket keys:
    hour   YYYY-MM-DDTHH:00
    day    YYYY-MM-DD
    week   YYYY-MM-DD of the ISO week's Monday
    month  YYYY-MM
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Iterator

from ..exceptions import ValidationError


class TimePeriod(str, Enum):
    HOUR = "hour"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


# Month windows in trend comparisons are a fixed 30 days.
PERIOD_LENGTH = {
    TimePeriod.HOUR: timedelta(hours=1),
    TimePeriod.DAY: timedelta(days=1),
    TimePeriod.WEEK: timedelta(weeks=1),
    TimePeriod.MONTH: timedelta(days=30),
}


def parse_period(value: "str | TimePeriod") -> TimePeriod:
    if isinstance(value, TimePeriod):
        return value
    try:
        return TimePeriod(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(p.value for p in TimePeriod)
        raise ValidationError("period", f"unknown period {value!r} (expected {allowed})")


def as_utc(ts: datetime) -> datetime:
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def bucket_start(ts: datetime, period: TimePeriod) -> datetime:
    ts = as_utc(ts)
    if period is TimePeriod.HOUR:
        return ts.replace(minute=0, second=0, microsecond=0)
    day = ts.replace(hour=0, minute=0, second=0, microsecond=0)
    if period is TimePeriod.DAY:
        return day
    if period is TimePeriod.WEEK:
        return day - timedelta(days=day.weekday())
    return day.replace(day=1)


def next_bucket(start: datetime, period: TimePeriod) -> datetime:
    if period is TimePeriod.MONTH:
        if start.month == 12:
            return start.replace(year=start.year + 1, month=1)
        return start.replace(month=start.month + 1)
    return start + PERIOD_LENGTH[period]


def bucket_key(ts: datetime, period: TimePeriod) -> str:
    start = bucket_start(ts, period)
    if period is TimePeriod.HOUR:
        return start.strftime("%Y-%m-%dT%H:00")
    if period is TimePeriod.MONTH:
        return start.strftime("%Y-%m")
    return start.strftime("%Y-%m-%d")


def iter_bucket_keys(since: datetime, until: datetime, period: TimePeriod) -> Iterator[str]:
    """Keys of every bucket overlapping the half-open window [since, until)."""
    since, until = as_utc(since), as_utc(until)
    current = bucket_start(since, period)
    while current < until:
        yield bucket_key(current, period)
        current = next_bucket(current, period)
