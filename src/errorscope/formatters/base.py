"""Base formatter interface and the rendering options shared by all formats."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, fields, replace
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..config import SORT_KEYS
from ..exceptions import ValidationError
from ..models import Category, ErrorRecord, utcnow

DEFAULT_TITLE = "Error Detection Report"

_CATEGORY_ORDER = {c: i for i, c in enumerate(Category)}

# Boundary-layer spellings accepted in option mappings.
_OPTION_ALIASES = {
    "sortBy": "sort_by",
    "groupByCategory": "group_by_category",
    "includeContext": "include_context",
    "includeTimestamp": "include_timestamp",
    "generatedAt": "generated_at",
}


@dataclass(frozen=True)
class ReportOptions:
    """Rendering options. ``format`` is resolved by the formatter registry."""

    format: str = "markdown"
    sort_by: str = "severity"
    group_by_category: bool = True
    include_context: bool = True
    title: str = DEFAULT_TITLE
    include_timestamp: bool = False
    generated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if not isinstance(self.format, str) or not self.format:
            raise ValidationError("format", "required non-empty string")
        if self.sort_by not in SORT_KEYS:
            raise ValidationError("sort_by", f"expected one of {', '.join(SORT_KEYS)}")
        if not isinstance(self.title, str):
            raise ValidationError("title", "expected a string")
        if self.generated_at is not None and not isinstance(self.generated_at, datetime):
            raise ValidationError("generated_at", "expected a datetime")

    @classmethod
    def field_names(cls) -> List[str]:
        return [f.name for f in fields(cls)]

    def merged(self, overrides: Optional[Mapping[str, Any]]) -> "ReportOptions":
        """Copy with ``overrides`` applied. Unknown keys raise ValidationError."""
        if not overrides:
            return self
        known = set(self.field_names())
        changes: Dict[str, Any] = {}
        for key, value in overrides.items():
            name = _OPTION_ALIASES.get(key, key)
            if name not in known:
                raise ValidationError(key, "unknown report option")
            changes[name] = value
        return replace(self, **changes)

    def timestamp(self) -> Optional[str]:
        """Generation time, only when explicitly requested."""
        if not self.include_timestamp:
            return None
        return (self.generated_at or utcnow()).isoformat()


def sort_records(records: Sequence[ErrorRecord], sort_by: str) -> List[ErrorRecord]:
    """Total orderings; ties fall through to location and id."""

    def location_key(r: ErrorRecord):
        loc = r.location
        return (loc.file_path, loc.line, loc.column or 0, r.id)

    def severity_key(r: ErrorRecord):
        return (-r.severity.rank, *location_key(r))

    def category_key(r: ErrorRecord):
        return (_CATEGORY_ORDER[r.category], -r.severity.rank, *location_key(r))

    keys = {"severity": severity_key, "category": category_key, "location": location_key}
    return sorted(records, key=keys[sort_by])


def group_by_category(records: Sequence[ErrorRecord]) -> Dict[Category, List[ErrorRecord]]:
    """Group preserving input order, categories in enum order."""
    grouped: Dict[Category, List[ErrorRecord]] = {}
    for category in Category:
        members = [r for r in records if r.category is category]
        if members:
            grouped[category] = members
    return grouped


def category_title(category: Category) -> str:
    return category.value.replace("-", " ").title()


class BaseFormatter(ABC):
    """Abstract base class for report formatters."""

    name: str = ""

    @abstractmethod
    def format(self, records: Sequence[ErrorRecord], options: ReportOptions) -> str:
        """Return the report as a string."""
