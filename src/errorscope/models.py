"""Data models for errorscope."""

from __future__ import annotations

import hashlib
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from .exceptions import ValidationError


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Category(str, Enum):
    """Analysis dimension an issue belongs to."""

    SYNTAX = "syntax"
    RUNTIME = "runtime"
    CONFIGURATION = "configuration"
    SECURITY = "security"
    PERFORMANCE = "performance"
    LOGICAL = "logical"
    ANALYZER_FAILURE = "analyzer-failure"

    @classmethod
    def parse(cls, value: "str | Category") -> "Category":
        """Accept an enum member or its value (case-insensitive).

        Raises ValueError for unknown categories.
        """
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())


class Severity(str, Enum):
    """Issue severity. ``info``/``warning`` are warnings, the rest are errors."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    @property
    def is_error(self) -> bool:
        return self in (Severity.ERROR, Severity.CRITICAL)

    @classmethod
    def parse(cls, value: "str | Severity") -> "Severity":
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())


_SEVERITY_RANK = {
    Severity.INFO: 0,
    Severity.WARNING: 1,
    Severity.ERROR: 2,
    Severity.CRITICAL: 3,
}


class MonitorStatus(str, Enum):
    STARTING = "starting"
    WATCHING = "watching"
    STOPPED = "stopped"


@dataclass(frozen=True)
class Location:
    """Where an issue was found."""

    file_path: str
    line: int = 1
    column: Optional[int] = None
    context: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file_path": self.file_path,
            "line": self.line,
            "column": self.column,
            "context": self.context,
        }

    def __str__(self) -> str:
        if self.column is not None:
            return f"{self.file_path}:{self.line}:{self.column}"
        return f"{self.file_path}:{self.line}"


def make_error_id(
    detected_by: str,
    rule: Optional[str],
    location: Location,
    message: str,
) -> str:
    """Stable id for one detected issue.

    Identical input produces the identical id, so repeated scans of an
    unchanged tree yield the same records.
    """
    key = "|".join(
        [
            detected_by,
            rule or "",
            location.file_path,
            str(location.line),
            "" if location.column is None else str(location.column),
            message,
        ]
    )
    return "err_" + hashlib.sha1(key.encode("utf-8")).hexdigest()[:16]


@dataclass(frozen=True)
class ErrorRecord:
    """One detected issue. Immutable; resolution is tracked elsewhere."""

    id: str
    category: Category
    severity: Severity
    location: Location
    message: str
    detected_by: str
    timestamp: datetime = field(default_factory=utcnow)
    rule: Optional[str] = None
    language: Optional[str] = None

    @property
    def is_error(self) -> bool:
        return self.severity.is_error

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "category": self.category.value,
            "severity": self.severity.value,
            "location": self.location.to_dict(),
            "message": self.message,
            "detected_by": self.detected_by,
            "timestamp": self.timestamp.isoformat(),
            "rule": self.rule,
            "language": self.language,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ErrorRecord":
        """Build a record from a plain mapping (e.g. a decoded request body).

        Accepts both snake_case and the camelCase keys used by the boundary
        layer (``detectedBy``, ``filePath``).
        """
        if not isinstance(data, Mapping):
            raise ValidationError("error", "expected an object")

        message = data.get("message")
        if not isinstance(message, str) or not message.strip():
            raise ValidationError("message", "required non-empty string")

        raw_category = data.get("category") or data.get("type")
        if raw_category is None:
            raise ValidationError("category", "required")
        try:
            category = Category.parse(raw_category)
        except ValueError:
            raise ValidationError("category", f"unknown category {raw_category!r}")

        try:
            severity = Severity.parse(data.get("severity") or Severity.ERROR)
        except ValueError:
            raise ValidationError("severity", f"unknown severity {data.get('severity')!r}")

        location = _location_from(data.get("location"), data)
        detected_by = _optional_str("detected_by", data.get("detected_by") or data.get("detectedBy"))
        rule = _optional_str("rule", data.get("rule"))
        language = _optional_str("language", data.get("language"))
        error_id = _optional_str("id", data.get("id"))
        timestamp = _parse_timestamp(data.get("timestamp"))
        detected_by = detected_by or "external"

        return cls(
            id=error_id or make_error_id(detected_by, rule, location, message),
            category=category,
            severity=severity,
            location=location,
            message=message,
            detected_by=detected_by,
            timestamp=timestamp,
            rule=rule,
            language=language,
        )


def _optional_str(field: str, value: Any) -> Optional[str]:
    if value is not None and not isinstance(value, str):
        raise ValidationError(field, "expected a string")
    return value


def _location_from(raw: Any, parent: Mapping[str, Any]) -> Location:
    if raw is None:
        raw = {}
    if not isinstance(raw, Mapping):
        raise ValidationError("location", "expected an object")
    file_path = raw.get("file_path") or raw.get("filePath") or parent.get("file_path")
    if not isinstance(file_path, str) or not file_path:
        raise ValidationError("location.file_path", "required non-empty string")
    try:
        line = int(raw.get("line") or 1)
        column = raw.get("column")
        column = int(column) if column is not None else None
    except (TypeError, ValueError):
        raise ValidationError("location", "line and column must be integers")
    if line < 1:
        raise ValidationError("location.line", "must be >= 1")
    context = _optional_str("location.context", raw.get("context"))
    return Location(file_path=file_path, line=line, column=column, context=context)


def _parse_timestamp(value: Any) -> datetime:
    if value is None:
        return utcnow()
    if isinstance(value, datetime):
        ts = value
    else:
        try:
            ts = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            raise ValidationError("timestamp", f"not an ISO-8601 timestamp: {value!r}")
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


@dataclass(frozen=True)
class ScanMetrics:
    """Aggregate counts for one scan."""

    total: int = 0
    errors: int = 0
    warnings: int = 0
    files_affected: int = 0
    by_category: Dict[str, int] = field(default_factory=dict)
    by_severity: Dict[str, int] = field(default_factory=dict)
    analyzers_run: int = 0
    analyzers_failed: int = 0

    @classmethod
    def from_records(
        cls,
        records: List[ErrorRecord],
        analyzers_run: int = 0,
        analyzers_failed: int = 0,
    ) -> "ScanMetrics":
        by_category = Counter(r.category.value for r in records)
        by_severity = Counter(r.severity.value for r in records)
        errors = sum(1 for r in records if r.is_error)
        return cls(
            total=len(records),
            errors=errors,
            warnings=len(records) - errors,
            files_affected=len({r.location.file_path for r in records}),
            by_category=dict(sorted(by_category.items())),
            by_severity=dict(sorted(by_severity.items())),
            analyzers_run=analyzers_run,
            analyzers_failed=analyzers_failed,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "errors": self.errors,
            "warnings": self.warnings,
            "files_affected": self.files_affected,
            "by_category": dict(self.by_category),
            "by_severity": dict(self.by_severity),
            "analyzers_run": self.analyzers_run,
            "analyzers_failed": self.analyzers_failed,
        }


@dataclass(frozen=True)
class ScanResult:
    """Output of one engine invocation. Never merged in place."""

    errors: Tuple[ErrorRecord, ...]
    warnings: Tuple[ErrorRecord, ...]
    metrics: ScanMetrics
    timestamp: datetime
    target: str = ""
    duration_seconds: float = 0.0

    @property
    def records(self) -> Iterator[ErrorRecord]:
        yield from self.errors
        yield from self.warnings

    def to_dict(self) -> Dict[str, Any]:
        return {
            "target": self.target,
            "timestamp": self.timestamp.isoformat(),
            "duration_seconds": round(self.duration_seconds, 6),
            "errors": [r.to_dict() for r in self.errors],
            "warnings": [r.to_dict() for r in self.warnings],
            "metrics": self.metrics.to_dict(),
        }


@dataclass(frozen=True)
class MonitorHandle:
    """One monitoring session. Only the monitor registry produces new copies."""

    id: str
    project_path: str
    start_time: datetime
    status: MonitorStatus = MonitorStatus.STARTING

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "project_path": self.project_path,
            "start_time": self.start_time.isoformat(),
            "status": self.status.value,
        }


# ── Knowledge base ────────────────────────────────────────────────

ANY_LANGUAGE = "any"


@dataclass(frozen=True)
class PatternMatchers:
    """Criteria a Pattern uses to recognise an issue.

    ``keywords`` are case-insensitive regex fragments. Empty ``categories``
    accepts every category; empty ``keywords`` accepts every message.
    """

    keywords: Tuple[str, ...] = ()
    categories: Tuple[Category, ...] = ()


@dataclass(frozen=True)
class Pattern:
    id: str
    name: str
    language: str
    matchers: PatternMatchers
    description: str
    common_causes: Tuple[str, ...] = ()
    related: Tuple[str, ...] = ()

    @property
    def is_language_scoped(self) -> bool:
        return self.language != ANY_LANGUAGE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "language": self.language,
            "matchers": {
                "keywords": list(self.matchers.keywords),
                "categories": [c.value for c in self.matchers.categories],
            },
            "description": self.description,
            "common_causes": list(self.common_causes),
            "related": list(self.related),
        }


@dataclass(frozen=True)
class CodeExample:
    incorrect: str
    correct: str


@dataclass(frozen=True)
class Solution:
    """A remediation recipe for one pattern."""

    id: str
    pattern_id: str
    title: str
    description: str
    steps: Tuple[str, ...]
    confidence: float
    difficulty: str = "medium"
    estimated_minutes: int = 10
    tools: Tuple[str, ...] = ()
    references: Tuple[str, ...] = ()
    examples: Tuple[CodeExample, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "pattern_id": self.pattern_id,
            "title": self.title,
            "description": self.description,
            "steps": list(self.steps),
            "confidence": self.confidence,
            "difficulty": self.difficulty,
            "estimated_minutes": self.estimated_minutes,
            "tools": list(self.tools),
            "references": list(self.references),
            "examples": [{"incorrect": e.incorrect, "correct": e.correct} for e in self.examples],
        }


@dataclass(frozen=True)
class BestPractice:
    id: str
    language: str
    name: str
    description: str
    fix: str
    violation: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "language": self.language,
            "name": self.name,
            "description": self.description,
            "fix": self.fix,
            "violation": self.violation,
        }


# ── Resolution ────────────────────────────────────────────────────


@dataclass(frozen=True)
class ResolutionCandidate:
    solution: Solution
    pattern_id: str
    pattern_name: str
    score: float
    language_scoped: bool

    def to_dict(self) -> Dict[str, Any]:
        data = self.solution.to_dict()
        data.update(
            {
                "pattern_name": self.pattern_name,
                "score": self.score,
                "language_scoped": self.language_scoped,
            }
        )
        return data


@dataclass(frozen=True)
class ValidationStep:
    description: str
    command: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"description": self.description, "command": self.command}


@dataclass(frozen=True)
class Resolution:
    error_id: str
    candidates: Tuple[ResolutionCandidate, ...]
    recommended_approach: str
    validation_steps: Tuple[ValidationStep, ...]
    estimated_minutes: int = 0

    @property
    def primary(self) -> Optional[ResolutionCandidate]:
        return self.candidates[0] if self.candidates else None

    @property
    def alternatives(self) -> Tuple[ResolutionCandidate, ...]:
        return self.candidates[1:]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_id": self.error_id,
            "candidates": [c.to_dict() for c in self.candidates],
            "recommended_approach": self.recommended_approach,
            "validation_steps": [s.to_dict() for s in self.validation_steps],
            "estimated_minutes": self.estimated_minutes,
        }


# ── Prevention ────────────────────────────────────────────────────


@dataclass(frozen=True)
class PreventionStrategy:
    id: str
    category: Category
    title: str
    description: str
    tools: Tuple[str, ...]
    steps: Tuple[str, ...]
    tradeoffs: str
    benefits: Tuple[str, ...] = ()
    config_example: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "category": self.category.value,
            "title": self.title,
            "description": self.description,
            "tools": list(self.tools),
            "steps": list(self.steps),
            "tradeoffs": self.tradeoffs,
            "benefits": list(self.benefits),
            "config_example": self.config_example,
        }


@dataclass(frozen=True)
class TradeoffEntry:
    strategy_id: str
    strategy: str
    tradeoffs: str
    benefits: Tuple[str, ...]
    effort: str
    impact: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "strategy_id": self.strategy_id,
            "strategy": self.strategy,
            "tradeoffs": self.tradeoffs,
            "benefits": list(self.benefits),
            "effort": self.effort,
            "impact": self.impact,
        }


# ── Metrics ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class MetricsSnapshot:
    frequency: Dict[str, Any]
    trends: Dict[str, Any]
    common_categories: List[Dict[str, Any]]
    resolution_times: Dict[str, Any]
    suggestions: List[Dict[str, Any]]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "frequency": self.frequency,
            "trends": self.trends,
            "common_categories": self.common_categories,
            "resolution_times": self.resolution_times,
            "suggestions": self.suggestions,
        }


# ── Error information ─────────────────────────────────────────────


@dataclass(frozen=True)
class CategoryDescription:
    title: str
    description: str
    common_causes: Tuple[str, ...]


@dataclass(frozen=True)
class DiagnosticStep:
    step: int
    action: str
    question: str

    def to_dict(self) -> Dict[str, Any]:
        return {"step": self.step, "action": self.action, "question": self.question}


@dataclass(frozen=True)
class RelatedError:
    pattern_id: str
    name: str
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return {"pattern_id": self.pattern_id, "name": self.name, "description": self.description}


@dataclass(frozen=True)
class ErrorExplanation:
    """Human-readable account of one error. ``pattern_id`` is the best
    matching knowledge-base pattern, if any."""

    title: str
    summary: str
    description: str
    location: str
    causes: Tuple[str, ...]
    impact: str
    urgency: str
    pattern_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "summary": self.summary,
            "description": self.description,
            "location": self.location,
            "causes": list(self.causes),
            "impact": self.impact,
            "urgency": self.urgency,
            "pattern_id": self.pattern_id,
        }


@dataclass(frozen=True)
class ErrorInformation:
    error_id: str
    explanation: ErrorExplanation
    examples: Tuple[CodeExample, ...]
    diagnostic_steps: Tuple[DiagnosticStep, ...]
    related_errors: Tuple[RelatedError, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_id": self.error_id,
            "explanation": self.explanation.to_dict(),
            "examples": [{"incorrect": e.incorrect, "correct": e.correct} for e in self.examples],
            "diagnostic_steps": [s.to_dict() for s in self.diagnostic_steps],
            "related_errors": [r.to_dict() for r in self.related_errors],
        }
