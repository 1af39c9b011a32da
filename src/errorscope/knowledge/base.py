"""Knowledge base: error patterns, remediation recipes and best practices."""

from __future__ import annotations

import logging
import re
import threading
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ..analyzers import detect_language
from ..exceptions import ValidationError
from ..models import (
    ANY_LANGUAGE,
    BestPractice,
    Category,
    CodeExample,
    ErrorRecord,
    Pattern,
    PatternMatchers,
    Solution,
)
from . import catalog

logger = logging.getLogger(__name__)

# Languages whose patterns also apply to another language.
LANGUAGE_FAMILIES: Dict[str, tuple[str, ...]] = {"typescript": ("javascript",)}

_TOKEN = re.compile(r"[a-z0-9_]+")


def languages_for(language: Optional[str]) -> tuple[str, ...]:
    """Pattern languages applicable to ``language``, most specific first."""
    if not language:
        return (ANY_LANGUAGE,)
    language = language.lower()
    return (language,) + LANGUAGE_FAMILIES.get(language, ()) + (ANY_LANGUAGE,)


def keyword_matches(keyword: str, text: str) -> bool:
    """Case-insensitive regex search; invalid regexes fall back to substring."""
    try:
        return re.search(keyword, text, re.IGNORECASE) is not None
    except re.error:
        return keyword.lower() in text.lower()


def record_language(record: ErrorRecord) -> Optional[str]:
    return record.language or detect_language(record.location.file_path)


@dataclass(frozen=True)
class BestPracticeViolation:
    practice: BestPractice
    line: int
    context: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rule": self.practice.id,
            "name": self.practice.name,
            "description": self.practice.description,
            "fix": self.practice.fix,
            "line": self.line,
            "context": self.context,
        }


class KnowledgeBase:
    """Read-mostly catalog of patterns, solutions and best practices.

    Mutations (``add_*``/``import_data``) take a lock; reads return copies.
    """

    def __init__(
        self,
        patterns: Optional[Iterable[Pattern]] = None,
        solutions: Optional[Iterable[Solution]] = None,
        best_practices: Optional[Iterable[BestPractice]] = None,
        include_builtin: bool = True,
    ) -> None:
        self._lock = threading.RLock()
        self._patterns: Dict[str, Pattern] = {}
        self._solutions: Dict[str, List[Solution]] = defaultdict(list)
        self._practices: Dict[str, List[BestPractice]] = defaultdict(list)

        if include_builtin:
            self._load(catalog.PATTERNS, catalog.SOLUTIONS, catalog.BEST_PRACTICES)
        self._load(patterns or (), solutions or (), best_practices or ())

    def _load(
        self,
        patterns: Iterable[Pattern],
        solutions: Iterable[Solution],
        practices: Iterable[BestPractice],
    ) -> None:
        for pattern in patterns:
            self.add_pattern(pattern)
        for solution in solutions:
            self.add_solution(solution)
        for practice in practices:
            self.add_best_practice(practice)

    # ── Patterns ──────────────────────────────────────────────────

    def get_all_patterns(self) -> List[Pattern]:
        with self._lock:
            return list(self._patterns.values())

    def get_pattern(self, pattern_id: str) -> Optional[Pattern]:
        with self._lock:
            return self._patterns.get(pattern_id)

    def get_patterns_by_language(self, language: str) -> List[Pattern]:
        """Patterns for ``language`` plus language-independent ones."""
        wanted = set(languages_for(language))
        return [p for p in self.get_all_patterns() if p.language in wanted]

    def search_patterns(self, query: str) -> List[Pattern]:
        """Rank patterns by how many query tokens appear in their name,
        description, keywords or causes."""
        tokens = set(_TOKEN.findall((query or "").lower()))
        if not tokens:
            return []

        scored = []
        for pattern in self.get_all_patterns():
            haystack = " ".join(
                [pattern.id, pattern.name, pattern.description]
                + list(pattern.matchers.keywords)
                + list(pattern.common_causes)
            ).lower()
            words = set(_TOKEN.findall(haystack))
            score = sum(1 for token in tokens if token in words or token in haystack)
            if score:
                scored.append((score, pattern))
        scored.sort(key=lambda item: (-item[0], item[1].id))
        return [pattern for _score, pattern in scored]

    def matches(self, pattern: Pattern, record: ErrorRecord) -> bool:
        """Whether a pattern's matchers accept an error record."""
        if pattern.matchers.categories and record.category not in pattern.matchers.categories:
            return False
        if pattern.language not in languages_for(record_language(record)):
            return False
        if not pattern.matchers.keywords:
            return True
        text = " ".join(filter(None, [record.message, record.rule, record.location.context]))
        return any(keyword_matches(k, text) for k in pattern.matchers.keywords)

    def find_patterns(self, record: ErrorRecord) -> List[Pattern]:
        """Patterns accepting ``record``: language-scoped first, then by id.

        A pattern whose matchers raise is skipped with a warning.
        """
        found = []
        for pattern in self.get_all_patterns():
            try:
                if self.matches(pattern, record):
                    found.append(pattern)
            except Exception as e:
                logger.warning(f"Skipping pattern {pattern.id}: {e}")
        found.sort(key=lambda p: (not p.is_language_scoped, p.id))
        return found

    def add_pattern(self, pattern: Pattern) -> None:
        if not isinstance(pattern, Pattern):
            raise ValidationError("pattern", "expected a Pattern")
        if not pattern.id or not pattern.name:
            raise ValidationError("pattern", "id and name are required")
        with self._lock:
            if pattern.id in self._patterns:
                raise ValidationError("pattern.id", f"duplicate pattern id {pattern.id!r}")
            self._patterns[pattern.id] = pattern

    # ── Solutions ─────────────────────────────────────────────────

    def get_solutions(self, pattern_id: str) -> List[Solution]:
        with self._lock:
            return list(self._solutions.get(pattern_id, ()))

    def add_solution(self, solution: Solution) -> None:
        if not isinstance(solution, Solution):
            raise ValidationError("solution", "expected a Solution")
        if not solution.id or not solution.pattern_id:
            raise ValidationError("solution", "id and pattern_id are required")
        if not 0.0 <= solution.confidence <= 1.0:
            raise ValidationError("solution.confidence", "must be between 0 and 1")
        with self._lock:
            existing = self._solutions[solution.pattern_id]
            if any(s.id == solution.id for s in existing):
                raise ValidationError("solution.id", f"duplicate solution id {solution.id!r}")
            existing.append(solution)

    # ── Best practices ────────────────────────────────────────────

    def get_best_practices(self, language: str) -> List[BestPractice]:
        if not language:
            return []
        with self._lock:
            result: List[BestPractice] = []
            for lang in languages_for(language)[:-1]:
                result.extend(self._practices.get(lang, ()))
            return result

    def check_best_practices(self, code: str, language: str) -> List[BestPracticeViolation]:
        """First violating line of each practice that carries a violation regex."""
        violations = []
        lines = code.splitlines()
        for practice in self.get_best_practices(language):
            if not practice.violation:
                continue
            try:
                regex = re.compile(practice.violation)
            except re.error as e:
                logger.warning(f"Skipping best practice {practice.id}: {e}")
                continue
            for lineno, text in enumerate(lines, start=1):
                if regex.search(text):
                    violations.append(BestPracticeViolation(practice, lineno, text.strip()))
                    break
        return violations

    def add_best_practice(self, practice: BestPractice) -> None:
        if not isinstance(practice, BestPractice):
            raise ValidationError("best_practice", "expected a BestPractice")
        if not practice.id or not practice.language:
            raise ValidationError("best_practice", "id and language are required")
        with self._lock:
            self._practices[practice.language.lower()].append(practice)

    # ── Import / export ───────────────────────────────────────────

    def export_data(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "patterns": [p.to_dict() for p in self._patterns.values()],
                "solutions": [s.to_dict() for group in self._solutions.values() for s in group],
                "best_practices": [b.to_dict() for group in self._practices.values() for b in group],
                "exported_at": datetime.now(timezone.utc).isoformat(),
            }

    def import_data(self, data: Mapping[str, Any], merge: bool = True) -> Dict[str, int]:
        """Load exported data. With ``merge=False`` the current contents are
        replaced; with merging, entries whose ids already exist are skipped.

        Raises:
            ValidationError: If an entry is malformed
        """
        if not isinstance(data, Mapping):
            raise ValidationError("data", "expected an object")
        patterns = [_pattern_from(d) for d in data.get("patterns", [])]
        solutions = [_solution_from(d) for d in data.get("solutions", [])]
        practices = [_practice_from(d) for d in data.get("best_practices", [])]

        counts = {"patterns": 0, "solutions": 0, "best_practices": 0}
        with self._lock:
            if not merge:
                self._patterns.clear()
                self._solutions.clear()
                self._practices.clear()
            for pattern in patterns:
                if pattern.id not in self._patterns:
                    self.add_pattern(pattern)
                    counts["patterns"] += 1
            for solution in solutions:
                if not any(s.id == solution.id for s in self._solutions.get(solution.pattern_id, ())):
                    self.add_solution(solution)
                    counts["solutions"] += 1
            for practice in practices:
                known = self._practices.get(practice.language.lower(), ())
                if not any(b.id == practice.id for b in known):
                    self.add_best_practice(practice)
                    counts["best_practices"] += 1
        return counts


def _require(data: Mapping[str, Any], key: str, kind: str) -> Any:
    if not isinstance(data, Mapping) or not data.get(key):
        raise ValidationError(f"{kind}.{key}", "required")
    return data[key]


def _pattern_from(data: Mapping[str, Any]) -> Pattern:
    matchers = data.get("matchers") or {}
    try:
        categories = tuple(Category.parse(c) for c in matchers.get("categories", ()))
    except ValueError as e:
        raise ValidationError("pattern.matchers.categories", str(e))
    return Pattern(
        id=_require(data, "id", "pattern"),
        name=_require(data, "name", "pattern"),
        language=data.get("language") or ANY_LANGUAGE,
        matchers=PatternMatchers(keywords=tuple(matchers.get("keywords", ())), categories=categories),
        description=data.get("description", ""),
        common_causes=tuple(data.get("common_causes", ())),
        related=tuple(data.get("related", ())),
    )


def _solution_from(data: Mapping[str, Any]) -> Solution:
    try:
        confidence = float(data.get("confidence", 0.5))
        minutes = int(data.get("estimated_minutes", 10))
    except (TypeError, ValueError):
        raise ValidationError("solution", "confidence and estimated_minutes must be numbers")
    return Solution(
        id=_require(data, "id", "solution"),
        pattern_id=_require(data, "pattern_id", "solution"),
        title=data.get("title", ""),
        description=data.get("description", ""),
        steps=tuple(data.get("steps", ())),
        confidence=confidence,
        difficulty=data.get("difficulty", "medium"),
        estimated_minutes=minutes,
        tools=tuple(data.get("tools", ())),
        references=tuple(data.get("references", ())),
        examples=tuple(
            CodeExample(incorrect=e.get("incorrect", ""), correct=e.get("correct", ""))
            for e in data.get("examples", ())
        ),
    )


def _practice_from(data: Mapping[str, Any]) -> BestPractice:
    return BestPractice(
        id=_require(data, "id", "best_practice"),
        language=_require(data, "language", "best_practice"),
        name=data.get("name", ""),
        description=data.get("description", ""),
        fix=data.get("fix", ""),
        violation=data.get("violation"),
    )
