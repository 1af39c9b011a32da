"""Error information service: explanations, impact, diagnostics and related
patterns for a single error record."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..exceptions import ValidationError
from ..knowledge import KnowledgeBase, record_language
from ..models import (
    Category,
    CategoryDescription,
    CodeExample,
    DiagnosticStep,
    ErrorExplanation,
    ErrorInformation,
    ErrorRecord,
    Location,
    Pattern,
    RelatedError,
)
from . import catalog

logger = logging.getLogger(__name__)

MAX_RELATED = 5
MAX_EXAMPLES = 3


def format_location(location: Optional[Location]) -> str:
    if location is None:
        return "Unknown location"
    formatted = str(location)
    if location.context and location.context.strip():
        formatted += f"\n  > {location.context.strip()}"
    return formatted


def as_record(error: Any) -> ErrorRecord:
    """Accept an ErrorRecord or its dict form.

    Raises:
        ValidationError: If the input is neither, or the dict is malformed
    """
    if isinstance(error, ErrorRecord):
        return error
    if isinstance(error, Mapping):
        try:
            return ErrorRecord.from_dict(error)
        except (TypeError, ValueError) as e:
            raise ValidationError("error", str(e))
    raise ValidationError("error", f"expected an error record, got {type(error).__name__}")


class ErrorInformationService:
    """Builds explanations from the knowledge base, falling back to
    per-category descriptions when no pattern matches."""

    def __init__(
        self,
        knowledge_base: Optional[KnowledgeBase] = None,
        descriptions: Optional[Mapping[Category, CategoryDescription]] = None,
        diagnostics: Optional[Mapping[str, Tuple[DiagnosticStep, ...]]] = None,
    ) -> None:
        self.knowledge_base = knowledge_base or KnowledgeBase()
        self.descriptions: Dict[Category, CategoryDescription] = dict(catalog.DESCRIPTIONS)
        self.descriptions.update(descriptions or {})
        self.pattern_steps: Dict[str, Tuple[DiagnosticStep, ...]] = dict(catalog.PATTERN_STEPS)
        self.pattern_steps.update(diagnostics or {})

    def _patterns(self, record: ErrorRecord) -> List[Pattern]:
        return self.knowledge_base.find_patterns(record)

    def get_description(self, category: "str | Category") -> CategoryDescription:
        try:
            category = Category.parse(category)
        except ValueError:
            return catalog.UNKNOWN_DESCRIPTION
        return self.descriptions.get(category, catalog.UNKNOWN_DESCRIPTION)

    # ── Assessments ───────────────────────────────────────────────

    def assess_impact(self, error: Any) -> str:
        return catalog.IMPACT[as_record(error).severity]

    def assess_urgency(self, error: Any) -> str:
        """Security issues are always immediate; otherwise by severity."""
        record = as_record(error)
        if record.category is Category.SECURITY:
            return catalog.SECURITY_URGENCY
        return catalog.URGENCY[record.severity]

    # ── Explanation ───────────────────────────────────────────────

    def generate_explanation(self, error: Any) -> ErrorExplanation:
        record = as_record(error)
        patterns = self._patterns(record)
        return self._explain(record, patterns[0] if patterns else None)

    def _explain(self, record: ErrorRecord, pattern: Optional[Pattern]) -> ErrorExplanation:
        fallback = self.get_description(record.category)
        causes = pattern.common_causes if pattern and pattern.common_causes else fallback.common_causes
        return ErrorExplanation(
            title=pattern.name if pattern else fallback.title,
            summary=record.message,
            description=pattern.description if pattern else fallback.description,
            location=format_location(record.location),
            causes=tuple(causes),
            impact=catalog.IMPACT[record.severity],
            urgency=self.assess_urgency(record),
            pattern_id=pattern.id if pattern else None,
        )

    # ── Diagnostics ───────────────────────────────────────────────

    def get_diagnostic_steps(self, error: Any) -> Tuple[DiagnosticStep, ...]:
        """Checklist for the first matched pattern that has one, then the
        error's category, then a generic checklist."""
        record = as_record(error)
        return self._diagnose(record, self._patterns(record))

    def _diagnose(self, record: ErrorRecord, patterns: List[Pattern]) -> Tuple[DiagnosticStep, ...]:
        for pattern in patterns:
            steps = self.pattern_steps.get(pattern.id)
            if steps:
                return steps
        return catalog.CATEGORY_STEPS.get(record.category, catalog.GENERIC_STEPS)

    # ── Related patterns and examples ─────────────────────────────

    def find_related_errors(self, error: Any, limit: int = MAX_RELATED) -> List[RelatedError]:
        """Patterns the matched ones declare as related; when they declare
        none, other patterns of the same category for the error's language.

        Unknown related ids are skipped.
        """
        record = as_record(error)
        return self._related(record, self._patterns(record), limit)

    def _related(
        self, record: ErrorRecord, patterns: List[Pattern], limit: int
    ) -> List[RelatedError]:
        seen = {p.id for p in patterns}
        related: List[Pattern] = []
        for pattern in patterns:
            for related_id in pattern.related:
                if related_id in seen:
                    continue
                seen.add(related_id)
                found = self.knowledge_base.get_pattern(related_id)
                if found is None:
                    logger.debug(f"Pattern {pattern.id} lists unknown related id {related_id!r}")
                    continue
                related.append(found)

        if not related:
            language = record_language(record)
            candidates = (
                self.knowledge_base.get_patterns_by_language(language)
                if language
                else self.knowledge_base.get_all_patterns()
            )
            related = sorted(
                (
                    p
                    for p in candidates
                    if p.id not in seen and record.category in p.matchers.categories
                ),
                key=lambda p: (not p.is_language_scoped, p.id),
            )

        return [RelatedError(p.id, p.name, p.description) for p in related[:limit]]

    def get_code_examples(self, error: Any) -> List[CodeExample]:
        record = as_record(error)
        return self._examples(self._patterns(record))

    def _examples(self, patterns: List[Pattern]) -> List[CodeExample]:
        examples: List[CodeExample] = []
        for pattern in patterns:
            for solution in self.knowledge_base.get_solutions(pattern.id):
                for example in solution.examples:
                    if example not in examples:
                        examples.append(example)
        return examples[:MAX_EXAMPLES]

    # ── Everything ────────────────────────────────────────────────

    def generate_complete_info(self, error: Any) -> ErrorInformation:
        """Explanation, examples, diagnostics and related patterns, matching
        the knowledge base once."""
        record = as_record(error)
        patterns = self._patterns(record)
        return ErrorInformation(
            error_id=record.id,
            explanation=self._explain(record, patterns[0] if patterns else None),
            examples=tuple(self._examples(patterns)),
            diagnostic_steps=self._diagnose(record, patterns),
            related_errors=tuple(self._related(record, patterns, MAX_RELATED)),
        )
