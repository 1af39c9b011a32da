"""Resolution engine: turns an error record into ranked remediation options."""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional

from ..exceptions import ValidationError
from ..knowledge import KnowledgeBase, record_language
from ..models import ErrorRecord, Resolution, ResolutionCandidate, Severity
from .validation import build_validation_steps, generic_validation_steps

logger = logging.getLogger(__name__)

MANUAL_INVESTIGATION = (
    "Manual investigation required. Review the error details and consult documentation."
)


def _candidate_key(candidate: ResolutionCandidate) -> tuple:
    return (
        -candidate.score,
        not candidate.language_scoped,
        candidate.pattern_id,
        candidate.solution.id,
    )


class ResolutionEngine:
    """Matches errors against the knowledge base and ranks their solutions."""

    def __init__(self, knowledge_base: Optional[KnowledgeBase] = None) -> None:
        self.knowledge_base = knowledge_base or KnowledgeBase()

    def _coerce(self, error: Any) -> Optional[ErrorRecord]:
        if isinstance(error, ErrorRecord):
            return error
        if isinstance(error, Mapping):
            try:
                return ErrorRecord.from_dict(error)
            except (ValidationError, TypeError, ValueError) as e:
                logger.warning(f"Cannot resolve malformed error: {e}")
                return None
        logger.warning(f"Cannot resolve {type(error).__name__}; expected an error record")
        return None

    def generate_resolutions(self, error: Any) -> List[ResolutionCandidate]:
        """Ranked candidates for an error; ``[]`` when nothing matches or the
        input is malformed.

        Order: confidence (desc), language-scoped before language-independent,
        pattern id, solution id. A solution reachable through several
        patterns appears once, at its best rank.
        """
        record = self._coerce(error)
        if record is None:
            return []

        candidates = []
        for pattern in self.knowledge_base.find_patterns(record):
            for solution in self.knowledge_base.get_solutions(pattern.id):
                candidates.append(
                    ResolutionCandidate(
                        solution=solution,
                        pattern_id=pattern.id,
                        pattern_name=pattern.name,
                        score=solution.confidence,
                        language_scoped=pattern.is_language_scoped,
                    )
                )

        candidates.sort(key=_candidate_key)
        seen: set[str] = set()
        ranked = []
        for candidate in candidates:
            if candidate.solution.id in seen:
                continue
            seen.add(candidate.solution.id)
            ranked.append(candidate)
        return ranked

    def generate_complete_resolution(self, error: Any) -> Resolution:
        """Primary fix, alternatives, recommended approach and validation steps."""
        record = self._coerce(error)
        if record is None:
            error_id = error.get("id", "") if isinstance(error, Mapping) else ""
            return Resolution(
                error_id=str(error_id or ""),
                candidates=(),
                recommended_approach=MANUAL_INVESTIGATION,
                validation_steps=tuple(generic_validation_steps()),
                estimated_minutes=0,
            )

        candidates = self.generate_resolutions(record)
        steps = build_validation_steps(record, record_language(record))
        return Resolution(
            error_id=record.id,
            candidates=tuple(candidates),
            recommended_approach=recommended_approach(record, candidates),
            validation_steps=tuple(steps),
            estimated_minutes=sum(c.solution.estimated_minutes for c in candidates),
        )


def recommended_approach(record: ErrorRecord, candidates: List[ResolutionCandidate]) -> str:
    if not candidates:
        return MANUAL_INVESTIGATION
    primary = candidates[0].solution
    if record.severity is Severity.CRITICAL:
        return f'Urgent: Apply "{primary.title}" immediately. This is a critical issue.'
    if primary.difficulty == "easy":
        return f'Quick fix available: "{primary.title}" ({primary.estimated_minutes} min)'
    return (
        f'Recommended: "{primary.title}". '
        f"Consider {len(candidates) - 1} alternative approaches."
    )
