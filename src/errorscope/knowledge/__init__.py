"""Error knowledge base."""

from .base import (
    BestPracticeViolation,
    KnowledgeBase,
    keyword_matches,
    languages_for,
    record_language,
)

__all__ = [
    "KnowledgeBase",
    "BestPracticeViolation",
    "keyword_matches",
    "languages_for",
    "record_language",
]
