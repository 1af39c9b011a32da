"""Analyzers: independent analysis dimensions run by the AnalysisEngine."""

from .base import Analyzer, FileAnalyzer, ScanTarget, is_analyzer, is_ignored
from .configuration import ConfigurationValidator
from .languages import (
    LANGUAGES,
    LanguageConfig,
    detect_language,
    get_all_known_extensions,
    get_language_config,
)
from .runtime import RuntimeAnalyzer
from .syntax import SyntaxAnalyzer


def default_analyzers() -> list[Analyzer]:
    """Fresh instances of the built-in analyzers, in registration order."""
    return [SyntaxAnalyzer(), RuntimeAnalyzer(), ConfigurationValidator()]


__all__ = [
    "Analyzer",
    "FileAnalyzer",
    "ScanTarget",
    "is_analyzer",
    "is_ignored",
    "SyntaxAnalyzer",
    "RuntimeAnalyzer",
    "ConfigurationValidator",
    "LanguageConfig",
    "LANGUAGES",
    "detect_language",
    "get_language_config",
    "get_all_known_extensions",
    "default_analyzers",
]
