"""Analyzer contract and the file-walking helpers shared by analyzers."""

from __future__ import annotations

import fnmatch
import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Iterator, List, Optional, Sequence

from ..models import Category, ErrorRecord, Location, Severity, make_error_id, utcnow
from .languages import LANGUAGES, detect_language

if TYPE_CHECKING:
    from ..cache import AnalysisCache

logger = logging.getLogger(__name__)


def is_ignored(rel_path: str, patterns: Sequence[str]) -> bool:
    """True when any path component, or the whole relative path, matches a pattern."""
    parts = rel_path.split("/")
    for pattern in patterns:
        if fnmatch.fnmatch(rel_path, pattern):
            return True
        for part in parts:
            if part == pattern or fnmatch.fnmatch(part, pattern):
                return True
    return False


@dataclass(frozen=True)
class ScanTarget:
    """What an analyzer is asked to look at.

    ``path`` is either a directory (project scan) or a single file. The
    ignore list is shared by every analyzer of one scan.
    """

    path: Path
    is_file: bool = False
    ignore_patterns: tuple[str, ...] = ()
    max_file_size_bytes: int = 1024 * 1024
    cache: Optional["AnalysisCache"] = field(default=None, compare=False)
    config_hash: str = ""

    def display_path(self, file_path: Path) -> str:
        """Path as it appears in records: relative to the project root."""
        if self.is_file:
            return str(self.path)
        return file_path.relative_to(self.path).as_posix()

    def iter_files(self, extensions: Optional[Iterable[str]] = None) -> Iterator[Path]:
        """Yield analyzable files in sorted order.

        When ``extensions`` is given, only files whose language owns one of
        those extensions are yielded.
        """
        wanted = set(extensions) if extensions is not None else None

        if self.is_file:
            if self._accepts(self.path, wanted):
                yield self.path
            return

        for dirpath, dirnames, filenames in os.walk(self.path):
            current = Path(dirpath)
            rel_dir = current.relative_to(self.path).as_posix()
            kept = []
            for name in sorted(dirnames):
                rel = name if rel_dir == "." else f"{rel_dir}/{name}"
                if name.startswith(".") or is_ignored(rel, self.ignore_patterns):
                    continue
                kept.append(name)
            dirnames[:] = kept

            for name in sorted(filenames):
                file_path = current / name
                rel = name if rel_dir == "." else f"{rel_dir}/{name}"
                if is_ignored(rel, self.ignore_patterns):
                    continue
                if self._accepts(file_path, wanted):
                    yield file_path

    def _accepts(self, file_path: Path, wanted: Optional[set[str]]) -> bool:
        language = detect_language(file_path)
        if language is None:
            return False
        if wanted is not None and not wanted.intersection(LANGUAGES[language].extensions):
            return False
        try:
            size = file_path.stat().st_size
        except OSError as e:
            logger.debug(f"Skipping {file_path}: {e}")
            return False
        if size > self.max_file_size_bytes:
            logger.debug(f"Skipping {file_path}: {size} bytes exceeds limit")
            return False
        return True


class Analyzer(ABC):
    """One independent analysis dimension.

    ``name`` is stable and becomes ``detected_by`` on every record the
    analyzer emits. ``analyze`` may raise; the engine turns any failure into
    a synthetic record.
    """

    name: str = ""

    @abstractmethod
    def analyze(self, target: ScanTarget) -> List[ErrorRecord]:
        ...

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r}>"


def is_analyzer(obj: object) -> bool:
    """Structural check used when registering third-party analyzers."""
    name = getattr(obj, "name", None)
    return isinstance(name, str) and bool(name.strip()) and callable(getattr(obj, "analyze", None))


class FileAnalyzer(Analyzer):
    """Analyzer that inspects files one at a time.

    Subclasses set ``languages`` and implement ``analyze_file``.
    """

    languages: tuple[str, ...] = ()

    @property
    def supported_extensions(self) -> tuple[str, ...]:
        exts: list[str] = []
        for language in self.languages:
            exts.extend(LANGUAGES[language].extensions)
        return tuple(exts)

    def analyze(self, target: ScanTarget) -> List[ErrorRecord]:
        records: List[ErrorRecord] = []
        for file_path in target.iter_files(self.supported_extensions):
            shown = target.display_path(file_path)
            cache_key = None
            if target.cache is not None:
                cache_key = target.cache.file_key(
                    file_path, self.name, target.config_hash, display_path=shown
                )
                cached = target.cache.get(cache_key)
                if cached is not None:
                    records.extend(cached)
                    continue

            try:
                content = file_path.read_text(encoding="utf-8")
            except UnicodeDecodeError:
                logger.debug(f"{self.name}: skipping undecodable file {file_path}")
                continue

            language = detect_language(file_path)
            found = self.analyze_file(shown, content, language)
            if cache_key is not None:
                target.cache.set(cache_key, found)
            records.extend(found)
        return records

    @abstractmethod
    def analyze_file(self, file_path: str, content: str, language: str) -> List[ErrorRecord]:
        ...

    def make_record(
        self,
        file_path: str,
        line: int,
        message: str,
        category: Category,
        severity: Severity,
        rule: Optional[str] = None,
        column: Optional[int] = None,
        context: Optional[str] = None,
        language: Optional[str] = None,
    ) -> ErrorRecord:
        location = Location(
            file_path=file_path,
            line=max(1, line),
            column=column,
            context=context.strip() if context else None,
        )
        return ErrorRecord(
            id=make_error_id(self.name, rule, location, message),
            category=category,
            severity=severity,
            location=location,
            message=message,
            detected_by=self.name,
            timestamp=utcnow(),
            rule=rule,
            language=language,
        )
