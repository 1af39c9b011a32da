"""Analysis engine: runs every registered analyzer over a scan target.

Scan:
  validate target
    → build ScanTarget (shared ignore list, size limit, optional cache)
    → run analyzers (sequential, or fanned out on a thread pool)
    → analyzer failures become synthetic records
    → dedupe by id, stable sort
    → partition into errors / warnings, compute metrics
"""

from __future__ import annotations

import logging
import os
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from ..analyzers import Analyzer, ScanTarget, default_analyzers, is_analyzer
from ..cache import AnalysisCache
from ..config import AnalysisConfig
from ..exceptions import AnalyzerFailure, PathError, ValidationError
from ..models import (
    Category,
    ErrorRecord,
    Location,
    ScanMetrics,
    ScanResult,
    Severity,
    make_error_id,
    utcnow,
)

logger = logging.getLogger(__name__)


def _sort_key(record: ErrorRecord) -> tuple:
    loc = record.location
    return (loc.file_path, loc.line, loc.column or 0, record.detected_by, record.id)


class AnalysisEngine:
    """Holds the analyzer registry and executes scans.

    Registration is guarded by a lock; each scan works on a snapshot of the
    registry taken when it starts.
    """

    def __init__(
        self,
        config: Optional[AnalysisConfig] = None,
        analyzers: Optional[Iterable[Analyzer]] = None,
        cache: Optional[AnalysisCache] = None,
    ):
        self.config = config or AnalysisConfig()
        self._lock = threading.Lock()
        self._analyzers: List[Analyzer] = []

        if cache is None and self.config.cache_enabled:
            cache = AnalysisCache(
                cache_dir=self.config.cache_dir,
                ttl_hours=self.config.cache_ttl_hours,
            )
        self.cache = cache

        for analyzer in analyzers or ():
            self.register_analyzer(analyzer)

    @classmethod
    def with_default_analyzers(
        cls, config: Optional[AnalysisConfig] = None, cache: Optional[AnalysisCache] = None
    ) -> "AnalysisEngine":
        return cls(config=config, analyzers=default_analyzers(), cache=cache)

    # ── Registry ──────────────────────────────────────────────────

    @property
    def analyzers(self) -> Tuple[Analyzer, ...]:
        with self._lock:
            return tuple(self._analyzers)

    def register_analyzer(self, analyzer: Analyzer) -> None:
        """Add an analyzer. An analyzer with the same name is replaced in place."""
        if not is_analyzer(analyzer):
            raise ValidationError(
                "analyzer", f"{type(analyzer).__name__} has no name or analyze() method"
            )
        with self._lock:
            for i, existing in enumerate(self._analyzers):
                if existing.name == analyzer.name:
                    self._analyzers[i] = analyzer
                    logger.debug(f"Replaced analyzer {analyzer.name}")
                    return
            self._analyzers.append(analyzer)
        logger.debug(f"Registered analyzer {analyzer.name}")

    def unregister_analyzer(self, name: str) -> bool:
        with self._lock:
            for i, existing in enumerate(self._analyzers):
                if existing.name == name:
                    del self._analyzers[i]
                    return True
        return False

    # ── Scans ─────────────────────────────────────────────────────

    def scan_project(
        self, project_path: "str | Path", extra_ignore: Sequence[str] = ()
    ) -> ScanResult:
        """Scan every analyzable file under a directory.

        Raises:
            PathError: If the path is not an existing, readable directory
        """
        path = Path(project_path)
        if not path.exists():
            raise PathError(path, "does not exist")
        if not path.is_dir():
            raise PathError(path, "not a directory")
        if not os.access(path, os.R_OK | os.X_OK):
            raise PathError(path, "not readable")
        return self._scan(self._make_target(path, is_file=False, extra_ignore=extra_ignore))

    def scan_file(self, file_path: "str | Path") -> ScanResult:
        """Scan one file.

        Raises:
            PathError: If the path is not an existing, readable regular file
        """
        path = Path(file_path)
        if not path.exists():
            raise PathError(path, "does not exist")
        if not path.is_file():
            raise PathError(path, "not a regular file")
        if not os.access(path, os.R_OK):
            raise PathError(path, "not readable")
        return self._scan(self._make_target(path, is_file=True))

    def _make_target(self, path: Path, is_file: bool, extra_ignore: Sequence[str] = ()) -> ScanTarget:
        return ScanTarget(
            path=path,
            is_file=is_file,
            ignore_patterns=tuple(self.config.ignore_patterns) + tuple(extra_ignore),
            max_file_size_bytes=self.config.max_file_size_bytes,
            cache=self.cache,
            config_hash=self.config.fingerprint(),
        )

    def _scan(self, target: ScanTarget) -> ScanResult:
        started = time.perf_counter()
        analyzers = self.analyzers
        logger.debug(f"Scanning {target.path} with {len(analyzers)} analyzers")

        if self.config.workers > 1 and len(analyzers) > 1:
            with ThreadPoolExecutor(
                max_workers=min(self.config.workers, len(analyzers)),
                thread_name_prefix="errorscope-analyzer",
            ) as pool:
                outcomes = list(pool.map(lambda a: self._run_one(a, target), analyzers))
        else:
            outcomes = [self._run_one(a, target) for a in analyzers]

        unique: dict[str, ErrorRecord] = {}
        failed = 0
        for records, ok in outcomes:
            if not ok:
                failed += 1
            for record in records:
                unique.setdefault(record.id, record)

        ordered = sorted(unique.values(), key=_sort_key)
        errors = tuple(r for r in ordered if r.is_error)
        warnings = tuple(r for r in ordered if not r.is_error)
        metrics = ScanMetrics.from_records(
            ordered, analyzers_run=len(analyzers), analyzers_failed=failed
        )
        duration = time.perf_counter() - started
        logger.info(
            f"Scanned {target.path}: {metrics.errors} errors, {metrics.warnings} warnings "
            f"in {duration:.2f}s"
        )
        return ScanResult(
            errors=errors,
            warnings=warnings,
            metrics=metrics,
            timestamp=utcnow(),
            target=str(target.path),
            duration_seconds=duration,
        )

    def _run_one(self, analyzer: Analyzer, target: ScanTarget) -> Tuple[List[ErrorRecord], bool]:
        try:
            records = analyzer.analyze(target)
            if not isinstance(records, (list, tuple)) or not all(
                isinstance(r, ErrorRecord) for r in records
            ):
                raise AnalyzerFailure(analyzer.name, "analyze() must return a list of ErrorRecord")
            return list(records), True
        except Exception as e:
            reason = e.reason if isinstance(e, AnalyzerFailure) else f"{type(e).__name__}: {e}"
            logger.warning(f"Analyzer {analyzer.name} failed on {target.path}: {reason}")
            return [_failure_record(analyzer.name, target, reason)], False


def _failure_record(analyzer_name: str, target: ScanTarget, reason: str) -> ErrorRecord:
    location = Location(file_path=str(target.path), line=1)
    message = f"Analyzer {analyzer_name} failed: {reason}"
    return ErrorRecord(
        id=make_error_id(analyzer_name, "analyzer_failure", location, message),
        category=Category.ANALYZER_FAILURE,
        severity=Severity.ERROR,
        location=location,
        message=message,
        detected_by=analyzer_name,
        timestamp=utcnow(),
        rule="analyzer_failure",
    )
