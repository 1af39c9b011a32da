"""One monitoring session: debounce timer, rescan worker and latest result."""

from __future__ import annotations

import logging
import threading
from collections import deque
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Sequence, Tuple

from ..exceptions import ValidationError
from ..models import ErrorRecord, MonitorHandle, ScanResult, utcnow
from .watcher import Watcher

if TYPE_CHECKING:
    from ..analysis import AnalysisEngine

logger = logging.getLogger(__name__)

RECENT_CHANGES_LIMIT = 50
HISTORY_LIMIT = 1000
HISTORY_ACTIONS = ("added", "removed")

ScanListener = Callable[[MonitorHandle, ScanResult], None]


@dataclass(frozen=True)
class MonitorOptions:
    """Per-session settings. ``debounce_seconds=None`` uses the monitor default."""

    debounce_seconds: Optional[float] = None
    initial_scan: bool = False
    ignore_patterns: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.debounce_seconds is not None:
            if isinstance(self.debounce_seconds, bool) or not isinstance(self.debounce_seconds, (int, float)):
                raise ValidationError("debounce_seconds", "must be a number")
            if self.debounce_seconds < 0:
                raise ValidationError("debounce_seconds", "must be non-negative")
        if not isinstance(self.initial_scan, bool):
            raise ValidationError("initial_scan", "must be a boolean")


@dataclass(frozen=True)
class HistoryEntry:
    """An error appearing in (``added``) or leaving (``removed``) a session's
    active set between two consecutive rescans."""

    action: str
    record: ErrorRecord
    timestamp: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "action": self.action,
            "error": self.record.to_dict(),
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class SessionStatus:
    """Point-in-time view of a session. ``last_result`` is None until the
    first rescan completes."""

    handle: MonitorHandle
    last_result: Optional[ScanResult]
    last_error: Optional[str]
    scans_completed: int
    last_scan_time: Optional[datetime]
    pending_changes: int
    recent_changes: Tuple[str, ...] = field(default_factory=tuple)
    new_errors: Tuple[ErrorRecord, ...] = ()
    fixed_errors: Tuple[ErrorRecord, ...] = ()
    active_errors: int = 0
    errors_detected: int = 0
    errors_fixed: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "monitor": self.handle.to_dict(),
            "scanned": self.last_result is not None,
            "last_result": self.last_result.to_dict() if self.last_result else None,
            "last_error": self.last_error,
            "scans_completed": self.scans_completed,
            "last_scan_time": self.last_scan_time.isoformat() if self.last_scan_time else None,
            "pending_changes": self.pending_changes,
            "recent_changes": list(self.recent_changes),
            "new_errors": [r.to_dict() for r in self.new_errors],
            "fixed_errors": [r.to_dict() for r in self.fixed_errors],
            "active_errors": self.active_errors,
            "errors_detected": self.errors_detected,
            "errors_fixed": self.errors_fixed,
        }


class MonitorSession:
    """State and workers for one watched project.

    Threads touching a session: the watcher thread (``on_change``), the debounce
    timer thread (``_flush``), the single rescan worker (``_rescan``) and
    callers of ``status``/``stop``. All state is guarded by ``_lock``; once
    ``stop`` has run nothing changes any more.
    """

    def __init__(
        self,
        handle: MonitorHandle,
        engine: "AnalysisEngine",
        debounce_seconds: float,
        ignore_patterns: Sequence[str] = (),
        on_scan: Optional[ScanListener] = None,
    ) -> None:
        self.handle = handle
        self.engine = engine
        self.debounce_seconds = debounce_seconds
        self.ignore_patterns = tuple(ignore_patterns)
        self.on_scan = on_scan
        self.watcher: Optional[Watcher] = None

        self._lock = threading.RLock()
        self._stopped = False
        self._timer: Optional[threading.Timer] = None
        self._executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix=f"errorscope-rescan-{handle.id}"
        )
        self._pending: set[str] = set()
        self._recent: deque[str] = deque(maxlen=RECENT_CHANGES_LIMIT)
        self._last_result: Optional[ScanResult] = None
        self._last_error: Optional[str] = None
        self._scans_completed = 0
        self._last_scan_time: Optional[datetime] = None
        self._active: Dict[str, ErrorRecord] = {}
        self._history: deque[HistoryEntry] = deque(maxlen=HISTORY_LIMIT)
        self._new: Tuple[ErrorRecord, ...] = ()
        self._fixed: Tuple[ErrorRecord, ...] = ()
        self._errors_detected = 0
        self._errors_fixed = 0

    @property
    def project_path(self) -> Path:
        return Path(self.handle.project_path)

    @property
    def stopped(self) -> bool:
        with self._lock:
            return self._stopped

    @property
    def has_pending_timer(self) -> bool:
        with self._lock:
            return self._timer is not None

    # ── Change handling ───────────────────────────────────────────

    def on_change(self, paths: List[str]) -> None:
        """Record a change batch and restart the debounce window."""
        with self._lock:
            if self._stopped:
                return
            self._pending.update(paths)
            self._recent.extend(paths)
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.debounce_seconds, self._flush)
            self._timer.daemon = True
            self._timer.start()
        logger.debug(f"{self.handle.id}: {len(paths)} change(s), rescan in {self.debounce_seconds}s")

    def _flush(self) -> None:
        with self._lock:
            if self._stopped:
                return
            self._timer = None
            batch = sorted(self._pending)
            self._pending.clear()
            self._executor.submit(self._rescan, batch)

    def request_scan(self) -> None:
        """Queue a rescan immediately, bypassing the debounce window."""
        with self._lock:
            if self._stopped:
                return
            self._executor.submit(self._rescan, [])

    def _rescan(self, changed: List[str]) -> None:
        if self.stopped:
            return
        logger.info(f"{self.handle.id}: rescanning {self.project_path} ({len(changed)} changed)")
        try:
            result = self.engine.scan_project(self.project_path, extra_ignore=self.ignore_patterns)
        except Exception as e:
            logger.exception(f"{self.handle.id}: rescan of {self.project_path} failed")
            with self._lock:
                if not self._stopped:
                    self._last_error = f"{type(e).__name__}: {e}"
            return

        with self._lock:
            if self._stopped:
                return
            now = utcnow()
            self._apply_diff(result, now)
            self._last_result = result
            self._last_error = None
            self._scans_completed += 1
            self._last_scan_time = now
            handle = self.handle

        if self.on_scan is not None:
            try:
                self.on_scan(handle, result)
            except Exception:
                logger.exception(f"{self.handle.id}: scan listener failed")

    def _apply_diff(self, result: ScanResult, now: datetime) -> None:
        current = {record.id: record for record in result.records}
        added = tuple(r for rid, r in current.items() if rid not in self._active)
        removed = tuple(r for rid, r in self._active.items() if rid not in current)
        for record in removed:
            self._history.append(HistoryEntry("removed", record, now))
        for record in added:
            self._history.append(HistoryEntry("added", record, now))
        self._active = current
        self._new, self._fixed = added, removed
        self._errors_detected += len(added)
        self._errors_fixed += len(removed)
        if added or removed:
            logger.info(f"{self.handle.id}: {len(added)} new, {len(removed)} fixed")

    # ── History ───────────────────────────────────────────────────

    def history(
        self,
        since: Optional[datetime] = None,
        action: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[HistoryEntry]:
        """Added/removed entries, oldest first; ``limit`` keeps the newest."""
        if action is not None and action not in HISTORY_ACTIONS:
            raise ValidationError("action", f"expected one of {', '.join(HISTORY_ACTIONS)}")
        if limit is not None and (not isinstance(limit, int) or limit < 1):
            raise ValidationError("limit", "must be a positive integer")
        with self._lock:
            entries = list(self._history)
        if since is not None:
            entries = [e for e in entries if e.timestamp >= since]
        if action is not None:
            entries = [e for e in entries if e.action == action]
        if limit is not None:
            entries = entries[-limit:]
        return entries

    def clear_history(self) -> None:
        with self._lock:
            self._history.clear()

    # ── Lifecycle ─────────────────────────────────────────────────

    def stop(self) -> None:
        """Cancel the pending window, stop the watcher and the worker.

        Safe to call more than once.
        """
        with self._lock:
            if self._stopped:
                return
            self._stopped = True
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._pending.clear()
            watcher = self.watcher

        if watcher is not None:
            watcher.stop()
        self._executor.shutdown(wait=False, cancel_futures=True)

    def status(self) -> SessionStatus:
        with self._lock:
            return SessionStatus(
                handle=self.handle,
                last_result=self._last_result,
                last_error=self._last_error,
                scans_completed=self._scans_completed,
                last_scan_time=self._last_scan_time,
                pending_changes=len(self._pending),
                recent_changes=tuple(self._recent),
                new_errors=self._new,
                fixed_errors=self._fixed,
                active_errors=len(self._active),
                errors_detected=self._errors_detected,
                errors_fixed=self._errors_fixed,
            )
