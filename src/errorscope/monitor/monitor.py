"""Real-time monitor: keeps watched projects analyzed as their files change."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

from ..config import AnalysisConfig
from ..exceptions import AlreadyMonitoringError, PathError, UnknownMonitorError
from ..models import MonitorHandle, MonitorStatus, utcnow
from .registry import MonitorRegistry
from .session import HistoryEntry, MonitorOptions, MonitorSession, ScanListener, SessionStatus
from .watcher import SourceFilter, WatcherFactory, watchfiles_factory

if TYPE_CHECKING:
    from ..analysis import AnalysisEngine

logger = logging.getLogger(__name__)


def _resolve(project_path: "str | Path") -> Path:
    return Path(project_path).expanduser().resolve()


class RealTimeMonitor:
    """Starts, tracks and stops monitor sessions.

    At most one live session exists per resolved project path. Start and stop
    run their check-and-update steps under the registry lock, so concurrent
    callers see a single session.
    """

    def __init__(
        self,
        engine: "AnalysisEngine",
        registry: Optional[MonitorRegistry] = None,
        debounce_seconds: Optional[float] = None,
        watcher_factory: Optional[WatcherFactory] = None,
        config: Optional[AnalysisConfig] = None,
        on_scan: Optional[ScanListener] = None,
    ) -> None:
        self.engine = engine
        self.config = config or engine.config
        self.registry = registry or MonitorRegistry()
        self.debounce_seconds = (
            debounce_seconds if debounce_seconds is not None else self.config.debounce_seconds
        )
        self.watcher_factory = watcher_factory or watchfiles_factory
        self.on_scan = on_scan

    def start(
        self, project_path: "str | Path", options: Optional[MonitorOptions] = None
    ) -> MonitorHandle:
        """Begin watching a project directory.

        Raises:
            PathError: If the path is not an existing directory
            AlreadyMonitoringError: If a live session exists for the path
        """
        options = options or MonitorOptions()
        path = _resolve(project_path)
        if not path.is_dir():
            raise PathError(path, "not an existing directory")
        key = str(path)

        with self.registry.lock:
            existing = self.registry.get(key)
            if existing is not None:
                raise AlreadyMonitoringError(existing.handle)

            debounce = (
                options.debounce_seconds
                if options.debounce_seconds is not None
                else self.debounce_seconds
            )
            session = MonitorSession(
                handle=self.registry.new_handle(key),
                engine=self.engine,
                debounce_seconds=debounce,
                ignore_patterns=options.ignore_patterns,
                on_scan=self.on_scan,
            )
            self.registry.add(session)

            watch_filter = SourceFilter(
                path,
                ignore_patterns=tuple(self.config.ignore_patterns) + options.ignore_patterns,
                extensions=self.config.watch_extensions,
            )
            try:
                session.watcher = self.watcher_factory(path, session.on_change, watch_filter)
                session.watcher.start()
            except Exception:
                self.registry.remove(key)
                session.stop()
                raise

            handle = self.registry.set_status(key, MonitorStatus.WATCHING)

        logger.info(f"Monitoring {key} as {handle.id} (debounce {debounce}s)")
        if options.initial_scan:
            session.request_scan()
        return handle

    def start_or_get(
        self, project_path: "str | Path", options: Optional[MonitorOptions] = None
    ) -> Tuple[MonitorHandle, bool]:
        """Idempotent start: ``(handle, created)``."""
        try:
            return self.start(project_path, options), True
        except AlreadyMonitoringError as e:
            return e.handle, False

    def stop(self, handle: MonitorHandle) -> MonitorHandle:
        """Stop a session. Stopping an already-stopped handle is a no-op.

        Raises:
            UnknownMonitorError: If the handle was never issued by this monitor
        """
        with self.registry.lock:
            session = self.registry.get(handle.project_path)
            if session is None or session.handle.id != handle.id:
                if self.registry.was_issued(handle.id):
                    return _stopped(handle)
                raise UnknownMonitorError(handle.project_path)
            self.registry.set_status(handle.project_path, MonitorStatus.STOPPED)
            self.registry.remove(handle.project_path)

        session.stop()
        logger.info(f"Stopped monitoring {handle.project_path} ({handle.id})")
        return session.handle

    def stop_path(self, project_path: "str | Path") -> MonitorHandle:
        key = str(_resolve(project_path))
        session = self.registry.get(key)
        if session is None:
            raise UnknownMonitorError(key)
        return self.stop(session.handle)

    def stop_all(self) -> List[MonitorHandle]:
        return [self.stop(session.handle) for session in self.registry.sessions()]

    def is_monitoring(self, project_path: "str | Path") -> bool:
        return str(_resolve(project_path)) in self.registry

    def get_handle(self, project_path: "str | Path") -> Optional[MonitorHandle]:
        session = self.registry.get(str(_resolve(project_path)))
        return session.handle if session is not None else None

    def get_status(self, project_path: "str | Path") -> SessionStatus:
        """Latest state of the session for a path.

        Raises:
            UnknownMonitorError: If the path has no live session
        """
        return self._session(project_path).status()

    def _session(self, project_path: "str | Path") -> MonitorSession:
        key = str(_resolve(project_path))
        session = self.registry.get(key)
        if session is None:
            raise UnknownMonitorError(key)
        return session

    def force_rescan(self) -> List[MonitorHandle]:
        """Queue an immediate full rescan of every live session."""
        sessions = self.registry.sessions()
        for session in sessions:
            session.request_scan()
        logger.info(f"Forced rescan of {len(sessions)} session(s)")
        return [session.handle for session in sessions]

    def get_history(
        self,
        project_path: "str | Path",
        since: Optional[datetime] = None,
        action: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[HistoryEntry]:
        """Errors that appeared or disappeared between rescans of a session.

        Raises:
            UnknownMonitorError: If the path has no live session
            ValidationError: If ``action`` or ``limit`` is invalid
        """
        return self._session(project_path).history(since=since, action=action, limit=limit)

    def clear_history(self, project_path: "str | Path") -> None:
        self._session(project_path).clear_history()

    def overview(self) -> Dict[str, Any]:
        statuses = [session.status() for session in self.registry.sessions()]
        uptime = 0.0
        if statuses:
            earliest = min(s.handle.start_time for s in statuses)
            uptime = (utcnow() - earliest).total_seconds()
        return {
            "is_monitoring": bool(statuses),
            "sessions": [s.to_dict() for s in statuses],
            "uptime_seconds": round(uptime, 3),
        }


def _stopped(handle: MonitorHandle) -> MonitorHandle:
    if handle.status is MonitorStatus.STOPPED:
        return handle
    return MonitorHandle(
        id=handle.id,
        project_path=handle.project_path,
        start_time=handle.start_time,
        status=MonitorStatus.STOPPED,
    )
