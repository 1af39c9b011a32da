"""Real-time monitoring of project directories."""

from .monitor import RealTimeMonitor
from .registry import MonitorRegistry
from .session import HistoryEntry, MonitorOptions, MonitorSession, SessionStatus
from .watcher import SourceFilter, Watcher, WatchfilesWatcher, watchfiles_factory

__all__ = [
    "RealTimeMonitor",
    "MonitorRegistry",
    "MonitorOptions",
    "MonitorSession",
    "HistoryEntry",
    "SessionStatus",
    "SourceFilter",
    "Watcher",
    "WatchfilesWatcher",
    "watchfiles_factory",
]
