"""Real-time monitoring exceptions."""

from typing import TYPE_CHECKING

from .base import ErrorScopeError

if TYPE_CHECKING:
    from ..models import MonitorHandle


class MonitorError(ErrorScopeError):
    """Base class for monitor session errors."""
    pass


class AlreadyMonitoringError(MonitorError):
    """A live session already exists for the path. Carries the existing handle."""

    def __init__(self, handle: "MonitorHandle"):
        super().__init__(
            "Already monitoring",
            details={"project_path": handle.project_path, "monitor_id": handle.id},
        )
        self.handle = handle


class UnknownMonitorError(MonitorError):
    """No session exists for the given path or handle."""

    def __init__(self, project_path: str):
        super().__init__(
            f"No monitor session for {project_path}",
            details={"project_path": project_path},
        )
        self.project_path = project_path
