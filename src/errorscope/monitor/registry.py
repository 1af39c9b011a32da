"""Registry of live monitor sessions keyed by resolved project path."""

from __future__ import annotations

import secrets
import threading
from dataclasses import replace
from typing import Dict, List, Optional

from ..models import MonitorHandle, MonitorStatus, utcnow
from .session import MonitorSession


class MonitorRegistry:
    """Path -> session map plus the set of handle ids ever issued.

    ``lock`` is re-entrant so the monitor can hold it across a whole
    check-then-create sequence while calling registry methods.
    """

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self._sessions: Dict[str, MonitorSession] = {}
        self._issued: set[str] = set()

    def new_handle(self, project_path: str) -> MonitorHandle:
        with self.lock:
            handle_id = f"mon_{secrets.token_hex(8)}"
            while handle_id in self._issued:
                handle_id = f"mon_{secrets.token_hex(8)}"
            self._issued.add(handle_id)
            return MonitorHandle(
                id=handle_id,
                project_path=project_path,
                start_time=utcnow(),
                status=MonitorStatus.STARTING,
            )

    def was_issued(self, handle_id: str) -> bool:
        with self.lock:
            return handle_id in self._issued

    def get(self, project_path: str) -> Optional[MonitorSession]:
        with self.lock:
            return self._sessions.get(project_path)

    def add(self, session: MonitorSession) -> None:
        with self.lock:
            self._sessions[session.handle.project_path] = session

    def remove(self, project_path: str) -> Optional[MonitorSession]:
        with self.lock:
            return self._sessions.pop(project_path, None)

    def set_status(self, project_path: str, status: MonitorStatus) -> MonitorHandle:
        """Replace the session's handle with a copy carrying ``status``."""
        with self.lock:
            session = self._sessions[project_path]
            session.handle = replace(session.handle, status=status)
            return session.handle

    def sessions(self) -> List[MonitorSession]:
        with self.lock:
            return [self._sessions[key] for key in sorted(self._sessions)]

    def __len__(self) -> int:
        with self.lock:
            return len(self._sessions)

    def __contains__(self, project_path: object) -> bool:
        with self.lock:
            return project_path in self._sessions
