"""File watchers that feed change batches to a monitor session."""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence

from watchfiles import watch

from ..analyzers import detect_language, is_ignored

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[List[str]], None]

JOIN_TIMEOUT_SECONDS = 5.0


class SourceFilter:
    """watchfiles filter: only source and config files outside ignored or
    hidden directories count as changes."""

    def __init__(
        self,
        root: Path,
        ignore_patterns: Sequence[str] = (),
        extensions: Optional[Iterable[str]] = None,
    ) -> None:
        self.root = Path(root)
        self.ignore_patterns = tuple(ignore_patterns)
        self.extensions = frozenset(extensions) if extensions is not None else None

    def __call__(self, change: object, path: str) -> bool:
        p = Path(path)
        try:
            rel = p.relative_to(self.root)
        except ValueError:
            return False
        if any(part.startswith(".") for part in rel.parts[:-1]):
            return False
        if is_ignored(rel.as_posix(), self.ignore_patterns):
            return False
        if self.extensions is not None and p.suffix in self.extensions:
            return True
        return detect_language(p) is not None


class Watcher(ABC):
    """Delivers batches of changed paths until stopped."""

    @abstractmethod
    def start(self) -> None:
        ...

    @abstractmethod
    def stop(self) -> None:
        ...


WatcherFactory = Callable[[Path, ChangeCallback, SourceFilter], Watcher]


class WatchfilesWatcher(Watcher):
    """Runs ``watchfiles.watch`` in a daemon thread.

    Batching here is only watchfiles' own short grouping step; the session
    applies the real debounce window.
    """

    def __init__(
        self,
        root: Path,
        on_change: ChangeCallback,
        watch_filter: SourceFilter,
        step_ms: int = 50,
    ) -> None:
        self.root = str(Path(root).resolve())
        self.on_change = on_change
        self.watch_filter = watch_filter
        self.step_ms = step_ms

        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        self._thread = threading.Thread(
            target=self._watch_loop,
            name=f"errorscope-watcher:{Path(self.root).name}",
            daemon=True,
        )
        self._thread.start()

    def stop(self) -> None:
        logger.debug(f"Stopping watcher for {self.root}")
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=JOIN_TIMEOUT_SECONDS)
            if self._thread.is_alive():
                logger.warning(
                    f"Watcher thread for {self.root} did not exit within "
                    f"{JOIN_TIMEOUT_SECONDS:.0f} seconds"
                )

    def _watch_loop(self) -> None:
        logger.info(f"Watching {self.root} for changes")
        try:
            for changes in watch(
                self.root,
                stop_event=self._stop_event,
                debounce=self.step_ms,
                rust_timeout=1000,
                yield_on_timeout=False,
                watch_filter=self.watch_filter,
            ):
                if self._stop_event.is_set():
                    break
                paths = sorted({path for _change, path in changes})
                if paths:
                    self.on_change(paths)
        except Exception:
            logger.exception(f"Watcher for {self.root} stopped unexpectedly")


def watchfiles_factory(root: Path, on_change: ChangeCallback, watch_filter: SourceFilter) -> Watcher:
    return WatchfilesWatcher(root, on_change, watch_filter)
