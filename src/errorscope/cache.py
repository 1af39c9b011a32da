"""
Per-file result cache for errorscope.

Uses diskcache for SQLite-based persistent caching. Entries are keyed by
file metadata, analyzer name and configuration fingerprint, so an edited
file or a changed ignore list never serves stale records.
"""

import hashlib
from pathlib import Path
from typing import List, Optional

from diskcache import Cache

from .logging_config import get_logger
from .models import ErrorRecord

logger = get_logger(__name__)


class AnalysisCache:
    """
    SQLite-backed cache of analyzer output per file.

    Cache failures never fail a scan: they are logged and treated as misses.
    """

    def __init__(
        self,
        cache_dir: str = ".errorscope-cache",
        ttl_hours: int = 24,
        enabled: bool = True,
    ):
        self.enabled = enabled
        self.ttl_seconds = ttl_hours * 3600
        self.hits = 0
        self.misses = 0

        if self.enabled:
            self.cache: Optional[Cache] = Cache(cache_dir)
            logger.debug(f"Cache initialized at {cache_dir} with TTL={ttl_hours}h")
        else:
            self.cache = None
            logger.debug("Cache disabled")

    @staticmethod
    def file_key(
        filepath: Path, analyzer: str, config_hash: str, display_path: Optional[str] = None
    ) -> str:
        """Key from path, mtime, size, analyzer name and config fingerprint.

        ``display_path`` is the path written into cached records; scans that
        report the same file under different paths never share entries.
        """
        shown = display_path if display_path is not None else str(filepath)
        try:
            stat = filepath.stat()
            key_data = (
                f"{filepath}:{shown}:{stat.st_mtime_ns}:{stat.st_size}:{analyzer}:{config_hash}"
            )
        except OSError:
            key_data = f"{filepath}:{shown}:{analyzer}:{config_hash}"
        return hashlib.sha256(key_data.encode()).hexdigest()

    def get(self, key: str) -> Optional[List[ErrorRecord]]:
        if not self.enabled or self.cache is None:
            return None

        try:
            value = self.cache.get(key)
        except Exception as e:
            logger.warning(f"Cache get failed: {e}")
            return None

        if value is None:
            self.misses += 1
        else:
            self.hits += 1
            logger.debug(f"Cache hit: {key[:16]}...")
        return value

    def set(self, key: str, records: List[ErrorRecord]) -> None:
        if not self.enabled or self.cache is None:
            return

        try:
            self.cache.set(key, list(records), expire=self.ttl_seconds or None)
        except Exception as e:
            logger.warning(f"Cache set failed: {e}")

    def clear(self) -> None:
        if not self.enabled or self.cache is None:
            return

        try:
            self.cache.clear()
            logger.info("Cache cleared")
        except Exception as e:
            logger.warning(f"Cache clear failed: {e}")

    def stats(self) -> dict:
        """
        Get cache statistics.

        Returns:
            Dictionary with size, directory and hit/miss counters
        """
        if not self.enabled or self.cache is None:
            return {"enabled": False}

        try:
            return {
                "enabled": True,
                "size": len(self.cache),
                "directory": self.cache.directory,
                "hits": self.hits,
                "misses": self.misses,
            }
        except Exception as e:
            logger.warning(f"Cache stats failed: {e}")
            return {"enabled": True, "error": str(e)}

    def close(self) -> None:
        if self.cache is not None:
            self.cache.close()
