"""Configuration loading and management for errorscope.

Configuration sources are merged in priority order:
    1. Defaults (defined in AnalysisConfig)
    2. Global config (~/.errorscope.toml)
    3. Project config (./errorscope.toml)
    4. Explicit config file
    5. Environment variables (ERRORSCOPE_* prefix)
    6. Overrides passed as kwargs (typically CLI flags)

Example:
    >>> config = load_config(workers=4)
    >>> config.workers
    4
"""

from __future__ import annotations

import hashlib
import json
import os
import tomllib
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import InvalidConfigError

Verbosity = Literal["quiet", "normal", "verbose"]

ENV_PREFIX = "ERRORSCOPE_"

DEFAULT_IGNORE_PATTERNS = [
    "node_modules",
    ".git",
    "dist",
    "build",
    "coverage",
    ".next",
    ".nuxt",
    "__pycache__",
    ".pytest_cache",
    "venv",
    ".venv",
    ".tox",
    ".mypy_cache",
    "*.egg-info",
    "*.min.js",
    "*.bundle.js",
]

DEFAULT_WATCH_EXTENSIONS = [
    ".py",
    ".js",
    ".jsx",
    ".mjs",
    ".cjs",
    ".ts",
    ".tsx",
    ".java",
    ".json",
    ".toml",
    ".yaml",
    ".yml",
    ".env",
]

REPORT_FORMATS = ("json", "markdown", "html", "csv", "github")
SORT_KEYS = ("severity", "category", "location")


@dataclass(frozen=True)
class AnalysisConfig:
    """Settings shared by the engine, the monitor and the report generator.

    Attributes:
        File filtering:
            ignore_patterns: Path components or glob patterns skipped during
                scans and watches
            max_file_size_mb: Files larger than this are not analyzed

        Execution:
            workers: Analyzer fan-out; 1 runs analyzers sequentially

        Monitoring:
            debounce_ms: Quiet period before a burst of changes triggers a rescan
            watch_extensions: File suffixes that count as relevant changes

        Metrics:
            metrics_max_events: Error and resolution events kept in memory

        Caching:
            cache_enabled: Reuse per-file results across scans
            cache_dir: Directory for cache storage
            cache_ttl_hours: Cache time-to-live in hours

        Reporting:
            report_format: Default report format
            report_sort_by: Default record ordering in reports
            verbosity: Logging verbosity level
    """

    ignore_patterns: list[str] = field(default_factory=lambda: list(DEFAULT_IGNORE_PATTERNS))
    max_file_size_mb: float = 1.0

    workers: int = 1

    debounce_ms: int = 300
    watch_extensions: list[str] = field(default_factory=lambda: list(DEFAULT_WATCH_EXTENSIONS))

    metrics_max_events: int = 10000

    cache_enabled: bool = False
    cache_dir: str = ".errorscope-cache"
    cache_ttl_hours: int = 24

    report_format: str = "markdown"
    report_sort_by: str = "severity"
    verbosity: Verbosity = "normal"

    def __post_init__(self) -> None:
        if self.max_file_size_mb <= 0:
            raise InvalidConfigError("max_file_size_mb", self.max_file_size_mb, "must be positive")
        if self.workers < 1:
            raise InvalidConfigError("workers", self.workers, "must be at least 1")
        if self.debounce_ms < 0:
            raise InvalidConfigError("debounce_ms", self.debounce_ms, "must be non-negative")
        if self.metrics_max_events < 1:
            raise InvalidConfigError(
                "metrics_max_events", self.metrics_max_events, "must be at least 1"
            )
        if self.cache_ttl_hours < 0:
            raise InvalidConfigError(
                "cache_ttl_hours", self.cache_ttl_hours, "must be non-negative"
            )
        if self.report_format not in REPORT_FORMATS:
            raise InvalidConfigError(
                "report_format", self.report_format, f"expected one of {', '.join(REPORT_FORMATS)}"
            )
        if self.report_sort_by not in SORT_KEYS:
            raise InvalidConfigError(
                "report_sort_by", self.report_sort_by, f"expected one of {', '.join(SORT_KEYS)}"
            )
        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise InvalidConfigError(
                "verbosity", self.verbosity, "expected quiet, normal or verbose"
            )
        for ext in self.watch_extensions:
            if not ext.startswith("."):
                raise InvalidConfigError("watch_extensions", ext, "extensions must start with '.'")

    @property
    def max_file_size_bytes(self) -> int:
        return int(self.max_file_size_mb * 1024 * 1024)

    @property
    def cache_ttl_seconds(self) -> int:
        return self.cache_ttl_hours * 3600

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000.0

    def fingerprint(self) -> str:
        """Digest of the settings that influence analysis output."""
        relevant = {
            "ignore_patterns": sorted(self.ignore_patterns),
            "max_file_size_mb": self.max_file_size_mb,
        }
        raw = json.dumps(relevant, sort_keys=True)
        return hashlib.sha256(raw.encode("utf-8")).hexdigest()[:16]

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def load_config(config_file: Optional[Path] = None, **overrides) -> AnalysisConfig:
    """Load configuration with auto-discovery and merging.

    Raises:
        InvalidConfigError: If a config file is unreadable or a value is invalid
    """
    merged: dict[str, Any] = {}

    global_config = Path.home() / ".errorscope.toml"
    if global_config.exists():
        merged.update(_load_toml_file(global_config))

    project_config = Path.cwd() / "errorscope.toml"
    if project_config.exists():
        merged.update(_load_toml_file(project_config))

    if config_file is not None:
        config_file = Path(config_file)
        if not config_file.exists():
            raise InvalidConfigError("config_file", config_file, "file not found")
        merged.update(_load_toml_file(config_file))

    merged.update(_load_env_vars())

    if "verbose" in overrides:
        if overrides.pop("verbose"):
            overrides["verbosity"] = "verbose"
    if "quiet" in overrides:
        if overrides.pop("quiet"):
            overrides["verbosity"] = "quiet"

    merged.update({k: v for k, v in overrides.items() if v is not None})

    unknown = sorted(set(merged) - set(AnalysisConfig.__dataclass_fields__))
    if unknown:
        raise InvalidConfigError(unknown[0], merged[unknown[0]], "unknown configuration key")

    return AnalysisConfig(**merged)


def _load_env_vars() -> dict[str, Any]:
    """Collect ERRORSCOPE_* environment variables.

    List fields accept comma-separated values
    (``ERRORSCOPE_IGNORE_PATTERNS=node_modules,dist``).
    """
    type_hints = get_type_hints(AnalysisConfig)
    result: dict[str, Any] = {}

    for field_name in AnalysisConfig.__dataclass_fields__:
        env_key = f"{ENV_PREFIX}{field_name.upper()}"
        env_value = os.environ.get(env_key)
        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
        except ValueError as e:
            raise InvalidConfigError(env_key, env_value, str(e))
        if parsed is not None:
            result[field_name] = parsed

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    origin = getattr(type_hint, "__origin__", None)

    if origin is list:
        return [part.strip() for part in value.split(",") if part.strip()]

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        if lower in ("false", "0", "no", "off"):
            return False
        raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is float:
        return float(value)

    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_file(path: Path) -> dict:
    """Parse one TOML file; the ``[errorscope]`` table is used when present."""
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise InvalidConfigError("config_file", path, str(e))
    if isinstance(data.get("errorscope"), dict):
        return data["errorscope"]
    return data
