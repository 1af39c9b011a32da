"""Request/response facade over the errorscope components.

Every method takes plain values (paths, strings, mappings) and returns
JSON-ready dicts, so a transport layer can forward them unchanged. Malformed
input raises ``ValidationError``; the other typed errors propagate as-is.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .analysis import AnalysisEngine
from .config import AnalysisConfig
from .exceptions import ValidationError
from .formatters import ReportGenerator
from .information import ErrorInformationService
from .knowledge import KnowledgeBase
from .metrics import MetricsAnalyzer
from .models import MonitorHandle, ScanResult
from .monitor import MonitorOptions, RealTimeMonitor
from .monitor.watcher import WatcherFactory
from .prevention import PreventionStrategyService
from .resolution import ResolutionEngine

logger = logging.getLogger(__name__)

_MONITOR_OPTION_KEYS = {
    "debounce_seconds": "debounce_seconds",
    "debounceSeconds": "debounce_seconds",
    "initial_scan": "initial_scan",
    "initialScan": "initial_scan",
    "ignore_patterns": "ignore_patterns",
    "ignorePatterns": "ignore_patterns",
}


def _require_str(field: str, value: Any) -> str:
    if not isinstance(value, (str, Path)) or not str(value).strip():
        raise ValidationError(field, "required non-empty string")
    return str(value)


def _parse_time(field: str, value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError(field, f"not an ISO-8601 timestamp: {value!r}")


def _monitor_options(options: Optional[Mapping[str, Any]]) -> MonitorOptions:
    if options is None:
        return MonitorOptions()
    if isinstance(options, MonitorOptions):
        return options
    if not isinstance(options, Mapping):
        raise ValidationError("options", "expected an object")
    kwargs: Dict[str, Any] = {}
    for key, value in options.items():
        name = _MONITOR_OPTION_KEYS.get(key)
        if name is None:
            raise ValidationError(key, "unknown monitor option")
        kwargs[name] = value
    if "ignore_patterns" in kwargs:
        patterns = kwargs["ignore_patterns"]
        if not isinstance(patterns, (list, tuple)) or not all(isinstance(p, str) for p in patterns):
            raise ValidationError("ignore_patterns", "expected a list of strings")
        kwargs["ignore_patterns"] = tuple(patterns)
    return MonitorOptions(**kwargs)


class ErrorScope:
    """One process-wide set of components wired together.

    Scans, both on demand and from monitor sessions, feed the metrics
    analyzer.
    """

    def __init__(
        self,
        config: Optional[AnalysisConfig] = None,
        engine: Optional[AnalysisEngine] = None,
        knowledge_base: Optional[KnowledgeBase] = None,
        metrics: Optional[MetricsAnalyzer] = None,
        prevention: Optional[PreventionStrategyService] = None,
        watcher_factory: Optional[WatcherFactory] = None,
    ) -> None:
        self.config = config or AnalysisConfig()
        self.engine = engine or AnalysisEngine.with_default_analyzers(self.config)
        self.knowledge_base = knowledge_base or KnowledgeBase()
        self.metrics = metrics or MetricsAnalyzer(max_events=self.config.metrics_max_events)
        self.prevention = prevention or PreventionStrategyService()
        self.resolution = ResolutionEngine(self.knowledge_base)
        self.information = ErrorInformationService(self.knowledge_base)
        self.reports = ReportGenerator.from_config(self.config)
        self.monitor = RealTimeMonitor(
            self.engine,
            config=self.config,
            watcher_factory=watcher_factory,
            on_scan=self._on_monitor_scan,
        )

    def __enter__(self) -> "ErrorScope":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        """Stop every monitor session and release the analysis cache."""
        self.monitor.stop_all()
        if self.engine.cache is not None:
            self.engine.cache.close()

    def _track(self, result: ScanResult) -> None:
        tracked = self.metrics.track_errors(result.records)
        logger.debug(f"Tracked {tracked} new errors from {result.target}")

    def _on_monitor_scan(self, handle: MonitorHandle, result: ScanResult) -> None:
        self._track(result)

    # ── Scanning and reports ──────────────────────────────────────

    def scan(
        self,
        project_path: "str | Path | None" = None,
        file_path: "str | Path | None" = None,
    ) -> Dict[str, Any]:
        """Scan a project directory or a single file (exactly one)."""
        if (project_path is None) == (file_path is None):
            raise ValidationError("project_path", "exactly one of project_path or file_path")
        if project_path is not None:
            result = self.engine.scan_project(_require_str("project_path", project_path))
        else:
            result = self.engine.scan_file(_require_str("file_path", file_path))
        self._track(result)
        return result.to_dict()

    def generate_report(
        self,
        errors: Any,
        format: str = "markdown",
        options: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        if options is not None and not isinstance(options, Mapping):
            raise ValidationError("options", "expected an object")
        merged = dict(options or {})
        merged["format"] = format
        content = self.reports.generate(errors, merged)
        return {"format": format, "content": content}

    # ── Monitoring ────────────────────────────────────────────────

    def start_monitoring(
        self, project_path: "str | Path", options: Optional[Mapping[str, Any]] = None
    ) -> Dict[str, Any]:
        path = _require_str("project_path", project_path)
        handle, created = self.monitor.start_or_get(path, _monitor_options(options))
        if not created:
            return {"message": "Already monitoring", "monitorId": handle.id}
        return {
            "message": "Monitoring started",
            "monitorId": handle.id,
            "projectPath": handle.project_path,
            "startTime": handle.start_time.isoformat(),
        }

    def stop_monitoring(self, project_path: "str | Path") -> Dict[str, Any]:
        handle = self.monitor.stop_path(_require_str("project_path", project_path))
        return {
            "message": "Monitor stopped",
            "monitorId": handle.id,
            "projectPath": handle.project_path,
        }

    def monitor_status(self, project_path: "str | Path | None" = None) -> Dict[str, Any]:
        if project_path is not None:
            return self.monitor.get_status(_require_str("project_path", project_path)).to_dict()
        overview = self.monitor.overview()
        overview["active_monitors"] = len(overview["sessions"])
        return overview

    def monitor_history(
        self,
        project_path: "str | Path",
        since: Any = None,
        action: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> Dict[str, Any]:
        entries = self.monitor.get_history(
            _require_str("project_path", project_path),
            since=_parse_time("since", since),
            action=action,
            limit=limit,
        )
        return {"count": len(entries), "history": [e.to_dict() for e in entries]}

    def force_rescan(self) -> Dict[str, Any]:
        handles = self.monitor.force_rescan()
        return {"message": "Rescan queued", "monitorIds": [h.id for h in handles]}

    # ── Metrics ───────────────────────────────────────────────────

    def get_metrics(
        self,
        period: str = "day",
        type: Optional[str] = None,
        since: Any = None,
        until: Any = None,
    ) -> Dict[str, Any]:
        since_dt = _parse_time("since", since)
        until_dt = _parse_time("until", until)
        return {
            "frequency": self.metrics.get_frequency(period, type, since_dt, until_dt),
            "trends": self.metrics.get_trends(period),
            "common_categories": self.metrics.get_most_common_categories(type, since_dt, until_dt),
            "resolution_times": self.metrics.get_resolution_times(type, since_dt, until_dt),
        }

    def get_suggestions(self) -> Dict[str, Any]:
        return {"suggestions": self.metrics.get_suggestions()}

    def export_metrics(self) -> Dict[str, Any]:
        return self.metrics.export_data()

    def import_metrics(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        counts = self.metrics.import_data(data)
        return {"message": "Metrics imported", **counts}

    def clear_metrics(self) -> Dict[str, Any]:
        self.metrics.clear()
        return {"message": "Metrics cleared"}

    def track_resolution(self, error_id: str, details: Optional[str] = None) -> Dict[str, Any]:
        event = self.metrics.track_resolution(error_id, details)
        return {"message": "Resolution tracked", "errorId": error_id, "event": event.to_dict()}

    # ── Remediation ───────────────────────────────────────────────

    def resolve(self, error: Any, complete: bool = True) -> Dict[str, Any]:
        if error is None:
            raise ValidationError("error", "required")
        data: Dict[str, Any] = {
            "resolutions": [c.to_dict() for c in self.resolution.generate_resolutions(error)]
        }
        if complete:
            resolution = self.resolution.generate_complete_resolution(error)
            data["recommendation"] = resolution.recommended_approach
            data["validation_steps"] = [s.to_dict() for s in resolution.validation_steps]
            data["estimated_minutes"] = resolution.estimated_minutes
        return data

    def explain(self, error: Any) -> Dict[str, Any]:
        if error is None:
            raise ValidationError("error", "required")
        return self.information.generate_complete_info(error).to_dict()

    def get_prevention(self, error_type: str) -> Dict[str, Any]:
        error_type = _require_str("error_type", error_type)
        return {
            "strategies": [s.to_dict() for s in self.prevention.get_strategies_for_type(error_type)],
            "recommended_tools": self.prevention.get_tool_recommendations(error_type),
            "tradeoff_analysis": [
                t.to_dict() for t in self.prevention.get_tradeoff_analysis(error_type)
            ],
        }

    # ── Knowledge base ────────────────────────────────────────────

    def get_patterns(
        self, query: Optional[str] = None, language: Optional[str] = None
    ) -> Dict[str, Any]:
        if query:
            patterns = self.knowledge_base.search_patterns(query)
            if language:
                scoped = {p.id for p in self.knowledge_base.get_patterns_by_language(language)}
                patterns = [p for p in patterns if p.id in scoped]
        elif language:
            patterns = self.knowledge_base.get_patterns_by_language(language)
        else:
            patterns = self.knowledge_base.get_all_patterns()
        return {"count": len(patterns), "patterns": [p.to_dict() for p in patterns]}

    def get_solutions(self, pattern_id: str) -> Dict[str, Any]:
        pattern_id = _require_str("pattern_id", pattern_id)
        solutions = self.knowledge_base.get_solutions(pattern_id)
        return {"pattern_id": pattern_id, "solutions": [s.to_dict() for s in solutions]}

    def get_best_practices(self, language: str) -> Dict[str, Any]:
        language = _require_str("language", language)
        practices = self.knowledge_base.get_best_practices(language)
        return {"language": language, "best_practices": [p.to_dict() for p in practices]}
