"""Tests for the ErrorScope request/response facade."""

import time

import pytest

from errorscope.api import ErrorScope
from errorscope.exceptions import UnknownMonitorError, ValidationError
from errorscope.models import Category, Severity

from conftest import make_record


def wait_for(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


class _StillWatcher:
    """Watcher that never reports changes."""

    def __init__(self, root, on_change, watch_filter):
        self.root = root

    def start(self):
        pass

    def stop(self):
        pass


@pytest.fixture
def scope():
    with ErrorScope(watcher_factory=_StillWatcher) as s:
        yield s


class TestScan:
    def test_project_scan_is_tracked(self, scope, project):
        data = scope.scan(project_path=project)
        assert data["metrics"]["total"] > 0
        assert data["errors"]
        tracked = scope.metrics.get_frequency("day")["total"]
        assert tracked == len(data["errors"]) + len(data["warnings"])

    def test_single_file(self, scope, project):
        data = scope.scan(file_path=project / "broken.py")
        assert "syntax" in {e["category"] for e in data["errors"]}

    @pytest.mark.parametrize("kwargs", [{}, {"project_path": "a", "file_path": "b"}])
    def test_exactly_one_target(self, scope, kwargs):
        with pytest.raises(ValidationError):
            scope.scan(**kwargs)

    def test_blank_path(self, scope):
        with pytest.raises(ValidationError):
            scope.scan(project_path="  ")


class TestReports:
    def test_generate_report(self, scope):
        data = scope.generate_report([make_record("Boom")], "json")
        assert data["format"] == "json"
        assert '"Boom"' in data["content"]

    def test_options_must_be_mapping(self, scope):
        with pytest.raises(ValidationError):
            scope.generate_report([make_record()], "json", options=["x"])


class TestMonitoring:
    def test_start_then_already_monitoring(self, scope, project):
        first = scope.start_monitoring(str(project), {"initialScan": False})
        second = scope.start_monitoring(str(project))
        assert first["message"] == "Monitoring started"
        assert second == {"message": "Already monitoring", "monitorId": first["monitorId"]}

    def test_status_and_stop(self, scope, project):
        started = scope.start_monitoring(str(project), {"initial_scan": False})
        overview = scope.monitor_status()
        assert overview["active_monitors"] == 1
        assert overview["is_monitoring"] is True

        stopped = scope.stop_monitoring(str(project))
        assert stopped["message"] == "Monitor stopped"
        assert stopped["monitorId"] == started["monitorId"]
        assert scope.monitor_status()["active_monitors"] == 0

    def test_stop_unknown(self, scope, project):
        with pytest.raises(UnknownMonitorError):
            scope.stop_monitoring(str(project))

    def test_unknown_option(self, scope, project):
        with pytest.raises(ValidationError):
            scope.start_monitoring(str(project), {"pollInterval": 1})

    @pytest.mark.parametrize("patterns", ["dist", ["dist", 3], {"dist": True}])
    def test_ignore_patterns_must_be_string_list(self, scope, project, patterns):
        with pytest.raises(ValidationError) as exc:
            scope.start_monitoring(str(project), {"ignorePatterns": patterns})
        assert exc.value.field == "ignore_patterns"
        assert scope.monitor_status()["active_monitors"] == 0

    def test_debounce_must_be_numeric(self, scope, project):
        with pytest.raises(ValidationError) as exc:
            scope.start_monitoring(str(project), {"debounceSeconds": "fast"})
        assert exc.value.field == "debounce_seconds"

    def test_ignore_patterns_accepted(self, scope, project):
        started = scope.start_monitoring(str(project), {"ignorePatterns": ["web"], "initialScan": False})
        assert started["message"] == "Monitoring started"

    def test_history_and_force_rescan(self, scope, project):
        started = scope.start_monitoring(str(project), {"initialScan": False})
        queued = scope.force_rescan()
        assert queued["monitorIds"] == [started["monitorId"]]
        assert wait_for(lambda: scope.monitor_status(str(project))["scans_completed"] == 1)

        history = scope.monitor_history(str(project), action="added")
        assert history["count"] == len(history["history"]) > 0
        assert {e["action"] for e in history["history"]} == {"added"}
        assert scope.monitor_history(str(project), since="2999-01-01T00:00:00Z")["count"] == 0

    def test_history_bad_since(self, scope, project):
        scope.start_monitoring(str(project), {"initialScan": False})
        with pytest.raises(ValidationError):
            scope.monitor_history(str(project), since="yesterday")


class TestMetrics:
    def test_track_resolution(self, scope):
        record = make_record()
        scope.metrics.track_error(record)
        data = scope.track_resolution(record.id, "fixed")
        assert data["message"] == "Resolution tracked"
        assert data["errorId"] == record.id
        assert data["event"]["details"] == "fixed"
        assert data["event"]["category"] == "runtime"

    def test_orphan_resolution(self, scope):
        data = scope.track_resolution("err_unknown")
        assert data["event"]["detected_at"] is None

    def test_get_metrics_parses_iso_window(self, scope):
        scope.metrics.track_error(make_record())
        data = scope.get_metrics("day", since="2024-03-04T00:00:00Z", until="2024-03-05T00:00:00Z")
        assert data["frequency"]["buckets"] == {"2024-03-04": 1}
        assert set(data) == {"frequency", "trends", "common_categories", "resolution_times"}

    def test_get_metrics_bad_timestamp(self, scope):
        with pytest.raises(ValidationError):
            scope.get_metrics(since="last tuesday")

    def test_export_import_clear(self, scope):
        scope.metrics.track_error(make_record())
        exported = scope.export_metrics()
        assert scope.clear_metrics() == {"message": "Metrics cleared"}
        assert scope.export_metrics()["errors"] == []

        imported = scope.import_metrics(exported)
        assert imported["errors"] == 1
        assert imported["open_errors"] == 1

    def test_import_rejects_non_mapping(self, scope):
        with pytest.raises(ValidationError):
            scope.import_metrics("[]")


class TestRemediation:
    def test_resolve_record(self, scope):
        record = make_record(
            "Mutable default argument in add()", Category.RUNTIME, Severity.WARNING,
            file_path="app.py", rule="mutable_default", detected_by="RuntimeAnalyzer",
            language="python",
        )
        data = scope.resolve(record)
        assert data["resolutions"][0]["id"] == "sol_py_none_default"
        assert data["recommendation"].startswith("Quick fix available")
        assert data["validation_steps"]

    def test_resolve_without_complete(self, scope):
        data = scope.resolve(make_record(), complete=False)
        assert set(data) == {"resolutions"}

    def test_resolve_none(self, scope):
        with pytest.raises(ValidationError):
            scope.resolve(None)

    def test_explain(self, scope):
        data = scope.explain(
            {
                "type": "security",
                "severity": "warning",
                "message": "Use of eval() executes arbitrary code",
                "rule": "eval_usage",
                "location": {"filePath": "web/index.js", "line": 2},
            }
        )
        assert data["explanation"]["urgency"].startswith("Immediate: Security")
        assert data["explanation"]["location"] == "web/index.js:2"
        assert data["diagnostic_steps"]

    @pytest.mark.parametrize("error", [None, {"message": "no type"}])
    def test_explain_malformed(self, scope, error):
        with pytest.raises(ValidationError):
            scope.explain(error)

    def test_prevention(self, scope):
        data = scope.get_prevention("security")
        assert [s["id"] for s in data["strategies"]][0] == "security_audit"
        assert data["recommended_tools"]
        assert len(data["tradeoff_analysis"]) == len(data["strategies"])

    def test_patterns(self, scope):
        everything = scope.get_patterns()
        assert everything["count"] == len(everything["patterns"]) > 0
        found = scope.get_patterns(query="promise rejection")
        assert found["patterns"][0]["id"] == "js_unhandled_promise"

    def test_solutions_and_best_practices(self, scope):
        solutions = scope.get_solutions("js_unhandled_promise")
        assert solutions["pattern_id"] == "js_unhandled_promise"
        assert solutions["solutions"]
        practices = scope.get_best_practices("python")
        assert practices["language"] == "python"
        assert practices["best_practices"]
