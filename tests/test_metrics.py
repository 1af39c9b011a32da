"""Tests for MetricsAnalyzer."""

from dataclasses import replace
from datetime import timedelta

import pytest

from errorscope.exceptions import ValidationError
from errorscope.metrics import EventLog, MetricsAnalyzer
from errorscope.models import Category, Severity

from conftest import T0, make_record


def _make_analyzer(now=T0):
    return MetricsAnalyzer(clock=lambda: now)


def _record(error_id, category=Category.RUNTIME, ts=T0, severity=Severity.ERROR, file_path="src/a.py"):
    return replace(
        make_record(category=category, severity=severity, file_path=file_path, timestamp=ts),
        id=error_id,
    )


class TestTracking:
    def test_track_error(self):
        metrics = _make_analyzer()
        assert metrics.track_error(_record("e1")) is True
        assert len(metrics.log) == 1
        assert metrics.log.open_ids() == ("e1",)

    def test_open_id_counted_once(self):
        metrics = _make_analyzer()
        assert metrics.track_error(_record("e1")) is True
        assert metrics.track_error(_record("e1")) is False
        assert len(metrics.log) == 1

    def test_reappearing_after_resolution_counts_again(self):
        metrics = _make_analyzer()
        metrics.track_error(_record("e1"))
        metrics.track_resolution("e1", timestamp=T0 + timedelta(minutes=1))
        assert metrics.track_error(_record("e1", ts=T0 + timedelta(minutes=2))) is True
        assert len(metrics.log) == 2

    def test_malformed_record_not_tracked(self):
        metrics = _make_analyzer()
        assert metrics.track_error(object()) is False
        assert len(metrics.log) == 0

    def test_track_errors_counts_new(self):
        metrics = _make_analyzer()
        assert metrics.track_errors([_record("a"), _record("b"), _record("a")]) == 2

    def test_resolution_requires_id(self):
        with pytest.raises(ValidationError):
            _make_analyzer().track_resolution("")

    def test_orphan_resolution(self):
        metrics = _make_analyzer()
        event = metrics.track_resolution("never-seen", details="cleaned up")
        assert event.is_orphan
        assert event.timestamp == T0
        assert metrics.get_resolution_times()["count"] == 0


class TestResolutionTimes:
    def test_five_minute_resolution(self):
        metrics = _make_analyzer()
        metrics.track_error(_record("e1", category=Category.RUNTIME, ts=T0))
        metrics.track_resolution("e1", timestamp=T0 + timedelta(minutes=5))

        stats = metrics.get_resolution_times(
            since=T0 - timedelta(hours=1), until=T0 + timedelta(hours=1)
        )

        assert stats["count"] == 1
        assert stats["median"] == 300.0
        assert stats["by_category"]["runtime"]["count"] == 1
        assert stats["by_category"]["runtime"]["median"] == 300.0

    def test_window_uses_detection_time(self):
        metrics = _make_analyzer()
        metrics.track_error(_record("e1", ts=T0))
        metrics.track_resolution("e1", timestamp=T0 + timedelta(days=2))
        stats = metrics.get_resolution_times(since=T0 + timedelta(days=1))
        assert stats["count"] == 0

    def test_statistics(self):
        metrics = _make_analyzer()
        for i, minutes in enumerate([1, 2, 3, 4, 10]):
            metrics.track_error(_record(f"e{i}", ts=T0))
            metrics.track_resolution(f"e{i}", timestamp=T0 + timedelta(minutes=minutes))
        stats = metrics.get_resolution_times()
        assert stats["count"] == 5
        assert stats["min"] == 60.0
        assert stats["median"] == 180.0
        assert stats["max"] == 600.0
        assert stats["mean"] == pytest.approx(240.0)

    def test_category_filter(self):
        metrics = _make_analyzer()
        metrics.track_error(_record("a", category=Category.SYNTAX))
        metrics.track_error(_record("b", category=Category.RUNTIME))
        metrics.track_resolution("a", timestamp=T0 + timedelta(minutes=1))
        metrics.track_resolution("b", timestamp=T0 + timedelta(minutes=2))
        assert metrics.get_resolution_times("syntax")["median"] == 60.0

    def test_unknown_category(self):
        with pytest.raises(ValidationError):
            _make_analyzer().get_resolution_times("weird")


class TestFrequency:
    def test_buckets_zero_filled(self):
        metrics = _make_analyzer()
        metrics.track_error(_record("a", ts=T0))
        metrics.track_error(_record("b", ts=T0 + timedelta(hours=1)))
        freq = metrics.get_frequency("day", since=T0, until=T0 + timedelta(days=3))
        assert freq["buckets"] == {"2024-03-04": 2, "2024-03-05": 0, "2024-03-06": 0}
        assert freq["total"] == 2
        assert freq["average"] == pytest.approx(0.667)

    def test_empty_window(self):
        metrics = _make_analyzer()
        metrics.track_error(_record("a", ts=T0))
        freq = metrics.get_frequency("hour", since=T0, until=T0)
        assert freq == {"period": "hour", "buckets": {}, "total": 0, "average": 0.0}

    def test_category_filter(self):
        metrics = _make_analyzer()
        metrics.track_error(_record("a", category=Category.SYNTAX))
        metrics.track_error(_record("b", category=Category.SECURITY))
        assert metrics.get_frequency("day", "security")["total"] == 1

    def test_bad_period(self):
        with pytest.raises(ValidationError):
            _make_analyzer().get_frequency("fortnight")


class TestTrends:
    def test_increasing(self):
        metrics = _make_analyzer()
        for i in range(3):
            metrics.track_error(_record(f"cur{i}", ts=T0 - timedelta(days=1)))
        metrics.track_error(_record("prev", ts=T0 - timedelta(days=8)))
        trends = metrics.get_trends("week")
        assert trends["current_window"]["count"] == 3
        assert trends["previous_window"]["count"] == 1
        assert trends["change_percentage"] == 200.0
        assert trends["direction"] == "increasing"
        assert trends["quality_score"] == 85.0

    def test_from_zero_is_full_increase(self):
        metrics = _make_analyzer()
        metrics.track_error(_record("a", ts=T0 - timedelta(hours=2), category=Category.SECURITY))
        trends = metrics.get_trends("day")
        assert trends["change_percentage"] == 100.0
        assert trends["by_category"]["security"]["direction"] == "increasing"

    def test_flat_without_data(self):
        trends = _make_analyzer().get_trends("month")
        assert trends["direction"] == "flat"
        assert trends["change_percentage"] == 0.0
        assert trends["quality_score"] == 100.0

    def test_decreasing(self):
        metrics = _make_analyzer()
        metrics.track_error(_record("a", ts=T0 - timedelta(hours=30)))
        metrics.track_error(_record("b", ts=T0 - timedelta(hours=40)))
        trends = metrics.get_trends("day")
        assert trends["direction"] == "decreasing"
        assert trends["change_percentage"] == -100.0


class TestCommonCategoriesAndHotspots:
    def test_ranked(self):
        metrics = _make_analyzer()
        for i in range(3):
            metrics.track_error(_record(f"s{i}", category=Category.SYNTAX))
        metrics.track_error(_record("r", category=Category.RUNTIME))
        common = metrics.get_most_common_categories()
        assert common == [
            {"category": "syntax", "count": 3, "percentage": 75.0},
            {"category": "runtime", "count": 1, "percentage": 25.0},
        ]

    def test_empty(self):
        assert _make_analyzer().get_most_common_categories() == []

    def test_hotspots(self):
        metrics = _make_analyzer()
        metrics.track_error(_record("a", file_path="src/a.py"))
        metrics.track_error(_record("b", file_path="src/b.py", category=Category.SYNTAX))
        metrics.track_error(_record("c", file_path="src/c.py", category=Category.SYNTAX))
        metrics.track_error(_record("d", file_path="lib/d.py"))
        hotspots = metrics.get_hotspots()
        assert hotspots[0] == {"path": "src", "error_count": 3, "top_category": "syntax"}
        assert hotspots[1]["path"] == "lib"


class TestSuggestions:
    def test_security_is_high_priority(self):
        metrics = _make_analyzer()
        metrics.track_error(_record("a", category=Category.SECURITY, ts=T0 - timedelta(days=10)))
        for i in range(4):
            metrics.track_error(_record(f"r{i}", ts=T0 - timedelta(days=10)))
        titles = {s["title"]: s for s in metrics.get_suggestions()}
        assert titles["Security vulnerabilities detected"]["priority"] == "high"

    def test_sorted_by_priority(self):
        metrics = _make_analyzer()
        for i in range(12):
            metrics.track_error(_record(f"s{i}", category=Category.SYNTAX, ts=T0 - timedelta(days=1)))
        metrics.track_error(_record("x", category=Category.SECURITY, ts=T0 - timedelta(days=1)))
        priorities = [s["priority"] for s in metrics.get_suggestions()]
        assert priorities == sorted(priorities, key=["high", "medium", "low"].index)
        assert "low" in priorities

    def test_no_history_no_suggestions(self):
        assert _make_analyzer().get_suggestions() == []

    def test_slow_resolutions(self):
        metrics = _make_analyzer()
        metrics.track_error(_record("a", ts=T0 - timedelta(days=20)))
        metrics.track_resolution("a", timestamp=T0 - timedelta(days=19))
        kinds = {s["kind"] for s in metrics.get_suggestions()}
        assert "process" in kinds


class TestExport:
    def test_snapshot_and_export(self):
        metrics = _make_analyzer()
        metrics.track_error(_record("a", ts=T0 - timedelta(days=1)))
        snapshot = metrics.snapshot("day")
        assert set(snapshot.to_dict()) == {
            "frequency",
            "trends",
            "common_categories",
            "resolution_times",
            "suggestions",
        }
        assert len(snapshot.frequency["buckets"]) == 5
        data = metrics.export_data()
        assert data["open_errors"] == ["a"]
        assert data["errors"][0]["error_id"] == "a"


class TestLogSize:
    def test_oldest_events_dropped(self):
        metrics = MetricsAnalyzer(clock=lambda: T0, max_events=3)
        for i in range(5):
            metrics.track_error(_record(f"e{i}", ts=T0 + timedelta(minutes=i)))
        assert [e.error_id for e in metrics.log.errors()] == ["e2", "e3", "e4"]

    def test_trimmed_error_still_resolves(self):
        metrics = MetricsAnalyzer(clock=lambda: T0, max_events=1)
        metrics.track_error(_record("old", ts=T0))
        metrics.track_error(_record("new", ts=T0 + timedelta(minutes=1)))
        event = metrics.track_resolution("old", timestamp=T0 + timedelta(minutes=10))
        assert event.elapsed_seconds == 600.0

    def test_resolutions_capped(self):
        metrics = MetricsAnalyzer(clock=lambda: T0, max_events=2)
        for i in range(4):
            metrics.track_resolution(f"e{i}")
        assert [r.error_id for r in metrics.log.resolutions()] == ["e2", "e3"]

    @pytest.mark.parametrize("size", [0, -5, "10", True])
    def test_invalid_size(self, size):
        with pytest.raises(ValidationError):
            EventLog(size)


class TestImportAndClear:
    def test_import_exported_history(self):
        source = _make_analyzer()
        source.track_error(_record("a", ts=T0 - timedelta(hours=2)))
        source.track_error(_record("b", category=Category.SECURITY, ts=T0 - timedelta(hours=1)))
        source.track_resolution("a", "fixed", timestamp=T0)

        target = _make_analyzer()
        counts = target.import_data(source.export_data())
        assert counts == {"errors": 2, "resolutions": 1, "open_errors": 1}
        assert target.log.open_ids() == ("b",)
        resolution = target.log.resolutions()[0]
        assert resolution.details == "fixed"
        assert resolution.elapsed_seconds == 7200.0
        assert resolution.category is Category.RUNTIME

        stats = target.get_resolution_times(since=T0 - timedelta(days=1), until=T0 + timedelta(days=1))
        assert stats["count"] == 1

    def test_import_replaces_existing(self):
        metrics = _make_analyzer()
        metrics.track_error(_record("old"))
        metrics.import_data({"errors": [], "resolutions": [], "open_errors": []})
        assert len(metrics.log) == 0
        assert metrics.log.open_ids() == ()

    def test_import_trims_to_capacity(self):
        source = _make_analyzer()
        for i in range(4):
            source.track_error(_record(f"e{i}", ts=T0 + timedelta(minutes=i)))
        target = MetricsAnalyzer(clock=lambda: T0, max_events=2)
        target.import_data(source.export_data())
        assert [e.error_id for e in target.log.errors()] == ["e2", "e3"]

    @pytest.mark.parametrize(
        "data",
        [
            ["not", "a", "mapping"],
            {"errors": "e1"},
            {"errors": [{"error_id": "e1", "category": "weather", "severity": "error",
                         "file_path": "a.py", "timestamp": "2024-03-04T12:00:00+00:00"}]},
            {"errors": [{"error_id": "e1", "category": "runtime", "severity": "error",
                         "file_path": "a.py", "timestamp": "yesterday"}]},
            {"resolutions": [{"timestamp": "2024-03-04T12:00:00+00:00"}]},
        ],
    )
    def test_malformed_import_leaves_history(self, data):
        metrics = _make_analyzer()
        metrics.track_error(_record("kept"))
        with pytest.raises(ValidationError):
            metrics.import_data(data)
        assert metrics.log.open_ids() == ("kept",)

    def test_clear(self):
        metrics = _make_analyzer()
        metrics.track_error(_record("a"))
        metrics.track_resolution("a")
        metrics.clear()
        assert len(metrics.log) == 0
        assert metrics.log.resolutions() == ()
        assert metrics.track_error(_record("a")) is True
