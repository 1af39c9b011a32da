"""Tests for RealTimeMonitor session management."""

import threading

import pytest

from errorscope.analysis import AnalysisEngine
from errorscope.config import AnalysisConfig
from errorscope.exceptions import (
    AlreadyMonitoringError,
    PathError,
    UnknownMonitorError,
    ValidationError,
)
from errorscope.models import MonitorHandle, MonitorStatus
from errorscope.monitor import MonitorOptions, RealTimeMonitor

from conftest import T0, write_tree
from fakes import BlockingEngine, FakeWatcherFactory, wait_for


@pytest.fixture
def factory():
    return FakeWatcherFactory()


@pytest.fixture
def monitor(factory):
    engine = AnalysisEngine.with_default_analyzers()
    mon = RealTimeMonitor(
            engine, debounce_seconds=0.05, watcher_factory=factory, config=AnalysisConfig()
        )
    yield mon
    mon.stop_all()


class TestStart:
    def test_start_returns_watching_handle(self, monitor, factory, project):
        handle = monitor.start(project)
        assert handle.status is MonitorStatus.WATCHING
        assert handle.id.startswith("mon_")
        assert handle.project_path == str(project.resolve())
        assert factory.last.started
        assert monitor.is_monitoring(project)
        assert monitor.get_handle(project) == handle

    def test_second_start_reports_existing_session(self, monitor, factory, project):
        first = monitor.start(project)
        with pytest.raises(AlreadyMonitoringError) as exc:
            monitor.start(project)
        assert exc.value.handle.id == first.id
        assert len(factory.watchers) == 1

    def test_start_or_get_is_idempotent(self, monitor, project):
        handle, created = monitor.start_or_get(project)
        again, created_again = monitor.start_or_get(str(project) + "/.")
        assert created is True
        assert created_again is False
        assert again.id == handle.id

    def test_missing_directory(self, monitor, tmp_path):
        with pytest.raises(PathError):
            monitor.start(tmp_path / "missing")

    def test_file_is_rejected(self, monitor, project):
        with pytest.raises(PathError):
            monitor.start(project / "app.py")

    def test_watcher_failure_leaves_no_session(self, project):
        def broken_factory(root, on_change, watch_filter):
            raise OSError("inotify limit reached")

        mon = RealTimeMonitor(AnalysisEngine(), watcher_factory=broken_factory)
        with pytest.raises(OSError):
            mon.start(project)
        assert not mon.is_monitoring(project)

    def test_concurrent_starts_create_one_session(self, monitor, factory, project):
        results = []

        def start():
            results.append(monitor.start_or_get(project))

        threads = [threading.Thread(target=start) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sum(1 for _, created in results if created) == 1
        assert len({handle.id for handle, _ in results}) == 1
        assert len(factory.watchers) == 1


class TestStop:
    def test_stop(self, monitor, factory, project):
        handle = monitor.start(project)
        stopped = monitor.stop(handle)
        assert stopped.id == handle.id
        assert stopped.status is MonitorStatus.STOPPED
        assert factory.last.stopped
        assert not monitor.is_monitoring(project)

    def test_stop_twice_is_noop(self, monitor, project):
        handle = monitor.start(project)
        monitor.stop(handle)
        again = monitor.stop(handle)
        assert again.status is MonitorStatus.STOPPED
        assert again.id == handle.id

    def test_restart_issues_new_id(self, monitor, project):
        first = monitor.start(project)
        monitor.stop(first)
        second = monitor.start(project)
        assert second.id != first.id

    def test_stale_handle_does_not_stop_new_session(self, monitor, project):
        first = monitor.start(project)
        monitor.stop(first)
        second = monitor.start(project)
        monitor.stop(first)
        assert monitor.get_handle(project) == second

    def test_unknown_handle(self, monitor, project):
        foreign = MonitorHandle(id="mon_foreign", project_path=str(project), start_time=T0)
        with pytest.raises(UnknownMonitorError):
            monitor.stop(foreign)

    def test_stop_path(self, monitor, project):
        handle = monitor.start(project)
        assert monitor.stop_path(project).id == handle.id
        with pytest.raises(UnknownMonitorError):
            monitor.stop_path(project)

    def test_stop_all(self, monitor, tmp_path):
        a = write_tree(tmp_path / "a", {"x.py": ""})
        b = write_tree(tmp_path / "b", {"y.py": ""})
        monitor.start(a)
        monitor.start(b)
        stopped = monitor.stop_all()
        assert len(stopped) == 2
        assert monitor.overview()["is_monitoring"] is False


class TestRescans:
    def test_change_triggers_debounced_rescan(self, monitor, factory, project):
        scans = []
        monitor.on_scan = lambda handle, result: scans.append(result)
        monitor.start(project)
        factory.last.emit(str(project / "app.py"))

        assert wait_for(lambda: monitor.get_status(project).scans_completed == 1)
        status = monitor.get_status(project)
        assert status.last_result is not None
        assert status.last_result.metrics.total > 0
        assert status.recent_changes == (str(project / "app.py"),)
        assert wait_for(lambda: len(scans) == 1)

    def test_burst_of_changes_is_one_rescan(self, factory, project):
        mon = RealTimeMonitor(
            AnalysisEngine.with_default_analyzers(), debounce_seconds=0.3, watcher_factory=factory
        )
        try:
            mon.start(project)
            for name in ("a.py", "b.py", "c.py"):
                factory.last.emit(str(project / name))
            assert wait_for(lambda: mon.get_status(project).scans_completed >= 1)
            assert not wait_for(lambda: mon.get_status(project).scans_completed > 1, timeout=0.6)
        finally:
            mon.stop_all()

    def test_initial_scan(self, monitor, project):
        monitor.start(project, MonitorOptions(initial_scan=True))
        assert wait_for(lambda: monitor.get_status(project).scans_completed == 1)

    def test_status_before_first_scan(self, monitor, project):
        monitor.start(project)
        status = monitor.get_status(project)
        assert status.last_result is None
        assert status.to_dict()["scanned"] is False

    def test_session_ignore_patterns(self, monitor, project):
        monitor.start(project, MonitorOptions(initial_scan=True, ignore_patterns=("web",)))
        assert wait_for(lambda: monitor.get_status(project).scans_completed == 1)
        result = monitor.get_status(project).last_result
        assert not any(r.location.file_path.startswith("web/") for r in result.records)

    def test_status_unknown_path(self, monitor, tmp_path):
        with pytest.raises(UnknownMonitorError):
            monitor.get_status(tmp_path)

    def test_overview(self, monitor, project):
        assert monitor.overview() == {"is_monitoring": False, "sessions": [], "uptime_seconds": 0.0}
        handle = monitor.start(project)
        overview = monitor.overview()
        assert overview["is_monitoring"] is True
        assert [s["monitor"]["id"] for s in overview["sessions"]] == [handle.id]

    def test_stop_during_rescan_stays_stopped(self, factory, project):
        engine = BlockingEngine()
        mon = RealTimeMonitor(engine, debounce_seconds=0.05, watcher_factory=factory)
        mon.start(project, MonitorOptions(initial_scan=True))
        assert engine.entered.wait(5)
        session = mon.registry.get(str(project.resolve()))

        stopped = mon.stop_path(project)
        engine.release.set()
        assert engine.finished.wait(5)

        assert stopped.status is MonitorStatus.STOPPED
        assert not wait_for(lambda: session.status().scans_completed > 0, timeout=0.2)
        status = session.status()
        assert status.last_result is None
        assert status.handle.status is MonitorStatus.STOPPED
        assert not mon.is_monitoring(project)


class TestHistory:
    def test_force_rescan_all_sessions(self, monitor, tmp_path):
        a = write_tree(tmp_path / "a", {"x.py": "def f(:\n"})
        b = write_tree(tmp_path / "b", {"y.py": ""})
        first, second = monitor.start(a), monitor.start(b)

        queued = monitor.force_rescan()
        assert {h.id for h in queued} == {first.id, second.id}
        assert wait_for(lambda: monitor.get_status(a).scans_completed == 1)
        assert wait_for(lambda: monitor.get_status(b).scans_completed == 1)

    def test_fix_shows_in_history(self, monitor, tmp_path):
        root = write_tree(tmp_path / "proj", {"broken.py": "def f(:\n"})
        monitor.start(root)
        monitor.force_rescan()
        assert wait_for(lambda: monitor.get_status(root).scans_completed == 1)
        assert monitor.get_status(root).errors_detected >= 1

        (root / "broken.py").write_text("def f():\n    return 1\n", encoding="utf-8")
        monitor.force_rescan()
        assert wait_for(lambda: monitor.get_status(root).scans_completed == 2)

        status = monitor.get_status(root)
        assert status.fixed_errors
        fixed = monitor.get_history(root, action="removed")
        assert {e.record.id for e in fixed} == {r.id for r in status.fixed_errors}

        monitor.clear_history(root)
        assert monitor.get_history(root) == []

    def test_force_rescan_without_sessions(self, monitor):
        assert monitor.force_rescan() == []

    def test_history_unknown_path(self, monitor, tmp_path):
        with pytest.raises(UnknownMonitorError):
            monitor.get_history(tmp_path)

    def test_history_bad_action(self, monitor, project):
        monitor.start(project)
        with pytest.raises(ValidationError):
            monitor.get_history(project, action="renamed")
