"""End-to-end tests for the errorscope command line."""

import json
import logging

import pytest
from typer.testing import CliRunner

from errorscope.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    """No user config, and leave logging as it was found."""
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)
    for key in ("ERRORSCOPE_WORKERS", "ERRORSCOPE_IGNORE_PATTERNS", "ERRORSCOPE_CACHE_ENABLED"):
        monkeypatch.delenv(key, raising=False)
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    package_level = logging.getLogger("errorscope").level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("errorscope").setLevel(package_level)


class TestVersion:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "errorscope 0.1.0" in result.output


class TestScan:
    def test_table(self, project):
        result = runner.invoke(app, ["scan", str(project)])
        assert result.exit_code == 0
        assert "errors" in result.output
        assert "Severity" in result.output

    def test_no_issues(self, empty_project):
        result = runner.invoke(app, ["scan", str(empty_project)])
        assert result.exit_code == 0
        assert "No issues found" in result.output

    def test_json_report(self, project):
        result = runner.invoke(app, ["scan", str(project / "broken.py"), "-f", "json"])
        assert result.exit_code == 0
        report = json.loads(result.stdout)
        assert report["summary"]["errors"] >= 1
        assert "syntax" in {e["category"] for e in report["errors"]}

    def test_output_file(self, project, tmp_path):
        target = tmp_path / "report.md"
        result = runner.invoke(app, ["scan", str(project), "-f", "markdown", "-o", str(target)])
        assert result.exit_code == 0
        assert "Report written" in result.output
        assert target.read_text(encoding="utf-8").startswith("#")

    def test_fail_on_error(self, project):
        result = runner.invoke(app, ["scan", str(project), "--fail-on", "error"])
        assert result.exit_code == 1

    def test_fail_on_warning_clean_tree(self, empty_project):
        result = runner.invoke(app, ["scan", str(empty_project), "--fail-on", "warning"])
        assert result.exit_code == 0

    def test_unknown_format(self, project):
        result = runner.invoke(app, ["scan", str(project), "-f", "xml"])
        assert result.exit_code != 0

    def test_missing_path(self, tmp_path):
        result = runner.invoke(app, ["scan", str(tmp_path / "nope")])
        assert result.exit_code != 0


class TestPatterns:
    def test_lists_by_language(self):
        result = runner.invoke(app, ["patterns", "-l", "python"])
        assert result.exit_code == 0
        assert "Solutions" in result.output

    def test_no_match(self):
        result = runner.invoke(app, ["patterns", "-s", "qqqxyzzy"])
        assert result.exit_code == 0
        assert "No matching patterns" in result.output


class TestPrevention:
    def test_known_category(self):
        result = runner.invoke(app, ["prevention", "security"])
        assert result.exit_code == 0
        assert "Recommended tools:" in result.output

    def test_unknown_category(self):
        result = runner.invoke(app, ["prevention", "weather"])
        assert result.exit_code == 1
        assert "No strategies for" in result.output


class TestResolve:
    def test_suggests_fixes(self, project):
        result = runner.invoke(app, ["resolve", str(project / "app.py")])
        assert result.exit_code == 0
        assert "Fix:" in result.output

    def test_explain(self, project):
        result = runner.invoke(app, ["resolve", str(project / "app.py"), "--explain"])
        assert result.exit_code == 0
        assert "Impact:" in result.output
        assert "Urgency:" in result.output

    def test_clean_tree(self, empty_project):
        result = runner.invoke(app, ["resolve", str(empty_project)])
        assert result.exit_code == 0
        assert "No issues found" in result.output
