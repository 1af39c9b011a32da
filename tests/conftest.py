"""Shared test fixtures for errorscope tests."""

from datetime import datetime, timezone
from pathlib import Path
from typing import Dict

import pytest

from errorscope.config import AnalysisConfig
from errorscope.models import Category, ErrorRecord, Location, Severity, make_error_id


def pytest_addoption(parser):
    """Add --run-slow option for slow tests."""
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="run slow tests",
    )


def pytest_configure(config):
    """Configure slow marker."""
    config.addinivalue_line("markers", "slow: mark test as slow to run")


def pytest_collection_modifyitems(config, items):
    """Skip slow tests unless --run-slow is given."""
    if config.getoption("--run-slow"):
        return
    skip_slow = pytest.mark.skip(reason="need --run-slow option to run")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


T0 = datetime(2024, 3, 4, 10, 0, tzinfo=timezone.utc)


def make_record(
    message="Something broke",
    category=Category.RUNTIME,
    severity=Severity.ERROR,
    file_path="src/app.py",
    line=1,
    column=None,
    detected_by="TestAnalyzer",
    rule=None,
    timestamp=T0,
    language=None,
    context=None,
) -> ErrorRecord:
    location = Location(file_path=file_path, line=line, column=column, context=context)
    return ErrorRecord(
        id=make_error_id(detected_by, rule, location, message),
        category=category,
        severity=severity,
        location=location,
        message=message,
        detected_by=detected_by,
        timestamp=timestamp,
        rule=rule,
        language=language,
    )


def write_tree(root: Path, files: Dict[str, str]) -> Path:
    """Create ``files`` (relative path -> content) under ``root``."""
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def config():
    """Default configuration with caching off."""
    return AnalysisConfig()


@pytest.fixture
def project(tmp_path):
    """A small mixed-language project with known defects."""
    return write_tree(
        tmp_path / "proj",
        {
            "app.py": "def add(item, items=[]):\n    items.append(item)\n    return items\n",
            "broken.py": "def f(:\n    pass\n",
            "web/index.js": "if (a == b) {\n  console.log(a);\n}\n",
            "package.json": '{"name": "demo", "version": "1.0.0", "license": "MIT", '
            '"engines": {"node": ">=18"}}\n',
            "node_modules/lib/index.js": "eval(x)\n",
            "README.md": "# not analyzed\n",
        },
    )


@pytest.fixture
def empty_project(tmp_path):
    """A directory with no analyzable files."""
    return write_tree(tmp_path / "empty", {"notes.txt": "hello\n", "image.png": "x"})
