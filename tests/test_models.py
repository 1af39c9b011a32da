"""Tests for errorscope.models."""

from datetime import timezone

import pytest

from errorscope.exceptions import ValidationError
from errorscope.models import (
    Category,
    ErrorRecord,
    Location,
    ScanMetrics,
    Severity,
    make_error_id,
)

from conftest import T0, make_record


class TestEnums:
    def test_category_parse_accepts_value_and_member(self):
        assert Category.parse("Runtime") is Category.RUNTIME
        assert Category.parse(Category.SECURITY) is Category.SECURITY
        assert Category.parse("analyzer-failure") is Category.ANALYZER_FAILURE

    def test_category_parse_rejects_unknown(self):
        with pytest.raises(ValueError):
            Category.parse("nonsense")

    def test_severity_rank_and_error_class(self):
        ranks = [s.rank for s in (Severity.INFO, Severity.WARNING, Severity.ERROR, Severity.CRITICAL)]
        assert ranks == sorted(ranks)
        assert Severity.ERROR.is_error and Severity.CRITICAL.is_error
        assert not Severity.WARNING.is_error and not Severity.INFO.is_error


class TestErrorId:
    def test_deterministic(self):
        loc = Location("a.py", 3, 4)
        assert make_error_id("X", "r", loc, "m") == make_error_id("X", "r", loc, "m")

    def test_differs_by_location(self):
        a = make_error_id("X", "r", Location("a.py", 3), "m")
        b = make_error_id("X", "r", Location("a.py", 4), "m")
        assert a != b
        assert a.startswith("err_")


class TestErrorRecord:
    def test_is_frozen(self):
        record = make_record()
        with pytest.raises(Exception):
            record.message = "changed"

    def test_to_dict(self):
        record = make_record(rule="bare_except", line=7, column=5)
        data = record.to_dict()
        assert data["category"] == "runtime"
        assert data["severity"] == "error"
        assert data["location"] == {
            "file_path": "src/app.py",
            "line": 7,
            "column": 5,
            "context": None,
        }
        assert data["rule"] == "bare_except"

    def test_from_dict_camel_case(self):
        record = ErrorRecord.from_dict(
            {
                "id": "e1",
                "type": "syntax",
                "severity": "warning",
                "message": "Missing semicolon",
                "detectedBy": "SyntaxAnalyzer",
                "location": {"filePath": "index.js", "line": 2, "column": 9},
                "timestamp": "2024-03-04T10:00:00Z",
            }
        )
        assert record.id == "e1"
        assert record.category is Category.SYNTAX
        assert record.severity is Severity.WARNING
        assert record.detected_by == "SyntaxAnalyzer"
        assert record.location == Location("index.js", 2, 9)
        assert record.timestamp == T0

    def test_from_dict_generates_id(self):
        record = ErrorRecord.from_dict(
            {"category": "runtime", "message": "boom", "location": {"file_path": "a.py"}}
        )
        assert record.id.startswith("err_")
        assert record.severity is Severity.ERROR
        assert record.timestamp.tzinfo is not None

    def test_naive_timestamp_becomes_utc(self):
        record = ErrorRecord.from_dict(
            {
                "category": "runtime",
                "message": "boom",
                "location": {"file_path": "a.py"},
                "timestamp": "2024-03-04T10:00:00",
            }
        )
        assert record.timestamp.tzinfo == timezone.utc

    @pytest.mark.parametrize(
        "data, field",
        [
            ({"category": "runtime", "location": {"file_path": "a.py"}}, "message"),
            ({"message": "x", "location": {"file_path": "a.py"}}, "category"),
            ({"message": "x", "category": "bogus", "location": {"file_path": "a.py"}}, "category"),
            ({"message": "x", "category": "runtime"}, "location.file_path"),
            (
                {"message": "x", "category": "runtime", "location": {"file_path": "a", "line": 0}},
                "location.line",
            ),
            (
                {"message": "x", "category": "runtime", "location": {"file_path": "a"},
                 "timestamp": "yesterday"},
                "timestamp",
            ),
            ({"message": "x", "category": "runtime", "location": {"file_path": "a"}, "detectedBy": 5},
             "detected_by"),
            ({"message": "x", "category": "runtime", "location": {"file_path": "a"}, "rule": ["r"]},
             "rule"),
            ({"message": "x", "category": "runtime", "location": {"file_path": "a"}, "id": 7}, "id"),
            ({"message": "x", "category": "runtime", "location": {"file_path": "a"}, "language": 3},
             "language"),
            ({"message": "x", "category": "runtime", "location": {"file_path": "a", "context": 1}},
             "location.context"),
        ],
    )
    def test_from_dict_rejects_malformed(self, data, field):
        with pytest.raises(ValidationError) as exc:
            ErrorRecord.from_dict(data)
        assert exc.value.field == field

    def test_from_dict_rejects_non_mapping(self):
        with pytest.raises(ValidationError):
            ErrorRecord.from_dict(["not", "a", "dict"])


class TestScanMetrics:
    def test_empty(self):
        metrics = ScanMetrics.from_records([])
        assert metrics.total == 0
        assert metrics.errors == 0
        assert metrics.warnings == 0
        assert metrics.by_category == {}

    def test_counts(self):
        records = [
            make_record("a", Category.SYNTAX, Severity.ERROR, file_path="a.py"),
            make_record("b", Category.SYNTAX, Severity.WARNING, file_path="a.py"),
            make_record("c", Category.SECURITY, Severity.CRITICAL, file_path="b.py"),
        ]
        metrics = ScanMetrics.from_records(records, analyzers_run=2)
        assert metrics.total == 3
        assert metrics.errors == 2
        assert metrics.warnings == 1
        assert metrics.files_affected == 2
        assert metrics.by_category == {"security": 1, "syntax": 2}
        assert metrics.by_severity == {"critical": 1, "error": 1, "warning": 1}
        assert metrics.to_dict()["analyzers_run"] == 2
