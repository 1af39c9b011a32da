"""Validation steps that confirm a fix worked."""

from __future__ import annotations

from typing import List, Optional

from ..models import Category, ErrorRecord, ValidationStep

_COMMANDS = {
    "python": {
        "lint": "ruff check {file}",
        "compile": "python -m py_compile {file}",
        "test": "pytest",
        "audit": "bandit -r .",
    },
    "javascript": {
        "lint": "npx eslint {file}",
        "compile": "npm run build",
        "test": "npm test",
        "audit": "npm audit",
    },
    "json": {"compile": "python -m json.tool {file}"},
}
_COMMANDS["typescript"] = dict(_COMMANDS["javascript"], compile="npx tsc --noEmit")

VALIDATION_TEMPLATES: dict[Category, list[tuple[str, Optional[str]]]] = {
    Category.SYNTAX: [
        ("Run the linter to check for syntax errors", "lint"),
        ("Compile or parse the file", "compile"),
        ("Verify no new errors in editor", None),
    ],
    Category.RUNTIME: [
        ("Run unit tests", "test"),
        ("Test the specific functionality manually", None),
        ("Check application logs for errors", None),
    ],
    Category.SECURITY: [
        ("Run security audit", "audit"),
        ("Test with malicious input", None),
        ("Review code for similar vulnerabilities", None),
    ],
    Category.CONFIGURATION: [
        ("Validate configuration file syntax", "compile"),
        ("Restart the application", None),
        ("Verify the application starts without errors", None),
    ],
    Category.PERFORMANCE: [
        ("Run performance profiler", None),
        ("Compare before/after metrics", None),
        ("Test with realistic data volume", None),
    ],
    Category.LOGICAL: [
        ("Add a test describing the intended behaviour", None),
        ("Run unit tests", "test"),
    ],
    Category.ANALYZER_FAILURE: [
        ("Re-run the scan with verbose logging to capture the traceback", None),
    ],
}


def _command(key: Optional[str], language: Optional[str], file_path: str) -> Optional[str]:
    if key is None or language is None:
        return None
    template = _COMMANDS.get(language, {}).get(key)
    return template.format(file=file_path) if template else None


def build_validation_steps(record: ErrorRecord, language: Optional[str]) -> List[ValidationStep]:
    """Category steps, then a targeted re-run, then the regression suite."""
    file_path = record.location.file_path
    steps = [
        ValidationStep(description, _command(key, language, file_path))
        for description, key in VALIDATION_TEMPLATES.get(record.category, [])
    ]
    steps.append(
        ValidationStep(
            f"Re-run {record.detected_by} against {file_path} and confirm the error "
            f"no longer appears",
            f"errorscope scan {file_path}",
        )
    )
    steps.append(
        ValidationStep("Run the full regression suite", _command("test", language, file_path))
    )
    return steps


def generic_validation_steps() -> List[ValidationStep]:
    return [
        ValidationStep("Reproduce the reported problem"),
        ValidationStep("Apply the fix and re-run the scan", "errorscope scan ."),
        ValidationStep("Run the full regression suite"),
    ]
