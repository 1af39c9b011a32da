"""GitHub Actions formatter: workflow command annotations."""

from typing import List, Sequence

from ..models import ErrorRecord, Severity
from .base import BaseFormatter, ReportOptions, sort_records

_LEVELS = {
    Severity.CRITICAL: "error",
    Severity.ERROR: "error",
    Severity.WARNING: "warning",
    Severity.INFO: "notice",
}


def _escape_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def _escape_property(value: str) -> str:
    return _escape_data(value).replace(":", "%3A").replace(",", "%2C")


class GithubFormatter(BaseFormatter):
    """Output ``::error`` / ``::warning`` / ``::notice`` annotations."""

    name = "github"

    def format(self, records: Sequence[ErrorRecord], options: ReportOptions) -> str:
        lines: List[str] = []
        for r in sort_records(records, options.sort_by):
            props = [f"file={_escape_property(r.location.file_path)}", f"line={r.location.line}"]
            if r.location.column is not None:
                props.append(f"col={r.location.column}")
            props.append(f"title={_escape_property(r.rule or r.category.value)}")
            msg = f"[{r.detected_by}] {r.message}"
            lines.append(f"::{_LEVELS[r.severity]} {','.join(props)}::{_escape_data(msg)}")
        return "\n".join(lines)
