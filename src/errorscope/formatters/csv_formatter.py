"""CSV formatter."""

import csv
import io
from typing import Sequence

from ..models import ErrorRecord
from .base import BaseFormatter, ReportOptions, sort_records

COLUMNS = (
    "id", "category", "severity", "file", "line", "column",
    "rule", "detected_by", "message",
)


class CsvFormatter(BaseFormatter):
    """Render records as CSV, one row per record."""

    name = "csv"

    def render(self, records: Sequence[ErrorRecord], options: ReportOptions) -> None:
        print(self.format(records, options), end="")

    def format(self, records: Sequence[ErrorRecord], options: ReportOptions) -> str:
        output = io.StringIO()
        writer = csv.writer(output, lineterminator="\n")
        writer.writerow(COLUMNS)
        for r in sort_records(records, options.sort_by):
            writer.writerow([
                r.id, r.category.value, r.severity.value,
                r.location.file_path, r.location.line,
                "" if r.location.column is None else r.location.column,
                r.rule or "", r.detected_by, r.message,
            ])
        return output.getvalue()
