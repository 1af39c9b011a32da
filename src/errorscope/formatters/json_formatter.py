"""JSON formatter."""

import json
from typing import Any, Dict, Sequence

from ..models import ErrorRecord, ScanMetrics
from .base import BaseFormatter, ReportOptions, group_by_category, sort_records


class JsonFormatter(BaseFormatter):
    """Render records as a structured JSON document."""

    name = "json"

    def format(self, records: Sequence[ErrorRecord], options: ReportOptions) -> str:
        ordered = sort_records(records, options.sort_by)
        metrics = ScanMetrics.from_records(ordered)

        report: Dict[str, Any] = {"title": options.title}
        stamp = options.timestamp()
        if stamp is not None:
            report["generated_at"] = stamp
        report["summary"] = {
            "total": metrics.total,
            "errors": metrics.errors,
            "warnings": metrics.warnings,
            "files_affected": metrics.files_affected,
            "by_category": metrics.by_category,
            "by_severity": metrics.by_severity,
        }
        report["errors"] = [self._record(r, options) for r in ordered]
        if options.group_by_category:
            report["errors_by_category"] = {
                category.value: [r.id for r in members]
                for category, members in group_by_category(ordered).items()
            }
        return json.dumps(report, indent=2)

    @staticmethod
    def _record(record: ErrorRecord, options: ReportOptions) -> Dict[str, Any]:
        data = record.to_dict()
        if not options.include_context:
            data["location"].pop("context", None)
        return data
