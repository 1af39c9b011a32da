"""Markdown formatter: a narrative report for humans and PR comments."""

from typing import List, Sequence

from ..models import ErrorRecord, ScanMetrics
from .base import BaseFormatter, ReportOptions, category_title, group_by_category, sort_records


class MarkdownFormatter(BaseFormatter):
    """Render records as a Markdown document."""

    name = "markdown"

    def format(self, records: Sequence[ErrorRecord], options: ReportOptions) -> str:
        ordered = sort_records(records, options.sort_by)
        lines: List[str] = [f"# {options.title}", ""]
        stamp = options.timestamp()
        if stamp is not None:
            lines.append(f"**Generated:** {stamp}")
        lines.append(f"**Total Issues:** {len(ordered)}")
        lines.append("")
        lines.extend(self._summary(ordered))

        if not ordered:
            lines.append("No issues found.")
            lines.append("")
        elif options.group_by_category:
            for category, members in group_by_category(ordered).items():
                lines.append(f"## {category_title(category)} ({len(members)})")
                lines.append("")
                for r in members:
                    lines.extend(self._record(r, options))
        else:
            lines.append("## Issues")
            lines.append("")
            for r in ordered:
                lines.extend(self._record(r, options))

        return "\n".join(lines).rstrip("\n") + "\n"

    @staticmethod
    def _summary(records: Sequence[ErrorRecord]) -> List[str]:
        metrics = ScanMetrics.from_records(list(records))
        lines = [
            "## Summary",
            "",
            "| Metric | Count |",
            "|--------|-------|",
            f"| Errors | {metrics.errors} |",
            f"| Warnings | {metrics.warnings} |",
            f"| Files affected | {metrics.files_affected} |",
            "",
        ]
        if metrics.by_category:
            lines += ["### By Category", "", "| Category | Count |", "|----------|-------|"]
            lines += [f"| {k} | {v} |" for k, v in metrics.by_category.items()]
            lines.append("")
        if metrics.by_severity:
            lines += ["### By Severity", "", "| Severity | Count |", "|----------|-------|"]
            lines += [f"| {k} | {v} |" for k, v in metrics.by_severity.items()]
            lines.append("")
        return lines

    @staticmethod
    def _record(record: ErrorRecord, options: ReportOptions) -> List[str]:
        lines = [
            f"### {record.message}",
            "",
            f"**Severity:** {record.severity.value} | "
            f"**Category:** {record.category.value} | "
            f"**Detected by:** {record.detected_by}",
            "",
            f"**Location:** `{record.location}`",
            "",
        ]
        if record.rule:
            lines += [f"**Rule:** `{record.rule}`", ""]
        if options.include_context and record.location.context:
            lines += ["```", record.location.context, "```", ""]
        lines += ["---", ""]
        return lines
