"""HTML formatter: a self-contained page with no external assets."""

from html import escape
from typing import List, Sequence

from ..models import ErrorRecord, ScanMetrics
from .base import BaseFormatter, ReportOptions, category_title, group_by_category, sort_records

STYLES = """
* { box-sizing: border-box; }
body { font-family: -apple-system, 'Segoe UI', Roboto, sans-serif; line-height: 1.5; color: #333; background: #f5f5f5; margin: 0; }
.container { max-width: 1100px; margin: 0 auto; padding: 20px; }
header { background: #2c3e50; color: #fff; padding: 20px; border-radius: 8px; margin-bottom: 20px; }
.meta { opacity: 0.8; font-size: 14px; margin: 4px 0; }
section { background: #fff; padding: 20px; border-radius: 8px; margin-bottom: 20px; }
h2 { color: #2c3e50; border-bottom: 2px solid #3498db; padding-bottom: 8px; }
.summary-grid { display: grid; grid-template-columns: repeat(auto-fit, minmax(160px, 1fr)); gap: 12px; }
.summary-card { background: #f8f9fa; padding: 12px; border-radius: 6px; text-align: center; }
.summary-card .value { font-size: 24px; font-weight: bold; color: #3498db; }
.issue { border: 1px solid #ddd; border-radius: 6px; margin-bottom: 12px; padding: 8px 12px; }
.issue summary { cursor: pointer; }
.severity-critical { border-left: 4px solid #c0392b; }
.severity-error { border-left: 4px solid #e67e22; }
.severity-warning { border-left: 4px solid #f1c40f; }
.severity-info { border-left: 4px solid #3498db; }
.badge { display: inline-block; padding: 2px 8px; border-radius: 4px; font-size: 12px; font-weight: bold; color: #fff; background: #7f8c8d; margin-left: 4px; }
.location { font-family: monospace; background: #f8f9fa; padding: 6px; border-radius: 4px; }
pre { background: #2c3e50; color: #ecf0f1; padding: 12px; border-radius: 4px; overflow-x: auto; }
""".strip()


class HtmlFormatter(BaseFormatter):
    """Render records as a standalone HTML page. All record text is escaped."""

    name = "html"

    def format(self, records: Sequence[ErrorRecord], options: ReportOptions) -> str:
        ordered = sort_records(records, options.sort_by)
        title = escape(options.title)
        out: List[str] = [
            "<!DOCTYPE html>",
            '<html lang="en">',
            "<head>",
            '<meta charset="UTF-8">',
            f"<title>{title}</title>",
            f"<style>\n{STYLES}\n</style>",
            "</head>",
            "<body>",
            '<div class="container">',
            "<header>",
            f"<h1>{title}</h1>",
        ]
        stamp = options.timestamp()
        if stamp is not None:
            out.append(f'<p class="meta">Generated: {escape(stamp)}</p>')
        out.append(f'<p class="meta">Total issues: {len(ordered)}</p>')
        out.append("</header>")
        out.extend(self._summary(ordered))

        out.append('<section class="issues">')
        if not ordered:
            out.append("<p>No issues found.</p>")
        elif options.group_by_category:
            for category, members in group_by_category(ordered).items():
                out.append(f"<h2>{escape(category_title(category))} ({len(members)})</h2>")
                out.extend(self._record(r, options) for r in members)
        else:
            out.append("<h2>Issues</h2>")
            out.extend(self._record(r, options) for r in ordered)
        out += ["</section>", "</div>", "</body>", "</html>"]
        return "\n".join(out) + "\n"

    @staticmethod
    def _summary(records: Sequence[ErrorRecord]) -> List[str]:
        metrics = ScanMetrics.from_records(list(records))
        cards = [("Errors", metrics.errors), ("Warnings", metrics.warnings),
                 ("Files affected", metrics.files_affected)]
        cards += sorted(metrics.by_severity.items())
        out = ['<section class="summary">', "<h2>Summary</h2>", '<div class="summary-grid">']
        for label, value in cards:
            out.append(
                f'<div class="summary-card"><div class="value">{value}</div>'
                f'<div class="label">{escape(str(label))}</div></div>'
            )
        out += ["</div>", "</section>"]
        return out

    @staticmethod
    def _record(record: ErrorRecord, options: ReportOptions) -> str:
        sev = record.severity.value
        parts = [
            f'<details class="issue severity-{sev}" data-category="{record.category.value}" '
            f'data-severity="{sev}">',
            f"<summary><strong>{escape(record.message)}</strong>"
            f'<span class="badge">{sev}</span>'
            f'<span class="badge">{record.category.value}</span></summary>',
            f'<p class="location">{escape(str(record.location))}</p>',
            f"<p>Detected by {escape(record.detected_by)}"
            + (f" (rule <code>{escape(record.rule)}</code>)" if record.rule else "")
            + "</p>",
        ]
        if options.include_context and record.location.context:
            parts.append(f"<pre>{escape(record.location.context)}</pre>")
        parts.append("</details>")
        return "\n".join(parts)
