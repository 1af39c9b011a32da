"""Report formatters for errorscope."""

from .base import BaseFormatter, ReportOptions, group_by_category, sort_records
from .csv_formatter import CsvFormatter
from .github_formatter import GithubFormatter
from .html_formatter import HtmlFormatter
from .json_formatter import JsonFormatter
from .markdown_formatter import MarkdownFormatter
from .registry import available_formats, get_formatter
from .report import ReportGenerator

__all__ = [
    "BaseFormatter",
    "ReportOptions",
    "ReportGenerator",
    "JsonFormatter",
    "MarkdownFormatter",
    "HtmlFormatter",
    "CsvFormatter",
    "GithubFormatter",
    "get_formatter",
    "available_formats",
    "group_by_category",
    "sort_records",
]
