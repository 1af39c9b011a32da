"""Formatter lookup by name."""

from typing import Dict, List, Type

from ..exceptions import FormatError
from .base import BaseFormatter
from .csv_formatter import CsvFormatter
from .github_formatter import GithubFormatter
from .html_formatter import HtmlFormatter
from .json_formatter import JsonFormatter
from .markdown_formatter import MarkdownFormatter

_FORMATTERS: Dict[str, Type[BaseFormatter]] = {
    "json": JsonFormatter,
    "markdown": MarkdownFormatter,
    "html": HtmlFormatter,
    "csv": CsvFormatter,
    "github": GithubFormatter,
}


def available_formats() -> List[str]:
    return sorted(_FORMATTERS)


def get_formatter(name: str) -> BaseFormatter:
    """Get a formatter instance by name.

    Args:
        name: One of "json", "markdown", "html", "csv", "github"

    Raises:
        FormatError: If name is not recognized
    """
    cls = _FORMATTERS.get(name) if isinstance(name, str) else None
    if cls is None:
        raise FormatError(name, _FORMATTERS)
    return cls()
