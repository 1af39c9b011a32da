"""Report generation: validate options, coerce records, pick a formatter."""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping, Optional, Union

from ..config import AnalysisConfig
from ..exceptions import ValidationError
from ..models import ErrorRecord
from .base import ReportOptions
from .registry import get_formatter

logger = logging.getLogger(__name__)

OptionsLike = Union[ReportOptions, Mapping[str, Any], None]


class ReportGenerator:
    """Render error records in any registered format.

    ``defaults`` are applied under every call's options. Output is a pure
    function of (records, options): the generation time only appears when
    ``include_timestamp`` is set.
    """

    def __init__(self, defaults: OptionsLike = None) -> None:
        self._defaults = _resolve(ReportOptions(), defaults)

    @classmethod
    def from_config(cls, config: AnalysisConfig) -> "ReportGenerator":
        return cls(ReportOptions(format=config.report_format, sort_by=config.report_sort_by))

    @property
    def defaults(self) -> ReportOptions:
        return self._defaults

    def generate(self, records: Iterable[Any], options: OptionsLike = None) -> str:
        """Render ``records``.

        Raises:
            FormatError: unknown format.
            ValidationError: unknown option key or a malformed record.
        """
        opts = _resolve(self._defaults, options)
        formatter = get_formatter(opts.format)
        items = coerce_records(records)
        logger.debug(f"Rendering {len(items)} records as {opts.format}")
        return formatter.format(items, opts)


def _resolve(base: ReportOptions, options: OptionsLike) -> ReportOptions:
    if options is None:
        return base
    if isinstance(options, ReportOptions):
        return options
    if isinstance(options, Mapping):
        return base.merged(options)
    raise ValidationError("options", "expected ReportOptions or a mapping")


def coerce_records(records: Iterable[Any]) -> List[ErrorRecord]:
    if records is None or isinstance(records, (str, bytes, Mapping)):
        raise ValidationError("errors", "expected a list of error records")
    items: List[ErrorRecord] = []
    for raw in records:
        if isinstance(raw, ErrorRecord):
            items.append(raw)
        else:
            items.append(ErrorRecord.from_dict(raw))
    return items
