"""Single-pass corpus statistics over a CSV dataset."""
from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Optional

from loguru import logger

from .entities import DEFAULT_CATEGORY, DatasetStatistics, LogicalColumnMap
from .records import iter_records
from .source import RowSource


class StreamingCsvAnalyzer:
    """Collect category frequencies, the time range and risk-column presence.

    Rows are read one at a time and discarded; only the counters survive the
    pass. Rows whose timestamp cannot be parsed are skipped here and in every
    later pass, so ``row_count`` is the number of rows the encoder will see.
    """

    def __init__(self, column_map: LogicalColumnMap) -> None:
        self._column_map = column_map

    def analyze(self, source: RowSource) -> DatasetStatistics:
        category_counts: Dict[str, int] = {}
        min_time: Optional[float] = None
        max_time: Optional[float] = None
        has_numeric_risk = False
        row_count = 0

        for record in iter_records(source, self._column_map):
            row_count += 1

            if record.category:
                category_counts[record.category] = category_counts.get(record.category, 0) + 1

            seconds = record.epoch_seconds
            min_time = seconds if min_time is None else min(min_time, seconds)
            max_time = seconds if max_time is None else max(max_time, seconds)

            if not has_numeric_risk and record.risk is not None:
                has_numeric_risk = True

        if not category_counts:
            category_counts[DEFAULT_CATEGORY] = row_count

        time_span = None
        if min_time is not None and max_time is not None:
            time_span = max(max_time - min_time, 0.0)

        statistics = DatasetStatistics(
            category_counts=MappingProxyType(dict(category_counts)),
            min_count=min(category_counts.values()),
            max_count=max(category_counts.values()),
            min_time=min_time,
            max_time=max_time,
            time_span=time_span,
            has_numeric_risk=has_numeric_risk,
            row_count=row_count,
        )
        logger.debug(
            f"Analyzed {row_count} rows from {source!r}: "
            f"{len(category_counts)} categories, numeric risk={has_numeric_risk}"
        )
        return statistics
