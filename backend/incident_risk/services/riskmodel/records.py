"""Typed record stream over a restartable row source."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Sequence

from .columns import normalize_header_row
from .entities import REQUIRED_COLUMNS, LogicalColumnMap, RawRecord
from .errors import MissingColumnError
from .parsing import cell, extract_numeric, normalize_string, parse_timestamp, to_float
from .source import RowSource


@dataclass(frozen=True, slots=True)
class ColumnIndex:
    """Position of each logical column in the header, or None when absent."""

    positions: Dict[str, Optional[int]]

    @classmethod
    def from_header(cls, header: Sequence[str], column_map: LogicalColumnMap) -> "ColumnIndex":
        normalized = normalize_header_row(header)
        header_positions: Dict[str, int] = {}
        for index, column in enumerate(normalized):
            if column:
                header_positions[column] = index

        positions = {
            logical: header_positions.get(physical) if physical else None
            for logical, physical in column_map.items()
        }
        index = cls(positions=positions)
        index.require(REQUIRED_COLUMNS)
        return index

    def require(self, logical_columns: Sequence[str]) -> None:
        for logical in logical_columns:
            if self.positions.get(logical) is None:
                raise MissingColumnError(logical)

    def get(self, logical: str) -> Optional[int]:
        return self.positions.get(logical)


def decode_row(row: List[str], index: ColumnIndex) -> Optional[RawRecord]:
    """Typed view of a data row, or None when its timestamp is unusable."""

    timestamp = parse_timestamp(cell(row, index.get("timestamp")))
    if timestamp is None:
        return None

    return RawRecord(
        timestamp=timestamp,
        epoch_seconds=float(math.floor(timestamp.timestamp())),
        latitude=to_float(cell(row, index.get("latitude"))),
        longitude=to_float(cell(row, index.get("longitude"))),
        category=normalize_string(cell(row, index.get("category"))),
        risk=extract_numeric(cell(row, index.get("risk"))),
        label=extract_numeric(cell(row, index.get("label"))),
    )


def iter_records(source: RowSource, column_map: LogicalColumnMap) -> Iterator[RawRecord]:
    """Yield usable records in file order.

    The header is validated before the first data row is looked at, so a
    missing required column fails without processing any rows.
    """

    rows = iter(source.rows())
    try:
        index: Optional[ColumnIndex] = None
        for row in rows:
            if index is None:
                index = ColumnIndex.from_header(row, column_map)
                continue

            record = decode_row(row, index)
            if record is not None:
                yield record
    finally:
        close = getattr(rows, "close", None)
        if close is not None:
            close()
