"""Column-name normalization and logical column resolution."""
from __future__ import annotations

import re
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .entities import LOGICAL_COLUMNS, LogicalColumnMap

DEFAULT_PHYSICAL_COLUMNS: Dict[str, str] = {
    "timestamp": "timestamp",
    "latitude": "latitude",
    "longitude": "longitude",
    "category": "category",
    "risk": "risk_score",
    "label": "label",
}

# Accepted spellings of logical keys in caller-supplied mappings.
_KEY_ALIASES: Dict[str, Sequence[str]] = {
    "risk": ("risk", "risk_score"),
}

_BOM = "\ufeff"
_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_UNDERSCORES = re.compile(r"_+")


def normalize_column_name(column: str) -> str:
    """Canonical form of a header or mapped column name.

    >>> normalize_column_name("\\ufeff Incident-Date/Time ")
    'incident_date_time'
    """

    if column.startswith(_BOM):
        column = column[len(_BOM):]
    column = column.strip()
    if not column:
        return ""
    column = column.lower()
    column = column.replace("-", " ").replace("/", " ")
    column = _NON_ALNUM.sub("_", column)
    column = _UNDERSCORES.sub("_", column)
    return column.strip("_")


def normalize_header_row(header: Sequence[Optional[str]]) -> List[str]:
    """Normalize a CSV header, suffixing repeated names with ``_2``, ``_3``..."""

    normalized: List[str] = []
    used = set()
    for value in header:
        if not isinstance(value, str):
            normalized.append("")
            continue

        column = normalize_column_name(value)
        if not column:
            column = value.strip()

        base = column
        suffix = 1
        while column and column in used:
            suffix += 1
            column = f"{base}_{suffix}"

        if column:
            used.add(column)
        normalized.append(column)
    return normalized


class ColumnResolver:
    """Resolve a partial logical->physical mapping into a full LogicalColumnMap."""

    def __init__(self, defaults: Optional[Mapping[str, str]] = None) -> None:
        self._defaults = dict(DEFAULT_PHYSICAL_COLUMNS)
        if defaults:
            self._defaults.update(defaults)

    def resolve(self, mapping: Optional[Mapping[str, Any]] = None) -> LogicalColumnMap:
        mapping = mapping or {}
        resolved = {
            logical: self._resolve_one(self._lookup(mapping, logical), self._defaults[logical])
            for logical in LOGICAL_COLUMNS
        }
        return LogicalColumnMap(**resolved)

    @staticmethod
    def _lookup(mapping: Mapping[str, Any], logical: str) -> Any:
        for key in _KEY_ALIASES.get(logical, (logical,)):
            value = mapping.get(key)
            if isinstance(value, str) and value.strip():
                return value
        return None

    @staticmethod
    def _resolve_one(value: Any, default: str) -> str:
        if not isinstance(value, str) or not value.strip():
            value = default

        normalized = normalize_column_name(value)
        if not normalized:
            normalized = normalize_column_name(default)
        if not normalized:
            normalized = default
        return normalized
