"""Cell-level value extraction for raw CSV rows."""
from __future__ import annotations

import math
import re
from datetime import datetime, timezone
from typing import Any, Optional, Sequence

import pandas as pd

_NUMERIC = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$", re.ASCII)


def cell(row: Sequence[str], index: Optional[int]) -> Optional[str]:
    if index is None or index >= len(row):
        return None
    return row[index]


def normalize_string(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def extract_numeric(value: Any) -> Optional[float]:
    """Return the value as a float if it is a plain decimal number, else None."""

    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else None
    if not isinstance(value, str):
        return None

    trimmed = value.strip()
    if not trimmed or not _NUMERIC.match(trimmed):
        return None
    number = float(trimmed)
    return number if math.isfinite(number) else None


def to_float(value: Any) -> float:
    number = extract_numeric(value)
    return 0.0 if number is None else number


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse a timestamp cell; naive values are taken to be UTC."""

    if isinstance(value, datetime):
        parsed = value
    else:
        text = normalize_string(value)
        if not text:
            return None
        parsed = _parse_text(text)
        if parsed is None:
            return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_text(text: str) -> Optional[datetime]:
    parsed = pd.to_datetime(text, errors="coerce")
    if pd.isna(parsed):
        return None
    return parsed.to_pydatetime()
