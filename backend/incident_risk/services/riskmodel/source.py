"""Restartable CSV row sources.

The pipeline reads a dataset twice: once for corpus statistics and once to
encode rows. A source therefore hands out a fresh iterator on every call to
``rows()`` instead of being a one-shot stream.
"""
from __future__ import annotations

import csv
import io
from pathlib import Path
from typing import Iterator, List, Protocol, Union


class RowSource(Protocol):
    """Anything that can replay raw CSV rows (header first) from the start."""

    def rows(self) -> Iterator[List[str]]:
        ...


class CsvFileSource:
    """Stream rows from a CSV file on disk, one open handle per pass."""

    def __init__(self, path: Union[str, Path], *, encoding: str = "utf-8") -> None:
        self._path = Path(path)
        self._encoding = encoding

    @property
    def path(self) -> Path:
        return self._path

    def rows(self) -> Iterator[List[str]]:
        if not self._path.is_file():
            raise FileNotFoundError(f'Dataset file "{self._path}" was not found.')
        return self._iter_rows()

    def _iter_rows(self) -> Iterator[List[str]]:
        with self._path.open("r", encoding=self._encoding, errors="replace", newline="") as handle:
            for row in csv.reader(handle):
                if row:
                    yield row

    def __repr__(self) -> str:
        return f"CsvFileSource({str(self._path)!r})"


class CsvTextSource:
    """Replay rows from CSV text already held in memory."""

    def __init__(self, text: str) -> None:
        self._text = text

    def rows(self) -> Iterator[List[str]]:
        for row in csv.reader(io.StringIO(self._text, newline="")):
            if row:
                yield row
