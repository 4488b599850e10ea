"""Shared pytest fixtures for the incident risk test suite."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Iterable, Sequence

import pytest

from incident_risk.services.riskmodel import ArtifactStore

FIXTURE_HEADER = ("timestamp", "latitude", "longitude", "category", "risk_score", "label")

FIXTURE_ROWS = (
    ("2024-01-01T00:00:00Z", "40.0", "-73.9", "burglary", "0.10", "0"),
    ("2024-01-02T00:00:00Z", "40.0", "-73.9", "burglary", "0.12", "0"),
    ("2024-01-03T00:00:00Z", "40.0", "-73.9", "burglary", "0.14", "0"),
    ("2024-01-04T00:00:00Z", "40.0", "-73.9", "burglary", "0.18", "0"),
    ("2024-01-05T00:00:00Z", "40.0", "-73.9", "assault", "0.72", "1"),
    ("2024-01-06T00:00:00Z", "40.0", "-73.9", "assault", "0.74", "1"),
    ("2024-01-07T00:00:00Z", "40.0", "-73.9", "assault", "0.78", "1"),
    ("2024-01-08T00:00:00Z", "40.0", "-73.9", "assault", "0.82", "1"),
    ("2024-01-09T00:00:00Z", "40.0", "-73.9", "burglary", "0.28", "0"),
    ("2024-01-10T00:00:00Z", "40.0", "-73.9", "assault", "0.88", "1"),
)

FIXED_TRAINED_AT = datetime(2024, 2, 1, 8, 30, 15, tzinfo=timezone.utc)


def render_csv(header: Sequence[str], rows: Iterable[Sequence[str]]) -> str:
    lines = [",".join(header)]
    lines.extend(",".join(row) for row in rows)
    return "\n".join(lines) + "\n"


@pytest.fixture
def write_csv(tmp_path: Path) -> Callable[..., Path]:
    """Write a CSV file under ``tmp_path`` and return its path."""

    def _write(name: str, header: Sequence[str], rows: Iterable[Sequence[str]]) -> Path:
        path = tmp_path / name
        path.write_text(render_csv(header, rows), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def fixture_csv(write_csv: Callable[..., Path]) -> Path:
    """Ten labeled incidents where risk separates the two categories."""

    return write_csv("incidents.csv", FIXTURE_HEADER, FIXTURE_ROWS)


@pytest.fixture
def store(tmp_path: Path) -> ArtifactStore:
    return ArtifactStore(tmp_path / "storage")


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    return lambda: FIXED_TRAINED_AT
