"""Second-pass row encoding shared by training and evaluation."""
from __future__ import annotations

from typing import Iterator, List, Sequence

from .entities import DatasetStatistics, EncodedRow, LabeledRow, LogicalColumnMap
from .features import FeatureEncoder
from .labels import RiskLabelSynthesizer, binarize_label
from .records import iter_records
from .source import RowSource


class DatasetRowPreprocessor:
    """Stream a dataset into encoded rows using statistics from a prior pass."""

    def __init__(
        self,
        column_map: LogicalColumnMap,
        statistics: DatasetStatistics,
        encoder: FeatureEncoder,
    ) -> None:
        self._column_map = column_map
        self._encoder = encoder
        self._synthesizer = RiskLabelSynthesizer(statistics)

    def encode(self, source: RowSource) -> Iterator[EncodedRow]:
        for record in iter_records(source, self._column_map):
            risk = self._synthesizer.risk_score(record)
            yield EncodedRow(
                features=self._encoder.encode(record, risk),
                risk=risk,
                raw_label=binarize_label(record.label),
                timestamp=record.timestamp,
            )

    def label(self, rows: Sequence[EncodedRow]) -> List[LabeledRow]:
        """Resolve labels for ``rows`` as one batch, preserving order."""

        labels = self._synthesizer.resolve_labels(
            [row.risk for row in rows],
            [row.raw_label for row in rows],
        )
        return [
            LabeledRow(features=row.features, label=label, timestamp=row.timestamp)
            for row, label in zip(rows, labels)
        ]
