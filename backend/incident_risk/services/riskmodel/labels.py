"""Risk score and label synthesis for datasets that lack them."""
from __future__ import annotations

import math
from typing import List, Optional, Sequence, Tuple

from .entities import DatasetStatistics, RawRecord

CATEGORY_WEIGHT = 0.6
RECENCY_WEIGHT = 0.4
HISTOGRAM_BINS = 101
THRESHOLD_QUANTILE = 0.75
UNREACHABLE_THRESHOLD = 1.1


def _clamp_unit(value: float) -> float:
    return max(0.0, min(1.0, value))


def binarize_label(value: Optional[float]) -> Optional[int]:
    """Round a supplied label half away from zero and squash it to 0/1."""

    if value is None:
        return None
    rounded = math.floor(abs(value) + 0.5) * (1 if value >= 0 else -1)
    return 1 if rounded > 0 else 0


class RiskLabelSynthesizer:
    """Deterministic heuristics that fill in missing risk scores and labels.

    Risk is computed per row from corpus statistics. Labels are resolved for
    a whole batch at once because the threshold depends on the distribution
    of every row's risk.
    """

    def __init__(self, statistics: DatasetStatistics) -> None:
        self._statistics = statistics

    def risk_score(self, record: RawRecord) -> float:
        if self._statistics.has_numeric_risk and record.risk is not None:
            return _clamp_unit(record.risk)
        score = (
            CATEGORY_WEIGHT * self.category_score(record.category)
            + RECENCY_WEIGHT * self.recency_score(record.epoch_seconds)
        )
        return _clamp_unit(score)

    def category_score(self, category: str) -> float:
        stats = self._statistics
        if stats.max_count == stats.min_count:
            return 0.5 if stats.max_count > 0 else 0.0
        count = stats.count_for(category)
        return (count - stats.min_count) / (stats.max_count - stats.min_count)

    def recency_score(self, epoch_seconds: float) -> float:
        stats = self._statistics
        if stats.time_span is None or stats.time_span <= 0 or stats.min_time is None:
            return 0.5
        return _clamp_unit((epoch_seconds - stats.min_time) / stats.time_span)

    @staticmethod
    def risk_threshold(risks: Sequence[float]) -> float:
        """Risk at the 75th-percentile rank of a 1%-wide histogram.

        With one or no populated bucket there is no spread to split on, so the
        threshold is set above any reachable risk.
        """

        if not risks:
            return 0.0

        histogram = [0] * HISTOGRAM_BINS
        for risk in risks:
            bucket = int(math.floor(_clamp_unit(risk) * 100))
            histogram[max(0, min(HISTOGRAM_BINS - 1, bucket))] += 1

        if sum(1 for count in histogram if count > 0) <= 1:
            return UNREACHABLE_THRESHOLD

        target_rank = int(math.floor(THRESHOLD_QUANTILE * (len(risks) - 1))) + 1
        cumulative = 0
        for bucket, count in enumerate(histogram):
            cumulative += count
            if cumulative >= target_rank:
                return bucket / 100
        return 0.0

    @classmethod
    def resolve_labels(cls, risks: Sequence[float], raw_labels: Sequence[Optional[int]]) -> Tuple[int, ...]:
        """Final 0/1 label for every row; the inputs are left untouched."""

        if len(risks) != len(raw_labels):
            raise ValueError("risks and raw_labels must have the same length")
        if not risks:
            return ()

        labels: List[Optional[int]] = [None if label is None else (1 if label > 0 else 0) for label in raw_labels]
        if any(label is None for label in labels):
            threshold = cls.risk_threshold(risks)
            labels = [
                (1 if risk >= threshold and risk > 0.0 else 0) if label is None else label
                for risk, label in zip(risks, labels)
            ]

        max_risk = max(risks)
        if not any(labels) and max_risk > 0.0:
            labels = [1 if risk == max_risk else label for risk, label in zip(risks, labels)]

        return tuple(int(label) for label in labels)
