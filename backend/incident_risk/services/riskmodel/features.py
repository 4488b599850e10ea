"""Feature vector encoding for incident rows."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Mapping, Sequence, Tuple

from .entities import BASE_FEATURE_NAMES, DEFAULT_CATEGORY, RawRecord


@dataclass(frozen=True, slots=True)
class CategoryVocabulary:
    """Sorted category names that get a one-hot slot."""

    categories: Tuple[str, ...]
    overflowed: bool = False

    @classmethod
    def from_counts(cls, counts: Mapping[str, int], max_categories: int) -> "CategoryVocabulary":
        """Build the vocabulary, keeping the most frequent names when capped."""

        names = [name for name in counts if name != DEFAULT_CATEGORY]
        overflowed = len(names) > max_categories
        if overflowed:
            ranked = sorted(names, key=lambda name: (-counts[name], name))
            names = ranked[:max_categories]
        return cls(categories=tuple(sorted(names)), overflowed=overflowed)

    def __len__(self) -> int:
        return len(self.categories)


class FeatureEncoder:
    """Turn one record into a fixed-length numeric vector.

    Layout: hour of day, ISO day of week, latitude, longitude, risk score,
    then one slot per vocabulary category. Categories outside the
    vocabulary encode as all zeros.
    """

    def __init__(self, categories: Sequence[str]) -> None:
        self._categories = tuple(categories)
        self._positions: Dict[str, int] = {name: idx for idx, name in enumerate(self._categories)}

    @property
    def categories(self) -> Tuple[str, ...]:
        return self._categories

    @property
    def feature_count(self) -> int:
        return len(BASE_FEATURE_NAMES) + len(self._categories)

    def feature_names(self) -> List[str]:
        return [*BASE_FEATURE_NAMES, *(f"category_{name}" for name in self._categories)]

    def encode(self, record: RawRecord, risk: float) -> Tuple[float, ...]:
        timestamp = record.timestamp
        one_hot = [0.0] * len(self._categories)
        position = self._positions.get(record.category) if record.category else None
        if position is not None:
            one_hot[position] = 1.0

        return (
            timestamp.hour / 23.0,
            (timestamp.isoweekday() - 1) / 6.0,
            record.latitude,
            record.longitude,
            risk,
            *one_hot,
        )
