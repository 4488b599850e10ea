"""Shared dataclasses used across the risk model pipeline."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from .config import Hyperparameters
from .linear import predict_probability, standardize

LOGICAL_COLUMNS: Tuple[str, ...] = ("timestamp", "latitude", "longitude", "category", "risk", "label")
REQUIRED_COLUMNS: Tuple[str, ...] = ("timestamp", "latitude", "longitude", "category")
BASE_FEATURE_NAMES: Tuple[str, ...] = ("hour_of_day", "day_of_week", "latitude", "longitude", "risk_score")
DEFAULT_CATEGORY = "__default__"


@dataclass(frozen=True, slots=True)
class LogicalColumnMap:
    """Normalized physical column name for each logical field."""

    timestamp: str
    latitude: str
    longitude: str
    category: str
    risk: str
    label: str

    def items(self) -> Iterator[Tuple[str, str]]:
        for logical in LOGICAL_COLUMNS:
            yield logical, getattr(self, logical)

    def as_dict(self) -> Dict[str, str]:
        return dict(self.items())


@dataclass(frozen=True, slots=True)
class DatasetStatistics:
    """Corpus-level statistics from one streaming pass over a dataset."""

    category_counts: Mapping[str, int]
    min_count: int
    max_count: int
    min_time: Optional[float]
    max_time: Optional[float]
    time_span: Optional[float]
    has_numeric_risk: bool
    row_count: int

    def count_for(self, category: str) -> int:
        """Frequency used for category scoring; unknown or empty maps to the minimum."""

        if not category or category not in self.category_counts:
            return self.min_count
        return self.category_counts[category]


@dataclass(frozen=True, slots=True)
class RawRecord:
    """Typed values of one usable row, resolved once at ingestion."""

    timestamp: datetime
    epoch_seconds: float
    latitude: float
    longitude: float
    category: str
    risk: Optional[float]
    label: Optional[float]


@dataclass(frozen=True, slots=True)
class EncodedRow:
    """A feature-encoded row whose label may still need to be synthesized."""

    features: Tuple[float, ...]
    risk: float
    raw_label: Optional[int]
    timestamp: datetime


@dataclass(frozen=True, slots=True)
class LabeledRow:
    """A feature-encoded row with its final 0/1 label."""

    features: Tuple[float, ...]
    label: int
    timestamp: datetime


@dataclass(frozen=True, slots=True)
class NormalizationParams:
    """Per-dimension mean and standard deviation of the training features."""

    means: Tuple[float, ...]
    std_devs: Tuple[float, ...]

    def __len__(self) -> int:
        return len(self.means)

    def apply(self, features: Sequence[float]) -> List[float]:
        return standardize(features, self.means, self.std_devs)


@dataclass(frozen=True, slots=True)
class Metrics:
    """Confusion-matrix derived classification metrics, rounded to 4 places."""

    accuracy: float = 0.0
    precision: float = 0.0
    recall: float = 0.0
    f1: float = 0.0

    def as_dict(self) -> Dict[str, float]:
        return {
            "accuracy": self.accuracy,
            "precision": self.precision,
            "recall": self.recall,
            "f1": self.f1,
        }


@dataclass(frozen=True, slots=True)
class ModelArtifact:
    """Serializable representation of a trained logistic regression model."""

    model_id: str
    training_run_id: str
    trained_at: Optional[datetime]
    version: str
    weights: Tuple[float, ...]
    feature_names: Tuple[str, ...]
    normalization: NormalizationParams
    categories: Tuple[str, ...]
    category_overflowed: bool
    hyperparameters: Hyperparameters
    metrics: Metrics

    @property
    def feature_count(self) -> int:
        return len(self.weights) - 1

    def predict_proba(self, features: Sequence[float]) -> float:
        """Probability of the positive class for a raw, un-normalized vector."""

        return predict_probability(self.weights, self.normalization.apply(features))

    def to_dict(self) -> Dict[str, object]:
        return {
            "model_id": self.model_id,
            "training_run_id": self.training_run_id,
            "trained_at": self.trained_at.isoformat() if self.trained_at else None,
            "version": self.version,
            "weights": list(self.weights),
            "feature_names": list(self.feature_names),
            "feature_means": list(self.normalization.means),
            "feature_std_devs": list(self.normalization.std_devs),
            "categories": list(self.categories),
            "category_overflowed": self.category_overflowed,
            "hyperparameters": self.hyperparameters.as_dict(),
            "metrics": self.metrics.as_dict(),
        }


@dataclass(frozen=True, slots=True)
class TrainingResult:
    """What a training run hands back to the caller for persistence."""

    metrics: Metrics
    artifact_path: str
    version: str
    hyperparameters: Hyperparameters
    artifact: ModelArtifact = field(repr=False)

    def as_dict(self) -> Dict[str, object]:
        return {
            "metrics": self.metrics.as_dict(),
            "artifact_path": self.artifact_path,
            "version": self.version,
            "metadata": {"artifact_path": self.artifact_path},
            "hyperparameters": self.hyperparameters.as_dict(),
        }
