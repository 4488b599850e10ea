"""Confusion-matrix scoring and standalone model evaluation."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence, Union

from loguru import logger

from .analysis import StreamingCsvAnalyzer
from .artifacts import ArtifactStore
from .columns import ColumnResolver
from .config import PipelineConfig
from .entities import LabeledRow, Metrics, ModelArtifact, NormalizationParams
from .errors import DimensionMismatchError, EmptyDatasetError
from .features import FeatureEncoder
from .linear import SIGMOID_CLAMP, predict_probability
from .preprocessing import DatasetRowPreprocessor
from .source import CsvFileSource, RowSource

ProgressCallback = Callable[[float], None]


@dataclass(slots=True)
class ConfusionMatrix:
    tp: int = 0
    tn: int = 0
    fp: int = 0
    fn: int = 0

    @property
    def total(self) -> int:
        return self.tp + self.tn + self.fp + self.fn

    def record(self, actual: int, predicted: int) -> None:
        if predicted == 1 and actual == 1:
            self.tp += 1
        elif predicted == 0 and actual == 0:
            self.tn += 1
        elif predicted == 1:
            self.fp += 1
        else:
            self.fn += 1

    def metrics(self) -> Metrics:
        accuracy = (self.tp + self.tn) / max(1, self.total)
        precision = self.tp / (self.tp + self.fp) if self.tp + self.fp > 0 else 0.0
        recall = self.tp / (self.tp + self.fn) if self.tp + self.fn > 0 else 0.0
        f1 = 2 * precision * recall / (precision + recall) if precision + recall > 0 else 0.0
        return Metrics(
            accuracy=round(accuracy, 4),
            precision=round(precision, 4),
            recall=round(recall, 4),
            f1=round(f1, 4),
        )


class EvaluationScorer:
    """Apply trained weights to labeled rows and tally the confusion matrix."""

    def __init__(
        self,
        weights: Sequence[float],
        normalization: NormalizationParams,
        *,
        threshold: float = 0.5,
        sigmoid_clamp: float = SIGMOID_CLAMP,
    ) -> None:
        if len(normalization.means) != len(normalization.std_devs):
            raise DimensionMismatchError(
                "Normalization parameters are misaligned",
                expected=len(normalization.means),
                actual=len(normalization.std_devs),
            )
        if len(weights) != len(normalization) + 1:
            raise DimensionMismatchError(
                "Model weights do not match normalization parameters",
                expected=len(normalization) + 1,
                actual=len(weights),
            )
        self._weights = tuple(weights)
        self._normalization = normalization
        self._threshold = threshold
        self._sigmoid_clamp = sigmoid_clamp

    def probability(self, features: Sequence[float]) -> float:
        return predict_probability(self._weights, self._normalization.apply(features), self._sigmoid_clamp)

    def predict(self, features: Sequence[float]) -> int:
        return 1 if self.probability(features) >= self._threshold else 0

    def confusion(self, rows: Iterable[LabeledRow]) -> ConfusionMatrix:
        matrix = ConfusionMatrix()
        for row in rows:
            matrix.record(row.label, self.predict(row.features))
        return matrix

    def score(self, rows: Iterable[LabeledRow]) -> Metrics:
        return self.confusion(rows).metrics()


class ModelEvaluationService:
    """Score a previously trained artifact against a fresh dataset."""

    def __init__(
        self,
        store: ArtifactStore,
        *,
        config: Optional[PipelineConfig] = None,
        resolver: Optional[ColumnResolver] = None,
    ) -> None:
        self._config = config or PipelineConfig()
        self._config.validate()
        self._store = store
        self._resolver = resolver or ColumnResolver()

    def evaluate(
        self,
        artifact: Union[ModelArtifact, str, Path],
        source: Union[RowSource, str, Path],
        column_mapping: Optional[Mapping[str, Any]] = None,
        *,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> Metrics:
        if not isinstance(artifact, ModelArtifact):
            artifact = self._store.load(artifact)
        if isinstance(source, (str, Path)):
            source = CsvFileSource(source)
            if not source.path.is_file():
                raise FileNotFoundError(f'Evaluation dataset "{source.path}" was not found.')

        scorer = EvaluationScorer(
            artifact.weights,
            artifact.normalization,
            threshold=self._config.probability_threshold,
            sigmoid_clamp=self._config.sigmoid_clamp,
        )
        report_progress(progress_callback, 15.0)

        encoder = FeatureEncoder(artifact.categories)
        if encoder.feature_count != len(artifact.normalization):
            raise DimensionMismatchError(
                "Encoded feature vector does not match the artifact",
                expected=len(artifact.normalization),
                actual=encoder.feature_count,
            )
        report_progress(progress_callback, 35.0)

        column_map = self._resolver.resolve(column_mapping)
        statistics = StreamingCsvAnalyzer(column_map).analyze(source)
        preprocessor = DatasetRowPreprocessor(column_map, statistics, encoder)
        encoded = list(preprocessor.encode(source))
        if not encoded:
            raise EmptyDatasetError("No usable rows were found in the evaluation dataset.")
        rows: List[LabeledRow] = preprocessor.label(encoded)
        report_progress(progress_callback, 55.0)

        metrics = scorer.score(rows)
        report_progress(progress_callback, 85.0)

        logger.info(
            f"Evaluated model {artifact.model_id or '?'} version {artifact.version or '?'} "
            f"on {len(rows)} rows: {metrics.as_dict()}"
        )
        return metrics


def report_progress(callback: Optional[ProgressCallback], percent: float) -> None:
    if callback is not None:
        callback(percent)
