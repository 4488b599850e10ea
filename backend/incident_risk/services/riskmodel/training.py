"""Training orchestration for the incident risk logistic regression model."""
from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, List, Mapping, Optional, Sequence, Tuple, Union

from loguru import logger

from .analysis import StreamingCsvAnalyzer
from .artifacts import ArtifactStore
from .columns import ColumnResolver
from .config import Hyperparameters, PipelineConfig
from .entities import EncodedRow, LabeledRow, ModelArtifact, NormalizationParams, TrainingResult
from .errors import EmptyDatasetError
from .evaluation import EvaluationScorer, ProgressCallback, report_progress
from .features import CategoryVocabulary, FeatureEncoder
from .linear import SIGMOID_CLAMP, dot_product, sigmoid, with_bias
from .normalization import OnlineStatisticsAccumulator
from .preprocessing import DatasetRowPreprocessor
from .source import CsvFileSource, RowSource
from .splitting import TrainValidationSplitter


class LogisticRegressionModel:
    """Minimal logistic regression with the bias stored as weight 0."""

    def __init__(self, n_features: int, *, sigmoid_clamp: float = SIGMOID_CLAMP) -> None:
        self.weights: List[float] = [0.0] * (n_features + 1)
        self._sigmoid_clamp = sigmoid_clamp

    def predict_proba(self, normalized: Sequence[float]) -> float:
        return sigmoid(dot_product(self.weights, with_bias(normalized)), self._sigmoid_clamp)


class LogisticRegressionTrainer:
    """Gradient descent over the training buffer.

    Each epoch walks every row once and applies that row's gradient
    immediately, scaled by ``learning_rate / sample_count``. Trained weights
    depend on this exact update order.
    """

    def __init__(self, learning_rate: float, iterations: int, *, sigmoid_clamp: float = SIGMOID_CLAMP) -> None:
        if learning_rate <= 0:
            raise ValueError("learning_rate must be positive")
        if iterations <= 0:
            raise ValueError("iterations must be positive")
        self._learning_rate = learning_rate
        self._iterations = iterations
        self._sigmoid_clamp = sigmoid_clamp

    def fit(self, rows: Sequence[LabeledRow], normalization: NormalizationParams) -> Tuple[float, ...]:
        if not rows:
            raise EmptyDatasetError("Cannot train a model without features.")

        inputs = [with_bias(normalization.apply(row.features)) for row in rows]
        labels = [float(row.label) for row in rows]
        model = LogisticRegressionModel(len(normalization), sigmoid_clamp=self._sigmoid_clamp)
        weights = model.weights
        step = self._learning_rate / len(rows)

        for _ in range(self._iterations):
            for row_input, label in zip(inputs, labels):
                prediction = sigmoid(dot_product(weights, row_input), self._sigmoid_clamp)
                error = prediction - label
                for index, value in enumerate(row_input):
                    weights[index] = weights[index] - step * (error * value)

        return tuple(weights)


class ModelTrainingService:
    """Run the full streaming pipeline from CSV file to persisted artifact."""

    def __init__(
        self,
        store: ArtifactStore,
        *,
        config: Optional[PipelineConfig] = None,
        resolver: Optional[ColumnResolver] = None,
        default_hyperparameters: Optional[Hyperparameters] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._config = config or PipelineConfig()
        self._config.validate()
        self._store = store
        self._resolver = resolver or ColumnResolver()
        self._defaults = default_hyperparameters or Hyperparameters()
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def train(
        self,
        source: Union[RowSource, str, Path],
        column_mapping: Optional[Mapping[str, Any]] = None,
        hyperparameters: Optional[Mapping[str, Any]] = None,
        *,
        model_id: str = "",
        training_run_id: str = "",
        progress_callback: Optional[ProgressCallback] = None,
    ) -> TrainingResult:
        if isinstance(source, (str, Path)):
            source = CsvFileSource(source)
            if not source.path.is_file():
                raise FileNotFoundError(f'Dataset file "{source.path}" was not found.')
        report_progress(progress_callback, 15.0)

        column_map = self._resolver.resolve(column_mapping)
        statistics = StreamingCsvAnalyzer(column_map).analyze(source)
        if statistics.row_count == 0:
            raise EmptyDatasetError("No usable rows were found in the dataset.")

        vocabulary = CategoryVocabulary.from_counts(statistics.category_counts, self._config.max_categories)
        if vocabulary.overflowed:
            logger.warning(
                f"Dataset has {len(statistics.category_counts)} categories; "
                f"keeping the {self._config.max_categories} most frequent"
            )
        encoder = FeatureEncoder(vocabulary.categories)
        resolved = Hyperparameters.resolve(hyperparameters, defaults=self._defaults)
        report_progress(progress_callback, 35.0)

        preprocessor = DatasetRowPreprocessor(column_map, statistics, encoder)
        accumulator = OnlineStatisticsAccumulator(encoder.feature_count, std_floor=self._config.std_floor)

        def accumulate(row: EncodedRow) -> None:
            accumulator.update(row.features)

        buffers = TrainValidationSplitter(resolved.validation_split).split(
            preprocessor.encode(source),
            statistics.row_count,
            on_train=accumulate,
        )
        if not buffers.train:
            raise EmptyDatasetError("No usable rows were found in the dataset.")

        labeled = preprocessor.label(buffers.arrival_order())
        train_rows = labeled[: len(buffers.train)]
        validation_rows = train_rows if buffers.plan.clone else labeled[len(buffers.train):]
        logger.debug(
            f"Split {len(labeled)} rows into {len(train_rows)} training / "
            f"{len(validation_rows)} validation (clone={buffers.plan.clone})"
        )
        report_progress(progress_callback, 55.0)

        normalization = accumulator.finalize()
        trainer = LogisticRegressionTrainer(
            resolved.learning_rate,
            resolved.iterations,
            sigmoid_clamp=self._config.sigmoid_clamp,
        )
        weights = trainer.fit(train_rows, normalization)
        report_progress(progress_callback, 75.0)

        scorer = EvaluationScorer(
            weights,
            normalization,
            threshold=self._config.probability_threshold,
            sigmoid_clamp=self._config.sigmoid_clamp,
        )
        metrics = scorer.score(validation_rows)

        trained_at = self._clock()
        artifact = ModelArtifact(
            model_id=str(model_id),
            training_run_id=str(training_run_id),
            trained_at=trained_at,
            version=trained_at.strftime("%Y%m%d%H%M%S"),
            weights=weights,
            feature_names=tuple(encoder.feature_names()),
            normalization=normalization,
            categories=vocabulary.categories,
            category_overflowed=vocabulary.overflowed,
            hyperparameters=resolved,
            metrics=metrics,
        )
        artifact_path = self._store.save(artifact)
        report_progress(progress_callback, 90.0)

        logger.info(
            f"Trained model {artifact.model_id or '?'} version {artifact.version} "
            f"on {len(train_rows)} rows: {metrics.as_dict()}"
        )
        return TrainingResult(
            metrics=metrics,
            artifact_path=artifact_path,
            version=artifact.version,
            hyperparameters=resolved,
            artifact=artifact,
        )
