"""Incident risk model training and evaluation services."""

from .analysis import StreamingCsvAnalyzer
from .artifacts import ArtifactStore, parse_artifact
from .columns import ColumnResolver, normalize_column_name
from .config import Hyperparameters, PipelineConfig
from .entities import DatasetStatistics, Metrics, ModelArtifact, NormalizationParams, TrainingResult
from .errors import (
    DimensionMismatchError,
    EmptyDatasetError,
    MalformedArtifactError,
    MissingColumnError,
    RiskModelError,
)
from .evaluation import EvaluationScorer, ModelEvaluationService
from .features import CategoryVocabulary, FeatureEncoder
from .labels import RiskLabelSynthesizer
from .normalization import OnlineStatisticsAccumulator
from .source import CsvFileSource, CsvTextSource
from .splitting import TrainValidationSplitter
from .training import LogisticRegressionTrainer, ModelTrainingService

__all__ = [
    "ArtifactStore",
    "CategoryVocabulary",
    "ColumnResolver",
    "CsvFileSource",
    "CsvTextSource",
    "DatasetStatistics",
    "DimensionMismatchError",
    "EmptyDatasetError",
    "EvaluationScorer",
    "FeatureEncoder",
    "Hyperparameters",
    "LogisticRegressionTrainer",
    "MalformedArtifactError",
    "Metrics",
    "MissingColumnError",
    "ModelArtifact",
    "ModelEvaluationService",
    "ModelTrainingService",
    "NormalizationParams",
    "OnlineStatisticsAccumulator",
    "PipelineConfig",
    "RiskLabelSynthesizer",
    "RiskModelError",
    "StreamingCsvAnalyzer",
    "TrainValidationSplitter",
    "TrainingResult",
    "normalize_column_name",
    "parse_artifact",
]
