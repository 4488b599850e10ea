"""Model artifact schema and filesystem storage."""
from __future__ import annotations

import json
import math
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from loguru import logger
from pydantic import BaseModel, Field, ValidationError, validator

from .config import Hyperparameters
from .entities import Metrics, ModelArtifact, NormalizationParams
from .errors import DimensionMismatchError, MalformedArtifactError


class ArtifactPayload(BaseModel):
    """On-disk JSON shape of a trained model."""

    model_id: Optional[Union[str, int]] = None
    training_run_id: Optional[Union[str, int]] = None
    trained_at: Optional[datetime] = None
    version: Optional[str] = None
    weights: List[float]
    feature_names: List[str] = Field(default_factory=list)
    feature_means: List[float]
    feature_std_devs: List[float]
    categories: List[str] = Field(default_factory=list)
    category_overflowed: bool = False
    hyperparameters: Dict[str, Any] = Field(default_factory=dict)
    metrics: Dict[str, float] = Field(default_factory=dict)

    class Config:
        protected_namespaces = ()

    @validator("weights", "feature_means", "feature_std_devs")
    def check_non_empty_finite(cls, value: List[float]) -> List[float]:
        if not value:
            raise ValueError("must contain at least one value")
        if not all(math.isfinite(item) for item in value):
            raise ValueError("must contain only finite numbers")
        return value

    @validator("categories", pre=True)
    def default_missing_categories(cls, value: Any) -> Any:
        return [] if value is None else value

    def to_artifact(self) -> ModelArtifact:
        if len(self.feature_means) != len(self.feature_std_devs):
            raise DimensionMismatchError(
                "Normalization parameters are misaligned",
                expected=len(self.feature_means),
                actual=len(self.feature_std_devs),
            )
        if len(self.weights) != len(self.feature_means) + 1:
            raise DimensionMismatchError(
                "Model weights do not match normalization parameters",
                expected=len(self.feature_means) + 1,
                actual=len(self.weights),
            )

        metrics = {key: self.metrics[key] for key in ("accuracy", "precision", "recall", "f1") if key in self.metrics}
        version = self.version or (self.trained_at.strftime("%Y%m%d%H%M%S") if self.trained_at else "")
        return ModelArtifact(
            model_id="" if self.model_id is None else str(self.model_id),
            training_run_id="" if self.training_run_id is None else str(self.training_run_id),
            trained_at=self.trained_at,
            version=version,
            weights=tuple(self.weights),
            feature_names=tuple(self.feature_names),
            normalization=NormalizationParams(
                means=tuple(self.feature_means),
                std_devs=tuple(self.feature_std_devs),
            ),
            categories=tuple(self.categories),
            category_overflowed=self.category_overflowed,
            hyperparameters=Hyperparameters.resolve(self.hyperparameters),
            metrics=Metrics(**metrics),
        )


def parse_artifact(raw: Union[str, bytes, Dict[str, Any]]) -> ModelArtifact:
    """Decode and validate artifact JSON (text or an already-decoded mapping)."""

    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except ValueError as exc:
            raise MalformedArtifactError("Model artifact could not be decoded.") from exc
    if not isinstance(raw, dict):
        raise MalformedArtifactError("Model artifact could not be decoded.")

    try:
        payload = ArtifactPayload(**raw)
    except ValidationError as exc:
        first = exc.errors()[0]
        field = str(first["loc"][0]) if first.get("loc") else None
        raise MalformedArtifactError(
            f'Model artifact contains invalid values for "{field}": {first["msg"]}',
            field=field,
        ) from exc
    return payload.to_artifact()


class ArtifactStore:
    """Write and read artifacts under ``<root>/models/<model_id>/<version>.json``."""

    def __init__(self, root: Union[str, Path]) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def relative_path(self, artifact: ModelArtifact) -> str:
        model_segment = artifact.model_id or "unassigned"
        return f"models/{model_segment}/{artifact.version}.json"

    def save(self, artifact: ModelArtifact) -> str:
        """Persist ``artifact`` and return its path relative to the store root.

        Artifacts are immutable once written; saving a second artifact with
        the same model and version raises ``FileExistsError``.
        """

        relative = self.relative_path(artifact)
        destination = self._root / relative
        destination.parent.mkdir(parents=True, exist_ok=True)
        with destination.open("x", encoding="utf-8") as handle:
            json.dump(artifact.to_dict(), handle, indent=4)
            handle.write("\n")
        logger.info(f"Wrote model artifact {relative}")
        return relative

    def load(self, path: Union[str, Path]) -> ModelArtifact:
        location = self.resolve(path)
        if not location.is_file():
            raise FileNotFoundError(f'Model artifact "{path}" was not found.')
        return parse_artifact(location.read_text(encoding="utf-8"))

    def resolve(self, path: Union[str, Path]) -> Path:
        candidate = Path(path)
        return candidate if candidate.is_absolute() else self._root / candidate
