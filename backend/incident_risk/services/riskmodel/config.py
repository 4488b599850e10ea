"""Configuration schemas for risk model training and evaluation."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

LEARNING_RATE_RANGE = (0.0001, 1.0)
ITERATIONS_RANGE = (100, 5000)
VALIDATION_SPLIT_RANGE = (0.1, 0.5)


def _clamp(value: float, minimum: float, maximum: float) -> float:
    return max(minimum, min(maximum, value))


def _as_float(value: Any, default: float) -> float:
    if value is None or isinstance(value, bool):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _as_int(value: Any, default: int) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default


@dataclass(frozen=True, slots=True)
class Hyperparameters:
    """Training hyperparameters, always within their allowed ranges."""

    learning_rate: float = 0.3
    iterations: int = 600
    validation_split: float = 0.2

    @classmethod
    def resolve(
        cls,
        values: Optional[Mapping[str, Any]] = None,
        *,
        defaults: Optional["Hyperparameters"] = None,
    ) -> "Hyperparameters":
        """Coerce caller-supplied values and clamp them into range.

        Missing or non-numeric entries fall back to ``defaults``; everything
        else is clamped, so out-of-range input never fails.
        """

        values = values or {}
        defaults = defaults or cls()
        learning_rate = _as_float(values.get("learning_rate"), defaults.learning_rate)
        iterations = _as_int(values.get("iterations"), defaults.iterations)
        validation_split = _as_float(values.get("validation_split"), defaults.validation_split)

        # NaN compares false against both bounds; treat it as missing.
        if learning_rate != learning_rate:
            learning_rate = defaults.learning_rate
        if validation_split != validation_split:
            validation_split = defaults.validation_split

        return cls(
            learning_rate=_clamp(learning_rate, *LEARNING_RATE_RANGE),
            iterations=int(_clamp(iterations, *ITERATIONS_RANGE)),
            validation_split=_clamp(validation_split, *VALIDATION_SPLIT_RANGE),
        )

    def as_dict(self) -> Dict[str, float]:
        return {
            "learning_rate": self.learning_rate,
            "iterations": self.iterations,
            "validation_split": self.validation_split,
        }


@dataclass(slots=True)
class PipelineConfig:
    """Knobs shared by the training and evaluation services."""

    max_categories: int = 256
    probability_threshold: float = 0.5
    std_floor: float = 1.0
    sigmoid_clamp: float = 60.0

    def validate(self) -> None:
        if self.max_categories <= 0:
            raise ValueError("max_categories must be positive")
        if not 0 < self.probability_threshold < 1:
            raise ValueError("probability_threshold must be in (0, 1)")
        if self.std_floor <= 0:
            raise ValueError("std_floor must be positive")
        if self.sigmoid_clamp <= 0:
            raise ValueError("sigmoid_clamp must be positive")
