"""Scoring primitives for the linear-logistic model."""
from __future__ import annotations

import math
from typing import Iterable, List, Sequence

from .errors import DimensionMismatchError

SIGMOID_CLAMP = 60.0


def sigmoid(value: float, clamp: float = SIGMOID_CLAMP) -> float:
    # Saturate instead of overflowing exp().
    if value < -clamp:
        return 0.0
    if value > clamp:
        return 1.0
    return 1.0 / (1.0 + math.exp(-value))


def dot_product(weights: Sequence[float], values: Sequence[float]) -> float:
    total = 0.0
    for weight, value in zip(weights, values):
        total += weight * value
    return total


def with_bias(features: Iterable[float]) -> List[float]:
    """Prepend the constant bias input."""

    return [1.0, *features]


def standardize(features: Sequence[float], means: Sequence[float], std_devs: Sequence[float]) -> List[float]:
    if len(means) != len(std_devs):
        raise DimensionMismatchError(
            "Normalization parameters are misaligned", expected=len(means), actual=len(std_devs)
        )
    if len(features) != len(means):
        raise DimensionMismatchError(
            "Feature vector size mismatch during normalization", expected=len(means), actual=len(features)
        )
    return [
        (value - mean) / (std if std > 0 else 1.0)
        for value, mean, std in zip(features, means, std_devs)
    ]


def destandardize(values: Sequence[float], means: Sequence[float], std_devs: Sequence[float]) -> List[float]:
    return [
        value * (std if std > 0 else 1.0) + mean
        for value, mean, std in zip(values, means, std_devs)
    ]


def predict_probability(
    weights: Sequence[float], normalized: Sequence[float], clamp: float = SIGMOID_CLAMP
) -> float:
    inputs = with_bias(normalized)
    if len(weights) != len(inputs):
        raise DimensionMismatchError(
            "Model weights do not match feature vector length", expected=len(weights), actual=len(inputs)
        )
    return sigmoid(dot_product(weights, inputs), clamp)
