"""Streaming feature standardization statistics."""
from __future__ import annotations

from typing import Sequence

import numpy as np

from .entities import NormalizationParams
from .errors import DimensionMismatchError


class OnlineStatisticsAccumulator:
    """Welford-style running mean and variance per feature dimension.

    Only the running count, mean and sum of squared deviations are held, so
    the training rows never need to be revisited to compute the statistics.
    """

    def __init__(self, dimensions: int, *, std_floor: float = 1.0) -> None:
        if dimensions <= 0:
            raise ValueError("dimensions must be positive")
        if std_floor <= 0:
            raise ValueError("std_floor must be positive")
        self._dimensions = dimensions
        self._std_floor = std_floor
        self._count = 0
        self._mean = np.zeros(dimensions, dtype=np.float64)
        self._m2 = np.zeros(dimensions, dtype=np.float64)

    @property
    def count(self) -> int:
        return self._count

    @property
    def dimensions(self) -> int:
        return self._dimensions

    def update(self, features: Sequence[float]) -> None:
        if len(features) != self._dimensions:
            raise DimensionMismatchError(
                "Feature vector length changed mid-stream", expected=self._dimensions, actual=len(features)
            )
        values = np.asarray(features, dtype=np.float64)
        self._count += 1
        delta = values - self._mean
        self._mean += delta / self._count
        self._m2 += delta * (values - self._mean)

    def finalize(self) -> NormalizationParams:
        """Population mean/std; degenerate dimensions get ``std_floor``."""

        if self._count == 0:
            std_devs = np.full(self._dimensions, self._std_floor)
        else:
            std_devs = np.sqrt(np.maximum(self._m2, 0.0) / self._count)
            std_devs = np.where(std_devs > 0, std_devs, self._std_floor)
        return NormalizationParams(
            means=tuple(float(value) for value in self._mean),
            std_devs=tuple(float(value) for value in std_devs),
        )
