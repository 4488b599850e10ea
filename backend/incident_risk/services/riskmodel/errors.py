"""Error hierarchy for the risk model training and evaluation pipeline.

Every failure is raised to the caller. The job layer that drives training
runs decides whether to persist the failure or retry.
"""

from __future__ import annotations

import textwrap
from typing import Optional


class RiskModelError(RuntimeError):
    """Base error for all risk model failures."""

    def __init__(self, message: str, *, hint: Optional[str] = None) -> None:
        final_message = message
        if hint:
            final_message = f"{message}\n{self._format_hint(hint)}"
        super().__init__(final_message)
        self.message = message
        self.hint = hint

    @staticmethod
    def _format_hint(hint: str) -> str:
        return textwrap.indent(f"Hint: {hint}", prefix="  ")


class MissingColumnError(RiskModelError):
    """Raised when a required logical column has no matching header."""

    def __init__(self, column: str, *, hint: Optional[str] = None) -> None:
        super().__init__(f'Dataset is missing required column "{column}".', hint=hint)
        self.column = column


class EmptyDatasetError(RiskModelError):
    """Raised when no usable rows remain after parsing."""


class MalformedArtifactError(RiskModelError):
    """Raised when a model artifact cannot be decoded or is incomplete."""

    def __init__(self, message: str, *, field: Optional[str] = None, hint: Optional[str] = None) -> None:
        super().__init__(message, hint=hint)
        self.field = field


class DimensionMismatchError(RiskModelError):
    """Raised when weight, normalization or feature vector lengths disagree."""

    def __init__(self, message: str, *, expected: int, actual: int) -> None:
        super().__init__(
            f"{message} (expected {expected}, got {actual})",
            hint="Retrain the model or evaluate with a dataset that matches its schema.",
        )
        self.expected = expected
        self.actual = actual


__all__ = [
    "RiskModelError",
    "MissingColumnError",
    "EmptyDatasetError",
    "MalformedArtifactError",
    "DimensionMismatchError",
]
