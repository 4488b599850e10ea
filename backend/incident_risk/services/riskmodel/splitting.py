"""Deterministic train/validation partitioning of a row stream."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Callable, Generic, Iterable, List, Optional, TypeVar

from .config import VALIDATION_SPLIT_RANGE

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class SplitPlan:
    total: int
    train_count: int
    validation_count: int
    clone: bool = False


@dataclass(slots=True)
class SplitBuffers(Generic[T]):
    """Rows routed to training and validation, each in arrival order."""

    plan: SplitPlan
    train: List[T] = field(default_factory=list)
    validation: List[T] = field(default_factory=list)

    def arrival_order(self) -> List[T]:
        """Every distinct row once, in the order the stream produced them."""

        if self.plan.clone:
            return list(self.train)
        return [*self.train, *self.validation]


class TrainValidationSplitter:
    """Send the first ``train_count`` rows to training and the tail to validation.

    When no row can be held out the splitter switches to clone mode and every
    row lands in both buffers, so validation metrics are never computed over
    an empty set.
    """

    def __init__(self, validation_split: float) -> None:
        low, high = VALIDATION_SPLIT_RANGE
        if not low <= validation_split <= high:
            raise ValueError(f"validation_split must be within [{low}, {high}], received {validation_split!r}")
        self._validation_split = validation_split

    def plan(self, total: int) -> SplitPlan:
        if total <= 0:
            return SplitPlan(total=0, train_count=0, validation_count=0, clone=True)

        # Half-up rounding; N * v is never negative.
        validation_count = int(math.floor(total * self._validation_split + 0.5))
        validation_count = max(0, min(validation_count, total - 1))
        train_count = total - validation_count
        if train_count < 1 or validation_count == 0:
            return SplitPlan(total=total, train_count=total, validation_count=0, clone=True)
        return SplitPlan(total=total, train_count=train_count, validation_count=validation_count)

    def split(
        self,
        rows: Iterable[T],
        total: int,
        *,
        on_train: Optional[Callable[[T], None]] = None,
    ) -> SplitBuffers[T]:
        """Route ``rows`` in a single pass.

        ``on_train`` sees exactly the rows placed in the training buffer,
        which is how normalization statistics stay training-only.
        """

        plan = self.plan(total)
        buffers: SplitBuffers[T] = SplitBuffers(plan=plan)
        for position, row in enumerate(rows):
            if plan.clone or position < plan.train_count:
                buffers.train.append(row)
                if on_train is not None:
                    on_train(row)
                if plan.clone:
                    buffers.validation.append(row)
            else:
                buffers.validation.append(row)
        return buffers
