"""Protocol definitions for the models driven by the executor.

A model is trained either in convenience mode (`pretrain` and `fine_tune`
run a full training to completion) or in controlled mode, where a `Trainer`
is stepped one epoch at a time:

    start_training -> {start_epoch -> train_epoch -> stop_epoch}* -> stop_training
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import Any, Protocol, runtime_checkable

import numpy as np

Batch = tuple[np.ndarray, np.ndarray]
"""A batch of (samples, labels)."""


@runtime_checkable
class DataGenerator(Protocol):
    """A finite, rewindable source of training batches."""

    def reset(self) -> None:
        """Rewind to the first batch."""
        ...

    def __iter__(self) -> Iterator[Batch]:
        """Iterate over the remaining batches of the current pass."""
        ...


@runtime_checkable
class Trainer(Protocol):
    """Epoch-by-epoch training of a model."""

    def start_training(self, model: Any, max_epochs: int) -> None:
        """Prepare the per-run state before the first epoch."""
        ...

    def start_epoch(self, model: Any, epoch: int) -> None:
        """Mark the beginning of a (zero based) epoch."""
        ...

    def train_epoch(self, model: Any, generator: DataGenerator, epoch: int) -> tuple[float, float]:
        """Train over one full pass of the generator.

        Returns:
            The (loss, error) of the epoch.
        """
        ...

    def stop_epoch(self, model: Any, epoch: int, error: float, loss: float) -> bool:
        """Decide whether training stops after this epoch.

        Returns:
            True to stop training early.
        """
        ...

    def stop_training(self, model: Any) -> float:
        """Finalize the run.

        Returns:
            The final training error.
        """
        ...


@runtime_checkable
class Model(Protocol):
    """The contract a network exposes to the task executor."""

    def display(self) -> str | None:
        """Describe the model. The returned text, if any, is reported."""
        ...

    def output_class_count(self) -> int:
        """Number of classes the model predicts."""
        ...

    def pretrain(self, samples: Sequence[Any], epochs: int) -> None:
        """Run unsupervised pretraining to completion."""
        ...

    def fine_tune(
        self, samples: Sequence[Any], labels: Sequence[int], epochs: int
    ) -> float | None:
        """Run supervised training to completion."""
        ...

    def predict(self, sample: Any) -> int:
        """Predict the class index of one sample."""
        ...

    def store(self, path: str) -> bool | None:
        """Write the parameters to a file. False signals a failure."""
        ...

    def load(self, path: str) -> bool | None:
        """Read the parameters from a file. False signals a failure."""
        ...


__all__ = ["Batch", "DataGenerator", "Trainer", "Model"]
