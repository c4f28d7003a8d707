"""In-memory batch generator for controlled training."""

from collections.abc import Iterator, Sequence
from typing import Any

import numpy as np

from netdriver.core.training.protocols import Batch


class InMemoryDataGenerator:
    """Serves batches of samples and labels held in memory.

    One pass yields every sample exactly once. The generator is consumed by
    iteration and rewound with `reset`, which also reshuffles the order when
    shuffling is enabled.

    Example:
        ```python
        generator = InMemoryDataGenerator(samples, labels, batch_size=10)
        for epoch in range(epochs):
            generator.reset()
            for X, y in generator:
                ...
        ```
    """

    def __init__(
        self,
        samples: Sequence[Any],
        labels: Sequence[int],
        batch_size: int = 1,
        shuffle: bool = False,
        random_state: int | None = None,
    ) -> None:
        """Initialize the generator.

        Args:
            samples: The samples, index-aligned with the labels.
            labels: The class labels.
            batch_size: Maximum number of samples per batch.
            shuffle: Whether every pass uses a new random order.
            random_state: Seed for the shuffling.

        Raises:
            ValueError: If samples and labels differ in length or the batch
                size is not positive.
        """
        if len(samples) != len(labels):
            raise ValueError(
                f"samples and labels differ in length ({len(samples)} != {len(labels)})"
            )
        if batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {batch_size}")

        if len(samples):
            self._X = np.stack([np.asarray(sample) for sample in samples])
        else:
            self._X = np.empty((0,))
        self._y = np.asarray(labels, dtype=np.int64)
        self._batch_size = batch_size
        self._shuffle = shuffle
        self._rng = np.random.default_rng(random_state)
        self._order = np.arange(len(self._y))
        self._cursor = 0

        if self._shuffle:
            self._rng.shuffle(self._order)

    def __len__(self) -> int:
        """Number of batches in one pass."""
        return -(-len(self._y) // self._batch_size)

    @property
    def sample_count(self) -> int:
        return len(self._y)

    @property
    def batch_size(self) -> int:
        return self._batch_size

    def reset(self) -> None:
        self._cursor = 0
        if self._shuffle:
            self._rng.shuffle(self._order)

    def has_next(self) -> bool:
        return self._cursor < len(self._y)

    def next_batch(self) -> Batch:
        """Return the next batch and advance.

        Raises:
            StopIteration: If the current pass is exhausted.
        """
        if not self.has_next():
            raise StopIteration
        indices = self._order[self._cursor : self._cursor + self._batch_size]
        self._cursor += len(indices)
        return self._X[indices], self._y[indices]

    def __iter__(self) -> Iterator[Batch]:
        while self.has_next():
            yield self.next_batch()


__all__ = ["InMemoryDataGenerator"]
