"""Protocol definitions for data source readers.

Readers decode one kind of external source (an archive format, an array
file, ...) into raw records. They know nothing about preprocessing or tasks;
the `DataLoader` takes care of that.
"""

from __future__ import annotations

from typing import Any, Callable, Protocol, runtime_checkable

import numpy as np

Sample = Any
"""A single input sample, as built by an element factory."""

ElementFactory = Callable[[np.ndarray], Sample]
"""Turns a flat float32 record into the sample type expected by a model."""


@runtime_checkable
class SampleReader(Protocol):
    """Protocol for readers of samples and labels."""

    def read_samples(
        self, path: str, limit: int, element_factory: ElementFactory
    ) -> list[Sample]:
        """Read samples from a source.

        Args:
            path: Location of the source.
            limit: Maximum number of records to read, 0 meaning all of them.
            element_factory: Builds one sample from a flat float32 record.

        Returns:
            The samples, in source order.

        Raises:
            OSError: If the source cannot be opened.
            ValueError: If the source is malformed.
        """
        ...

    def read_labels(self, path: str, limit: int) -> list[int]:
        """Read class labels from a source.

        Args:
            path: Location of the source.
            limit: Maximum number of records to read, 0 meaning all of them.

        Returns:
            The labels, in source order.
        """
        ...


def default_element_factory(record: np.ndarray) -> np.ndarray:
    """Keeps the record as a flat float32 array."""
    return np.array(record, dtype=np.float32)
