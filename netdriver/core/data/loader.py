"""Resolves data sources into in-memory samples and labels."""

from __future__ import annotations

from loguru import logger

from netdriver.core.data.protocols import (
    ElementFactory,
    Sample,
    SampleReader,
    default_element_factory,
)
from netdriver.core.data.registry import get_reader
from netdriver.core.data.sources import DataSource
from netdriver.core.data.transformers import (
    DEFAULT_BINARIZE_THRESHOLD,
    binarize_each,
    normalize_each,
)
from netdriver.core.errors import EmptyDatasetError, UnknownReaderError


class DataLoader:
    """Loads the records of a data source through the reader registry.

    Preprocessing requested by the source is applied after the raw read,
    binarization strictly before normalization.

    Example:
        ```python
        loader = DataLoader()
        samples = loader.load_samples(task.training.samples)
        labels = loader.load_labels(task.training.labels)
        ```
    """

    def __init__(self, binarize_threshold: float = DEFAULT_BINARIZE_THRESHOLD) -> None:
        """Initialize the loader.

        Args:
            binarize_threshold: Values above it become 1 when binarizing.
        """
        self._binarize_threshold = binarize_threshold

    def _resolve_reader(self, source: DataSource) -> SampleReader:
        reader_cls = get_reader(source.reader_kind)
        if reader_cls is None:
            raise UnknownReaderError(source.reader_kind)
        return reader_cls()

    def load_samples(
        self,
        source: DataSource,
        element_factory: ElementFactory | None = None,
    ) -> list[Sample]:
        """Load and preprocess the samples of a source.

        Args:
            source: The samples source.
            element_factory: Builds a sample from a flat float32 record. It must
                return a float numpy array. Defaults to a flat float32 copy.

        Returns:
            The non-empty list of samples.

        Raises:
            UnknownReaderError: If the reader kind is not registered.
            EmptyDatasetError: If no sample could be read.
        """
        reader = self._resolve_reader(source)
        factory = element_factory or default_element_factory

        try:
            samples = reader.read_samples(source.path, source.effective_limit, factory)
        except (OSError, ValueError) as e:
            raise EmptyDatasetError(source.path, str(e)) from e

        if not samples:
            raise EmptyDatasetError(source.path)

        if source.binarize:
            binarize_each(samples, self._binarize_threshold)

        if source.normalize:
            normalize_each(samples)

        logger.debug(f"Loaded {len(samples)} samples from '{source.path}'")
        return samples

    def load_labels(self, source: DataSource) -> list[int]:
        """Load the labels of a source.

        Args:
            source: The labels source.

        Returns:
            The non-empty list of labels.

        Raises:
            UnknownReaderError: If the reader kind is not registered.
            EmptyDatasetError: If no label could be read.
        """
        reader = self._resolve_reader(source)

        try:
            labels = reader.read_labels(source.path, source.effective_limit)
        except (OSError, ValueError) as e:
            raise EmptyDatasetError(source.path, str(e)) from e

        if not labels:
            raise EmptyDatasetError(source.path)

        logger.debug(f"Loaded {len(labels)} labels from '{source.path}'")
        return labels


__all__ = ["DataLoader"]
