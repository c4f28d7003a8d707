"""Data sources, readers and the loader that resolves them.

- **Sources**: declarative descriptions of the data of a task
- **Protocols**: the reader interface
- **Registry**: readers self-register under a kind string
- **Readers**: built-in IDX (MNIST), numpy and CSV readers
- **Loader**: reads a source and applies its preprocessing
"""

from .loader import DataLoader
from .protocols import ElementFactory, Sample, SampleReader, default_element_factory
from .readers import CsvReader, IdxReader, NumpyReader
from .registry import get_reader, get_reader_registry, register_reader, unregister_reader
from .sources import DataSource, DataSourcePair
from .transformers import binarize_each, normalize_each

__all__ = [
    # Sources
    "DataSource",
    "DataSourcePair",
    # Protocols
    "ElementFactory",
    "Sample",
    "SampleReader",
    "default_element_factory",
    # Readers
    "IdxReader",
    "NumpyReader",
    "CsvReader",
    # Registry
    "register_reader",
    "unregister_reader",
    "get_reader",
    "get_reader_registry",
    # Loader and preprocessing
    "DataLoader",
    "binarize_each",
    "normalize_each",
]
