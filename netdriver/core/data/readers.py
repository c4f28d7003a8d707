"""Built-in readers for the data sources of a task.

Each reader registers itself in the reader registry under one or more kinds.
"""

from __future__ import annotations

import gzip
from pathlib import Path
import struct
from typing import BinaryIO

import numpy as np
import polars as pl

from netdriver.core.data.protocols import ElementFactory, Sample
from netdriver.core.data.registry import register_reader

# IDX type codes to numpy dtypes (the payload is big-endian)
_IDX_DTYPES: dict[int, np.dtype] = {
    0x08: np.dtype(np.uint8),
    0x09: np.dtype(np.int8),
    0x0B: np.dtype(">i2"),
    0x0C: np.dtype(">i4"),
    0x0D: np.dtype(">f4"),
    0x0E: np.dtype(">f8"),
}


def _open_binary(path: str) -> BinaryIO:
    if path.endswith(".gz"):
        return gzip.open(path, "rb")  # type: ignore[return-value]
    return open(path, "rb")


@register_reader("mnist", "idx")
class IdxReader:
    """Reads IDX archives (the MNIST image and label file format).

    Image records are returned flattened, with raw pixel intensities. Files
    ending with `.gz` are decompressed on the fly.
    """

    def _read_records(self, path: str, limit: int, expected_dims: int) -> np.ndarray:
        with _open_binary(path) as stream:
            header = stream.read(4)
            if len(header) != 4 or header[0] != 0 or header[1] != 0:
                raise ValueError(f"'{path}' is not an IDX file")

            type_code, dims = header[2], header[3]
            if type_code not in _IDX_DTYPES:
                raise ValueError(f"unsupported IDX type code {type_code:#04x}")
            if dims != expected_dims:
                raise ValueError(f"expected {expected_dims} dimensions, found {dims}")

            sizes = stream.read(4 * dims)
            if len(sizes) != 4 * dims:
                raise ValueError(f"'{path}' has a truncated header")
            shape = struct.unpack(f">{dims}I", sizes)
            count = shape[0] if not limit else min(shape[0], limit)
            record_size = int(np.prod(shape[1:], dtype=np.int64)) if dims > 1 else 1

            dtype = _IDX_DTYPES[type_code]
            payload = stream.read(count * record_size * dtype.itemsize)
            if len(payload) != count * record_size * dtype.itemsize:
                raise ValueError(f"'{path}' is truncated")

        return np.frombuffer(payload, dtype=dtype).reshape(count, record_size)

    def read_samples(
        self, path: str, limit: int, element_factory: ElementFactory
    ) -> list[Sample]:
        records = self._read_records(path, limit, expected_dims=3)
        return [element_factory(record.astype(np.float32)) for record in records]

    def read_labels(self, path: str, limit: int) -> list[int]:
        records = self._read_records(path, limit, expected_dims=1)
        return [int(label) for label in records[:, 0]]


@register_reader("numpy")
class NumpyReader:
    """Reads `.npy` arrays.

    Sample arrays are indexed by record on their first axis; every record is
    flattened. Label arrays are flattened to one label per record.
    """

    def _load(self, path: str, limit: int) -> np.ndarray:
        array = np.load(Path(path), allow_pickle=False)
        if array.ndim == 0:
            raise ValueError(f"'{path}' holds a scalar, not records")
        return array[:limit] if limit else array

    def read_samples(
        self, path: str, limit: int, element_factory: ElementFactory
    ) -> list[Sample]:
        array = self._load(path, limit)
        records = array.reshape(array.shape[0], -1).astype(np.float32)
        return [element_factory(record) for record in records]

    def read_labels(self, path: str, limit: int) -> list[int]:
        array = self._load(path, limit)
        return [int(label) for label in array.reshape(-1)]


@register_reader("csv")
class CsvReader:
    """Reads header-less CSV files with polars.

    Every row of a samples file is one record; a labels file holds the label
    in its first column.
    """

    def _read(self, path: str, limit: int) -> pl.DataFrame:
        try:
            return pl.read_csv(path, has_header=False, n_rows=limit or None)
        except pl.exceptions.PolarsError as e:
            raise ValueError(f"'{path}' is not a readable CSV file: {e}") from e

    def read_samples(
        self, path: str, limit: int, element_factory: ElementFactory
    ) -> list[Sample]:
        records = self._read(path, limit).to_numpy().astype(np.float32)
        return [element_factory(record) for record in records]

    def read_labels(self, path: str, limit: int) -> list[int]:
        column = self._read(path, limit).to_series(0)
        return [int(label) for label in column.to_list()]


__all__ = ["IdxReader", "NumpyReader", "CsvReader"]
