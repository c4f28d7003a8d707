"""Shared fixtures for netdriver tests."""

import gzip
from pathlib import Path
import struct
from typing import Any, Callable

import numpy as np
import pytest

from netdriver.core.data import DataSource, DataSourcePair
from netdriver.core.task import Task, WeightsConfig


class FakeModel:
    """A model double recording the calls the executor makes.

    Predictions default to the first value of the sample, modulo the class
    count, so test data decides what gets predicted.
    """

    def __init__(
        self,
        n_classes: int = 3,
        description: str | None = "Fake network\n2 layers",
        store_result: bool | None = True,
        load_result: bool | None = True,
        training_error: float | None = 0.25,
    ) -> None:
        self.n_classes = n_classes
        self.description = description
        self.store_result = store_result
        self.load_result = load_result
        self.training_error = training_error

        self.learning_rate = 0.1
        self.momentum = 0.0
        self.batch_size = 1

        self.calls: list[tuple[Any, ...]] = []
        self.hyperparameters_at_fine_tune: dict[str, Any] = {}

    def display(self) -> str | None:
        return self.description

    def output_class_count(self) -> int:
        return self.n_classes

    def pretrain(self, samples, epochs: int) -> None:
        self.calls.append(("pretrain", len(samples), epochs))

    def fine_tune(self, samples, labels, epochs: int) -> float | None:
        self.hyperparameters_at_fine_tune = {
            "learning_rate": self.learning_rate,
            "momentum": self.momentum,
            "batch_size": self.batch_size,
        }
        self.calls.append(("fine_tune", len(samples), epochs))
        return self.training_error

    def predict(self, sample) -> int:
        self.calls.append(("predict",))
        return int(np.asarray(sample).reshape(-1)[0]) % self.n_classes

    def store(self, path: str) -> bool | None:
        self.calls.append(("store", path))
        return self.store_result

    def load(self, path: str) -> bool | None:
        self.calls.append(("load", path))
        return self.load_result

    def call_names(self) -> list[str]:
        return [call[0] for call in self.calls]


@pytest.fixture
def fake_model() -> FakeModel:
    """Fixture providing a fresh model double."""
    return FakeModel()


@pytest.fixture
def make_fake_model() -> Callable[..., FakeModel]:
    """Fixture providing the model double class, for custom instances."""
    return FakeModel


@pytest.fixture
def write_npy(tmp_path: Path) -> Callable[[str, Any], str]:
    """Fixture writing an array to a `.npy` file and returning its path."""

    def _write(name: str, array: Any) -> str:
        path = tmp_path / name
        np.save(path, np.asarray(array))
        return str(path)

    return _write


def _idx_bytes(array: np.ndarray) -> bytes:
    header = bytes([0, 0, 0x08, array.ndim]) + struct.pack(f">{array.ndim}I", *array.shape)
    return header + array.astype(np.uint8).tobytes()


@pytest.fixture
def write_idx(tmp_path: Path) -> Callable[..., str]:
    """Fixture writing a uint8 array as an IDX file (gzip-compressed on `.gz`)."""

    def _write(name: str, array: Any) -> str:
        path = tmp_path / name
        data = _idx_bytes(np.asarray(array))
        if name.endswith(".gz"):
            with gzip.open(path, "wb") as stream:
                stream.write(data)
        else:
            path.write_bytes(data)
        return str(path)

    return _write


@pytest.fixture
def labelled_data(write_npy) -> Callable[..., DataSourcePair]:
    """Fixture writing samples and labels as `.npy` files.

    With the default model double, each sample is predicted as its first
    value, so `predicted` controls the predictions of a test pass.
    """

    def _make(
        labels: list[int],
        predicted: list[int] | None = None,
        name: str = "data",
    ) -> DataSourcePair:
        predicted = labels if predicted is None else predicted
        samples = np.array([[p, 1.0, 2.0] for p in predicted], dtype=np.float32)
        return DataSourcePair(
            samples=DataSource(
                path=write_npy(f"{name}-samples.npy", samples), reader_kind="numpy"
            ),
            labels=DataSource(
                path=write_npy(f"{name}-labels.npy", np.array(labels, dtype=np.int64)),
                reader_kind="numpy",
            ),
        )

    return _make


@pytest.fixture
def weights_path(tmp_path: Path) -> str:
    return str(tmp_path / "weights.dat")


@pytest.fixture
def complete_task(labelled_data, weights_path: str) -> Task:
    """Fixture providing a task with every phase defined."""
    training = labelled_data([0, 1, 2, 0, 1, 2], name="train")
    testing = labelled_data([0, 1, 2, 2], predicted=[0, 1, 1, 2], name="test")
    return Task(
        pretraining=DataSourcePair(samples=training.samples),
        training=training,
        testing=testing,
        weights=WeightsConfig(file_path=weights_path),
    )
