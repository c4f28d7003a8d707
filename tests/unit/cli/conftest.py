"""Shared fixtures for CLI unit tests."""

from pathlib import Path
from typing import Generator
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner


@pytest.fixture
def runner() -> CliRunner:
    """Fixture providing a CLI test runner."""
    return CliRunner()


@pytest.fixture
def mock_container() -> Generator[MagicMock, None, None]:
    """Fixture providing a mocked DI container.

    Logging configuration is patched out so the runner's streams are not
    captured by a log sink.
    """
    mock = MagicMock()

    with (
        patch("netdriver.cli.run.container", mock),
        patch("netdriver.cli.run.configure_logging"),
    ):
        yield mock


@pytest.fixture
def mock_executor(mock_container: MagicMock) -> MagicMock:
    """Fixture providing a mocked TaskExecutor from the container."""
    executor = MagicMock()
    mock_container.task_executor.return_value = executor
    return executor


@pytest.fixture
def task_file(tmp_path: Path) -> Path:
    """Fixture providing a task file with training data only."""
    path = tmp_path / "task.toml"
    path.write_text(
        '[training.samples]\npath = "train-images"\n'
        '[training.labels]\npath = "train-labels"\n'
        '[testing.samples]\npath = "test-images"\n'
        '[weights]\nfile_path = "net.dat"\n'
    )
    return path
