"""Loading of task descriptions from TOML files.

A task file mirrors the `Task` dataclass:

```toml
[pretraining.samples]
path = "data/train-images-idx3-ubyte"
reader_kind = "mnist"
binarize = true
limit = 5000

[training.samples]
path = "data/train-images-idx3-ubyte"
[training.labels]
path = "data/train-labels-idx1-ubyte"

[pretraining_config]
epochs = 10

[training_config]
epochs = 25
learning_rate = 0.1

[weights]
file_path = "dbn.dat"
```

Relative paths are resolved against the directory of the task file.
"""

from dataclasses import replace
from pathlib import Path
import tomllib

from loguru import logger
from pydantic import TypeAdapter, ValidationError

from netdriver.core.data.sources import DataSource, DataSourcePair
from netdriver.core.errors import TaskFileError
from netdriver.core.task.models import Task, WeightsConfig

_TASK_ADAPTER = TypeAdapter(Task)


def _resolve(path: str, base_dir: Path) -> str:
    if not path or Path(path).is_absolute():
        return path
    return str(base_dir / path)


def _resolve_source(source: DataSource, base_dir: Path) -> DataSource:
    return replace(source, path=_resolve(source.path, base_dir))


def _resolve_pair(pair: DataSourcePair, base_dir: Path) -> DataSourcePair:
    return DataSourcePair(
        samples=_resolve_source(pair.samples, base_dir),
        labels=_resolve_source(pair.labels, base_dir),
    )


def parse_task(data: dict, base_dir: Path | None = None) -> Task:
    """Validate a task from its mapping form.

    Args:
        data: The task mapping, as read from a task file.
        base_dir: Directory relative paths are resolved against. When None,
            paths are kept as they are.

    Returns:
        The validated task.

    Raises:
        pydantic.ValidationError: If the mapping does not describe a valid task.
    """
    task = _TASK_ADAPTER.validate_python(data)
    if base_dir is None:
        return task

    return replace(
        task,
        pretraining=_resolve_pair(task.pretraining, base_dir),
        training=_resolve_pair(task.training, base_dir),
        testing=_resolve_pair(task.testing, base_dir),
        weights=WeightsConfig(file_path=_resolve(task.weights.file_path, base_dir)),
    )


def load_task(path: str | Path) -> Task:
    """Load a task from a TOML file.

    Args:
        path: The task file.

    Returns:
        The validated task, with paths resolved against the file's directory.

    Raises:
        TaskFileError: If the file cannot be read, parsed or validated.
    """
    task_path = Path(path)
    try:
        with task_path.open("rb") as stream:
            data = tomllib.load(stream)
    except OSError as e:
        raise TaskFileError(str(task_path), e.strerror or str(e)) from e
    except tomllib.TOMLDecodeError as e:
        raise TaskFileError(str(task_path), str(e)) from e

    try:
        task = parse_task(data, base_dir=task_path.resolve().parent)
    except ValidationError as e:
        raise TaskFileError(str(task_path), str(e)) from e

    logger.debug(f"Loaded task from '{task_path}'")
    return task


__all__ = ["load_task", "parse_task"]
