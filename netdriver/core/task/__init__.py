"""Task descriptions and their file format."""

from netdriver.core.task.loader import load_task, parse_task
from netdriver.core.task.models import (
    DEFAULT_EPOCHS,
    DEFAULT_WEIGHTS_FILE,
    PretrainingConfig,
    Task,
    TrainingConfig,
    WeightsConfig,
)

__all__ = [
    "Task",
    "PretrainingConfig",
    "TrainingConfig",
    "WeightsConfig",
    "DEFAULT_EPOCHS",
    "DEFAULT_WEIGHTS_FILE",
    "load_task",
    "parse_task",
]
