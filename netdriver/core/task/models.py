"""Declarative task description: what data to use and how long to train."""

from dataclasses import dataclass, field, replace
from typing import Annotated

from pydantic import ConfigDict, Field, with_config

from netdriver.core.data.sources import DataSourcePair

DEFAULT_EPOCHS = 25
DEFAULT_WEIGHTS_FILE = "weights.dat"


@with_config(ConfigDict(extra="forbid"))
@dataclass(frozen=True, slots=True)
class PretrainingConfig:
    """Pretraining hyperparameters.

    Attributes:
        epochs: Number of pretraining epochs.
    """

    epochs: Annotated[int, Field(gt=0)] = DEFAULT_EPOCHS


@with_config(ConfigDict(extra="forbid"))
@dataclass(frozen=True, slots=True)
class TrainingConfig:
    """Fine-tuning hyperparameters.

    Unset overrides leave the model's own defaults untouched.

    Attributes:
        epochs: Number of fine-tuning epochs.
        learning_rate: Learning rate override.
        momentum: Momentum override.
        batch_size: Batch size override.
    """

    epochs: Annotated[int, Field(gt=0)] = DEFAULT_EPOCHS
    learning_rate: Annotated[float, Field(gt=0)] | None = None
    momentum: Annotated[float, Field(ge=0)] | None = None
    batch_size: Annotated[int, Field(gt=0)] | None = None

    def overrides(self) -> dict[str, float | int]:
        """The hyperparameters that are explicitly set."""
        values = {
            "learning_rate": self.learning_rate,
            "momentum": self.momentum,
            "batch_size": self.batch_size,
        }
        return {name: value for name, value in values.items() if value is not None}


@with_config(ConfigDict(extra="forbid"))
@dataclass(frozen=True, slots=True)
class WeightsConfig:
    """Where the model parameters are stored."""

    file_path: str = DEFAULT_WEIGHTS_FILE


@with_config(ConfigDict(extra="forbid"))
@dataclass(frozen=True, slots=True)
class Task:
    """A complete experiment description.

    Attributes:
        pretraining: Pretraining data (samples only are enough).
        training: Fine-tuning data.
        testing: Evaluation data.
        pretraining_config: Pretraining hyperparameters.
        training_config: Fine-tuning hyperparameters.
        weights: Weights file descriptor.
    """

    pretraining: DataSourcePair = field(default_factory=DataSourcePair)
    training: DataSourcePair = field(default_factory=DataSourcePair)
    testing: DataSourcePair = field(default_factory=DataSourcePair)
    pretraining_config: PretrainingConfig = field(default_factory=PretrainingConfig)
    training_config: TrainingConfig = field(default_factory=TrainingConfig)
    weights: WeightsConfig = field(default_factory=WeightsConfig)

    def with_weights(self, file_path: str) -> "Task":
        """Return a copy of the task using another weights file."""
        return replace(self, weights=WeightsConfig(file_path=file_path))


__all__ = [
    "DEFAULT_EPOCHS",
    "DEFAULT_WEIGHTS_FILE",
    "PretrainingConfig",
    "TrainingConfig",
    "WeightsConfig",
    "Task",
]
