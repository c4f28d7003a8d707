"""Training protocol: model contract, batch generation and the controlled loop."""

from netdriver.core.training.controlled import (
    EpochRecord,
    TrainingOutcome,
    run_controlled_training,
)
from netdriver.core.training.generators import InMemoryDataGenerator
from netdriver.core.training.protocols import Batch, DataGenerator, Model, Trainer

__all__ = [
    # Protocols
    "Model",
    "Trainer",
    "DataGenerator",
    "Batch",
    # Implementations
    "InMemoryDataGenerator",
    "run_controlled_training",
    "TrainingOutcome",
    "EpochRecord",
]
