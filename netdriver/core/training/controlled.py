"""The controlled (epoch by epoch) training loop."""

from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from netdriver.core.training.protocols import DataGenerator, Trainer


@dataclass(frozen=True, slots=True)
class EpochRecord:
    """Loss and error measured for one epoch."""

    epoch: int
    loss: float
    error: float


@dataclass(slots=True)
class TrainingOutcome:
    """Result of a controlled training run.

    Attributes:
        final_error: The error returned by `stop_training`.
        history: One record per epoch that ran, in order.
        stopped_early: Whether `stop_epoch` ended the run before the planned
            number of epochs.
    """

    final_error: float
    history: list[EpochRecord] = field(default_factory=list)
    stopped_early: bool = False

    @property
    def epochs_run(self) -> int:
        return len(self.history)


def run_controlled_training(
    trainer: Trainer,
    model: Any,
    generator: DataGenerator,
    epochs: int,
) -> TrainingOutcome:
    """Train a model epoch by epoch until the plan ends or the trainer stops.

    The generator is rewound once per epoch, right before `train_epoch`, so
    every epoch sees the whole dataset from its first batch.

    Args:
        trainer: The controlled-mode trainer.
        model: The model being trained.
        generator: Source of the training batches.
        epochs: Planned number of epochs.

    Returns:
        The outcome of the run.
    """
    history: list[EpochRecord] = []
    stopped_early = False

    trainer.start_training(model, epochs)

    for epoch in range(epochs):
        trainer.start_epoch(model, epoch)

        generator.reset()

        loss, error = trainer.train_epoch(model, generator, epoch)
        history.append(EpochRecord(epoch=epoch, loss=loss, error=error))
        logger.debug(f"epoch {epoch}: loss={loss:.6f} error={error:.6f}")

        if trainer.stop_epoch(model, epoch, error, loss):
            stopped_early = epoch + 1 < epochs
            break

    final_error = trainer.stop_training(model)

    return TrainingOutcome(
        final_error=final_error,
        history=history,
        stopped_early=stopped_early,
    )


__all__ = ["EpochRecord", "TrainingOutcome", "run_controlled_training"]
