"""Controlled-mode trainers for the reference network."""

import math
from typing import Any

from loguru import logger
import numpy as np

from netdriver.core.training.protocols import DataGenerator


class SgdTrainer:
    """Mini-batch stochastic gradient descent, stepped one epoch at a time.

    The model must expose `train_batch(X, y) -> float`, which performs one
    update and returns the batch loss, and `predict_batch(X)`.

    Training stops early when the epoch error reaches `error_goal`, or when
    the loss has not improved for `patience` consecutive epochs.
    """

    def __init__(self, error_goal: float = 0.0, patience: int | None = None) -> None:
        if patience is not None and patience < 1:
            raise ValueError(f"patience must be positive, got {patience}")
        self.error_goal = error_goal
        self.patience = patience

        self._last_error: float | None = None
        self._best_loss = math.inf
        self._stale_epochs = 0

    def start_training(self, model: Any, max_epochs: int) -> None:
        self._last_error = None
        self._best_loss = math.inf
        self._stale_epochs = 0
        logger.debug(f"Starting SGD training for up to {max_epochs} epochs")

    def start_epoch(self, model: Any, epoch: int) -> None:
        return None

    def train_epoch(self, model: Any, generator: DataGenerator, epoch: int) -> tuple[float, float]:
        """Run one pass over the generator.

        Returns:
            The sample-weighted mean loss and the error rate of the epoch. The
            error is measured on each batch right after its update.
        """
        total_loss = 0.0
        seen = 0
        wrong = 0

        for X, y in generator:
            loss = model.train_batch(X, y)
            predictions = model.predict_batch(X)

            total_loss += float(loss) * len(y)
            wrong += int(np.count_nonzero(np.asarray(predictions) != y))
            seen += len(y)

        if seen == 0:
            return 0.0, 1.0
        return total_loss / seen, wrong / seen

    def stop_epoch(self, model: Any, epoch: int, error: float, loss: float) -> bool:
        self._last_error = error

        if error <= self.error_goal:
            logger.info(f"Error goal reached at epoch {epoch} (error {error:.4f})")
            return True

        if self.patience is None:
            return False

        if loss < self._best_loss:
            self._best_loss = loss
            self._stale_epochs = 0
            return False

        self._stale_epochs += 1
        if self._stale_epochs >= self.patience:
            logger.info(f"Loss stalled for {self._stale_epochs} epochs, stopping at epoch {epoch}")
            return True
        return False

    def stop_training(self, model: Any) -> float:
        return self._last_error if self._last_error is not None else 1.0


__all__ = ["SgdTrainer"]
