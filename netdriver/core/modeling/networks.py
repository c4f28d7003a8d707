"""Reference network: a deep belief network built on scikit-learn.

Unsupervised pretraining stacks one `BernoulliRBM` per hidden layer, trained
greedily on the features of the layer below. Fine-tuning trains an
`MLPClassifier` (SGD with momentum) on top of the RBM features, stepped epoch
by epoch through `SgdTrainer`.

The RBMs expect inputs in [0, 1], so samples should be binarized (or scaled)
by their data source.
"""

from collections.abc import Sequence
import pickle
from typing import Any

import joblib
from loguru import logger
import numpy as np
from sklearn.exceptions import NotFittedError
from sklearn.neural_network import BernoulliRBM, MLPClassifier

from netdriver.core.errors import ModelIOError
from netdriver.core.modeling.trainers import SgdTrainer
from netdriver.core.training import InMemoryDataGenerator, run_controlled_training

DEFAULT_LEARNING_RATE = 0.05
DEFAULT_MOMENTUM = 0.9
DEFAULT_BATCH_SIZE = 10


class DeepBeliefNetwork:
    """A stack of RBMs topped by a multi-layer perceptron classifier.

    Without pretraining, the hidden layers are trained as regular dense
    layers of the classifier instead. Pretraining again discards a trained
    classifier, since the features it was trained on change.

    Attributes:
        learning_rate: SGD learning rate, used by both stages.
        momentum: SGD momentum of the classifier.
        batch_size: Mini-batch size of both stages.
        error_goal: Training error at which fine-tuning stops early.
        patience: Epochs without loss improvement before fine-tuning stops.
    """

    def __init__(
        self,
        input_size: int,
        n_classes: int,
        hidden_layers: Sequence[int] = (),
        dense_layers: Sequence[int] = (),
        learning_rate: float = DEFAULT_LEARNING_RATE,
        momentum: float = DEFAULT_MOMENTUM,
        batch_size: int = DEFAULT_BATCH_SIZE,
        error_goal: float = 0.0,
        patience: int | None = None,
        random_state: int | None = None,
    ) -> None:
        if input_size < 1:
            raise ValueError(f"input_size must be positive, got {input_size}")
        if n_classes < 1:
            raise ValueError(f"n_classes must be positive, got {n_classes}")

        self.input_size = input_size
        self.n_classes = n_classes
        self.hidden_layers = tuple(hidden_layers)
        self.dense_layers = tuple(dense_layers)
        self.learning_rate = learning_rate
        self.momentum = momentum
        self.batch_size = batch_size
        self.error_goal = error_goal
        self.patience = patience
        self.random_state = random_state

        self._rbms: list[BernoulliRBM] = []
        self._classifier: MLPClassifier | None = None

    @property
    def pretrained(self) -> bool:
        return bool(self._rbms)

    @property
    def trained(self) -> bool:
        return self._classifier is not None and hasattr(self._classifier, "coefs_")

    # --- Model contract ---

    def display(self) -> str:
        hidden = ", ".join(str(n) for n in self.hidden_layers) or "none"
        dense = ", ".join(str(n) for n in self.dense_layers) or "none"
        state = "pretrained" if self.pretrained else "not pretrained"
        return "\n".join(
            [
                f"Input: {self.input_size}",
                f"RBM layers: {hidden} ({state})",
                f"Dense layers: {dense}",
                f"Output: {self.n_classes} classes",
            ]
        )

    def output_class_count(self) -> int:
        return self.n_classes

    def sample_factory(self, array: np.ndarray) -> np.ndarray:
        """Convert one raw record into the flat float vector the network reads."""
        return np.array(array, dtype=np.float32).reshape(-1)

    def pretrain(self, samples: Sequence[Any], epochs: int) -> None:
        """Train the RBM stack greedily, one layer at a time."""
        features = self._stack(samples)

        rbms = []
        for index, n_components in enumerate(self.hidden_layers):
            rbm = BernoulliRBM(
                n_components=n_components,
                learning_rate=self.learning_rate,
                batch_size=self.batch_size,
                n_iter=epochs,
                random_state=self.random_state,
            )
            logger.info(f"Pretraining RBM layer {index} ({features.shape[1]} -> {n_components})")
            features = rbm.fit_transform(features)
            rbms.append(rbm)

        self._rbms = rbms
        self._classifier = None

    def fine_tune(self, samples: Sequence[Any], labels: Sequence[int], epochs: int) -> float:
        """Train the classifier until the epochs run out or the trainer stops.

        Returns:
            The training error of the last epoch.
        """
        generator = InMemoryDataGenerator(
            [self.sample_factory(sample) for sample in samples],
            labels,
            batch_size=self.batch_size,
            shuffle=True,
            random_state=self.random_state,
        )
        self._prepare_classifier()

        outcome = run_controlled_training(self.get_trainer(), self, generator, epochs)
        logger.info(
            f"Fine-tuning ran {outcome.epochs_run} epochs, final error {outcome.final_error:.4f}"
        )
        return outcome.final_error

    def predict(self, sample: Any) -> int:
        X = self.sample_factory(sample).reshape(1, -1)
        return int(self.predict_batch(X)[0])

    def store(self, path: str) -> bool:
        state = {
            "architecture": self._architecture(),
            "rbms": self._rbms,
            "classifier": self._classifier,
        }
        try:
            joblib.dump(state, path)
        except OSError as e:
            raise ModelIOError(path, "store", e.strerror or str(e)) from e
        logger.debug(f"Stored network parameters to {path}")
        return True

    def load(self, path: str) -> bool:
        try:
            state = joblib.load(path)
        except (OSError, EOFError, ValueError, pickle.UnpicklingError) as e:
            raise ModelIOError(path, "load", getattr(e, "strerror", None) or str(e)) from e

        if not isinstance(state, dict) or "architecture" not in state:
            raise ModelIOError(path, "load", "not a network parameters file")
        if state["architecture"] != self._architecture():
            raise ModelIOError(
                path, "load", f"incompatible architecture {state['architecture']}"
            )

        self._rbms = list(state["rbms"])
        self._classifier = state["classifier"]
        logger.debug(f"Loaded network parameters from {path}")
        return True

    # --- Controlled mode ---

    def get_trainer(self) -> SgdTrainer:
        return SgdTrainer(error_goal=self.error_goal, patience=self.patience)

    def transform(self, X: np.ndarray) -> np.ndarray:
        """Propagate a batch through the pretrained RBM stack."""
        features = X
        for rbm in self._rbms:
            features = rbm.transform(features)
        return features

    def train_batch(self, X: np.ndarray, y: np.ndarray) -> float:
        """Perform one SGD update and return the batch loss."""
        classifier = self._prepare_classifier()
        classifier.partial_fit(self.transform(X), y, classes=np.arange(self.n_classes))
        return float(classifier.loss_)

    def predict_batch(self, X: np.ndarray) -> np.ndarray:
        if not self.trained:
            raise NotFittedError("the network has not been trained or loaded")
        return self._classifier.predict(self.transform(X))  # type: ignore[union-attr]

    # --- Helpers ---

    def _architecture(self) -> dict[str, Any]:
        return {
            "input_size": self.input_size,
            "n_classes": self.n_classes,
            "hidden_layers": list(self.hidden_layers),
            "dense_layers": list(self.dense_layers),
        }

    def _prepare_classifier(self) -> MLPClassifier:
        if self._classifier is None:
            hidden = self.dense_layers
            if not self.pretrained:
                hidden = self.hidden_layers + self.dense_layers
            self._classifier = MLPClassifier(
                hidden_layer_sizes=hidden,
                solver="sgd",
                learning_rate_init=self.learning_rate,
                momentum=self.momentum,
                batch_size=self.batch_size,
                random_state=self.random_state,
            )
        elif not self.trained:
            self._classifier.set_params(
                learning_rate_init=self.learning_rate,
                momentum=self.momentum,
                batch_size=self.batch_size,
            )
        return self._classifier

    def _stack(self, samples: Sequence[Any]) -> np.ndarray:
        X = np.stack([self.sample_factory(sample) for sample in samples])
        if X.shape[1] != self.input_size:
            raise ValueError(
                f"samples have {X.shape[1]} features, the network expects {self.input_size}"
            )
        return X


__all__ = ["DeepBeliefNetwork"]
