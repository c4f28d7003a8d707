"""Confusion-matrix based evaluation of classification results."""

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
from sklearn.metrics import confusion_matrix


@dataclass(frozen=True, slots=True)
class ClassStatistics:
    """Accuracy and error of a single class.

    A class without any test instance has no defined accuracy or error; both
    are None and the class does not take part in the macro average.

    Attributes:
        label: The class index.
        support: Number of test items whose true class is this one.
        correct: Number of those items predicted correctly.
        accuracy: Fraction of correct predictions, or None without support.
        error: 1 - accuracy, or None without support.
    """

    label: int
    support: int
    correct: int
    accuracy: float | None
    error: float | None

    @property
    def has_support(self) -> bool:
        return self.support > 0


@dataclass(frozen=True, slots=True)
class EvaluationReport:
    """Statistics of one test pass.

    Attributes:
        confusion: Counts indexed by (true class, predicted class).
        sample_count: Number of evaluated items.
        true_positives: Number of correctly predicted items.
        error_rate: Overall (micro) error rate.
        accuracy: Overall (micro) accuracy.
        classes: Per-class statistics, by ascending class index.
        macro_error: Mean of the per-class errors over supported classes.
        macro_accuracy: 1 - macro_error.
    """

    confusion: np.ndarray
    sample_count: int
    true_positives: int
    error_rate: float
    accuracy: float
    classes: tuple[ClassStatistics, ...]
    macro_error: float
    macro_accuracy: float

    @property
    def class_count(self) -> int:
        return len(self.classes)

    @property
    def empty_classes(self) -> tuple[int, ...]:
        """Indices of the classes without any test instance."""
        return tuple(stats.label for stats in self.classes if not stats.has_support)

    def confusion_percentages(self) -> list[list[float | None]]:
        """Row-normalized confusion matrix, in percent.

        Rows of classes without support are all None.
        """
        rows: list[list[float | None]] = []
        for label, stats in enumerate(self.classes):
            if not stats.has_support:
                rows.append([None] * self.class_count)
                continue
            counts = self.confusion[label].tolist()
            rows.append([100.0 * count / stats.support for count in counts])
        return rows


class ConfusionEvaluator:
    """Evaluates class predictions against the ground truth.

    This implementation computes:
    - The confusion matrix
    - Overall error rate and accuracy
    - Per-class error rate and accuracy
    - Macro-averaged error rate and accuracy (each class weighted equally)
    """

    def evaluate(
        self,
        predictions: Sequence[int],
        truth: Sequence[int],
        class_count: int,
    ) -> EvaluationReport:
        """Evaluate predictions.

        Args:
            predictions: Predicted class index of every item.
            truth: True class index of every item.
            class_count: Number of output classes.

        Returns:
            The evaluation report.

        Raises:
            ValueError: If the inputs are empty, differ in length or hold class
                indices outside [0, class_count).
        """
        y_pred = np.asarray(predictions, dtype=np.int64)
        y_true = np.asarray(truth, dtype=np.int64)

        if class_count < 1:
            raise ValueError(f"class_count must be positive, got {class_count}")
        if len(y_pred) != len(y_true):
            raise ValueError(
                f"predictions and truth differ in length ({len(y_pred)} != {len(y_true)})"
            )
        if len(y_true) == 0:
            raise ValueError("cannot evaluate an empty test set")

        for name, values in (("predictions", y_pred), ("truth", y_true)):
            out_of_range = values[(values < 0) | (values >= class_count)]
            if out_of_range.size:
                raise ValueError(
                    f"{name} hold class indices outside [0, {class_count}): "
                    f"{sorted(set(out_of_range.tolist()))}"
                )

        conf = confusion_matrix(y_true, y_pred, labels=np.arange(class_count))

        n = len(y_true)
        true_positives = int(np.trace(conf))
        error_rate = (n - true_positives) / n

        classes: list[ClassStatistics] = []
        for label in range(class_count):
            support = int(conf[label].sum())
            correct = int(conf[label, label])
            if support == 0:
                classes.append(ClassStatistics(label, 0, 0, None, None))
                continue
            error = (support - correct) / support
            classes.append(ClassStatistics(label, support, correct, 1.0 - error, error))

        supported_errors = [stats.error for stats in classes if stats.error is not None]
        macro_error = sum(supported_errors) / len(supported_errors)

        return EvaluationReport(
            confusion=conf,
            sample_count=n,
            true_positives=true_positives,
            error_rate=error_rate,
            accuracy=1.0 - error_rate,
            classes=tuple(classes),
            macro_error=macro_error,
            macro_accuracy=1.0 - macro_error,
        )


__all__ = ["ClassStatistics", "EvaluationReport", "ConfusionEvaluator"]
