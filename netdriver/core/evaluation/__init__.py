"""Evaluation of class predictions against the ground truth."""

from netdriver.core.evaluation.evaluator import (
    ClassStatistics,
    ConfusionEvaluator,
    EvaluationReport,
)
from netdriver.core.evaluation.sections import evaluation_sections

__all__ = [
    "ClassStatistics",
    "ConfusionEvaluator",
    "EvaluationReport",
    "evaluation_sections",
]
