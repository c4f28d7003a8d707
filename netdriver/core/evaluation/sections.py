"""Report sections describing an evaluation."""

from netdriver.core.evaluation.evaluator import EvaluationReport
from netdriver.core.report import ReportSection, ReportTable


def evaluation_sections(report: EvaluationReport) -> list[ReportSection]:
    """Build the sections of a test report.

    The sections are, in order: overall error and accuracy, the per-class
    table, the macro-averaged error and accuracy and the confusion matrix in
    percent (rows are true classes, columns predicted classes).
    """
    overall = ReportSection(
        title="Results",
        entries=(
            ("Samples", report.sample_count),
            ("Error rate", report.error_rate),
            ("Accuracy", report.accuracy),
        ),
    )

    per_class = ReportSection(
        title="Results per class",
        table=ReportTable(
            columns=("Class", "Accuracy", "Error rate"),
            rows=tuple(
                (stats.label, stats.accuracy, stats.error) for stats in report.classes
            ),
        ),
    )

    macro = ReportSection(
        title="Overall",
        entries=(
            ("Overall Error rate", report.macro_error),
            ("Overall Accuracy", report.macro_accuracy),
        ),
    )

    labels = [str(label) for label in range(report.class_count)]
    confusion = ReportSection(
        title="Confusion Matrix (%)",
        table=ReportTable(
            columns=("Class", *labels),
            rows=tuple(
                (label, *row) for label, row in enumerate(report.confusion_percentages())
            ),
        ),
    )

    return [overall, per_class, macro, confusion]


__all__ = ["evaluation_sections"]
