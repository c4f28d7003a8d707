"""The task executor: runs an ordered list of actions against a model."""

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum
import time
from typing import Annotated, Any, TypeAlias

from loguru import logger

from netdriver.core.data.loader import DataLoader
from netdriver.core.data.sources import DataSourcePair
from netdriver.core.errors import (
    MisalignedDatasetError,
    MissingPhaseInputError,
    ModelIOError,
    NetdriverError,
    UnknownActionError,
)
from netdriver.core.evaluation.evaluator import ConfusionEvaluator, EvaluationReport
from netdriver.core.evaluation.sections import evaluation_sections
from netdriver.core.execution.actions import ActionKind
from netdriver.core.execution.lifecycle import Decision, ExecutionObserver, FailurePolicy
from netdriver.core.report import (
    ReportCollector,
    ReportSection,
    banner,
    error_line,
    message_line,
)
from netdriver.core.task.models import Task, TrainingConfig

ReportSink: TypeAlias = Callable[[ReportSection], None]
"""Receives report sections as soon as they are produced."""


class ActionStatus(Enum):
    """Outcome of one action.

    - `SUCCESS`: The action completed.
    - `FAILURE`: The action hit an expected failure (missing data, unknown
      reader, unknown action, weights I/O...).
    - `ERROR`: The model raised an unexpected exception.
    - `SKIPPED`: The action did not run because the run was aborted.
    """

    SUCCESS = "success"
    FAILURE = "failure"
    ERROR = "error"
    SKIPPED = "skipped"


class ExecutionStatus(Enum):
    """Final status of a run."""

    COMPLETED = "completed"
    ABORTED = "aborted"


@dataclass
class ActionTrace:
    """Trace information for a single action."""

    name: Annotated[str, "The action as requested."]
    duration: Annotated[float, "Duration of the action in seconds."]
    status: Annotated[ActionStatus, "The outcome of the action."]
    message: Annotated[str | None, "A short description of what happened, if any."]
    error: Annotated[Exception | None, "The failure of the action, if any."]


@dataclass
class ExecutionResult:
    """Result of a task execution."""

    status: Annotated[ExecutionStatus, "Final status of the run."]
    traces: Annotated[list[ActionTrace], "One trace per requested action, in order."]
    sections: Annotated[list[ReportSection], "The report stream of the run."]
    evaluations: Annotated[
        list[EvaluationReport], "One evaluation per successful test action."
    ] = field(default_factory=list)

    @property
    def executed(self) -> list[ActionTrace]:
        """Traces of the actions that actually ran."""
        return [trace for trace in self.traces if trace.status != ActionStatus.SKIPPED]

    @property
    def skipped(self) -> list[str]:
        """Names of the actions that did not run."""
        return [trace.name for trace in self.traces if trace.status == ActionStatus.SKIPPED]

    @property
    def errors(self) -> list[tuple[str, Exception]]:
        """(action, error) pairs of the failed actions."""
        return [(trace.name, trace.error) for trace in self.traces if trace.error is not None]

    @property
    def durations(self) -> list[tuple[str, float]]:
        return [(trace.name, trace.duration) for trace in self.traces]

    def total_duration(self) -> float:
        return sum(trace.duration for trace in self.traces)

    def succeeded(self) -> bool:
        """Whether the run completed without any failed action."""
        return self.status == ExecutionStatus.COMPLETED and not self.errors

    def last_error(self) -> Exception | None:
        errors = self.errors
        return errors[-1][1] if errors else None


class TaskExecutor:
    """Executes the actions of a task against a model.

    Actions run strictly in order, each one completed or failed before the
    next starts. Failures never escape `execute`: they are reported as error
    sections and recorded on the result, and the `FailurePolicy` (together
    with the observers) decides whether the run goes on.

    Example:
        ```python
        executor = TaskExecutor(DataLoader(), ConfusionEvaluator())
        result = executor.execute(network, task, ["train", "test", "save"])
        ```
    """

    def __init__(
        self,
        loader: DataLoader | None = None,
        evaluator: ConfusionEvaluator | None = None,
        policy: FailurePolicy | None = None,
        observers: Iterable[ExecutionObserver] = (),
    ) -> None:
        """Initialize the executor.

        Args:
            loader: Resolves data sources. Defaults to a `DataLoader`.
            evaluator: Evaluates test predictions. Defaults to a
                `ConfusionEvaluator`.
            policy: Decides which failures stop the run. Defaults to a
                `FailurePolicy` with its default flags.
            observers: Observers notified of the lifecycle events.
        """
        self._loader = loader or DataLoader()
        self._evaluator = evaluator or ConfusionEvaluator()
        self._policy = policy or FailurePolicy()
        self._observers = tuple(observers)

        self._handlers = {
            ActionKind.PRETRAIN: self._pretrain,
            ActionKind.TRAIN: self._train,
            ActionKind.TEST: self._test,
            ActionKind.SAVE: self._save,
            ActionKind.LOAD: self._load,
        }

    @property
    def policy(self) -> FailurePolicy:
        return self._policy

    def execute(
        self,
        model: Any,
        task: Task,
        actions: Sequence[str],
        sink: ReportSink | None = None,
    ) -> ExecutionResult:
        """Run the actions in order.

        Args:
            model: The model, borrowed for the duration of the call.
            task: The task providing data sources and hyperparameters.
            actions: Action names, among pretrain, train, test, save and load.
            sink: Optional callable receiving every report section as soon as
                it is produced.

        Returns:
            The execution result.
        """
        report = ReportCollector(sink)
        evaluations: list[EvaluationReport] = []
        traces: list[ActionTrace] = []

        aborted = self._notify_execution_start(model, task, actions) == Decision.ABORT

        if not aborted:
            aborted = not self._describe_model(model, report)

        for index, action in enumerate(actions):
            if aborted or self._notify_action_start(action, index) == Decision.ABORT:
                aborted = True
                traces.append(ActionTrace(action, 0.0, ActionStatus.SKIPPED, None, None))
                continue

            trace, decision = self._run_action(action, model, task, report, evaluations)
            traces.append(trace)

            decision = max(decision, self._notify_action_finish(trace))
            if decision == Decision.ABORT:
                aborted = True

        result = ExecutionResult(
            status=ExecutionStatus.ABORTED if aborted else ExecutionStatus.COMPLETED,
            traces=traces,
            sections=report.sections,
            evaluations=evaluations,
        )
        self._notify_execution_finish(result)
        return result

    def _run_action(
        self,
        action: str,
        model: Any,
        task: Task,
        report: ReportCollector,
        evaluations: list[EvaluationReport],
    ) -> tuple[ActionTrace, Decision]:
        start_time = time.perf_counter()
        status = ActionStatus.SUCCESS
        message: str | None = None
        error: Exception | None = None
        decision = Decision.PROCEED

        try:
            kind = self._resolve_action(action)
            report.emit(banner(kind.display_name))
            message = self._handlers[kind](model, task, report, evaluations)
        except NetdriverError as e:
            status, error = ActionStatus.FAILURE, e
            report.emit(error_line(str(e)))
            decision = max(self._policy.decide(e), self._notify_error(action, e))
        except Exception as e:
            logger.opt(exception=e).error(f"Action '{action}' raised an unexpected error")
            status, error = ActionStatus.ERROR, e
            report.emit(error_line(f"{action} failed: {type(e).__name__}: {e}"))
            decision = max(self._policy.decide(e), self._notify_error(action, e))

        duration = time.perf_counter() - start_time
        return ActionTrace(action, duration, status, message, error), decision

    @staticmethod
    def _describe_model(model: Any, report: ReportCollector) -> bool:
        """Emit the Network banner. A failing description aborts the run."""
        try:
            description = model.display()
        except Exception as e:
            logger.opt(exception=e).error("Model description raised an unexpected error")
            report.emit(error_line(f"network description failed: {type(e).__name__}: {e}"))
            return False

        lines = tuple(description.splitlines()) if description else ()
        report.emit(banner("Network", lines))
        return True

    @staticmethod
    def _resolve_action(action: str) -> ActionKind:
        try:
            return ActionKind.from_id(action)
        except ValueError:
            raise UnknownActionError(action) from None

    # --- Actions ---

    def _pretrain(
        self,
        model: Any,
        task: Task,
        report: ReportCollector,
        evaluations: list[EvaluationReport],
    ) -> str:
        source = task.pretraining.samples
        if not source.is_present():
            raise MissingPhaseInputError("pretrain", "pretraining", ("samples",))

        samples = self._loader.load_samples(source, self._element_factory(model))

        epochs = task.pretraining_config.epochs
        model.pretrain(samples, epochs)

        return f"pretrained on {len(samples)} samples for {epochs} epochs"

    def _train(
        self,
        model: Any,
        task: Task,
        report: ReportCollector,
        evaluations: list[EvaluationReport],
    ) -> str:
        samples, labels = self._load_supervised(model, task.training, "train", "training")

        self._apply_overrides(model, task.training_config)

        epochs = task.training_config.epochs
        final_error = model.fine_tune(samples, labels, epochs)

        message = f"trained on {len(samples)} samples for up to {epochs} epochs"
        if final_error is not None:
            report.emit(ReportSection(entries=(("Training error", final_error),)))
            message = f"{message} (error {final_error:.4f})"
        return message

    def _test(
        self,
        model: Any,
        task: Task,
        report: ReportCollector,
        evaluations: list[EvaluationReport],
    ) -> str:
        samples, labels = self._load_supervised(model, task.testing, "test", "testing")

        predictions = [int(model.predict(sample)) for sample in samples]
        evaluation = self._evaluator.evaluate(predictions, labels, model.output_class_count())

        evaluations.append(evaluation)
        for section in evaluation_sections(evaluation):
            report.emit(section)

        return f"tested on {evaluation.sample_count} samples (error {evaluation.error_rate:.4f})"

    def _save(
        self,
        model: Any,
        task: Task,
        report: ReportCollector,
        evaluations: list[EvaluationReport],
    ) -> str:
        path = task.weights.file_path
        self._call_model_io(model.store, path, "store")
        report.emit(message_line("Weights saved"))
        return f"weights saved to '{path}'"

    def _load(
        self,
        model: Any,
        task: Task,
        report: ReportCollector,
        evaluations: list[EvaluationReport],
    ) -> str:
        path = task.weights.file_path
        self._call_model_io(model.load, path, "load")
        report.emit(message_line("Weights loaded"))
        return f"weights loaded from '{path}'"

    # --- Helpers ---

    def _load_supervised(
        self, model: Any, pair: DataSourcePair, action: str, phase: str
    ) -> tuple[list[Any], list[int]]:
        """Load the samples and labels of a phase, both or none."""
        if not pair.is_complete():
            raise MissingPhaseInputError(action, phase, pair.missing())

        samples = self._loader.load_samples(pair.samples, self._element_factory(model))
        labels = self._loader.load_labels(pair.labels)

        if len(samples) != len(labels):
            raise MisalignedDatasetError(phase, len(samples), len(labels))

        return samples, labels

    @staticmethod
    def _element_factory(model: Any) -> Callable[[Any], Any] | None:
        return getattr(model, "sample_factory", None)

    @staticmethod
    def _apply_overrides(model: Any, config: TrainingConfig) -> None:
        """Set the explicitly configured hyperparameters on the model."""
        for name, value in config.overrides().items():
            if not hasattr(model, name):
                logger.warning(f"Model has no '{name}' hyperparameter, ignoring the override")
                continue
            setattr(model, name, value)
            logger.info(f"Using {name}={value}")

    @staticmethod
    def _call_model_io(operation: Callable[[str], Any], path: str, name: str) -> None:
        try:
            succeeded = operation(path)
        except ModelIOError:
            raise
        except OSError as e:
            raise ModelIOError(path, name, e.strerror or str(e)) from e

        if succeeded is False:
            raise ModelIOError(path, name)

    # --- Observers ---

    def _notify_execution_start(self, model: Any, task: Task, actions: Sequence[str]) -> Decision:
        decisions = [o.on_execution_start(model, task, actions) for o in self._observers]
        return max(decisions, default=Decision.PROCEED)

    def _notify_action_start(self, action: str, index: int) -> Decision:
        decisions = [o.on_action_start(action, index) for o in self._observers]
        return max(decisions, default=Decision.PROCEED)

    def _notify_action_finish(self, trace: ActionTrace) -> Decision:
        decisions = [o.on_action_finish(trace) for o in self._observers]
        return max(decisions, default=Decision.PROCEED)

    def _notify_error(self, action: str, error: Exception) -> Decision:
        decisions = [o.on_error(action, error) for o in self._observers]
        return max(decisions, default=Decision.PROCEED)

    def _notify_execution_finish(self, result: ExecutionResult) -> None:
        for observer in self._observers:
            observer.on_execution_finish(result)


__all__ = [
    "ActionStatus",
    "ExecutionStatus",
    "ActionTrace",
    "ExecutionResult",
    "ReportSink",
    "TaskExecutor",
]
