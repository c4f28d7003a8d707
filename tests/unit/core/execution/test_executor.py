"""Tests for netdriver.core.execution.executor module."""

from dataclasses import replace
from unittest.mock import MagicMock

import numpy as np
import pytest

from netdriver.core.data import DataSource, DataSourcePair
from netdriver.core.errors import (
    EmptyDatasetError,
    MisalignedDatasetError,
    MissingPhaseInputError,
    ModelIOError,
    UnknownActionError,
    UnknownReaderError,
)
from netdriver.core.execution import (
    ActionStatus,
    Decision,
    ExecutionStatus,
    FailurePolicy,
    IgnoreAllObserver,
    TaskExecutor,
)
from netdriver.core.task import PretrainingConfig, Task, TrainingConfig


def _titles(result) -> list[str | None]:
    return [section.title for section in result.sections if section.banner]


def _error_lines(result) -> list[str]:
    return [section.lines[0] for section in result.sections if section.error]


class DescribeTaskExecutorNetworkBanner:
    """Tests for the model description opening every report."""

    def it_opens_the_report_with_the_model_description(self, fake_model, complete_task) -> None:
        result = TaskExecutor().execute(fake_model, complete_task, [])

        first = result.sections[0]
        assert first.banner
        assert first.title == "Network"
        assert first.lines == ("Fake network", "2 layers")

    def it_reports_an_empty_banner_when_the_model_has_no_description(
        self, make_fake_model, complete_task
    ) -> None:
        model = make_fake_model(description=None)

        result = TaskExecutor().execute(model, complete_task, [])

        assert result.sections[0].title == "Network"
        assert result.sections[0].lines == ()

    def it_survives_a_failing_model_description(self, fake_model, complete_task) -> None:
        fake_model.display = MagicMock(side_effect=RuntimeError("no layers"))

        result = TaskExecutor().execute(fake_model, complete_task, ["train", "save"])

        assert result.status == ExecutionStatus.ABORTED
        assert result.skipped == ["train", "save"]
        assert _error_lines(result) == ["network description failed: RuntimeError: no layers"]
        assert "fine_tune" not in fake_model.call_names()

    def it_completes_an_empty_action_list(self, fake_model, complete_task) -> None:
        result = TaskExecutor().execute(fake_model, complete_task, [])

        assert result.status == ExecutionStatus.COMPLETED
        assert result.traces == []
        assert result.succeeded()


class DescribeTaskExecutorActions:
    """Tests for the individual actions."""

    def it_runs_actions_in_order(self, fake_model, complete_task) -> None:
        result = TaskExecutor().execute(fake_model, complete_task, ["pretrain", "train", "test"])

        assert result.status == ExecutionStatus.COMPLETED
        assert _titles(result) == ["Network", "Pretraining", "Training", "Testing"]
        names = fake_model.call_names()
        assert names.index("pretrain") < names.index("fine_tune") < names.index("predict")

    def it_pretrains_with_the_configured_epochs(self, fake_model, complete_task) -> None:
        task = replace(complete_task, pretraining_config=PretrainingConfig(epochs=7))

        TaskExecutor().execute(fake_model, task, ["pretrain"])

        assert fake_model.calls == [("pretrain", 6, 7)]

    def it_pretrains_without_labels(self, fake_model, complete_task) -> None:
        assert not complete_task.pretraining.labels.is_present()

        result = TaskExecutor().execute(fake_model, complete_task, ["pretrain"])

        assert result.traces[0].status == ActionStatus.SUCCESS

    def it_fine_tunes_with_the_configured_epochs(self, fake_model, complete_task) -> None:
        TaskExecutor().execute(fake_model, complete_task, ["train"])

        assert fake_model.calls == [("fine_tune", 6, 25)]

    def it_applies_training_overrides_before_fine_tuning(
        self, fake_model, complete_task
    ) -> None:
        task = replace(
            complete_task,
            training_config=TrainingConfig(epochs=3, learning_rate=0.5, batch_size=4),
        )

        TaskExecutor().execute(fake_model, task, ["train"])

        assert fake_model.hyperparameters_at_fine_tune == {
            "learning_rate": 0.5,
            "momentum": 0.0,
            "batch_size": 4,
        }

    def it_ignores_overrides_the_model_does_not_have(self, fake_model, complete_task) -> None:
        del fake_model.momentum
        task = replace(complete_task, training_config=TrainingConfig(momentum=0.9))

        result = TaskExecutor().execute(fake_model, task, ["train"])

        assert result.traces[0].status == ActionStatus.SUCCESS
        assert not hasattr(fake_model, "momentum")

    def it_reports_the_training_error(self, fake_model, complete_task) -> None:
        result = TaskExecutor().execute(fake_model, complete_task, ["train"])

        errors = [s for s in result.sections if s.entries and s.entries[0][0] == "Training error"]
        assert errors[0].entry("Training error") == 0.25

    def it_evaluates_every_test_sample(self, fake_model, complete_task) -> None:
        result = TaskExecutor().execute(fake_model, complete_task, ["test"])

        assert fake_model.call_names().count("predict") == 4
        evaluation = result.evaluations[0]
        assert evaluation.sample_count == 4
        assert evaluation.error_rate == pytest.approx(0.25)
        assert evaluation.macro_error == pytest.approx(0.5 / 3)

    def it_emits_the_evaluation_sections_after_the_testing_banner(
        self, fake_model, complete_task
    ) -> None:
        result = TaskExecutor().execute(fake_model, complete_task, ["test"])

        titles = [section.title for section in result.sections]
        assert titles == [
            "Network",
            "Testing",
            "Results",
            "Results per class",
            "Overall",
            "Confusion Matrix (%)",
        ]

    def it_produces_identical_reports_for_repeated_tests(
        self, fake_model, complete_task
    ) -> None:
        result = TaskExecutor().execute(fake_model, complete_task, ["test", "test"])

        first, second = result.evaluations
        np.testing.assert_array_equal(first.confusion, second.confusion)
        assert first.classes == second.classes
        assert first.macro_error == second.macro_error

    def it_evaluates_a_single_sample(self, fake_model, labelled_data, complete_task) -> None:
        task = replace(complete_task, testing=labelled_data([1], name="single"))

        result = TaskExecutor().execute(fake_model, task, ["test"])

        evaluation = result.evaluations[0]
        assert evaluation.sample_count == 1
        assert evaluation.error_rate == 0.0
        assert evaluation.empty_classes == (0, 2)
        assert evaluation.macro_error == 0.0

    def it_saves_weights_to_the_task_file(self, fake_model, complete_task, weights_path) -> None:
        result = TaskExecutor().execute(fake_model, complete_task, ["save"])

        assert fake_model.calls == [("store", weights_path)]
        assert result.sections[-1].lines == ("Weights saved",)

    def it_loads_weights_from_the_task_file(self, fake_model, complete_task, weights_path) -> None:
        result = TaskExecutor().execute(fake_model, complete_task, ["load"])

        assert fake_model.calls == [("load", weights_path)]
        assert result.sections[-1].lines == ("Weights loaded",)

    def it_runs_the_load_test_save_scenario(self, fake_model, complete_task, weights_path) -> None:
        result = TaskExecutor().execute(fake_model, complete_task, ["load", "test", "save"])

        assert result.succeeded()
        assert fake_model.calls[0] == ("load", weights_path)
        assert fake_model.calls[-1] == ("store", weights_path)
        assert _titles(result) == ["Network", "Load Weights", "Testing", "Save Weights"]
        assert len(result.evaluations) == 1

    def it_forwards_every_section_to_the_sink(self, fake_model, complete_task) -> None:
        received = []

        result = TaskExecutor().execute(
            fake_model, complete_task, ["train", "test", "save"], sink=received.append
        )

        assert received == result.sections


class DescribeTaskExecutorFailures:
    """Tests for the failure handling of the executor."""

    def it_aborts_when_training_labels_are_missing(self, fake_model, complete_task) -> None:
        task = replace(
            complete_task, training=DataSourcePair(samples=complete_task.training.samples)
        )

        result = TaskExecutor().execute(fake_model, task, ["train", "save"])

        assert result.status == ExecutionStatus.ABORTED
        assert _error_lines(result) == ["train is not possible without training labels"]
        assert "store" not in fake_model.call_names()
        assert [trace.status for trace in result.traces] == [
            ActionStatus.FAILURE,
            ActionStatus.SKIPPED,
        ]
        assert result.skipped == ["save"]

    def it_names_both_missing_testing_sources(self, fake_model, complete_task) -> None:
        task = replace(complete_task, testing=DataSourcePair())

        result = TaskExecutor().execute(fake_model, task, ["test"])

        assert _error_lines(result) == ["test is not possible without testing samples and labels"]
        assert isinstance(result.last_error(), MissingPhaseInputError)

    def it_aborts_pretraining_without_samples(self, fake_model, complete_task) -> None:
        task = replace(complete_task, pretraining=DataSourcePair())

        result = TaskExecutor().execute(fake_model, task, ["pretrain", "train"])

        assert result.status == ExecutionStatus.ABORTED
        assert fake_model.calls == []

    def it_aborts_on_an_unknown_reader(self, fake_model, complete_task) -> None:
        samples = replace(complete_task.training.samples, reader_kind="hdf5")
        task = replace(complete_task, training=replace(complete_task.training, samples=samples))

        result = TaskExecutor().execute(fake_model, task, ["train", "save"])

        assert result.status == ExecutionStatus.ABORTED
        assert isinstance(result.last_error(), UnknownReaderError)
        assert "hdf5" in _error_lines(result)[0]
        assert fake_model.calls == []

    def it_aborts_on_an_empty_dataset(self, fake_model, write_npy, complete_task) -> None:
        empty = DataSource(
            path=write_npy("empty.npy", np.zeros((0, 3), dtype=np.float32)), reader_kind="numpy"
        )
        task = replace(complete_task, testing=replace(complete_task.testing, samples=empty))

        result = TaskExecutor().execute(fake_model, task, ["test", "save"])

        assert result.status == ExecutionStatus.ABORTED
        assert isinstance(result.last_error(), EmptyDatasetError)
        assert "empty.npy" in _error_lines(result)[0]

    def it_aborts_on_an_unreadable_source(self, fake_model, complete_task, tmp_path) -> None:
        missing = DataSource(path=str(tmp_path / "missing.npy"), reader_kind="numpy")
        task = replace(complete_task, training=replace(complete_task.training, labels=missing))

        result = TaskExecutor().execute(fake_model, task, ["train"])

        assert result.status == ExecutionStatus.ABORTED
        assert isinstance(result.last_error(), EmptyDatasetError)

    def it_aborts_on_misaligned_samples_and_labels(
        self, fake_model, labelled_data, complete_task
    ) -> None:
        short = labelled_data([0, 1], name="short")
        task = replace(
            complete_task,
            testing=replace(complete_task.testing, labels=short.labels),
        )

        result = TaskExecutor().execute(fake_model, task, ["test"])

        assert isinstance(result.last_error(), MisalignedDatasetError)
        assert "predict" not in fake_model.call_names()

    def it_continues_after_an_unknown_action(self, fake_model, complete_task) -> None:
        result = TaskExecutor().execute(fake_model, complete_task, ["bogus", "save"])

        assert result.status == ExecutionStatus.COMPLETED
        assert _error_lines(result) == ["invalid action: 'bogus'"]
        assert "store" in fake_model.call_names()
        assert not result.succeeded()

    def it_emits_no_banner_for_an_unknown_action(self, fake_model, complete_task) -> None:
        result = TaskExecutor().execute(fake_model, complete_task, ["bogus"])

        assert _titles(result) == ["Network"]

    def it_aborts_on_an_unknown_action_when_configured(self, fake_model, complete_task) -> None:
        executor = TaskExecutor(policy=FailurePolicy(abort_on_unknown_action=True))

        result = executor.execute(fake_model, complete_task, ["bogus", "save"])

        assert result.status == ExecutionStatus.ABORTED
        assert isinstance(result.last_error(), UnknownActionError)
        assert fake_model.calls == []

    def it_aborts_when_storing_fails(self, make_fake_model, complete_task, weights_path) -> None:
        model = make_fake_model(store_result=False)

        result = TaskExecutor().execute(model, complete_task, ["save", "test"])

        assert result.status == ExecutionStatus.ABORTED
        assert _error_lines(result) == [f"failed to store weights at '{weights_path}'"]
        assert "Weights saved" not in [line for s in result.sections for line in s.lines]
        assert "predict" not in model.call_names()

    def it_continues_after_a_weights_failure_when_configured(
        self, make_fake_model, complete_task
    ) -> None:
        model = make_fake_model(load_result=False)
        executor = TaskExecutor(policy=FailurePolicy(abort_on_model_io_failure=False))

        result = executor.execute(model, complete_task, ["load", "test"])

        assert result.status == ExecutionStatus.COMPLETED
        assert isinstance(result.last_error(), ModelIOError)
        assert len(result.evaluations) == 1

    def it_wraps_os_errors_of_the_model(self, fake_model, complete_task, weights_path) -> None:
        fake_model.load = MagicMock(side_effect=FileNotFoundError(2, "No such file"))

        result = TaskExecutor().execute(fake_model, complete_task, ["load"])

        error = result.last_error()
        assert isinstance(error, ModelIOError)
        assert str(error) == f"failed to load weights at '{weights_path}': No such file"

    def it_records_unexpected_model_errors_and_aborts(self, fake_model, complete_task) -> None:
        fake_model.fine_tune = MagicMock(side_effect=RuntimeError("diverged"))

        result = TaskExecutor().execute(fake_model, complete_task, ["train", "save"])

        assert result.status == ExecutionStatus.ABORTED
        assert result.traces[0].status == ActionStatus.ERROR
        assert "diverged" in _error_lines(result)[0]
        assert "store" not in fake_model.call_names()

    def it_never_raises_from_execute(self, fake_model) -> None:
        result = TaskExecutor().execute(fake_model, Task(), ["pretrain", "train", "test", "x"])

        assert result.status == ExecutionStatus.ABORTED
        assert len(result.traces) == 4


class DescribeTaskExecutorObservers:
    """Tests for the lifecycle observers."""

    def it_notifies_observers_of_every_event(self, fake_model, complete_task) -> None:
        observer = MagicMock(spec=IgnoreAllObserver)
        for hook in ("on_execution_start", "on_action_start", "on_action_finish", "on_error"):
            getattr(observer, hook).return_value = Decision.PROCEED

        result = TaskExecutor(observers=[observer]).execute(
            fake_model, complete_task, ["bogus", "save"]
        )

        observer.on_execution_start.assert_called_once_with(
            fake_model, complete_task, ["bogus", "save"]
        )
        assert observer.on_action_start.call_count == 2
        assert observer.on_action_finish.call_count == 2
        observer.on_error.assert_called_once()
        observer.on_execution_finish.assert_called_once_with(result)

    def it_lets_an_observer_abort_the_run(self, fake_model, complete_task) -> None:
        class StopBeforeSave(IgnoreAllObserver):
            def on_action_start(self, action, index):
                return Decision.ABORT if action == "save" else Decision.PROCEED

        result = TaskExecutor(observers=[StopBeforeSave()]).execute(
            fake_model, complete_task, ["train", "save", "test"]
        )

        assert result.status == ExecutionStatus.ABORTED
        assert result.skipped == ["save", "test"]
        assert "store" not in fake_model.call_names()

    def it_cannot_resume_a_run_the_policy_aborted(self, fake_model, complete_task) -> None:
        task = replace(complete_task, training=DataSourcePair())

        result = TaskExecutor(observers=[IgnoreAllObserver()]).execute(
            fake_model, task, ["train", "save"]
        )

        assert result.status == ExecutionStatus.ABORTED


class DescribeExecutionResult:
    """Tests for the execution result accessors."""

    def it_reports_durations_per_action(self, fake_model, complete_task) -> None:
        result = TaskExecutor().execute(fake_model, complete_task, ["train", "save"])

        assert [name for name, _ in result.durations] == ["train", "save"]
        assert result.total_duration() == pytest.approx(sum(d for _, d in result.durations))

    def it_lists_the_errors_of_failed_actions(self, fake_model, complete_task) -> None:
        result = TaskExecutor().execute(fake_model, complete_task, ["nope", "save"])

        assert [(name, type(error)) for name, error in result.errors] == [
            ("nope", UnknownActionError)
        ]
        assert [trace.name for trace in result.executed] == ["nope", "save"]
