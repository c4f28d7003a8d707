"""Lifecycle hooks and failure policy of a task execution."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
import enum
from typing import TYPE_CHECKING, Any, Protocol

from netdriver.core.errors import ModelIOError, UnknownActionError

if TYPE_CHECKING:
    from netdriver.core.execution.executor import ActionTrace, ExecutionResult
    from netdriver.core.task import Task


class Decision(enum.IntEnum):
    """Decisions observers and the failure policy can request.

    Decisions are ordered by severity, so the executor aggregates several
    responses by taking the maximum value.

    - `PROCEED`: Continue with the next action.
    - `ABORT`: Stop the run; the remaining actions are skipped.
    """

    PROCEED = enum.auto()
    ABORT = enum.auto()


class ExecutionObserver(Protocol):
    """Observer protocol for task execution lifecycle events.

    Every hook except `on_execution_finish` returns a `Decision`; an observer
    can stop a run but never resume one the failure policy aborted.
    """

    def on_execution_start(self, model: Any, task: Task, actions: Sequence[str]) -> Decision:
        """Called before the model is displayed and the first action runs."""
        ...

    def on_action_start(self, action: str, index: int) -> Decision:
        """Called when an action is about to run.

        Returns:
            Decision: PROCEED to run it, ABORT to stop the run instead.
        """
        ...

    def on_action_finish(self, trace: ActionTrace) -> Decision:
        """Called when an action has completed, successfully or not."""
        ...

    def on_error(self, action: str, error: Exception) -> Decision:
        """Called when an action failed, before `on_action_finish`."""
        ...

    def on_execution_finish(self, result: ExecutionResult) -> None:
        """Called once the run is over."""
        ...


class IgnoreAllObserver:
    """An execution observer that proceeds through all events.

    Useful as a base class for observers interested in a few events only.
    """

    def on_execution_start(self, model: Any, task: Task, actions: Sequence[str]) -> Decision:
        return Decision.PROCEED

    def on_action_start(self, action: str, index: int) -> Decision:
        return Decision.PROCEED

    def on_action_finish(self, trace: ActionTrace) -> Decision:
        return Decision.PROCEED

    def on_error(self, action: str, error: Exception) -> Decision:
        return Decision.PROCEED

    def on_execution_finish(self, result: ExecutionResult) -> None:
        return None


@dataclass(frozen=True, slots=True)
class FailurePolicy:
    """Decides whether a failed action stops the whole run.

    Missing inputs, unknown readers, empty or misaligned datasets and
    unexpected model errors always abort. Unknown actions and weights I/O
    failures follow the flags below.

    Attributes:
        abort_on_unknown_action: Whether an unknown action stops the run.
        abort_on_model_io_failure: Whether a failed save or load stops the run.
    """

    abort_on_unknown_action: bool = False
    abort_on_model_io_failure: bool = True

    def decide(self, error: Exception) -> Decision:
        if isinstance(error, UnknownActionError):
            return Decision.ABORT if self.abort_on_unknown_action else Decision.PROCEED
        if isinstance(error, ModelIOError):
            return Decision.ABORT if self.abort_on_model_io_failure else Decision.PROCEED
        return Decision.ABORT


__all__ = [
    "Decision",
    "ExecutionObserver",
    "IgnoreAllObserver",
    "FailurePolicy",
]
