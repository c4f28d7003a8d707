"""Task execution: ordered actions, failure policy and lifecycle observers."""

from netdriver.core.execution.actions import ActionKind
from netdriver.core.execution.executor import (
    ActionStatus,
    ActionTrace,
    ExecutionResult,
    ExecutionStatus,
    ReportSink,
    TaskExecutor,
)
from netdriver.core.execution.lifecycle import (
    Decision,
    ExecutionObserver,
    FailurePolicy,
    IgnoreAllObserver,
)

__all__ = [
    "ActionKind",
    "ActionStatus",
    "ActionTrace",
    "Decision",
    "ExecutionObserver",
    "ExecutionResult",
    "ExecutionStatus",
    "FailurePolicy",
    "IgnoreAllObserver",
    "ReportSink",
    "TaskExecutor",
]
