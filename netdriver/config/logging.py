"""Configuration and setup for logging of task executions."""

from collections.abc import Sequence
import sys
from typing import Any

from loguru import logger

from netdriver.core.execution import (
    ActionStatus,
    ActionTrace,
    Decision,
    ExecutionResult,
    IgnoreAllObserver,
)
from netdriver.core.task import Task
from netdriver.settings import NetdriverSettings


class LoggingObserver(IgnoreAllObserver):
    """Observer that logs execution events.

    Extends IgnoreAllObserver to add logging while returning PROCEED for all
    events; whether a failure stops the run is left to the failure policy.
    """

    def on_execution_start(self, model: Any, task: Task, actions: Sequence[str]) -> Decision:
        with logger.contextualize(actions=list(actions)):
            logger.info(f"Starting execution of {len(actions)} action(s): {' '.join(actions)}")
        return Decision.PROCEED

    def on_action_start(self, action: str, index: int) -> Decision:
        with logger.contextualize(action=action, index=index):
            logger.info(f"{action}: Starting action")
        return Decision.PROCEED

    def on_action_finish(self, trace: ActionTrace) -> Decision:
        with logger.contextualize(
            action=trace.name, status=trace.status.value, duration=trace.duration
        ):
            if trace.status == ActionStatus.SUCCESS:
                logger.info(f"{trace.name}: Action completed in {trace.duration:.2f}s")
            elif trace.status == ActionStatus.FAILURE:
                logger.warning(f"{trace.name}: Action failed")
            elif trace.status == ActionStatus.ERROR:
                logger.error(f"{trace.name}: Action raised an unexpected error")
        return Decision.PROCEED

    def on_error(self, action: str, error: Exception) -> Decision:
        with logger.contextualize(action=action, error=str(error)):
            logger.error(f"{action}: {error}")
        return Decision.PROCEED

    def on_execution_finish(self, result: ExecutionResult) -> None:
        with logger.contextualize(
            result_status=result.status.value,
            result_succeeded=result.succeeded(),
            total_duration=result.total_duration(),
        ):
            if result.succeeded():
                logger.success("Execution finished successfully")
            elif result.skipped:
                logger.warning(
                    f"Execution aborted, skipped action(s): {' '.join(result.skipped)}"
                )
            else:
                logger.warning("Execution finished with failures")


def configure_logging(settings: NetdriverSettings) -> None:
    logger.remove()  # Remove default handler

    # Reports go to stdout, so logs stay on stderr.
    logger.add(
        sys.stderr,
        serialize=settings.logging.log_serialize,
        level=settings.logging.log_level.upper(),
        backtrace=True,
        diagnose=settings.debug,  # Include variable values only in debug mode
    )
