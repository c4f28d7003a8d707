"""Errors raised by the task execution engine and its collaborators.

All of them derive from `NetdriverError`, which is what the executor catches
at the run boundary.
"""


class NetdriverError(Exception):
    """Base exception for expected failures of a run."""


class UnknownReaderError(NetdriverError):
    """Raised when a data source names a reader kind that is not registered."""

    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(f"unknown reader: '{kind}'")


class EmptyDatasetError(NetdriverError):
    """Raised when a data source produced no records."""

    def __init__(self, path: str, reason: str | None = None):
        self.path = path
        self.reason = reason
        message = f"no records could be read from '{path}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class MissingPhaseInputError(NetdriverError):
    """Raised when an action needs data sources the task does not define."""

    def __init__(self, action: str, phase: str, missing: tuple[str, ...]):
        self.action = action
        self.phase = phase
        self.missing = missing
        super().__init__(
            f"{action} is not possible without {phase} {' and '.join(missing)}"
        )


class MisalignedDatasetError(NetdriverError):
    """Raised when samples and labels of a phase differ in length."""

    def __init__(self, phase: str, sample_count: int, label_count: int):
        self.phase = phase
        self.sample_count = sample_count
        self.label_count = label_count
        super().__init__(
            f"{phase} samples and labels differ in length "
            f"({sample_count} samples, {label_count} labels)"
        )


class UnknownActionError(NetdriverError):
    """Raised for an action name the executor does not know."""

    def __init__(self, action: str):
        self.action = action
        super().__init__(f"invalid action: '{action}'")


class ModelIOError(NetdriverError):
    """Raised when model parameters could not be stored or loaded."""

    def __init__(self, path: str, operation: str, reason: str | None = None):
        self.path = path
        self.operation = operation
        self.reason = reason
        message = f"failed to {operation} weights at '{path}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class TaskFileError(NetdriverError):
    """Raised when a task file cannot be read or does not validate."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"invalid task file '{path}': {reason}")


__all__ = [
    "NetdriverError",
    "UnknownReaderError",
    "EmptyDatasetError",
    "MissingPhaseInputError",
    "MisalignedDatasetError",
    "UnknownActionError",
    "ModelIOError",
    "TaskFileError",
]
