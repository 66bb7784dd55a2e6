from __future__ import annotations


class InvalidPatternError(ValueError):
    """A recurrence pattern was empty or held something other than weekdays 0-6."""


class InvalidTimezoneError(ValueError):
    pass


class TaskNotFoundError(LookupError):
    def __init__(self, task_id: int) -> None:
        super().__init__(f"Task {task_id} not found")
        self.task_id = task_id


class PrintFailedError(RuntimeError):
    def __init__(self, task_id: int, reason: str | None = None) -> None:
        message = f"Failed to print task {task_id}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.task_id = task_id
        self.reason = reason
        self.printed: list = []


class ConcurrentPrintError(RuntimeError):
    """The task was printed by someone else between reading and writing it."""

    def __init__(self, task_id: int) -> None:
        super().__init__(f"Task {task_id} was updated by another print")
        self.task_id = task_id
