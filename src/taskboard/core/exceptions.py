"""
Custom exceptions for taskboard.

This module defines the error kinds surfaced by the collection engine,
providing structured error handling with context preservation.

Exception Hierarchy:
    TaskboardError (base)
    ├── FetchFailure (listing tasks from persistence failed)
    ├── TransitionFailure (status update rejected; optimistic change rolled back)
    ├── ConflictingTransition (a transition for the task is already in flight)
    ├── SubtaskGenerationFailure (decomposition collaborator failed)
    ├── TaskNotFoundError (no task with the requested id in the store)
    └── PersistenceError (transport-level failure from the HTTP client)

Example:
    >>> from taskboard.core.exceptions import ConflictingTransition
    >>> try:
    ...     await engine.request_status_change("t1", TaskStatus.REVIEW)
    ... except ConflictingTransition as e:
    ...     print(f"Already moving {e.task_id}: {e}")
"""


class TaskboardError(Exception):
    """
    Base exception for all taskboard errors.

    Attributes:
        message: Human-readable error message
        context: Optional dictionary of additional context
    """

    def __init__(self, message: str, **context: object) -> None:
        """
        Initialize an error with message and context.

        Args:
            message: Human-readable error message
            **context: Additional context as keyword arguments
        """
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        """Return string representation of the error."""
        return self.message


class FetchFailure(TaskboardError):
    """
    Raised (and stored on the collection store) when reading tasks fails.

    The store keeps its last-known-good task list when this happens.
    """


class TaskNotFoundError(TaskboardError):
    """Raised when an operation names a task id the store does not hold."""

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task not found: {task_id}", task_id=task_id)
        self.task_id = task_id


class TransitionFailure(TaskboardError):
    """
    Raised when the persistence collaborator rejects a status update.

    By the time this propagates the optimistic status has been rolled back
    and the task's ``pending`` flag cleared.

    Attributes:
        task_id: Task whose transition failed
        from_status: Status restored by the rollback
        to_status: Status that was requested
    """

    def __init__(self, task_id: str, from_status: str, to_status: str, reason: str) -> None:
        super().__init__(
            f"Failed to move task {task_id} from {from_status} to {to_status}: {reason}",
            task_id=task_id,
            from_status=from_status,
            to_status=to_status,
        )
        self.task_id = task_id
        self.from_status = from_status
        self.to_status = to_status


class ConflictingTransition(TaskboardError):
    """
    Raised when a status change is requested while one is pending for the same task.

    Raised before any network call is made; the in-flight request is unaffected.
    """

    def __init__(self, task_id: str, pending_status: str) -> None:
        super().__init__(
            f"Task {task_id} already has a transition to {pending_status} in flight",
            task_id=task_id,
            pending_status=pending_status,
        )
        self.task_id = task_id
        self.pending_status = pending_status


class SubtaskGenerationFailure(TaskboardError):
    """
    Raised by decomposition collaborators.

    The subtask suggester catches it and degrades to an empty suggestion list.
    """


class PersistenceError(TaskboardError):
    """
    Transport-level failure talking to the task API.

    Attributes:
        status_code: HTTP status code, if a response was received
    """

    def __init__(self, message: str, status_code: int | None = None, **context: object) -> None:
        super().__init__(message, status_code=status_code, **context)
        self.status_code = status_code


__all__ = [
    "TaskboardError",
    "FetchFailure",
    "TransitionFailure",
    "ConflictingTransition",
    "SubtaskGenerationFailure",
    "TaskNotFoundError",
    "PersistenceError",
]
