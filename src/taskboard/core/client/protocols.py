"""
Collaborator protocols consumed by the collection engine.

The engine never talks to a transport directly. It depends on these narrow
interfaces so that the HTTP client, an in-memory fake, or any other
adapter can back the board.
"""

from typing import Any, Protocol, runtime_checkable

from taskboard.core.tasks.models import Notification, Subtask, Task, TaskStatus


@runtime_checkable
class TaskPersistence(Protocol):
    """
    Protocol for the persistence/RPC collaborator.

    Implementations are responsible for:
    - Listing tasks for a query built from the current filter state
    - Applying status updates and returning the acknowledged entity
    - Best-effort AI decomposition of a task into subtasks

    All operations are asynchronous and signal failure by raising.
    """

    async def list_tasks(self, filters: dict[str, Any]) -> list[Task]:
        """
        List tasks matching a query.

        Args:
            filters: Query payload from ``FilterState.to_query()``

        Returns:
            Tasks as stored by the collaborator
        """
        ...

    async def update_task_status(self, task_id: str, status: TaskStatus) -> Task:
        """
        Persist a status change.

        Args:
            task_id: Task to update
            status: New status

        Returns:
            The acknowledged task
        """
        ...

    async def generate_subtasks(self, title: str, description: str) -> list[Subtask]:
        """
        Suggest subtasks for a task.

        Args:
            title: Task title
            description: Task description

        Returns:
            Suggested subtasks
        """
        ...


@runtime_checkable
class AuthProvider(Protocol):
    """Exposes the identity of the signed-in user."""

    def current_user_id(self) -> str | None:
        ...


@runtime_checkable
class Directory(Protocol):
    """Resolves project and user ids to display labels (pure lookup)."""

    def project_label(self, project_id: str) -> str:
        ...

    def user_label(self, user_id: str) -> str:
        ...


@runtime_checkable
class NotificationSource(Protocol):
    """Source polled by the notification poller."""

    async def fetch_unread(self) -> list[Notification]:
        ...


class StaticAuth:
    """AuthProvider backed by a fixed user id (CLI and tests)."""

    def __init__(self, user_id: str | None = None) -> None:
        self._user_id = user_id

    def current_user_id(self) -> str | None:
        return self._user_id
