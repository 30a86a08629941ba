"""
HTTP persistence client for the task API.

Implements the TaskPersistence and NotificationSource protocols over
``httpx.AsyncClient``:

- GET   /tasks                  list tasks for a filter query
- PATCH /tasks/{id}             update a task's status
- POST  /tasks/subtasks         AI subtask suggestions
- GET   /notifications/unread   unread notifications

Transient failures are retried with exponential backoff; everything that
still fails is raised as PersistenceError.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from taskboard.core.client.retry import async_retry
from taskboard.core.config.models import TaskboardConfig
from taskboard.core.exceptions import PersistenceError
from taskboard.core.tasks.models import Notification, Subtask, Task, TaskStatus

logger = logging.getLogger(__name__)


class HttpTaskClient:
    """
    Task API client with retry logic and error classification.

    Example:
        >>> config = TaskboardConfig(api=ApiConfig(base_url="https://tasks.example.com/api"))
        >>> async with HttpTaskClient(config) as client:
        ...     tasks = await client.list_tasks({"status": "todo"})
    """

    def __init__(
        self,
        config: TaskboardConfig,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            config: Taskboard configuration (api + retry sections are used)
            client: Pre-built AsyncClient (tests inject one with a MockTransport)
        """
        self._config = config
        headers = {"Accept": "application/json"}
        if config.api.token:
            headers["Authorization"] = f"Bearer {config.api.token}"

        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=config.api.base_url.rstrip("/"),
            timeout=config.api.timeout_seconds,
            headers=headers,
        )
        if not self._owns_client:
            self._client.headers.update(headers)

    async def __aenter__(self) -> HttpTaskClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        @async_retry(self._config.retry)
        async def send() -> httpx.Response:
            response = await self._client.request(method, path, **kwargs)
            response.raise_for_status()
            return response

        try:
            response = await send()
        except httpx.HTTPStatusError as e:
            raise PersistenceError(
                f"{method} {path} failed with HTTP {e.response.status_code}",
                status_code=e.response.status_code,
                path=path,
            ) from e
        except httpx.HTTPError as e:
            raise PersistenceError(f"{method} {path} failed: {e}", path=path) from e

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise PersistenceError(f"{method} {path} returned invalid JSON", path=path) from e

    async def list_tasks(self, filters: dict[str, Any]) -> list[Task]:
        """
        List tasks matching a filter query.

        Args:
            filters: Query payload from ``FilterState.to_query()``

        Returns:
            Validated tasks

        Raises:
            PersistenceError: On transport failure or a malformed payload
        """
        data = await self._request("GET", "/tasks", params=filters)
        if isinstance(data, dict):
            data = data.get("tasks", [])
        try:
            tasks = [Task.model_validate(item) for item in data or []]
        except ValidationError as e:
            raise PersistenceError(f"Malformed task payload: {e}", path="/tasks") from e
        logger.debug(f"Fetched {len(tasks)} tasks")
        return tasks

    async def update_task_status(self, task_id: str, status: TaskStatus) -> Task:
        """
        Persist a status change and return the acknowledged task.

        Raises:
            PersistenceError: On transport failure or a malformed payload
        """
        path = f"/tasks/{task_id}"
        data = await self._request("PATCH", path, json={"status": TaskStatus(status).value})
        try:
            return Task.model_validate(data)
        except ValidationError as e:
            raise PersistenceError(f"Malformed task payload: {e}", path=path) from e

    async def generate_subtasks(self, title: str, description: str) -> list[Subtask]:
        """
        Ask the API to split a task into subtasks.

        Raises:
            PersistenceError: On transport failure or a malformed payload
        """
        data = await self._request(
            "POST", "/tasks/subtasks", json={"title": title, "description": description}
        )
        if isinstance(data, dict):
            data = data.get("subtasks", [])
        try:
            return [Subtask.coerce(item) for item in data or []]
        except ValidationError as e:
            raise PersistenceError(
                f"Malformed subtask payload: {e}", path="/tasks/subtasks"
            ) from e

    async def fetch_unread(self) -> list[Notification]:
        """Fetch unread notifications for the signed-in user."""
        data = await self._request("GET", "/notifications/unread")
        return [Notification.model_validate(item) for item in data or []]
