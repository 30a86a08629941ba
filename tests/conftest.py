"""
Pytest configuration and shared fixtures.

Provides a task factory, sample task sets, an in-memory persistence fake
with controllable latency/failures, and config isolation used across the
test suite.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from taskboard.core.config.loader import clear_cache
from taskboard.core.exceptions import PersistenceError
from taskboard.core.store import TaskCollectionStore
from taskboard.core.tasks.models import Notification, Subtask, Task, TaskPriority, TaskStatus

BASE_TIME = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


# ==============================================================================
# Environment Isolation
# ==============================================================================


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep user config, env overrides and the config cache out of every test."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    for name in (
        "TASKBOARD_API_URL",
        "TASKBOARD_API_TOKEN",
        "TASKBOARD_USER_ID",
        "TASKBOARD_POLL_INTERVAL",
    ):
        monkeypatch.delenv(name, raising=False)
    clear_cache()
    yield
    clear_cache()


# ==============================================================================
# Task Fixtures
# ==============================================================================


def build_task(
    task_id: str,
    *,
    title: str | None = None,
    status: TaskStatus | str = TaskStatus.TODO,
    priority: TaskPriority = TaskPriority.MEDIUM,
    created_offset: int = 0,
    **fields: Any,
) -> Task:
    """
    Build a Task with deterministic timestamps.

    ``created_offset`` is in minutes after BASE_TIME, which makes createdAt
    ordering easy to reason about in sort tests.
    """
    created = BASE_TIME + timedelta(minutes=created_offset)
    return Task(
        id=task_id,
        title=title or f"Task {task_id}",
        status=status,
        priority=priority,
        created_at=created,
        updated_at=created,
        **fields,
    )


@pytest.fixture
def make_task():
    """Provide the task factory."""
    return build_task


@pytest.fixture
def sample_tasks():
    """Provide a small board with every status, assignee form and tag mix."""
    return [
        build_task(
            "t1",
            title="Design login page",
            status=TaskStatus.TODO,
            priority=TaskPriority.HIGH,
            tags=["frontend", "auth"],
            assignee={"_id": "u1", "name": "Sam"},
            project_id="p1",
            created_offset=1,
        ),
        build_task(
            "t2",
            title="Write API docs",
            description="Document the login endpoint",
            status=TaskStatus.DONE,
            priority=TaskPriority.LOW,
            tags=["docs"],
            assignee="u2",
            project_id="p2",
            created_offset=2,
        ),
        build_task(
            "t3",
            title="Fix token refresh",
            status=TaskStatus.IN_PROGRESS,
            priority=TaskPriority.URGENT,
            tags=["backend", "auth"],
            assignee={"id": "u1", "name": "Sam"},
            project_id="p1",
            created_offset=3,
        ),
        build_task(
            "t4",
            title="Release notes",
            status=TaskStatus.DONE,
            priority=TaskPriority.MEDIUM,
            project_id="p2",
            created_offset=4,
        ),
    ]


@pytest.fixture
def store(sample_tasks):
    """Provide an initialized store holding the sample tasks."""
    store = TaskCollectionStore()
    store.init()
    store.set_tasks(sample_tasks)
    yield store
    store.teardown()


# ==============================================================================
# Collaborator Fakes
# ==============================================================================


class FakePersistence:
    """
    In-memory TaskPersistence.

    Attributes:
        gate: When set, update_task_status waits on it before answering,
            which lets tests observe the pending window
        fail_list / fail_update / fail_subtasks: Exceptions to raise
    """

    def __init__(self, tasks: list[Task] | None = None) -> None:
        self.tasks: dict[str, Task] = {task.id: task for task in tasks or []}
        self.list_calls: list[dict[str, Any]] = []
        self.update_calls: list[tuple[str, TaskStatus]] = []
        self.subtask_calls: list[tuple[str, str]] = []
        self.subtasks: list[Any] = []
        self.fail_list: Exception | None = None
        self.fail_update: Exception | None = None
        self.fail_subtasks: Exception | None = None
        self.gate: asyncio.Event | None = None

    async def list_tasks(self, filters: dict[str, Any]) -> list[Task]:
        self.list_calls.append(filters)
        if self.fail_list is not None:
            raise self.fail_list
        return list(self.tasks.values())

    async def update_task_status(self, task_id: str, status: TaskStatus) -> Task:
        self.update_calls.append((task_id, status))
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_update is not None:
            raise self.fail_update
        task = self.tasks[task_id].model_copy(
            update={"status": status, "updated_at": BASE_TIME + timedelta(days=1)}
        )
        self.tasks[task_id] = task
        return task

    async def generate_subtasks(self, title: str, description: str) -> list[Subtask]:
        self.subtask_calls.append((title, description))
        if self.fail_subtasks is not None:
            raise self.fail_subtasks
        return self.subtasks


class FakeNotificationSource:
    """NotificationSource that replays scripted responses (Exception = failure)."""

    def __init__(self, responses: list[Any]) -> None:
        self.responses = list(responses)
        self.calls = 0

    async def fetch_unread(self) -> list[Notification]:
        self.calls += 1
        response = self.responses[min(self.calls, len(self.responses)) - 1]
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def persistence(sample_tasks):
    """Provide a FakePersistence seeded with the sample tasks."""
    return FakePersistence(sample_tasks)


@pytest.fixture
def failing_persistence(sample_tasks):
    """Provide a FakePersistence whose every call fails."""
    fake = FakePersistence(sample_tasks)
    error = PersistenceError("Service unavailable", status_code=503)
    fake.fail_list = error
    fake.fail_update = error
    fake.fail_subtasks = error
    return fake


@pytest.fixture
def make_notification_source():
    """Provide the FakeNotificationSource factory."""
    return FakeNotificationSource


@pytest.fixture
def make_persistence():
    """Provide the FakePersistence factory."""
    return FakePersistence
