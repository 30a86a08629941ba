"""
Tests for TaskboardSession wiring and lifecycle.
"""

import pytest

from taskboard.core.client.protocols import StaticAuth
from taskboard.core.config.models import BoardConfig, NotificationsConfig, TaskboardConfig
from taskboard.core.session import TaskboardSession
from taskboard.core.store import StoreStatus
from taskboard.core.tasks.filters import FilterState
from taskboard.core.tasks.models import TaskStatus
from taskboard.core.tasks.sorting import SortKey, SortOrder


class TestTaskboardSession:
    """Test session start/close and component wiring."""

    @pytest.mark.asyncio
    async def test_start_fetches_tasks(self, persistence):
        """Starting a session loads the initial task list."""
        session = TaskboardSession(TaskboardConfig(), persistence)
        await session.start()
        assert session.store.status == StoreStatus.READY
        assert len(session.store.tasks) == 4
        await session.close()

    @pytest.mark.asyncio
    async def test_context_manager_tears_down(self, persistence):
        """Leaving the context clears the store."""
        async with TaskboardSession(TaskboardConfig(), persistence) as session:
            assert session.started is True
        assert session.store.tasks == ()
        assert session.started is False

    @pytest.mark.asyncio
    async def test_close_twice(self, persistence):
        """close() is idempotent."""
        session = TaskboardSession(TaskboardConfig(), persistence)
        await session.start(refresh=False)
        await session.close()
        await session.close()

    @pytest.mark.asyncio
    async def test_config_drives_defaults(self, persistence):
        """Board config sets the initial sort and drag distance."""
        config = TaskboardConfig(
            board=BoardConfig(
                default_sort_by=SortKey.TITLE,
                default_sort_order=SortOrder.ASC,
                drag_activation_distance=8,
            )
        )
        async with TaskboardSession(config, persistence) as session:
            assert session.store.sort.sort_by == SortKey.TITLE
            assert session.drag_gate.activation_distance == 8
            assert session.store.current_view()[0].title == "Design login page"

    @pytest.mark.asyncio
    async def test_stats_use_configured_user(self, persistence):
        """my_stats follows current_user_id when no auth is given."""
        config = TaskboardConfig(current_user_id="u1")
        async with TaskboardSession(config, persistence) as session:
            assert session.stats.my_stats.total == 2

    @pytest.mark.asyncio
    async def test_explicit_auth_wins(self, persistence):
        """An explicit AuthProvider overrides the config user."""
        config = TaskboardConfig(current_user_id="u1")
        async with TaskboardSession(config, persistence, auth=StaticAuth("u2")) as session:
            assert session.stats.my_stats.total == 1

    @pytest.mark.asyncio
    async def test_apply_filters_refetches(self, persistence):
        """New filters are applied locally and sent as the next query."""
        async with TaskboardSession(TaskboardConfig(), persistence) as session:
            await session.apply_filters(FilterState(status=TaskStatus.DONE))
            assert persistence.list_calls[-1] == {"status": "done"}
            assert [t.id for t in session.store.current_view()] == ["t4", "t2"]

    @pytest.mark.asyncio
    async def test_drop_through_session(self, persistence):
        """The engine is wired to the session's store and persistence."""
        async with TaskboardSession(TaskboardConfig(), persistence) as session:
            outcome = await session.engine.handle_drop("t1", TaskStatus.DONE)
            assert outcome.accepted is True
            assert session.stats.stats.completed == 3

    @pytest.mark.asyncio
    async def test_poller_started_when_enabled(self, persistence, make_notification_source):
        """A notification source starts background polling."""
        source = make_notification_source([[]])
        async with TaskboardSession(TaskboardConfig(), persistence, notifications=source) as session:
            assert session.poller is not None
            assert session.poller.running is True
        assert session.poller.running is False

    @pytest.mark.asyncio
    async def test_poller_disabled_by_config(self, persistence, make_notification_source):
        """Polling stays off when disabled in config."""
        config = TaskboardConfig(notifications=NotificationsConfig(enabled=False))
        session = TaskboardSession(config, persistence, notifications=make_notification_source([[]]))
        assert session.poller is None
