"""
Session handle wiring the collection engine together.

A TaskboardSession owns one task store and the components that read from
it (board engine, statistics, subtask suggester, drag gate, notification
poller). It is created when a user signs in and closed on sign-out; nothing
here is a module-level singleton, so several sessions (or tests) can run
side by side.

Example:
    >>> config = load_config()
    >>> async with HttpTaskClient(config) as client:
    ...     async with TaskboardSession(config, client) as session:
    ...         await session.apply_filters(FilterState(status=TaskStatus.TODO))
    ...         session.engine.columns()
    ...         session.stats.stats
"""

import logging

from taskboard.core.board.drag import DragGate
from taskboard.core.board.engine import KanbanBoardEngine
from taskboard.core.client.protocols import (
    AuthProvider,
    Directory,
    NotificationSource,
    StaticAuth,
    TaskPersistence,
)
from taskboard.core.client.subtasks import SubtaskSuggester
from taskboard.core.config.models import TaskboardConfig
from taskboard.core.directory import StaticDirectory
from taskboard.core.notifications import NotificationPoller
from taskboard.core.stats import StatsAggregator
from taskboard.core.store import TaskCollectionStore
from taskboard.core.tasks.filters import FilterState
from taskboard.core.tasks.sorting import SortState

logger = logging.getLogger(__name__)


class TaskboardSession:
    """
    Explicit context handle passed to board consumers.

    Args:
        config: Taskboard configuration
        persistence: Task persistence collaborator
        auth: Identity provider (defaults to ``config.current_user_id``)
        notifications: Notification source; polling is only started when
            one is given and ``config.notifications.enabled`` is true
        directory: Label resolver for projects and users
    """

    def __init__(
        self,
        config: TaskboardConfig,
        persistence: TaskPersistence,
        auth: AuthProvider | None = None,
        notifications: NotificationSource | None = None,
        directory: Directory | None = None,
    ) -> None:
        self.config = config
        self.persistence = persistence
        self.auth = auth or StaticAuth(config.current_user_id)
        self.directory = directory or StaticDirectory()

        self.store = TaskCollectionStore(
            sort=SortState(
                sort_by=config.board.default_sort_by,
                sort_order=config.board.default_sort_order,
            )
        )
        self.engine = KanbanBoardEngine(self.store, persistence)
        self.stats = StatsAggregator(self.store, current_user=self.auth.current_user_id)
        self.subtasks = SubtaskSuggester(persistence)
        self.drag_gate = DragGate(config.board.drag_activation_distance)

        self.poller: NotificationPoller | None = None
        if notifications is not None and config.notifications.enabled:
            self.poller = NotificationPoller(
                notifications, interval_seconds=config.notifications.poll_interval_seconds
            )

        self._started = False

    @property
    def started(self) -> bool:
        return self._started

    async def start(self, *, refresh: bool = True) -> None:
        """
        Initialize the store and start background polling.

        Args:
            refresh: Fetch the initial task list right away
        """
        self.store.init()
        if self.poller is not None:
            self.poller.start()
        self._started = True
        logger.debug("Taskboard session started")
        if refresh:
            await self.store.refresh(self.persistence)

    async def close(self) -> None:
        """Stop polling and tear down the store. Safe to call twice."""
        if self.poller is not None:
            await self.poller.stop()
        if self._started:
            self.store.teardown()
            self.stats.invalidate()
            self._started = False
            logger.debug("Taskboard session closed")

    async def __aenter__(self) -> "TaskboardSession":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def apply_filters(self, filters: FilterState) -> bool:
        """
        Switch to a new filter state and refetch for it.

        The local view updates immediately; the fetch then mirrors what the
        collaborator returns for the new query.

        Returns:
            True if the refetch succeeded
        """
        self.store.set_filters(filters)
        return await self.store.refresh(self.persistence)

    async def reload(self) -> bool:
        """Refetch tasks for the current filters."""
        return await self.store.refresh(self.persistence)
