"""
Task collection store.

The store owns the canonical task list for a client session together with
the current filter and sort state and the loading/error status. It mirrors
the persistence collaborator (the source of truth) after fetches and
mutation acknowledgements; it is not a cache with its own eviction.

State machine:
    idle -> loading -> ready
                    -> error   (last-known-good tasks stay visible)

Every mutation builds a new immutable StoreSnapshot and swaps it in with a
single assignment, then notifies observers. Observers therefore only ever
see complete snapshots, never tasks updated against stale filters.

Example:
    >>> store = TaskCollectionStore()
    >>> store.init()
    >>> await store.refresh(client)
    >>> store.set_filters(FilterState(status=TaskStatus.TODO))
    >>> [t.title for t in store.current_view()]
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace
from enum import Enum

from taskboard.core.client.protocols import TaskPersistence
from taskboard.core.exceptions import FetchFailure, TaskNotFoundError
from taskboard.core.tasks.filters import FilterState, filter_tasks
from taskboard.core.tasks.models import Task, TaskStatus
from taskboard.core.tasks.sorting import SortState, sort_tasks

logger = logging.getLogger(__name__)


class StoreStatus(str, Enum):
    """Lifecycle status of the task collection."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


@dataclass(frozen=True)
class StoreSnapshot:
    """
    Immutable view of the store's state at one point in time.

    Attributes:
        tasks: Canonical task list, in the order the collaborator returned it
        filters: Active filter state
        sort: Active sort state
        status: Lifecycle status
        error: Last error (kept until the next successful set_tasks)
        generation: Incremented by every set_tasks; lets in-flight
            transitions detect that fresher data has replaced their view
    """

    tasks: tuple[Task, ...] = ()
    filters: FilterState = field(default_factory=FilterState)
    sort: SortState = field(default_factory=SortState)
    status: StoreStatus = StoreStatus.IDLE
    error: BaseException | None = None
    generation: int = 0


Observer = Callable[[StoreSnapshot], None]


class TaskCollectionStore:
    """
    Owner of the task list, filter/sort state and load status.

    The store is an explicitly owned container: create one per session,
    call ``init()`` when the session starts and ``teardown()`` on logout.
    Consumers receive tuples and new lists and must not mutate tasks in
    place.
    """

    def __init__(self, sort: SortState | None = None) -> None:
        """
        Initialize an idle, empty store.

        Args:
            sort: Initial sort state (default: createdAt desc)
        """
        self._initial_sort = sort or SortState()
        self._snapshot = StoreSnapshot(sort=self._initial_sort)
        self._observers: list[Observer] = []
        self._view_source: StoreSnapshot | None = None
        self._view: tuple[Task, ...] = ()
        self._epoch = 0
        self._refresh_seq = 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def init(self) -> None:
        """Start a session: reset to an idle, empty collection."""
        self._epoch += 1
        self._refresh_seq += 1
        self._commit(StoreSnapshot(sort=self._initial_sort))
        logger.debug("Task store initialized")

    def teardown(self) -> None:
        """End a session: drop all tasks, state and observers."""
        self._epoch += 1
        self._refresh_seq += 1
        self._observers.clear()
        self._snapshot = StoreSnapshot(sort=self._initial_sort)
        self._view_source = None
        self._view = ()
        logger.debug("Task store torn down")

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    @property
    def snapshot(self) -> StoreSnapshot:
        return self._snapshot

    @property
    def tasks(self) -> tuple[Task, ...]:
        return self._snapshot.tasks

    @property
    def filters(self) -> FilterState:
        return self._snapshot.filters

    @property
    def sort(self) -> SortState:
        return self._snapshot.sort

    @property
    def status(self) -> StoreStatus:
        return self._snapshot.status

    @property
    def error(self) -> BaseException | None:
        return self._snapshot.error

    @property
    def is_loading(self) -> bool:
        return self._snapshot.status == StoreStatus.LOADING

    @property
    def generation(self) -> int:
        return self._snapshot.generation

    @property
    def epoch(self) -> int:
        """Session counter bumped by init() and teardown(); never reset."""
        return self._epoch

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """
        Register a callback invoked with each new snapshot.

        Returns:
            Function that unregisters the callback
        """
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def current_view(self) -> tuple[Task, ...]:
        """
        Filtered then sorted tasks for the current snapshot.

        Filtering always runs first so the comparator only orders survivors.
        The result is computed once per snapshot; the same tuple object is
        returned until the next mutation.
        """
        snapshot = self._snapshot
        if self._view_source is not snapshot:
            survivors = filter_tasks(snapshot.tasks, snapshot.filters)
            self._view = tuple(sort_tasks(survivors, snapshot.sort))
            self._view_source = snapshot
        return self._view

    def get_task(self, task_id: str) -> Task | None:
        for task in self._snapshot.tasks:
            if task.id == task_id:
                return task
        return None

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def _commit(self, snapshot: StoreSnapshot) -> None:
        self._snapshot = snapshot
        for observer in list(self._observers):
            try:
                observer(snapshot)
            except Exception:
                logger.exception("Task store observer failed")

    def set_tasks(self, tasks: Iterable[Task]) -> None:
        """Replace the task list; clears any error and marks the store ready."""
        snapshot = self._snapshot
        self._commit(
            replace(
                snapshot,
                tasks=tuple(tasks),
                status=StoreStatus.READY,
                error=None,
                generation=snapshot.generation + 1,
            )
        )
        logger.debug(f"Task store holds {len(self._snapshot.tasks)} tasks")

    def set_filters(self, filters: FilterState) -> None:
        self._commit(replace(self._snapshot, filters=filters))

    def set_sort(self, sort: SortState) -> None:
        self._commit(replace(self._snapshot, sort=sort))

    def set_loading(self, loading: bool) -> None:
        """
        Enter or leave the loading state.

        Leaving it without new data returns to error (if an error is held),
        ready (if tasks were ever loaded) or idle.
        """
        snapshot = self._snapshot
        if loading:
            status = StoreStatus.LOADING
        elif snapshot.error is not None:
            status = StoreStatus.ERROR
        elif snapshot.generation > 0:
            status = StoreStatus.READY
        else:
            status = StoreStatus.IDLE
        self._commit(replace(snapshot, status=status))

    def set_error(self, error: BaseException | None) -> None:
        """
        Record an error without clearing task data (stale-while-error).

        Passing None clears the error and returns to ready/idle.
        """
        snapshot = self._snapshot
        if error is None:
            status = StoreStatus.READY if snapshot.generation > 0 else StoreStatus.IDLE
        else:
            status = StoreStatus.ERROR
        self._commit(replace(snapshot, error=error, status=status))

    def update(
        self,
        *,
        tasks: Iterable[Task] | None = None,
        filters: FilterState | None = None,
        sort: SortState | None = None,
    ) -> None:
        """Apply several changes as one logical update (single notification)."""
        snapshot = self._snapshot
        changes: dict[str, object] = {}
        if tasks is not None:
            changes.update(
                tasks=tuple(tasks),
                status=StoreStatus.READY,
                error=None,
                generation=snapshot.generation + 1,
            )
        if filters is not None:
            changes["filters"] = filters
        if sort is not None:
            changes["sort"] = sort
        if changes:
            self._commit(replace(snapshot, **changes))

    def add_task(self, task: Task) -> None:
        """Append an acknowledged new task."""
        self._commit(replace(self._snapshot, tasks=(*self._snapshot.tasks, task)))

    def replace_task(self, task: Task) -> Task:
        """
        Swap in a new version of an existing task (matched by id).

        Returns:
            The version that was replaced

        Raises:
            TaskNotFoundError: If no task has ``task.id``
        """
        previous = self.get_task(task.id)
        if previous is None:
            raise TaskNotFoundError(task.id)
        tasks = tuple(task if t.id == task.id else t for t in self._snapshot.tasks)
        self._commit(replace(self._snapshot, tasks=tasks))
        return previous

    def remove_task(self, task_id: str) -> Task:
        """
        Remove a task by id.

        Raises:
            TaskNotFoundError: If no task has ``task_id``
        """
        previous = self.get_task(task_id)
        if previous is None:
            raise TaskNotFoundError(task_id)
        tasks = tuple(t for t in self._snapshot.tasks if t.id != task_id)
        self._commit(replace(self._snapshot, tasks=tasks))
        return previous

    def set_task_status(
        self, task_id: str, status: TaskStatus, *, pending: bool = False
    ) -> Task:
        """
        Change one task's status locally (bumps ``updated_at``).

        Returns:
            The task as it was before the change

        Raises:
            TaskNotFoundError: If no task has ``task_id``
        """
        previous = self.get_task(task_id)
        if previous is None:
            raise TaskNotFoundError(task_id)
        self.replace_task(previous.with_status(status, pending=pending))
        return previous

    # ------------------------------------------------------------------
    # Collaborator round trips
    # ------------------------------------------------------------------

    async def refresh(self, persistence: TaskPersistence) -> bool:
        """
        Fetch tasks for the current filters and mirror them.

        Failures become state (``error`` status with a FetchFailure); the
        previous task list stays visible. Never raises for collaborator
        errors.

        Only the latest refresh may write. A response (or failure) is dropped
        when another refresh started after it, when the filters changed while
        it was in flight, or when the store was re-initialized or torn down.

        Args:
            persistence: Persistence collaborator

        Returns:
            True if the fetch succeeded and its result was applied
        """
        self._refresh_seq += 1
        ticket = self._refresh_seq
        filters = self._snapshot.filters
        query = filters.to_query()
        self.set_loading(True)
        try:
            tasks = await persistence.list_tasks(query)
        except Exception as e:
            if self._is_stale(ticket, filters):
                logger.debug(f"Dropping failure of stale task fetch {query}: {e}")
                return False
            logger.warning(f"Task fetch failed: {e}")
            failure = FetchFailure(f"Failed to fetch tasks: {e}", query=query)
            failure.__cause__ = e
            self._commit(replace(self._snapshot, status=StoreStatus.ERROR, error=failure))
            return False

        if self._is_stale(ticket, filters):
            logger.debug(f"Dropping stale task fetch {query}")
            return False

        self.set_tasks(tasks)
        logger.info(f"Fetched {len(self._snapshot.tasks)} tasks")
        return True

    def _is_stale(self, ticket: int, filters: FilterState) -> bool:
        if ticket != self._refresh_seq:
            return True
        if self._snapshot.filters != filters:
            # Latest fetch, but for an old query: nothing else will end loading
            self.set_loading(False)
            return True
        return False
