"""
Statistics aggregation over the current task view.

Statistics are a pure projection of the store's filtered/sorted view plus
the current user's id. ``now`` is sampled once per computation so that every
task in one pass is judged against the same instant.

StatsAggregator memoizes on the (view, user id) pair only: the memo is keyed
by the identity of the view tuple the store hands out, and any new view or
different user discards it.
"""

import logging
from collections.abc import Callable, Sequence
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from taskboard.core.store import TaskCollectionStore
from taskboard.core.tasks.models import MyTaskStats, Task, TaskStats, TaskStatus, utcnow

logger = logging.getLogger(__name__)


def completion_rate(completed: int, total: int) -> int:
    """
    Percentage of completed tasks, rounded half up.

    Returns 0 for an empty view (never divides by zero).
    """
    if total <= 0:
        return 0
    rate = Decimal(100 * completed) / Decimal(total)
    return int(rate.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def compute_stats(view: Sequence[Task], now: datetime | None = None) -> TaskStats:
    """
    Compute board statistics for a task view.

    Args:
        view: Tasks to aggregate (normally ``store.current_view()``)
        now: Reference time for overdue checks (sampled once if omitted)

    Returns:
        TaskStats with totals, overdue count and completion rate

    Example:
        >>> stats = compute_stats(store.current_view())
        >>> f"{stats.completed}/{stats.total} ({stats.completion_rate}%)"
    """
    now = now or utcnow()
    total = completed = in_progress = overdue = 0

    for task in view:
        total += 1
        if task.status == TaskStatus.DONE:
            completed += 1
        elif task.status == TaskStatus.IN_PROGRESS:
            in_progress += 1
        if task.is_overdue(now):
            overdue += 1

    return TaskStats(
        total=total,
        completed=completed,
        in_progress=in_progress,
        overdue=overdue,
        completion_rate=completion_rate(completed, total),
    )


def compute_my_stats(view: Sequence[Task], user_id: str | None) -> MyTaskStats:
    """
    Compute statistics for tasks assigned to ``user_id``.

    Unassigned tasks never count, and nothing counts when there is no user id.
    """
    if not user_id:
        return MyTaskStats()

    mine = [task for task in view if task.effective_assignee_id == user_id]
    return MyTaskStats(
        total=len(mine),
        completed=sum(1 for task in mine if task.status == TaskStatus.DONE),
        in_progress=sum(1 for task in mine if task.status == TaskStatus.IN_PROGRESS),
    )


class StatsAggregator:
    """
    Reads statistics from a store's current view.

    Args:
        store: Collection store to read from
        current_user: Callable returning the signed-in user's id
        clock: Time source (injectable for tests)
    """

    def __init__(
        self,
        store: TaskCollectionStore,
        current_user: Callable[[], str | None] = lambda: None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._store = store
        self._current_user = current_user
        self._clock = clock
        # (view, user_id, stats, my_stats); holding the view keeps its id stable
        self._memo: tuple[tuple[Task, ...], str | None, TaskStats, MyTaskStats] | None = None

    def _compute(self) -> tuple[TaskStats, MyTaskStats]:
        view = self._store.current_view()
        user_id = self._current_user()
        memo = self._memo
        if memo is not None and memo[0] is view and memo[1] == user_id:
            return memo[2], memo[3]

        stats = compute_stats(view, self._clock())
        my_stats = compute_my_stats(view, user_id)
        self._memo = (view, user_id, stats, my_stats)
        return stats, my_stats

    @property
    def stats(self) -> TaskStats:
        return self._compute()[0]

    @property
    def my_stats(self) -> MyTaskStats:
        return self._compute()[1]

    def invalidate(self) -> None:
        """Drop the memo (e.g. after the clock crosses a due date)."""
        self._memo = None
