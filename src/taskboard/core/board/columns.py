"""
Kanban columns and status grouping.

The board has four fixed columns in a fixed order. Grouping partitions a
task view into one bucket per column in a single pass, keeping the view's
relative order inside each bucket. Every column is always present, even
when empty.

Tasks whose status is not one of the four known values are dropped from
the board and reported as anomalies; one bad record never blanks the board.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import NamedTuple

from taskboard.core.tasks.models import Task, TaskStatus

logger = logging.getLogger(__name__)


class KanbanColumn(NamedTuple):
    """A board column: the status it holds and its display title."""

    status: TaskStatus
    title: str


KANBAN_COLUMNS: tuple[KanbanColumn, ...] = (
    KanbanColumn(TaskStatus.TODO, "To Do"),
    KanbanColumn(TaskStatus.IN_PROGRESS, "In Progress"),
    KanbanColumn(TaskStatus.REVIEW, "Review"),
    KanbanColumn(TaskStatus.DONE, "Done"),
)


@dataclass(frozen=True)
class GroupingAnomaly:
    """A task that could not be placed on the board."""

    task_id: str
    status: str
    reason: str = "unknown status"


@dataclass
class GroupingResult:
    """Buckets in board order plus any tasks that were dropped."""

    columns: dict[TaskStatus, list[Task]]
    anomalies: list[GroupingAnomaly] = field(default_factory=list)


def group_with_anomalies(view: Iterable[Task]) -> GroupingResult:
    """
    Partition a view into status buckets, collecting anomalies.

    Args:
        view: Tasks in display order

    Returns:
        GroupingResult whose ``columns`` has exactly one key per column,
        in board order
    """
    columns: dict[TaskStatus, list[Task]] = {column.status: [] for column in KANBAN_COLUMNS}
    anomalies: list[GroupingAnomaly] = []

    for task in view:
        bucket = columns.get(task.status)  # type: ignore[call-overload]
        if bucket is None:
            anomalies.append(GroupingAnomaly(task_id=task.id, status=str(task.status)))
            continue
        bucket.append(task)

    for anomaly in anomalies:
        logger.warning(
            f"Dropped task {anomaly.task_id} from board: {anomaly.reason} '{anomaly.status}'"
        )

    return GroupingResult(columns=columns, anomalies=anomalies)


def group(view: Iterable[Task]) -> dict[TaskStatus, list[Task]]:
    """
    Partition a view into the four status buckets.

    Example:
        >>> board = group(store.current_view())
        >>> list(board)
        [<TaskStatus.TODO: 'todo'>, <TaskStatus.IN_PROGRESS: 'in-progress'>,
         <TaskStatus.REVIEW: 'review'>, <TaskStatus.DONE: 'done'>]
    """
    return group_with_anomalies(view).columns


def column_title(status: TaskStatus) -> str:
    """Display title for a status column."""
    for column in KANBAN_COLUMNS:
        if column.status == status:
            return column.title
    raise ValueError(f"No column for status: {status}")
