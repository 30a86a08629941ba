"""
Sort comparator for task views.

Enum keys compare by ordinal (``low < medium < high < urgent`` and
``todo < in-progress < review < done``), never by string collation.
Sorting uses Python's stable ``sorted``, so tasks with equal keys keep their
input order in both directions.
"""

import functools
from collections.abc import Iterable
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from taskboard.core.tasks.models import Task, TaskPriority, TaskStatus


class SortKey(str, Enum):
    """Sortable task fields (values match the wire names)."""

    CREATED_AT = "createdAt"
    UPDATED_AT = "updatedAt"
    DUE_DATE = "dueDate"
    PRIORITY = "priority"
    STATUS = "status"
    TITLE = "title"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class SortState(BaseModel):
    """Current sort key and direction (default: newest first)."""

    sort_by: SortKey = Field(default=SortKey.CREATED_AT, alias="sortBy")
    sort_order: SortOrder = Field(default=SortOrder.DESC, alias="sortOrder")

    model_config = ConfigDict(populate_by_name=True, frozen=True)


def _status_rank(status: TaskStatus | str) -> int:
    # Unknown statuses rank after every known stage
    if isinstance(status, TaskStatus):
        return status.ordinal
    try:
        return TaskStatus(status).ordinal
    except ValueError:
        return len(TaskStatus)


def _sort_value(task: Task, sort_by: SortKey) -> Any:
    if sort_by == SortKey.CREATED_AT:
        return task.created_at
    if sort_by == SortKey.UPDATED_AT:
        return task.updated_at
    if sort_by == SortKey.DUE_DATE:
        return task.due_date
    if sort_by == SortKey.PRIORITY:
        return TaskPriority(task.priority).ordinal
    if sort_by == SortKey.STATUS:
        return _status_rank(task.status)
    return task.title.casefold()


def _cmp(left: Any, right: Any) -> int:
    # None (e.g. missing due date) orders after any present value
    if left is None and right is None:
        return 0
    if left is None:
        return 1
    if right is None:
        return -1
    return (left > right) - (left < right)


def compare(
    a: Task,
    b: Task,
    sort_by: SortKey | str = SortKey.CREATED_AT,
    sort_order: SortOrder | str = SortOrder.DESC,
) -> int:
    """
    Compare two tasks for a sort key and direction.

    Args:
        a: Left task
        b: Right task
        sort_by: Field to compare on
        sort_order: ``asc`` or ``desc``; ``desc`` negates the ascending result

    Returns:
        -1, 0 or 1
    """
    result = _cmp(_sort_value(a, SortKey(sort_by)), _sort_value(b, SortKey(sort_by)))
    if SortOrder(sort_order) == SortOrder.DESC:
        return -result
    return result


def sort_tasks(tasks: Iterable[Task], sort: SortState | None = None) -> list[Task]:
    """
    Return ``tasks`` ordered by ``sort`` (default: createdAt desc).

    Stable: ties keep input order.
    """
    sort = sort or SortState()
    key = functools.cmp_to_key(
        lambda a, b: compare(a, b, sort.sort_by, sort.sort_order)
    )
    return sorted(tasks, key=key)
