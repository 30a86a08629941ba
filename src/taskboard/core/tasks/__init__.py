"""
Task models, filtering and sorting.

This module provides the core data models for the board (Task, status and
priority enums, statistics models) plus the pure filter predicate and sort
comparator that the collection store composes into its current view.
"""

from .filters import DateRange, FilterState, filter_tasks, matches
from .models import (
    MyTaskStats,
    Notification,
    Subtask,
    Task,
    TaskPriority,
    TaskStats,
    TaskStatus,
    UserRef,
)
from .sorting import SortKey, SortOrder, SortState, compare, sort_tasks

__all__ = [
    # Models
    "Task",
    "TaskStatus",
    "TaskPriority",
    "UserRef",
    "Subtask",
    "Notification",
    "TaskStats",
    "MyTaskStats",
    # Filtering
    "DateRange",
    "FilterState",
    "matches",
    "filter_tasks",
    # Sorting
    "SortKey",
    "SortOrder",
    "SortState",
    "compare",
    "sort_tasks",
]
