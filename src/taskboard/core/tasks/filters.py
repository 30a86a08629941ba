"""
Filter predicate evaluation for tasks.

FilterState is an immutable value object describing which tasks are
visible. ``matches`` is a pure, total predicate: every absent field is a
wildcard, and adding a constraint can only shrink the matching set.

Example:
    >>> filters = FilterState(tags=frozenset({"backend"}), search="login")
    >>> visible = filter_tasks(tasks, filters)
"""

from collections.abc import Iterable
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from taskboard.core.tasks.models import Task, TaskPriority, TaskStatus, ensure_aware


class DateRange(BaseModel):
    """Inclusive due-date window. Either bound may be open."""

    start: datetime | None = Field(default=None, alias="from")
    end: datetime | None = Field(default=None, alias="to")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @field_validator("start", "end", mode="after")
    @classmethod
    def validate_timezone(cls, v: datetime | None) -> datetime | None:
        return ensure_aware(v)

    def contains(self, value: datetime) -> bool:
        if self.start is not None and value < self.start:
            return False
        if self.end is not None and value > self.end:
            return False
        return True


class FilterState(BaseModel):
    """
    Which tasks are visible on the board.

    Instances are frozen; use ``model_copy(update=...)`` or ``cleared`` to
    derive a new state. Observers holding an older instance never see it
    change.
    """

    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    assignee: str | None = Field(default=None, description="Effective assignee id")
    tags: frozenset[str] = Field(
        default_factory=frozenset, description="Match tasks carrying any of these tags"
    )
    search: str | None = Field(default=None, description="Substring over title+description")
    date_range: DateRange | None = Field(default=None, alias="dateRange")
    selected_projects: frozenset[str] = Field(
        default_factory=frozenset,
        alias="selectedProjects",
        description="Project ids; empty means no project restriction",
    )

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @field_validator("tags", "selected_projects", mode="before")
    @classmethod
    def validate_sets(cls, v: Iterable[str] | None) -> frozenset[str]:
        return frozenset(v) if v else frozenset()

    @property
    def search_term(self) -> str:
        """Normalized search term ('' when the field imposes no constraint)."""
        return (self.search or "").strip().lower()

    def active_count(self) -> int:
        """
        Count fields that actually constrain the result.

        Project selection is excluded, matching the filter chip counter
        which shows project scope separately.
        """
        active = [
            self.status is not None,
            self.priority is not None,
            bool(self.assignee),
            bool(self.tags),
            bool(self.search_term),
            self.date_range is not None,
        ]
        return sum(active)

    def has_active(self) -> bool:
        return self.active_count() > 0

    def cleared(self, field_name: str) -> "FilterState":
        """Return a copy with one field reset to its wildcard value."""
        if field_name not in type(self).model_fields:
            raise ValueError(f"Unknown filter field: {field_name}")
        default = type(self).model_fields[field_name].get_default(call_default_factory=True)
        return self.model_copy(update={field_name: default})

    def to_query(self) -> dict[str, Any]:
        """
        Build the query payload for ``list_tasks``.

        Wildcard fields are dropped entirely so the collaborator never sees
        empty strings or empty lists.
        """
        query: dict[str, Any] = {}
        if self.status is not None:
            query["status"] = self.status.value
        if self.priority is not None:
            query["priority"] = self.priority.value
        if self.assignee:
            query["assignee"] = self.assignee
        if self.tags:
            query["tags"] = sorted(self.tags)
        if self.search_term:
            query["search"] = self.search.strip()  # type: ignore[union-attr]
        if self.selected_projects:
            query["projectIds"] = sorted(self.selected_projects)
        return query


def matches(task: Task, filters: FilterState) -> bool:
    """
    Check whether a task satisfies every constraint in a filter set.

    Args:
        task: Task to test
        filters: Filter state; absent fields are wildcards

    Returns:
        True if the task is visible under ``filters``
    """
    if filters.status is not None and task.status != filters.status:
        return False

    if filters.priority is not None and task.priority != filters.priority:
        return False

    if filters.assignee and task.effective_assignee_id != filters.assignee:
        return False

    if filters.tags and filters.tags.isdisjoint(task.tags):
        return False

    term = filters.search_term
    if term and term not in task.title.lower() and term not in task.description.lower():
        return False

    if filters.date_range is not None:
        # Undated tasks fail closed
        if task.due_date is None or not filters.date_range.contains(task.due_date):
            return False

    if filters.selected_projects and task.project_id not in filters.selected_projects:
        return False

    return True


def filter_tasks(tasks: Iterable[Task], filters: FilterState) -> list[Task]:
    """Return the tasks matching ``filters``, in input order."""
    return [task for task in tasks if matches(task, filters)]
