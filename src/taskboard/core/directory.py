"""
Display labels for statuses, priorities, projects and users.

Label resolution is a pure lookup: unknown ids resolve to a fallback label
rather than raising, so a stale filter never breaks rendering.
"""

from collections.abc import Mapping
from typing import NamedTuple

from taskboard.core.client.protocols import Directory
from taskboard.core.tasks.filters import FilterState
from taskboard.core.tasks.models import TaskPriority, TaskStatus

UNKNOWN_PROJECT = "Unknown project"
UNKNOWN_USER = "Unknown user"

STATUS_LABELS: dict[TaskStatus, str] = {
    TaskStatus.TODO: "To Do",
    TaskStatus.IN_PROGRESS: "In Progress",
    TaskStatus.REVIEW: "Review",
    TaskStatus.DONE: "Done",
}

PRIORITY_LABELS: dict[TaskPriority, str] = {
    TaskPriority.LOW: "Low",
    TaskPriority.MEDIUM: "Medium",
    TaskPriority.HIGH: "High",
    TaskPriority.URGENT: "Urgent",
}

# Rich style names used by the CLI
STATUS_STYLES: dict[TaskStatus, str] = {
    TaskStatus.TODO: "bright_black",
    TaskStatus.IN_PROGRESS: "blue",
    TaskStatus.REVIEW: "magenta",
    TaskStatus.DONE: "green",
}

PRIORITY_STYLES: dict[TaskPriority, str] = {
    TaskPriority.LOW: "blue",
    TaskPriority.MEDIUM: "yellow",
    TaskPriority.HIGH: "dark_orange",
    TaskPriority.URGENT: "red",
}


def status_label(status: TaskStatus | str) -> str:
    """Human label for a status; unknown values are returned verbatim."""
    try:
        return STATUS_LABELS[TaskStatus(status)]
    except ValueError:
        return str(status)


def priority_label(priority: TaskPriority | str) -> str:
    """Human label for a priority; unknown values are returned verbatim."""
    try:
        return PRIORITY_LABELS[TaskPriority(priority)]
    except ValueError:
        return str(priority)


class StaticDirectory:
    """
    Directory backed by in-memory id -> name mappings.

    Args:
        projects: Project id to project name
        users: User id to display name
    """

    def __init__(
        self,
        projects: Mapping[str, str] | None = None,
        users: Mapping[str, str] | None = None,
    ) -> None:
        self._projects = dict(projects or {})
        self._users = dict(users or {})

    def project_label(self, project_id: str) -> str:
        return self._projects.get(project_id, UNKNOWN_PROJECT)

    def user_label(self, user_id: str) -> str:
        return self._users.get(user_id, UNKNOWN_USER)


class FilterChip(NamedTuple):
    """One active filter rendered as a removable chip."""

    field: str
    label: str
    value: str


def filter_chips(filters: FilterState, directory: Directory) -> list[FilterChip]:
    """
    Build display chips for every active filter.

    Chips come out in a fixed order (status, priority, assignee, tags,
    search, date range, projects) so the chip bar does not reshuffle as
    filters are toggled.

    Args:
        filters: Current filter state
        directory: Resolves user and project ids to names

    Returns:
        One chip per active filter value; ``field`` is the FilterState
        field that ``FilterState.cleared`` accepts to remove it
    """
    chips: list[FilterChip] = []

    if filters.status is not None:
        chips.append(
            FilterChip("status", f"Status: {status_label(filters.status)}", filters.status.value)
        )
    if filters.priority is not None:
        chips.append(
            FilterChip(
                "priority",
                f"Priority: {priority_label(filters.priority)}",
                filters.priority.value,
            )
        )
    if filters.assignee:
        chips.append(
            FilterChip(
                "assignee",
                f"Assignee: {directory.user_label(filters.assignee)}",
                filters.assignee,
            )
        )
    for tag in sorted(filters.tags):
        chips.append(FilterChip("tags", f"Tag: {tag}", tag))
    if filters.search_term:
        chips.append(FilterChip("search", f'Search: "{filters.search.strip()}"', filters.search))
    if filters.date_range is not None:
        start = filters.date_range.start.date().isoformat() if filters.date_range.start else "any"
        end = filters.date_range.end.date().isoformat() if filters.date_range.end else "any"
        chips.append(FilterChip("date_range", f"Due: {start} to {end}", f"{start}/{end}"))
    for project_id in sorted(filters.selected_projects):
        chips.append(
            FilterChip(
                "selected_projects",
                f"Project: {directory.project_label(project_id)}",
                project_id,
            )
        )

    return chips
