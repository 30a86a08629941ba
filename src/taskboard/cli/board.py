"""
Taskboard CLI - Board command.

Render a task export as a four-column kanban board.
"""

import json as json_module
import logging
from datetime import date, datetime, time
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from taskboard.cli.loading import err_console, load_tasks_file
from taskboard.core.board.columns import KANBAN_COLUMNS, group_with_anomalies
from taskboard.core.config.loader import load_config
from taskboard.core.directory import PRIORITY_STYLES, StaticDirectory, filter_chips
from taskboard.core.store import TaskCollectionStore
from taskboard.core.tasks.filters import DateRange, FilterState
from taskboard.core.tasks.models import Task, TaskPriority, TaskStatus
from taskboard.core.tasks.sorting import SortKey, SortOrder, SortState

console = Console()
logger = logging.getLogger(__name__)


def _parse_choice(enum_cls: type, value: str | None, option: str):  # type: ignore[no-untyped-def]
    if value is None:
        return None
    try:
        return enum_cls(value)
    except ValueError:
        choices = ", ".join(member.value for member in enum_cls)
        err_console.print(f"[red]Error:[/red] Invalid {option} '{value}'. Choose from: {choices}")
        raise typer.Exit(1)


def _parse_date(value: str | None, option: str, *, end_of_day: bool = False) -> datetime | None:
    if value is None:
        return None
    try:
        day = date.fromisoformat(value)
    except ValueError:
        pass
    else:
        # A bare date covers the whole day
        return datetime.combine(day, time.max if end_of_day else time.min)
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        err_console.print(f"[red]Error:[/red] Invalid {option} '{value}' (expected ISO date)")
        raise typer.Exit(1)


def _card(task: Task) -> str:
    style = PRIORITY_STYLES.get(task.priority, "white")
    line = f"[bold]{task.title}[/bold]\n[{style}]{task.priority.value}[/{style}]"
    if task.due_date is not None:
        line += f" [dim]due {task.due_date.date().isoformat()}[/dim]"
    if task.tags:
        line += f"\n[dim]#{' #'.join(task.tags)}[/dim]"
    return line


def board(
    ctx: typer.Context,
    tasks_file: Path = typer.Argument(..., help="JSON file with a task list"),
    status: str | None = typer.Option(None, "--status", help="Only show this status"),
    priority: str | None = typer.Option(None, "--priority", help="Only show this priority"),
    assignee: str | None = typer.Option(None, "--assignee", help="Assignee user id"),
    tags: list[str] | None = typer.Option(
        None, "--tag", help="Match tasks with any of these tags (repeatable)"
    ),
    search: str | None = typer.Option(None, "--search", "-s", help="Search title/description"),
    projects: list[str] | None = typer.Option(
        None, "--project", help="Restrict to project ids (repeatable)"
    ),
    due_from: str | None = typer.Option(None, "--due-from", help="Earliest due date (ISO)"),
    due_to: str | None = typer.Option(None, "--due-to", help="Latest due date (ISO)"),
    sort_by: str | None = typer.Option(None, "--sort-by", help="Sort key (default from config)"),
    order: str | None = typer.Option(None, "--order", help="asc or desc"),
    json_output: bool = typer.Option(False, "--json", help="Output columns as JSON"),
) -> None:
    """
    Show tasks grouped into To Do, In Progress, Review and Done.

    Examples:
        taskboard board tasks.json
        taskboard board tasks.json --status todo --tag backend
        taskboard board tasks.json --sort-by priority --order desc
        taskboard board tasks.json --json
    """
    debug = ctx.obj.get("debug", False) if ctx.obj else False
    config = load_config()

    date_range = None
    if due_from or due_to:
        date_range = DateRange(
            start=_parse_date(due_from, "--due-from"),
            end=_parse_date(due_to, "--due-to", end_of_day=True),
        )

    filters = FilterState(
        status=_parse_choice(TaskStatus, status, "--status"),
        priority=_parse_choice(TaskPriority, priority, "--priority"),
        assignee=assignee,
        tags=tags or [],
        search=search,
        date_range=date_range,
        selected_projects=projects or [],
    )
    sort = SortState(
        sort_by=_parse_choice(SortKey, sort_by, "--sort-by") or config.board.default_sort_by,
        sort_order=_parse_choice(SortOrder, order, "--order") or config.board.default_sort_order,
    )

    store = TaskCollectionStore(sort=sort)
    store.init()
    store.update(tasks=load_tasks_file(tasks_file), filters=filters)
    result = group_with_anomalies(store.current_view())

    if debug:
        console.print(f"[dim]Loaded {len(store.tasks)} tasks from {tasks_file}[/dim]")
        console.print(f"[dim]Query: {filters.to_query()}[/dim]")

    if json_output:
        output = {
            "columns": {
                column.status.value: [task.id for task in result.columns[column.status]]
                for column in KANBAN_COLUMNS
            },
            "anomalies": [
                {"task_id": a.task_id, "status": a.status, "reason": a.reason}
                for a in result.anomalies
            ],
        }
        console.print(json_module.dumps(output, indent=2))
        return

    chips = filter_chips(filters, StaticDirectory())
    if chips:
        console.print("[dim]Filters:[/dim] " + "  ".join(chip.label for chip in chips))

    table = Table(show_header=True, header_style="bold", expand=True)
    for column in KANBAN_COLUMNS:
        table.add_column(f"{column.title} ({len(result.columns[column.status])})")

    depth = max((len(tasks) for tasks in result.columns.values()), default=0)
    for row in range(depth):
        cells = []
        for column in KANBAN_COLUMNS:
            bucket = result.columns[column.status]
            cells.append(_card(bucket[row]) if row < len(bucket) else "")
        table.add_row(*cells)

    console.print(table)

    for anomaly in result.anomalies:
        console.print(
            f"[yellow]Skipped task {anomaly.task_id}:[/yellow] {anomaly.reason} '{anomaly.status}'"
        )
