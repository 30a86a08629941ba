"""
Taskboard CLI - Stats command.

Summarize a task export: totals, overdue count, completion rate and the
current user's own tasks.
"""

import json as json_module
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from taskboard.cli.loading import load_tasks_file
from taskboard.core.config.loader import load_config
from taskboard.core.stats import StatsAggregator
from taskboard.core.store import TaskCollectionStore

console = Console()


def stats(
    ctx: typer.Context,
    tasks_file: Path = typer.Argument(..., help="JSON file with a task list"),
    user: str | None = typer.Option(
        None,
        "--user",
        "-u",
        help="User id for 'my tasks' (default: current_user_id from config)",
    ),
    json_output: bool = typer.Option(False, "--json", help="Output stats as JSON"),
) -> None:
    """
    Show task statistics.

    Examples:
        taskboard stats tasks.json
        taskboard stats tasks.json --user u1
        taskboard stats tasks.json --json
    """
    debug = ctx.obj.get("debug", False) if ctx.obj else False
    config = load_config()
    user_id = user or config.current_user_id

    store = TaskCollectionStore()
    store.init()
    store.set_tasks(load_tasks_file(tasks_file))
    aggregator = StatsAggregator(store, current_user=lambda: user_id)
    board_stats = aggregator.stats
    my_stats = aggregator.my_stats

    if debug:
        console.print(f"[dim]Loaded {len(store.tasks)} tasks from {tasks_file}[/dim]")
        console.print(f"[dim]User: {user_id or 'none'}[/dim]")

    if json_output:
        output = {
            "stats": board_stats.model_dump(),
            "my_stats": my_stats.model_dump() if user_id else None,
        }
        console.print(json_module.dumps(output, indent=2))
        return

    table = Table(title="Task Statistics", show_header=True, header_style="bold")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Total", str(board_stats.total))
    table.add_row("Completed", f"[green]{board_stats.completed}[/green]")
    table.add_row("In progress", f"[blue]{board_stats.in_progress}[/blue]")
    overdue_style = "red" if board_stats.overdue else "dim"
    table.add_row("Overdue", f"[{overdue_style}]{board_stats.overdue}[/{overdue_style}]")
    table.add_row("Completion rate", f"{board_stats.completion_rate}%")
    console.print(table)

    if not user_id:
        console.print("[dim]No user set; pass --user to see your own tasks.[/dim]")
        return

    mine = Table(title=f"My Tasks ({user_id})", show_header=True, header_style="bold")
    mine.add_column("Metric", style="cyan")
    mine.add_column("Value", justify="right")
    mine.add_row("Assigned", str(my_stats.total))
    mine.add_row("Completed", f"[green]{my_stats.completed}[/green]")
    mine.add_row("In progress", f"[blue]{my_stats.in_progress}[/blue]")
    console.print(mine)
