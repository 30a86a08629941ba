"""
Shared helpers for CLI commands that read tasks from a JSON export.
"""

import json
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console

from taskboard.core.tasks.models import Task

err_console = Console(stderr=True)


def load_tasks_file(path: Path) -> list[Task]:
    """
    Load tasks from a JSON file.

    Accepts either a bare list of task objects or an API-style
    ``{"tasks": [...]}`` envelope.

    Raises:
        typer.Exit: If the file is missing, not JSON, or holds invalid tasks
    """
    try:
        payload = json.loads(path.read_text())
    except FileNotFoundError:
        err_console.print(f"[red]Error:[/red] File not found: {path}")
        raise typer.Exit(1)
    except (OSError, json.JSONDecodeError) as e:
        err_console.print(f"[red]Error:[/red] Could not read {path}: {e}")
        raise typer.Exit(1)

    if isinstance(payload, dict):
        payload = payload.get("tasks", [])
    if not isinstance(payload, list):
        err_console.print(f"[red]Error:[/red] {path} does not contain a task list")
        raise typer.Exit(1)

    try:
        return [Task.model_validate(item) for item in payload]
    except ValidationError as e:
        err_console.print(f"[red]Error:[/red] Invalid task data in {path}:\n{e}")
        raise typer.Exit(1)
