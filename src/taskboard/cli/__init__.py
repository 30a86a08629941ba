"""
Taskboard CLI - Main application entry point.

This module sets up the Typer CLI application with all subcommands.
"""

import logging

import typer
from rich.console import Console

from taskboard import __version__
from taskboard.cli import board, stats
from taskboard.core.config.env import load_layered_env

app = typer.Typer(
    name="taskboard",
    help="Kanban task collection engine",
    no_args_is_help=True,
    add_completion=False,
    context_settings={"help_option_names": ["--help", "-h"]},
)

console = Console()


@app.callback()
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug output with detailed logging",
    ),
) -> None:
    """
    Taskboard - filter, sort, group and summarize tasks.

    Examples:
        taskboard board tasks.json --status todo
        taskboard stats tasks.json --user u1
    """
    # Precedence: OS env > project .env > user .env
    load_layered_env()

    if debug:
        logging.basicConfig(level=logging.DEBUG)

    ctx.obj = {"debug": debug}


app.command(name="board")(board.board)
app.command(name="stats")(stats.stats)


@app.command()
def version() -> None:
    """Show taskboard version and exit."""
    console.print(f"taskboard version {__version__}")
    raise typer.Exit(0)


def cli_main() -> None:
    """Main CLI entry point."""
    app()


__all__ = ["app", "cli_main"]
