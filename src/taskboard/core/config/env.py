"""
.env file support for the CLI.

Values come from two layers of dotenv files: the user's
(``$XDG_CONFIG_HOME/taskboard/.env``) and the project's (``.env`` then
``.env.local`` in the working directory). Project files win over user
files; neither ever replaces a variable already set in the process
environment, so ``TASKBOARD_API_TOKEN=... taskboard board`` always wins.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable

from dotenv import dotenv_values

logger = logging.getLogger(__name__)


def default_env_files(project_dir: Path | None = None) -> tuple[list[Path], list[Path]]:
    """
    Locate the user and project .env files.

    Returns:
        ``(user_files, project_files)``, lowest priority first in each list
    """
    project_dir = project_dir or Path.cwd()
    xdg_home = Path(os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config")
    return (
        [xdg_home / "taskboard" / ".env"],
        [project_dir / ".env", project_dir / ".env.local"],
    )


def read_env_files(paths: Iterable[Path]) -> dict[str, str]:
    """Read dotenv files in order; later files override earlier ones."""
    values: dict[str, str] = {}
    for path in paths:
        path = Path(path)
        if not path.is_file():
            continue
        # Bare keys without "=" parse to None and are skipped
        values.update({k: v for k, v in dotenv_values(path).items() if v is not None})
    return values


def load_layered_env(
    *,
    project_dir: Path | None = None,
    user_env_paths: Iterable[Path] | None = None,
    project_env_paths: Iterable[Path] | None = None,
) -> set[str]:
    """
    Export .env values into ``os.environ``.

    Args:
        project_dir: Directory holding the project .env files (defaults to cwd)
        user_env_paths: Override the user .env locations
        project_env_paths: Override the project .env locations

    Returns:
        Names of the variables this call set
    """
    user_files, project_files = default_env_files(project_dir)
    if user_env_paths is not None:
        user_files = list(user_env_paths)
    if project_env_paths is not None:
        project_files = list(project_env_paths)

    layered = {**read_env_files(user_files), **read_env_files(project_files)}
    applied = {key: value for key, value in layered.items() if key not in os.environ}
    os.environ.update(applied)

    if applied:
        logger.debug(f"Loaded {len(applied)} variables from .env files")
    return set(applied)
