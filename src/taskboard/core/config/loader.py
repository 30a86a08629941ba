"""
Configuration loading.

Layers, lowest to highest precedence:
    built-in defaults
    user config      $XDG_CONFIG_HOME/taskboard/config.json
    project config   ./.taskboard.json
    TASKBOARD_* environment variables

Each layer is a partial JSON object deep-merged over the previous ones; the
result is validated once as a TaskboardConfig.
"""

import json
import logging
import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

from .models import TaskboardConfig

logger = logging.getLogger(__name__)

# Keyed by resolved project directory
_config_cache: dict[Path, TaskboardConfig] = {}


def _positive_float(raw: str) -> float:
    value = float(raw)
    if value <= 0:
        raise ValueError("must be > 0")
    return value


# env var -> (path into the config dict, parser)
ENV_OVERRIDES: dict[str, tuple[tuple[str, ...], Callable[[str], Any]]] = {
    "TASKBOARD_API_URL": (("api", "base_url"), str),
    "TASKBOARD_API_TOKEN": (("api", "token"), str),
    "TASKBOARD_USER_ID": (("current_user_id",), str),
    "TASKBOARD_POLL_INTERVAL": (("notifications", "poll_interval_seconds"), _positive_float),
}


def get_xdg_config_home() -> Path:
    """Return ``$XDG_CONFIG_HOME``, or ``~/.config`` when unset."""
    return Path(os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config")


def get_user_config_path() -> Path:
    return get_xdg_config_home() / "taskboard" / "config.json"


def get_project_config_path(cwd: Path | None = None) -> Path:
    return (cwd or Path.cwd()) / ".taskboard.json"


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Merge ``override`` over ``base`` without mutating either.

    Nested dicts merge key by key; any other value in ``override`` replaces
    the one in ``base`` outright (lists included).

    Example:
        >>> deep_merge({"api": {"base_url": "x", "token": None}}, {"api": {"token": "t"}})
        {'api': {'base_url': 'x', 'token': 't'}}
    """
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def load_json_file(path: Path) -> dict[str, Any] | None:
    """
    Read one config layer.

    Returns:
        The parsed object, or None when the file is missing, unreadable,
        not JSON, or not a JSON object (a warning is logged for bad files)
    """
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Failed to parse config at {path}: {e}")
        return None
    if not isinstance(data, dict):
        logger.warning(f"Ignoring config at {path}: expected a JSON object")
        return None
    return data


def apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Apply TASKBOARD_* environment variables (see ``ENV_OVERRIDES``).

    Values that fail to parse are logged and skipped rather than failing
    the whole load.
    """
    overrides: dict[str, Any] = {}
    for name, (path, parse) in ENV_OVERRIDES.items():
        raw = os.environ.get(name)
        if not raw:
            continue
        try:
            value = parse(raw)
        except ValueError as e:
            logger.warning(f"Ignoring {name}={raw!r}: {e}")
            continue

        node = overrides
        for key in path[:-1]:
            node = node.setdefault(key, {})
        node[path[-1]] = value

    return deep_merge(config_dict, overrides)


def get_default_config() -> dict[str, Any]:
    return {
        "api": {"base_url": "http://localhost:3000/api", "timeout_seconds": 30.0},
        "notifications": {"enabled": True, "poll_interval_seconds": 30.0},
    }


def load_config(project_dir: Path | None = None, use_cache: bool = True) -> TaskboardConfig:
    """
    Load the merged configuration for a project directory.

    Args:
        project_dir: Directory holding ``.taskboard.json`` (defaults to cwd)
        use_cache: Return the previously loaded config for this directory

    Returns:
        Validated TaskboardConfig

    Raises:
        ValidationError: If the merged values fail validation
    """
    key = (project_dir or Path.cwd()).resolve()
    if use_cache and key in _config_cache:
        return _config_cache[key]

    merged = get_default_config()
    for layer in (get_user_config_path(), get_project_config_path(key)):
        data = load_json_file(layer)
        if data:
            logger.debug(f"Applying config layer {layer}")
            merged = deep_merge(merged, data)

    config = TaskboardConfig.model_validate(apply_env_overrides(merged))
    _config_cache[key] = config
    return config


def clear_cache() -> None:
    """Forget every cached configuration (tests, or after editing config files)."""
    _config_cache.clear()
