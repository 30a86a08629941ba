"""
Unit tests for configuration loader.

Tests multi-layer config merging, environment variable overrides,
caching, XDG directory handling and layered .env loading.
"""

import json
import os
from pathlib import Path

import pytest
from pydantic import ValidationError

from taskboard.core.config import (
    clear_cache,
    get_project_config_path,
    get_user_config_path,
    load_config,
    load_layered_env,
)
from taskboard.core.config.loader import (
    apply_env_overrides,
    deep_merge,
    get_default_config,
    get_xdg_config_home,
    load_json_file,
)
from taskboard.core.config.models import TaskboardConfig
from taskboard.core.tasks.sorting import SortKey, SortOrder

# ==============================================================================
# Helper Functions Tests
# ==============================================================================


class TestDeepMerge:
    """Test the deep_merge helper function."""

    def test_nested_merge(self):
        """Test merging nested dicts."""
        base = {"a": 1, "b": {"x": 10, "y": 20}}
        override = {"b": {"y": 30, "z": 40}, "c": 3}
        assert deep_merge(base, override) == {"a": 1, "b": {"x": 10, "y": 30, "z": 40}, "c": 3}

    def test_override_replaces_non_dict(self):
        """Test that non-dict values are replaced, not merged."""
        assert deep_merge({"a": [1, 2, 3]}, {"a": [4, 5]}) == {"a": [4, 5]}

    def test_base_not_mutated(self):
        """Test that the base dict is left untouched."""
        base = {"api": {"base_url": "x"}}
        deep_merge(base, {"api": {"token": "t"}})
        assert base == {"api": {"base_url": "x"}}


class TestLoadJsonFile:
    """Test JSON file loading."""

    def test_load_existing_file(self, tmp_path):
        """Test loading a valid JSON file."""
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({"current_user_id": "u1"}))
        assert load_json_file(config_file) == {"current_user_id": "u1"}

    def test_load_nonexistent_file(self, tmp_path):
        """Test loading a file that doesn't exist."""
        assert load_json_file(tmp_path / "missing.json") is None

    def test_load_invalid_json(self, tmp_path, caplog):
        """Test loading invalid JSON logs a warning and returns None."""
        config_file = tmp_path / "bad.json"
        config_file.write_text("{ invalid json }")
        assert load_json_file(config_file) is None
        assert "Failed to parse config" in caplog.text

    def test_load_non_object(self, tmp_path):
        """Test that a top-level array is ignored."""
        config_file = tmp_path / "list.json"
        config_file.write_text("[1, 2]")
        assert load_json_file(config_file) is None


class TestApplyEnvOverrides:
    """Test environment variable overrides."""

    def test_api_url_and_token(self, monkeypatch):
        """Test TASKBOARD_API_URL and TASKBOARD_API_TOKEN."""
        monkeypatch.setenv("TASKBOARD_API_URL", "https://api.example.com")
        monkeypatch.setenv("TASKBOARD_API_TOKEN", "abc")
        result = apply_env_overrides({"api": {"timeout_seconds": 5}})
        assert result["api"] == {
            "timeout_seconds": 5,
            "base_url": "https://api.example.com",
            "token": "abc",
        }

    def test_user_id(self, monkeypatch):
        """Test TASKBOARD_USER_ID."""
        monkeypatch.setenv("TASKBOARD_USER_ID", "u7")
        assert apply_env_overrides({})["current_user_id"] == "u7"

    def test_poll_interval(self, monkeypatch):
        """Test TASKBOARD_POLL_INTERVAL."""
        monkeypatch.setenv("TASKBOARD_POLL_INTERVAL", "5")
        result = apply_env_overrides({})
        assert result["notifications"]["poll_interval_seconds"] == 5.0

    @pytest.mark.parametrize("value", ["0", "-1", "soon"])
    def test_poll_interval_invalid(self, monkeypatch, caplog, value):
        """Test invalid poll intervals are ignored with a warning."""
        monkeypatch.setenv("TASKBOARD_POLL_INTERVAL", value)
        assert "notifications" not in apply_env_overrides({})
        assert "TASKBOARD_POLL_INTERVAL" in caplog.text

    def test_no_env_overrides(self):
        """Test config passes through unchanged without env vars."""
        config = {"api": {"base_url": "x"}}
        assert apply_env_overrides(config) == config


class TestXdgDirectories:
    """Test XDG path helpers."""

    def test_get_xdg_config_home_default(self, monkeypatch):
        """Test default XDG_CONFIG_HOME."""
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        assert get_xdg_config_home() == Path.home() / ".config"

    def test_get_user_config_path(self, monkeypatch, tmp_path):
        """Test user config path under XDG_CONFIG_HOME."""
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert get_user_config_path() == tmp_path / "taskboard" / "config.json"

    def test_get_project_config_path(self, tmp_path):
        """Test project config path."""
        assert get_project_config_path(tmp_path) == tmp_path / ".taskboard.json"


# ==============================================================================
# load_config Tests
# ==============================================================================


class TestLoadConfig:
    """Test full config loading."""

    def test_defaults_only(self, tmp_path, monkeypatch):
        """Test loading with no config files."""
        monkeypatch.chdir(tmp_path)
        config = load_config()
        assert isinstance(config, TaskboardConfig)
        assert config.api.base_url == get_default_config()["api"]["base_url"]
        assert config.notifications.poll_interval_seconds == 30.0
        assert config.board.drag_activation_distance == 3.0
        assert config.board.default_sort_by == SortKey.CREATED_AT
        assert config.current_user_id is None

    def test_project_overrides_user(self, tmp_path, monkeypatch):
        """Test project config beats user config, deep-merged."""
        user_dir = tmp_path / "xdg" / "taskboard"
        user_dir.mkdir(parents=True)
        (user_dir / "config.json").write_text(
            json.dumps({"api": {"token": "user-token"}, "current_user_id": "u1"})
        )
        project = tmp_path / "project"
        project.mkdir()
        (project / ".taskboard.json").write_text(
            json.dumps({"current_user_id": "u2", "board": {"default_sort_order": "asc"}})
        )

        config = load_config(project)

        assert config.api.token == "user-token"
        assert config.current_user_id == "u2"
        assert config.board.default_sort_order == SortOrder.ASC

    def test_env_overrides_all(self, tmp_path, monkeypatch):
        """Test env vars beat every file."""
        (tmp_path / ".taskboard.json").write_text(json.dumps({"current_user_id": "u2"}))
        monkeypatch.setenv("TASKBOARD_USER_ID", "u9")
        assert load_config(tmp_path).current_user_id == "u9"

    def test_invalid_config_raises(self, tmp_path):
        """Test values failing validation raise ValidationError."""
        (tmp_path / ".taskboard.json").write_text(
            json.dumps({"notifications": {"poll_interval_seconds": -1}})
        )
        with pytest.raises(ValidationError):
            load_config(tmp_path)

    def test_caching(self, tmp_path):
        """Test repeated loads return the cached instance."""
        first = load_config(tmp_path)
        (tmp_path / ".taskboard.json").write_text(json.dumps({"current_user_id": "u3"}))
        assert load_config(tmp_path) is first
        assert load_config(tmp_path, use_cache=False).current_user_id == "u3"

    def test_clear_cache(self, tmp_path):
        """Test clear_cache forces a reload."""
        first = load_config(tmp_path)
        clear_cache()
        assert load_config(tmp_path) is not first


# ==============================================================================
# Layered .env Tests
# ==============================================================================


class TestLoadLayeredEnv:
    """Test .env loading precedence."""

    def test_project_env_overrides_user_env(self, tmp_path, monkeypatch):
        """Test project .env beats user .env."""
        monkeypatch.delenv("TASKBOARD_TEST_VALUE", raising=False)
        user_env = tmp_path / "user.env"
        user_env.write_text("TASKBOARD_TEST_VALUE=user\n")
        project_env = tmp_path / "project.env"
        project_env.write_text("TASKBOARD_TEST_VALUE=project\n")

        keys = load_layered_env(user_env_paths=[user_env], project_env_paths=[project_env])

        assert os.environ["TASKBOARD_TEST_VALUE"] == "project"
        assert keys == {"TASKBOARD_TEST_VALUE"}
        monkeypatch.delenv("TASKBOARD_TEST_VALUE")

    def test_os_env_wins(self, tmp_path, monkeypatch):
        """Test existing environment variables are never overridden."""
        monkeypatch.setenv("TASKBOARD_TEST_VALUE", "os")
        project_env = tmp_path / ".env"
        project_env.write_text("TASKBOARD_TEST_VALUE=project\n")

        keys = load_layered_env(user_env_paths=[], project_env_paths=[project_env])

        assert os.environ["TASKBOARD_TEST_VALUE"] == "os"
        assert keys == set()

    def test_missing_files(self, tmp_path):
        """Test missing files are skipped."""
        assert load_layered_env(user_env_paths=[tmp_path / "nope"], project_dir=tmp_path) == set()
