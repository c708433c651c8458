"""Tests for wizard.settings and wizard.logging_config."""

import logging
import logging.handlers
from pathlib import Path

import pytest
import yaml

from wizard.logging_config import setup_logging
from wizard.settings import (
    get_config_dir,
    get_default_settings,
    get_setting,
    load_settings,
    reload_settings,
    save_settings,
)


class TestLoadSettings:
    def test_defaults_without_file(self, tmp_path: Path) -> None:
        settings = load_settings(tmp_path)
        assert settings["wizards"]["skip_confirmations"] == ["stash-push:command"]
        assert settings["worktrees"]["default_location"] is None

    def test_yaml_is_merged_over_defaults(self, tmp_path: Path) -> None:
        (tmp_path / "settings.yaml").write_text(
            "worktrees:\n  default_location: ~/worktrees/${repo}\nlogging:\n  level: DEBUG\n",
            encoding="utf-8",
        )
        settings = load_settings(tmp_path)
        assert settings["worktrees"]["default_location"] == "~/worktrees/${repo}"
        assert settings["logging"]["level"] == "DEBUG"
        assert settings["logging"]["backup_count"] == 2
        assert settings["wizards"]["skip_confirmations"] == ["stash-push:command"]

    def test_null_keeps_the_default(self, tmp_path: Path) -> None:
        (tmp_path / "settings.yaml").write_text("logging:\n  level: null\n  backup_count: 5\n", encoding="utf-8")
        settings = load_settings(tmp_path)
        assert settings["logging"]["level"] == "INFO"
        assert settings["logging"]["backup_count"] == 5
        assert get_default_settings()["logging"]["backup_count"] == 2

    def test_result_is_cached(self, tmp_path: Path) -> None:
        first = load_settings(tmp_path)
        (tmp_path / "settings.yaml").write_text("logging:\n  level: ERROR\n", encoding="utf-8")
        assert load_settings(tmp_path) is first
        reload_settings()
        assert load_settings(tmp_path)["logging"]["level"] == "ERROR"

    def test_unreadable_yaml_falls_back(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        (tmp_path / "settings.yaml").write_text("wizards: [unclosed\n", encoding="utf-8")
        with caplog.at_level(logging.WARNING, logger="wizard.settings"):
            settings = load_settings(tmp_path)
        assert settings == get_default_settings()
        assert "Ignoring unreadable settings file" in caplog.text

    def test_config_dir_from_env(self, tmp_path: Path) -> None:
        assert get_config_dir() == tmp_path / "config"


class TestSaveSettings:
    def test_round_trip(self, tmp_path: Path) -> None:
        settings = get_default_settings()
        settings["wizards"]["skip_confirmations"] = ["branch-create:menu"]
        path = save_settings(settings, tmp_path)

        assert path == tmp_path / "settings.yaml"
        assert yaml.safe_load(path.read_text(encoding="utf-8"))["wizards"]["skip_confirmations"] == [
            "branch-create:menu"
        ]
        assert load_settings(tmp_path)["wizards"]["skip_confirmations"] == ["branch-create:menu"]
        assert list(tmp_path.glob("settings_*.yaml")) == []


class TestGetSetting:
    def test_dot_path(self) -> None:
        settings = get_default_settings()
        assert get_setting(settings, "logging.max_bytes") == 5242880
        assert get_setting(settings, "logging.missing", "x") == "x"
        assert get_setting(settings, "wizards.skip_confirmations.0") is None
        assert get_setting(settings, "logging.level.name") is None


class TestSetupLogging:
    def test_file_handler_under_config_dir(self, tmp_path: Path, restore_root_logger) -> None:
        log_path = setup_logging(tmp_path, get_default_settings())

        assert log_path == tmp_path / "logs" / "gitwizard.log"
        assert restore_root_logger.level == logging.INFO
        logging.getLogger("wizard.test").info("hello from the test")
        for handler in restore_root_logger.handlers:
            handler.flush()
        assert "hello from the test" in log_path.read_text(encoding="utf-8")

    def test_verbose_adds_console_and_debug(self, tmp_path: Path, restore_root_logger) -> None:
        setup_logging(tmp_path, get_default_settings(), verbose=True)

        assert restore_root_logger.level == logging.DEBUG
        kinds = {type(h) for h in restore_root_logger.handlers}
        assert logging.handlers.RotatingFileHandler in kinds
        assert logging.StreamHandler in kinds
