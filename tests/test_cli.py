"""Tests for the gitwizard typer app."""

import json
import shutil
import subprocess
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
from typer.testing import CliRunner

from commands import COMMANDS
from commands.cli import EXIT_COMPLETED, EXIT_INVALID, app

runner = CliRunner()


class TestListCommand:
    def test_lists_every_wizard(self) -> None:
        result = runner.invoke(app, ["list"])
        assert result.exit_code == 0
        for command in COMMANDS:
            assert command.key in result.output


class TestRunCommand:
    def test_invalid_state_json(self, tmp_path: Path, restore_root_logger) -> None:
        result = runner.invoke(app, ["run", "branch-create", "--repo", str(tmp_path), "--state", "{not json"])
        assert result.exit_code == EXIT_INVALID

    def test_state_must_be_an_object(self, tmp_path: Path, restore_root_logger) -> None:
        result = runner.invoke(app, ["run", "branch-create", "--repo", str(tmp_path), "--state", "[1, 2]"])
        assert result.exit_code == EXIT_INVALID

    @pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")
    def test_known_state_runs_without_prompts(self, tmp_path: Path, restore_root_logger) -> None:
        path = tmp_path / "project"
        path.mkdir()
        for args in (
            ["init", "-q", "-b", "main"],
            ["config", "user.name", "Test User"],
            ["config", "user.email", "test@example.com"],
            ["config", "commit.gpgsign", "false"],
            ["commit", "-q", "--allow-empty", "-m", "init"],
        ):
            subprocess.run(["git", *args], cwd=path, check=True, capture_output=True)

        state = json.dumps({"reference": "main", "name": "feature/cli"})
        result = runner.invoke(
            app, ["run", "branch-create", "--repo", str(path), "--state", state, "--no-confirm"]
        )

        assert result.exit_code == EXIT_COMPLETED, result.output
        assert "feature/cli" in result.output
        branches = subprocess.run(
            ["git", "branch", "--list", "feature/cli"], cwd=path, check=True, capture_output=True, text=True
        ).stdout
        assert "feature/cli" in branches

    @pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")
    def test_unknown_command(self, tmp_path: Path, restore_root_logger) -> None:
        path = tmp_path / "project"
        path.mkdir()
        subprocess.run(["git", "init", "-q", "-b", "main"], cwd=path, check=True, capture_output=True)

        result = runner.invoke(app, ["run", "rebase", "--repo", str(path)])
        assert result.exit_code == EXIT_INVALID

    def test_no_repository_found(self, tmp_path: Path, restore_root_logger) -> None:
        with patch("commands.cli.discover_repositories", AsyncMock(return_value=[])) as discover:
            result = runner.invoke(app, ["run", "branch-create", "--repo", str(tmp_path)])
        assert result.exit_code == EXIT_INVALID
        assert "No git repository found." in result.output
        discover.assert_awaited_once_with([tmp_path])
