"""Tests for the git-tools-mcp CLI."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING
from unittest.mock import patch

from click.testing import CliRunner

from gitmcp import __version__
from gitmcp.cli import main

if TYPE_CHECKING:
    from pathlib import Path


def _env(**overrides: str) -> dict[str, str | None]:
    # Isolate from any GIT_TOOLS_* variables set in the calling shell.
    env: dict[str, str | None] = {
        "GIT_TOOLS_CONFIG": None,
        "GIT_TOOLS_TOOLSET_MODE": None,
        "GIT_TOOLS_AVAILABLE_TOOLS": None,
        "GIT_TOOLS_DYNAMIC_TOOL_DISCOVERY": None,
        "GIT_TOOLS_INSTRUCTIONS": None,
        "GIT_TOOLS_LOG_LEVEL": None,
    }
    env.update(overrides)
    return env


class TestCli:
    def test_help(self) -> None:
        result = CliRunner().invoke(main, ["--help"])
        assert result.exit_code == 0
        for command in ("stdio", "sse", "tools"):
            assert command in result.output

    def test_version(self) -> None:
        result = CliRunner().invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_sse_help_shows_defaults(self) -> None:
        result = CliRunner().invoke(main, ["sse", "--help"])
        assert result.exit_code == 0
        assert "127.0.0.1" in result.output
        assert "3000" in result.output


class TestToolsCommand:
    def test_table(self) -> None:
        result = CliRunner(env=_env()).invoke(main, ["tools"])
        assert result.exit_code == 0, result.output
        assert "get_git_log" in result.output

    def test_json(self) -> None:
        result = CliRunner(env=_env()).invoke(main, ["tools", "--json"])
        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert len(payload["tools"]) == 6
        assert payload["instructions"]

    def test_allow_list_option(self) -> None:
        result = CliRunner(env=_env()).invoke(
            main, ["tools", "--json", "--available-tools", "get_git_log, get_current_branch"]
        )
        payload = json.loads(result.stdout)
        assert [t["name"] for t in payload["tools"]] == ["get_current_branch", "get_git_log"]

    def test_allow_list_from_environment(self) -> None:
        env = _env(GIT_TOOLS_AVAILABLE_TOOLS="get_git_status")
        result = CliRunner(env=env).invoke(main, ["tools", "--json"])
        payload = json.loads(result.stdout)
        assert [t["name"] for t in payload["tools"]] == ["get_git_status"]

    def test_instructions_option(self) -> None:
        result = CliRunner(env=_env()).invoke(main, ["tools", "--json", "--instructions", "Hi"])
        assert json.loads(result.stdout)["instructions"] == "Hi"

    def test_nothing_visible(self) -> None:
        result = CliRunner(env=_env()).invoke(main, ["tools", "--available-tools", "unknown"])
        assert result.exit_code == 0
        assert "No tools visible" in result.output

    def test_config_file(self, tmp_path: Path) -> None:
        config = tmp_path / "config.yaml"
        config.write_text("toolsetConfig:\n  availableTools: [get_git_remotes]\n")
        result = CliRunner(env=_env()).invoke(main, ["tools", "--json", "--config", str(config)])
        payload = json.loads(result.stdout)
        assert [t["name"] for t in payload["tools"]] == ["get_git_remotes"]

    def test_option_overrides_config_file(self, tmp_path: Path) -> None:
        config = tmp_path / "config.yaml"
        config.write_text("toolsetConfig:\n  availableTools: [get_git_remotes]\n")
        result = CliRunner(env=_env()).invoke(
            main,
            ["tools", "--json", "--config", str(config), "--available-tools", "get_git_config"],
        )
        payload = json.loads(result.stdout)
        assert [t["name"] for t in payload["tools"]] == ["get_git_config"]

    def test_invalid_config_file(self, tmp_path: Path) -> None:
        config = tmp_path / "config.yaml"
        config.write_text("toolsetConfig:\n  mode: everything\n")
        result = CliRunner(env=_env()).invoke(main, ["tools", "--config", str(config)])
        assert result.exit_code == 1
        assert "Configuration error" in result.output

    def test_scalar_toolset_section(self, tmp_path: Path) -> None:
        config = tmp_path / "config.yaml"
        config.write_text("toolsetConfig: readOnly\n")
        result = CliRunner(env=_env()).invoke(main, ["tools", "--config", str(config)])
        assert result.exit_code == 1
        assert "Configuration error" in result.output
        assert result.exception is None or isinstance(result.exception, SystemExit)

    def test_invalid_toolset_mode(self) -> None:
        result = CliRunner(env=_env()).invoke(main, ["tools", "--toolset-mode", "everything"])
        assert result.exit_code == 2


class TestServeCommands:
    def test_stdio_runs_server(self) -> None:
        with patch("gitmcp.cli_commands.serve.asyncio.run") as run:
            result = CliRunner(env=_env()).invoke(main, ["stdio"])
        assert result.exit_code == 0, result.output
        run.assert_called_once()
        run.call_args.args[0].close()

    def test_sse_runs_uvicorn(self) -> None:
        with patch("uvicorn.run") as run:
            result = CliRunner(env=_env()).invoke(main, ["sse", "--port", "4000"])
        assert result.exit_code == 0, result.output
        run.assert_called_once()
        assert run.call_args.kwargs["host"] == "127.0.0.1"
        assert run.call_args.kwargs["port"] == 4000
