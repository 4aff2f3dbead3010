"""Unit tests for the CLI entry point.

The manager is built on the scripted invoker, so no real git runs.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Iterator
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from gitdrive import __version__
from gitdrive.git.manager import GitCliManager
from gitdrive.main import cli
from tests.fixtures.invoker import Script, ScriptedInvoker


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def scripted_cli(
    clean_env: None,
    temp_dir: Path,
    monkeypatch: pytest.MonkeyPatch,
    make_manager: Callable[..., GitCliManager],
) -> Iterator[None]:
    """Route the CLI's GitCliManager through the scripted fakes."""
    monkeypatch.setenv("HOME", str(temp_dir))
    os.chdir(temp_dir)
    with patch("gitdrive.main.GitCliManager", side_effect=make_manager):
        yield


def test_version_option(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_help_output(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "gitdrive" in result.output
    assert "fetch-url" in result.output
    assert "--verbose" in result.output


def test_exit_code_usage_error(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--invalid-option"])
    assert result.exit_code == 2


@pytest.mark.usefixtures("scripted_cli")
class TestCommands:
    """Tests for the repository commands."""

    def test_version_command(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["version"])
        assert result.exit_code == 0
        assert "git 2.43.0" in result.output
        assert "git-lfs 3.4.1" in result.output

    def test_load_failure_exits_1(
        self, cli_runner: CliRunner, invoker: ScriptedInvoker
    ) -> None:
        invoker.on("version", Script(exit_code=1))
        result = cli_runner.invoke(cli, ["version"])
        assert result.exit_code == 1
        assert "Unable to determine git version" in result.output

    def test_fetch_exit_code(
        self, cli_runner: CliRunner, invoker: ScriptedInvoker, repo_dir: Path
    ) -> None:
        invoker.on("fetch", Script(exit_code=128))
        result = cli_runner.invoke(
            cli, ["fetch", str(repo_dir), "main", "--remote", "upstream", "--depth", "1"]
        )

        assert result.exit_code == 128
        calls = invoker.calls_for("fetch")
        assert len(calls) == 3
        assert calls[0].arguments[-3:] == ("upstream", "--depth=1", "main")

    def test_checkout(
        self, cli_runner: CliRunner, invoker: ScriptedInvoker, repo_dir: Path
    ) -> None:
        result = cli_runner.invoke(cli, ["checkout", str(repo_dir), "refs/heads/main"])
        assert result.exit_code == 0
        assert invoker.calls[-1].arguments == (
            "checkout",
            "--progress",
            "--force",
            "refs/heads/main",
        )

    def test_clean(
        self, cli_runner: CliRunner, invoker: ScriptedInvoker, repo_dir: Path
    ) -> None:
        result = cli_runner.invoke(cli, ["clean", str(repo_dir)])
        assert result.exit_code == 0
        assert invoker.calls[-1].arguments == ("clean", "-ffdx")

    def test_fetch_url(
        self, cli_runner: CliRunner, invoker: ScriptedInvoker, repo_dir: Path
    ) -> None:
        invoker.on("config --get", Script(stdout=("https://dev.example.com/r.git",)))
        result = cli_runner.invoke(cli, ["fetch-url", str(repo_dir)])
        assert result.exit_code == 0
        assert "https://dev.example.com/r.git" in result.output

    def test_fetch_url_missing(
        self, cli_runner: CliRunner, invoker: ScriptedInvoker, repo_dir: Path
    ) -> None:
        invoker.on("config --get", Script(exit_code=1))
        result = cli_runner.invoke(cli, ["fetch-url", str(repo_dir)])
        assert result.exit_code == 1

    def test_invalid_config_file(self, cli_runner: CliRunner, temp_dir: Path) -> None:
        bad = temp_dir / "bad.yaml"
        bad.write_text("retry:\n  max_attempts: 0\n")
        result = cli_runner.invoke(cli, ["-c", str(bad), "version"])
        assert result.exit_code == 1
        assert "Field: retry.max_attempts" in result.output
