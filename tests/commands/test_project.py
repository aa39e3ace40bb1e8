"""Tests for the project command group."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from contentctl.cli import cli

SLUG = "weather-dashboard"


def _create(cli_runner: CliRunner, title: str = "Weather Dashboard", *stack: str) -> dict:
    args = ["--json", "project", "create", title, "--description", "Forecasts at a glance."]
    for entry in stack or ("React", "D3"):
        args += ["--stack", entry]
    result = cli_runner.invoke(cli, args)
    assert result.exit_code == 0, result.output
    return json.loads(result.stdout)["data"]


@pytest.mark.usefixtures("_isolated_root")
class TestProjectCommands:
    def test_create_uses_template(self, cli_runner: CliRunner, content_root: Path) -> None:
        data = _create(cli_runner)
        assert data["slug"] == SLUG
        text = (content_root / "content" / "projects" / "Weather Dashboard.md").read_text(
            encoding="utf-8"
        )
        assert "# Weather Dashboard" in text
        assert "## Features" in text

    def test_create_without_stack(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "project", "create", "Bare Project"])
        assert result.exit_code == 1
        error = json.loads(result.stderr)["error"]
        assert "stack is required" in error["detail"]["errors"]

    def test_get(self, cli_runner: CliRunner) -> None:
        _create(cli_runner)
        result = cli_runner.invoke(cli, ["--json", "project", "get", SLUG])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["data"]["stack"] == ["React", "D3"]

    def test_list_by_stack(self, cli_runner: CliRunner) -> None:
        _create(cli_runner)
        _create(cli_runner, "CLI Toolkit", "Python")
        result = cli_runner.invoke(cli, ["-q", "project", "list", "--tag", "Python"])
        assert result.stdout.strip() == "cli-toolkit"

    def test_search(self, cli_runner: CliRunner) -> None:
        _create(cli_runner)
        result = cli_runner.invoke(cli, ["--json", "project", "search", "forecasts"])
        assert json.loads(result.stdout)["data"]["total"] == 1

    def test_update(self, cli_runner: CliRunner) -> None:
        _create(cli_runner)
        result = cli_runner.invoke(
            cli, ["--json", "project", "update", SLUG, "--set", "demo=https://example.com"]
        )
        assert result.exit_code == 0, result.output
        got = cli_runner.invoke(cli, ["--json", "project", "get", SLUG])
        assert json.loads(got.stdout)["data"]["demo"] == "https://example.com"

    def test_delete(self, cli_runner: CliRunner, content_root: Path) -> None:
        _create(cli_runner)
        result = cli_runner.invoke(cli, ["project", "delete", SLUG, "--yes"])
        assert result.exit_code == 0
        assert not (content_root / "content" / "projects" / "Weather Dashboard.md").exists()

    def test_delete_missing(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "project", "delete", "nope", "--yes"])
        assert result.exit_code == 1
        assert json.loads(result.stderr)["error"]["code"] == "NOT_FOUND"
