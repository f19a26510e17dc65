"""Smoke tests for the click command-line entry point."""

from __future__ import annotations

from click.testing import CliRunner

from forexai.cli import main


def test_commands_registered() -> None:
    result = CliRunner().invoke(main, ["--help"])

    assert result.exit_code == 0
    for command in ("serve", "plan", "db"):
        assert command in result.output


def test_db_subcommands() -> None:
    result = CliRunner().invoke(main, ["db", "--help"])

    assert result.exit_code == 0
    for command in ("upgrade", "downgrade", "current", "history"):
        assert command in result.output


def test_plan_requires_inputs() -> None:
    result = CliRunner().invoke(main, ["plan", "--broker-url", "https://broker.example"])

    assert result.exit_code == 2
    assert "--strategy-file" in result.output
