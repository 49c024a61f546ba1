from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
from typer.testing import CliRunner

from teamsync_api import cli
from teamsync_api.db import reset_database_state
from teamsync_api.settings import reload_settings
from tests.utils import ADMIN_EMAIL

runner = CliRunner()


@pytest.fixture
def cli_env(monkeypatch: pytest.MonkeyPatch, database_path: Path) -> Iterator[pytest.MonkeyPatch]:
    monkeypatch.setenv("TEAMSYNC_DATABASE_DSN", f"sqlite+aiosqlite:///{database_path}")
    monkeypatch.setenv("TEAMSYNC_BOOTSTRAP_ADMIN_EMAIL", ADMIN_EMAIL)
    reload_settings()
    yield monkeypatch
    reset_database_state()
    monkeypatch.undo()
    reload_settings()


def test_bootstrap_command_seeds_and_is_repeatable(cli_env: pytest.MonkeyPatch) -> None:
    first = runner.invoke(cli.app, ["bootstrap"])
    reset_database_state()
    second = runner.invoke(cli.app, ["bootstrap"])

    assert first.exit_code == 0, first.output
    assert "roles created:  OWNER, ADMIN, MEMBER" in first.output
    assert "admin created:  yes" in first.output
    assert second.exit_code == 0, second.output
    assert "roles created:  -" in second.output
    assert "admin created:  no" in second.output


def test_bootstrap_command_exits_non_zero_on_failure(
    cli_env: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    blocker = tmp_path / "not-a-directory"
    blocker.write_text("")
    cli_env.setenv("TEAMSYNC_DATABASE_DSN", f"sqlite+aiosqlite:///{blocker / 'db.sqlite'}")
    reload_settings()

    result = runner.invoke(cli.app, ["bootstrap"])

    assert result.exit_code == 1
    assert "Database is not reachable" in result.output


def test_start_command_runs_uvicorn_with_overrides(cli_env: pytest.MonkeyPatch) -> None:
    calls: list[tuple[str, dict]] = []
    cli_env.setattr(cli.uvicorn, "run", lambda target, **kwargs: calls.append((target, kwargs)))

    result = runner.invoke(cli.app, ["start", "--host", "0.0.0.0", "--port", "9001", "--reload"])

    assert result.exit_code == 0, result.output
    [(target, kwargs)] = calls
    assert target == "teamsync_api.main:app"
    assert kwargs["host"] == "0.0.0.0"
    assert kwargs["port"] == 9001
    assert kwargs["reload"] is True


def test_no_subcommand_prints_help() -> None:
    result = runner.invoke(cli.app, [])

    assert result.exit_code == 0
    assert "bootstrap" in result.output
