from __future__ import annotations

import pytest
from pydantic import ValidationError

from teamsync_api.settings import Settings


def test_defaults() -> None:
    settings = Settings(_env_file=None)

    assert settings.app_version == "1.0.0"
    assert settings.session_cookie_name == "session"
    assert settings.bootstrap_enabled is True
    assert settings.migrations_dir.name == "migrations"
    assert (settings.migrations_dir / "env.py").exists()


def test_environment_variables_use_prefix(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TEAMSYNC_BOOTSTRAP_ADMIN_EMAIL", "  Ops@Example.COM ")
    monkeypatch.setenv("TEAMSYNC_SERVER_PORT", "9100")
    monkeypatch.setenv("TEAMSYNC_LOGGING_LEVEL", "debug")

    settings = Settings(_env_file=None)

    assert settings.bootstrap_admin_email == "ops@example.com"
    assert settings.server_port == 9100
    assert settings.logging_level == "DEBUG"


def test_invalid_values_are_rejected() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, bootstrap_admin_email="not-an-email")
    with pytest.raises(ValidationError):
        Settings(_env_file=None, bootstrap_admin_password="   ")
    with pytest.raises(ValidationError):
        Settings(_env_file=None, logging_level="LOUD")


def test_session_cookie_policy_follows_environment() -> None:
    development = Settings(_env_file=None)
    production = Settings(_env_file=None, environment="production")

    assert (development.session_same_site, development.session_https_only) == ("lax", False)
    assert (production.session_same_site, production.session_https_only) == ("none", True)


def test_secrets_are_not_rendered() -> None:
    settings = Settings(_env_file=None, bootstrap_admin_password="hunter2-pass")

    assert "hunter2-pass" not in repr(settings)
