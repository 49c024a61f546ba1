"""Runtime configuration, read from ``TEAMSYNC_*`` variables and ``.env``."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

MODULE_DIR = Path(__file__).resolve().parent
DEFAULT_MIGRATIONS_DIR = MODULE_DIR / "migrations"
DEFAULT_DATABASE_DSN = "sqlite+aiosqlite:///./data/db/teamsync.sqlite"
DEFAULT_FRONTEND_ORIGIN = "http://localhost:5173"
DEFAULT_SESSION_MAX_AGE = 24 * 60 * 60

# Development-only identity; deployments override every bootstrap_* value.
DEFAULT_ADMIN_EMAIL = "admin@teamsync.local"
DEFAULT_ADMIN_NAME = "System Admin"
DEFAULT_ADMIN_PASSWORD = "change-me-admin"
DEFAULT_WORKSPACE_NAME = "TeamSync Main Workspace"
DEFAULT_WORKSPACE_DESCRIPTION = "Auto-created for the system administrator"

Environment = Literal["development", "production"]
SameSite = Literal["lax", "strict", "none"]

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET"}


class Settings(BaseSettings):
    """FastAPI settings loaded from TEAMSYNC_* environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="TEAMSYNC_",
        case_sensitive=False,
        extra="ignore",
    )

    # Core
    app_name: str = "TeamSync API"
    app_version: str = "1.0.0"
    environment: Environment = "development"
    debug: bool = False
    logging_level: str = "INFO"

    # Server
    server_host: str = "localhost"
    server_port: int = Field(default=8000, ge=1, le=65535)
    frontend_origin: str = DEFAULT_FRONTEND_ORIGIN

    # Sessions
    session_secret: SecretStr = SecretStr("development-session-secret")
    session_cookie_name: str = "session"
    session_max_age: int = Field(default=DEFAULT_SESSION_MAX_AGE, gt=0)

    # Database
    database_dsn: str = DEFAULT_DATABASE_DSN
    database_echo: bool = False
    database_pool_size: int = Field(default=5, ge=1)
    database_max_overflow: int = Field(default=10, ge=0)
    database_pool_timeout: int = Field(default=30, gt=0)
    database_migration_timeout: float = 30.0
    migrations_dir: Path = DEFAULT_MIGRATIONS_DIR

    # Bootstrap
    bootstrap_enabled: bool = True
    bootstrap_admin_email: str = DEFAULT_ADMIN_EMAIL
    bootstrap_admin_name: str = DEFAULT_ADMIN_NAME
    bootstrap_admin_password: SecretStr = SecretStr(DEFAULT_ADMIN_PASSWORD)
    bootstrap_workspace_name: str = DEFAULT_WORKSPACE_NAME
    bootstrap_workspace_description: str = DEFAULT_WORKSPACE_DESCRIPTION

    @field_validator("logging_level", mode="before")
    @classmethod
    def _v_log_level(cls, v: Any) -> str:
        level = str(v or "INFO").strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"logging_level must be one of {sorted(_LOG_LEVELS)}")
        return level

    @field_validator("bootstrap_admin_email", mode="before")
    @classmethod
    def _v_admin_email(cls, v: Any) -> str:
        cleaned = str(v or "").strip().lower()
        if "@" not in cleaned:
            raise ValueError("bootstrap_admin_email must be an email address")
        return cleaned

    @field_validator("bootstrap_admin_password")
    @classmethod
    def _v_admin_password(cls, v: SecretStr) -> SecretStr:
        if not v.get_secret_value().strip():
            raise ValueError("bootstrap_admin_password must not be empty")
        return v

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def session_https_only(self) -> bool:
        return self.is_production

    @property
    def session_same_site(self) -> SameSite:
        return "none" if self.is_production else "lax"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide settings, read from the environment on first use."""

    return Settings()


def reload_settings() -> Settings:
    get_settings.cache_clear()
    return get_settings()


__all__ = ["Settings", "get_settings", "reload_settings"]
