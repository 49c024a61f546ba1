"""Programmatic Alembic runner used to migrate on startup.

The migration scripts ship inside the package (``teamsync_api/migrations``),
so the Alembic config is built in code rather than read from an ini file.
"""

from __future__ import annotations

import asyncio
import logging

from alembic import command
from alembic.config import Config
from sqlalchemy.engine import Connection

from teamsync_api.settings import Settings, get_settings

from .database import DatabaseConfig, ensure_sqlite_parent_dir, get_database, is_sqlite_memory

__all__ = [
    "build_alembic_config",
    "ensure_database_ready",
    "reset_migration_state",
    "run_migrations",
    "run_migrations_async",
]

logger = logging.getLogger(__name__)

_MIGRATION_LOCK = asyncio.Lock()
_MIGRATED_URLS: set[str] = set()


def build_alembic_config(settings: Settings, *, connection: Connection | None = None) -> Config:
    migrations_dir = settings.migrations_dir
    if not (migrations_dir / "env.py").exists():
        raise FileNotFoundError(f"Alembic migrations not found at {migrations_dir}")

    config = Config()
    # Keep the process logging setup; env.py skips fileConfig when this is False.
    config.attributes["configure_logger"] = False
    config.set_main_option("script_location", str(migrations_dir))
    # ConfigParser interpolates "%"; rendered URLs carry escapes such as %3Amemory%3A.
    sync_url = DatabaseConfig.from_settings(settings).sync_url
    config.set_main_option("sqlalchemy.url", sync_url.replace("%", "%%"))
    if connection is not None:
        config.attributes["connection"] = connection
    return config


def run_migrations(settings: Settings | None = None, *, revision: str = "head") -> None:
    resolved = settings or get_settings()
    db_config = DatabaseConfig.from_settings(resolved)
    if db_config.is_sqlite:
        ensure_sqlite_parent_dir(db_config.parsed_url)
    command.upgrade(build_alembic_config(resolved), revision)


async def run_migrations_async(
    settings: Settings | None = None,
    *,
    revision: str = "head",
) -> None:
    resolved = settings or get_settings()
    timeout = resolved.database_migration_timeout
    try:
        if timeout <= 0:
            await asyncio.to_thread(run_migrations, resolved, revision=revision)
        else:
            await asyncio.wait_for(
                asyncio.to_thread(run_migrations, resolved, revision=revision),
                timeout=timeout,
            )
    except TimeoutError as exc:
        raise RuntimeError(
            f"Alembic migrations exceeded {timeout:.0f}s "
            "(set TEAMSYNC_DATABASE_MIGRATION_TIMEOUT to override)."
        ) from exc


async def ensure_database_ready(settings: Settings | None = None) -> None:
    """Upgrade the schema to head once per database URL per process."""

    resolved = settings or get_settings()
    db_config = DatabaseConfig.from_settings(resolved)

    async with _MIGRATION_LOCK:
        if db_config.sync_url in _MIGRATED_URLS:
            return

        logger.info("db.migrate.start", extra={"database_url": db_config.safe_url})
        if db_config.is_sqlite and is_sqlite_memory(db_config.parsed_url):
            # The schema must land on the runtime engine's only connection.
            engine = get_database(resolved).engine
            async with engine.begin() as connection:
                await connection.run_sync(
                    lambda sync_connection: command.upgrade(
                        build_alembic_config(resolved, connection=sync_connection), "head"
                    )
                )
        else:
            await run_migrations_async(resolved)
        _MIGRATED_URLS.add(db_config.sync_url)
        logger.info("db.migrate.complete", extra={"database_url": db_config.safe_url})


def reset_migration_state() -> None:
    """Forget which databases were migrated (tests)."""

    _MIGRATED_URLS.clear()
