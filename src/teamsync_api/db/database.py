"""Database engine + session factory.

Standard behavior:
- One ``Database`` per process, created lazily from settings
- Sessions come from a shared ``async_sessionmaker`` (no expiry on commit)
- SQLite: one shared connection (StaticPool), WAL + busy_timeout + foreign keys
- Other backends: pooled connections + pre-ping
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from sqlalchemy import event, text
from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from teamsync_api.settings import Settings, get_settings

__all__ = [
    "Database",
    "DatabaseConfig",
    "check_database_ready",
    "dispose_engine",
    "ensure_sqlite_parent_dir",
    "get_database",
    "get_sessionmaker",
    "is_sqlite_memory",
    "reset_database_state",
]

logger = logging.getLogger(__name__)


# ---- URL helpers ------------------------------------------------------------


def is_sqlite_memory(url: URL) -> bool:
    db = (url.database or "").strip()
    if not db or db == ":memory:":
        return True
    return db.startswith("file:") and (url.query or {}).get("mode") == "memory"


def ensure_sqlite_parent_dir(url: URL) -> None:
    """Create the directory holding a file-backed SQLite database."""

    db = (url.database or "").strip()
    if not db or db == ":memory:" or db.startswith("file:"):
        return
    path = Path(db)
    if not path.is_absolute():
        path = (Path.cwd() / path).resolve()
    path.parent.mkdir(parents=True, exist_ok=True)


# ---- Config -----------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    """Connection settings for the async runtime engine.

    ``url`` is the async URL (``sqlite+aiosqlite:///...``); Alembic gets the
    matching sync URL from :attr:`sync_url`.
    """

    url: str
    echo: bool = False
    pool_size: int = 5
    max_overflow: int = 10
    pool_timeout: int = 30
    sqlite_journal_mode: str = "WAL"
    sqlite_busy_timeout_ms: int = 30_000

    @classmethod
    def from_settings(cls, settings: Settings) -> DatabaseConfig:
        return cls(
            url=settings.database_dsn,
            echo=bool(settings.database_echo),
            pool_size=int(settings.database_pool_size),
            max_overflow=int(settings.database_max_overflow),
            pool_timeout=int(settings.database_pool_timeout),
        )

    @property
    def parsed_url(self) -> URL:
        return make_url(self.url)

    @property
    def is_sqlite(self) -> bool:
        return self.parsed_url.get_backend_name() == "sqlite"

    @property
    def sync_url(self) -> str:
        url = self.parsed_url
        return url.set(drivername=url.get_backend_name()).render_as_string(hide_password=False)

    @property
    def safe_url(self) -> str:
        return self.parsed_url.render_as_string(hide_password=True)


# ---- Database ---------------------------------------------------------------


class Database:
    """Lazily built engine and session factory for one ``DatabaseConfig``."""

    def __init__(self, config: DatabaseConfig) -> None:
        self.config = config
        self._engine: AsyncEngine | None = None
        self._sessionmaker: async_sessionmaker[AsyncSession] | None = None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            self._engine = self._build_engine()
        return self._engine

    @property
    def sessionmaker(self) -> async_sessionmaker[AsyncSession]:
        if self._sessionmaker is None:
            self._sessionmaker = async_sessionmaker(
                bind=self.engine,
                expire_on_commit=False,
                autoflush=False,
            )
        return self._sessionmaker

    async def ping(self) -> None:
        async with self.engine.connect() as connection:
            await connection.execute(text("SELECT 1"))

    async def dispose(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()

    def _build_engine(self) -> AsyncEngine:
        config = self.config
        url = config.parsed_url
        kwargs: dict[str, Any] = {"echo": config.echo, "pool_pre_ping": True}

        if config.is_sqlite:
            # One connection per process: writes are serialised and in-memory
            # databases survive across sessions.
            kwargs["poolclass"] = StaticPool
            kwargs["connect_args"] = {
                "check_same_thread": False,
                "timeout": config.sqlite_busy_timeout_ms / 1000,
            }
            if not is_sqlite_memory(url):
                ensure_sqlite_parent_dir(url)
        else:
            kwargs["pool_size"] = config.pool_size
            kwargs["max_overflow"] = config.max_overflow
            kwargs["pool_timeout"] = config.pool_timeout

        engine = create_async_engine(url.render_as_string(hide_password=False), **kwargs)
        if config.is_sqlite:
            self._attach_sqlite_pragmas(engine)
        return engine

    def _attach_sqlite_pragmas(self, engine: AsyncEngine) -> None:
        journal_mode = self.config.sqlite_journal_mode
        busy_timeout_ms = self.config.sqlite_busy_timeout_ms
        in_memory = is_sqlite_memory(self.config.parsed_url)

        @event.listens_for(engine.sync_engine, "connect")
        def _on_connect(dbapi_connection, _record) -> None:  # pragma: no cover - driver hook
            cursor = dbapi_connection.cursor()
            try:
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.execute(f"PRAGMA busy_timeout={int(busy_timeout_ms)}")
                if not in_memory:
                    cursor.execute(f"PRAGMA journal_mode={journal_mode}")
            finally:
                cursor.close()


# ---- Process-wide instance --------------------------------------------------

_DATABASE: Database | None = None


def get_database(settings: Settings | None = None) -> Database:
    """Return the process ``Database``, rebuilding it when settings change."""

    global _DATABASE
    config = DatabaseConfig.from_settings(settings or get_settings())
    if _DATABASE is None or _DATABASE.config != config:
        _DATABASE = Database(config)
    return _DATABASE


def get_sessionmaker(settings: Settings | None = None) -> async_sessionmaker[AsyncSession]:
    return get_database(settings).sessionmaker


async def check_database_ready(settings: Settings | None = None) -> None:
    """Verify connectivity with ``SELECT 1``; errors are logged and re-raised."""

    database = get_database(settings)
    try:
        await database.ping()
    except SQLAlchemyError:
        logger.warning(
            "db.readiness.failed",
            extra={"database_url": database.config.safe_url},
            exc_info=True,
        )
        raise


async def dispose_engine() -> None:
    """Close pooled connections held by the process engine."""

    if _DATABASE is not None:
        await _DATABASE.dispose()


def reset_database_state() -> None:
    """Forget the process ``Database`` and cached migration results (tests)."""

    global _DATABASE
    _DATABASE = None

    from .migrations import reset_migration_state

    reset_migration_state()
