"""Database plumbing (engine, sessions, migrations, base classes, types)."""

from .base import NAMING_CONVENTION, Base, TimestampMixin, UUIDPrimaryKeyMixin, metadata
from .database import (
    Database,
    DatabaseConfig,
    check_database_ready,
    dispose_engine,
    get_database,
    get_sessionmaker,
    reset_database_state,
)
from .migrations import ensure_database_ready, run_migrations
from .types import UTCDateTime, UUIDType

__all__ = [
    "Base",
    "NAMING_CONVENTION",
    "metadata",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    "Database",
    "DatabaseConfig",
    "check_database_ready",
    "dispose_engine",
    "ensure_database_ready",
    "get_database",
    "get_sessionmaker",
    "reset_database_state",
    "run_migrations",
    "UTCDateTime",
    "UUIDType",
]
