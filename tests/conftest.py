from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator, Iterator
from pathlib import Path

os.environ.setdefault("TEAMSYNC_TEST_FAST_HASH", "1")
os.environ.setdefault("TEAMSYNC_SESSION_SECRET", "test-session-secret")

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from teamsync_api.db import (
    dispose_engine,
    ensure_database_ready,
    get_sessionmaker,
    reset_database_state,
)
from teamsync_api.features.bootstrap import EntityStore
from teamsync_api.settings import Settings
from tests.utils import ADMIN_EMAIL, ADMIN_PASSWORD


def pytest_collection_modifyitems(config, items) -> None:
    for item in items:
        path_str = str(Path(str(item.fspath)))
        if "/tests/integration/" in path_str:
            item.add_marker(pytest.mark.integration)
        elif "/tests/unit/" in path_str:
            item.add_marker(pytest.mark.unit)


class CaptureHandler(logging.Handler):
    """Handler that stores log records for assertions."""

    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)

    def messages(self) -> list[str]:
        return [record.getMessage() for record in self.records]

    def find(self, message: str) -> list[logging.LogRecord]:
        return [record for record in self.records if record.getMessage() == message]


@pytest.fixture
def log_capture() -> Iterator[CaptureHandler]:
    handler = CaptureHandler()
    logger = logging.getLogger("teamsync_api")
    previous_level = logger.level
    logger.setLevel(logging.DEBUG)
    logger.addHandler(handler)
    try:
        yield handler
    finally:
        logger.removeHandler(handler)
        logger.setLevel(previous_level)


@pytest.fixture
def database_path(tmp_path: Path) -> Path:
    return tmp_path / "db" / "teamsync.sqlite"


@pytest.fixture
def settings(database_path: Path) -> Settings:
    return Settings(
        _env_file=None,
        database_dsn=f"sqlite+aiosqlite:///{database_path}",
        bootstrap_admin_email=ADMIN_EMAIL,
        bootstrap_admin_name="System Admin",
        bootstrap_admin_password=ADMIN_PASSWORD,
        bootstrap_workspace_name="Main Workspace",
        bootstrap_workspace_description="Seeded for tests",
    )


@pytest_asyncio.fixture
async def migrated_settings(settings: Settings) -> AsyncIterator[Settings]:
    await ensure_database_ready(settings)
    try:
        yield settings
    finally:
        await dispose_engine()
        reset_database_state()


@pytest.fixture
def session_factory(migrated_settings: Settings) -> async_sessionmaker[AsyncSession]:
    return get_sessionmaker(migrated_settings)


@pytest_asyncio.fixture
async def session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def store(session: AsyncSession) -> EntityStore:
    return EntityStore.for_session(session)
