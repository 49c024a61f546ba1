"""Startup sequencing: migrate, seed, then serve."""

from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path

import pytest
import pytest_asyncio
from asgi_lifespan import LifespanManager
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select

from teamsync_api.app.lifecycles import create_application_lifespan
from teamsync_api.core.rbac import DEFAULT_ROLE_CATALOG, AccountProvider
from teamsync_api.db import dispose_engine, get_sessionmaker, reset_database_state
from teamsync_api.features.bootstrap import BootstrapState, EntityStore, StoreUnavailableError
from teamsync_api.main import create_app
from teamsync_api.models import Member, Role, User
from teamsync_api.settings import Settings
from tests.utils import ADMIN_EMAIL

STARTUP_TIMEOUT = 30


@pytest_asyncio.fixture(autouse=True)
async def _reset_database_state() -> AsyncIterator[None]:
    yield
    await dispose_engine()
    reset_database_state()


async def test_app_serves_only_after_seeding(settings: Settings) -> None:
    app = create_app(settings)

    async with LifespanManager(app, startup_timeout=STARTUP_TIMEOUT) as manager:
        report = app.state.bootstrap_report
        assert report.state is BootstrapState.COMPLETE
        assert report.admin_created is True

        async with get_sessionmaker(settings)() as session:
            roles = await session.scalar(select(func.count()).select_from(Role))
            members = await session.scalar(select(func.count()).select_from(Member))
        assert roles == len(DEFAULT_ROLE_CATALOG)
        assert members == 1

        transport = ASGITransport(app=manager.app)
        async with AsyncClient(transport=transport, base_url="http://testserver") as client:
            response = await client.get("/")

    assert response.status_code == 200
    assert response.json() == {"message": "API is running", "version": settings.app_version}
    assert response.headers["X-Request-ID"]


async def test_restart_reuses_seeded_store(settings: Settings) -> None:
    async with LifespanManager(create_app(settings), startup_timeout=STARTUP_TIMEOUT):
        pass

    app = create_app(settings)
    async with LifespanManager(app, startup_timeout=STARTUP_TIMEOUT):
        report = app.state.bootstrap_report

    assert report.admin_created is False
    assert report.roles_created == ()


async def test_bootstrap_can_be_disabled(settings: Settings) -> None:
    disabled = settings.model_copy(update={"bootstrap_enabled": False})
    app = create_app(disabled)

    async with LifespanManager(app, startup_timeout=STARTUP_TIMEOUT):
        assert app.state.bootstrap_report is None
        async with get_sessionmaker(disabled)() as session:
            users = await session.scalar(select(func.count()).select_from(User))

    assert users == 0


async def test_unreachable_database_aborts_startup(tmp_path: Path) -> None:
    blocker = tmp_path / "not-a-directory"
    blocker.write_text("")
    settings = Settings(
        _env_file=None,
        database_dsn=f"sqlite+aiosqlite:///{blocker / 'teamsync.sqlite'}",
    )
    lifespan = create_application_lifespan(settings=settings)

    with pytest.raises(RuntimeError, match="Database is not reachable"):
        async with lifespan(FastAPI()):
            pytest.fail("startup must not reach the serving phase")


async def test_bootstrap_failure_aborts_startup(settings: Settings) -> None:
    app = create_app(settings.model_copy(update={"bootstrap_enabled": False}))
    async with LifespanManager(app, startup_timeout=STARTUP_TIMEOUT):
        async with get_sessionmaker(settings)() as session:
            store = EntityStore.for_session(session)
            squatter = await store.users.create(email="someone@else.com", name="Someone")
            await store.accounts.create(
                user_id=squatter.id,
                provider=AccountProvider.EMAIL,
                provider_id=ADMIN_EMAIL,
            )

    lifespan = create_application_lifespan(settings=settings)
    with pytest.raises(StoreUnavailableError) as exc_info:
        async with lifespan(FastAPI()):
            pytest.fail("startup must not reach the serving phase")

    assert exc_info.value.stage == "create_admin_account"


async def test_unknown_route_returns_json_404(settings: Settings) -> None:
    app = create_app(settings)

    async with LifespanManager(app, startup_timeout=STARTUP_TIMEOUT) as manager:
        transport = ASGITransport(app=manager.app)
        async with AsyncClient(transport=transport, base_url="http://testserver") as client:
            response = await client.get("/missing")

    assert response.status_code == 404
    assert response.json() == {"detail": "Not Found"}


async def test_in_memory_database_is_migrated_and_seeded() -> None:
    settings = Settings(
        _env_file=None,
        database_dsn="sqlite+aiosqlite:///:memory:",
        bootstrap_admin_email=ADMIN_EMAIL,
    )
    app = create_app(settings)

    async with LifespanManager(app, startup_timeout=STARTUP_TIMEOUT) as manager:
        report = app.state.bootstrap_report
        async with get_sessionmaker(settings)() as session:
            members = await session.scalar(select(func.count()).select_from(Member))

        transport = ASGITransport(app=manager.app)
        async with AsyncClient(transport=transport, base_url="http://testserver") as client:
            response = await client.get("/")

    assert report.admin_created is True
    assert members == 1
    assert response.status_code == 200


async def test_database_path_with_percent_sign_starts(tmp_path: Path) -> None:
    database_path = tmp_path / "100%" / "teamsync.sqlite"
    settings = Settings(
        _env_file=None,
        database_dsn=f"sqlite+aiosqlite:///{database_path}",
        bootstrap_admin_email=ADMIN_EMAIL,
    )
    app = create_app(settings)

    async with LifespanManager(app, startup_timeout=STARTUP_TIMEOUT):
        report = app.state.bootstrap_report

    assert report.admin_created is True
    assert database_path.exists()
