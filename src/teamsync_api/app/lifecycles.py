"""FastAPI lifespan helpers for the TeamSync application."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.routing import Lifespan

from teamsync_api.common.logging import log_context
from teamsync_api.db import (
    DatabaseConfig,
    check_database_ready,
    dispose_engine,
    ensure_database_ready,
    get_sessionmaker,
)
from teamsync_api.features.bootstrap import run_bootstrap
from teamsync_api.settings import Settings

logger = logging.getLogger(__name__)


async def connect_database(settings: Settings) -> None:
    """Apply migrations and verify connectivity, or raise ``RuntimeError``."""

    safe_url = DatabaseConfig.from_settings(settings).safe_url
    logger.info("db.init.start", extra={"database_url": safe_url})
    try:
        await ensure_database_ready(settings)
        await check_database_ready(settings)
    except Exception as exc:
        logger.error(
            "db.connection.failed",
            extra={"database_url": safe_url},
            exc_info=True,
        )
        raise RuntimeError(
            "Database is not reachable. Verify TEAMSYNC_DATABASE_DSN and credentials."
        ) from exc
    logger.info("db.init.complete", extra={"database_url": safe_url})


def create_application_lifespan(
    *,
    settings: Settings,
) -> Lifespan[FastAPI]:
    """Return the lifespan handler: connect, seed, then serve.

    Any exception raised before ``yield`` aborts startup, so the server never
    binds its socket against an unreachable or unseeded database.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.settings = settings
        logger.info(
            "teamsync_api.startup",
            extra=log_context(
                environment=settings.environment,
                logging_level=settings.logging_level,
                version=settings.app_version,
            ),
        )

        try:
            await connect_database(settings)
            session_factory = get_sessionmaker(settings)
            app.state.session_factory = session_factory

            if settings.bootstrap_enabled:
                app.state.bootstrap_report = await run_bootstrap(session_factory, settings)
            else:
                app.state.bootstrap_report = None
                logger.warning("bootstrap.disabled", extra=log_context(bootstrap_enabled=False))

            yield
        finally:
            await dispose_engine()
            logger.info("teamsync_api.shutdown")

    return lifespan


__all__ = ["connect_database", "create_application_lifespan"]
