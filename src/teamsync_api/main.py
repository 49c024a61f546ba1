"""TeamSync FastAPI application entry point."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.routing import APIRoute

from .app.lifecycles import create_application_lifespan
from .common.exceptions import register_exception_handlers
from .common.logging import setup_logging
from .common.middleware import register_middleware
from .features.health.router import router as health_router
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)


def log_registered_routes(app: FastAPI) -> None:
    """Log one line per registered API route."""

    for route in app.routes:
        if not isinstance(route, APIRoute):
            continue
        logger.info(
            "api.route.registered",
            extra={"methods": sorted(route.methods), "path": route.path, "endpoint": route.name},
        )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Return a configured FastAPI application."""

    settings = settings or get_settings()
    setup_logging(settings)

    lifespan = create_application_lifespan(settings=settings)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.settings = settings

    register_exception_handlers(app)
    register_middleware(app, settings=settings)
    app.include_router(health_router)

    if not settings.is_production:
        log_registered_routes(app)
    return app


__all__ = [
    "create_app",
    "log_registered_routes",
]

app = create_app()
