"""FastAPI exception handlers: JSON ``{"detail": ...}`` bodies plus error logs."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from .logging import log_context

logger = logging.getLogger("teamsync_api.errors")


def _request_fields(request: Request) -> dict[str, Any]:
    return {"method": request.method, "path": request.url.path}


def _json_error(
    status_code: int, detail: Any, headers: dict[str, str] | None = None
) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": detail}, headers=headers)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Echo the HTTP error; 4xx are expected traffic and stay out of the logs."""

    if exc.status_code >= 500:
        logger.error(
            "http.error",
            extra=log_context(
                status_code=exc.status_code,
                detail=exc.detail,
                **_request_fields(request),
            ),
        )
    return _json_error(exc.status_code, exc.detail, getattr(exc, "headers", None))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "http.unhandled",
        extra=log_context(error=type(exc).__name__, **_request_fields(request)),
        exc_info=exc,
    )
    return _json_error(500, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    # fastapi.HTTPException subclasses Starlette's, so one registration covers both.
    app.add_exception_handler(HTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_exception_handler)


__all__ = [
    "http_exception_handler",
    "register_exception_handlers",
    "unhandled_exception_handler",
]
