"""HTTP middleware stack: CORS, signed-cookie sessions, request context."""

from __future__ import annotations

import logging
import time
from uuid import uuid4

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.datastructures import Headers, MutableHeaders
from starlette.middleware.sessions import SessionMiddleware
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from teamsync_api.settings import Settings

from .logging import bind_request_context, clear_request_context, log_context

logger = logging.getLogger("teamsync_api.request")

REQUEST_ID_HEADER = "X-Request-ID"
CORS_METHODS = ["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"]
CORS_HEADERS = ["Content-Type", "Authorization"]


class RequestContextMiddleware:
    """Bind a correlation ID per HTTP request and log its outcome.

    The ID is taken from ``X-Request-ID`` when the client sends one and is
    echoed back on the response.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        correlation_id = Headers(scope=scope).get(REQUEST_ID_HEADER) or uuid4().hex
        scope.setdefault("state", {})["correlation_id"] = correlation_id
        bind_request_context(correlation_id)

        status_code: int | None = None
        started = time.perf_counter()

        async def send_with_request_id(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
                MutableHeaders(scope=message)[REQUEST_ID_HEADER] = correlation_id
            await send(message)

        try:
            await self.app(scope, receive, send_with_request_id)
        finally:
            fields = log_context(
                method=scope["method"],
                path=scope["path"],
                status_code=status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            if status_code is None or status_code >= 500:
                logger.error("request.error", extra=fields)
            else:
                logger.info("request.complete", extra=fields)
            clear_request_context()


def register_middleware(app: FastAPI, settings: Settings) -> None:
    """Install middleware; Starlette runs the last-added one outermost."""

    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret.get_secret_value(),
        session_cookie=settings.session_cookie_name,
        max_age=settings.session_max_age,
        same_site=settings.session_same_site,
        https_only=settings.session_https_only,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_origin],
        allow_credentials=True,
        allow_methods=CORS_METHODS,
        allow_headers=CORS_HEADERS,
    )


__all__ = [
    "CORS_HEADERS",
    "CORS_METHODS",
    "REQUEST_ID_HEADER",
    "RequestContextMiddleware",
    "register_middleware",
]
