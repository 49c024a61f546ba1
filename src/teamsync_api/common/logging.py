"""Process logging for the TeamSync API.

One console line per record::

    2025-11-27T02:57:00.302Z INFO  teamsync_api.features.bootstrap.stages [cid=-] bootstrap.role.created role=OWNER permissions=14

Fields passed through ``extra=`` are appended as ``key=value`` pairs, and the
request correlation ID (bound by ``RequestContextMiddleware``) fills ``cid``.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable
from contextvars import ContextVar
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from teamsync_api.settings import Settings

_correlation_id: ContextVar[str | None] = ContextVar("teamsync_correlation_id", default=None)

# Everything a bare LogRecord carries, plus attributes added by formatters,
# uvicorn and asyncio. Only the remaining attributes came from ``extra=``.
_RECORD_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {
    "message",
    "asctime",
    "correlation_id",
    "taskName",
    "color_message",
}

# Third-party loggers routed through the root handler.
_PROPAGATED_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "alembic", "sqlalchemy")


class ConsoleLogFormatter(logging.Formatter):
    """Single-line console formatter with trailing ``key=value`` extras."""

    def format(self, record: logging.LogRecord) -> str:
        record.message = record.getMessage()
        cid = getattr(record, "correlation_id", None) or _correlation_id.get() or "-"

        parts = [
            _utc_timestamp(record),
            f"{record.levelname:<5}",
            record.name,
            f"[cid={cid}]",
            record.message,
        ]
        parts.extend(f"{key}={_render(value)}" for key, value in _extras(record))
        line = " ".join(parts)

        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            line = f"{line}\n{record.exc_text}"
        if record.stack_info:
            line = f"{line}\n{self.formatStack(record.stack_info)}"
        return line


class _ConsoleHandler(logging.StreamHandler):
    """Marker type so repeated ``setup_logging`` calls can find their handler."""


def setup_logging(settings: Settings) -> None:
    """Install the console handler on the root logger (idempotent).

    The root level comes from ``TEAMSYNC_LOGGING_LEVEL``. SQL statement
    logging stays at WARNING unless ``TEAMSYNC_DATABASE_ECHO`` is on.
    """

    root = logging.getLogger()
    root.setLevel(settings.logging_level)

    if not any(isinstance(handler, _ConsoleHandler) for handler in root.handlers):
        handler = _ConsoleHandler(sys.stderr)
        handler.setFormatter(ConsoleLogFormatter())
        root.handlers = [handler]

    for name in _PROPAGATED_LOGGERS:
        third_party = logging.getLogger(name)
        third_party.handlers.clear()
        third_party.propagate = True
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.database_echo else logging.WARNING
    )


def bind_request_context(correlation_id: str | None) -> None:
    _correlation_id.set(correlation_id)


def clear_request_context() -> None:
    _correlation_id.set(None)


def log_context(
    *,
    user_id: Any = None,
    workspace_id: Any = None,
    role: Any = None,
    **extra: Any,
) -> dict[str, Any]:
    """Build an ``extra`` payload; identifiers are stringified, ``None`` dropped.

    Example:
        logger.info(
            "bootstrap.admin.workspace.created",
            extra=log_context(user_id=user.id, workspace_id=workspace.id),
        )
    """

    ctx: dict[str, Any] = {}
    if user_id is not None:
        ctx["user_id"] = str(user_id)
    if workspace_id is not None:
        ctx["workspace_id"] = str(workspace_id)
    if role is not None:
        ctx["role"] = role.value if isinstance(role, Enum) else str(role)
    ctx.update(extra)
    return ctx


def _utc_timestamp(record: logging.LogRecord) -> str:
    stamp = datetime.fromtimestamp(record.created, tz=UTC).strftime("%Y-%m-%dT%H:%M:%S")
    return f"{stamp}.{int(record.msecs):03d}Z"


def _extras(record: logging.LogRecord) -> Iterable[tuple[str, Any]]:
    for key, value in record.__dict__.items():
        if key not in _RECORD_ATTRS and not key.startswith("_"):
            yield key, value


def _render(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, (list, tuple, set, frozenset)):
        return ",".join(_render(item) for item in value)
    return str(value)


__all__ = [
    "ConsoleLogFormatter",
    "bind_request_context",
    "clear_request_context",
    "log_context",
    "setup_logging",
]
