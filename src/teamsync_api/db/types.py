"""Column types shared by the TeamSync models."""

from __future__ import annotations

import enum
import uuid
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import Enum as SAEnum
from sqlalchemy.types import CHAR, DateTime, TypeDecorator

__all__ = ["UTCDateTime", "UUIDType", "value_enum"]


class UUIDType(TypeDecorator[uuid.UUID]):
    """UUIDs stored as their 36-character canonical string."""

    impl = CHAR(36)
    cache_ok = True

    def process_bind_param(self, value: Any, dialect: Any) -> str | None:
        if value is None:
            return None
        return str(value if isinstance(value, uuid.UUID) else uuid.UUID(str(value)))

    def process_result_value(self, value: Any, dialect: Any) -> uuid.UUID | None:
        if value is None or isinstance(value, uuid.UUID):
            return value
        return uuid.UUID(value)


class UTCDateTime(TypeDecorator[datetime]):
    """Datetimes always written and read back as aware UTC values.

    SQLite keeps no offset, so naive values coming back are tagged UTC.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    @staticmethod
    def _as_utc(value: Any) -> Any:
        if not isinstance(value, datetime):
            return value
        return value.replace(tzinfo=UTC) if value.tzinfo is None else value.astimezone(UTC)

    def process_bind_param(self, value: Any, dialect: Any) -> Any:
        return self._as_utc(value)

    def process_result_value(self, value: Any, dialect: Any) -> Any:
        return self._as_utc(value)


def value_enum(enum_cls: type[enum.Enum], *, name: str, length: int = 32) -> SAEnum:
    """VARCHAR-backed Enum column persisting member *values* (not names)."""

    return SAEnum(
        enum_cls,
        name=name,
        native_enum=False,
        length=length,
        values_callable=lambda members: [member.value for member in members],
    )
