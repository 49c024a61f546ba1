"""Workspace (tenant) model."""

from __future__ import annotations

import secrets
from uuid import UUID

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from teamsync_api.db import Base, TimestampMixin, UUIDPrimaryKeyMixin

INVITE_CODE_LENGTH = 10
# No 0/O/1/l/I so codes survive being read aloud.
_INVITE_ALPHABET = "23456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"


def generate_invite_code(length: int = INVITE_CODE_LENGTH) -> str:
    return "".join(secrets.choice(_INVITE_ALPHABET) for _ in range(length))


class Workspace(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Container scoping projects, tasks, and members."""

    __tablename__ = "workspaces"

    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text)
    owner_id: Mapped[UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    invite_code: Mapped[str] = mapped_column(String(32), unique=True, default=generate_invite_code)


__all__ = ["INVITE_CODE_LENGTH", "Workspace", "generate_invite_code"]
