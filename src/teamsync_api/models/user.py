"""User identity model."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, validates

from teamsync_api.db import Base, TimestampMixin, UUIDPrimaryKeyMixin


def normalise_email(value: str) -> str:
    cleaned = value.strip().lower()
    if not cleaned:
        raise ValueError("Email must not be empty")
    return cleaned


class User(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A person who can sign in and belong to workspaces."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(320), unique=True)
    name: Mapped[str] = mapped_column(String(255))
    password_hash: Mapped[str | None] = mapped_column(String(255))
    # Assigned after the owned workspace exists (users <-> workspaces cycle).
    current_workspace_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("workspaces.id", ondelete="SET NULL", use_alter=True)
    )

    @validates("email")
    def _normalise_email(self, _key: str, value: str) -> str:
        return normalise_email(value)

    @validates("name")
    def _trim_name(self, _key: str, value: str) -> str:
        return value.strip()[:255]


__all__ = ["User", "normalise_email"]
