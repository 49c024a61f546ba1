"""Authentication-provider bindings for users."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from teamsync_api.core.rbac.types import AccountProvider
from teamsync_api.db import Base, TimestampMixin, UUIDPrimaryKeyMixin
from teamsync_api.db.types import value_enum


class Account(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """One way a user signs in: email/password or an external provider."""

    __tablename__ = "accounts"
    __table_args__ = (UniqueConstraint("provider", "provider_id"),)

    user_id: Mapped[UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    provider: Mapped[AccountProvider] = mapped_column(
        value_enum(AccountProvider, name="account_provider")
    )
    provider_id: Mapped[str] = mapped_column(String(320))


__all__ = ["Account"]
