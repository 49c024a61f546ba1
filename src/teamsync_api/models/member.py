"""Workspace membership model."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from teamsync_api.common.time import utc_now
from teamsync_api.db import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Member(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A user's seat in a workspace, under exactly one role."""

    __tablename__ = "members"
    __table_args__ = (UniqueConstraint("user_id", "workspace_id"),)

    user_id: Mapped[UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"))
    workspace_id: Mapped[UUID] = mapped_column(
        ForeignKey("workspaces.id", ondelete="CASCADE"), index=True
    )
    role_id: Mapped[UUID] = mapped_column(ForeignKey("roles.id", ondelete="RESTRICT"))
    joined_at: Mapped[datetime] = mapped_column(default=utc_now)


__all__ = ["Member"]
