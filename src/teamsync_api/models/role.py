"""Role records seeded from the role catalog."""

from __future__ import annotations

from sqlalchemy import JSON
from sqlalchemy.orm import Mapped, mapped_column

from teamsync_api.core.rbac.types import Permission, RoleName
from teamsync_api.db import Base, TimestampMixin, UUIDPrimaryKeyMixin
from teamsync_api.db.types import value_enum


class Role(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Named permission bundle assignable to a workspace member."""

    __tablename__ = "roles"

    name: Mapped[RoleName] = mapped_column(value_enum(RoleName, name="role_name"), unique=True)
    # Sorted permission values; order carries no meaning.
    permissions: Mapped[list[str]] = mapped_column(JSON, default=list)

    @property
    def permission_set(self) -> frozenset[Permission]:
        return frozenset(Permission(value) for value in self.permissions or ())

    def __repr__(self) -> str:
        return f"Role(name={self.name.value!r}, permissions={len(self.permissions or ())})"


__all__ = ["Role"]
