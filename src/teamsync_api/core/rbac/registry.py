"""Canonical role catalog.

The catalog is an immutable value: the bootstrap pipeline receives it as an
argument, so tests and deployments can substitute their own.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass

from .types import Permission, RoleName


@dataclass(frozen=True)
class RoleDefinition:
    """Static role definition seeded at startup."""

    name: RoleName
    permissions: frozenset[Permission]

    def sorted_permissions(self) -> list[str]:
        return sorted(permission.value for permission in self.permissions)


@dataclass(frozen=True)
class RoleCatalog:
    """Ordered, immutable mapping of role name to permission set."""

    roles: tuple[RoleDefinition, ...]

    def __post_init__(self) -> None:
        seen: set[RoleName] = set()
        for definition in self.roles:
            if definition.name in seen:
                raise ValueError(f"Duplicate role in catalog: {definition.name.value}")
            seen.add(definition.name)

    @classmethod
    def from_mapping(
        cls, mapping: Mapping[RoleName | str, Iterable[Permission | str]]
    ) -> RoleCatalog:
        """Build a catalog from ``{role: permissions}``, keeping insertion order."""

        return cls(
            roles=tuple(
                RoleDefinition(
                    name=RoleName(name),
                    permissions=frozenset(Permission(item) for item in permissions),
                )
                for name, permissions in mapping.items()
            )
        )

    @property
    def names(self) -> tuple[RoleName, ...]:
        return tuple(definition.name for definition in self.roles)

    def get(self, name: RoleName | str) -> RoleDefinition | None:
        target = RoleName(name)
        for definition in self.roles:
            if definition.name is target:
                return definition
        return None

    def __contains__(self, name: object) -> bool:
        try:
            return self.get(name) is not None  # type: ignore[arg-type]
        except ValueError:
            return False

    def __iter__(self) -> Iterator[RoleDefinition]:
        return iter(self.roles)

    def __len__(self) -> int:
        return len(self.roles)


ROLE_PERMISSIONS: Mapping[RoleName, tuple[Permission, ...]] = {
    RoleName.OWNER: tuple(Permission),
    RoleName.ADMIN: (
        Permission.ADD_MEMBER,
        Permission.CREATE_PROJECT,
        Permission.EDIT_PROJECT,
        Permission.DELETE_PROJECT,
        Permission.CREATE_TASK,
        Permission.EDIT_TASK,
        Permission.DELETE_TASK,
        Permission.MANAGE_WORKSPACE_SETTINGS,
        Permission.VIEW_ONLY,
    ),
    RoleName.MEMBER: (
        Permission.CREATE_TASK,
        Permission.EDIT_TASK,
        Permission.VIEW_ONLY,
    ),
}

DEFAULT_ROLE_CATALOG = RoleCatalog.from_mapping(ROLE_PERMISSIONS)


__all__ = [
    "DEFAULT_ROLE_CATALOG",
    "ROLE_PERMISSIONS",
    "RoleCatalog",
    "RoleDefinition",
]
