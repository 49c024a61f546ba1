"""Bootstrap configuration value."""

from __future__ import annotations

from dataclasses import dataclass, field

from teamsync_api.core.rbac.registry import DEFAULT_ROLE_CATALOG, RoleCatalog
from teamsync_api.settings import Settings


@dataclass(frozen=True)
class BootstrapConfig:
    """Everything the bootstrap pipeline needs, injected rather than hard-coded."""

    admin_email: str
    admin_name: str
    admin_password: str = field(repr=False)
    workspace_name: str
    workspace_description: str
    catalog: RoleCatalog = DEFAULT_ROLE_CATALOG

    def __post_init__(self) -> None:
        object.__setattr__(self, "admin_email", self.admin_email.strip().lower())

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        catalog: RoleCatalog | None = None,
    ) -> BootstrapConfig:
        return cls(
            admin_email=settings.bootstrap_admin_email,
            admin_name=settings.bootstrap_admin_name,
            admin_password=settings.bootstrap_admin_password.get_secret_value(),
            workspace_name=settings.bootstrap_workspace_name,
            workspace_description=settings.bootstrap_workspace_description,
            catalog=catalog if catalog is not None else DEFAULT_ROLE_CATALOG,
        )


__all__ = ["BootstrapConfig"]
