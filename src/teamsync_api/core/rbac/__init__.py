from .registry import DEFAULT_ROLE_CATALOG, ROLE_PERMISSIONS, RoleCatalog, RoleDefinition
from .types import AccountProvider, Permission, RoleName

__all__ = [
    "DEFAULT_ROLE_CATALOG",
    "ROLE_PERMISSIONS",
    "AccountProvider",
    "Permission",
    "RoleCatalog",
    "RoleDefinition",
    "RoleName",
]
