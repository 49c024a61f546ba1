"""Startup seeding of the role catalog and the administrative identity."""

from .config import BootstrapConfig
from .errors import BootstrapError, MissingDependencyError, StoreUnavailableError
from .service import BootstrapReport, BootstrapService, BootstrapState, run_bootstrap
from .store import EntityStore

__all__ = [
    "BootstrapConfig",
    "BootstrapError",
    "BootstrapReport",
    "BootstrapService",
    "BootstrapState",
    "EntityStore",
    "MissingDependencyError",
    "StoreUnavailableError",
    "run_bootstrap",
]
