"""Bootstrap orchestrator: reconcile roles, then provision the admin identity."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from teamsync_api.common.logging import log_context
from teamsync_api.core.rbac.registry import RoleCatalog
from teamsync_api.core.rbac.types import RoleName
from teamsync_api.settings import Settings

from .config import BootstrapConfig
from .errors import BootstrapError
from .stages import (
    ensure_role,
    find_admin_user,
    find_missing_admin_records,
    provision_admin_identity,
)
from .store import EntityStore

logger = logging.getLogger(__name__)


class BootstrapState(str, enum.Enum):
    NOT_STARTED = "not_started"
    ROLES_RECONCILING = "roles_reconciling"
    ROLES_DONE = "roles_done"
    IDENTITY_PROVISIONING = "identity_provisioning"
    COMPLETE = "complete"
    FAILED = "failed"


@dataclass(frozen=True)
class BootstrapReport:
    """Outcome of a successful bootstrap run."""

    roles_created: tuple[RoleName, ...]
    roles_existing: tuple[RoleName, ...]
    admin_created: bool
    admin_user_id: UUID | None
    workspace_id: UUID | None
    state: BootstrapState = BootstrapState.COMPLETE


@dataclass(frozen=True)
class _RoleOutcome:
    created: tuple[RoleName, ...]
    existing: tuple[RoleName, ...]


@dataclass(frozen=True)
class _AdminOutcome:
    created: bool
    user_id: UUID | None
    workspace_id: UUID | None


class BootstrapService:
    """Run the seeding pipeline once against an entity store.

    A service instance is single-use: ``COMPLETE`` and ``FAILED`` are
    terminal. Restarts create a new instance and recompute everything from
    store contents.
    """

    def __init__(self, store: EntityStore, config: BootstrapConfig) -> None:
        self._store = store
        self._config = config
        self._state = BootstrapState.NOT_STARTED

    @property
    def state(self) -> BootstrapState:
        return self._state

    @property
    def catalog(self) -> RoleCatalog:
        return self._config.catalog

    def _transition(self, state: BootstrapState) -> None:
        logger.debug(
            "bootstrap.state",
            extra=log_context(previous=self._state, state=state),
        )
        self._state = state

    async def reconcile_roles(self) -> _RoleOutcome:
        """Create every catalog role that has no record yet, in catalog order."""

        created: list[RoleName] = []
        existing: list[RoleName] = []
        for definition in self.catalog:
            _, was_created = await ensure_role(self._store, definition)
            (created if was_created else existing).append(definition.name)
        return _RoleOutcome(created=tuple(created), existing=tuple(existing))

    async def provision_admin(self) -> _AdminOutcome:
        """Create the admin identity graph unless the admin user already exists."""

        config = self._config
        user = await find_admin_user(self._store, config)
        if user is not None:
            logger.warning(
                "bootstrap.admin.exists",
                extra=log_context(user_id=user.id, email=config.admin_email),
            )
            missing = await find_missing_admin_records(self._store, config, user)
            if missing:
                logger.warning(
                    "bootstrap.admin.incomplete",
                    extra=log_context(user_id=user.id, missing=missing),
                )
            return _AdminOutcome(
                created=False,
                user_id=user.id,
                workspace_id=user.current_workspace_id,
            )

        identity = await provision_admin_identity(self._store, config)
        logger.info(
            "bootstrap.admin.created",
            extra=log_context(
                user_id=identity.user.id,
                workspace_id=identity.workspace.id,
                email=config.admin_email,
            ),
        )
        return _AdminOutcome(
            created=True,
            user_id=identity.user.id,
            workspace_id=identity.workspace.id,
        )

    async def run(self) -> BootstrapReport:
        """Reconcile roles, then provision the admin. Failures are re-raised."""

        if self._state is not BootstrapState.NOT_STARTED:
            msg = f"Bootstrap already ran (state={self._state.value})"
            raise RuntimeError(msg)

        logger.info(
            "bootstrap.start",
            extra=log_context(roles=self.catalog.names, email=self._config.admin_email),
        )
        try:
            self._transition(BootstrapState.ROLES_RECONCILING)
            roles = await self.reconcile_roles()
            self._transition(BootstrapState.ROLES_DONE)

            self._transition(BootstrapState.IDENTITY_PROVISIONING)
            admin = await self.provision_admin()
        except Exception as exc:
            stage = exc.stage if isinstance(exc, BootstrapError) else None
            logger.error(
                "bootstrap.failed",
                extra=log_context(
                    state=self._state,
                    stage=stage,
                    error=type(exc).__name__,
                ),
                exc_info=True,
            )
            self._transition(BootstrapState.FAILED)
            raise

        self._transition(BootstrapState.COMPLETE)
        report = BootstrapReport(
            roles_created=roles.created,
            roles_existing=roles.existing,
            admin_created=admin.created,
            admin_user_id=admin.user_id,
            workspace_id=admin.workspace_id,
            state=self._state,
        )
        logger.info(
            "bootstrap.complete",
            extra=log_context(
                user_id=report.admin_user_id,
                workspace_id=report.workspace_id,
                roles_created=len(report.roles_created),
                admin_created=report.admin_created,
            ),
        )
        return report


async def run_bootstrap(
    session_factory: async_sessionmaker[AsyncSession],
    settings: Settings,
    *,
    catalog: RoleCatalog | None = None,
) -> BootstrapReport:
    """Seed roles and the admin identity using a fresh session."""

    config = BootstrapConfig.from_settings(settings, catalog=catalog)
    async with session_factory() as session:
        service = BootstrapService(EntityStore.for_session(session), config)
        return await service.run()


__all__ = [
    "BootstrapReport",
    "BootstrapService",
    "BootstrapState",
    "run_bootstrap",
]
