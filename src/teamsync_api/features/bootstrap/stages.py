"""Ordered stages of the bootstrap pipeline.

Every stage takes the outputs it depends on as explicit arguments, so the
admin identity chain reads top to bottom in ``provision_admin_identity``.
Store failures inside a stage surface as ``StoreUnavailableError`` tagged
with the stage name.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import ParamSpec, TypeVar

from sqlalchemy.exc import SQLAlchemyError

from teamsync_api.common.logging import log_context
from teamsync_api.common.time import utc_now
from teamsync_api.core.rbac.registry import RoleDefinition
from teamsync_api.core.rbac.types import AccountProvider, RoleName
from teamsync_api.models import Account, Member, Role, User, Workspace

from .config import BootstrapConfig
from .errors import MissingDependencyError, StoreUnavailableError
from .store import EntityStore

logger = logging.getLogger(__name__)

P = ParamSpec("P")
R = TypeVar("R")

ADMIN_IDENTITY_STAGES: tuple[str, ...] = (
    "create_admin_user",
    "create_admin_account",
    "create_admin_workspace",
    "resolve_owner_role",
    "create_owner_membership",
    "link_current_workspace",
)


def stage(name: str) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Tag a coroutine as a pipeline stage and translate store errors."""

    def decorator(fn: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        @functools.wraps(fn)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            try:
                return await fn(*args, **kwargs)
            except SQLAlchemyError as exc:
                raise StoreUnavailableError(
                    f"Store operation failed during {name}: {exc}",
                    stage=name,
                ) from exc

        wrapper.stage_name = name  # type: ignore[attr-defined]
        return wrapper

    return decorator


@dataclass(frozen=True)
class AdminIdentity:
    """Records created for the administrative identity, in creation order."""

    user: User
    account: Account
    workspace: Workspace
    member: Member


# ---------------------------------------------------------------------------
# Role reconciliation
# ---------------------------------------------------------------------------


@stage("reconcile_roles")
async def ensure_role(store: EntityStore, definition: RoleDefinition) -> tuple[Role, bool]:
    """Create the role if no record with its name exists; never update one."""

    existing = await store.roles.find_one(name=definition.name)
    if existing is not None:
        logger.info("bootstrap.role.ok", extra=log_context(role=definition.name))
        return existing, False

    role = await store.roles.create(
        name=definition.name,
        permissions=definition.sorted_permissions(),
    )
    logger.info(
        "bootstrap.role.created",
        extra=log_context(role=definition.name, permissions=len(definition.permissions)),
    )
    return role, True


# ---------------------------------------------------------------------------
# Administrative identity
# ---------------------------------------------------------------------------


@stage("find_admin_user")
async def find_admin_user(store: EntityStore, config: BootstrapConfig) -> User | None:
    return await store.users.find_one(email=config.admin_email)


@stage("create_admin_user")
async def create_admin_user(store: EntityStore, config: BootstrapConfig) -> User:
    user = await store.users.create(
        email=config.admin_email,
        name=config.admin_name,
        password=config.admin_password,
    )
    logger.info("bootstrap.admin.user.created", extra=log_context(user_id=user.id))
    return user


@stage("create_admin_account")
async def create_admin_account(
    store: EntityStore, config: BootstrapConfig, user: User
) -> Account:
    account = await store.accounts.create(
        user_id=user.id,
        provider=AccountProvider.EMAIL,
        provider_id=config.admin_email,
    )
    logger.info(
        "bootstrap.admin.account.created",
        extra=log_context(user_id=user.id, provider=account.provider),
    )
    return account


@stage("create_admin_workspace")
async def create_admin_workspace(
    store: EntityStore, config: BootstrapConfig, user: User
) -> Workspace:
    workspace = await store.workspaces.create(
        name=config.workspace_name,
        description=config.workspace_description,
        owner_id=user.id,
    )
    logger.info(
        "bootstrap.admin.workspace.created",
        extra=log_context(user_id=user.id, workspace_id=workspace.id),
    )
    return workspace


@stage("resolve_owner_role")
async def resolve_owner_role(store: EntityStore) -> Role:
    role = await store.roles.find_one(name=RoleName.OWNER)
    if role is None:
        raise MissingDependencyError(
            "OWNER role not found; role reconciliation did not create it",
            stage="resolve_owner_role",
        )
    return role


@stage("create_owner_membership")
async def create_owner_membership(
    store: EntityStore, user: User, workspace: Workspace, owner_role: Role
) -> Member:
    member = await store.members.create(
        user_id=user.id,
        workspace_id=workspace.id,
        role_id=owner_role.id,
        joined_at=utc_now(),
    )
    logger.info(
        "bootstrap.admin.member.created",
        extra=log_context(user_id=user.id, workspace_id=workspace.id, role=RoleName.OWNER),
    )
    return member


@stage("link_current_workspace")
async def link_current_workspace(store: EntityStore, user: User, workspace: Workspace) -> User:
    user.current_workspace_id = workspace.id
    return await store.users.save(user)


async def provision_admin_identity(store: EntityStore, config: BootstrapConfig) -> AdminIdentity:
    """Create the admin user and its dependent records, strictly in order.

    No rollback: if a later stage fails, the records created by earlier
    stages stay persisted.
    """

    user = await create_admin_user(store, config)
    account = await create_admin_account(store, config, user)
    workspace = await create_admin_workspace(store, config, user)
    owner_role = await resolve_owner_role(store)
    member = await create_owner_membership(store, user, workspace, owner_role)
    user = await link_current_workspace(store, user, workspace)
    return AdminIdentity(user=user, account=account, workspace=workspace, member=member)


# ---------------------------------------------------------------------------
# Read-only audit of an existing admin
# ---------------------------------------------------------------------------


@stage("audit_admin")
async def find_missing_admin_records(
    store: EntityStore, config: BootstrapConfig, user: User
) -> tuple[str, ...]:
    """Return the names of identity records an existing admin lacks."""

    missing: list[str] = []
    account = await store.accounts.find_one(
        user_id=user.id,
        provider=AccountProvider.EMAIL,
    )
    if account is None:
        missing.append("account")

    workspace = await store.workspaces.find_one(owner_id=user.id)
    if workspace is None:
        missing.append("workspace")
    else:
        member = await store.members.find_one(user_id=user.id, workspace_id=workspace.id)
        if member is None:
            missing.append("member")

    if user.current_workspace_id is None:
        missing.append("current_workspace")
    return tuple(missing)


__all__ = [
    "ADMIN_IDENTITY_STAGES",
    "AdminIdentity",
    "create_admin_account",
    "create_admin_user",
    "create_admin_workspace",
    "create_owner_membership",
    "ensure_role",
    "find_admin_user",
    "find_missing_admin_records",
    "link_current_workspace",
    "provision_admin_identity",
    "resolve_owner_role",
    "stage",
]
