"""Entity store used by the bootstrap pipeline.

Each repository exposes the three operations the pipeline relies on:
``find_one``, ``create`` and ``save``. Mutations commit immediately, so a
chain of creations is persisted step by step with no enclosing transaction.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Protocol, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from teamsync_api.core.security.hashing import hash_password
from teamsync_api.db import Base
from teamsync_api.models import Account, Member, Role, User, Workspace
from teamsync_api.models.user import normalise_email

ModelT = TypeVar("ModelT", bound=Base)


class EntityRepositoryProtocol(Protocol[ModelT]):
    async def find_one(self, **filters: Any) -> ModelT | None: ...

    async def create(self, **fields: Any) -> ModelT: ...

    async def save(self, entity: ModelT) -> ModelT: ...


class EntityRepository(Generic[ModelT]):
    """SQLAlchemy-backed find-one/create/save for a single model."""

    model: type[ModelT]

    def __init__(self, session: AsyncSession, model: type[ModelT] | None = None) -> None:
        self._session = session
        if model is not None:
            self.model = model

    @property
    def session(self) -> AsyncSession:
        return self._session

    async def find_one(self, **filters: Any) -> ModelT | None:
        stmt = select(self.model).filter_by(**filters).limit(1)
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError:
            await self._session.rollback()
            raise
        return result.scalar_one_or_none()

    async def create(self, **fields: Any) -> ModelT:
        entity = self.model(**fields)
        self._session.add(entity)
        return await self._commit(entity)

    async def save(self, entity: ModelT) -> ModelT:
        self._session.add(entity)
        return await self._commit(entity)

    async def _commit(self, entity: ModelT) -> ModelT:
        try:
            await self._session.commit()
        except SQLAlchemyError:
            await self._session.rollback()
            raise
        await self._session.refresh(entity)
        return entity


class RoleRepository(EntityRepository[Role]):
    model = Role


class UserRepository(EntityRepository[User]):
    """Users are looked up by normalised email and hashed on the write path."""

    model = User

    async def find_one(self, **filters: Any) -> User | None:
        if "email" in filters:
            filters["email"] = normalise_email(filters["email"])
        return await super().find_one(**filters)

    async def create(self, **fields: Any) -> User:
        password = fields.pop("password", None)
        if password is not None:
            fields["password_hash"] = hash_password(password)
        return await super().create(**fields)


class AccountRepository(EntityRepository[Account]):
    model = Account


class WorkspaceRepository(EntityRepository[Workspace]):
    model = Workspace


class MemberRepository(EntityRepository[Member]):
    model = Member


@dataclass
class EntityStore:
    """The five repositories the bootstrap pipeline reads and writes."""

    roles: EntityRepositoryProtocol[Role]
    users: EntityRepositoryProtocol[User]
    accounts: EntityRepositoryProtocol[Account]
    workspaces: EntityRepositoryProtocol[Workspace]
    members: EntityRepositoryProtocol[Member]

    @classmethod
    def for_session(cls, session: AsyncSession) -> EntityStore:
        return cls(
            roles=RoleRepository(session),
            users=UserRepository(session),
            accounts=AccountRepository(session),
            workspaces=WorkspaceRepository(session),
            members=MemberRepository(session),
        )


__all__ = [
    "AccountRepository",
    "EntityRepository",
    "EntityRepositoryProtocol",
    "EntityStore",
    "MemberRepository",
    "RoleRepository",
    "UserRepository",
    "WorkspaceRepository",
]
