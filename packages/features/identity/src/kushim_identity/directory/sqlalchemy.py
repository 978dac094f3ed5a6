"""SQLAlchemy (async) user directory.

Tables:
    roles: id, name (unique)
    users: id, email (unique), password, role_id, mfa_enabled, mfa_secret,
        version

Usage:
    ```python
    engine = create_async_engine("postgresql+asyncpg://...")
    async with engine.begin() as conn:
        await conn.run_sync(IdentityBase.metadata.create_all)

    directory = SQLAlchemyUserDirectory(async_sessionmaker(engine))
    await directory.seed_roles()
    ```
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import Boolean, ForeignKey, Integer, String, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from kushim_core.primitives.exceptions import OptimisticConcurrencyError
from kushim_core.primitives.id_generator import UUID4Generator

from ..exceptions import (
    IdentityExistsError,
    IdentityNotFoundError,
    RoleResolutionError,
)
from ..identity import SEEDED_ROLES, Identity, Role
from ..ports import IUserDirectory

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from kushim_core.primitives.id_generator import IIDGenerator

_logger = logging.getLogger(__name__)


class IdentityBase(DeclarativeBase):
    """Declarative base for the directory tables."""


class RoleModel(IdentityBase):
    __tablename__ = "roles"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, unique=True)


class UserModel(IdentityBase):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    email: Mapped[str] = mapped_column(String, unique=True, index=True)
    password: Mapped[str] = mapped_column(String)
    # No FK constraint enforcement is assumed; a dangling role_id is read
    # back as RoleResolutionError.
    role_id: Mapped[str] = mapped_column(String, ForeignKey("roles.id"))
    mfa_enabled: Mapped[bool] = mapped_column(Boolean, default=False)
    mfa_secret: Mapped[str | None] = mapped_column(String, nullable=True)
    version: Mapped[int] = mapped_column(Integer, default=1)


class SQLAlchemyUserDirectory(IUserDirectory):
    """``IUserDirectory`` over an async SQLAlchemy session factory.

    Each call runs in its own session and transaction. ``update_mfa_secret``
    is a single ``UPDATE`` of the secret column; ``enable_mfa`` is an
    ``UPDATE ... WHERE version = :expected`` and raises
    ``OptimisticConcurrencyError`` when no row matches.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        id_generator: IIDGenerator | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._ids = id_generator or UUID4Generator()

    # ── Roles ────────────────────────────────────────────────────

    async def seed_roles(self, names: Iterable[str] = SEEDED_ROLES) -> list[Role]:
        """Insert any missing roles and return all requested ones."""
        roles: list[Role] = []
        async with self._session_factory() as session, session.begin():
            for name in names:
                model = await session.scalar(
                    select(RoleModel).where(RoleModel.name == name)
                )
                if model is None:
                    model = RoleModel(id=self._ids.next_id(), name=name)
                    session.add(model)
                roles.append(Role(id=model.id, name=model.name))
        return roles

    # ── Reads ────────────────────────────────────────────────────

    async def get_by_email(self, email: str) -> Identity | None:
        return await self._fetch_one(UserModel.email == email)

    async def get_by_id(self, user_id: str) -> Identity | None:
        return await self._fetch_one(UserModel.id == user_id)

    async def _fetch_one(self, criterion: Any) -> Identity | None:
        stmt = (
            select(UserModel, RoleModel)
            .outerjoin(RoleModel, UserModel.role_id == RoleModel.id)
            .where(criterion)
        )
        async with self._session_factory() as session:
            row = (await session.execute(stmt)).first()
        if row is None:
            return None
        user, role = row
        return self._to_identity(user, role)

    # ── Writes ───────────────────────────────────────────────────

    async def create(
        self,
        *,
        email: str,
        credential_hash: str,
        role_name: str,
    ) -> Identity:
        user_id = self._ids.next_id()
        try:
            async with self._session_factory() as session, session.begin():
                role = await session.scalar(
                    select(RoleModel).where(RoleModel.name == role_name)
                )
                if role is None:
                    raise RoleResolutionError(
                        f"Role {role_name!r} does not exist", role_ref=role_name
                    )
                user = UserModel(
                    id=user_id,
                    email=email,
                    password=credential_hash,
                    role_id=role.id,
                    mfa_enabled=False,
                    mfa_secret=None,
                    version=1,
                )
                session.add(user)
                identity = self._to_identity(user, role)
        except IntegrityError as e:
            raise IdentityExistsError() from e

        _logger.debug("Stored user %s", user_id)
        return identity

    async def update_mfa_secret(self, user_id: str, secret: str) -> Identity:
        stmt = (
            update(UserModel)
            .where(UserModel.id == user_id)
            .values(
                mfa_secret=secret,
                mfa_enabled=False,
                version=UserModel.version + 1,
            )
        )
        async with self._session_factory() as session, session.begin():
            result = await session.execute(stmt)
            if result.rowcount == 0:
                raise IdentityNotFoundError()
        return await self._require(user_id)

    async def enable_mfa(self, user_id: str, *, expected_version: int) -> Identity:
        stmt = (
            update(UserModel)
            .where(
                UserModel.id == user_id,
                UserModel.version == expected_version,
                UserModel.mfa_secret.is_not(None),
            )
            .values(mfa_enabled=True, version=UserModel.version + 1)
        )
        async with self._session_factory() as session, session.begin():
            result = await session.execute(stmt)
            if result.rowcount == 0:
                exists = await session.scalar(
                    select(UserModel.id).where(UserModel.id == user_id)
                )
                if exists is None:
                    raise IdentityNotFoundError()
                raise OptimisticConcurrencyError("Identity", user_id, expected_version)
        return await self._require(user_id)

    async def update_credential_hash(
        self, user_id: str, credential_hash: str
    ) -> Identity:
        stmt = (
            update(UserModel)
            .where(UserModel.id == user_id)
            .values(password=credential_hash)
        )
        async with self._session_factory() as session, session.begin():
            result = await session.execute(stmt)
            if result.rowcount == 0:
                raise IdentityNotFoundError()
        return await self._require(user_id)

    # ── Helpers ──────────────────────────────────────────────────

    async def _require(self, user_id: str) -> Identity:
        identity = await self.get_by_id(user_id)
        if identity is None:
            raise IdentityNotFoundError()
        return identity

    @staticmethod
    def _to_identity(user: UserModel, role: RoleModel | None) -> Identity:
        if role is None:
            raise RoleResolutionError(
                f"Identity {user.id!r} references a missing role",
                role_ref=user.role_id,
            )
        return Identity(
            id=user.id,
            email=user.email,
            credential_hash=user.password,
            role=Role(id=role.id, name=role.name),
            mfa_enabled=user.mfa_enabled,
            mfa_secret=user.mfa_secret,
            version=user.version,
        )


__all__: list[str] = [
    "IdentityBase",
    "RoleModel",
    "UserModel",
    "SQLAlchemyUserDirectory",
]
