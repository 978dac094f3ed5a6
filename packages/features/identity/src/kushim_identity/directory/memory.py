"""In-memory user directory for testing and development.

WARNING: state lives in the process. Use ``SQLAlchemyUserDirectory`` for
anything shared between workers.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

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

    from kushim_core.primitives.id_generator import IIDGenerator

_logger = logging.getLogger(__name__)


class InMemoryUserDirectory(IUserDirectory):
    """Dict-backed ``IUserDirectory``.

    Identities are stored with a role id and joined to the role table on
    read, so removing a role surfaces as ``RoleResolutionError`` the same
    way a broken foreign key would in a database.

    Example:
        ```python
        directory = InMemoryUserDirectory()
        identity = await directory.create(
            email="ada@example.com",
            credential_hash=hasher.hash("s3cret"),
            role_name="USER",
        )
        ```
    """

    def __init__(
        self,
        *,
        roles: Iterable[str] = SEEDED_ROLES,
        id_generator: IIDGenerator | None = None,
    ) -> None:
        self._ids = id_generator or UUID4Generator()
        self._roles: dict[str, Role] = {}
        self._records: dict[str, Identity] = {}
        self._email_index: dict[str, str] = {}
        for name in roles:
            self.add_role(name)

    # ── Roles ────────────────────────────────────────────────────

    def add_role(self, name: str) -> Role:
        """Create a role, or return the existing one with that name."""
        for role in self._roles.values():
            if role.name == name:
                return role
        role = Role(id=self._ids.next_id(), name=name)
        self._roles[role.id] = role
        return role

    def remove_role(self, name: str) -> None:
        """Drop a role without touching identities that reference it."""
        self._roles = {rid: r for rid, r in self._roles.items() if r.name != name}

    # ── Reads ────────────────────────────────────────────────────

    async def get_by_email(self, email: str) -> Identity | None:
        user_id = self._email_index.get(email)
        if user_id is None:
            return None
        return self._resolve(self._records[user_id])

    async def get_by_id(self, user_id: str) -> Identity | None:
        record = self._records.get(user_id)
        if record is None:
            return None
        return self._resolve(record)

    # ── Writes ───────────────────────────────────────────────────

    async def create(
        self,
        *,
        email: str,
        credential_hash: str,
        role_name: str,
    ) -> Identity:
        if email in self._email_index:
            raise IdentityExistsError()

        role = next((r for r in self._roles.values() if r.name == role_name), None)
        if role is None:
            raise RoleResolutionError(
                f"Role {role_name!r} does not exist", role_ref=role_name
            )

        identity = Identity(
            id=self._ids.next_id(),
            email=email,
            credential_hash=credential_hash,
            role=role,
            version=1,
        )
        self._records[identity.id] = identity
        self._email_index[email] = identity.id
        _logger.debug("Stored user %s", identity.id)
        return identity

    async def update_mfa_secret(self, user_id: str, secret: str) -> Identity:
        current = self._require(user_id)
        updated = current.with_pending_secret(secret)
        self._records[user_id] = updated
        return self._resolve(updated)

    async def enable_mfa(self, user_id: str, *, expected_version: int) -> Identity:
        current = self._require(user_id)
        if current.version != expected_version:
            raise OptimisticConcurrencyError("Identity", user_id, expected_version)

        updated = current.with_mfa_enabled()
        self._records[user_id] = updated
        return self._resolve(updated)

    async def update_credential_hash(
        self, user_id: str, credential_hash: str
    ) -> Identity:
        current = self._require(user_id)
        updated = current.replace(credential_hash=credential_hash)
        self._records[user_id] = updated
        return self._resolve(updated)

    # ── Helpers ──────────────────────────────────────────────────

    def _require(self, user_id: str) -> Identity:
        record = self._records.get(user_id)
        if record is None:
            raise IdentityNotFoundError()
        return record

    def _resolve(self, record: Identity) -> Identity:
        role = self._roles.get(record.role.id)
        if role is None:
            raise RoleResolutionError(
                f"Identity {record.id!r} references a missing role",
                role_ref=record.role.id,
            )
        if role == record.role:
            return record
        return Identity.model_validate({**record.model_dump(), "role": role})

    def clear(self) -> None:
        """Remove every identity; roles are kept. Useful for test cleanup."""
        self._records.clear()
        self._email_index.clear()


__all__: list[str] = ["InMemoryUserDirectory"]
