"""Identity records as seen by the authentication subsystem.

``Identity`` is the full stored record, credential hash included. It never
leaves the subsystem: everything returned to callers is a
``PublicIdentity``.
"""

from __future__ import annotations

from typing import Any

from pydantic import model_validator

from kushim_core.domain import ValueObject
from kushim_core.primitives.exceptions import InvariantViolationError

DEFAULT_ROLE = "USER"
SEEDED_ROLES: tuple[str, ...] = ("ADMIN", "USER")


class Role(ValueObject):
    """Role referenced by an identity; ``name`` populates the role claim."""

    id: str
    name: str


class PublicIdentity(ValueObject):
    """Identity with credential material stripped."""

    id: str
    email: str
    role: Role
    mfa_enabled: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Response shape used inside login results."""
        return {"id": self.id, "email": self.email, "mfaEnabled": self.mfa_enabled}


class Identity(ValueObject):
    """A user account.

    Attributes:
        id: Opaque, immutable identifier.
        email: Unique lookup key, case-sensitive as stored.
        credential_hash: Output of the password hasher. Social accounts
            hold the hash of a random placeholder.
        role: Required role reference.
        mfa_enabled: Whether login requires a TOTP code.
        mfa_secret: Base32 TOTP seed, present while enrollment is pending
            or confirmed.
        version: Optimistic-concurrency counter owned by the directory.

    Invariant:
        ``mfa_enabled`` implies a non-empty ``mfa_secret``. A secret without
        ``mfa_enabled`` is a pending enrollment.
    """

    id: str
    email: str
    credential_hash: str
    role: Role
    mfa_enabled: bool = False
    mfa_secret: str | None = None
    version: int = 0

    @model_validator(mode="after")
    def _check_mfa_invariant(self) -> Identity:
        if self.mfa_enabled and not self.mfa_secret:
            raise InvariantViolationError(
                f"Identity {self.id!r} has MFA enabled without a secret"
            )
        return self

    @property
    def mfa_pending(self) -> bool:
        return bool(self.mfa_secret) and not self.mfa_enabled

    def to_public(self) -> PublicIdentity:
        return PublicIdentity(
            id=self.id,
            email=self.email,
            role=self.role,
            mfa_enabled=self.mfa_enabled,
        )

    def with_pending_secret(self, secret: str) -> Identity:
        """Copy with a new, unconfirmed TOTP secret and MFA switched off."""
        return self.replace(
            mfa_secret=secret, mfa_enabled=False, version=self.version + 1
        )

    def with_mfa_enabled(self) -> Identity:
        """Copy with MFA switched on. Requires a stored secret."""
        return self.replace(mfa_enabled=True, version=self.version + 1)


class MfaStatus(ValueObject):
    """MFA state of an identity as reported to its owner."""

    enabled: bool
    pending: bool

    def to_dict(self) -> dict[str, Any]:
        return {"mfaEnabled": self.enabled, "mfaPending": self.pending}


__all__: list[str] = [
    "DEFAULT_ROLE",
    "SEEDED_ROLES",
    "Identity",
    "MfaStatus",
    "PublicIdentity",
    "Role",
]
