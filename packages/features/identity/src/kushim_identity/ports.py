"""Identity ports (protocols).

These protocols define the collaborators the authentication components
consume. Applications inject implementations; the package ships in-memory
and SQLAlchemy adapters. All ports use @runtime_checkable for isinstance
checks.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from datetime import datetime

    from .audit.events import AuthAuditEvent, AuthEventType
    from .identity import Identity


# ═══════════════════════════════════════════════════════════════
# USER DIRECTORY PORT
# ═══════════════════════════════════════════════════════════════


@runtime_checkable
class IUserDirectory(Protocol):
    """Persistent store of identities and roles.

    Every identity returned carries its role; an implementation that cannot
    load the referenced role raises ``RoleResolutionError``.
    """

    async def get_by_email(self, email: str) -> Identity | None:
        """Look up an identity by exact email.

        Args:
            email: Email as stored (case-sensitive).

        Returns:
            The identity or None.
        """
        ...

    async def get_by_id(self, user_id: str) -> Identity | None:
        """Look up an identity by id.

        Args:
            user_id: Identity id.

        Returns:
            The identity or None.
        """
        ...

    async def create(
        self,
        *,
        email: str,
        credential_hash: str,
        role_name: str,
    ) -> Identity:
        """Create an identity with MFA disabled.

        Args:
            email: Unique email.
            credential_hash: Hasher output.
            role_name: Name of an existing role.

        Returns:
            The stored identity (version 1).

        Raises:
            IdentityExistsError: Email is already taken.
            RoleResolutionError: Role does not exist.
        """
        ...

    async def update_mfa_secret(self, user_id: str, secret: str) -> Identity:
        """Atomically replace the stored TOTP secret and clear ``mfa_enabled``.

        Last write wins. The account is pending again until the new secret
        is confirmed, and the version bump makes any ``enable_mfa`` based on
        an earlier read fail.

        Args:
            user_id: Identity id.
            secret: New base32 secret.

        Returns:
            The stored identity with its version incremented.

        Raises:
            IdentityNotFoundError: No identity with that id.
        """
        ...

    async def enable_mfa(self, user_id: str, *, expected_version: int) -> Identity:
        """Set ``mfa_enabled`` if the record is unchanged since it was read.

        Args:
            user_id: Identity id.
            expected_version: Version of the snapshot whose secret was
                verified.

        Returns:
            The stored identity with its version incremented.

        Raises:
            IdentityNotFoundError: No identity with that id.
            OptimisticConcurrencyError: The record changed since it was read
                (typically a re-enrollment replaced the secret).
        """
        ...

    async def update_credential_hash(
        self, user_id: str, credential_hash: str
    ) -> Identity:
        """Replace the stored password hash.

        Args:
            user_id: Identity id.
            credential_hash: Hasher output for the same password.

        Returns:
            The stored identity. The version is unchanged; it only
            tracks MFA state.

        Raises:
            IdentityNotFoundError: No identity with that id.
        """
        ...


# ═══════════════════════════════════════════════════════════════
# PRIMITIVE PORTS
# ═══════════════════════════════════════════════════════════════


@runtime_checkable
class IPasswordHasher(Protocol):
    """One-way hash and verify for stored credentials."""

    def hash(self, password: str) -> str:
        """Hash a plaintext password."""
        ...

    def verify(self, hashed_password: str, password: str) -> bool:
        """Check a plaintext password against a stored hash.

        Must return False (not raise) for malformed hashes.
        """
        ...


@runtime_checkable
class ITotpEngine(Protocol):
    """TOTP secret generation, provisioning and verification."""

    def generate_secret(self) -> str:
        """Return a fresh random base32 secret."""
        ...

    def provisioning_uri(self, secret: str, account_name: str) -> str:
        """Return the otpauth:// URI binding ``secret`` to an account."""
        ...

    def match(
        self, secret: str, code: str, for_time: datetime | None = None
    ) -> int | None:
        """Verify ``code`` within the configured clock-skew window.

        Returns:
            The matched time step, or None if the code is not valid.
        """
        ...


@runtime_checkable
class IQrRenderer(Protocol):
    """Encodes a provisioning URI as a scannable image."""

    def render(self, data: str) -> str:
        """Return the image as a data URL."""
        ...


@runtime_checkable
class IUsedCodeStore(Protocol):
    """Tracks consumed (user, time step) pairs to reject TOTP replay."""

    async def consume(self, user_id: str, time_step: int, ttl: int) -> bool:
        """Mark a time step used for a user.

        Args:
            user_id: Identity id.
            time_step: TOTP counter the code matched.
            ttl: Seconds after which the record can be forgotten.

        Returns:
            True if newly consumed, False if it was already used.
        """
        ...


# ═══════════════════════════════════════════════════════════════
# AUDIT STORE PORT
# ═══════════════════════════════════════════════════════════════


@runtime_checkable
class IAuthAuditStore(Protocol):
    """Protocol for persisting authentication audit events."""

    async def record(self, event: AuthAuditEvent) -> None:
        """Record an audit event."""
        ...

    async def get_events(
        self,
        principal_id: str,
        *,
        event_types: list[AuthEventType] | None = None,
        limit: int = 100,
    ) -> list[AuthAuditEvent]:
        """Get audit events for a principal, newest first."""
        ...


__all__: list[str] = [
    "IUserDirectory",
    "IPasswordHasher",
    "ITotpEngine",
    "IQrRenderer",
    "IUsedCodeStore",
    "IAuthAuditStore",
]
