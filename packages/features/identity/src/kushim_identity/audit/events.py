"""Audit events for authentication operations.

Events carry identity ids, never emails, codes, secrets or tokens. A
failure event names the ``AuthErrorKind`` the caller received, so the
audit trail and the API response always agree.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from ..result import AuthErrorKind


class AuthEventType(Enum):
    """Types of authentication audit events.

    Event naming follows the pattern: `auth.<resource>.<action>`
    """

    # Login events
    LOGIN_SUCCESS = "auth.login.success"
    LOGIN_FAILED = "auth.login.failed"
    LOGIN_CHALLENGED = "auth.login.challenged"

    # MFA events
    MFA_ENROLLMENT_STARTED = "auth.mfa.enrollment_started"
    MFA_ENABLED = "auth.mfa.enabled"
    MFA_VERIFIED = "auth.mfa.verified"
    MFA_FAILED = "auth.mfa.failed"

    # User events
    USER_CREATED = "auth.user.created"
    SOCIAL_LINKED = "auth.social.linked"

    @property
    def is_failure(self) -> bool:
        return self in (AuthEventType.LOGIN_FAILED, AuthEventType.MFA_FAILED)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class AuthAuditEvent:
    """Authentication audit event.

    Attributes:
        event_type: What happened.
        principal_id: Identity id, when one is known. Password login
            failures leave it empty so unknown emails and wrong passwords
            are recorded identically.
        provider: Login path (``password``, ``totp`` or a social provider).
        error: Failure kind. Set exactly when ``event_type`` is a failure.
        metadata: Event-specific extras.
        timestamp: When the event occurred (UTC).
    """

    event_type: AuthEventType
    principal_id: str | None = None
    provider: str = "password"
    error: AuthErrorKind | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=_utc_now)

    def __post_init__(self) -> None:
        if self.event_type.is_failure != (self.error is not None):
            raise ValueError(
                f"{self.event_type.value} events "
                f"{'require' if self.event_type.is_failure else 'cannot carry'} "
                "an error kind"
            )

    @property
    def success(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_type": self.event_type.value,
            "principal_id": self.principal_id,
            "provider": self.provider,
            "success": self.success,
            "error_code": self.error.value if self.error else None,
            "metadata": dict(self.metadata),
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AuthAuditEvent:
        """Rebuild an event written by ``to_dict``.

        Naive timestamps are taken as UTC.

        Raises:
            ValueError: Missing or unknown ``event_type`` or ``error_code``.
        """
        if "event_type" not in data:
            raise ValueError("Missing required 'event_type'")
        try:
            event_type = AuthEventType(data["event_type"])
        except ValueError as e:
            raise ValueError(f"Invalid event_type: {data['event_type']}") from e

        error_code = data.get("error_code")
        timestamp = data.get("timestamp")
        if timestamp is None:
            timestamp = _utc_now()
        elif isinstance(timestamp, str):
            timestamp = datetime.fromisoformat(timestamp)
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)

        return cls(
            event_type=event_type,
            principal_id=data.get("principal_id"),
            provider=data.get("provider", "password"),
            error=AuthErrorKind(error_code) if error_code else None,
            metadata=dict(data.get("metadata") or {}),
            timestamp=timestamp,
        )


# ═══════════════════════════════════════════════════════════════
# EVENT FACTORY FUNCTIONS
# ═══════════════════════════════════════════════════════════════


def login_success_event(
    principal_id: str,
    provider: str = "password",
    *,
    metadata: dict[str, Any] | None = None,
) -> AuthAuditEvent:
    """A full session was issued."""
    return AuthAuditEvent(
        AuthEventType.LOGIN_SUCCESS, principal_id, provider, metadata=metadata or {}
    )


def login_challenged_event(
    principal_id: str, provider: str = "password"
) -> AuthAuditEvent:
    """Credentials were accepted but only an MFA challenge was issued."""
    return AuthAuditEvent(AuthEventType.LOGIN_CHALLENGED, principal_id, provider)


def login_failed_event(provider: str = "password") -> AuthAuditEvent:
    return AuthAuditEvent(
        AuthEventType.LOGIN_FAILED,
        provider=provider,
        error=AuthErrorKind.UNAUTHORIZED,
    )


def mfa_enrollment_started_event(principal_id: str) -> AuthAuditEvent:
    return AuthAuditEvent(AuthEventType.MFA_ENROLLMENT_STARTED, principal_id, "totp")


def mfa_enabled_event(principal_id: str) -> AuthAuditEvent:
    return AuthAuditEvent(AuthEventType.MFA_ENABLED, principal_id, "totp")


def mfa_verified_event(principal_id: str) -> AuthAuditEvent:
    """A TOTP code was accepted at login."""
    return AuthAuditEvent(AuthEventType.MFA_VERIFIED, principal_id, "totp")


def mfa_failed_event(principal_id: str, error: AuthErrorKind) -> AuthAuditEvent:
    return AuthAuditEvent(AuthEventType.MFA_FAILED, principal_id, "totp", error=error)


def user_created_event(principal_id: str, provider: str = "password") -> AuthAuditEvent:
    return AuthAuditEvent(AuthEventType.USER_CREATED, principal_id, provider)


def social_linked_event(
    principal_id: str, provider: str, *, created: bool
) -> AuthAuditEvent:
    """A social callback was resolved to a local identity."""
    return AuthAuditEvent(
        AuthEventType.SOCIAL_LINKED,
        principal_id,
        provider,
        metadata={"created": created},
    )


__all__: list[str] = [
    "AuthEventType",
    "AuthAuditEvent",
    "login_success_event",
    "login_challenged_event",
    "login_failed_event",
    "mfa_enrollment_started_event",
    "mfa_enabled_event",
    "mfa_verified_event",
    "mfa_failed_event",
    "user_created_event",
    "social_linked_event",
]
