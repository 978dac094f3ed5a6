"""Session claim sets.

A signed token carries exactly one of two claim shapes:

- ``FullClaims``: ``{"sub", "email", "role"}``, a complete session.
- ``ChallengeClaims``: ``{"sub", "isMfaChallenge": true}``, proof that the
  password was valid and nothing more.

``SessionClaims`` is the union of the two. Consumers dispatch on the type
(``isinstance``) and must reject ``ChallengeClaims`` everywhere except the
MFA verification endpoint.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Union

from .exceptions import InvalidTokenError

MFA_CHALLENGE_CLAIM = "isMfaChallenge"


@dataclass(frozen=True)
class FullClaims:
    """Claims of a full session token."""

    subject: str
    email: str
    role: str
    issued_at: datetime
    expires_at: datetime

    def to_payload(self) -> dict[str, Any]:
        return {
            "sub": self.subject,
            "email": self.email,
            "role": self.role,
            "iat": int(self.issued_at.timestamp()),
            "exp": int(self.expires_at.timestamp()),
        }


@dataclass(frozen=True)
class ChallengeClaims:
    """Claims of an MFA challenge token. Never carries email or role."""

    subject: str
    issued_at: datetime
    expires_at: datetime

    def to_payload(self) -> dict[str, Any]:
        return {
            "sub": self.subject,
            MFA_CHALLENGE_CLAIM: True,
            "iat": int(self.issued_at.timestamp()),
            "exp": int(self.expires_at.timestamp()),
        }


SessionClaims = Union[FullClaims, ChallengeClaims]


def claims_from_payload(payload: dict[str, Any]) -> SessionClaims:
    """Rebuild the claim variant from a verified token payload.

    Args:
        payload: Claims of a token whose signature and expiry were checked.

    Returns:
        ``ChallengeClaims`` if the challenge marker is present, otherwise
        ``FullClaims``.

    Raises:
        InvalidTokenError: The payload matches neither shape.
    """
    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject:
        raise InvalidTokenError("Token has no subject")

    issued_at = _timestamp(payload, "iat")
    expires_at = _timestamp(payload, "exp")

    if MFA_CHALLENGE_CLAIM in payload:
        if payload[MFA_CHALLENGE_CLAIM] is not True:
            raise InvalidTokenError("Malformed challenge marker")
        if "email" in payload or "role" in payload:
            raise InvalidTokenError("Challenge token carries session claims")
        return ChallengeClaims(
            subject=subject, issued_at=issued_at, expires_at=expires_at
        )

    email = payload.get("email")
    role = payload.get("role")
    if not isinstance(email, str) or not isinstance(role, str) or not role:
        raise InvalidTokenError("Session token is missing email or role")
    return FullClaims(
        subject=subject,
        email=email,
        role=role,
        issued_at=issued_at,
        expires_at=expires_at,
    )


def _timestamp(payload: dict[str, Any], name: str) -> datetime:
    value = payload.get(name)
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidTokenError(f"Token claim '{name}' is missing or invalid")
    return datetime.fromtimestamp(value, tz=timezone.utc)


__all__: list[str] = [
    "MFA_CHALLENGE_CLAIM",
    "FullClaims",
    "ChallengeClaims",
    "SessionClaims",
    "claims_from_payload",
]
