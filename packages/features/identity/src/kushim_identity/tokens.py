"""Session token issuance and decoding.

Tokens are compact JWS (HMAC) built with joserfc. Two trust levels exist:
a full session token and a short-lived MFA challenge token; see
``kushim_identity.claims`` for their shapes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any, Callable, Union

from joserfc import jwt
from joserfc.errors import ExpiredTokenError as JoseExpiredTokenError
from joserfc.errors import JoseError
from joserfc.jwk import OctKey

from .claims import ChallengeClaims, FullClaims, SessionClaims, claims_from_payload
from .exceptions import (
    ChallengeTokenRejectedError,
    ExpiredTokenError,
    InvalidTokenError,
    RoleResolutionError,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .config import AuthConfig
    from .identity import PublicIdentity

_logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def extract_bearer_token(headers: Mapping[str, str]) -> str | None:
    """Extract Bearer token from Authorization header.

    Args:
        headers: HTTP headers mapping.

    Returns:
        Token string or None if not found.
    """
    auth_header = headers.get("Authorization") or headers.get("authorization")
    if not auth_header:
        return None

    parts = auth_header.split()
    if len(parts) != 2:
        return None

    scheme, token = parts
    if scheme.lower() != "bearer":
        return None

    return token


# ═══════════════════════════════════════════════════════════════
# LOGIN RESULTS
# ═══════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class AccessGrant:
    """A full session token and the identity it was issued for."""

    access_token: str
    user: PublicIdentity
    expires_in: int

    def to_dict(self) -> dict[str, Any]:
        return {"access_token": self.access_token, "user": self.user.to_dict()}


@dataclass(frozen=True)
class MfaChallenge:
    """A challenge token; exchanged for an ``AccessGrant`` after TOTP."""

    temp_token: str
    expires_in: int
    mfa_required: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {"mfaRequired": self.mfa_required, "temp_token": self.temp_token}


LoginResult = Union[AccessGrant, MfaChallenge]


# ═══════════════════════════════════════════════════════════════
# ISSUER
# ═══════════════════════════════════════════════════════════════


class TokenIssuer:
    """Mints and decodes session tokens.

    Example:
        ```python
        issuer = TokenIssuer(config)
        result = issuer.issue_login_result(identity)
        if isinstance(result, MfaChallenge):
            ...  # ask for a TOTP code

        claims = issuer.decode(token)
        if isinstance(claims, ChallengeClaims):
            ...  # only the MFA verification endpoint accepts this
        ```
    """

    def __init__(self, config: AuthConfig, *, clock: Clock | None = None) -> None:
        self.config = config
        self._clock = clock or utc_now
        self._key = OctKey.import_key(config.token_secret)
        self._header = {"alg": config.token_algorithm}

    def issue_login_result(self, identity: PublicIdentity) -> LoginResult:
        """Issue the token a password login earns.

        MFA-disabled identities get a full session immediately; MFA-enabled
        identities get only a challenge token.
        """
        if identity.mfa_enabled:
            return self.issue_challenge(identity)
        return self.issue_full_token(identity)

    def issue_full_token(self, identity: PublicIdentity) -> AccessGrant:
        """Issue a full session token.

        Raises:
            RoleResolutionError: The identity's role has no name. This is a
                data-integrity fault, not an authentication failure.
        """
        if not identity.role.name:
            raise RoleResolutionError(
                f"Identity {identity.id!r} has no resolvable role",
                role_ref=identity.role.id,
            )

        now = self._clock()
        ttl = self.config.access_token_ttl_seconds
        claims = FullClaims(
            subject=identity.id,
            email=identity.email,
            role=identity.role.name,
            issued_at=now,
            expires_at=now + timedelta(seconds=ttl),
        )
        _logger.debug("Issuing session token for user %s", identity.id)
        return AccessGrant(
            access_token=self._sign(claims.to_payload()),
            user=identity,
            expires_in=ttl,
        )

    def issue_challenge(self, identity: PublicIdentity) -> MfaChallenge:
        """Issue an MFA challenge token for an identity."""
        now = self._clock()
        ttl = self.config.challenge_token_ttl_seconds
        claims = ChallengeClaims(
            subject=identity.id,
            issued_at=now,
            expires_at=now + timedelta(seconds=ttl),
        )
        _logger.debug("Issuing MFA challenge token for user %s", identity.id)
        return MfaChallenge(temp_token=self._sign(claims.to_payload()), expires_in=ttl)

    def decode(self, token: str) -> SessionClaims:
        """Verify a token and return its claim variant.

        Raises:
            InvalidTokenError: Bad signature, malformed token or claims.
            ExpiredTokenError: The embedded lifetime has passed.
        """
        if not token:
            raise InvalidTokenError("Token is required")

        try:
            decoded = jwt.decode(
                token, self._key, algorithms=[self.config.token_algorithm]
            )
            registry = jwt.JWTClaimsRegistry(
                now=int(self._clock().timestamp()),
                sub={"essential": True},
                iat={"essential": True},
                exp={"essential": True},
            )
            registry.validate(decoded.claims)
        except JoseExpiredTokenError as e:
            raise ExpiredTokenError("Token has expired") from e
        except (JoseError, ValueError) as e:
            raise InvalidTokenError("Token is invalid") from e

        return claims_from_payload(decoded.claims)

    def require_full(self, token: str) -> FullClaims:
        """Decode a token that must be a full session token.

        Raises:
            ChallengeTokenRejectedError: The token is an MFA challenge.
        """
        claims = self.decode(token)
        if not isinstance(claims, FullClaims):
            raise ChallengeTokenRejectedError("MFA verification required")
        return claims

    def require_challenge(self, token: str) -> ChallengeClaims:
        """Decode a token that must be an MFA challenge token.

        Raises:
            ChallengeTokenRejectedError: The token is a full session token.
        """
        claims = self.decode(token)
        if not isinstance(claims, ChallengeClaims):
            raise ChallengeTokenRejectedError("MFA challenge token required")
        return claims

    def _sign(self, payload: dict[str, Any]) -> str:
        return jwt.encode(self._header, payload, self._key)


__all__: list[str] = [
    "AccessGrant",
    "MfaChallenge",
    "LoginResult",
    "TokenIssuer",
    "extract_bearer_token",
    "utc_now",
]
