"""Identity-related domain exceptions.

All identity errors inherit from IdentityError which extends DomainError
from kushim_core, ensuring proper exception hierarchy.

Messages are safe to surface to clients: they never reveal whether an
account exists, and never carry hashes, secrets, or submitted codes.
"""

from __future__ import annotations

from kushim_core.primitives.exceptions import DomainError, NotFoundError

# ═══════════════════════════════════════════════════════════════
# BASE IDENTITY ERROR
# ═══════════════════════════════════════════════════════════════


class IdentityError(DomainError):
    """Base class for all identity-related domain errors."""


# ═══════════════════════════════════════════════════════════════
# AUTHENTICATION ERRORS
# ═══════════════════════════════════════════════════════════════


class AuthenticationError(IdentityError):
    """Raised when authentication fails.

    This is the base exception for all authentication failures.
    Use more specific exceptions when possible.
    """


class UnauthorizedError(AuthenticationError):
    """Raised when email/password credentials are rejected.

    Covers both an unknown email and a wrong password; the two are
    deliberately indistinguishable.
    """

    def __init__(self, message: str = "Invalid credentials") -> None:
        super().__init__(message)


class InvalidTokenError(AuthenticationError):
    """Raised when a session token is invalid or malformed.

    Examples:
        - JWT signature verification failed
        - Token format is incorrect
        - Claim set matches neither the full nor the challenge shape
    """


class ExpiredTokenError(AuthenticationError):
    """Raised when a session or challenge token has expired."""


class ChallengeTokenRejectedError(AuthenticationError):
    """Raised when an MFA challenge token is presented where a full
    session is required (or a full token where a challenge is required)."""


# ═══════════════════════════════════════════════════════════════
# MFA ERRORS
# ═══════════════════════════════════════════════════════════════


class MfaError(IdentityError):
    """Base class for MFA-related errors."""


class InvalidCodeError(MfaError):
    """Raised when a TOTP code does not match the stored secret,
    or was already consumed in its time step."""

    def __init__(self, message: str = "Invalid TOTP code") -> None:
        super().__init__(message)


class MfaNotPendingError(MfaError):
    """Raised when enrollment confirmation is attempted with no stored secret."""

    def __init__(self, message: str = "MFA enrollment has not been started") -> None:
        super().__init__(message)


class MfaNotEnabledError(MfaError):
    """Raised when login verification is attempted without enabled MFA."""

    def __init__(self, message: str = "MFA is not enabled for this user") -> None:
        super().__init__(message)


# ═══════════════════════════════════════════════════════════════
# DIRECTORY ERRORS
# ═══════════════════════════════════════════════════════════════


class IdentityNotFoundError(IdentityError, NotFoundError):
    """Raised when a user id does not resolve to an identity."""

    def __init__(self, message: str = "User not found") -> None:
        super().__init__(message)


class IdentityExistsError(IdentityError):
    """Raised when creating an identity whose email is already taken."""

    def __init__(self, message: str = "User already exists") -> None:
        super().__init__(message)


class RoleResolutionError(IdentityError):
    """Raised when the role required for token issuance cannot be loaded.

    This is a data-integrity fault, not a user error. It is never turned
    into an ``AuthResult`` failure and must propagate as a server error.

    Attributes:
        role_ref: The role name or id that failed to resolve, if known.
    """

    def __init__(self, message: str, role_ref: str | None = None) -> None:
        super().__init__(message)
        self.role_ref = role_ref


__all__: list[str] = [
    # Base
    "IdentityError",
    # Authentication
    "AuthenticationError",
    "UnauthorizedError",
    "InvalidTokenError",
    "ExpiredTokenError",
    "ChallengeTokenRejectedError",
    # MFA
    "MfaError",
    "InvalidCodeError",
    "MfaNotPendingError",
    "MfaNotEnabledError",
    # Directory
    "IdentityNotFoundError",
    "IdentityExistsError",
    "RoleResolutionError",
]
