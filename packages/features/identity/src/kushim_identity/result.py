"""AuthResult: explicit success/failure values for boundary operations.

User-input failures (bad credentials, wrong code, missing enrollment) are
returned, not raised, so callers cannot forget to handle them. Faults that
indicate broken data (``RoleResolutionError``) or lost races
(``OptimisticConcurrencyError``) still propagate as exceptions.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

from .exceptions import (
    IdentityError,
    IdentityExistsError,
    IdentityNotFoundError,
    InvalidCodeError,
    MfaNotEnabledError,
    MfaNotPendingError,
    UnauthorizedError,
)

T = TypeVar("T")


class AuthErrorKind(str, Enum):
    """Recoverable failure kinds surfaced to the caller."""

    UNAUTHORIZED = "unauthorized"
    INVALID_CODE = "invalid_code"
    MFA_NOT_PENDING = "mfa_not_pending"
    MFA_NOT_ENABLED = "mfa_not_enabled"
    IDENTITY_NOT_FOUND = "identity_not_found"
    IDENTITY_EXISTS = "identity_exists"

    def to_exception(self) -> IdentityError:
        """Build the exception matching this failure kind."""
        return _ERROR_TYPES[self]()


_ERROR_TYPES: dict[AuthErrorKind, type[IdentityError]] = {
    AuthErrorKind.UNAUTHORIZED: UnauthorizedError,
    AuthErrorKind.INVALID_CODE: InvalidCodeError,
    AuthErrorKind.MFA_NOT_PENDING: MfaNotPendingError,
    AuthErrorKind.MFA_NOT_ENABLED: MfaNotEnabledError,
    AuthErrorKind.IDENTITY_NOT_FOUND: IdentityNotFoundError,
    AuthErrorKind.IDENTITY_EXISTS: IdentityExistsError,
}


@dataclass(frozen=True)
class AuthResult(Generic[T]):
    """Either a value or an ``AuthErrorKind``, never both.

    Usage::

        result = await service.login(email, password)
        if not result:
            return reject(result.error)
        grant = result.value

        # or, exception style
        grant = result.unwrap()
    """

    value: T | None = None
    error: AuthErrorKind | None = None

    def __post_init__(self) -> None:
        if (self.value is None) == (self.error is None):
            raise ValueError("AuthResult requires exactly one of value or error")

    # ── Factory methods ──────────────────────────────────────────

    @classmethod
    def ok(cls, value: T) -> AuthResult[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: AuthErrorKind) -> AuthResult[T]:
        return cls(error=error)

    # ── Accessors ────────────────────────────────────────────────

    @property
    def is_ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value or raise the exception matching ``error``."""
        if self.error is not None:
            raise self.error.to_exception()
        assert self.value is not None
        return self.value

    def __bool__(self) -> bool:
        return self.is_ok


__all__: list[str] = ["AuthErrorKind", "AuthResult"]
