"""Tests for AuthResult and AuthErrorKind."""

from __future__ import annotations

import pytest

from kushim_identity.exceptions import (
    IdentityExistsError,
    IdentityNotFoundError,
    InvalidCodeError,
    MfaNotEnabledError,
    MfaNotPendingError,
    UnauthorizedError,
)
from kushim_identity.result import AuthErrorKind, AuthResult


class TestAuthResult:
    """Test the success/failure container."""

    def test_ok_is_truthy(self) -> None:
        result = AuthResult.ok("value")

        assert result
        assert result.is_ok
        assert result.value == "value"
        assert result.error is None
        assert result.unwrap() == "value"

    def test_failure_is_falsy(self) -> None:
        result: AuthResult[str] = AuthResult.failure(AuthErrorKind.INVALID_CODE)

        assert not result
        assert not result.is_ok
        assert result.value is None
        assert result.error is AuthErrorKind.INVALID_CODE

    def test_requires_exactly_one_side(self) -> None:
        with pytest.raises(ValueError, match="exactly one"):
            AuthResult()
        with pytest.raises(ValueError, match="exactly one"):
            AuthResult(value=1, error=AuthErrorKind.UNAUTHORIZED)

    def test_is_immutable(self) -> None:
        result = AuthResult.ok(1)
        with pytest.raises(AttributeError):
            result.value = 2  # type: ignore[misc]


class TestUnwrap:
    """unwrap() raises the exception matching the failure kind."""

    @pytest.mark.parametrize(
        ("kind", "exc_type"),
        [
            (AuthErrorKind.UNAUTHORIZED, UnauthorizedError),
            (AuthErrorKind.INVALID_CODE, InvalidCodeError),
            (AuthErrorKind.MFA_NOT_PENDING, MfaNotPendingError),
            (AuthErrorKind.MFA_NOT_ENABLED, MfaNotEnabledError),
            (AuthErrorKind.IDENTITY_NOT_FOUND, IdentityNotFoundError),
            (AuthErrorKind.IDENTITY_EXISTS, IdentityExistsError),
        ],
    )
    def test_unwrap_raises_matching_exception(
        self, kind: AuthErrorKind, exc_type: type[Exception]
    ) -> None:
        with pytest.raises(exc_type):
            AuthResult.failure(kind).unwrap()

    def test_unauthorized_message_does_not_reveal_cause(self) -> None:
        with pytest.raises(UnauthorizedError, match="^Invalid credentials$"):
            AuthResult.failure(AuthErrorKind.UNAUTHORIZED).unwrap()

    def test_kind_values_are_stable_strings(self) -> None:
        assert AuthErrorKind.INVALID_CODE.value == "invalid_code"
        assert AuthErrorKind("mfa_not_pending") is AuthErrorKind.MFA_NOT_PENDING
