"""TOTP code verification for enrollment confirmation and MFA login."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ..result import AuthErrorKind, AuthResult
from ..tokens import utc_now

if TYPE_CHECKING:
    from ..identity import Identity
    from ..ports import ITotpEngine, IUsedCodeStore, IUserDirectory
    from ..tokens import AccessGrant, Clock, TokenIssuer

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnrollmentConfirmation:
    """Outcome of a successful confirmation.

    ``already_enabled`` is True when MFA was on before the call; nothing
    was written in that case.
    """

    confirmed: bool = True
    already_enabled: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"success": self.confirmed}


class MfaVerifier:
    """Checks TOTP codes against an identity's stored secret.

    Both entry points share one check: the code must match the secret within
    the engine's clock-skew window, and (when a used-code store is given)
    its time step must not have been consumed before. A failed check never
    changes stored state, so the caller may retry.
    """

    def __init__(
        self,
        *,
        directory: IUserDirectory,
        totp_engine: ITotpEngine,
        token_issuer: TokenIssuer,
        used_codes: IUsedCodeStore | None = None,
        replay_ttl_seconds: int = 90,
        clock: Clock | None = None,
    ) -> None:
        """Initialize the verifier.

        Args:
            directory: Identity store.
            totp_engine: TOTP primitive.
            token_issuer: Issues the full token after MFA login.
            used_codes: Replay tracking; None accepts a code more than once
                within its time window.
            replay_ttl_seconds: How long a consumed step is remembered. Must
                cover the whole acceptance window.
            clock: Time source (default UTC now).
        """
        self.directory = directory
        self.totp_engine = totp_engine
        self.token_issuer = token_issuer
        self.used_codes = used_codes
        self.replay_ttl_seconds = replay_ttl_seconds
        self._clock = clock or utc_now

    async def confirm_enrollment(
        self, user_id: str, code: str
    ) -> AuthResult[EnrollmentConfirmation]:
        """Confirm a pending enrollment and switch MFA on.

        Args:
            user_id: Identity id from an authenticated full session.
            code: Code from the authenticator app.

        Returns:
            ``EnrollmentConfirmation``, or ``MFA_NOT_PENDING`` /
            ``INVALID_CODE``.

        Raises:
            OptimisticConcurrencyError: The secret was replaced between
                the read and the enable write.
        """
        identity = await self.directory.get_by_id(user_id)
        if identity is None or not identity.mfa_secret:
            return AuthResult.failure(AuthErrorKind.MFA_NOT_PENDING)

        if not await self._check_code(identity, code):
            return AuthResult.failure(AuthErrorKind.INVALID_CODE)

        if identity.mfa_enabled:
            return AuthResult.ok(EnrollmentConfirmation(already_enabled=True))

        await self.directory.enable_mfa(identity.id, expected_version=identity.version)
        _logger.info("MFA enabled for user %s", identity.id)
        return AuthResult.ok(EnrollmentConfirmation())

    async def verify_login(self, user_id: str, code: str) -> AuthResult[AccessGrant]:
        """Exchange a valid code for a full session token.

        Args:
            user_id: Subject of a verified challenge token.
            code: Code from the authenticator app.

        Returns:
            ``AccessGrant``, or ``MFA_NOT_ENABLED`` / ``INVALID_CODE``.

        Raises:
            RoleResolutionError: The identity's role cannot be loaded.
        """
        identity = await self.directory.get_by_id(user_id)
        if identity is None or not identity.mfa_enabled or not identity.mfa_secret:
            return AuthResult.failure(AuthErrorKind.MFA_NOT_ENABLED)

        if not await self._check_code(identity, code):
            return AuthResult.failure(AuthErrorKind.INVALID_CODE)

        return AuthResult.ok(self.token_issuer.issue_full_token(identity.to_public()))

    async def _check_code(self, identity: Identity, code: str) -> bool:
        assert identity.mfa_secret is not None
        step = self.totp_engine.match(identity.mfa_secret, code, self._clock())
        if step is None:
            _logger.warning("Invalid TOTP code for user %s", identity.id)
            return False

        if self.used_codes is not None and not await self.used_codes.consume(
            identity.id, step, self.replay_ttl_seconds
        ):
            _logger.warning("Replayed TOTP code for user %s", identity.id)
            return False

        return True


__all__: list[str] = ["EnrollmentConfirmation", "MfaVerifier"]
