"""Boundary operations of the authentication subsystem.

``AuthService`` is what an HTTP layer calls. It wires the components
together, turns their outcomes into ``AuthResult`` values, and records
audit events and metrics. It holds no per-user state.

Usage:
    ```python
    service = AuthService.create(
        config=AuthConfig(token_secret=settings.jwt_secret),
        directory=SQLAlchemyUserDirectory(session_factory),
    )

    result = await service.login(email, password)
    if not result:
        raise HTTPException(401)
    if isinstance(result.value, MfaChallenge):
        ...  # client must call verify_login with the challenge subject
    ```
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .audit.events import (
    login_challenged_event,
    login_failed_event,
    login_success_event,
    mfa_enabled_event,
    mfa_enrollment_started_event,
    mfa_failed_event,
    mfa_verified_event,
    social_linked_event,
    user_created_event,
)
from .credentials import CredentialValidator
from .exceptions import IdentityExistsError
from .identity import MfaStatus
from .mfa.enrollment import MfaEnrollmentManager
from .mfa.replay import InMemoryUsedCodeStore
from .mfa.totp import QrCodeRenderer, TotpEngine
from .mfa.verifier import MfaVerifier
from .observability.metrics import AuthMetrics
from .passwords.hasher import PasswordHasher
from .result import AuthErrorKind, AuthResult
from .social import SocialIdentityResolver
from .tokens import MfaChallenge, TokenIssuer

if TYPE_CHECKING:
    from .audit.events import AuthAuditEvent
    from .config import AuthConfig
    from .identity import Identity, PublicIdentity
    from .mfa.enrollment import EnrollmentArtifact
    from .mfa.verifier import EnrollmentConfirmation
    from .ports import (
        IAuthAuditStore,
        IPasswordHasher,
        IQrRenderer,
        ITotpEngine,
        IUsedCodeStore,
        IUserDirectory,
    )
    from .tokens import AccessGrant, Clock, LoginResult

_logger = logging.getLogger(__name__)


class AuthService:
    """Login, registration, MFA enrollment/verification and social login.

    Recoverable failures come back as ``AuthResult`` errors. Two faults
    are raised instead:

    - ``RoleResolutionError`` when an identity's role cannot be loaded.
    - ``OptimisticConcurrencyError`` when a confirmation loses a race with
      a re-enrollment of the same user.
    """

    def __init__(
        self,
        *,
        directory: IUserDirectory,
        password_hasher: IPasswordHasher,
        credential_validator: CredentialValidator,
        token_issuer: TokenIssuer,
        enrollment_manager: MfaEnrollmentManager,
        verifier: MfaVerifier,
        social_resolver: SocialIdentityResolver,
        default_role: str,
        audit_store: IAuthAuditStore | None = None,
    ) -> None:
        self.directory = directory
        self.password_hasher = password_hasher
        self.credential_validator = credential_validator
        self.token_issuer = token_issuer
        self.enrollment_manager = enrollment_manager
        self.verifier = verifier
        self.social_resolver = social_resolver
        self.default_role = default_role
        self.audit_store = audit_store

    @classmethod
    def create(
        cls,
        config: AuthConfig,
        directory: IUserDirectory,
        *,
        password_hasher: IPasswordHasher | None = None,
        totp_engine: ITotpEngine | None = None,
        qr_renderer: IQrRenderer | None = None,
        used_codes: IUsedCodeStore | None = None,
        audit_store: IAuthAuditStore | None = None,
        clock: Clock | None = None,
    ) -> AuthService:
        """Build a service with default components for ``config``.

        Args:
            config: Authentication configuration.
            directory: Identity store.
            password_hasher: Defaults to argon2id ``PasswordHasher``.
            totp_engine: Defaults to a ``TotpEngine`` built from ``config``.
            qr_renderer: Defaults to ``QrCodeRenderer``.
            used_codes: Replay tracking. Defaults to a process-local
                ``InMemoryUsedCodeStore``; pass a shared store when running
                several workers.
            audit_store: Optional audit sink.
            clock: Time source for tokens and TOTP (default UTC now).
        """
        hasher = password_hasher or PasswordHasher()
        engine = totp_engine or TotpEngine(
            issuer=config.totp_issuer,
            digits=config.totp_digits,
            interval=config.totp_interval,
            valid_window=config.totp_valid_window,
        )
        issuer = TokenIssuer(config, clock=clock)

        return cls(
            directory=directory,
            password_hasher=hasher,
            credential_validator=CredentialValidator(
                directory=directory, password_hasher=hasher
            ),
            token_issuer=issuer,
            enrollment_manager=MfaEnrollmentManager(
                directory=directory,
                totp_engine=engine,
                qr_renderer=qr_renderer or QrCodeRenderer(),
            ),
            verifier=MfaVerifier(
                directory=directory,
                totp_engine=engine,
                token_issuer=issuer,
                used_codes=used_codes or InMemoryUsedCodeStore(),
                replay_ttl_seconds=config.replay_ttl_seconds,
                clock=clock,
            ),
            social_resolver=SocialIdentityResolver(
                directory=directory,
                password_hasher=hasher,
                default_role=config.default_role,
            ),
            default_role=config.default_role,
            audit_store=audit_store,
        )

    # ═══════════════════════════════════════════════════════════════
    # PASSWORD LOGIN & REGISTRATION
    # ═══════════════════════════════════════════════════════════════

    async def login(self, email: str, password: str) -> AuthResult[LoginResult]:
        """Authenticate with email and password.

        A correct password whose stored hash was made with outdated hasher
        settings is re-hashed and saved before the result is issued.

        Returns:
            ``AccessGrant`` for MFA-disabled accounts, ``MfaChallenge`` for
            MFA-enabled ones, or ``UNAUTHORIZED`` for an unknown email and a
            wrong password alike.
        """
        with AuthMetrics.operation("login", method="password"):
            identity = await self.credential_validator.check(email, password)
            if identity is None:
                _logger.warning("Password login rejected")
                await self._audit(login_failed_event())
                return AuthResult.failure(AuthErrorKind.UNAUTHORIZED)

            await self._upgrade_credential_hash(identity, password)
            return AuthResult.ok(
                await self._issue_login_result(identity.to_public(), "password")
            )

    async def register(self, email: str, password: str) -> AuthResult[PublicIdentity]:
        """Create a password account with the default role and MFA off.

        Returns:
            The new identity, or ``IDENTITY_EXISTS``.
        """
        with AuthMetrics.operation("register", method="password"):
            try:
                identity = await self.directory.create(
                    email=email,
                    credential_hash=self.password_hasher.hash(password),
                    role_name=self.default_role,
                )
            except IdentityExistsError:
                return AuthResult.failure(AuthErrorKind.IDENTITY_EXISTS)

            _logger.info("Registered user %s", identity.id)
            await self._audit(user_created_event(identity.id))
            return AuthResult.ok(identity.to_public())

    # ═══════════════════════════════════════════════════════════════
    # MFA
    # ═══════════════════════════════════════════════════════════════

    async def begin_enrollment(self, user_id: str) -> AuthResult[EnrollmentArtifact]:
        """Start (or restart) TOTP enrollment for a full-session user."""
        with AuthMetrics.operation("begin_enrollment", method="totp"):
            result = await self.enrollment_manager.begin_enrollment(user_id)
            if result:
                await self._audit(mfa_enrollment_started_event(user_id))
            return result

    async def confirm_enrollment(
        self, user_id: str, code: str
    ) -> AuthResult[EnrollmentConfirmation]:
        """Confirm the pending secret with a code and enable MFA."""
        with AuthMetrics.operation("confirm_enrollment", method="totp"):
            result = await self.verifier.confirm_enrollment(user_id, code)
            if result.error is not None:
                await self._audit(mfa_failed_event(user_id, result.error))
            elif result.value is not None and not result.value.already_enabled:
                await self._audit(mfa_enabled_event(user_id))
            return result

    async def verify_login(self, user_id: str, code: str) -> AuthResult[AccessGrant]:
        """Exchange a TOTP code for a full session after a challenge.

        ``user_id`` must come from a verified ``ChallengeClaims`` subject.
        """
        with AuthMetrics.operation("verify_login", method="totp"):
            result = await self.verifier.verify_login(user_id, code)
            if result.error is not None:
                await self._audit(mfa_failed_event(user_id, result.error))
            else:
                await self._audit(mfa_verified_event(user_id))
                await self._audit(login_success_event(user_id, "totp"))
            return result

    async def mfa_status(self, user_id: str) -> AuthResult[MfaStatus]:
        """Report whether MFA is enabled or pending for a user."""
        identity = await self.directory.get_by_id(user_id)
        if identity is None:
            return AuthResult.failure(AuthErrorKind.IDENTITY_NOT_FOUND)
        return AuthResult.ok(
            MfaStatus(enabled=identity.mfa_enabled, pending=identity.mfa_pending)
        )

    # ═══════════════════════════════════════════════════════════════
    # SOCIAL LOGIN
    # ═══════════════════════════════════════════════════════════════

    async def social_callback(
        self, email: str, provider: str
    ) -> AuthResult[LoginResult]:
        """Log in an identity whose email an external provider verified.

        The identity is created if absent. The login result follows the same
        MFA branching as a password login.
        """
        with AuthMetrics.operation("social_callback", method=provider):
            identity, created = await self.social_resolver.resolve_or_create(
                email, provider
            )
            if created:
                await self._audit(user_created_event(identity.id, provider))
            await self._audit(
                social_linked_event(identity.id, provider, created=created)
            )
            return AuthResult.ok(
                await self._issue_login_result(identity.to_public(), provider)
            )

    # ── Helpers ──────────────────────────────────────────────────

    async def _upgrade_credential_hash(self, identity: Identity, password: str) -> None:
        needs_rehash = getattr(self.password_hasher, "needs_rehash", None)
        if needs_rehash is None or not needs_rehash(identity.credential_hash):
            return
        await self.directory.update_credential_hash(
            identity.id, self.password_hasher.hash(password)
        )
        _logger.info("Upgraded credential hash for user %s", identity.id)

    async def _issue_login_result(
        self, identity: PublicIdentity, provider: str
    ) -> LoginResult:
        result = self.token_issuer.issue_login_result(identity)
        if isinstance(result, MfaChallenge):
            _logger.info("MFA challenge issued for user %s", identity.id)
            await self._audit(login_challenged_event(identity.id, provider))
        else:
            _logger.info("Session issued for user %s", identity.id)
            await self._audit(login_success_event(identity.id, provider))
        return result

    async def _audit(self, event: AuthAuditEvent) -> None:
        AuthMetrics.record_event(event)
        if self.audit_store is not None:
            await self.audit_store.record(event)


__all__: list[str] = ["AuthService"]
