"""TOTP enrollment: generate a pending secret and its QR artifact."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ..result import AuthErrorKind, AuthResult
from .totp import TotpEngine

if TYPE_CHECKING:
    from ..ports import IQrRenderer, ITotpEngine, IUserDirectory

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnrollmentArtifact:
    """Everything an authenticator app needs to add the account.

    Attributes:
        secret: Base32 secret (shown once for manual entry).
        provisioning_uri: otpauth:// URI encoded in the QR image.
        manual_key: Secret grouped in blocks of 4 characters.
        qr_image: PNG data URL of the provisioning URI.
    """

    secret: str
    provisioning_uri: str
    manual_key: str
    qr_image: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "secret": self.secret,
            "provisioningUri": self.provisioning_uri,
            "qrCodeUrl": self.qr_image,
        }


class MfaEnrollmentManager:
    """Starts TOTP enrollment for an identity.

    The new secret is stored at once with ``mfa_enabled`` cleared, so an
    account that already had MFA is pending again and never stays enabled
    against a secret nobody has confirmed. Enrollment completes when
    ``MfaVerifier.confirm_enrollment`` succeeds. Calling again replaces the
    pending secret; callers should rate-limit it.
    """

    def __init__(
        self,
        *,
        directory: IUserDirectory,
        totp_engine: ITotpEngine,
        qr_renderer: IQrRenderer,
    ) -> None:
        self.directory = directory
        self.totp_engine = totp_engine
        self.qr_renderer = qr_renderer

    async def begin_enrollment(self, user_id: str) -> AuthResult[EnrollmentArtifact]:
        """Generate and persist a fresh pending secret.

        Args:
            user_id: Identity id from an authenticated full session.

        Returns:
            The enrollment artifact, or ``IDENTITY_NOT_FOUND``.
        """
        identity = await self.directory.get_by_id(user_id)
        if identity is None:
            return AuthResult.failure(AuthErrorKind.IDENTITY_NOT_FOUND)

        secret = self.totp_engine.generate_secret()
        uri = self.totp_engine.provisioning_uri(secret, identity.email)
        qr_image = self.qr_renderer.render(uri)

        await self.directory.update_mfa_secret(identity.id, secret)
        _logger.info("MFA enrollment started for user %s", identity.id)

        return AuthResult.ok(
            EnrollmentArtifact(
                secret=secret,
                provisioning_uri=uri,
                manual_key=TotpEngine.format_secret(secret),
                qr_image=qr_image,
            )
        )


__all__: list[str] = ["EnrollmentArtifact", "MfaEnrollmentManager"]
