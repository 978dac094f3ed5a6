"""Email/password credential validation."""

from __future__ import annotations

import logging
import secrets
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .identity import Identity, PublicIdentity
    from .ports import IPasswordHasher, IUserDirectory

_logger = logging.getLogger(__name__)


class CredentialValidator:
    """Authenticates an email and password against the user directory.

    An unknown email and a wrong password produce the same ``None``, and
    both cost one hash verification: on a miss the password is checked
    against the hasher's dummy hash. Validation has no side effects and
    issues no token.
    """

    def __init__(
        self,
        *,
        directory: IUserDirectory,
        password_hasher: IPasswordHasher,
        dummy_hash: str | None = None,
    ) -> None:
        """Initialize the validator.

        Args:
            directory: Identity store.
            password_hasher: Hasher that produced the stored hashes.
            dummy_hash: Hash verified on unknown emails. Defaults to the
                hasher's ``dummy_hash`` when it has one, else a hash of a
                random password made here.
        """
        self.directory = directory
        self.password_hasher = password_hasher
        self._dummy_hash = (
            dummy_hash
            or getattr(password_hasher, "dummy_hash", None)
            or password_hasher.hash(secrets.token_urlsafe(32))
        )

    async def validate(self, email: str, password: str) -> PublicIdentity | None:
        """Check credentials.

        Args:
            email: Email as stored.
            password: Plaintext password.

        Returns:
            The identity without its credential hash, or None.
        """
        identity = await self.check(email, password)
        return identity.to_public() if identity is not None else None

    async def check(self, email: str, password: str) -> Identity | None:
        """Like ``validate`` but return the full stored record."""
        identity = await self.directory.get_by_email(email)
        if identity is None:
            self.password_hasher.verify(self._dummy_hash, password)
            _logger.debug("Credential check failed")
            return None

        if not self.password_hasher.verify(identity.credential_hash, password):
            _logger.debug("Credential check failed for user %s", identity.id)
            return None

        return identity


__all__: list[str] = ["CredentialValidator"]
