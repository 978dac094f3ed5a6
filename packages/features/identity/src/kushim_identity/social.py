"""Reconciliation of externally verified identities with local accounts.

Only the step after an OAuth code exchange lives here: the provider has
already confirmed the email. Matching is by email alone, so an account
created through one provider (or by password) can be reached through any
provider that vouches for the same email. Operators should only enable
providers that verify email ownership.
"""

from __future__ import annotations

import logging
import secrets
from typing import TYPE_CHECKING

from .exceptions import IdentityExistsError
from .identity import DEFAULT_ROLE

if TYPE_CHECKING:
    from .identity import Identity
    from .ports import IPasswordHasher, IUserDirectory

_logger = logging.getLogger(__name__)


class SocialIdentityResolver:
    """Maps a verified (email, provider) pair to a local identity.

    New accounts get a random placeholder credential nobody knows, so they
    can only log in through the social flow, and they start with MFA off.
    """

    def __init__(
        self,
        *,
        directory: IUserDirectory,
        password_hasher: IPasswordHasher,
        default_role: str = DEFAULT_ROLE,
    ) -> None:
        self.directory = directory
        self.password_hasher = password_hasher
        self.default_role = default_role

    async def resolve(self, email: str, provider: str) -> Identity:
        """Return the identity for ``email``, creating it if absent.

        Args:
            email: Email confirmed by the external provider.
            provider: Provider name. Informational only.

        Returns:
            The stored or newly created identity.

        Raises:
            RoleResolutionError: The default role does not exist.
        """
        identity, _ = await self.resolve_or_create(email, provider)
        return identity

    async def resolve_or_create(
        self, email: str, provider: str
    ) -> tuple[Identity, bool]:
        """Like ``resolve`` but also report whether an account was created."""
        existing = await self.directory.get_by_email(email)
        if existing is not None:
            _logger.info(
                "Social login via %s matched existing user %s", provider, existing.id
            )
            return existing, False

        placeholder = self.password_hasher.hash(secrets.token_urlsafe(32))
        try:
            created = await self.directory.create(
                email=email,
                credential_hash=placeholder,
                role_name=self.default_role,
            )
        except IdentityExistsError:
            # Lost a concurrent first login for the same email.
            winner = await self.directory.get_by_email(email)
            if winner is None:
                raise
            return winner, False

        _logger.info("Created user %s from %s social login", created.id, provider)
        return created, True


__all__: list[str] = ["SocialIdentityResolver"]
