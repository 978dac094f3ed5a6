"""Password hashing for stored credentials.

New hashes are argon2id. bcrypt hashes (``$2a$``/``$2b$``/``$2y$``) are
still verified so accounts imported from older stores keep working, and
``needs_rehash`` tells the caller when a stored hash should be upgraded.
"""

from __future__ import annotations

import base64
import hashlib
import secrets
from typing import Literal

import argon2
import bcrypt
from argon2.exceptions import InvalidHashError, VerificationError

from ..ports import IPasswordHasher

_ARGON2_PREFIX = "$argon2"
_BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")
_BCRYPT_MAX_BYTES = 72


def _bcrypt_input(password: str) -> bytes:
    """Password bytes for bcrypt.

    bcrypt only reads 72 bytes. Longer passwords are reduced to the base64
    of their SHA-256 digest (44 bytes) so every byte still counts.
    """
    encoded = password.encode()
    if len(encoded) <= _BCRYPT_MAX_BYTES:
        return encoded
    return base64.b64encode(hashlib.sha256(encoded).digest())


class PasswordHasher(IPasswordHasher):
    """argon2id (default) or bcrypt password hasher.

    Verification picks the algorithm from the hash prefix, so a directory
    may hold a mix of both.

    Example:
        ```python
        hasher = PasswordHasher()

        stored = hasher.hash("correct horse")
        if hasher.verify(stored, attempt) and hasher.needs_rehash(stored):
            stored = hasher.hash(attempt)
        ```
    """

    def __init__(
        self,
        *,
        algorithm: Literal["argon2id", "bcrypt"] = "argon2id",
        rounds: int = 12,
        time_cost: int = argon2.DEFAULT_TIME_COST,
        memory_cost: int = argon2.DEFAULT_MEMORY_COST,
    ) -> None:
        """Initialize the password hasher.

        Args:
            algorithm: Algorithm for new hashes.
            rounds: bcrypt cost factor.
            time_cost: argon2 iterations.
            memory_cost: argon2 memory in KiB.
        """
        self.algorithm = algorithm
        self.rounds = rounds
        self._argon2 = argon2.PasswordHasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            type=argon2.Type.ID,
        )
        self._dummy_hash: str | None = None

    @property
    def dummy_hash(self) -> str:
        """Hash of a random password, for equal-cost misses.

        Verifying against it always fails but costs the same as a real
        verification with the configured algorithm.
        """
        if self._dummy_hash is None:
            self._dummy_hash = self.hash(secrets.token_urlsafe(32))
        return self._dummy_hash

    def hash(self, password: str) -> str:
        if self.algorithm == "bcrypt":
            salt = bcrypt.gensalt(rounds=self.rounds)
            return bcrypt.hashpw(_bcrypt_input(password), salt).decode()
        return self._argon2.hash(password)

    def verify(self, hashed_password: str, password: str) -> bool:
        """Verify a password against a stored hash.

        Returns:
            True if the password matches. False for mismatches, unknown
            formats and malformed hashes.
        """
        if hashed_password.startswith(_ARGON2_PREFIX):
            try:
                return self._argon2.verify(hashed_password, password)
            except (VerificationError, InvalidHashError):
                return False

        if hashed_password.startswith(_BCRYPT_PREFIXES):
            try:
                return bcrypt.checkpw(
                    _bcrypt_input(password), hashed_password.encode()
                )
            except ValueError:
                # Malformed salt
                return False

        return False

    def needs_rehash(self, hashed_password: str) -> bool:
        """Whether a stored hash was made with other settings than ours."""
        if self.algorithm == "bcrypt":
            if not hashed_password.startswith(_BCRYPT_PREFIXES):
                return True
            return int(hashed_password.split("$")[2]) != self.rounds

        if not hashed_password.startswith(_ARGON2_PREFIX):
            return True
        try:
            return self._argon2.check_needs_rehash(hashed_password)
        except InvalidHashError:
            return True


__all__: list[str] = ["PasswordHasher"]
