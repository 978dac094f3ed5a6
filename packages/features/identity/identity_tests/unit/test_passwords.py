"""Tests for password hashing."""

from __future__ import annotations

import pytest

from kushim_identity.passwords import PasswordHasher


class TestPasswordHasher:
    """Test argon2id hashing and bcrypt verification."""

    def test_argon2id_round_trip(self, hasher: PasswordHasher) -> None:
        hashed = hasher.hash("correct horse")

        assert hashed.startswith("$argon2id$")
        assert hasher.verify(hashed, "correct horse")
        assert not hasher.verify(hashed, "wrong horse")

    def test_hashes_are_salted(self, hasher: PasswordHasher) -> None:
        assert hasher.hash("same") != hasher.hash("same")

    def test_bcrypt_round_trip(self) -> None:
        hasher = PasswordHasher(algorithm="bcrypt", rounds=4)
        hashed = hasher.hash("correct horse")

        assert hashed.startswith("$2")
        assert hasher.verify(hashed, "correct horse")
        assert not hasher.verify(hashed, "wrong horse")

    def test_bcrypt_long_password_round_trip(self) -> None:
        hasher = PasswordHasher(algorithm="bcrypt", rounds=4)
        password = "a" * 100
        hashed = hasher.hash(password)

        assert hasher.verify(hashed, password)
        # Differs only past byte 72, which plain bcrypt would ignore
        assert not hasher.verify(hashed, "a" * 99 + "b")

    def test_argon2_hasher_verifies_bcrypt_hashes(
        self, hasher: PasswordHasher
    ) -> None:
        legacy = PasswordHasher(algorithm="bcrypt", rounds=4).hash("imported")

        assert hasher.verify(legacy, "imported")

    @pytest.mark.parametrize("malformed", ["", "not-a-hash", "$argon2id$broken"])
    def test_malformed_hash_is_false_not_error(
        self, hasher: PasswordHasher, malformed: str
    ) -> None:
        assert hasher.verify(malformed, "anything") is False

    def test_dummy_hash_never_verifies(self, hasher: PasswordHasher) -> None:
        dummy = hasher.dummy_hash

        assert dummy.startswith("$argon2id$")
        assert hasher.dummy_hash == dummy
        assert not hasher.verify(dummy, "")

    def test_unknown_format_is_false(self, hasher: PasswordHasher) -> None:
        assert hasher.verify("plaintext-password", "plaintext-password") is False


class TestNeedsRehash:
    """Test detection of hashes made with other settings."""

    def test_current_argon2_hash(self, hasher: PasswordHasher) -> None:
        assert not hasher.needs_rehash(hasher.hash("pw"))

    def test_weaker_argon2_hash(self, hasher: PasswordHasher) -> None:
        weak = PasswordHasher(time_cost=1, memory_cost=8192).hash("pw")
        assert hasher.needs_rehash(weak)

    def test_bcrypt_hash_under_argon2(self, hasher: PasswordHasher) -> None:
        legacy = PasswordHasher(algorithm="bcrypt", rounds=4).hash("pw")
        assert hasher.needs_rehash(legacy)

    def test_bcrypt_rounds(self) -> None:
        hasher = PasswordHasher(algorithm="bcrypt", rounds=5)
        assert not hasher.needs_rehash(hasher.hash("pw"))
        weaker = PasswordHasher(algorithm="bcrypt", rounds=4).hash("pw")
        assert hasher.needs_rehash(weaker)
