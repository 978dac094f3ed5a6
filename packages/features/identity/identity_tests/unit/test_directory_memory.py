"""Tests for InMemoryUserDirectory."""

from __future__ import annotations

import pytest

from kushim_core.primitives.exceptions import OptimisticConcurrencyError
from kushim_core.primitives.id_generator import SequentialIDGenerator
from kushim_identity import (
    IdentityExistsError,
    IdentityNotFoundError,
    InMemoryUserDirectory,
    IUserDirectory,
    RoleResolutionError,
)


class TestInMemoryUserDirectory:
    """Test the dict-backed directory."""

    def test_satisfies_port(self, directory: InMemoryUserDirectory) -> None:
        assert isinstance(directory, IUserDirectory)

    @pytest.mark.asyncio
    async def test_create_and_lookup(self, directory: InMemoryUserDirectory) -> None:
        created = await directory.create(
            email="ada@example.com", credential_hash="h", role_name="USER"
        )

        assert created.version == 1
        assert created.mfa_enabled is False
        assert await directory.get_by_id(created.id) == created
        assert await directory.get_by_email("ada@example.com") == created
        assert await directory.get_by_email("nobody@example.com") is None
        assert await directory.get_by_id("nobody") is None

    @pytest.mark.asyncio
    async def test_duplicate_email(self, directory: InMemoryUserDirectory) -> None:
        await directory.create(email="a@x.io", credential_hash="h", role_name="USER")

        with pytest.raises(IdentityExistsError):
            await directory.create(
                email="a@x.io", credential_hash="h", role_name="USER"
            )

    @pytest.mark.asyncio
    async def test_unknown_role(self, directory: InMemoryUserDirectory) -> None:
        with pytest.raises(RoleResolutionError):
            await directory.create(
                email="a@x.io", credential_hash="h", role_name="AUDITOR"
            )

    @pytest.mark.asyncio
    async def test_removed_role_surfaces_on_read(
        self, directory: InMemoryUserDirectory
    ) -> None:
        created = await directory.create(
            email="a@x.io", credential_hash="h", role_name="USER"
        )
        directory.remove_role("USER")

        with pytest.raises(RoleResolutionError):
            await directory.get_by_id(created.id)

    @pytest.mark.asyncio
    async def test_update_secret_bumps_version(
        self, directory: InMemoryUserDirectory
    ) -> None:
        created = await directory.create(
            email="a@x.io", credential_hash="h", role_name="USER"
        )

        updated = await directory.update_mfa_secret(created.id, "SECRET")

        assert updated.mfa_secret == "SECRET"
        assert updated.version == created.version + 1

    @pytest.mark.asyncio
    async def test_enable_checks_version(
        self, directory: InMemoryUserDirectory
    ) -> None:
        created = await directory.create(
            email="a@x.io", credential_hash="h", role_name="USER"
        )
        pending = await directory.update_mfa_secret(created.id, "SECRET")

        with pytest.raises(OptimisticConcurrencyError) as exc_info:
            await directory.enable_mfa(created.id, expected_version=created.version)
        assert exc_info.value.expected_version == created.version

        enabled = await directory.enable_mfa(
            created.id, expected_version=pending.version
        )
        assert enabled.mfa_enabled is True

    @pytest.mark.asyncio
    async def test_writes_to_unknown_user(
        self, directory: InMemoryUserDirectory
    ) -> None:
        with pytest.raises(IdentityNotFoundError):
            await directory.update_mfa_secret("missing", "SECRET")
        with pytest.raises(IdentityNotFoundError):
            await directory.enable_mfa("missing", expected_version=1)

    @pytest.mark.asyncio
    async def test_new_secret_on_enabled_account_resets_to_pending(
        self, directory: InMemoryUserDirectory
    ) -> None:
        created = await directory.create(
            email="a@x.io", credential_hash="h", role_name="USER"
        )
        pending = await directory.update_mfa_secret(created.id, "FIRST")
        await directory.enable_mfa(created.id, expected_version=pending.version)

        re_enrolled = await directory.update_mfa_secret(created.id, "SECOND")

        assert re_enrolled.mfa_enabled is False
        assert re_enrolled.mfa_secret == "SECOND"

    @pytest.mark.asyncio
    async def test_update_credential_hash(
        self, directory: InMemoryUserDirectory
    ) -> None:
        created = await directory.create(
            email="a@x.io", credential_hash="old", role_name="USER"
        )

        updated = await directory.update_credential_hash(created.id, "new")

        assert updated.credential_hash == "new"
        assert updated.version == created.version
        with pytest.raises(IdentityNotFoundError):
            await directory.update_credential_hash("missing", "new")

    @pytest.mark.asyncio
    async def test_uses_injected_id_generator(self) -> None:
        directory = InMemoryUserDirectory(id_generator=SequentialIDGenerator("user"))

        first = await directory.create(
            email="a@x.io", credential_hash="h", role_name="USER"
        )
        second = await directory.create(
            email="b@x.io", credential_hash="h", role_name="USER"
        )

        assert first.id.startswith("user-")
        assert second.id != first.id
