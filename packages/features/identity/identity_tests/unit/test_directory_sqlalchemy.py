"""Tests for SQLAlchemyUserDirectory against in-memory SQLite."""

from __future__ import annotations

import pytest
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from kushim_core.primitives.exceptions import OptimisticConcurrencyError
from kushim_identity import (
    AuthService,
    IdentityExistsError,
    IdentityNotFoundError,
    IUserDirectory,
    RoleResolutionError,
)
from kushim_identity.directory.sqlalchemy import (
    IdentityBase,
    RoleModel,
    SQLAlchemyUserDirectory,
)

pytest.importorskip("aiosqlite")


@pytest.fixture()
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(IdentityBase.metadata.create_all)

    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture()
async def sql_directory(session_factory) -> SQLAlchemyUserDirectory:
    directory = SQLAlchemyUserDirectory(session_factory)
    await directory.seed_roles()
    return directory


class TestSeedRoles:
    """Test role seeding."""

    @pytest.mark.asyncio()
    async def test_seeding_is_idempotent(self, session_factory) -> None:
        directory = SQLAlchemyUserDirectory(session_factory)

        first = await directory.seed_roles()
        second = await directory.seed_roles()

        assert [r.name for r in first] == ["ADMIN", "USER"]
        assert first == second


class TestSQLAlchemyUserDirectory:
    """Test reads and writes."""

    async def test_satisfies_port(
        self, sql_directory: SQLAlchemyUserDirectory
    ) -> None:
        assert isinstance(sql_directory, IUserDirectory)

    @pytest.mark.asyncio()
    async def test_create_and_lookup(
        self, sql_directory: SQLAlchemyUserDirectory
    ) -> None:
        created = await sql_directory.create(
            email="ada@example.com", credential_hash="h", role_name="ADMIN"
        )

        by_email = await sql_directory.get_by_email("ada@example.com")
        by_id = await sql_directory.get_by_id(created.id)

        assert by_email == created
        assert by_id == created
        assert created.role.name == "ADMIN"
        assert created.version == 1
        assert await sql_directory.get_by_email("nobody@example.com") is None

    @pytest.mark.asyncio()
    async def test_duplicate_email(
        self, sql_directory: SQLAlchemyUserDirectory
    ) -> None:
        await sql_directory.create(
            email="ada@example.com", credential_hash="h", role_name="USER"
        )

        with pytest.raises(IdentityExistsError):
            await sql_directory.create(
                email="ada@example.com", credential_hash="h2", role_name="USER"
            )

    @pytest.mark.asyncio()
    async def test_unknown_role(self, sql_directory: SQLAlchemyUserDirectory) -> None:
        with pytest.raises(RoleResolutionError):
            await sql_directory.create(
                email="ada@example.com", credential_hash="h", role_name="AUDITOR"
            )

    @pytest.mark.asyncio()
    async def test_dangling_role_reference(
        self, sql_directory: SQLAlchemyUserDirectory, session_factory
    ) -> None:
        created = await sql_directory.create(
            email="ada@example.com", credential_hash="h", role_name="USER"
        )
        async with session_factory() as session, session.begin():
            await session.execute(delete(RoleModel).where(RoleModel.name == "USER"))

        with pytest.raises(RoleResolutionError):
            await sql_directory.get_by_id(created.id)

    @pytest.mark.asyncio()
    async def test_enrollment_writes(
        self, sql_directory: SQLAlchemyUserDirectory
    ) -> None:
        created = await sql_directory.create(
            email="ada@example.com", credential_hash="h", role_name="USER"
        )

        pending = await sql_directory.update_mfa_secret(created.id, "SECRET")
        assert pending.mfa_secret == "SECRET"
        assert pending.mfa_enabled is False
        assert pending.version == 2

        enabled = await sql_directory.enable_mfa(
            created.id, expected_version=pending.version
        )
        assert enabled.mfa_enabled is True
        assert enabled.version == 3

    @pytest.mark.asyncio()
    async def test_enable_with_stale_version(
        self, sql_directory: SQLAlchemyUserDirectory
    ) -> None:
        created = await sql_directory.create(
            email="ada@example.com", credential_hash="h", role_name="USER"
        )
        pending = await sql_directory.update_mfa_secret(created.id, "FIRST")
        await sql_directory.update_mfa_secret(created.id, "SECOND")

        with pytest.raises(OptimisticConcurrencyError):
            await sql_directory.enable_mfa(
                created.id, expected_version=pending.version
            )

        current = await sql_directory.get_by_id(created.id)
        assert current is not None
        assert current.mfa_enabled is False
        assert current.mfa_secret == "SECOND"

    @pytest.mark.asyncio()
    async def test_enable_without_secret(
        self, sql_directory: SQLAlchemyUserDirectory
    ) -> None:
        created = await sql_directory.create(
            email="ada@example.com", credential_hash="h", role_name="USER"
        )

        with pytest.raises(OptimisticConcurrencyError):
            await sql_directory.enable_mfa(
                created.id, expected_version=created.version
            )

    @pytest.mark.asyncio()
    async def test_writes_to_unknown_user(
        self, sql_directory: SQLAlchemyUserDirectory
    ) -> None:
        with pytest.raises(IdentityNotFoundError):
            await sql_directory.update_mfa_secret("missing", "SECRET")
        with pytest.raises(IdentityNotFoundError):
            await sql_directory.enable_mfa("missing", expected_version=1)

    @pytest.mark.asyncio()
    async def test_new_secret_on_enabled_account_resets_to_pending(
        self, sql_directory: SQLAlchemyUserDirectory
    ) -> None:
        created = await sql_directory.create(
            email="ada@example.com", credential_hash="h", role_name="USER"
        )
        pending = await sql_directory.update_mfa_secret(created.id, "FIRST")
        await sql_directory.enable_mfa(created.id, expected_version=pending.version)

        re_enrolled = await sql_directory.update_mfa_secret(created.id, "SECOND")

        assert re_enrolled.mfa_enabled is False
        assert re_enrolled.mfa_secret == "SECOND"

    @pytest.mark.asyncio()
    async def test_update_credential_hash(
        self, sql_directory: SQLAlchemyUserDirectory
    ) -> None:
        created = await sql_directory.create(
            email="ada@example.com", credential_hash="old", role_name="USER"
        )

        updated = await sql_directory.update_credential_hash(created.id, "new")

        assert updated.credential_hash == "new"
        assert updated.version == created.version
        with pytest.raises(IdentityNotFoundError):
            await sql_directory.update_credential_hash("missing", "new")


class TestServiceOverSQL:
    """Run the full MFA flow against the SQL directory."""

    @pytest.mark.asyncio()
    async def test_enroll_and_verify(
        self, sql_directory: SQLAlchemyUserDirectory, config, hasher, clock
    ) -> None:
        service = AuthService.create(
            config, sql_directory, password_hasher=hasher, clock=clock
        )
        user = (await service.register("ada@example.com", "pw")).unwrap()

        artifact = (await service.begin_enrollment(user.id)).unwrap()
        code = service.verifier.totp_engine.code_at(artifact.secret, clock())
        assert (await service.confirm_enrollment(user.id, code)).is_ok

        challenge = (await service.login("ada@example.com", "pw")).unwrap()
        assert challenge.to_dict()["mfaRequired"] is True

        clock.advance(30)
        code = service.verifier.totp_engine.code_at(artifact.secret, clock())
        grant = (await service.verify_login(user.id, code)).unwrap()
        assert service.token_issuer.require_full(grant.access_token).subject == user.id
