"""Test configuration and fixtures."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from kushim_identity import (
    AuthConfig,
    AuthService,
    InMemoryAuthAuditStore,
    InMemoryUsedCodeStore,
    InMemoryUserDirectory,
    PasswordHasher,
    TokenIssuer,
    TotpEngine,
)

TEST_SECRET = "test-signing-secret-with-at-least-32-chars"


class FrozenClock:
    """Controllable time source shared by tokens and TOTP checks."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class StubQrRenderer:
    """QR renderer that records its input instead of drawing an image."""

    def __init__(self) -> None:
        self.rendered: list[str] = []

    def render(self, data: str) -> str:
        self.rendered.append(data)
        return "data:image/png;base64,stub"


@pytest.fixture
def clock() -> FrozenClock:
    """Clock pinned to the start of a TOTP time step."""
    return FrozenClock(datetime(2026, 3, 2, 9, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def config() -> AuthConfig:
    return AuthConfig(token_secret=TEST_SECRET)


@pytest.fixture
def directory() -> InMemoryUserDirectory:
    return InMemoryUserDirectory()


@pytest.fixture(scope="session")
def hasher() -> PasswordHasher:
    return PasswordHasher()


@pytest.fixture
def totp_engine() -> TotpEngine:
    return TotpEngine(issuer="Kushim")


@pytest.fixture
def issuer(config: AuthConfig, clock: FrozenClock) -> TokenIssuer:
    return TokenIssuer(config, clock=clock)


@pytest.fixture
def used_codes() -> InMemoryUsedCodeStore:
    return InMemoryUsedCodeStore()


@pytest.fixture
def qr_renderer() -> StubQrRenderer:
    return StubQrRenderer()


@pytest.fixture
def audit_store() -> InMemoryAuthAuditStore:
    return InMemoryAuthAuditStore()


@pytest.fixture
def service(
    config: AuthConfig,
    directory: InMemoryUserDirectory,
    hasher: PasswordHasher,
    totp_engine: TotpEngine,
    qr_renderer: StubQrRenderer,
    used_codes: InMemoryUsedCodeStore,
    audit_store: InMemoryAuthAuditStore,
    clock: FrozenClock,
) -> AuthService:
    return AuthService.create(
        config,
        directory,
        password_hasher=hasher,
        totp_engine=totp_engine,
        qr_renderer=qr_renderer,
        used_codes=used_codes,
        audit_store=audit_store,
        clock=clock,
    )
