"""Kushim Identity Package

Authentication and MFA session issuance: "Who are you, and did you prove
it twice?"

Validates email/password credentials, issues signed session tokens at two
trust levels (full session or MFA challenge), runs the TOTP enrollment and
verification state machine, and reconciles externally verified social
identities with local accounts.

Usage:
    ```python
    from kushim_identity import AuthConfig, AuthService, InMemoryUserDirectory

    service = AuthService.create(
        config=AuthConfig(token_secret="change-me-to-a-long-random-secret!!"),
        directory=InMemoryUserDirectory(),
    )

    await service.register("ada@example.com", "correct horse")
    result = await service.login("ada@example.com", "correct horse")
    grant = result.unwrap()
    ```

Submodules:
    - `mfa`: TOTP engine, QR rendering, enrollment and verification
    - `directory`: in-memory and SQLAlchemy user directories
    - `passwords`: argon2id / bcrypt password hashing
    - `audit`: audit events and stores
    - `observability`: Prometheus metrics
    - `contrib.fastapi`: FastAPI claim guards
"""

from __future__ import annotations

# Audit
from .audit import (
    AuthAuditEvent,
    AuthEventType,
    InMemoryAuthAuditStore,
)

# Claims
from .claims import (
    MFA_CHALLENGE_CLAIM,
    ChallengeClaims,
    FullClaims,
    SessionClaims,
    claims_from_payload,
)
from .config import AuthConfig

# Components
from .credentials import CredentialValidator
from .directory import InMemoryUserDirectory

# Exceptions
from .exceptions import (
    AuthenticationError,
    ChallengeTokenRejectedError,
    ExpiredTokenError,
    IdentityError,
    IdentityExistsError,
    IdentityNotFoundError,
    InvalidCodeError,
    InvalidTokenError,
    MfaError,
    MfaNotEnabledError,
    MfaNotPendingError,
    RoleResolutionError,
    UnauthorizedError,
)

# Records
from .identity import (
    DEFAULT_ROLE,
    SEEDED_ROLES,
    Identity,
    MfaStatus,
    PublicIdentity,
    Role,
)
from .mfa import (
    EnrollmentArtifact,
    EnrollmentConfirmation,
    InMemoryUsedCodeStore,
    MfaEnrollmentManager,
    MfaVerifier,
    QrCodeRenderer,
    TotpEngine,
)
from .passwords import PasswordHasher

# Ports
from .ports import (
    IAuthAuditStore,
    IPasswordHasher,
    IQrRenderer,
    ITotpEngine,
    IUsedCodeStore,
    IUserDirectory,
)

# Results
from .result import AuthErrorKind, AuthResult
from .service import AuthService
from .social import SocialIdentityResolver
from .tokens import (
    AccessGrant,
    LoginResult,
    MfaChallenge,
    TokenIssuer,
    extract_bearer_token,
)

__all__: list[str] = [
    # Service
    "AuthService",
    "AuthConfig",
    # Components
    "CredentialValidator",
    "TokenIssuer",
    "MfaEnrollmentManager",
    "MfaVerifier",
    "SocialIdentityResolver",
    "TotpEngine",
    "QrCodeRenderer",
    "PasswordHasher",
    # Adapters
    "InMemoryUserDirectory",
    "InMemoryUsedCodeStore",
    "InMemoryAuthAuditStore",
    # Records
    "DEFAULT_ROLE",
    "SEEDED_ROLES",
    "Identity",
    "PublicIdentity",
    "Role",
    "MfaStatus",
    # Tokens and claims
    "AccessGrant",
    "MfaChallenge",
    "LoginResult",
    "FullClaims",
    "ChallengeClaims",
    "SessionClaims",
    "MFA_CHALLENGE_CLAIM",
    "claims_from_payload",
    "extract_bearer_token",
    # Enrollment
    "EnrollmentArtifact",
    "EnrollmentConfirmation",
    # Results
    "AuthResult",
    "AuthErrorKind",
    # Ports
    "IUserDirectory",
    "IPasswordHasher",
    "ITotpEngine",
    "IQrRenderer",
    "IUsedCodeStore",
    "IAuthAuditStore",
    # Audit
    "AuthAuditEvent",
    "AuthEventType",
    # Exceptions
    "IdentityError",
    "AuthenticationError",
    "UnauthorizedError",
    "InvalidTokenError",
    "ExpiredTokenError",
    "ChallengeTokenRejectedError",
    "MfaError",
    "InvalidCodeError",
    "MfaNotPendingError",
    "MfaNotEnabledError",
    "IdentityNotFoundError",
    "IdentityExistsError",
    "RoleResolutionError",
]

__version__ = "0.1.0"
