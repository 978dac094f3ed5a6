"""Configuration for the authentication subsystem."""

from __future__ import annotations

from dataclasses import dataclass

from .identity import DEFAULT_ROLE

MIN_SECRET_LENGTH = 32


@dataclass(frozen=True)
class AuthConfig:
    """Authentication configuration.

    Attributes:
        token_secret: HMAC key for signing session tokens (>= 32 chars).
        token_algorithm: JWS algorithm for session tokens.
        access_token_ttl_seconds: Lifetime of full session tokens.
        challenge_token_ttl_seconds: Lifetime of MFA challenge tokens.
        totp_issuer: Issuer label shown in authenticator apps.
        totp_digits: Number of digits in a TOTP code.
        totp_interval: TOTP time step in seconds.
        totp_valid_window: Accepted clock skew, in time steps either side.
        default_role: Role given to registered and social accounts.

    Example:
        ```python
        config = AuthConfig(token_secret=settings.jwt_secret)
        service = AuthService.create(config=config, directory=directory)
        ```
    """

    token_secret: str
    token_algorithm: str = "HS256"
    access_token_ttl_seconds: int = 86400  # 24 hours
    challenge_token_ttl_seconds: int = 300  # 5 minutes
    totp_issuer: str = "Kushim"
    totp_digits: int = 6
    totp_interval: int = 30
    totp_valid_window: int = 1
    default_role: str = DEFAULT_ROLE

    def __post_init__(self) -> None:
        if len(self.token_secret) < MIN_SECRET_LENGTH:
            raise ValueError(
                f"token_secret must be at least {MIN_SECRET_LENGTH} characters"
            )
        if self.token_algorithm not in ("HS256", "HS384", "HS512"):
            raise ValueError(f"Unsupported token algorithm: {self.token_algorithm}")
        if self.access_token_ttl_seconds <= 0 or self.challenge_token_ttl_seconds <= 0:
            raise ValueError("Token lifetimes must be positive")
        if self.challenge_token_ttl_seconds >= self.access_token_ttl_seconds:
            raise ValueError("Challenge tokens must be shorter-lived than sessions")
        if self.totp_valid_window < 0:
            raise ValueError("totp_valid_window must not be negative")
        if not self.default_role:
            raise ValueError("default_role is required")

    @property
    def replay_ttl_seconds(self) -> int:
        """How long a consumed TOTP step must be remembered.

        Covers the whole acceptance window: the matched step plus
        ``totp_valid_window`` steps either side.
        """
        return self.totp_interval * (2 * self.totp_valid_window + 1)


__all__: list[str] = ["AuthConfig", "MIN_SECRET_LENGTH"]
