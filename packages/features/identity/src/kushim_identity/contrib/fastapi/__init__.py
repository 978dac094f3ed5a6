"""FastAPI integration for kushim-identity."""

from .dependencies import ClaimsGuard

__all__: list[str] = ["ClaimsGuard"]
