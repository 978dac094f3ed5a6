"""FastAPI dependencies that admit one claim variant each.

A challenge token proves only that a password was valid. ``full_session``
rejects it like any other bad token; ``mfa_challenge`` is the single
dependency that accepts it and belongs on the MFA verification route only.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import HTTPException, Request

from ...claims import ChallengeClaims, FullClaims
from ...exceptions import AuthenticationError, ChallengeTokenRejectedError
from ...tokens import extract_bearer_token

if TYPE_CHECKING:
    from ...tokens import TokenIssuer

_logger = logging.getLogger(__name__)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=401,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


class ClaimsGuard:
    """Decodes the bearer token and enforces the expected claim variant.

    Example:
        ```python
        guard = ClaimsGuard(service.token_issuer)

        @router.post("/mfa/setup")
        async def setup(claims: FullClaims = Depends(guard.full_session)):
            return (await service.begin_enrollment(claims.subject)).unwrap()

        @router.post("/mfa/verify")
        async def verify(
            body: VerifyBody,
            claims: ChallengeClaims = Depends(guard.mfa_challenge),
        ):
            ...
        ```
    """

    def __init__(self, issuer: TokenIssuer) -> None:
        self.issuer = issuer

    @staticmethod
    def _token(request: Request) -> str:
        token = extract_bearer_token(request.headers)
        if not token:
            raise _unauthorized("Not authenticated")
        return token

    async def full_session(self, request: Request) -> FullClaims:
        """Require a full session token.

        Raises:
            HTTPException: 401 for a missing, invalid or expired token, and
                for a challenge token.
        """
        try:
            return self.issuer.require_full(self._token(request))
        except ChallengeTokenRejectedError as err:
            _logger.warning("Challenge token presented to a session route")
            raise _unauthorized(str(err)) from err
        except AuthenticationError as err:
            raise _unauthorized(str(err)) from err

    async def mfa_challenge(self, request: Request) -> ChallengeClaims:
        """Require an MFA challenge token.

        Raises:
            HTTPException: 401 for a missing, invalid or expired token, and
                for a full session token.
        """
        try:
            return self.issuer.require_challenge(self._token(request))
        except AuthenticationError as err:
            raise _unauthorized(str(err)) from err


__all__: list[str] = ["ClaimsGuard"]
