"""TOTP multi-factor authentication.

Usage:
    ```python
    manager = MfaEnrollmentManager(
        directory=directory, totp_engine=engine, qr_renderer=QrCodeRenderer()
    )
    artifact = (await manager.begin_enrollment(user_id)).unwrap()

    verifier = MfaVerifier(
        directory=directory, totp_engine=engine, token_issuer=issuer
    )
    await verifier.confirm_enrollment(user_id, code)
    ```
"""

from __future__ import annotations

from .enrollment import EnrollmentArtifact, MfaEnrollmentManager
from .replay import InMemoryUsedCodeStore
from .totp import QrCodeRenderer, TotpEngine
from .verifier import EnrollmentConfirmation, MfaVerifier

__all__: list[str] = [
    "EnrollmentArtifact",
    "EnrollmentConfirmation",
    "InMemoryUsedCodeStore",
    "MfaEnrollmentManager",
    "MfaVerifier",
    "QrCodeRenderer",
    "TotpEngine",
]
