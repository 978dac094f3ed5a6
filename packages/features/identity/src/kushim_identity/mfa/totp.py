"""TOTP (Time-based One-Time Password) primitives.

Works with any RFC 6238 authenticator app:
- Google Authenticator
- Microsoft Authenticator
- Authy
- 1Password

Uses pyotp for the code arithmetic and qrcode for the enrollment image.
"""

from __future__ import annotations

import base64
from datetime import datetime, timezone
from io import BytesIO

import pyotp
import qrcode
from pyotp.utils import strings_equal

from ..ports import IQrRenderer, ITotpEngine


class TotpEngine(ITotpEngine):
    """Stateless TOTP engine.

    Example:
        ```python
        engine = TotpEngine(issuer="Kushim")
        secret = engine.generate_secret()
        uri = engine.provisioning_uri(secret, "alice@example.com")

        step = engine.match(secret, "123456")
        if step is not None:
            ...
        ```
    """

    def __init__(
        self,
        *,
        issuer: str = "Kushim",
        digits: int = 6,
        interval: int = 30,
        valid_window: int = 1,
    ) -> None:
        """Initialize the TOTP engine.

        Args:
            issuer: Application name shown in authenticator app.
            digits: Number of digits in code (default 6).
            interval: Time step in seconds (default 30).
            valid_window: Accept codes ±N steps for clock drift (default 1).
        """
        self.issuer = issuer
        self.digits = digits
        self.interval = interval
        self.valid_window = valid_window

    def _totp(self, secret: str) -> pyotp.TOTP:
        return pyotp.TOTP(
            secret,
            digits=self.digits,
            interval=self.interval,
            issuer=self.issuer,
        )

    def generate_secret(self) -> str:
        """Generate a random base32 secret (160 bits)."""
        return pyotp.random_base32(length=32)

    def provisioning_uri(self, secret: str, account_name: str) -> str:
        """Build the otpauth:// URI for an account."""
        return self._totp(secret).provisioning_uri(
            name=account_name,
            issuer_name=self.issuer,
        )

    def code_at(self, secret: str, for_time: datetime) -> str:
        """Code an authenticator would display at ``for_time``."""
        return self._totp(secret).at(for_time)

    def match(
        self, secret: str, code: str, for_time: datetime | None = None
    ) -> int | None:
        """Verify a code and report the time step it belongs to.

        Each step in the ±valid_window range is compared in constant time.

        Args:
            secret: Base32 secret.
            code: Code from the authenticator app.
            for_time: Verification time (default now, UTC).

        Returns:
            Matched counter value, or None.
        """
        code = code.strip()
        if len(code) != self.digits or not code.isdigit():
            return None

        totp = self._totp(secret)
        counter = totp.timecode(for_time or datetime.now(timezone.utc))
        matched: int | None = None
        for offset in range(-self.valid_window, self.valid_window + 1):
            # No early exit: every window step costs the same.
            if strings_equal(code, totp.generate_otp(counter + offset)):
                matched = counter + offset
        return matched

    @staticmethod
    def format_secret(secret: str) -> str:
        """Format secret for manual entry as groups of 4 characters."""
        secret = secret.rstrip("=")
        return " ".join(secret[i : i + 4] for i in range(0, len(secret), 4))


class QrCodeRenderer(IQrRenderer):
    """Renders data as a PNG QR code data URL."""

    def __init__(self, *, box_size: int = 10, border: int = 4) -> None:
        self.box_size = box_size
        self.border = border

    def render(self, data: str) -> str:
        qr = qrcode.QRCode(box_size=self.box_size, border=self.border)
        qr.add_data(data)
        qr.make(fit=True)
        img = qr.make_image(fill_color="black", back_color="white")

        buffer = BytesIO()
        img.save(buffer, format="PNG")
        encoded = base64.b64encode(buffer.getvalue()).decode()
        return f"data:image/png;base64,{encoded}"


__all__: list[str] = ["TotpEngine", "QrCodeRenderer"]
