"""One-time password generation."""

from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from farmer_api.domain.otp import OtpPurpose, PendingOtp

OTP_DIGITS = 6


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OtpGenerator:
    """Issues 6-digit codes with an absolute expiry; keeps no state between calls."""

    def __init__(self, ttl: timedelta = timedelta(minutes=10), clock: Optional[Callable[[], datetime]] = None) -> None:
        self.ttl = ttl
        self.clock = clock or utcnow

    def _code(self) -> str:
        return f"{secrets.randbelow(10 ** OTP_DIGITS):0{OTP_DIGITS}d}"

    def generate(self, purpose: OtpPurpose = OtpPurpose.VERIFY) -> PendingOtp:
        return PendingOtp(code=self._code(), expires_at=self.clock() + self.ttl, purpose=purpose)
