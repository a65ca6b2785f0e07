"""Pending one-time password held in a user's single OTP slot."""
from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum


class OtpPurpose(str, Enum):
    VERIFY = "verify"
    RESET = "reset"


@dataclass(frozen=True)
class PendingOtp:
    """
    The code currently issued to a user and its absolute expiry.

    A user holds at most one of these; issuing a new one for any purpose
    replaces the previous one.
    """

    code: str
    expires_at: datetime
    purpose: OtpPurpose = OtpPurpose.VERIFY

    def is_expired(self, now: datetime) -> bool:
        return now > as_utc(self.expires_at)

    def matches(self, code: str | None) -> bool:
        return secrets.compare_digest((code or "").encode(), self.code.encode())


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes (SQLite drops offsets) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
