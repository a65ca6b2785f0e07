"""Domain helpers for phone number handling."""
from __future__ import annotations

COUNTRY_CODE = "254"


def normalize_phone(value: str | None) -> str:
    """
    Return the international form expected by the SMS provider.

    ``0712345678`` and ``+254712345678`` both become ``254712345678``; numbers
    already starting with the country code are passed through.
    """
    raw = (value or "").strip().replace(" ", "")
    if raw.startswith("+"):
        raw = raw[1:]
    if raw.startswith(COUNTRY_CODE):
        return raw
    if raw.startswith("0"):
        return COUNTRY_CODE + raw[1:]
    return raw
