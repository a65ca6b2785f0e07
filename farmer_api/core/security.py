"""Security helpers (PIN hashing and verification)."""

from __future__ import annotations

from functools import lru_cache

from argon2 import PasswordHasher, exceptions as argon_exc

_PREFIX = "argon2$"


class PinHasher:
    """Salted one-way hashing of short numeric PINs backed by Argon2."""

    def __init__(self, hasher: PasswordHasher | None = None) -> None:
        self._ph = hasher or PasswordHasher()
        # Compared against when no user matches, so both login failures do the same work.
        self._dummy_hash = self.hash("0000")

    def hash(self, pin: str) -> str:
        """Create an Argon2 hash with a prefix for detection."""
        hashed = self._ph.hash(pin)
        return f"{_PREFIX}{hashed}"

    def verify(self, pin: str, stored_hash: str | None) -> bool:
        stored = stored_hash or ""
        if not stored.startswith(_PREFIX):
            return False
        hashed = stored[len(_PREFIX) :]
        try:
            return self._ph.verify(hashed, pin)
        except (argon_exc.VerifyMismatchError, argon_exc.VerificationError, argon_exc.InvalidHashError):
            return False

    def verify_dummy(self, pin: str) -> bool:
        self.verify(pin, self._dummy_hash)
        return False


@lru_cache
def get_pin_hasher() -> PinHasher:
    return PinHasher()
