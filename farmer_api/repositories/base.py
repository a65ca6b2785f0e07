"""Identity store contract and the records it hands out."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional, Protocol

from farmer_api.domain.otp import PendingOtp


class DuplicateRecordError(Exception):
    """Raised when a write violates a unique constraint (phone number or email)."""

    def __init__(self, field_name: str):
        super().__init__(f"duplicate {field_name}")
        self.field_name = field_name


@dataclass(frozen=True)
class FarmOwner:
    id: str
    first_name: str
    last_name: str
    phone_number: str
    email: Optional[str]


@dataclass(frozen=True)
class FarmRecord:
    id: str
    user_id: str
    name: str
    county: str
    administrative_location: str
    size: float
    ownership: str
    farming_types: list[str]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    owner: Optional[FarmOwner] = None


@dataclass(frozen=True)
class UserRecord:
    """A user as seen outside the store. Carries no credential hash."""

    id: str
    first_name: str
    last_name: str
    gender: str
    age_group: str
    residence_county: str
    phone_number: str
    middle_name: Optional[str] = None
    residence_location: Optional[str] = None
    email: Optional[str] = None
    business_number: Optional[str] = None
    years_of_experience: Optional[float] = None
    is_verified: bool = False
    pending_otp: Optional[PendingOtp] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    farm: Optional[FarmRecord] = field(default=None)


class IdentityStore(Protocol):
    async def find_by_id(self, user_id: str) -> Optional[UserRecord]:
        ...

    async def find_by_phone(self, phone_number: str) -> Optional[UserRecord]:
        ...

    async def find_by_email(self, email: str) -> Optional[UserRecord]:
        ...

    async def get_pin_hash(self, user_id: str) -> Optional[str]:
        ...

    async def create_user_with_farm(
        self,
        user_fields: dict[str, Any],
        farm_fields: dict[str, Any],
        *,
        pin_hash: str,
        pending_otp: Optional[PendingOtp],
    ) -> UserRecord:
        ...

    async def update_user(self, user_id: str, **fields: Any) -> Optional[UserRecord]:
        ...

    async def delete_user(self, user_id: str) -> bool:
        ...
