"""Request/response bodies for the JSON API (camelCase on the wire)."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from farmer_api.domain.farmers import Gender, Ownership


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# -------------------------- requests --------------------------
class RegisterRequest(CamelModel):
    # farm
    farm_name: str
    county: str
    administrative_location: str
    farm_size: float = Field(gt=0)
    ownership: Ownership
    farming_types: list[str] = Field(min_length=1)
    # farmer
    first_name: str
    middle_name: Optional[str] = None
    last_name: str
    gender: Gender
    age_group: str
    residence_county: str
    residence_location: Optional[str] = None
    years_of_experience: Optional[float] = Field(default=None, ge=0)
    email: Optional[EmailStr] = None
    phone_number: str
    business_number: Optional[str] = None
    pin: str

    def profile_fields(self) -> dict[str, Any]:
        return {
            "first_name": self.first_name,
            "middle_name": self.middle_name,
            "last_name": self.last_name,
            "gender": self.gender.value,
            "age_group": self.age_group,
            "residence_county": self.residence_county,
            "residence_location": self.residence_location,
            "business_number": self.business_number,
            "years_of_experience": self.years_of_experience,
        }

    def farm_fields(self) -> dict[str, Any]:
        return {
            "name": self.farm_name,
            "county": self.county,
            "administrative_location": self.administrative_location,
            "size": self.farm_size,
            "ownership": self.ownership.value,
            "farming_types": list(self.farming_types),
        }


class LoginRequest(CamelModel):
    phone_number: str
    pin: str


class PasswordResetRequest(CamelModel):
    phone_number: str


class VerifyOtpRequest(CamelModel):
    phone_number: str
    otp: str = Field(min_length=6, max_length=6)


class ResetPasswordRequest(CamelModel):
    phone_number: str
    otp: str = Field(min_length=6, max_length=6)
    new_pin: str


class UpdateUserRequest(CamelModel):
    first_name: Optional[str] = None
    middle_name: Optional[str] = None
    last_name: Optional[str] = None
    gender: Optional[Gender] = None
    age_group: Optional[str] = None
    residence_county: Optional[str] = None
    residence_location: Optional[str] = None
    email: Optional[EmailStr] = None
    business_number: Optional[str] = None
    years_of_experience: Optional[float] = Field(default=None, ge=0)


class UpdateFarmRequest(CamelModel):
    name: Optional[str] = None
    county: Optional[str] = None
    administrative_location: Optional[str] = None
    size: Optional[float] = Field(default=None, gt=0)
    ownership: Optional[Ownership] = None
    farming_types: Optional[list[str]] = Field(default=None, min_length=1)


# -------------------------- responses --------------------------
class FarmOwnerOut(CamelModel):
    id: str
    first_name: str
    last_name: str
    phone_number: str
    email: Optional[str] = None


class FarmOut(CamelModel):
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
    owner: Optional[FarmOwnerOut] = None


class UserOut(CamelModel):
    """Public view of a farmer. The PIN hash and pending OTP are never part of it."""

    id: str
    first_name: str
    middle_name: Optional[str] = None
    last_name: str
    gender: str
    age_group: str
    residence_county: str
    residence_location: Optional[str] = None
    email: Optional[str] = None
    phone_number: str
    business_number: Optional[str] = None
    years_of_experience: Optional[float] = None
    is_verified: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    farm: Optional[FarmOut] = None


class MessageResponse(CamelModel):
    message: str


class RegisterResponse(CamelModel):
    user: UserOut
    message: str


class LoginTokenResponse(CamelModel):
    user: UserOut
    token: str


class LoginOtpResponse(CamelModel):
    user: UserOut
    message: str


class PageMetaOut(CamelModel):
    total: int
    page: int
    pages: int
    has_next_page: bool
    has_prev_page: bool


class UserPage(CamelModel):
    data: list[UserOut]
    meta: PageMetaOut


class FarmPage(CamelModel):
    data: list[FarmOut]
    meta: PageMetaOut
