"""High-level data access helpers backed by SQLAlchemy."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from farmer_api.db.models import Farm, User
from farmer_api.db.session import get_session
from farmer_api.domain.otp import OtpPurpose, PendingOtp, as_utc

from .base import DuplicateRecordError, FarmOwner, FarmRecord, UserRecord

logger = logging.getLogger(__name__)

PROFILE_FIELDS = frozenset(
    {
        "first_name",
        "middle_name",
        "last_name",
        "gender",
        "age_group",
        "residence_county",
        "residence_location",
        "email",
        "business_number",
        "years_of_experience",
    }
)
USER_UPDATE_FIELDS = PROFILE_FIELDS | {"pin_hash", "is_verified"}
FARM_FIELDS = frozenset(
    {"name", "county", "administrative_location", "size", "ownership", "farming_types"}
)


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def _maybe_utc(value: Optional[datetime]) -> Optional[datetime]:
    return as_utc(value) if value is not None else None


def _otp_columns(pending: Optional[PendingOtp]) -> dict[str, Any]:
    """Code, expiry and purpose are always written together."""
    if pending is None:
        return {"otp": None, "otp_expiry": None, "otp_purpose": None}
    return {
        "otp": pending.code,
        "otp_expiry": pending.expires_at,
        "otp_purpose": OtpPurpose(pending.purpose).value,
    }


def _pending_otp(user: User) -> Optional[PendingOtp]:
    if not user.otp or user.otp_expiry is None:
        return None
    return PendingOtp(
        code=user.otp,
        expires_at=as_utc(user.otp_expiry),
        purpose=OtpPurpose(user.otp_purpose or OtpPurpose.VERIFY.value),
    )


def _to_farm_record(farm: Farm, *, with_owner: bool = False) -> FarmRecord:
    owner = None
    if with_owner and farm.user is not None:
        owner = FarmOwner(
            id=farm.user.id,
            first_name=farm.user.first_name,
            last_name=farm.user.last_name,
            phone_number=farm.user.phone_number,
            email=farm.user.email,
        )
    return FarmRecord(
        id=farm.id,
        user_id=farm.user_id,
        name=farm.name,
        county=farm.county,
        administrative_location=farm.administrative_location,
        size=farm.size,
        ownership=farm.ownership,
        farming_types=list(farm.farming_types or []),
        created_at=_maybe_utc(farm.created_at),
        updated_at=_maybe_utc(farm.updated_at),
        owner=owner,
    )


def _to_user_record(user: User) -> UserRecord:
    """The single projection from a row to a record; pin_hash is dropped here."""
    return UserRecord(
        id=user.id,
        first_name=user.first_name,
        middle_name=user.middle_name,
        last_name=user.last_name,
        gender=user.gender,
        age_group=user.age_group,
        residence_county=user.residence_county,
        residence_location=user.residence_location,
        email=user.email,
        phone_number=user.phone_number,
        business_number=user.business_number,
        years_of_experience=user.years_of_experience,
        is_verified=bool(user.is_verified),
        pending_otp=_pending_otp(user),
        created_at=_maybe_utc(user.created_at),
        updated_at=_maybe_utc(user.updated_at),
        farm=_to_farm_record(user.farm) if user.farm is not None else None,
    )


class SQLRepository:
    """CRUD helpers wrapping the async SQLAlchemy session."""

    # -------------------------- users --------------------------
    async def find_by_id(self, user_id: str) -> Optional[UserRecord]:
        async with get_session() as session:
            user = await session.get(User, user_id)
            return _to_user_record(user) if user else None

    async def find_by_phone(self, phone_number: str) -> Optional[UserRecord]:
        async with get_session() as session:
            stmt = select(User).where(User.phone_number == phone_number)
            user = (await session.execute(stmt)).scalar_one_or_none()
            return _to_user_record(user) if user else None

    async def find_by_email(self, email: str) -> Optional[UserRecord]:
        async with get_session() as session:
            stmt = select(User).where(User.email == email)
            user = (await session.execute(stmt)).scalar_one_or_none()
            return _to_user_record(user) if user else None

    async def get_pin_hash(self, user_id: str) -> Optional[str]:
        async with get_session() as session:
            stmt = select(User.pin_hash).where(User.id == user_id)
            return (await session.execute(stmt)).scalar_one_or_none()

    async def _duplicate_field(self, session: AsyncSession, phone_number: str | None, email: str | None) -> Optional[str]:
        """Name the unique field already taken by another row, if any."""
        if phone_number:
            stmt = select(User.id).where(User.phone_number == phone_number).limit(1)
            if (await session.execute(stmt)).first() is not None:
                return "phone_number"
        if email:
            stmt = select(User.id).where(User.email == email).limit(1)
            if (await session.execute(stmt)).first() is not None:
                return "email"
        return None

    async def create_user_with_farm(
        self,
        user_fields: dict[str, Any],
        farm_fields: dict[str, Any],
        *,
        pin_hash: str,
        pending_otp: Optional[PendingOtp],
    ) -> UserRecord:
        """Insert the user and its farm in one transaction; neither persists on failure."""
        now = datetime.now(timezone.utc)
        user = User(
            **{key: _plain(value) for key, value in user_fields.items()},
            pin_hash=pin_hash,
            is_verified=False,
            created_at=now,
            updated_at=now,
            **_otp_columns(pending_otp),
        )
        user.farm = Farm(
            **{key: _plain(value) for key, value in farm_fields.items()},
            created_at=now,
            updated_at=now,
        )
        async with get_session() as session:
            session.add(user)
            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                field_name = await self._duplicate_field(session, user_fields.get("phone_number"), user_fields.get("email"))
                if field_name is None:
                    raise
                logger.info("Rejected duplicate %s on registration", field_name)
                raise DuplicateRecordError(field_name) from exc
            return _to_user_record(user)

    async def update_user(self, user_id: str, **fields: Any) -> Optional[UserRecord]:
        """
        Apply ``fields`` to the user. ``pending_otp`` (a PendingOtp or None)
        replaces the OTP slot as a whole; other keys must be user columns.
        """
        async with get_session() as session:
            user = await session.get(User, user_id)
            if not user:
                return None
            for key, value in fields.items():
                if key == "pending_otp":
                    for column, column_value in _otp_columns(value).items():
                        setattr(user, column, column_value)
                elif key in USER_UPDATE_FIELDS:
                    setattr(user, key, _plain(value))
                else:
                    raise ValueError(f"Unknown user field: {key}")
            user.updated_at = datetime.now(timezone.utc)
            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                if fields.get("email") and await self._duplicate_field(session, None, fields["email"]):
                    raise DuplicateRecordError("email") from exc
                raise
            return _to_user_record(user)

    async def delete_user(self, user_id: str) -> bool:
        async with get_session() as session:
            user = await session.get(User, user_id)
            if not user:
                return False
            await session.delete(user)
            await session.commit()
            return True

    async def list_users(self, *, offset: int, limit: int, search: str | None = None) -> tuple[list[UserRecord], int]:
        stmt = select(User)
        count_stmt = select(func.count()).select_from(User)
        if search:
            condition = or_(
                User.first_name.icontains(search, autoescape=True),
                User.last_name.icontains(search, autoescape=True),
                User.email.icontains(search, autoescape=True),
                User.phone_number.contains(search, autoescape=True),
            )
            stmt = stmt.where(condition)
            count_stmt = count_stmt.where(condition)
        stmt = stmt.order_by(User.created_at.desc()).offset(offset).limit(limit)
        async with get_session() as session:
            users = (await session.execute(stmt)).scalars().all()
            total = (await session.execute(count_stmt)).scalar_one()
            return [_to_user_record(user) for user in users], int(total)

    # -------------------------- farms --------------------------
    async def find_farm(self, farm_id: str) -> Optional[FarmRecord]:
        async with get_session() as session:
            farm = await session.get(Farm, farm_id)
            return _to_farm_record(farm, with_owner=True) if farm else None

    async def update_farm(self, farm_id: str, **fields: Any) -> Optional[FarmRecord]:
        async with get_session() as session:
            farm = await session.get(Farm, farm_id)
            if not farm:
                return None
            for key, value in fields.items():
                if key not in FARM_FIELDS:
                    raise ValueError(f"Unknown farm field: {key}")
                setattr(farm, key, list(value) if key == "farming_types" else _plain(value))
            farm.updated_at = datetime.now(timezone.utc)
            await session.commit()
            return _to_farm_record(farm, with_owner=True)

    async def delete_farm(self, farm_id: str) -> bool:
        async with get_session() as session:
            farm = await session.get(Farm, farm_id)
            if not farm:
                return False
            await session.delete(farm)
            await session.commit()
            return True

    async def list_farms(self, *, offset: int, limit: int, search: str | None = None) -> tuple[list[FarmRecord], int]:
        stmt = select(Farm)
        count_stmt = select(func.count()).select_from(Farm)
        if search:
            condition = or_(
                Farm.name.icontains(search, autoescape=True),
                Farm.county.icontains(search, autoescape=True),
                Farm.administrative_location.icontains(search, autoescape=True),
            )
            stmt = stmt.where(condition)
            count_stmt = count_stmt.where(condition)
        stmt = stmt.order_by(Farm.created_at.desc()).offset(offset).limit(limit)
        async with get_session() as session:
            farms = (await session.execute(stmt)).scalars().all()
            total = (await session.execute(count_stmt)).scalar_one()
            return [_to_farm_record(farm, with_owner=True) for farm in farms], int(total)
