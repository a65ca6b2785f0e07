"""SQLAlchemy models for farmers and their farms."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    String,
    Text,
    JSON,
    func,
)
from sqlalchemy.orm import relationship

from .session import Base


def _new_id() -> str:
    return uuid4().hex


class User(Base):
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=_new_id)
    first_name = Column(String(100), nullable=False)
    middle_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=False)
    gender = Column(String(16), nullable=False)
    age_group = Column(String(32), nullable=False)
    residence_county = Column(String(100), nullable=False)
    residence_location = Column(String(255), nullable=True)
    email = Column(String(255), unique=True, nullable=True)
    phone_number = Column(String(32), unique=True, nullable=False)
    business_number = Column(String(32), nullable=True)
    years_of_experience = Column(Float, nullable=True)
    pin_hash = Column(Text, nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)
    otp = Column(String(6), nullable=True)
    otp_expiry = Column(DateTime(timezone=True), nullable=True)
    otp_purpose = Column(String(16), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    farm = relationship("Farm", uselist=False, back_populates="user", cascade="all,delete-orphan", lazy="selectin")


class Farm(Base):
    __tablename__ = "farms"

    id = Column(String(32), primary_key=True, default=_new_id)
    user_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    name = Column(String(255), nullable=False)
    county = Column(String(100), nullable=False)
    administrative_location = Column(String(255), nullable=False)
    size = Column(Float, nullable=False)
    ownership = Column(String(16), nullable=False)
    farming_types = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    user = relationship("User", back_populates="farm", lazy="selectin")
