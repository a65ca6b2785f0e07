"""
Authentication and identity related use cases.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Mapping, Optional

from fastapi.concurrency import run_in_threadpool

from farmer_api.core.config import get_settings
from farmer_api.core.otp import OtpGenerator, utcnow
from farmer_api.core.security import PinHasher, get_pin_hasher
from farmer_api.core.sms import SmsGateway, get_sms_gateway
from farmer_api.domain.otp import OtpPurpose, PendingOtp
from farmer_api.repositories import DuplicateRecordError, IdentityStore, SQLRepository, UserRecord
from farmer_api.services.errors import BadRequestError, ConflictError, NotFoundError, UnauthorizedError
from farmer_api.services.token_service import issue_token

logger = logging.getLogger(__name__)

PHONE_EXISTS = "phone number already exists"
EMAIL_EXISTS = "email already exists"
INVALID_CREDENTIALS = "invalid credentials"

REGISTERED_MESSAGE = "Registration successful. Please verify your phone number using the OTP sent to you via SMS."
OTP_RESENT_MESSAGE = "Account not verified. A new OTP has been resent to your phone number."


class AccountExistsError(ConflictError):
    pass


class InvalidCredentialsError(UnauthorizedError):
    pass


class OtpError(UnauthorizedError):
    """Missing, expired or mismatched one-time password."""


class DeliveryError(BadRequestError):
    pass


class InvalidPinError(BadRequestError):
    pass


class UserNotFoundError(NotFoundError):
    pass


@dataclass
class RegisterResult:
    user: UserRecord
    message: str


@dataclass
class LoginSuccess:
    user: UserRecord
    token: str


@dataclass
class LoginVerificationRequired:
    user: UserRecord
    message: str


@dataclass
class MessageResult:
    message: str


@dataclass
class AuthService:
    """
    Handles registration, login, OTP verification and PIN reset flows.

    Each user has a single OTP slot shared by phone verification and PIN
    reset: issuing a code for either purpose replaces whatever was pending.
    Collaborators are injected; missing ones fall back to the configured
    defaults.
    """

    repository: Optional[IdentityStore] = None
    hasher: Optional[PinHasher] = None
    otp_generator: Optional[OtpGenerator] = None
    sms_gateway: Optional[SmsGateway] = None
    clock: Callable[[], datetime] = utcnow

    def __post_init__(self):
        self.settings = get_settings()
        if self.repository is None:
            self.repository = SQLRepository()
        if self.hasher is None:
            self.hasher = get_pin_hasher()
        if self.otp_generator is None:
            self.otp_generator = OtpGenerator(ttl=timedelta(seconds=self.settings.otp_ttl_seconds), clock=self.clock)
        if self.sms_gateway is None:
            self.sms_gateway = get_sms_gateway(self.settings)

    # -------------------------------------- helpers --------------------------------------
    def _now(self) -> datetime:
        return self.clock()

    def _validity_minutes(self) -> int:
        return max(1, int(self.otp_generator.ttl.total_seconds() // 60))

    def _verification_sms(self, pending: PendingOtp) -> str:
        return f"Your verification code is {pending.code}. It is valid for {self._validity_minutes()} minutes."

    def _reset_sms(self, pending: PendingOtp) -> str:
        return (
            f"Your PIN reset code is {pending.code}. It is valid for {self._validity_minutes()} minutes. "
            "If you did not request a reset, ignore this message."
        )

    async def _issue_otp(self, user: UserRecord, purpose: OtpPurpose) -> tuple[UserRecord, PendingOtp]:
        pending = self.otp_generator.generate(purpose)
        updated = await self.repository.update_user(user.id, pending_otp=pending)
        if updated is None:
            raise UserNotFoundError("user not found")
        logger.info("Issued %s OTP for user %s", purpose.value, user.id)
        return updated, pending

    def _check_pending_otp(self, user: Optional[UserRecord], code: str, *, missing: str, expired: str, mismatch: str) -> None:
        pending = user.pending_otp if user else None
        if pending is None:
            raise OtpError(missing)
        if pending.is_expired(self._now()):
            raise OtpError(expired)
        if not pending.matches(code):
            raise OtpError(mismatch)

    async def _discard_unverifiable_account(self, user_id: str) -> None:
        logger.warning("Verification SMS for user %s not delivered; removing account", user_id)
        await self.repository.delete_user(user_id)

    # -------------------------------------- registration --------------------------------------
    async def register(
        self,
        profile: Mapping[str, Any],
        farm: Mapping[str, Any],
        phone_number: str,
        pin: str,
        email: Optional[str] = None,
    ) -> RegisterResult:
        phone = (phone_number or "").strip()
        email_value = (email or "").strip() or None
        if await self.repository.find_by_phone(phone):
            raise AccountExistsError(PHONE_EXISTS)
        if email_value and await self.repository.find_by_email(email_value):
            raise AccountExistsError(EMAIL_EXISTS)
        if not (pin or "").strip():
            raise InvalidPinError("PIN is required")

        pin_hash = await run_in_threadpool(self.hasher.hash, pin)
        pending = self.otp_generator.generate(OtpPurpose.VERIFY)
        user_fields = {**profile, "phone_number": phone, "email": email_value}
        try:
            user = await self.repository.create_user_with_farm(user_fields, dict(farm), pin_hash=pin_hash, pending_otp=pending)
        except DuplicateRecordError as exc:
            raise AccountExistsError(PHONE_EXISTS if exc.field_name == "phone_number" else EMAIL_EXISTS) from exc
        logger.info("Registered user %s; sending verification OTP", user.id)

        try:
            sent = await self.sms_gateway.send_sms(phone, self._verification_sms(pending))
        except Exception:
            await self._discard_unverifiable_account(user.id)
            raise
        if not sent:
            await self._discard_unverifiable_account(user.id)
            raise DeliveryError("failed to send verification OTP")
        return RegisterResult(user=user, message=REGISTERED_MESSAGE)

    # -------------------------------------- login --------------------------------------
    async def login(self, phone_number: str, pin: str) -> LoginSuccess | LoginVerificationRequired:
        phone = (phone_number or "").strip()
        user = await self.repository.find_by_phone(phone)
        if not user:
            await run_in_threadpool(self.hasher.verify_dummy, pin or "")
            raise InvalidCredentialsError(INVALID_CREDENTIALS)
        pin_hash = await self.repository.get_pin_hash(user.id)
        if not await run_in_threadpool(self.hasher.verify, pin or "", pin_hash):
            raise InvalidCredentialsError(INVALID_CREDENTIALS)

        if not user.is_verified:
            user, pending = await self._issue_otp(user, OtpPurpose.VERIFY)
            if not await self.sms_gateway.send_sms(phone, self._verification_sms(pending)):
                logger.warning("Could not resend verification OTP to user %s", user.id)
                raise DeliveryError("failed to send verification OTP")
            return LoginVerificationRequired(user=user, message=OTP_RESENT_MESSAGE)

        token = issue_token(user.id)
        logger.info("User %s logged in", user.id)
        return LoginSuccess(user=user, token=token)

    # -------------------------------------- verification --------------------------------------
    async def verify_otp(self, phone_number: str, otp: str) -> MessageResult:
        phone = (phone_number or "").strip()
        user = await self.repository.find_by_phone(phone)
        self._check_pending_otp(
            user,
            otp,
            missing="invalid OTP request",
            expired="OTP has expired",
            mismatch="invalid OTP",
        )
        await self.repository.update_user(user.id, is_verified=True, pending_otp=None)
        logger.info("User %s verified phone number", user.id)
        return MessageResult(message="OTP verified successfully")

    # -------------------------------------- PIN reset --------------------------------------
    async def request_password_reset(self, phone_number: str) -> MessageResult:
        phone = (phone_number or "").strip()
        user = await self.repository.find_by_phone(phone)
        if not user:
            raise UserNotFoundError("user not found")
        user, pending = await self._issue_otp(user, OtpPurpose.RESET)
        if not await self.sms_gateway.send_sms(phone, self._reset_sms(pending)):
            logger.warning("Could not send reset OTP to user %s", user.id)
            raise DeliveryError("failed to send OTP")
        return MessageResult(message="OTP sent successfully")

    async def reset_password(self, phone_number: str, otp: str, new_pin: str) -> MessageResult:
        phone = (phone_number or "").strip()
        user = await self.repository.find_by_phone(phone)
        self._check_pending_otp(
            user,
            otp,
            missing="invalid reset request",
            expired="reset code has expired",
            mismatch="invalid reset code",
        )
        if not (new_pin or "").strip():
            raise InvalidPinError("new PIN is required")
        pin_hash = await run_in_threadpool(self.hasher.hash, new_pin)
        await self.repository.update_user(user.id, pin_hash=pin_hash, pending_otp=None)
        logger.info("User %s reset PIN", user.id)
        return MessageResult(message="password reset successful")
