from __future__ import annotations

from typing import Union

from fastapi import APIRouter, Depends, status

from farmer_api.routers import user_out
from farmer_api.schemas import (
    LoginOtpResponse,
    LoginRequest,
    LoginTokenResponse,
    MessageResponse,
    PasswordResetRequest,
    RegisterRequest,
    RegisterResponse,
    ResetPasswordRequest,
    VerifyOtpRequest,
)
from farmer_api.services.auth_service import AuthService, LoginSuccess

router = APIRouter(prefix="/auth", tags=["auth"])


def get_auth_service() -> AuthService:
    return AuthService()


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(body: RegisterRequest, auth_service: AuthService = Depends(get_auth_service)):
    result = await auth_service.register(
        body.profile_fields(),
        body.farm_fields(),
        phone_number=body.phone_number,
        pin=body.pin,
        email=str(body.email) if body.email else None,
    )
    return RegisterResponse(user=user_out(result.user), message=result.message)


@router.post("/login", response_model=Union[LoginTokenResponse, LoginOtpResponse])
async def login(body: LoginRequest, auth_service: AuthService = Depends(get_auth_service)):
    result = await auth_service.login(body.phone_number, body.pin)
    if isinstance(result, LoginSuccess):
        return LoginTokenResponse(user=user_out(result.user), token=result.token)
    return LoginOtpResponse(user=user_out(result.user), message=result.message)


@router.post("/request-password-reset", response_model=MessageResponse)
async def request_password_reset(body: PasswordResetRequest, auth_service: AuthService = Depends(get_auth_service)):
    result = await auth_service.request_password_reset(body.phone_number)
    return MessageResponse(message=result.message)


@router.post("/verify-otp", response_model=MessageResponse)
async def verify_otp(body: VerifyOtpRequest, auth_service: AuthService = Depends(get_auth_service)):
    result = await auth_service.verify_otp(body.phone_number, body.otp)
    return MessageResponse(message=result.message)


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(body: ResetPasswordRequest, auth_service: AuthService = Depends(get_auth_service)):
    result = await auth_service.reset_password(body.phone_number, body.otp, body.new_pin)
    return MessageResponse(message=result.message)
