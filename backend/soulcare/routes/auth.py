import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Response, status

from .. import schemas
from ..auth import (
    CurrentUser,
    hash_password,
    issue_session_token,
    membership_snapshot,
    verify_password,
)
from ..config import settings
from ..metrics import auth_login_total
from ..repositories import documents
from ..repositories import memberships as memberships_repo
from ..repositories import users as users_repo
from ..services import mail_service, otp_service
from ..services.otp_service import OtpPurpose
from ..utils.ids import uuid_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

_INVALID_CREDENTIALS = "Invalid email or password"


def _public_user(user: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in user.items() if k not in {"password", "session"}}


async def _tier_for(user: dict[str, Any]) -> dict[str, Any] | None:
    tier_id = user.get("membershipTierId")
    if not tier_id:
        return None
    return await memberships_repo.get_tier(tier_id)


async def _session_payload(user: dict[str, Any]) -> dict[str, Any]:
    token = issue_session_token(user, await _tier_for(user))
    return {"accessToken": token, "tokenType": "bearer", "user": _public_user(user)}


async def _check_credentials(email: str, password: str) -> dict[str, Any]:
    user = await users_repo.get_user_by_email(email, include_password=True)
    if not user or not verify_password(password, user.get("password")):
        auth_login_total.labels(outcome="invalid_credentials").inc()
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=_INVALID_CREDENTIALS)
    if user.get("isActive") is False:
        auth_login_total.labels(outcome="inactive").inc()
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is disabled")
    return user


async def _send_code(email: str, purpose: OtpPurpose) -> None:
    code, _ = await otp_service.issue_code(email, purpose)
    if not await mail_service.send_otp_email(email, code, purpose):
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to send verification code. Please try again.",
        )


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(payload: schemas.AuthRegisterRequest):
    schemas.require_fields(payload, "first_name", "last_name", "email", "password")
    if len(payload.password) < settings.password_min_length:
        raise HTTPException(
            status_code=400,
            detail=f"Password must be at least {settings.password_min_length} characters",
        )

    email = users_repo.normalize_email(payload.email)
    if await users_repo.get_user_by_email(email):
        raise HTTPException(status_code=409, detail="User with this email already exists")

    tier = None
    if payload.membership_tier_id:
        tier = await memberships_repo.get_tier(payload.membership_tier_id)
        if tier is None:
            raise HTTPException(status_code=400, detail="Invalid membership tier")

    now = documents.utc_now()
    user = await users_repo.create_user(
        {
            "userId": uuid_id(),
            "firstName": payload.first_name,
            "lastName": payload.last_name,
            "name": f"{payload.first_name} {payload.last_name}",
            "email": email,
            "password": hash_password(payload.password),
            "phone": payload.phone,
            "role": "user",
            "isActive": True,
            "isVerified": False,
            "membershipTierId": tier["tierId"] if tier else None,
            "membershipTierName": tier.get("name") if tier else None,
            "createdAt": now,
            "updatedAt": now,
        }
    )
    logger.info("User registered", extra={"new_user_id": user["userId"]})
    return {"message": "User registered successfully", "user": user}


@router.post("/login")
async def login(payload: schemas.AuthLoginRequest, response: Response):
    user = await _check_credentials(payload.email, payload.password)
    if settings.auth_require_login_otp:
        await _send_code(user["email"], OtpPurpose.login)
        auth_login_total.labels(outcome="otp_required").inc()
        response.status_code = status.HTTP_202_ACCEPTED
        return {"otpRequired": True, "message": "Verification code sent"}

    auth_login_total.labels(outcome="success").inc()
    return await _session_payload(user)


@router.post("/login/otp")
async def login_otp(payload: schemas.AuthLoginRequest):
    user = await _check_credentials(payload.email, payload.password)
    await _send_code(user["email"], OtpPurpose.login)
    return {"message": "Verification code sent"}


@router.post("/login/verify")
async def login_verify(payload: schemas.AuthOtpVerifyRequest):
    email = users_repo.normalize_email(payload.email)
    if not await otp_service.verify_code(email, OtpPurpose.login, payload.code):
        auth_login_total.labels(outcome="otp_rejected").inc()
        raise HTTPException(status_code=400, detail="Invalid or expired verification code")
    await otp_service.consume_code(email, OtpPurpose.login)

    user = await users_repo.get_user_by_email(email)
    if not user or user.get("isActive") is False:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=_INVALID_CREDENTIALS)
    auth_login_total.labels(outcome="success").inc()
    return await _session_payload(user)


@router.post("/forgot-password")
async def forgot_password(payload: schemas.AuthForgotPasswordRequest):
    schemas.require_fields(payload, "email")
    email = users_repo.normalize_email(payload.email)
    if not await users_repo.get_user_by_email(email):
        raise HTTPException(status_code=404, detail="User not found")
    await _send_code(email, OtpPurpose.password_reset)
    return {"message": "Verification code sent to your email"}


@router.post("/reset-password")
async def reset_password(payload: schemas.AuthResetPasswordRequest):
    schemas.require_fields(payload, "email", "code", "new_password")
    if len(payload.new_password) < settings.password_min_length:
        raise HTTPException(
            status_code=400,
            detail=f"Password must be at least {settings.password_min_length} characters",
        )
    email = users_repo.normalize_email(payload.email)
    if not await otp_service.verify_code(email, OtpPurpose.password_reset, payload.code):
        raise HTTPException(status_code=400, detail="Invalid or expired verification code")

    if not await users_repo.set_password(email, hash_password(payload.new_password)):
        raise HTTPException(status_code=404, detail="User not found")
    await otp_service.consume_code(email, OtpPurpose.password_reset)
    logger.info("Password reset completed")
    return {"message": "Password reset successfully"}


@router.get("/me")
async def me(current: CurrentUser):
    tier = await _tier_for(current)
    return {"user": _public_user(current), "membership": membership_snapshot(current, tier)}
