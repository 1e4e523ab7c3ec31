from typing import Optional

from .common import CamelModel, require_fields, split_tags


class AuthRegisterRequest(CamelModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    phone: Optional[str] = None
    membership_tier_id: Optional[str] = None


class AuthLoginRequest(CamelModel):
    email: str
    password: str


class AuthOtpVerifyRequest(CamelModel):
    email: str
    code: str


class AuthForgotPasswordRequest(CamelModel):
    email: Optional[str] = None


class AuthResetPasswordRequest(CamelModel):
    email: Optional[str] = None
    code: Optional[str] = None
    new_password: Optional[str] = None


__all__ = [
    "AuthForgotPasswordRequest",
    "AuthLoginRequest",
    "AuthOtpVerifyRequest",
    "AuthRegisterRequest",
    "AuthResetPasswordRequest",
    "CamelModel",
    "require_fields",
    "split_tags",
]
