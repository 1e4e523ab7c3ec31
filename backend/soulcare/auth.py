from datetime import datetime, timedelta, timezone
from typing import Annotated, Any

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from .config import settings
from .logging_context import set_user_context
from .repositories import users as users_repo

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str | None) -> bool:
    if not hashed:
        return False
    try:
        return pwd_context.verify(password, hashed)
    except ValueError:
        # unrecognised or malformed hash
        return False


def decode_jwt(token: str) -> dict[str, Any]:
    return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])


def _isoformat(value: Any) -> str | None:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat()
    return value


def membership_snapshot(
    user: dict[str, Any], tier: dict[str, Any] | None = None
) -> dict[str, Any] | None:
    """Point-in-time membership view embedded in the session token."""
    if user.get("role") == "admin" or not user.get("membershipTierId"):
        return None
    return {
        "tierId": user.get("membershipTierId"),
        "name": (tier or {}).get("name") or user.get("membershipTierName"),
        "billingCycle": (tier or {}).get("billingCycle"),
        "status": user.get("subscriptionStatus") or "active",
        "endDate": _isoformat(user.get("subscriptionEndDate")),
    }


def session_claims(user: dict[str, Any], tier: dict[str, Any] | None = None) -> dict[str, Any]:
    return {
        "role": user.get("role", "user"),
        "email": user.get("email"),
        "firstName": user.get("firstName"),
        "lastName": user.get("lastName"),
        "createdAt": _isoformat(user.get("createdAt")),
        "membership": membership_snapshot(user, tier),
    }


def create_access_token(
    sub: str,
    expires_minutes: int | None = None,
    *,
    claims: dict[str, Any] | None = None,
) -> str:
    expire = datetime.now(timezone.utc) + timedelta(
        minutes=expires_minutes or settings.jwt_expires_minutes
    )
    to_encode: dict[str, Any] = {"sub": sub, "exp": expire, "token_type": "access"}
    if claims:
        to_encode.update(claims)
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def issue_session_token(user: dict[str, Any], tier: dict[str, Any] | None = None) -> str:
    return create_access_token(str(user["userId"]), claims=session_claims(user, tier))


async def _user_from_token(token: str) -> dict[str, Any] | None:
    try:
        payload = decode_jwt(token)
    except JWTError:
        return None
    user_id = payload.get("sub")
    if not user_id or payload.get("token_type", "access") != "access":
        return None
    user = await users_repo.get_user(str(user_id))
    if not user or user.get("isActive") is False:
        return None
    user["session"] = {
        "role": payload.get("role"),
        "membership": payload.get("membership"),
    }
    return user


async def get_current_user(token: Annotated[str, Depends(oauth2_scheme)]):
    user = await _user_from_token(token)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    set_user_context(str(user["userId"]))
    return user


CurrentUser = Annotated[dict, Depends(get_current_user)]
