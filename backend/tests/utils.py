import uuid
from datetime import datetime, timezone

from soulcare.auth import hash_password, issue_session_token
from soulcare.repositories import users as users_repo

DEFAULT_PASSWORD = "Secret123!"


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


async def create_user(
    *,
    role: str = "user",
    email: str | None = None,
    password: str = DEFAULT_PASSWORD,
    **extra,
) -> dict:
    now = datetime.now(timezone.utc)
    return await users_repo.create_user(
        {
            "userId": str(uuid.uuid4()),
            "firstName": "Test",
            "lastName": role.title(),
            "email": email or f"{role}_{uuid.uuid4().hex[:8]}@example.com",
            "password": hash_password(password),
            "role": role,
            "isActive": True,
            "createdAt": now,
            "updatedAt": now,
            **extra,
        }
    )


async def admin_headers() -> dict[str, str]:
    admin = await create_user(role="admin")
    return auth_header(issue_session_token(admin))


async def member_headers(**extra) -> tuple[dict[str, str], dict]:
    user = await create_user(**extra)
    return auth_header(issue_session_token(user)), user
