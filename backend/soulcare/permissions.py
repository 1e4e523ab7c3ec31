from typing import Annotated

from fastapi import Depends, HTTPException, status

from .auth import CurrentUser


def is_admin(user: dict) -> bool:
    return user.get("role") == "admin"


async def require_admin(current: CurrentUser) -> dict:
    if not is_admin(current):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return current


AdminUser = Annotated[dict, Depends(require_admin)]
