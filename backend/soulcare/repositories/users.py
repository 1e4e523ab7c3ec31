from __future__ import annotations

from typing import Any, Mapping

from .. import collections
from ..utils.pagination import PageParams
from . import documents

UserRow = dict[str, Any]

_WITHOUT_PASSWORD = {"password": 0}


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


async def get_user_by_email(email: str, *, include_password: bool = False) -> UserRow | None:
    return await documents.find_one(
        collections.USERS,
        {"email": normalize_email(email)},
        None if include_password else _WITHOUT_PASSWORD,
    )


async def get_user(user_id: str) -> UserRow | None:
    return await documents.find_one(collections.USERS, {"userId": user_id}, _WITHOUT_PASSWORD)


async def create_user(user: Mapping[str, Any]) -> UserRow:
    row = await documents.insert(collections.USERS, user)
    row.pop("password", None)
    return row


async def set_password(email: str, password_hash: str) -> bool:
    return await documents.update_fields(
        collections.USERS,
        {"email": normalize_email(email)},
        {"password": password_hash, "updatedAt": documents.utc_now()},
    )


async def update_user(user_id: str, fields: Mapping[str, Any]) -> bool:
    payload = dict(fields)
    payload.setdefault("updatedAt", documents.utc_now())
    return await documents.update_fields(collections.USERS, {"userId": user_id}, payload)


async def list_members(params: PageParams) -> tuple[list[UserRow], int]:
    return await documents.paginate(
        collections.USERS,
        {"role": "user"},
        params,
        projection=_WITHOUT_PASSWORD,
    )


async def count_members() -> int:
    return await documents.count(collections.USERS, {"role": "user"})
