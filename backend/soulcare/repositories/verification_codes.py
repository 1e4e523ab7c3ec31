from __future__ import annotations

from datetime import datetime
from typing import Any

from pymongo import ReturnDocument

from .. import collections
from ..db import get_collection
from . import documents

CodeRow = dict[str, Any]


async def upsert_code(email: str, purpose: str, code: str, expires_at: datetime) -> None:
    """Replace any pending code for this email and purpose."""
    await get_collection(collections.VERIFICATION_CODES).update_one(
        {"email": email, "purpose": purpose},
        {
            "$set": {
                "code": code,
                "attempts": 0,
                "expiresAt": expires_at,
                "createdAt": documents.utc_now(),
            }
        },
        upsert=True,
    )


async def get_pending_code(email: str, purpose: str, now: datetime) -> CodeRow | None:
    # the TTL monitor only sweeps about once a minute, so expiry is re-checked here
    return await documents.find_one(
        collections.VERIFICATION_CODES,
        {"email": email, "purpose": purpose, "expiresAt": {"$gt": now}},
    )


async def record_failed_attempt(email: str, purpose: str) -> int:
    row = await get_collection(collections.VERIFICATION_CODES).find_one_and_update(
        {"email": email, "purpose": purpose},
        {"$inc": {"attempts": 1}},
        return_document=ReturnDocument.AFTER,
    )
    return int((row or {}).get("attempts", 0))


async def delete_code(email: str, purpose: str) -> bool:
    return await documents.delete(
        collections.VERIFICATION_CODES, {"email": email, "purpose": purpose}
    )
