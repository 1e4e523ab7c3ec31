"""Site-wide singleton settings and newsletter subscriptions."""

from __future__ import annotations

from typing import Any, Mapping

from .. import collections
from . import documents

SETTINGS_ID = "global"


async def get_site_settings() -> dict[str, Any] | None:
    return await documents.find_one(collections.SITE_SETTINGS, {"settingsId": SETTINGS_ID})


async def save_site_settings(fields: Mapping[str, Any]) -> None:
    await documents.update_fields(
        collections.SITE_SETTINGS,
        {"settingsId": SETTINGS_ID},
        {**fields, "updatedAt": documents.utc_now()},
        upsert=True,
    )


async def get_subscription(email: str) -> dict[str, Any] | None:
    return await documents.find_one(collections.NEWSLETTER_SUBSCRIPTIONS, {"email": email})


async def create_subscription(email: str) -> dict[str, Any]:
    return await documents.insert(
        collections.NEWSLETTER_SUBSCRIPTIONS,
        {"email": email, "subscribedAt": documents.utc_now(), "status": "active"},
    )


async def reactivate_subscription(email: str) -> bool:
    return await documents.update_fields(
        collections.NEWSLETTER_SUBSCRIPTIONS,
        {"email": email},
        {"status": "active", "subscribedAt": documents.utc_now()},
    )
