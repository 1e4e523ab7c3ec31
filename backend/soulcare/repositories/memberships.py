from __future__ import annotations

from typing import Any, Mapping

from .. import collections
from . import documents

TierRow = dict[str, Any]


async def get_tier(tier_id: str) -> TierRow | None:
    return await documents.find_one(collections.MEMBERSHIP_TIERS, {"tierId": tier_id})


async def list_tiers() -> list[TierRow]:
    return await documents.find_many(collections.MEMBERSHIP_TIERS, {})


async def list_active_tiers() -> list[TierRow]:
    return await documents.find_many(
        collections.MEMBERSHIP_TIERS, {"status": "active"}, sort=(("price", 1),)
    )


async def create_tier(tier: Mapping[str, Any]) -> TierRow:
    return await documents.insert(collections.MEMBERSHIP_TIERS, tier)


async def update_tier(tier_id: str, fields: Mapping[str, Any]) -> bool:
    return await documents.update_fields(
        collections.MEMBERSHIP_TIERS, {"tierId": tier_id}, fields
    )


async def delete_tier(tier_id: str) -> bool:
    return await documents.delete(collections.MEMBERSHIP_TIERS, {"tierId": tier_id})


async def count_tiers() -> int:
    return await documents.count(collections.MEMBERSHIP_TIERS)
