"""Soul care catalog: services, team members and downloadable resources.

The three collections share the same shape of access (short id, status flag),
so one small catalog type backs all of them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from .. import collections
from . import documents

CatalogRow = dict[str, Any]


@dataclass(frozen=True, slots=True)
class Catalog:
    collection: str
    id_field: str

    async def get(self, item_id: str) -> CatalogRow | None:
        return await documents.find_one(self.collection, {self.id_field: item_id})

    async def list_all(self) -> list[CatalogRow]:
        return await documents.find_many(self.collection, {})

    async def list_active(self, *, oldest_first: bool = False) -> list[CatalogRow]:
        direction = 1 if oldest_first else -1
        return await documents.find_many(
            self.collection, {"status": "active"}, sort=(("createdAt", direction),)
        )

    async def create(self, item: Mapping[str, Any]) -> CatalogRow:
        return await documents.insert(self.collection, item)

    async def update(self, item_id: str, fields: Mapping[str, Any]) -> bool:
        return await documents.update_fields(self.collection, {self.id_field: item_id}, fields)

    async def delete(self, item_id: str) -> bool:
        return await documents.delete(self.collection, {self.id_field: item_id})


services = Catalog(collections.SOUL_CARE_SERVICES, "serviceId")
team = Catalog(collections.SOUL_CARE_TEAM, "memberId")
resources = Catalog(collections.SOUL_CARE_RESOURCES, "resourceId")
