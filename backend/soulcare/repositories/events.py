from __future__ import annotations

from typing import Any, Mapping

from .. import collections
from ..utils.pagination import PageParams
from . import documents

EventRow = dict[str, Any]


async def get_event(event_id: str) -> EventRow | None:
    return await documents.find_one(collections.EVENTS, {"eventId": event_id})


async def event_slug_taken(slug: str, *, exclude_event_id: str | None = None) -> bool:
    query: dict[str, Any] = {"slug": slug}
    if exclude_event_id:
        query["eventId"] = {"$ne": exclude_event_id}
    return await documents.find_one(collections.EVENTS, query, {"eventId": 1}) is not None


async def create_event(event: Mapping[str, Any]) -> EventRow:
    return await documents.insert(collections.EVENTS, event)


async def update_event(event_id: str, fields: Mapping[str, Any]) -> bool:
    return await documents.update_fields(collections.EVENTS, {"eventId": event_id}, fields)


async def delete_event(event_id: str) -> bool:
    return await documents.delete(collections.EVENTS, {"eventId": event_id})


async def list_events(params: PageParams) -> tuple[list[EventRow], int]:
    return await documents.paginate(
        collections.EVENTS, {}, params, sort=(("date", -1),)
    )


async def list_published_events() -> list[EventRow]:
    # soonest first
    return await documents.find_many(
        collections.EVENTS, {"status": "published"}, sort=(("date", 1),)
    )


async def count_events() -> int:
    return await documents.count(collections.EVENTS)
