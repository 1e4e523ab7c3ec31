"""Thin helpers over the document store shared by every repository module."""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from datetime import datetime, timezone
from typing import Any

from bson import ObjectId

from ..db import get_collection
from ..utils.pagination import PageParams

Document = dict[str, Any]
SortSpec = Sequence[tuple[str, int]]

NEWEST_FIRST: SortSpec = (("createdAt", -1),)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def normalize(doc: Mapping[str, Any] | None) -> Document | None:
    """Expose the native ``_id`` as a string ``id``."""
    if doc is None:
        return None
    data = dict(doc)
    raw_id = data.pop("_id", None)
    if raw_id is not None:
        data["id"] = str(raw_id)
    return data


def id_query(identifier: str, short_field: str) -> Document:
    """Match on the native id when the value is an ObjectId, otherwise on the short id."""
    if ObjectId.is_valid(identifier):
        return {"_id": ObjectId(identifier)}
    return {short_field: identifier}


def publication_fields(
    status: str | None,
    published_at: datetime | None = None,
    *,
    now: datetime | None = None,
) -> Document:
    """``isPublished``/``publishedAt`` for a status; the first publish date is kept."""
    is_published = status == "published"
    if is_published and published_at is None:
        published_at = now or utc_now()
    return {"isPublished": is_published, "publishedAt": published_at}


def case_insensitive_search(term: str, fields: Sequence[str]) -> Document:
    pattern = re.escape(term)
    return {"$or": [{field: {"$regex": pattern, "$options": "i"}} for field in fields]}


async def find_one(
    collection: str,
    query: Mapping[str, Any],
    projection: Mapping[str, Any] | None = None,
) -> Document | None:
    doc = await get_collection(collection).find_one(dict(query), projection)
    return normalize(doc)


async def find_many(
    collection: str,
    query: Mapping[str, Any],
    *,
    sort: SortSpec = NEWEST_FIRST,
    projection: Mapping[str, Any] | None = None,
    limit: int | None = None,
) -> list[Document]:
    cursor = get_collection(collection).find(dict(query), projection).sort(list(sort))
    if limit:
        cursor = cursor.limit(limit)
    rows = await cursor.to_list(None)
    return [normalize(row) for row in rows]


async def paginate(
    collection: str,
    query: Mapping[str, Any],
    params: PageParams,
    *,
    sort: SortSpec = NEWEST_FIRST,
    projection: Mapping[str, Any] | None = None,
) -> tuple[list[Document], int]:
    handle = get_collection(collection)
    cursor = (
        handle.find(dict(query), projection)
        .sort(list(sort))
        .skip(params.skip)
        .limit(params.limit)
    )
    rows = await cursor.to_list(None)
    total = await handle.count_documents(dict(query))
    return [normalize(row) for row in rows], total


async def count(collection: str, query: Mapping[str, Any] | None = None) -> int:
    return await get_collection(collection).count_documents(dict(query or {}))


async def insert(collection: str, doc: Mapping[str, Any]) -> Document:
    payload = dict(doc)
    result = await get_collection(collection).insert_one(payload)
    payload["_id"] = result.inserted_id
    return normalize(payload)


async def update_fields(
    collection: str,
    query: Mapping[str, Any],
    fields: Mapping[str, Any],
    *,
    upsert: bool = False,
) -> bool:
    """``$set`` the given fields; returns whether a document matched (or was upserted)."""
    result = await get_collection(collection).update_one(
        dict(query), {"$set": dict(fields)}, upsert=upsert
    )
    return bool(result.matched_count or result.upserted_id is not None)


async def increment(
    collection: str, query: Mapping[str, Any], field: str, amount: int = 1
) -> bool:
    result = await get_collection(collection).update_one(
        dict(query), {"$inc": {field: amount}}
    )
    return bool(result.matched_count)


async def delete(collection: str, query: Mapping[str, Any]) -> bool:
    result = await get_collection(collection).delete_one(dict(query))
    return bool(result.deleted_count)


__all__ = [
    "Document",
    "NEWEST_FIRST",
    "case_insensitive_search",
    "count",
    "delete",
    "find_many",
    "find_one",
    "id_query",
    "increment",
    "insert",
    "normalize",
    "paginate",
    "publication_fields",
    "update_fields",
    "utc_now",
]
