from __future__ import annotations

from typing import Any, Mapping

from .. import collections
from ..utils.pagination import PageParams
from . import documents

BlogRow = dict[str, Any]

_SEARCH_FIELDS = ("title", "excerpt", "author")
_LISTING_FIELDS = {
    "blogId": 1,
    "title": 1,
    "excerpt": 1,
    "author": 1,
    "category": 1,
    "slug": 1,
    "image": 1,
    "status": 1,
    "createdAt": 1,
    "tags": 1,
}


def build_listing_query(
    *, status: str | None = None, category: str | None = None, search: str | None = None
) -> dict[str, Any]:
    query: dict[str, Any] = {}
    if status:
        query["status"] = status
    if category:
        query["category"] = category
    if search:
        query.update(documents.case_insensitive_search(search, _SEARCH_FIELDS))
    return query


async def get_post(identifier: str) -> BlogRow | None:
    return await documents.find_one(collections.BLOGS, documents.id_query(identifier, "blogId"))


async def get_post_by_slug(slug: str, *, status: str | None = None) -> BlogRow | None:
    query: dict[str, Any] = {"slug": slug}
    if status:
        query["status"] = status
    return await documents.find_one(collections.BLOGS, query)


async def create_post(post: Mapping[str, Any]) -> BlogRow:
    return await documents.insert(collections.BLOGS, post)


async def update_post(identifier: str, fields: Mapping[str, Any]) -> bool:
    return await documents.update_fields(
        collections.BLOGS, documents.id_query(identifier, "blogId"), fields
    )


async def delete_post(identifier: str) -> bool:
    return await documents.delete(collections.BLOGS, documents.id_query(identifier, "blogId"))


async def list_posts(
    params: PageParams, query: Mapping[str, Any], *, listing: bool = False
) -> tuple[list[BlogRow], int]:
    return await documents.paginate(
        collections.BLOGS,
        query,
        params,
        projection=_LISTING_FIELDS if listing else None,
    )


async def status_counts() -> dict[str, int]:
    return {
        "total": await documents.count(collections.BLOGS),
        "published": await documents.count(collections.BLOGS, {"status": "published"}),
        "draft": await documents.count(collections.BLOGS, {"status": "draft"}),
    }
