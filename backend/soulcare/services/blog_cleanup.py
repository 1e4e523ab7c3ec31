from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from ..metrics import storage_delete_failed_total
from ..utils.html_content import extract_image_sources, filter_hosted_urls
from . import storage_service

logger = logging.getLogger(__name__)


def blog_image_urls(post: Mapping[str, Any], markers: Iterable[str]) -> list[str]:
    """Cover image plus any hosted ``<img>`` found in the post body."""
    urls: list[str] = []
    cover = post.get("image")
    if cover:
        urls.append(str(cover))
    for url in filter_hosted_urls(extract_image_sources(post.get("content")), markers):
        if url not in urls:
            urls.append(url)
    return urls


async def _delete_one(service: storage_service.StorageService, url: str) -> bool:
    try:
        return await service.delete_url(url)
    except storage_service.StorageServiceError as exc:
        storage_delete_failed_total.inc()
        logger.warning("Storage delete failed url=%s: %s", url, exc)
        return False


async def delete_blog_images(post: Mapping[str, Any]) -> int:
    """Delete stored images for a post concurrently; returns how many were removed.

    Failures are logged and counted, never raised.
    """
    service = storage_service.get_storage_service()
    urls = blog_image_urls(post, service.hosted_markers())
    if not urls:
        return 0
    results = await asyncio.gather(*(_delete_one(service, url) for url in urls))
    removed = sum(1 for ok in results if ok)
    logger.info(
        "Blog image cleanup finished",
        extra={"requested": len(urls), "removed": removed},
    )
    return removed


__all__ = ["blog_image_urls", "delete_blog_images"]
