from __future__ import annotations

import re
from collections.abc import Iterable

_IMG_SRC = re.compile(r"""<img[^>]+src=["']([^"'>]+)["']""", re.IGNORECASE)


def extract_image_sources(content: str | None) -> list[str]:
    """Return every ``<img src>`` in an HTML fragment, in document order."""
    if not content or "<img" not in content.lower():
        return []
    return [match.group(1) for match in _IMG_SRC.finditer(content)]


def filter_hosted_urls(urls: Iterable[str], markers: Iterable[str]) -> list[str]:
    """Keep URLs containing at least one non-empty marker (host or public base URL)."""
    active = [marker for marker in markers if marker]
    if not active:
        return []
    kept: list[str] = []
    for url in urls:
        if any(marker in url for marker in active) and url not in kept:
            kept.append(url)
    return kept


__all__ = ["extract_image_sources", "filter_hosted_urls"]
