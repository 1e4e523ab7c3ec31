"""Application-generated identifiers and slugs."""

from __future__ import annotations

import re
import secrets
import string
import uuid

_ALPHANUMERIC = string.ascii_letters + string.digits
_SLUG_STRIP = re.compile(r"[^a-z0-9\s-]")
_SLUG_SPACES = re.compile(r"\s+")


def short_hex_id() -> str:
    """8 lowercase hex characters, used for courses, modules, lessons and events."""
    return secrets.token_hex(4)


def short_alnum_id(length: int = 8) -> str:
    """Mixed-case alphanumeric id, used for blog posts."""
    return "".join(secrets.choice(_ALPHANUMERIC) for _ in range(length))


def uuid_id() -> str:
    return str(uuid.uuid4())


def slugify(title: str) -> str:
    lowered = (title or "").lower()
    stripped = _SLUG_STRIP.sub("", lowered).strip()
    return _SLUG_SPACES.sub("-", stripped)


__all__ = ["short_alnum_id", "short_hex_id", "slugify", "uuid_id"]
