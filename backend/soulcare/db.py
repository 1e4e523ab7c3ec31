from __future__ import annotations

import logging
from typing import Any

from pymongo import ASCENDING, AsyncMongoClient

from . import collections
from .config import settings

logger = logging.getLogger(__name__)

_client: AsyncMongoClient | None = None
_database: Any = None

# (collection, keys, options)
_INDEXES: tuple[tuple[str, list[tuple[str, int]], dict[str, Any]], ...] = (
    (collections.VERIFICATION_CODES, [("expiresAt", ASCENDING)], {"expireAfterSeconds": 0}),
    (collections.VERIFICATION_CODES, [("email", ASCENDING), ("purpose", ASCENDING)], {}),
    (collections.USERS, [("email", ASCENDING)], {}),
    (collections.USERS, [("userId", ASCENDING)], {}),
    (collections.COURSES, [("courseId", ASCENDING)], {}),
    (collections.COURSES, [("slug", ASCENDING)], {}),
    (collections.LESSONS, [("lessonId", ASCENDING)], {}),
    (collections.LESSONS, [("courseId", ASCENDING), ("slug", ASCENDING)], {}),
    (collections.EVENTS, [("eventId", ASCENDING)], {}),
    (collections.EVENTS, [("slug", ASCENDING)], {}),
    (collections.BLOGS, [("blogId", ASCENDING)], {}),
    (collections.BLOGS, [("slug", ASCENDING)], {}),
    (collections.MEMBERSHIP_TIERS, [("tierId", ASCENDING)], {}),
)


class DatabaseNotConfiguredError(RuntimeError):
    """Raised when no MongoDB URI is configured."""


def _create_client() -> AsyncMongoClient:
    if not settings.mongodb_uri:
        raise DatabaseNotConfiguredError("MONGODB_URI is not configured")
    return AsyncMongoClient(
        settings.mongodb_uri,
        tz_aware=True,
        serverSelectionTimeoutMS=settings.mongodb_server_selection_timeout_ms,
        appname="bcsoulcare-backend",
    )


def get_database():
    """Return the handle to the application database, connecting lazily."""
    global _client, _database
    if _database is None:
        _client = _create_client()
        _database = _client[settings.mongodb_db]
    return _database


def get_collection(name: str):
    return get_database()[name]


def use_database(database) -> None:
    """Install a database handle directly (tests, scripts)."""
    global _database
    _database = database


async def ensure_indexes() -> None:
    database = get_database()
    for name, keys, options in _INDEXES:
        await database[name].create_index(keys, **options)
    logger.info("Database indexes ensured", extra={"index_count": len(_INDEXES)})


async def ping() -> bool:
    database = get_database()
    await database.command("ping")
    return True


async def close_client() -> None:
    global _client, _database
    if _client is not None:
        await _client.close()
    _client = None
    _database = None


__all__ = [
    "DatabaseNotConfiguredError",
    "close_client",
    "ensure_indexes",
    "get_collection",
    "get_database",
    "ping",
    "use_database",
]
