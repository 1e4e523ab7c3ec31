"""In-memory stand-in for the slice of the async pymongo API the repositories use."""

from __future__ import annotations

import copy
import re
from dataclasses import dataclass
from typing import Any

from bson import ObjectId
from pymongo import ReturnDocument


@dataclass
class InsertOneResult:
    inserted_id: Any


@dataclass
class UpdateResult:
    matched_count: int
    modified_count: int
    upserted_id: Any = None


@dataclass
class DeleteResult:
    deleted_count: int


def _compare(op: str, actual: Any, expected: Any) -> bool:
    if op == "$ne":
        return actual != expected
    if op == "$in":
        return actual in expected
    if op == "$nin":
        return actual not in expected
    if actual is None:
        return False
    if op == "$gt":
        return actual > expected
    if op == "$gte":
        return actual >= expected
    if op == "$lt":
        return actual < expected
    if op == "$lte":
        return actual <= expected
    raise NotImplementedError(op)


def _match_field(doc: dict[str, Any], field: str, condition: Any) -> bool:
    actual = doc.get(field)
    if isinstance(condition, dict) and any(key.startswith("$") for key in condition):
        if "$regex" in condition:
            flags = re.IGNORECASE if "i" in condition.get("$options", "") else 0
            if not isinstance(actual, str) or not re.search(condition["$regex"], actual, flags):
                return False
        for op, expected in condition.items():
            if op in {"$regex", "$options"}:
                continue
            if op == "$exists":
                if (field in doc) != bool(expected):
                    return False
                continue
            if not _compare(op, actual, expected):
                return False
        return True
    if isinstance(actual, list) and not isinstance(condition, list):
        return condition in actual
    return actual == condition


def matches(doc: dict[str, Any], query: dict[str, Any]) -> bool:
    for key, condition in (query or {}).items():
        if key == "$or":
            if not any(matches(doc, sub) for sub in condition):
                return False
        elif key == "$and":
            if not all(matches(doc, sub) for sub in condition):
                return False
        elif not _match_field(doc, key, condition):
            return False
    return True


def project(doc: dict[str, Any], projection: dict[str, Any] | None) -> dict[str, Any]:
    data = copy.deepcopy(doc)
    if not projection:
        return data
    include = {key for key, value in projection.items() if value and key != "_id"}
    if include:
        keep = set(include)
        if projection.get("_id", 1):
            keep.add("_id")
        return {key: value for key, value in data.items() if key in keep}
    for key, value in projection.items():
        if not value:
            data.pop(key, None)
    return data


def _apply_update(doc: dict[str, Any], update: dict[str, Any], *, inserting: bool) -> None:
    for op, fields in update.items():
        if op == "$set":
            doc.update(copy.deepcopy(fields))
        elif op == "$setOnInsert":
            if inserting:
                doc.update(copy.deepcopy(fields))
        elif op == "$inc":
            for field, amount in fields.items():
                doc[field] = (doc.get(field) or 0) + amount
        elif op == "$unset":
            for field in fields:
                doc.pop(field, None)
        else:
            raise NotImplementedError(op)


def _sort_key(field: str):
    def key(doc: dict[str, Any]):
        value = doc.get(field)
        return (value is not None, value if value is not None else 0)

    return key


class FakeCursor:
    def __init__(self, docs: list[dict[str, Any]], projection: dict[str, Any] | None) -> None:
        self._docs = docs
        self._projection = projection
        self._sort: list[tuple[str, int]] = []
        self._skip = 0
        self._limit = 0

    def sort(self, keys, direction: int | None = None) -> "FakeCursor":
        if isinstance(keys, str):
            keys = [(keys, direction or 1)]
        self._sort = list(keys)
        return self

    def skip(self, count: int) -> "FakeCursor":
        self._skip = count
        return self

    def limit(self, count: int) -> "FakeCursor":
        self._limit = count
        return self

    async def to_list(self, length: int | None = None) -> list[dict[str, Any]]:
        docs = list(self._docs)
        for field, direction in reversed(self._sort):
            docs.sort(key=_sort_key(field), reverse=direction < 0)
        docs = docs[self._skip :]
        if self._limit:
            docs = docs[: self._limit]
        if length:
            docs = docs[:length]
        return [project(doc, self._projection) for doc in docs]


class FakeCollection:
    def __init__(self, name: str) -> None:
        self.name = name
        self.docs: list[dict[str, Any]] = []
        self.indexes: list[tuple[Any, dict[str, Any]]] = []

    def _first(self, query: dict[str, Any]) -> dict[str, Any] | None:
        for doc in self.docs:
            if matches(doc, query):
                return doc
        return None

    async def find_one(self, query=None, projection=None):
        doc = self._first(query or {})
        return project(doc, projection) if doc is not None else None

    def find(self, query=None, projection=None) -> FakeCursor:
        return FakeCursor([doc for doc in self.docs if matches(doc, query or {})], projection)

    async def count_documents(self, query) -> int:
        return sum(1 for doc in self.docs if matches(doc, query or {}))

    async def insert_one(self, document: dict[str, Any]) -> InsertOneResult:
        document.setdefault("_id", ObjectId())
        self.docs.append(copy.deepcopy(document))
        return InsertOneResult(inserted_id=document["_id"])

    async def update_one(self, query, update, upsert: bool = False) -> UpdateResult:
        doc = self._first(query)
        if doc is not None:
            _apply_update(doc, update, inserting=False)
            return UpdateResult(matched_count=1, modified_count=1)
        if not upsert:
            return UpdateResult(matched_count=0, modified_count=0)
        new_doc = {
            key: value
            for key, value in query.items()
            if not key.startswith("$") and not isinstance(value, dict)
        }
        _apply_update(new_doc, update, inserting=True)
        new_doc["_id"] = ObjectId()
        self.docs.append(new_doc)
        return UpdateResult(matched_count=0, modified_count=0, upserted_id=new_doc["_id"])

    async def find_one_and_update(
        self, query, update, return_document=ReturnDocument.BEFORE, upsert: bool = False
    ):
        doc = self._first(query)
        if doc is None:
            return None
        before = copy.deepcopy(doc)
        _apply_update(doc, update, inserting=False)
        return copy.deepcopy(doc) if return_document == ReturnDocument.AFTER else before

    async def delete_one(self, query) -> DeleteResult:
        doc = self._first(query)
        if doc is None:
            return DeleteResult(deleted_count=0)
        self.docs.remove(doc)
        return DeleteResult(deleted_count=1)

    async def create_index(self, keys, **options) -> str:
        self.indexes.append((keys, options))
        return "_".join(f"{field}_{direction}" for field, direction in keys)


class FakeDatabase:
    def __init__(self) -> None:
        self._collections: dict[str, FakeCollection] = {}
        self.available = True

    def __getitem__(self, name: str) -> FakeCollection:
        if name not in self._collections:
            self._collections[name] = FakeCollection(name)
        return self._collections[name]

    async def command(self, name: str):
        if not self.available:
            raise ConnectionError("database unavailable")
        if name != "ping":
            raise NotImplementedError(name)
        return {"ok": 1}
