from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import Field, field_validator

from .common import CamelModel, split_tags


class BlogStatus(str, Enum):
    draft = "draft"
    published = "published"
    archived = "archived"


class BlogPostCreate(CamelModel):
    title: str | None = None
    excerpt: str | None = None
    content: str | None = None
    author: str | None = None
    category: str | None = None
    tags: list[str] = Field(default_factory=list)
    image: str | None = None
    status: BlogStatus = BlogStatus.draft
    read_time: str | None = None

    @field_validator("tags", mode="before")
    @classmethod
    def _split_tags(cls, value: Any) -> list[str]:
        return split_tags(value)


class BlogPostUpdate(CamelModel):
    title: str | None = None
    slug: str | None = None
    excerpt: str | None = None
    content: str | None = None
    author: str | None = None
    category: str | None = None
    tags: list[str] | None = None
    image: str | None = None
    status: BlogStatus | None = None
    read_time: str | None = None

    @field_validator("tags", mode="before")
    @classmethod
    def _split_tags(cls, value: Any) -> list[str] | None:
        if value is None:
            return None
        return split_tags(value)
