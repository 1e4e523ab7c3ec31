from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import Field, field_validator

from .common import CamelModel, split_tags


class PublishStatus(str, Enum):
    draft = "draft"
    published = "published"
    archived = "archived"


class AccessType(str, Enum):
    free = "free"
    membership = "membership"
    paid = "paid"


class CourseModule(CamelModel):
    module_id: str | None = None
    module_number: int | None = None
    title: str = Field(min_length=1)
    description: str | None = None
    order: int | None = None


class CourseCreate(CamelModel):
    title: str | None = None
    slug: str | None = None
    description: str | None = None
    short_description: str | None = None
    thumbnail: str | None = None
    cover_image: str | None = None
    category: str | None = None
    tags: list[str] = Field(default_factory=list)
    skill_level: str | None = None
    language: str = "English"
    instructor_id: str | None = None
    instructor_name: str | None = None
    required_tier_ids: list[str] = Field(default_factory=list)
    access_type: AccessType = AccessType.free
    price: float | None = Field(default=None, ge=0)
    modules: list[CourseModule] = Field(default_factory=list)
    learning_outcomes: list[str] = Field(default_factory=list)
    prerequisites: list[str] = Field(default_factory=list)
    status: PublishStatus = PublishStatus.draft

    @field_validator("tags", mode="before")
    @classmethod
    def _split_tags(cls, value: Any) -> list[str]:
        return split_tags(value)


class CourseUpdate(CamelModel):
    title: str | None = None
    slug: str | None = None
    description: str | None = None
    short_description: str | None = None
    thumbnail: str | None = None
    cover_image: str | None = None
    category: str | None = None
    tags: list[str] | None = None
    skill_level: str | None = None
    language: str | None = None
    instructor_id: str | None = None
    instructor_name: str | None = None
    required_tier_ids: list[str] | None = None
    access_type: AccessType | None = None
    price: float | None = Field(default=None, ge=0)
    modules: list[CourseModule] | None = None
    learning_outcomes: list[str] | None = None
    prerequisites: list[str] | None = None
    status: PublishStatus | None = None

    @field_validator("tags", mode="before")
    @classmethod
    def _split_tags(cls, value: Any) -> list[str] | None:
        if value is None:
            return None
        return split_tags(value)


class LessonCreate(CamelModel):
    course_id: str | None = None
    module_id: str | None = None
    title: str | None = None
    slug: str | None = None
    content: str | None = None
    excerpt: str | None = None
    order: int = Field(default=0, ge=0)
    duration: str | None = None
    status: PublishStatus = PublishStatus.draft


class LessonUpdate(CamelModel):
    module_id: str | None = None
    title: str | None = None
    slug: str | None = None
    content: str | None = None
    excerpt: str | None = None
    order: int | None = Field(default=None, ge=0)
    duration: str | None = None
    status: PublishStatus | None = None
