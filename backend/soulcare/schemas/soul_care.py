from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import Field, field_validator

from .common import CamelModel, split_tags


class CatalogStatus(str, Enum):
    active = "active"
    inactive = "inactive"


class ResourceCategory(str, Enum):
    article = "article"
    study = "study"
    audio = "audio"
    book = "book"
    worksheet = "worksheet"


class _ListFields(CamelModel):
    @field_validator("features", "specialties", mode="before", check_fields=False)
    @classmethod
    def _split(cls, value: Any) -> list[str] | None:
        if value is None:
            return None
        return split_tags(value)


class ServiceCreate(_ListFields):
    title: str | None = None
    description: str | None = None
    features: list[str] = Field(default_factory=list)
    duration: str | None = None
    availability: str | None = None
    status: CatalogStatus = CatalogStatus.active


class ServiceUpdate(_ListFields):
    title: str | None = None
    description: str | None = None
    features: list[str] | None = None
    duration: str | None = None
    availability: str | None = None
    status: CatalogStatus | None = None


class TeamMemberCreate(_ListFields):
    name: str | None = None
    title: str | None = None
    specialties: list[str] = Field(default_factory=list)
    credentials: str | None = None
    image: str | None = None
    status: CatalogStatus = CatalogStatus.active


class TeamMemberUpdate(_ListFields):
    name: str | None = None
    title: str | None = None
    specialties: list[str] | None = None
    credentials: str | None = None
    image: str | None = None
    status: CatalogStatus | None = None


class ResourceCreate(CamelModel):
    title: str | None = None
    description: str | None = None
    category: ResourceCategory | None = None
    type: str | None = None
    author: str = "Soul Care Team"
    date: str | None = None
    download_url: str | None = None
    read_time: str | None = None
    pages: int | None = Field(default=None, ge=0)
    duration: str | None = None
    rating: float | None = Field(default=None, ge=0, le=5)
    featured: bool = False
    status: CatalogStatus = CatalogStatus.active


class ResourceUpdate(CamelModel):
    title: str | None = None
    description: str | None = None
    category: ResourceCategory | None = None
    type: str | None = None
    author: str | None = None
    date: str | None = None
    download_url: str | None = None
    read_time: str | None = None
    pages: int | None = Field(default=None, ge=0)
    duration: str | None = None
    rating: float | None = Field(default=None, ge=0, le=5)
    featured: bool | None = None
    status: CatalogStatus | None = None
