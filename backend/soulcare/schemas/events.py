from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import Field, field_validator

from .common import CamelModel
from .courses import PublishStatus


class EventCategory(str, Enum):
    workshop = "workshop"
    retreat = "retreat"
    fellowship = "fellowship"
    service = "service"
    study = "study"


def _as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class EventCreate(CamelModel):
    title: str | None = None
    slug: str | None = None
    category: EventCategory = EventCategory.fellowship
    date: datetime | None = None
    start_time: str = ""
    end_time: str = ""
    location: str = ""
    description: str = ""
    image: str = ""
    max_spots: int = Field(default=0, ge=0)
    price: float = Field(default=0, ge=0)
    is_featured: bool = False
    status: PublishStatus = PublishStatus.draft

    @field_validator("date")
    @classmethod
    def _date_utc(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value)


class EventUpdate(CamelModel):
    title: str | None = None
    slug: str | None = None
    category: EventCategory | None = None
    date: datetime | None = None
    start_time: str | None = None
    end_time: str | None = None
    location: str | None = None
    description: str | None = None
    image: str | None = None
    max_spots: int | None = Field(default=None, ge=0)
    price: float | None = Field(default=None, ge=0)
    is_featured: bool | None = None
    status: PublishStatus | None = None

    @field_validator("date")
    @classmethod
    def _date_utc(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value)
