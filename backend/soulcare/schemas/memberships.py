from __future__ import annotations

from enum import Enum

from pydantic import Field

from .common import CamelModel


class BillingCycle(str, Enum):
    monthly = "monthly"
    yearly = "yearly"
    one_time = "one-time"


class TierStatus(str, Enum):
    active = "active"
    archived = "archived"


class MembershipTierCreate(CamelModel):
    name: str = Field(min_length=2)
    description: str = Field(min_length=10)
    price: float = Field(ge=0)
    billing_cycle: BillingCycle
    features: list[str] = Field(default_factory=list)
    status: TierStatus = TierStatus.active


class MembershipTierUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=2)
    description: str | None = Field(default=None, min_length=10)
    price: float | None = Field(default=None, ge=0)
    billing_cycle: BillingCycle | None = None
    features: list[str] | None = None
    status: TierStatus | None = None


class MembershipUpdateRequest(CamelModel):
    tier_id: str | None = None
