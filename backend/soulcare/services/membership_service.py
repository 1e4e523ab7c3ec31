"""Membership renewal date arithmetic."""

from __future__ import annotations

import calendar
from datetime import datetime, timezone
from typing import Any


def _aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def add_months(value: datetime, months: int) -> datetime:
    """Calendar month arithmetic; the day is clamped to the target month's length."""
    index = value.month - 1 + months
    year = value.year + index // 12
    month = index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def add_years(value: datetime, years: int) -> datetime:
    return add_months(value, 12 * years)


def renewal_end_date(
    billing_cycle: str, current_end: datetime | None, now: datetime
) -> datetime:
    base = now
    if current_end is not None and _aware(current_end) > now:
        base = _aware(current_end)
    if billing_cycle == "monthly":
        return add_months(base, 1)
    if billing_cycle == "yearly":
        return add_years(base, 1)
    # one-time purchases are effectively lifetime
    return add_years(base, 100)


def renewal_fields(
    user: dict[str, Any], tier: dict[str, Any], *, now: datetime | None = None
) -> dict[str, Any]:
    """Fields to ``$set`` on the user when renewing or switching to ``tier``."""
    now = now or datetime.now(timezone.utc)
    current_end = user.get("subscriptionEndDate")
    if not isinstance(current_end, datetime):
        current_end = None
    running = current_end is not None and _aware(current_end) > now

    start = user.get("subscriptionStartDate") if running else None
    if not isinstance(start, datetime):
        start = now

    return {
        "membershipTierId": tier["tierId"],
        "membershipTierName": tier.get("name"),
        "subscriptionStartDate": start,
        "subscriptionEndDate": renewal_end_date(
            str(tier.get("billingCycle") or "monthly"), current_end, now
        ),
        "subscriptionStatus": "active",
    }


__all__ = ["add_months", "add_years", "renewal_end_date", "renewal_fields"]
