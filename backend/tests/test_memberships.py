from datetime import datetime, timedelta, timezone

import pytest

from soulcare.auth import decode_jwt
from soulcare.repositories import memberships as memberships_repo
from soulcare.services.membership_service import add_months, renewal_end_date, renewal_fields
from utils import admin_headers, member_headers

pytestmark = pytest.mark.anyio("asyncio")

NOW = datetime(2024, 1, 31, 12, 0, tzinfo=timezone.utc)


def test_add_months_clamps_day():
    assert add_months(NOW, 1) == datetime(2024, 2, 29, 12, 0, tzinfo=timezone.utc)
    assert add_months(datetime(2023, 12, 15, tzinfo=timezone.utc), 1) == datetime(
        2024, 1, 15, tzinfo=timezone.utc
    )


def test_renewal_extends_from_later_of_now_and_current_end():
    running_end = NOW + timedelta(days=10)
    assert renewal_end_date("monthly", running_end, NOW) == datetime(
        2024, 3, 10, 12, 0, tzinfo=timezone.utc
    )
    lapsed_end = NOW - timedelta(days=10)
    assert renewal_end_date("monthly", lapsed_end, NOW) == add_months(NOW, 1)
    assert renewal_end_date("monthly", None, NOW) == add_months(NOW, 1)


def test_yearly_and_one_time_renewals():
    leap_day = datetime(2024, 2, 29, tzinfo=timezone.utc)
    assert renewal_end_date("yearly", None, leap_day) == datetime(2025, 2, 28, tzinfo=timezone.utc)
    assert renewal_end_date("one-time", None, NOW).year == 2124


def test_start_date_kept_only_while_running():
    started = NOW - timedelta(days=20)
    tier = {"tierId": "t1", "name": "Gold", "billingCycle": "monthly"}

    running = renewal_fields(
        {"subscriptionStartDate": started, "subscriptionEndDate": NOW + timedelta(days=1)},
        tier,
        now=NOW,
    )
    assert running["subscriptionStartDate"] == started
    assert running["subscriptionStatus"] == "active"

    lapsed = renewal_fields(
        {"subscriptionStartDate": started, "subscriptionEndDate": NOW - timedelta(days=1)},
        tier,
        now=NOW,
    )
    assert lapsed["subscriptionStartDate"] == NOW
    assert lapsed["membershipTierName"] == "Gold"


async def test_membership_update_returns_fresh_token(async_client, fake_db):
    await memberships_repo.create_tier(
        {"tierId": "gold", "name": "Gold", "billingCycle": "yearly", "price": 100, "status": "active"}
    )
    headers, user = await member_headers()

    resp = await async_client.post(
        "/api/membership/update", json={"tierId": "gold"}, headers=headers
    )
    assert resp.status_code == 200, resp.text
    body = resp.json()
    claims = decode_jwt(body["accessToken"])
    assert claims["membership"]["tierId"] == "gold"
    assert claims["membership"]["status"] == "active"

    stored = fake_db["users"].docs[0]
    assert stored["membershipTierId"] == "gold"
    assert stored["subscriptionEndDate"] > datetime.now(timezone.utc) + timedelta(days=364)


async def test_membership_update_unknown_tier(async_client):
    headers, _ = await member_headers()
    resp = await async_client.post(
        "/api/membership/update", json={"tierId": "nope"}, headers=headers
    )
    assert resp.status_code == 400


async def test_membership_update_requires_login(async_client):
    resp = await async_client.post("/api/membership/update", json={"tierId": "gold"})
    assert resp.status_code == 401


async def test_admin_tier_crud_and_public_listing(async_client):
    headers = await admin_headers()
    invalid = await async_client.post(
        "/api/admin/memberships",
        json={"name": "G", "description": "short", "price": -1, "billingCycle": "weekly"},
        headers=headers,
    )
    assert invalid.status_code == 400
    assert invalid.json()["error"] == "Invalid input"
    assert len(invalid.json()["details"]) == 4

    for name, price in (("Gold", 30), ("Silver", 10)):
        created = await async_client.post(
            "/api/admin/memberships",
            json={
                "name": name,
                "description": "Access to all member resources",
                "price": price,
                "billingCycle": "monthly",
                "features": ["Courses"],
            },
            headers=headers,
        )
        assert created.status_code == 201, created.text

    tiers = (await async_client.get("/api/memberships")).json()["tiers"]
    assert [tier["name"] for tier in tiers] == ["Silver", "Gold"]

    silver = tiers[0]
    archived = await async_client.put(
        f"/api/admin/memberships/{silver['tierId']}",
        json={"status": "archived"},
        headers=headers,
    )
    assert archived.status_code == 200
    tiers = (await async_client.get("/api/memberships")).json()["tiers"]
    assert [tier["name"] for tier in tiers] == ["Gold"]

    deleted = await async_client.delete(
        f"/api/admin/memberships/{silver['tierId']}", headers=headers
    )
    assert deleted.status_code == 200
    assert (
        await async_client.delete(f"/api/admin/memberships/{silver['tierId']}", headers=headers)
    ).status_code == 404
