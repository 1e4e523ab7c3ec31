import logging

from fastapi import APIRouter, Depends, HTTPException, status

from ..auth import CurrentUser, issue_session_token
from ..permissions import require_admin
from ..repositories import documents
from ..repositories import memberships as memberships_repo
from ..repositories import users as users_repo
from ..schemas.memberships import (
    MembershipTierCreate,
    MembershipTierUpdate,
    MembershipUpdateRequest,
)
from ..services.membership_service import renewal_fields
from ..utils.ids import uuid_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["memberships"])
admin_router = APIRouter(
    prefix="/api/admin/memberships",
    tags=["admin", "memberships"],
    dependencies=[Depends(require_admin)],
)

_NOT_FOUND = "Membership tier not found"


@router.get("/memberships")
async def list_public_tiers():
    return {"tiers": await memberships_repo.list_active_tiers()}


@router.post("/membership/update")
async def update_membership(payload: MembershipUpdateRequest, current: CurrentUser):
    if not payload.tier_id:
        raise HTTPException(status_code=400, detail="Tier ID is required")
    tier = await memberships_repo.get_tier(payload.tier_id)
    if not tier:
        raise HTTPException(status_code=400, detail="Invalid membership tier")

    user = await users_repo.get_user(current["userId"])
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    fields = renewal_fields(user, tier)
    await users_repo.update_user(user["userId"], fields)
    user.update(fields)
    logger.info(
        "Membership updated",
        extra={"tier_id": tier["tierId"], "end_date": fields["subscriptionEndDate"]},
    )
    return {
        "message": "Membership updated successfully",
        "endDate": fields["subscriptionEndDate"],
        "accessToken": issue_session_token(user, tier),
    }


@admin_router.get("")
async def admin_list_tiers():
    return {"tiers": await memberships_repo.list_tiers()}


@admin_router.post("", status_code=status.HTTP_201_CREATED)
async def admin_create_tier(payload: MembershipTierCreate):
    now = documents.utc_now()
    tier = await memberships_repo.create_tier(
        {
            **payload.to_document(),
            "tierId": uuid_id(),
            "subscribersCount": 0,
            "createdAt": now,
            "updatedAt": now,
        }
    )
    logger.info("Membership tier created", extra={"tier_id": tier["tierId"]})
    return {"tier": tier}


@admin_router.put("/{tier_id}")
async def admin_update_tier(tier_id: str, payload: MembershipTierUpdate):
    fields = payload.to_document(exclude_unset=True)
    fields["updatedAt"] = documents.utc_now()
    if not await memberships_repo.update_tier(tier_id, fields):
        raise HTTPException(status_code=404, detail=_NOT_FOUND)
    return {"tier": await memberships_repo.get_tier(tier_id)}


@admin_router.delete("/{tier_id}")
async def admin_delete_tier(tier_id: str):
    if not await memberships_repo.delete_tier(tier_id):
        raise HTTPException(status_code=404, detail=_NOT_FOUND)
    return {"message": "Membership tier deleted successfully"}
