from fastapi import APIRouter, Depends

from ..permissions import require_admin
from ..repositories import blog as blog_repo
from ..repositories import courses as courses_repo
from ..repositories import events as events_repo
from ..repositories import memberships as memberships_repo
from ..repositories import users as users_repo
from ..utils.pagination import Pagination

router = APIRouter(
    prefix="/api/admin",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
)


@router.get("/stats")
async def admin_stats():
    return {
        "users": await users_repo.count_members(),
        "courses": await courses_repo.count_courses(),
        "events": await events_repo.count_events(),
        "membershipTiers": await memberships_repo.count_tiers(),
        "blog": await blog_repo.status_counts(),
    }


@router.get("/users")
async def admin_list_users(page: Pagination):
    items, total = await users_repo.list_members(page)
    return {"users": items, "pagination": page.describe(total)}
