import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status

from ..config import settings
from ..permissions import require_admin
from ..repositories import site as site_repo
from ..schemas import require_fields
from ..schemas.site import NewsletterSubscribeRequest, SiteSettingsUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["site"])
admin_router = APIRouter(
    prefix="/api/admin/settings",
    tags=["admin", "site"],
    dependencies=[Depends(require_admin)],
)

_PUBLIC_CACHE_CONTROL = "public, s-maxage=3600, stale-while-revalidate=86400"


def _public_settings(doc: dict | None) -> dict:
    if not doc:
        return {"organizationName": settings.default_organization_name}
    return {k: v for k, v in doc.items() if k not in {"id", "settingsId"}}


@router.get("/settings")
async def public_site_settings(response: Response):
    doc = await site_repo.get_site_settings()
    if doc:
        response.headers["Cache-Control"] = _PUBLIC_CACHE_CONTROL
    return _public_settings(doc)


@router.post("/newsletter/subscribe")
async def subscribe_newsletter(payload: NewsletterSubscribeRequest, response: Response):
    email = (payload.email or "").strip().lower()
    if not email or "@" not in email:
        raise HTTPException(status_code=400, detail="Please provide a valid email address.")

    existing = await site_repo.get_subscription(email)
    if existing is None:
        await site_repo.create_subscription(email)
        response.status_code = status.HTTP_201_CREATED
        return {"message": "Thank you for subscribing to our newsletter!"}
    if existing.get("status") == "active":
        return {"message": "You are already subscribed to our newsletter!"}

    await site_repo.reactivate_subscription(email)
    logger.info("Newsletter subscription reactivated")
    return {"message": "Welcome back! Your subscription has been reactivated."}


@admin_router.get("")
async def admin_get_settings():
    doc = await site_repo.get_site_settings()
    return {"settings": _public_settings(doc)}


@admin_router.put("")
async def admin_update_settings(payload: SiteSettingsUpdate):
    require_fields(payload, "organization_name")
    await site_repo.save_site_settings(payload.to_document())
    logger.info("Site settings updated")
    return {"message": "Settings updated successfully"}
