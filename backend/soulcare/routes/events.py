import logging

from fastapi import APIRouter, Depends, HTTPException, status

from ..permissions import AdminUser, require_admin
from ..repositories import documents
from ..repositories import events as events_repo
from ..schemas import require_fields
from ..schemas.events import EventCreate, EventUpdate
from ..utils.ids import short_hex_id
from ..utils.pagination import Pagination

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/events", tags=["events"])
admin_router = APIRouter(
    prefix="/api/admin/events",
    tags=["admin", "events"],
    dependencies=[Depends(require_admin)],
)

_NOT_FOUND = "Event not found"
_SLUG_TAKEN = "An event with this slug already exists"


@router.get("")
async def list_upcoming_events():
    return {"events": await events_repo.list_published_events()}


@admin_router.get("")
async def admin_list_events(page: Pagination):
    items, total = await events_repo.list_events(page)
    return {"events": items, "pagination": page.describe(total)}


@admin_router.post("", status_code=status.HTTP_201_CREATED)
async def admin_create_event(payload: EventCreate, current: AdminUser):
    require_fields(payload, "title", "slug", "date")
    if await events_repo.event_slug_taken(payload.slug):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=_SLUG_TAKEN)

    now = documents.utc_now()
    doc = payload.to_document()
    doc.update(documents.publication_fields(payload.status, now=now))
    doc.update(
        {
            "eventId": short_hex_id(),
            "registeredCount": 0,
            "createdAt": now,
            "updatedAt": now,
            "createdBy": current["userId"],
            "lastModifiedBy": current["userId"],
        }
    )
    event = await events_repo.create_event(doc)
    logger.info("Event created", extra={"event_id": event["eventId"]})
    return {
        "message": "Event created successfully",
        "eventId": event["eventId"],
        "id": event["id"],
    }


@admin_router.get("/{event_id}")
async def admin_get_event(event_id: str):
    event = await events_repo.get_event(event_id)
    if not event:
        raise HTTPException(status_code=404, detail=_NOT_FOUND)
    return {"event": event}


@admin_router.put("/{event_id}")
async def admin_update_event(event_id: str, payload: EventUpdate, current: AdminUser):
    existing = await events_repo.get_event(event_id)
    if not existing:
        raise HTTPException(status_code=404, detail=_NOT_FOUND)

    fields = payload.to_document(exclude_unset=True)
    if fields.get("slug") and await events_repo.event_slug_taken(
        fields["slug"], exclude_event_id=event_id
    ):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=_SLUG_TAKEN)
    if "status" in fields:
        fields.update(
            documents.publication_fields(fields["status"], existing.get("publishedAt"))
        )
    fields["updatedAt"] = documents.utc_now()
    fields["lastModifiedBy"] = current["userId"]

    await events_repo.update_event(event_id, fields)
    return {"message": "Event updated successfully", "event": await events_repo.get_event(event_id)}


@admin_router.delete("/{event_id}")
async def admin_delete_event(event_id: str):
    if not await events_repo.delete_event(event_id):
        raise HTTPException(status_code=404, detail=_NOT_FOUND)
    logger.info("Event deleted", extra={"event_id": event_id})
    return {"message": "Event deleted successfully"}
