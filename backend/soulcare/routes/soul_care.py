"""Soul care services, team members and downloadable resources."""

import asyncio
import logging
from dataclasses import dataclass

from fastapi import APIRouter, Depends, HTTPException, status

from ..permissions import require_admin
from ..repositories import documents
from ..repositories import soul_care
from ..schemas import CamelModel, require_fields
from ..schemas.soul_care import (
    ResourceCreate,
    ResourceUpdate,
    ServiceCreate,
    ServiceUpdate,
    TeamMemberCreate,
    TeamMemberUpdate,
)
from ..utils.ids import uuid_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["soul-care"])
admin_router = APIRouter(
    prefix="/api/admin",
    tags=["admin", "soul-care"],
    dependencies=[Depends(require_admin)],
)


@dataclass(frozen=True, slots=True)
class _CatalogRoutes:
    path: str
    catalog: soul_care.Catalog
    create_model: type[CamelModel]
    update_model: type[CamelModel]
    required: tuple[str, ...]
    singular: str
    plural: str
    label: str


def _register(entry: _CatalogRoutes) -> None:
    not_found = f"{entry.label} not found"
    create_model = entry.create_model
    update_model = entry.update_model

    async def list_items():
        return {entry.plural: await entry.catalog.list_all()}

    async def create_item(payload: create_model):  # type: ignore[valid-type]
        require_fields(payload, *entry.required)
        now = documents.utc_now()
        item = await entry.catalog.create(
            {
                **payload.to_document(),
                entry.catalog.id_field: uuid_id(),
                "createdAt": now,
                "updatedAt": now,
            }
        )
        logger.info("%s created", entry.label, extra={"item_id": item[entry.catalog.id_field]})
        return {"message": f"{entry.label} created successfully", entry.singular: item}

    async def get_item(item_id: str):
        item = await entry.catalog.get(item_id)
        if not item:
            raise HTTPException(status_code=404, detail=not_found)
        return {entry.singular: item}

    async def update_item(item_id: str, payload: update_model):  # type: ignore[valid-type]
        fields = payload.to_document(exclude_unset=True)
        fields["updatedAt"] = documents.utc_now()
        if not await entry.catalog.update(item_id, fields):
            raise HTTPException(status_code=404, detail=not_found)
        return {
            "message": f"{entry.label} updated successfully",
            entry.singular: await entry.catalog.get(item_id),
        }

    async def delete_item(item_id: str):
        if not await entry.catalog.delete(item_id):
            raise HTTPException(status_code=404, detail=not_found)
        return {"message": f"{entry.label} deleted successfully"}

    admin_router.add_api_route(entry.path, list_items, methods=["GET"])
    admin_router.add_api_route(
        entry.path, create_item, methods=["POST"], status_code=status.HTTP_201_CREATED
    )
    admin_router.add_api_route(f"{entry.path}/{{item_id}}", get_item, methods=["GET"])
    admin_router.add_api_route(f"{entry.path}/{{item_id}}", update_item, methods=["PUT"])
    admin_router.add_api_route(f"{entry.path}/{{item_id}}", delete_item, methods=["DELETE"])


for _entry in (
    _CatalogRoutes(
        "/soul-care/services",
        soul_care.services,
        ServiceCreate,
        ServiceUpdate,
        ("title", "description"),
        "service",
        "services",
        "Service",
    ),
    _CatalogRoutes(
        "/soul-care/team",
        soul_care.team,
        TeamMemberCreate,
        TeamMemberUpdate,
        ("name", "title"),
        "member",
        "team",
        "Team member",
    ),
    _CatalogRoutes(
        "/resources",
        soul_care.resources,
        ResourceCreate,
        ResourceUpdate,
        ("title", "category", "download_url"),
        "resource",
        "resources",
        "Resource",
    ),
):
    _register(_entry)


@router.get("/soul-care")
async def soul_care_overview():
    services, team = await asyncio.gather(
        soul_care.services.list_active(oldest_first=True),
        soul_care.team.list_active(oldest_first=True),
    )
    return {"services": services, "team": team}


@router.get("/resources")
async def list_public_resources():
    return {"resources": await soul_care.resources.list_active()}
