import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status

from ..permissions import AdminUser, require_admin
from ..repositories import courses as courses_repo
from ..repositories import documents
from ..schemas import require_fields
from ..schemas.courses import CourseCreate, CourseModule, CourseUpdate
from ..utils.ids import short_hex_id
from ..utils.pagination import Pagination

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/courses", tags=["courses"])
admin_router = APIRouter(
    prefix="/api/admin/courses",
    tags=["admin", "courses"],
    dependencies=[Depends(require_admin)],
)

_NOT_FOUND = "Course not found"
_SLUG_TAKEN = "A course with this slug already exists"


def prepare_modules(modules: list[CourseModule]) -> list[dict[str, Any]]:
    prepared = []
    for index, module in enumerate(modules, start=1):
        doc = module.to_document()
        doc["moduleId"] = doc.get("moduleId") or short_hex_id()
        doc["moduleNumber"] = doc.get("moduleNumber") or index
        if doc.get("order") is None:
            doc["order"] = index
        prepared.append(doc)
    return prepared


def _access_fields(access_type: str, price: float | None) -> dict[str, Any]:
    return {
        "isPremium": access_type != "free",
        "price": float(price or 0) if access_type == "paid" else 0,
    }


def group_lessons_by_module(
    modules: list[dict[str, Any]], lessons: list[dict[str, Any]]
) -> list[dict[str, Any]]:
    by_module: dict[str, list[dict[str, Any]]] = {}
    for lesson in lessons:
        by_module.setdefault(lesson.get("moduleId"), []).append(lesson)
    outline = []
    for module in sorted(modules, key=lambda item: item.get("order") or 0):
        items = sorted(by_module.get(module.get("moduleId"), []), key=lambda item: item.get("order") or 0)
        outline.append({**module, "lessons": items})
    return outline


@router.get("")
async def list_published_courses():
    return {"courses": await courses_repo.list_published_courses()}


@router.get("/{slug}")
async def get_published_course(slug: str):
    course = await courses_repo.get_published_course_by_slug(slug)
    if not course:
        raise HTTPException(status_code=404, detail=_NOT_FOUND)
    lessons = await courses_repo.list_published_lesson_outline(course["courseId"])
    course["modules"] = group_lessons_by_module(course.get("modules") or [], lessons)
    return {"course": course}


@admin_router.get("")
async def admin_list_courses(page: Pagination):
    items, total = await courses_repo.list_courses(page)
    return {"courses": items, "pagination": page.describe(total)}


@admin_router.post("", status_code=status.HTTP_201_CREATED)
async def admin_create_course(payload: CourseCreate, current: AdminUser):
    require_fields(payload, "title", "slug", "description")
    if await courses_repo.course_slug_taken(payload.slug):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=_SLUG_TAKEN)

    now = documents.utc_now()
    doc = payload.to_document()
    access_type = doc.pop("accessType")
    doc.update(_access_fields(access_type, payload.price))
    doc.update(documents.publication_fields(payload.status, now=now))
    doc.update(
        {
            "courseId": short_hex_id(),
            "instructorId": payload.instructor_id or current["userId"],
            "modules": prepare_modules(payload.modules),
            "enrollmentCount": 0,
            "completionRate": 0,
            "averageRating": 0,
            "reviewCount": 0,
            "createdAt": now,
            "updatedAt": now,
            "createdBy": current["userId"],
            "lastModifiedBy": current["userId"],
        }
    )
    course = await courses_repo.create_course(doc)
    logger.info("Course created", extra={"course_id": course["courseId"]})
    return {
        "message": "Course created successfully",
        "courseId": course["courseId"],
        "id": course["id"],
    }


@admin_router.get("/{course_id}")
async def admin_get_course(course_id: str):
    course = await courses_repo.get_course(course_id)
    if not course:
        raise HTTPException(status_code=404, detail=_NOT_FOUND)
    return {"course": course}


@admin_router.put("/{course_id}")
async def admin_update_course(course_id: str, payload: CourseUpdate, current: AdminUser):
    existing = await courses_repo.get_course(course_id)
    if not existing:
        raise HTTPException(status_code=404, detail=_NOT_FOUND)

    fields = payload.to_document(exclude_unset=True)
    if fields.get("slug") and await courses_repo.course_slug_taken(
        fields["slug"], exclude_course_id=course_id
    ):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=_SLUG_TAKEN)

    access_type = fields.pop("accessType", None)
    if access_type:
        fields.update(_access_fields(access_type, fields.get("price", existing.get("price"))))
    if payload.modules is not None:
        fields["modules"] = prepare_modules(payload.modules)
    if "status" in fields:
        fields.update(
            documents.publication_fields(fields["status"], existing.get("publishedAt"))
        )
    fields["updatedAt"] = documents.utc_now()
    fields["lastModifiedBy"] = current["userId"]

    await courses_repo.update_course(course_id, fields)
    return {"message": "Course updated successfully", "course": await courses_repo.get_course(course_id)}


@admin_router.delete("/{course_id}")
async def admin_delete_course(course_id: str):
    if not await courses_repo.delete_course(course_id):
        raise HTTPException(status_code=404, detail=_NOT_FOUND)
    logger.info("Course deleted", extra={"course_id": course_id})
    return {"message": "Course deleted successfully"}
