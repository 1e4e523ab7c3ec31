import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ..permissions import AdminUser, require_admin
from ..repositories import courses as courses_repo
from ..repositories import documents
from ..schemas import require_fields
from ..schemas.courses import LessonCreate, LessonUpdate
from ..utils.ids import short_hex_id
from ..utils.pagination import Pagination

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/lessons", tags=["lessons"])
admin_router = APIRouter(
    prefix="/api/admin/lessons",
    tags=["admin", "lessons"],
    dependencies=[Depends(require_admin)],
)

_NOT_FOUND = "Lesson not found"
_SLUG_TAKEN = "A lesson with this slug already exists in this course"


def _has_module(course: dict, module_id: str) -> bool:
    return any(module.get("moduleId") == module_id for module in course.get("modules") or [])


@router.get("/{slug}")
async def get_published_lesson(slug: str):
    lesson = await courses_repo.get_published_lesson_by_slug(slug)
    if not lesson:
        raise HTTPException(status_code=404, detail=_NOT_FOUND)
    await courses_repo.increment_lesson_views(lesson["lessonId"])
    lesson["viewCount"] = int(lesson.get("viewCount") or 0) + 1
    return {"lesson": lesson}


@admin_router.get("")
async def admin_list_lessons(
    page: Pagination,
    course_id: str | None = Query(default=None, alias="courseId"),
):
    items, total = await courses_repo.list_lessons(page, course_id=course_id)
    return {"lessons": items, "pagination": page.describe(total)}


@admin_router.get("/courses")
async def admin_lesson_course_options():
    return {"courses": await courses_repo.list_course_options()}


@admin_router.post("", status_code=status.HTTP_201_CREATED)
async def admin_create_lesson(payload: LessonCreate, current: AdminUser):
    require_fields(payload, "course_id", "module_id", "title", "slug", "content")
    course = await courses_repo.get_course(payload.course_id)
    if not course:
        raise HTTPException(status_code=400, detail="Course not found")
    if not _has_module(course, payload.module_id):
        raise HTTPException(status_code=400, detail="Module not found in course")
    if await courses_repo.lesson_slug_taken(payload.course_id, payload.slug):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=_SLUG_TAKEN)

    now = documents.utc_now()
    doc = payload.to_document()
    doc.update(documents.publication_fields(payload.status, now=now))
    doc.update(
        {
            "lessonId": short_hex_id(),
            "viewCount": 0,
            "completionCount": 0,
            "createdAt": now,
            "updatedAt": now,
            "createdBy": current["userId"],
            "lastModifiedBy": current["userId"],
        }
    )
    lesson = await courses_repo.create_lesson(doc)
    logger.info(
        "Lesson created",
        extra={"lesson_id": lesson["lessonId"], "course_id": lesson["courseId"]},
    )
    return {
        "message": "Lesson created successfully",
        "lessonId": lesson["lessonId"],
        "id": lesson["id"],
    }


@admin_router.get("/{lesson_id}")
async def admin_get_lesson(lesson_id: str):
    lesson = await courses_repo.get_lesson(lesson_id)
    if not lesson:
        raise HTTPException(status_code=404, detail=_NOT_FOUND)
    return {"lesson": lesson}


@admin_router.put("/{lesson_id}")
async def admin_update_lesson(lesson_id: str, payload: LessonUpdate, current: AdminUser):
    existing = await courses_repo.get_lesson(lesson_id)
    if not existing:
        raise HTTPException(status_code=404, detail=_NOT_FOUND)

    fields = payload.to_document(exclude_unset=True)
    course_id = existing["courseId"]
    if fields.get("slug") and await courses_repo.lesson_slug_taken(
        course_id, fields["slug"], exclude_lesson_id=lesson_id
    ):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=_SLUG_TAKEN)
    if fields.get("moduleId"):
        course = await courses_repo.get_course(course_id)
        if not course or not _has_module(course, fields["moduleId"]):
            raise HTTPException(status_code=400, detail="Module not found in course")
    if "status" in fields:
        fields.update(
            documents.publication_fields(fields["status"], existing.get("publishedAt"))
        )
    fields["updatedAt"] = documents.utc_now()
    fields["lastModifiedBy"] = current["userId"]

    await courses_repo.update_lesson(lesson_id, fields)
    return {"message": "Lesson updated successfully", "lesson": await courses_repo.get_lesson(lesson_id)}


@admin_router.delete("/{lesson_id}")
async def admin_delete_lesson(lesson_id: str):
    if not await courses_repo.delete_lesson(lesson_id):
        raise HTTPException(status_code=404, detail=_NOT_FOUND)
    return {"message": "Lesson deleted successfully"}
