from __future__ import annotations

from typing import Any, Mapping

from .. import collections
from ..utils.pagination import PageParams
from . import documents

CourseRow = dict[str, Any]
LessonRow = dict[str, Any]

_COURSE_LISTING_FIELDS = {
    "courseId": 1,
    "title": 1,
    "slug": 1,
    "description": 1,
    "shortDescription": 1,
    "thumbnail": 1,
    "category": 1,
    "tags": 1,
    "skillLevel": 1,
    "language": 1,
    "instructorName": 1,
    "isPremium": 1,
    "price": 1,
    "enrollmentCount": 1,
    "averageRating": 1,
    "reviewCount": 1,
}

_LESSON_OUTLINE_FIELDS = {
    "lessonId": 1,
    "moduleId": 1,
    "title": 1,
    "slug": 1,
    "excerpt": 1,
    "order": 1,
    "duration": 1,
}

_PUBLISHED = {"status": "published", "isPublished": True}


# Courses ------------------------------------------------------------------


async def get_course(course_id: str) -> CourseRow | None:
    return await documents.find_one(collections.COURSES, {"courseId": course_id})


async def get_published_course_by_slug(slug: str) -> CourseRow | None:
    return await documents.find_one(collections.COURSES, {"slug": slug, **_PUBLISHED})


async def course_slug_taken(slug: str, *, exclude_course_id: str | None = None) -> bool:
    query: dict[str, Any] = {"slug": slug}
    if exclude_course_id:
        query["courseId"] = {"$ne": exclude_course_id}
    return await documents.find_one(collections.COURSES, query, {"courseId": 1}) is not None


async def create_course(course: Mapping[str, Any]) -> CourseRow:
    return await documents.insert(collections.COURSES, course)


async def update_course(course_id: str, fields: Mapping[str, Any]) -> bool:
    return await documents.update_fields(collections.COURSES, {"courseId": course_id}, fields)


async def delete_course(course_id: str) -> bool:
    return await documents.delete(collections.COURSES, {"courseId": course_id})


async def list_courses(params: PageParams) -> tuple[list[CourseRow], int]:
    return await documents.paginate(collections.COURSES, {}, params)


async def list_published_courses() -> list[CourseRow]:
    return await documents.find_many(
        collections.COURSES,
        {"status": "published"},
        projection=_COURSE_LISTING_FIELDS,
    )


async def list_course_options() -> list[CourseRow]:
    """Course picker for the lesson editor: id, title and module outline."""
    return await documents.find_many(
        collections.COURSES,
        {},
        sort=(("title", 1),),
        projection={"courseId": 1, "title": 1, "modules": 1},
    )


async def count_courses() -> int:
    return await documents.count(collections.COURSES)


# Lessons ------------------------------------------------------------------


async def get_lesson(lesson_id: str) -> LessonRow | None:
    return await documents.find_one(collections.LESSONS, {"lessonId": lesson_id})


async def lesson_slug_taken(
    course_id: str, slug: str, *, exclude_lesson_id: str | None = None
) -> bool:
    query: dict[str, Any] = {"courseId": course_id, "slug": slug}
    if exclude_lesson_id:
        query["lessonId"] = {"$ne": exclude_lesson_id}
    return await documents.find_one(collections.LESSONS, query, {"lessonId": 1}) is not None


async def create_lesson(lesson: Mapping[str, Any]) -> LessonRow:
    return await documents.insert(collections.LESSONS, lesson)


async def update_lesson(lesson_id: str, fields: Mapping[str, Any]) -> bool:
    return await documents.update_fields(collections.LESSONS, {"lessonId": lesson_id}, fields)


async def delete_lesson(lesson_id: str) -> bool:
    return await documents.delete(collections.LESSONS, {"lessonId": lesson_id})


async def list_lessons(
    params: PageParams, *, course_id: str | None = None
) -> tuple[list[LessonRow], int]:
    query = {"courseId": course_id} if course_id else {}
    return await documents.paginate(collections.LESSONS, query, params)


async def list_published_lesson_outline(course_id: str) -> list[LessonRow]:
    return await documents.find_many(
        collections.LESSONS,
        {"courseId": course_id, **_PUBLISHED},
        sort=(("moduleId", 1), ("order", 1)),
        projection=_LESSON_OUTLINE_FIELDS,
    )


async def get_published_lesson_by_slug(slug: str) -> LessonRow | None:
    return await documents.find_one(collections.LESSONS, {"slug": slug, **_PUBLISHED})


async def increment_lesson_views(lesson_id: str) -> bool:
    return await documents.increment(collections.LESSONS, {"lessonId": lesson_id}, "viewCount")
