import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ..permissions import AdminUser, require_admin
from ..repositories import blog as blog_repo
from ..repositories import documents
from ..schemas import require_fields
from ..schemas.blog import BlogPostCreate, BlogPostUpdate, BlogStatus
from ..services.blog_cleanup import delete_blog_images
from ..utils.ids import short_alnum_id, slugify
from ..utils.pagination import Pagination

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/blog", tags=["blog"])
admin_router = APIRouter(
    prefix="/api/admin/blog",
    tags=["admin", "blog"],
    dependencies=[Depends(require_admin)],
)

_NOT_FOUND = "Blog post not found"


@router.get("")
async def list_published_posts(
    page: Pagination,
    status_filter: BlogStatus = Query(default=BlogStatus.published, alias="status"),
    category: str | None = None,
    search: str | None = None,
):
    query = blog_repo.build_listing_query(
        status=status_filter.value, category=category, search=search
    )
    items, total = await blog_repo.list_posts(page, query, listing=True)
    return {"blogPosts": items, "pagination": page.describe(total)}


@router.get("/{slug}")
async def get_published_post(slug: str):
    post = await blog_repo.get_post_by_slug(slug, status=BlogStatus.published.value)
    if not post:
        raise HTTPException(status_code=404, detail=_NOT_FOUND)
    return {"blog": post}


@admin_router.get("")
async def admin_list_posts(
    page: Pagination,
    status_filter: BlogStatus | None = Query(default=None, alias="status"),
    category: str | None = None,
    search: str | None = None,
):
    query = blog_repo.build_listing_query(
        status=status_filter.value if status_filter else None,
        category=category,
        search=search,
    )
    items, total = await blog_repo.list_posts(page, query)
    return {"blogPosts": items, "pagination": page.describe(total)}


@admin_router.post("", status_code=status.HTTP_201_CREATED)
async def admin_create_post(payload: BlogPostCreate, current: AdminUser):
    require_fields(payload, "title", "excerpt", "content", "author", "category")
    now = documents.utc_now()
    post = await blog_repo.create_post(
        {
            "blogId": short_alnum_id(),
            # duplicate slugs are tolerated for posts
            "slug": slugify(payload.title),
            "title": payload.title,
            "excerpt": payload.excerpt,
            "content": payload.content,
            "author": payload.author,
            "authorId": current["userId"],
            "category": payload.category,
            "tags": payload.tags,
            "image": payload.image,
            "status": payload.status,
            "readTime": payload.read_time,
            "createdAt": now,
            "updatedAt": now,
        }
    )
    logger.info("Blog post created", extra={"blog_id": post["blogId"]})
    return {"message": "Blog post created successfully", "blogPost": post}


@admin_router.get("/{post_id}")
async def admin_get_post(post_id: str):
    post = await blog_repo.get_post(post_id)
    if not post:
        raise HTTPException(status_code=404, detail=_NOT_FOUND)
    return {"blog": post}


@admin_router.put("/{post_id}")
async def admin_update_post(post_id: str, payload: BlogPostUpdate):
    fields = payload.to_document(exclude_unset=True)
    if "title" in fields and "slug" not in fields and fields["title"]:
        fields["slug"] = slugify(fields["title"])
    fields["updatedAt"] = documents.utc_now()
    if not await blog_repo.update_post(post_id, fields):
        raise HTTPException(status_code=404, detail=_NOT_FOUND)
    return {"message": "Blog post updated successfully", "blog": await blog_repo.get_post(post_id)}


@admin_router.delete("/{post_id}")
async def admin_delete_post(post_id: str):
    post = await blog_repo.get_post(post_id)
    if not post:
        raise HTTPException(status_code=404, detail=_NOT_FOUND)

    await delete_blog_images(post)
    await blog_repo.delete_post(post_id)
    logger.info("Blog post deleted", extra={"blog_id": post.get("blogId")})
    return {"message": "Blog post deleted successfully"}
