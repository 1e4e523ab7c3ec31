from __future__ import annotations

import logging
import re
import secrets
import string
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status

from ..config import settings
from ..permissions import require_admin
from ..services.storage_service import StorageServiceError, get_storage_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["uploads"], dependencies=[Depends(require_admin)])

_IMMUTABLE_CACHE = "public, max-age=31536000"
_RANDOM_ALPHABET = string.ascii_lowercase + string.digits
_UNSAFE_NAME_CHARS = re.compile(r"[^a-zA-Z0-9.-]")

_IMAGE_TYPES = frozenset(
    {"image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp"}
)
_DOCUMENT_TYPES = frozenset(
    {
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "application/vnd.ms-excel",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "text/plain",
        "text/csv",
    }
)
_RESOURCE_TYPES = _DOCUMENT_TYPES | frozenset(
    {
        "audio/mpeg",
        "audio/wav",
        "audio/ogg",
        "audio/mp4",
        "audio/x-m4a",
        "video/mp4",
        "video/mpeg",
        "video/webm",
        "image/jpeg",
        "image/png",
        "image/webp",
    }
)


@dataclass(frozen=True, slots=True)
class UploadPolicy:
    prefix: str
    allowed_types: frozenset[str]
    max_bytes: int
    type_error: str


def _timestamp_ms() -> int:
    return int(time.time() * 1000)


def sanitize_filename(name: str) -> str:
    return _UNSAFE_NAME_CHARS.sub("-", Path(name or "file").name) or "file"


def image_key(filename: str) -> str:
    random_part = "".join(secrets.choice(_RANDOM_ALPHABET) for _ in range(11))
    extension = (filename or "").rsplit(".", 1)[-1].lower() if "." in (filename or "") else "bin"
    return f"images/{_timestamp_ms()}-{random_part}.{extension}"


def named_key(prefix: str, filename: str) -> str:
    return f"{prefix}/{_timestamp_ms()}-{sanitize_filename(filename)}"


async def _read_validated(file: UploadFile | None, policy: UploadPolicy) -> tuple[bytes, str]:
    if file is None or not file.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file provided")

    content_type = (file.content_type or "").split(";", 1)[0].strip().lower()
    if content_type not in policy.allowed_types:
        logger.warning(
            "Rejected upload with unexpected content type: filename=%s content_type=%s",
            file.filename,
            content_type,
        )
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=policy.type_error)

    payload = await file.read()
    if len(payload) > policy.max_bytes:
        max_mb = max(1, policy.max_bytes // (1024 * 1024))
        logger.warning(
            "Upload rejected due to size: filename=%s size=%s max=%s",
            file.filename,
            len(payload),
            policy.max_bytes,
        )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"File too large (Max {max_mb}MB)",
        )
    return payload, content_type


async def _store(key: str, payload: bytes, content_type: str) -> dict[str, str]:
    try:
        url = await get_storage_service().put_object(
            key, payload, content_type=content_type, cache_control=_IMMUTABLE_CACHE
        )
    except StorageServiceError as exc:
        logger.error("Upload to object storage failed key=%s: %s", key, exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Upload failed"
        ) from exc
    logger.info("Uploaded object", extra={"key": key, "size": len(payload)})
    return {"url": url}


@router.post("/upload-image")
async def upload_image(file: Annotated[UploadFile | None, File()] = None):
    policy = UploadPolicy(
        "images", _IMAGE_TYPES, settings.upload_max_image_bytes, "Invalid file type"
    )
    payload, content_type = await _read_validated(file, policy)
    return await _store(image_key(file.filename), payload, content_type)


@router.post("/upload-document")
async def upload_document(file: Annotated[UploadFile | None, File()] = None):
    policy = UploadPolicy(
        "documents",
        _DOCUMENT_TYPES,
        settings.upload_max_document_bytes,
        "Invalid file type. Only PDF, Word, Excel, CSV, and Text files are allowed.",
    )
    payload, content_type = await _read_validated(file, policy)
    return await _store(named_key(policy.prefix, file.filename), payload, content_type)


@router.post("/upload-resource")
async def upload_resource(file: Annotated[UploadFile | None, File()] = None):
    policy = UploadPolicy(
        "resources",
        _RESOURCE_TYPES,
        settings.upload_max_resource_bytes,
        "Invalid file type. Allowed: PDF, Word, Excel, CSV, Text, MP3, WAV, MP4, JPEG, PNG, WEBP.",
    )
    payload, content_type = await _read_validated(file, policy)
    return await _store(named_key(policy.prefix, file.filename), payload, content_type)


@router.delete("/delete-image")
async def delete_image(url: str | None = Query(default=None)):
    if not url:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Image URL is required")
    service = get_storage_service()
    if service.key_from_url(url) is None:
        return {"success": True}
    try:
        await service.delete_url(url)
    except StorageServiceError as exc:
        logger.error("Deleting image failed url=%s: %s", url, exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to delete image"
        ) from exc
    return {"success": True, "message": "Image deleted successfully"}
