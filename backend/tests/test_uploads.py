import re

import pytest

from soulcare.config import settings
from soulcare.services import storage_service as storage_module
from soulcare.services.storage_service import StorageServiceError
from utils import admin_headers

pytestmark = pytest.mark.anyio("asyncio")


@pytest.fixture
def stored(monkeypatch):
    uploads: list[dict] = []

    async def _put_object(self, key, body, *, content_type=None, cache_control=None):
        uploads.append(
            {"key": key, "size": len(body), "type": content_type, "cache": cache_control}
        )
        return self.public_url(key)

    monkeypatch.setattr(storage_module.StorageService, "put_object", _put_object)
    return uploads


async def test_upload_image_returns_public_url(async_client, stored):
    headers = await admin_headers()
    resp = await async_client.post(
        "/api/upload-image",
        files={"file": ("Cover.PNG", b"\x89PNG data", "image/png")},
        headers=headers,
    )
    assert resp.status_code == 200, resp.text
    url = resp.json()["url"]
    assert re.fullmatch(r"https://pub-test\.r2\.dev/images/\d+-[a-z0-9]{11}\.png", url)
    assert stored[0]["type"] == "image/png"
    assert stored[0]["cache"] == "public, max-age=31536000"


async def test_upload_document_sanitizes_filename(async_client, stored):
    headers = await admin_headers()
    resp = await async_client.post(
        "/api/upload-document",
        files={"file": ("Care plan (v2).pdf", b"%PDF-1.4", "application/pdf")},
        headers=headers,
    )
    assert resp.status_code == 200, resp.text
    assert re.fullmatch(r"documents/\d+-Care-plan--v2-\.pdf", stored[0]["key"])


async def test_upload_resource_accepts_audio(async_client, stored):
    headers = await admin_headers()
    resp = await async_client.post(
        "/api/upload-resource",
        files={"file": ("talk.mp3", b"ID3", "audio/mpeg")},
        headers=headers,
    )
    assert resp.status_code == 200
    assert stored[0]["key"].startswith("resources/")


async def test_upload_rejects_wrong_type(async_client, stored):
    headers = await admin_headers()
    resp = await async_client.post(
        "/api/upload-image",
        files={"file": ("notes.pdf", b"%PDF", "application/pdf")},
        headers=headers,
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid file type"
    assert stored == []


async def test_upload_rejects_oversized_file(async_client, stored, monkeypatch):
    monkeypatch.setattr(settings, "upload_max_image_bytes", 4)
    headers = await admin_headers()
    resp = await async_client.post(
        "/api/upload-image",
        files={"file": ("big.png", b"0123456789", "image/png")},
        headers=headers,
    )
    assert resp.status_code == 400
    assert resp.json()["error"].startswith("File too large")
    assert stored == []


async def test_upload_requires_file(async_client, stored):
    headers = await admin_headers()
    resp = await async_client.post("/api/upload-document", headers=headers)
    assert resp.status_code == 400
    assert resp.json()["error"] == "No file provided"


async def test_upload_storage_failure_is_500(async_client, monkeypatch):
    async def _fail(self, key, body, **kwargs):
        raise StorageServiceError("denied", status_code=403)

    monkeypatch.setattr(storage_module.StorageService, "put_object", _fail)
    headers = await admin_headers()
    resp = await async_client.post(
        "/api/upload-image",
        files={"file": ("a.png", b"png", "image/png")},
        headers=headers,
    )
    assert resp.status_code == 500
    assert resp.json()["error"] == "Upload failed"


async def test_delete_image(async_client, monkeypatch):
    deleted: list[str] = []

    async def _delete_object(self, key):
        deleted.append(key)
        return True

    monkeypatch.setattr(storage_module.StorageService, "delete_object", _delete_object)
    headers = await admin_headers()

    missing = await async_client.delete("/api/delete-image", headers=headers)
    assert missing.status_code == 400

    placeholder = await async_client.delete(
        "/api/delete-image", params={"url": "/placeholder.svg"}, headers=headers
    )
    assert placeholder.json() == {"success": True}

    resp = await async_client.delete(
        "/api/delete-image",
        params={"url": "https://pub-test.r2.dev/images/a.png"},
        headers=headers,
    )
    assert resp.status_code == 200
    assert resp.json()["success"] is True
    assert deleted == ["images/a.png"]
