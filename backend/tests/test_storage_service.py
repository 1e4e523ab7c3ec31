import hashlib
import re
from datetime import datetime, timezone

import pytest

from soulcare.services import storage_service as storage_module
from soulcare.services.storage_service import StorageService, StorageServiceError

FIXED_NOW = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


def _service(**overrides) -> StorageService:
    options = {
        "bucket": "soulcare-media",
        "endpoint": "https://acct.r2.cloudflarestorage.com",
        "access_key_id": "AKIDEXAMPLE",
        "secret_access_key": "secret",
        "region": "auto",
        "public_base_url": "https://pub-test.r2.dev/",
    }
    options.update(overrides)
    return StorageService(**options)


def _dummy_client(captured: dict, status_code: int = 200, text: str = ""):
    class DummyResponse:
        def __init__(self):
            self.status_code = status_code
            self.text = text

    class DummyAsyncClient:
        def __init__(self, *args, **kwargs):
            captured["init"] = kwargs

        async def __aenter__(self):
            return self

        async def __aexit__(self, exc_type, exc, tb):
            return False

        async def put(self, url, content, headers):
            captured["request"] = {"method": "PUT", "url": url, "content": content, "headers": headers}
            return DummyResponse()

        async def delete(self, url, headers):
            captured["request"] = {"method": "DELETE", "url": url, "headers": headers}
            return DummyResponse()

    return DummyAsyncClient


def test_sign_builds_sigv4_headers():
    signed = _service().sign("GET", "images/a b.png", now=FIXED_NOW)

    assert signed.url == "https://acct.r2.cloudflarestorage.com/soulcare-media/images/a%20b.png"
    assert signed.headers["x-amz-date"] == "20240102T030405Z"
    assert signed.headers["x-amz-content-sha256"] == hashlib.sha256(b"").hexdigest()
    assert "host" not in signed.headers

    authorization = signed.headers["authorization"]
    assert authorization.startswith(
        "AWS4-HMAC-SHA256 Credential=AKIDEXAMPLE/20240102/auto/s3/aws4_request, "
        "SignedHeaders=host;x-amz-content-sha256;x-amz-date, Signature="
    )
    assert re.search(r"Signature=[0-9a-f]{64}$", authorization)


def test_signature_depends_on_secret_and_time():
    first = _service().sign("GET", "k", now=FIXED_NOW).headers["authorization"]
    again = _service().sign("GET", "k", now=FIXED_NOW).headers["authorization"]
    other_secret = _service(secret_access_key="other").sign("GET", "k", now=FIXED_NOW)
    assert first == again
    assert first != other_secret.headers["authorization"]


def test_sign_requires_configuration():
    with pytest.raises(StorageServiceError):
        _service(access_key_id="", secret_access_key="").sign("GET", "k")
    assert _service(bucket="").enabled is False


@pytest.mark.anyio
async def test_put_object_uploads_and_returns_public_url(monkeypatch):
    captured: dict = {}
    monkeypatch.setattr(storage_module.httpx, "AsyncClient", _dummy_client(captured))

    url = await _service().put_object(
        "images/cover.png",
        b"png-bytes",
        content_type="image/png",
        cache_control="public, max-age=31536000",
    )

    assert url == "https://pub-test.r2.dev/images/cover.png"
    request = captured["request"]
    assert request["url"].endswith("/soulcare-media/images/cover.png")
    assert request["content"] == b"png-bytes"
    assert request["headers"]["content-type"] == "image/png"
    assert request["headers"]["cache-control"] == "public, max-age=31536000"
    assert request["headers"]["x-amz-content-sha256"] == hashlib.sha256(b"png-bytes").hexdigest()
    assert "content-type" in request["headers"]["authorization"]


@pytest.mark.anyio
async def test_put_object_failure_carries_error_code(monkeypatch):
    captured: dict = {}
    body = "<Error><Code>AccessDenied</Code></Error>"
    monkeypatch.setattr(
        storage_module.httpx, "AsyncClient", _dummy_client(captured, status_code=403, text=body)
    )

    with pytest.raises(StorageServiceError) as excinfo:
        await _service().put_object("images/x.png", b"x")

    assert excinfo.value.status_code == 403
    assert excinfo.value.error == "AccessDenied"


@pytest.mark.anyio
@pytest.mark.parametrize("status_code,expected", [(204, True), (200, True), (404, False)])
async def test_delete_object_statuses(monkeypatch, status_code, expected):
    captured: dict = {}
    monkeypatch.setattr(
        storage_module.httpx, "AsyncClient", _dummy_client(captured, status_code=status_code)
    )
    assert await _service().delete_object("images/x.png") is expected
    assert captured["request"]["method"] == "DELETE"


@pytest.mark.anyio
async def test_delete_object_server_error_raises(monkeypatch):
    monkeypatch.setattr(
        storage_module.httpx, "AsyncClient", _dummy_client({}, status_code=500)
    )
    with pytest.raises(StorageServiceError):
        await _service().delete_object("images/x.png")


@pytest.mark.parametrize(
    "url,key",
    [
        ("https://pub-test.r2.dev/images/a.png", "images/a.png"),
        ("https://pub-test.r2.dev/images/c%20d.png", "images/c d.png"),
        ("/uploads/photo.jpg", "uploads/photo.jpg"),
        ("photo.jpg", "photo.jpg"),
        ("/placeholder.svg", None),
        ("https://pub-test.r2.dev/", None),
        ("", None),
        (None, None),
    ],
)
def test_key_from_url(url, key):
    assert StorageService.key_from_url(url) == key


@pytest.mark.anyio
async def test_delete_url_skips_placeholders(monkeypatch):
    captured: dict = {}
    monkeypatch.setattr(storage_module.httpx, "AsyncClient", _dummy_client(captured))
    assert await _service().delete_url("/placeholder.svg") is False
    assert "request" not in captured


def test_hosted_markers_include_public_base():
    assert _service().hosted_markers() == [
        "r2.cloudflarestorage.com",
        "https://pub-test.r2.dev",
    ]
