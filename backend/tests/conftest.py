import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from soulcare import db  # noqa: E402
from soulcare.config import settings  # noqa: E402
from soulcare.main import app  # noqa: E402
from soulcare.services import storage_service  # noqa: E402
from fake_mongo import FakeDatabase  # noqa: E402


@pytest.fixture(scope="module")
def anyio_backend():
    # Limit tests to asyncio backend so local runs do not require the Trio extra.
    return "asyncio"


@pytest.fixture(autouse=True)
def fake_db():
    database = FakeDatabase()
    db.use_database(database)
    try:
        yield database
    finally:
        db.use_database(None)


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch):
    monkeypatch.setattr(settings, "jwt_secret", "test-secret")
    monkeypatch.setattr(settings, "auth_require_login_otp", False)
    monkeypatch.setattr(settings, "app_url", "https://soulcare.test")
    monkeypatch.setattr(settings, "r2_public_url", "https://pub-test.r2.dev")
    storage_service.reset_storage_service(
        storage_service.StorageService(
            bucket="soulcare-media",
            endpoint="https://acct.r2.cloudflarestorage.com",
            access_key_id="AKIDEXAMPLE",
            secret_access_key="wJalrXUtnFEMI/K7MDENG+bPxRfiCYEXAMPLEKEY",
            region="auto",
            public_base_url="https://pub-test.r2.dev",
        )
    )
    try:
        yield
    finally:
        storage_service.reset_storage_service(None)


@pytest.fixture
def sent_codes(monkeypatch):
    """Capture one-time code emails instead of talking to SMTP."""
    outbox: list[dict] = []

    async def _capture(email, code, purpose):
        outbox.append({"email": email, "code": code, "purpose": purpose.value})
        return True

    monkeypatch.setattr("soulcare.routes.auth.mail_service.send_otp_email", _capture)
    return outbox


@pytest.fixture
async def async_client(anyio_backend) -> AsyncClient:
    if anyio_backend != "asyncio":
        pytest.skip("Backend tests require asyncio")

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
