from __future__ import annotations

import hashlib
import hmac
from dataclasses import dataclass
from datetime import datetime, timezone
from urllib.parse import quote, unquote, urlsplit

import httpx

from ..config import settings

_SERVICE = "s3"
_ALGORITHM = "AWS4-HMAC-SHA256"
_EMPTY_SHA256 = hashlib.sha256(b"").hexdigest()


class StorageServiceError(RuntimeError):
    """Raised when the object store rejects a request or is not configured."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        error: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error = error


@dataclass(slots=True)
class SignedRequest:
    url: str
    headers: dict[str, str]


def _hmac(key: bytes, message: str) -> bytes:
    return hmac.new(key, message.encode("utf-8"), hashlib.sha256).digest()


def _signing_key(secret: str, date_stamp: str, region: str) -> bytes:
    key = _hmac(f"AWS4{secret}".encode("utf-8"), date_stamp)
    key = _hmac(key, region)
    key = _hmac(key, _SERVICE)
    return _hmac(key, "aws4_request")


def _error_code(body: str) -> str | None:
    start = body.find("<Code>")
    end = body.find("</Code>")
    if start == -1 or end == -1:
        return None
    return body[start + len("<Code>") : end] or None


class StorageService:
    """Minimal S3 REST client for an R2 bucket, path-style addressing."""

    def __init__(
        self,
        *,
        bucket: str | None = None,
        endpoint: str | None = None,
        access_key_id: str | None = None,
        secret_access_key: str | None = None,
        region: str | None = None,
        public_base_url: str | None = None,
    ) -> None:
        self._bucket = (bucket if bucket is not None else settings.r2_bucket_name) or ""
        self._endpoint = (endpoint if endpoint is not None else settings.storage_endpoint) or ""
        self._access_key_id = access_key_id or settings.r2_access_key_id
        self._secret_access_key = secret_access_key or settings.r2_secret_access_key
        self._region = region or settings.storage_region
        self._public_base_url = (
            public_base_url if public_base_url is not None else settings.r2_public_url
        ) or ""

    @property
    def enabled(self) -> bool:
        return bool(
            self._bucket
            and self._endpoint
            and self._access_key_id
            and self._secret_access_key
        )

    def _object_url(self, key: str) -> tuple[str, str, str]:
        parts = urlsplit(self._endpoint.rstrip("/"))
        canonical_uri = "/" + quote(f"{self._bucket}/{key}", safe="/-_.~")
        return f"{parts.scheme}://{parts.netloc}{canonical_uri}", parts.netloc, canonical_uri

    def sign(
        self,
        method: str,
        key: str,
        *,
        payload_hash: str = _EMPTY_SHA256,
        extra_headers: dict[str, str] | None = None,
        now: datetime | None = None,
    ) -> SignedRequest:
        """Build the URL and AWS Signature V4 headers for one object request."""
        if not self.enabled:
            raise StorageServiceError("Object storage is not configured")
        if not key:
            raise StorageServiceError("storage key is required")

        moment = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
        amz_date = moment.strftime("%Y%m%dT%H%M%SZ")
        date_stamp = moment.strftime("%Y%m%d")
        url, host, canonical_uri = self._object_url(key.lstrip("/"))

        headers = {
            "host": host,
            "x-amz-content-sha256": payload_hash,
            "x-amz-date": amz_date,
        }
        for name, value in (extra_headers or {}).items():
            headers[name.lower()] = value.strip()

        signed_names = sorted(headers)
        canonical_headers = "".join(f"{name}:{headers[name]}\n" for name in signed_names)
        signed_headers = ";".join(signed_names)
        canonical_request = "\n".join(
            [method.upper(), canonical_uri, "", canonical_headers, signed_headers, payload_hash]
        )
        scope = f"{date_stamp}/{self._region}/{_SERVICE}/aws4_request"
        string_to_sign = "\n".join(
            [
                _ALGORITHM,
                amz_date,
                scope,
                hashlib.sha256(canonical_request.encode("utf-8")).hexdigest(),
            ]
        )
        signature = hmac.new(
            _signing_key(self._secret_access_key or "", date_stamp, self._region),
            string_to_sign.encode("utf-8"),
            hashlib.sha256,
        ).hexdigest()

        headers["authorization"] = (
            f"{_ALGORITHM} Credential={self._access_key_id}/{scope}, "
            f"SignedHeaders={signed_headers}, Signature={signature}"
        )
        # httpx derives Host from the URL
        headers.pop("host")
        return SignedRequest(url=url, headers=headers)

    def public_url(self, key: str) -> str:
        if not key:
            raise StorageServiceError("storage key is required")
        if not self._public_base_url:
            raise StorageServiceError("Public storage URL is not configured")
        return f"{self._public_base_url.rstrip('/')}/{key.lstrip('/')}"

    @staticmethod
    def key_from_url(url: str | None) -> str | None:
        """Object key for a stored file URL, or ``None`` when nothing should be deleted."""
        if not url:
            return None
        url = url.strip()
        if url.startswith("/"):
            key = url[1:]
        else:
            parsed = urlsplit(url)
            if parsed.scheme and parsed.netloc:
                key = parsed.path.lstrip("/")
            else:
                key = url.rsplit("/", 1)[-1]
        if not key or "placeholder" in key:
            return None
        return unquote(key)

    async def put_object(
        self,
        key: str,
        body: bytes,
        *,
        content_type: str | None = None,
        cache_control: str | None = None,
    ) -> str:
        """Upload ``body`` under ``key`` and return its public URL."""
        extra = {"content-type": content_type or "application/octet-stream"}
        if cache_control:
            extra["cache-control"] = cache_control
        signed = self.sign(
            "PUT",
            key,
            payload_hash=hashlib.sha256(body).hexdigest(),
            extra_headers=extra,
        )

        async with httpx.AsyncClient(timeout=30.0) as client:
            try:
                response = await client.put(signed.url, content=body, headers=signed.headers)
            except httpx.HTTPError as exc:  # pragma: no cover - network failure path
                raise StorageServiceError("Failed to call object storage") from exc

        if response.status_code >= 400:
            raise StorageServiceError(
                f"Object storage upload failed with status {response.status_code}",
                status_code=response.status_code,
                error=_error_code(response.text),
            )
        return self.public_url(key)

    async def delete_object(self, key: str) -> bool:
        signed = self.sign("DELETE", key)

        async with httpx.AsyncClient(timeout=10.0) as client:
            try:
                response = await client.delete(signed.url, headers=signed.headers)
            except httpx.HTTPError as exc:  # pragma: no cover - network failure path
                raise StorageServiceError("Failed to call object storage") from exc

        if response.status_code in {200, 204}:
            return True
        if response.status_code == 404:
            return False
        if response.status_code >= 400:
            raise StorageServiceError(
                f"Object storage delete failed with status {response.status_code}",
                status_code=response.status_code,
                error=_error_code(response.text),
            )
        return True

    async def delete_url(self, url: str | None) -> bool:
        """Delete the object behind a public URL; placeholders are skipped."""
        key = self.key_from_url(url)
        if key is None:
            return False
        return await self.delete_object(key)

    def hosted_markers(self) -> list[str]:
        """Substrings identifying URLs that point into this store."""
        markers = ["r2.cloudflarestorage.com"]
        if self._public_base_url:
            markers.append(self._public_base_url.rstrip("/"))
        return markers


_storage_service: StorageService | None = None


def get_storage_service() -> StorageService:
    global _storage_service
    if _storage_service is None:
        _storage_service = StorageService()
    return _storage_service


def reset_storage_service(service: StorageService | None = None) -> None:
    global _storage_service
    _storage_service = service
