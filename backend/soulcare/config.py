from urllib.parse import urlsplit

from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_DEFAULT_PORTS = {"http": 80, "https": 443}


def origin_of(url: str | None) -> str | None:
    """``scheme://host[:port]`` for an http(s) URL, dropping default ports."""
    parsed = urlsplit((url or "").strip())
    scheme = parsed.scheme.lower()
    if scheme not in _DEFAULT_PORTS or not parsed.hostname:
        return None
    origin = f"{scheme}://{parsed.hostname}"
    if parsed.port and parsed.port != _DEFAULT_PORTS[scheme]:
        origin += f":{parsed.port}"
    return origin


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=(".env", "../.env"), extra="ignore")

    mongodb_uri: str | None = Field(
        default=None, validation_alias=AliasChoices("MONGODB_URI", "MONGO_URI")
    )
    mongodb_db: str = Field(
        default="bcsoulcare", validation_alias=AliasChoices("MONGODB_DB", "MONGO_DB")
    )
    mongodb_server_selection_timeout_ms: int = 5000

    jwt_secret: str = Field(
        default="change-me", validation_alias=AliasChoices("JWT_SECRET", "AUTH_SECRET")
    )
    jwt_algorithm: str = "HS256"
    jwt_expires_minutes: int = 60 * 24 * 7
    auth_require_login_otp: bool = False
    otp_ttl_minutes: int = 10
    otp_max_attempts: int = 5
    password_min_length: int = 8

    app_url: str = Field(
        default="http://localhost:3000",
        validation_alias=AliasChoices("APP_URL", "NEXT_PUBLIC_APP_URL"),
    )
    app_name: str = "BC Soul Care"
    default_organization_name: str = "CCMWA"

    smtp_host: str | None = None
    smtp_port: int = 465
    smtp_secure: bool = True
    smtp_user: str | None = None
    smtp_pass: str | None = Field(
        default=None, validation_alias=AliasChoices("SMTP_PASS", "SMTP_PASSWORD")
    )
    smtp_from: str | None = None
    smtp_timeout_seconds: float = 15.0

    cloudflare_account_id: str | None = None
    r2_access_key_id: str | None = None
    r2_secret_access_key: str | None = None
    r2_bucket_name: str | None = None
    r2_public_url: str | None = None
    storage_endpoint_url: str | None = None
    storage_region: str = "auto"

    upload_max_image_bytes: int = 10 * 1024 * 1024
    upload_max_document_bytes: int = 20 * 1024 * 1024
    upload_max_resource_bytes: int = 50 * 1024 * 1024

    cors_allow_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]
    cors_allow_origin_regex: str | None = r"http://(localhost|127\.0\.0\.1)(:\d+)?"

    log_level: str = "INFO"
    sentry_dsn: str | None = Field(
        default=None, validation_alias=AliasChoices("SENTRY_DSN", "BACKEND_SENTRY_DSN")
    )
    sentry_traces_sample_rate: float = Field(
        default=0.0,
        validation_alias=AliasChoices(
            "SENTRY_TRACES_SAMPLE_RATE",
            "BACKEND_SENTRY_TRACES_SAMPLE_RATE",
        ),
    )

    @property
    def storage_endpoint(self) -> str | None:
        if self.storage_endpoint_url:
            return self.storage_endpoint_url.rstrip("/")
        if self.cloudflare_account_id:
            return f"https://{self.cloudflare_account_id}.r2.cloudflarestorage.com"
        return None

    @property
    def mail_sender(self) -> str:
        if self.smtp_from:
            return self.smtp_from
        return f'"{self.app_name}" <{self.smtp_user or "no-reply@localhost"}>'

    @model_validator(mode="after")
    def _allow_app_origin(self):
        app_origin = origin_of(self.app_url)
        if app_origin and app_origin.lower() not in {o.lower() for o in self.cors_allow_origins}:
            self.cors_allow_origins = [*self.cors_allow_origins, app_origin]
        return self

    @field_validator("cors_allow_origins", mode="before")
    @classmethod
    def _split_origins(cls, value):
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        upper = value.upper()
        if upper not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level '{value}'")
        return upper


settings = Settings()
