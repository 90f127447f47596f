"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Storage and expiry settings are validated at load time.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    Everything has a default; a plain ``Settings()`` runs a local-disk
    service with a durable ``db.json`` snapshot in the working directory.
    """

    # App
    app_name: str = "cloudshare"
    app_version: str = "1.0.0"
    debug: bool = False

    # CORS
    allowed_origins: str = "*"

    # Storage
    storage_backend: str = "local"
    storage_root: str = "uploads"
    upload_temp_dir: str | None = None
    s3_bucket: str | None = None
    s3_region: str = "us-east-1"
    s3_endpoint_url: str | None = None
    s3_access_key: str | None = None
    s3_secret_key: SecretStr | None = None
    s3_key_prefix: str = "cloudshare"
    presigned_url_ttl_seconds: int = 3600

    # Bundle records
    records_path: str = "db.json"

    # Expiry (minutes)
    default_expiry_minutes: int = 60
    min_expiry_minutes: int = 1
    max_expiry_minutes: int = 10080  # 7 days

    # Sweeper
    sweeper_enabled: bool = True
    sweep_interval_seconds: float = 60.0

    # Request / middleware
    max_upload_size: int = 500 * 1024 * 1024  # 500MB
    request_timeout_seconds: int = 1800
    upstream_timeout_seconds: int = 1800
    request_id_header: str = "X-Request-ID"

    # Rate limiting
    rate_limit_enabled: bool = True
    upload_rate_limit: str = "30/minute"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_storage_and_expiry(self) -> "Settings":
        """Validate storage backend selection and expiry bounds.

        - s3: S3_BUCKET required.
        - 1 <= min_expiry_minutes <= default_expiry_minutes <= max_expiry_minutes.
        """
        if self.storage_backend == "s3":
            if not self.s3_bucket:
                raise ValueError(
                    "s3_bucket is required when storage_backend is 's3'. "
                    "Set S3_BUCKET environment variable or update .env file."
                )
        elif self.storage_backend != "local":
            raise ValueError(
                f"Invalid storage_backend '{self.storage_backend}'. "
                "Must be one of: 'local', 's3'"
            )
        if self.min_expiry_minutes < 1:
            raise ValueError("min_expiry_minutes must be at least 1")
        if not (
            self.min_expiry_minutes
            <= self.default_expiry_minutes
            <= self.max_expiry_minutes
        ):
            raise ValueError(
                "Expiry bounds must satisfy min_expiry_minutes <= "
                "default_expiry_minutes <= max_expiry_minutes, got "
                f"{self.min_expiry_minutes}/{self.default_expiry_minutes}/"
                f"{self.max_expiry_minutes}"
            )
        if self.sweep_interval_seconds <= 0:
            raise ValueError("sweep_interval_seconds must be positive")
        return self

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
