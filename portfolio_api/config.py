"""
Configuration and settings for the portfolio backend.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)
    log_level: str = Field(default="INFO")
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Database (any SQLAlchemy URL; unset means in-memory)
    database_url: Optional[str] = Field(default=None)

    # Asset storage: local directory unless an S3-compatible bucket is set
    upload_dir: str = Field(default="uploads")
    cos_endpoint: Optional[str] = Field(default=None)
    cos_region: Optional[str] = Field(default=None)
    cos_bucket: Optional[str] = Field(default=None)
    aws_access_key_id: Optional[str] = Field(default=None)
    aws_secret_access_key: Optional[str] = Field(default=None)

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)
    bootstrap_on_startup: bool = Field(default=True)
    seed_sample_projects: bool = Field(default=True)

    # Contact form rate limiting (Redis shares the window across instances)
    redis_url: Optional[str] = Field(default=None)
    rate_limit_key_prefix: str = Field(default="portfolio:contact")
    contact_rate_limit: int = Field(default=3, ge=1)
    contact_rate_window_seconds: int = Field(default=15 * 60, ge=1)
    trust_forwarded_for: bool = Field(default=False)

    # Admin authentication
    jwt_secret: str = Field(default="change-me-in-production")
    jwt_algorithm: str = Field(default="HS256")
    access_token_expire_minutes: int = Field(default=60 * 12)
    admin_email: str = Field(default="admin@example.com")
    admin_password: str = Field(default="admin123")

    # Contact notifications
    smtp_host: Optional[str] = Field(default=None)
    smtp_port: int = Field(default=465)
    smtp_username: Optional[str] = Field(default=None)
    smtp_password: Optional[str] = Field(default=None)
    smtp_use_ssl: bool = Field(default=True)
    contact_notify_to: Optional[str] = Field(default=None)
    contact_notify_from: Optional[str] = Field(default=None)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
