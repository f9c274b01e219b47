"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

from fastapi import Depends

from portfolio_api.assets import AssetStore
from portfolio_api.config import get_settings
from portfolio_api.contact import ContactInbox
from portfolio_api.db import DbClient, InMemoryDbClient, SqlAlchemyDbClient
from portfolio_api.notify import LoggingNotifier, Notifier, SmtpNotifier
from portfolio_api.profile import ProfileRepository
from portfolio_api.projects import ProjectCatalog
from portfolio_api.rate_limit import InMemoryRateLimiter, RateLimiter, RedisRateLimiter
from portfolio_api.storage import (
    CosStorageClient,
    InMemoryStorageClient,
    LocalStorageClient,
    StorageClient,
)

_db_client: DbClient | None = None
_storage_client: StorageClient | None = None
_rate_limiter: RateLimiter | None = None
_notifier: Notifier | None = None


def get_db_client() -> DbClient:
    """
    Return a singleton DB client so state persists across requests.
    """
    global _db_client
    if _db_client:
        return _db_client

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.database_url:
        _db_client = InMemoryDbClient()
    else:
        _db_client = SqlAlchemyDbClient(settings.database_url)
    return _db_client


def get_storage_client() -> StorageClient:
    global _storage_client
    if _storage_client:
        return _storage_client

    settings = get_settings()
    if settings.use_in_memory_backends:
        _storage_client = InMemoryStorageClient()
    elif settings.cos_bucket:
        _storage_client = CosStorageClient(
            bucket=settings.cos_bucket,
            region=settings.cos_region or "",
            endpoint=settings.cos_endpoint or "",
            access_key_id=settings.aws_access_key_id or "",
            secret_access_key=settings.aws_secret_access_key or "",
        )
    else:
        _storage_client = LocalStorageClient(root=settings.upload_dir)
    return _storage_client


def get_rate_limiter() -> RateLimiter:
    """
    Return the contact-form limiter. Redis-backed when REDIS_URL is set so
    multiple instances share one window.
    """
    global _rate_limiter
    if _rate_limiter:
        return _rate_limiter

    settings = get_settings()
    if settings.redis_url:
        _rate_limiter = RedisRateLimiter(
            url=settings.redis_url,
            limit=settings.contact_rate_limit,
            window_seconds=settings.contact_rate_window_seconds,
            key_prefix=settings.rate_limit_key_prefix,
        )
    else:
        _rate_limiter = InMemoryRateLimiter(
            limit=settings.contact_rate_limit,
            window_seconds=settings.contact_rate_window_seconds,
        )
    return _rate_limiter


def get_notifier() -> Notifier:
    global _notifier
    if _notifier:
        return _notifier

    settings = get_settings()
    if settings.smtp_host and settings.contact_notify_to:
        _notifier = SmtpNotifier(
            host=settings.smtp_host,
            port=settings.smtp_port,
            recipient=settings.contact_notify_to,
            username=settings.smtp_username,
            password=settings.smtp_password,
            sender=settings.contact_notify_from,
            use_ssl=settings.smtp_use_ssl,
        )
    else:
        _notifier = LoggingNotifier()
    return _notifier


def get_asset_store(
    storage: StorageClient = Depends(get_storage_client),
) -> AssetStore:
    return AssetStore(storage)


def get_profile_repository(
    db: DbClient = Depends(get_db_client),
    assets: AssetStore = Depends(get_asset_store),
) -> ProfileRepository:
    return ProfileRepository(db, assets)


def get_project_catalog(
    db: DbClient = Depends(get_db_client),
    assets: AssetStore = Depends(get_asset_store),
) -> ProjectCatalog:
    return ProjectCatalog(db, assets)


def get_contact_inbox(
    db: DbClient = Depends(get_db_client),
    limiter: RateLimiter = Depends(get_rate_limiter),
    notifier: Notifier = Depends(get_notifier),
) -> ContactInbox:
    return ContactInbox(db, limiter, notifier)
