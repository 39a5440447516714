"""
DI helpers used by main.py and routers/*.

Backends are built lazily from settings on first use and then reused for
the life of the process. Tests swap them through app.dependency_overrides.
"""
import logging
from typing import Annotated, Any, Optional

from fastapi import Depends, HTTPException, Request, status

from core.rate_limit import (
    ContentStoreRateStore,
    RateLimiter,
    RateStore,
    TTLCacheRateStore,
    client_ip,
)
from settings import Settings, get_settings

logger = logging.getLogger(__name__)

_storage_adapter: Optional[Any] = None
_blob_store: Optional[Any] = None
_rate_store: Optional[RateStore] = None


def build_storage_adapter(settings: Settings):
    backend = settings.storage_backend.lower()
    logger.info(f"🔧 Storage Backend: {backend.upper()}")

    if backend == "firestore":
        from adapters.firestore import FirestoreAdapter

        return FirestoreAdapter(
            google_sa_json=settings.resolved_google_sa_json(),
            project_id=settings.gcp_project_id or None,
            database=settings.firestore_database,
        )
    if backend == "sqlite":
        from adapters.sqlite import SqliteAdapter

        return SqliteAdapter.from_url(settings.db_url)
    if backend == "json":
        from adapters.json import JsonAdapter

        return JsonAdapter(data_dir=settings.data_dir)

    raise ValueError(f"Unknown STORAGE_BACKEND: {backend}")


def build_blob_store(settings: Settings):
    backend = settings.blob_backend.lower()
    logger.info(f"🔧 Blob Backend: {backend.upper()}")

    if backend == "gcs":
        from core.blob_store import GcsBlobStore

        return GcsBlobStore(
            bucket_name=settings.gcs_bucket_name,
            google_sa_json=settings.resolved_google_sa_json(),
            project_id=settings.gcp_project_id or None,
        )
    if backend == "local":
        from core.blob_store import LocalBlobStore

        return LocalBlobStore(settings.local_blob_dir, settings.public_blob_base_url)

    raise ValueError(f"Unknown BLOB_BACKEND: {backend}")


def get_storage_adapter():
    global _storage_adapter
    if _storage_adapter is None:
        _storage_adapter = build_storage_adapter(get_settings())
    return _storage_adapter


def get_blob_store():
    global _blob_store
    if _blob_store is None:
        _blob_store = build_blob_store(get_settings())
    return _blob_store


def get_rate_store() -> RateStore:
    global _rate_store
    if _rate_store is None:
        backend = get_settings().rate_limit_backend.lower()
        if backend == "store":
            _rate_store = ContentStoreRateStore(get_storage_adapter())
        elif backend == "memory":
            _rate_store = TTLCacheRateStore()
        else:
            raise ValueError(f"Unknown RATE_LIMIT_BACKEND: {backend}")
    return _rate_store


Storage = Annotated[Any, Depends(get_storage_adapter)]
Blobs = Annotated[Any, Depends(get_blob_store)]
AppSettings = Annotated[Settings, Depends(get_settings)]


def _enforce(limiter: RateLimiter, request: Request, settings: Settings, message: str) -> None:
    allowed, retry_after = limiter.hit(client_ip(request, settings.trusted_proxy_hops))
    if not allowed:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=message,
            headers={
                "Retry-After": str(retry_after),
                "X-RateLimit-Limit": str(limiter.limit),
                "X-RateLimit-Remaining": "0",
            },
        )


def limit_guestbook_posts(
    request: Request,
    settings: AppSettings,
    store: Annotated[RateStore, Depends(get_rate_store)],
) -> None:
    """Max GUESTBOOK_POSTS_PER_HOUR guestbook posts per IP per hour."""
    limiter = RateLimiter(store, "guestbook-post", settings.guestbook_posts_per_hour, 60 * 60)
    _enforce(limiter, request, settings, "Too many guestbook entries from this IP, please try again later.")


def limit_map_logs(
    request: Request,
    settings: AppSettings,
    store: Annotated[RateStore, Depends(get_rate_store)],
) -> None:
    """Max MAP_LOGS_PER_DAY visit logs per IP per 24h."""
    limiter = RateLimiter(store, "map-log-visit", settings.map_logs_per_day, 24 * 60 * 60)
    _enforce(limiter, request, settings, "Too many map log attempts from this IP, please try again tomorrow.")
