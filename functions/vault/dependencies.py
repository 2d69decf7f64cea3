"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import logging

from vault.auth import SessionManager
from vault.config import get_settings
from vault.kv import (
    InMemoryKeyValueStore,
    KeyValueStore,
    RedisKeyValueStore,
    SqlKeyValueStore,
)
from vault.notifications import (
    InProcessNotificationFeed,
    NotificationFeed,
    PollingNotificationFeed,
)
from vault.operations import VaultService, ViewTracker
from vault.seed import seed_defaults
from vault.storage import InMemoryStorageClient, S3StorageClient, StorageClient
from vault.stores import VaultStores

logger = logging.getLogger(__name__)

_kv_store: KeyValueStore | None = None
_stores: VaultStores | None = None
_session_manager: SessionManager | None = None
_storage_client: StorageClient | None = None
_service: VaultService | None = None
_view_tracker: ViewTracker | None = None


def get_kv_store() -> KeyValueStore:
    """
    Return a singleton document store so vault state persists across requests.
    """
    global _kv_store
    if _kv_store:
        return _kv_store

    settings = get_settings()
    if settings.use_in_memory_backends:
        _kv_store = InMemoryKeyValueStore()
    elif settings.database_url:
        _kv_store = SqlKeyValueStore(settings.database_url)
    elif settings.redis_url:
        _kv_store = RedisKeyValueStore(
            url=settings.redis_url, key_prefix=settings.redis_key_prefix
        )
    else:
        _kv_store = InMemoryKeyValueStore()
    logger.info("Using %s for vault documents", type(_kv_store).__name__)
    return _kv_store


def get_stores() -> VaultStores:
    global _stores
    if _stores:
        return _stores

    settings = get_settings()
    _stores = VaultStores(get_kv_store())
    if settings.seed_on_startup:
        seed_defaults(
            _stores,
            owner_email=settings.owner_email,
            owner_profile_id=settings.owner_profile_id,
            owner_display_name=settings.owner_display_name,
        )
    return _stores


def get_session_manager() -> SessionManager:
    global _session_manager
    if _session_manager:
        return _session_manager
    _session_manager = SessionManager(
        get_stores(), owner_email=get_settings().owner_email
    )
    return _session_manager


def get_storage_client() -> StorageClient:
    global _storage_client
    if _storage_client:
        return _storage_client

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.s3_bucket:
        _storage_client = InMemoryStorageClient()
    else:
        _storage_client = S3StorageClient(
            bucket=settings.s3_bucket,
            region=settings.s3_region or "",
            endpoint=settings.s3_endpoint or "",
            access_key_id=settings.aws_access_key_id or "",
            secret_access_key=settings.aws_secret_access_key or "",
        )
    return _storage_client


def _build_feed(stores: VaultStores) -> NotificationFeed:
    if get_settings().notification_feed == "in_process":
        return InProcessNotificationFeed(stores.notifications)
    return PollingNotificationFeed(stores.notifications)


def get_vault_service() -> VaultService:
    global _service
    if _service:
        return _service
    stores = get_stores()
    _service = VaultService(stores, _build_feed(stores), get_storage_client())
    return _service


def get_view_tracker() -> ViewTracker:
    global _view_tracker
    if _view_tracker:
        return _view_tracker
    _view_tracker = ViewTracker(
        get_vault_service(), max_markers=get_settings().view_marker_limit
    )
    return _view_tracker


def reset_dependencies() -> None:
    """Drop every cached singleton (useful in tests)."""
    global _kv_store, _stores, _session_manager, _storage_client, _service
    global _view_tracker
    _kv_store = None
    _stores = None
    _session_manager = None
    _storage_client = None
    _service = None
    _view_tracker = None
