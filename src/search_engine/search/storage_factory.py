"""Storage factory for choosing between the SQLite and Redis backends."""

from search_engine.config import Settings
from search_engine.search.errors import ConfigurationError
from search_engine.search.redis_storage import RedisDocumentStore
from search_engine.search.sqlite_storage import SqliteDocumentStore
from search_engine.search.storage import DocumentStore


def create_document_store(settings: Settings | None = None) -> DocumentStore:
    """Open the configured document store, creating its schema if needed."""
    settings = settings or Settings()
    if settings.storage_backend == "sqlite":
        return SqliteDocumentStore(
            settings.sqlite_path,
            max_connections=settings.pool_max_connections,
            pool_timeout=settings.pool_timeout_seconds,
            busy_timeout_ms=settings.sqlite_busy_timeout_ms,
            corrupt_record_policy=settings.corrupt_record_policy,
        )
    if settings.storage_backend == "redis":
        return RedisDocumentStore.from_url(
            settings.redis_url,
            max_connections=settings.pool_max_connections,
            pool_timeout=settings.pool_timeout_seconds,
            key_prefix=settings.redis_key_prefix,
            corrupt_record_policy=settings.corrupt_record_policy,
        )
    raise ConfigurationError(f"Unknown storage backend: {settings.storage_backend}")


def get_document_count(settings: Settings | None = None) -> int:
    """Count stored documents in the configured backend."""
    with create_document_store(settings) as store:
        return store.count()
