"""Key-value document store backed by Redis.

Every insert writes a new key ``<prefix><uuid4 hex>`` whose value is the
binary record from :func:`search_engine.search.codec.encode_record`. No
natural key is enforced, so inserting the same page twice yields two
independent records.
"""

from __future__ import annotations

from collections.abc import Iterator
import logging
import re
from uuid import uuid4

import redis

from search_engine.search.codec import decode_record, encode_record
from search_engine.search.errors import (
    ConfigurationError,
    DeserializationError,
    PoolExhaustionError,
    SchemaInitError,
    StorageIOError,
)
from search_engine.search.models import Document
from search_engine.search.storage import CorruptRecordPolicy, DocumentStore


logger = logging.getLogger(__name__)

_SCAN_BATCH = 256
_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")


def _storage_error(action: str, exc: redis.RedisError) -> Exception:
    if isinstance(exc, redis.ConnectionError) and "No connection available" in str(exc):
        return PoolExhaustionError(f"Redis pool exhausted while trying to {action}: {exc}")
    return StorageIOError(f"Redis failed to {action}: {exc}")


class RedisDocumentStore(DocumentStore):
    """Redis implementation of :class:`DocumentStore`."""

    backend_name = "redis"

    def __init__(
        self,
        client: redis.Redis,
        *,
        key_prefix: str = "search-engine:document:",
        corrupt_record_policy: CorruptRecordPolicy = "skip",
    ) -> None:
        super().__init__(corrupt_record_policy=corrupt_record_policy)
        if not key_prefix:
            raise ConfigurationError("Redis key prefix must not be empty")
        self._client = client
        self.key_prefix = key_prefix
        self._match = _GLOB_SPECIAL.sub(r"\\\1", key_prefix) + "*"
        try:
            self._client.ping()
        except redis.RedisError as exc:
            self._client.close()
            raise SchemaInitError(f"Cannot reach Redis keyspace {key_prefix!r}: {exc}") from exc

    @classmethod
    def from_url(
        cls,
        url: str,
        *,
        max_connections: int = 8,
        pool_timeout: float = 30.0,
        key_prefix: str = "search-engine:document:",
        corrupt_record_policy: CorruptRecordPolicy = "skip",
    ) -> RedisDocumentStore:
        """Build a store over a blocking connection pool."""
        try:
            pool = redis.BlockingConnectionPool.from_url(
                url,
                max_connections=max_connections,
                timeout=pool_timeout,
            )
        except ValueError as exc:
            raise ConfigurationError(f"Invalid Redis URL {url!r}: {exc}") from exc
        try:
            return cls(
                redis.Redis(connection_pool=pool),
                key_prefix=key_prefix,
                corrupt_record_policy=corrupt_record_policy,
            )
        except SchemaInitError:
            pool.disconnect()
            raise

    def _new_key(self) -> str:
        return f"{self.key_prefix}{uuid4().hex}"

    def insert(self, document: Document) -> None:
        payload = encode_record(document.identifier, document.title, document.description, document.segments)
        key = self._new_key()
        try:
            self._client.set(key, payload)
        except redis.RedisError as exc:
            raise _storage_error(f"insert {document.identifier}", exc) from exc
        logger.debug("Stored %s under %s", document.identifier, key)

    def _unique_keys(self) -> Iterator[bytes]:
        # SCAN may return a key more than once
        seen: set[bytes] = set()
        for key in self._client.scan_iter(match=self._match, count=_SCAN_BATCH):
            if key in seen:
                continue
            seen.add(key)
            yield key

    def scan_all(self) -> Iterator[Document]:
        batch: list[bytes] = []
        try:
            for key in self._unique_keys():
                batch.append(key)
                if len(batch) >= _SCAN_BATCH:
                    yield from self._load_batch(batch)
                    batch = []
            if batch:
                yield from self._load_batch(batch)
        except redis.RedisError as exc:
            raise _storage_error("scan documents", exc) from exc

    def _load_batch(self, keys: list[bytes]) -> Iterator[Document]:
        for raw_key, payload in zip(keys, self._client.mget(keys)):
            if payload is None:
                continue
            key = raw_key.decode("utf-8") if isinstance(raw_key, bytes) else str(raw_key)
            try:
                identifier, title, description, segments = decode_record(payload, record_key=key)
            except DeserializationError as error:
                self._handle_corrupt_record(error)
                continue
            yield Document(
                identifier=identifier,
                title=title,
                description=description,
                segments=segments,
                record_key=key,
            )

    def count(self) -> int:
        try:
            return sum(1 for _ in self._unique_keys())
        except redis.RedisError as exc:
            raise _storage_error("count documents", exc) from exc

    def close(self) -> None:
        self._client.close()
