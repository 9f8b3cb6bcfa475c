"""Error types raised by the document store and query engine.

Tokenization and ranking are total, so everything here originates from
configuration or persistence.
"""

from __future__ import annotations


class SearchEngineError(Exception):
    """Base class for all search engine errors."""


class ConfigurationError(SearchEngineError):
    """Raised when storage location or parameters are unusable."""


class StorageError(SearchEngineError):
    """Raised when a document store operation fails."""


class SchemaInitError(StorageError):
    """Raised when the backing table or keyspace cannot be prepared."""


class DuplicateKeyError(StorageError):
    """Raised by the relational backend when an identifier already exists."""

    def __init__(self, identifier: str) -> None:
        super().__init__(f"Document already exists: {identifier}")
        self.identifier = identifier


class SerializationError(StorageError):
    """Raised when token segments cannot be encoded."""


class DeserializationError(StorageError):
    """Raised when a stored blob is malformed or has an unknown version."""

    def __init__(self, message: str, *, record_key: str | None = None) -> None:
        if record_key is not None:
            message = f"{message} (record {record_key})"
        super().__init__(message)
        self.record_key = record_key


class StorageIOError(StorageError):
    """Raised when the underlying database or server call fails."""


class PoolExhaustionError(StorageError):
    """Raised when no pooled connection is available."""
