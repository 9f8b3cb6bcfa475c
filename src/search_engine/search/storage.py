"""Backend-agnostic document store contract.

The query engine only talks to ``DocumentStore.insert`` and
``DocumentStore.scan_all``; the relational (SQLite) and key-value (Redis)
backends implement them behind this interface and are chosen at
construction time by :mod:`search_engine.search.storage_factory`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
import logging
from typing import Literal

from search_engine.observability.metrics import CORRUPT_RECORDS
from search_engine.search.errors import DeserializationError
from search_engine.search.models import Document


logger = logging.getLogger(__name__)

CorruptRecordPolicy = Literal["skip", "raise"]


class DocumentStore(ABC):
    """Persists documents and reads them back with a full scan.

    Instances are shared handles: they are safe to use from several threads
    at once, pooling connections internally. No document-level locking is
    performed; isolation between a scan and a concurrent insert is whatever
    the backend provides by default.
    """

    backend_name: str = "abstract"

    def __init__(self, *, corrupt_record_policy: CorruptRecordPolicy = "skip") -> None:
        if corrupt_record_policy not in ("skip", "raise"):
            msg = f"Unknown corrupt record policy: {corrupt_record_policy!r}"
            raise ValueError(msg)
        self.corrupt_record_policy = corrupt_record_policy

    @abstractmethod
    def insert(self, document: Document) -> None:
        """Persist a single document as one atomic call."""

    @abstractmethod
    def scan_all(self) -> Iterator[Document]:
        """Lazily yield every stored document in backend-defined order."""

    @abstractmethod
    def count(self) -> int:
        """Return the number of stored records."""

    @abstractmethod
    def close(self) -> None:
        """Release pooled connections."""

    def __enter__(self) -> DocumentStore:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _handle_corrupt_record(self, error: DeserializationError) -> None:
        """Apply the corrupt record policy: re-raise, or log and let the scan continue."""
        CORRUPT_RECORDS.labels(backend=self.backend_name).inc()
        if self.corrupt_record_policy == "raise":
            raise error
        logger.warning(
            "Skipping corrupt record %s in %s store: %s",
            error.record_key,
            self.backend_name,
            error,
        )
