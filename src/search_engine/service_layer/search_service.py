"""Search service orchestration layer.

The entry point for external collaborators: the HTML extraction stage calls
``insert`` and the interactive/HTTP front ends call ``search``. Tokenizing,
persisting and ranking are delegated to the tokenizer, the document store and
the query engine.
"""

from __future__ import annotations

from collections.abc import Sequence
import logging

from search_engine.config import Settings
from search_engine.observability.metrics import (
    DOCUMENTS_INSERTED,
    INSERT_LATENCY,
    SEARCH_LATENCY,
    track_latency,
)
from search_engine.observability.setup import configure_observability
from search_engine.observability.tracing import create_span
from search_engine.search.engine import CosineSearchEngine
from search_engine.search.errors import StorageError
from search_engine.search.models import Document
from search_engine.search.storage import DocumentStore
from search_engine.search.storage_factory import create_document_store
from search_engine.search.tokenizer import Tokenizer


logger = logging.getLogger(__name__)


def build_description(segments: Sequence[str], count: int = 3) -> str:
    """Join the first ``count`` raw segments with spaces."""
    return " ".join(segments[:count])


class SearchService:
    """High-level insert/search API over a shared document store.

    The service holds no mutable state of its own; it can be shared between
    threads as long as the store can.
    """

    def __init__(
        self,
        store: DocumentStore,
        *,
        settings: Settings | None = None,
        tokenizer: Tokenizer | None = None,
    ) -> None:
        self.store = store
        self.settings = settings or Settings()
        self.tokenizer = tokenizer or Tokenizer()
        self.engine = CosineSearchEngine(store, self.tokenizer)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> SearchService:
        """Configure logging and export, then open the configured document store."""
        settings = settings or Settings()
        configure_observability(settings)
        return cls(create_document_store(settings), settings=settings)

    def insert(
        self,
        identifier: str,
        title: str,
        description: str | None,
        segments: Sequence[str],
    ) -> Document:
        """Tokenize each segment independently and persist the document.

        Args:
            identifier: Natural key, usually the page URL
            title: Page title
            description: Display description; derived from the leading
                segments when None
            segments: Extracted content blocks, in page order

        Returns:
            The stored Document

        Raises:
            StorageError: The insert failed; previously stored documents are untouched
        """
        if description is None:
            description = build_description(segments, self.settings.description_segment_count)
        document = Document.from_tokens(
            identifier,
            title,
            description,
            (self.tokenizer.encode(segment) for segment in segments),
        )

        backend = self.store.backend_name
        attributes = {"document.identifier": identifier, "store.backend": backend}
        with create_span("search_engine.insert", attributes=attributes):
            try:
                with track_latency(INSERT_LATENCY, backend=backend):
                    self.store.insert(document)
            except StorageError:
                DOCUMENTS_INSERTED.labels(backend=backend, status="error").inc()
                logger.warning("Insert failed for %s", identifier, exc_info=True)
                raise
        DOCUMENTS_INSERTED.labels(backend=backend, status="ok").inc()
        logger.info("Inserted %s with %d segments", identifier, len(document.segments))
        return document

    def search(self, query: str, limit: int | None = None) -> list[Document]:
        """Return up to ``limit`` documents ranked by descending similarity.

        Any storage failure aborts the whole call; no partial list is returned.
        """
        if limit is None:
            limit = self.settings.default_result_limit
        backend = self.store.backend_name
        with create_span("search_engine.search", attributes={"query.limit": limit, "store.backend": backend}) as span:
            with track_latency(SEARCH_LATENCY, backend=backend):
                results = self.engine.search(query, limit)
            span.set_attribute("query.result_count", len(results))
        logger.info("Search returned %d results", len(results), extra={"query": query, "limit": limit})
        return results

    def close(self) -> None:
        self.store.close()
