"""Cosine-similarity query engine over a full document scan.

Every query scans the whole store. A document becomes a candidate as soon as
any query token appears in any of its segments (a disjunctive filter), and
candidates are ranked by the mean cosine similarity of the query against
each segment. An inverted index would avoid the scan but is not built here.
"""

from __future__ import annotations

from collections.abc import Sequence
import heapq
import logging

from search_engine.search.models import Document, SearchResult
from search_engine.search.similarity import document_similarity
from search_engine.search.storage import DocumentStore
from search_engine.search.tokenizer import Tokenizer


logger = logging.getLogger(__name__)


class CosineSearchEngine:
    """Filter and rank documents read through a :class:`DocumentStore`."""

    def __init__(self, store: DocumentStore, tokenizer: Tokenizer | None = None) -> None:
        self.store = store
        self.tokenizer = tokenizer or Tokenizer()

    def tokenize_query(self, text: str) -> tuple[str, ...]:
        """Return query tokens with order and duplicates preserved."""
        return tuple(self.tokenizer.encode(text))

    @staticmethod
    def is_candidate(query_tokens: Sequence[str], document: Document) -> bool:
        """True if any query token occurs in any segment of ``document``."""
        for token in query_tokens:
            for segment in document.segments:
                if token in segment:
                    return True
        return False

    def rank(self, text: str, limit: int) -> list[SearchResult]:
        """Score candidates and return the top ``limit`` results, best first.

        Equal scores keep scan order.
        """
        if limit < 0:
            msg = f"limit must be non-negative, got {limit}"
            raise ValueError(msg)
        query_tokens = self.tokenize_query(text)
        if not query_tokens or limit == 0:
            return []

        results: list[SearchResult] = []
        scanned = 0
        for position, document in enumerate(self.store.scan_all()):
            scanned += 1
            if not self.is_candidate(query_tokens, document):
                continue
            similarity = document_similarity(query_tokens, document.segments)
            results.append(SearchResult(document=document, similarity=similarity, position=position))

        ranked = heapq.nsmallest(limit, results, key=SearchResult.sort_key)
        logger.debug(
            "Query %r: %d tokens, %d scanned, %d candidates, %d returned",
            text,
            len(query_tokens),
            scanned,
            len(results),
            len(ranked),
        )
        return ranked

    def search(self, text: str, limit: int) -> list[Document]:
        """Return at most ``limit`` documents ordered by descending similarity."""
        return [result.document for result in self.rank(text, limit)]
