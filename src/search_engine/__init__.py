"""Keyword search over short web documents ranked by term-frequency cosine similarity."""

from search_engine.search.engine import CosineSearchEngine
from search_engine.search.models import Document
from search_engine.search.storage_factory import create_document_store
from search_engine.service_layer.search_service import SearchService


__all__ = ["CosineSearchEngine", "Document", "SearchService", "create_document_store"]
