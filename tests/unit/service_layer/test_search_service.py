"""Tests for the search service layer."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from prometheus_client import REGISTRY

from search_engine.config import Settings
from search_engine.search.errors import DuplicateKeyError, SerializationError, StorageError, StorageIOError
from search_engine.search.tokenizer import encode
from search_engine.service_layer.search_service import SearchService, build_description


def _inserted(backend: str, status: str) -> float:
    return REGISTRY.get_sample_value("documents_inserted_total", {"backend": backend, "status": status}) or 0.0


@pytest.fixture
def service(sqlite_store, settings) -> SearchService:
    return SearchService(sqlite_store, settings=settings)


def test_build_description_joins_leading_segments() -> None:
    assert build_description(["one", "two", "three", "four"]) == "one two three"
    assert build_description(["only"], 3) == "only"
    assert build_description(["a", "b"], 0) == ""


def test_insert_tokenizes_each_segment_independently(service) -> None:
    segments = ["Cats are great pets.", "They purr-a-lot", ""]
    document = service.insert("https://example.com/cats", "Cats", "About cats", segments)

    assert document.segments == tuple(tuple(encode(text)) for text in segments)
    [stored] = list(service.store.scan_all())
    assert stored == document


def test_missing_description_is_derived_from_leading_segments(service) -> None:
    document = service.insert("doc", "Doc", None, ["first", "second", "third", "fourth"])

    assert document.description == "first second third"


def test_description_segment_count_is_configurable(sqlite_store, tmp_path) -> None:
    service = SearchService(sqlite_store, settings=Settings(sqlite_path=tmp_path / "x.db", description_segment_count=1))

    assert service.insert("doc", "Doc", None, ["first", "second"]).description == "first"


def test_supplied_description_is_kept(service) -> None:
    assert service.insert("doc", "Doc", "", ["first"]).description == ""


def test_failed_insert_is_counted_and_reraised(service) -> None:
    service.insert("doc", "Doc", "", ["text"])
    before = _inserted("sqlite", "error")

    with pytest.raises(DuplicateKeyError):
        service.insert("doc", "Doc", "", ["text"])

    assert _inserted("sqlite", "error") == before + 1
    assert service.store.count() == 1


def test_search_end_to_end(service) -> None:
    service.insert("a", "Cats", None, ["cats are great pets"])
    service.insert("b", "Dogs", None, ["dogs are great pets too"])

    assert [document.identifier for document in service.search("cats", 10)] == ["a"]
    assert [document.identifier for document in service.search("Great PETS", 10)] == ["a", "b"]
    assert service.search("", 10) == []


def test_search_uses_default_limit(sqlite_store, tmp_path) -> None:
    service = SearchService(sqlite_store, settings=Settings(sqlite_path=tmp_path / "x.db", default_result_limit=2))
    for index in range(5):
        service.insert(f"doc-{index}", "Doc", None, ["shared words"])

    assert len(service.search("shared")) == 2
    assert len(service.search("shared", 4)) == 4


def test_key_value_backend_accepts_repeated_inserts(redis_store, settings) -> None:
    service = SearchService(redis_store, settings=settings)
    service.insert("https://example.com", "Example", None, ["example page"])
    service.insert("https://example.com", "Example", None, ["example page"])

    results = service.search("example", 10)
    assert [document.identifier for document in results] == ["https://example.com", "https://example.com"]


def test_close_releases_store(sqlite_store, settings) -> None:
    service = SearchService(sqlite_store, settings=settings)
    service.close()

    with pytest.raises(StorageIOError, match="closed"):
        service.search("anything", 1)


def test_from_settings_opens_configured_store(tmp_path) -> None:
    settings = Settings(sqlite_path=tmp_path / "service.db", log_level="warning", log_json=False)
    with patch("search_engine.service_layer.search_service.configure_observability") as configure:
        service = SearchService.from_settings(settings)
    configure.assert_called_once_with(settings)
    try:
        assert service.store.backend_name == "sqlite"
        service.insert("a", "A", None, ["alpha"])
        assert [document.identifier for document in service.search("alpha")] == ["a"]
    finally:
        service.close()


@pytest.mark.parametrize("field", ["identifier", "title", "description"])
def test_unencodable_text_is_a_storage_error_on_every_backend(any_store, field) -> None:
    service = SearchService(any_store, settings=Settings())
    backend = any_store.backend_name
    before = _inserted(backend, "error")
    fields = {"identifier": "a", "title": "Title", "description": ""}
    fields[field] = "bad\udcff"

    with pytest.raises(SerializationError) as exc_info:
        service.insert(fields["identifier"], fields["title"], fields["description"], ["cats"])

    assert isinstance(exc_info.value, StorageError)
    assert _inserted(backend, "error") == before + 1
    assert any_store.count() == 0
