"""Contract tests run against both document store backends."""

from __future__ import annotations

from search_engine.search.models import Document
from search_engine.search.tokenizer import encode


def _document(identifier: str, *texts: str, title: str = "Title", description: str = "") -> Document:
    return Document.from_tokens(identifier, title, description, (encode(text) for text in texts))


def test_scan_returns_tokens_per_segment_in_order(any_store) -> None:
    texts = ["Cats are great pets.", "They sleep (a lot)", "Ünïcode-text"]
    any_store.insert(_document("https://example.com/cats", *texts, title="Cats", description="About cats"))

    [stored] = list(any_store.scan_all())

    assert stored.identifier == "https://example.com/cats"
    assert stored.title == "Cats"
    assert stored.description == "About cats"
    assert stored.segments == tuple(tuple(encode(text)) for text in texts)
    assert len(stored.segments) == len(texts)


def test_scan_of_empty_store_yields_nothing(any_store) -> None:
    assert list(any_store.scan_all()) == []
    assert any_store.count() == 0


def test_scan_is_lazy(any_store) -> None:
    for index in range(3):
        any_store.insert(_document(f"doc-{index}", "text"))

    iterator = any_store.scan_all()
    first = next(iterator)
    iterator.close()

    assert first.identifier.startswith("doc-")


def test_document_without_segments_round_trips(any_store) -> None:
    any_store.insert(Document(identifier="empty", title="Empty", description=""))

    [stored] = list(any_store.scan_all())
    assert stored.segments == ()


def test_count_tracks_inserts(any_store) -> None:
    for index in range(5):
        any_store.insert(_document(f"doc-{index}", f"text {index}"))

    assert any_store.count() == 5
    assert {document.identifier for document in any_store.scan_all()} == {f"doc-{i}" for i in range(5)}


def test_store_is_a_context_manager(any_store) -> None:
    with any_store as store:
        assert store is any_store
