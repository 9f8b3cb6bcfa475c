"""Search data models."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class Document:
    """A stored web document with its tokenized segments.

    ``segments`` is internal ranking state; only the identifier, title and
    description are meant for display.
    """

    identifier: str
    title: str
    description: str
    segments: tuple[tuple[str, ...], ...] = field(default=(), repr=False)
    record_key: str | None = field(default=None, repr=False, compare=False)

    @classmethod
    def from_tokens(
        cls,
        identifier: str,
        title: str,
        description: str,
        segments: Iterable[Sequence[str]],
        *,
        record_key: str | None = None,
    ) -> Document:
        return cls(
            identifier=identifier,
            title=title,
            description=description,
            segments=tuple(tuple(tokens) for tokens in segments),
            record_key=record_key,
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the display fields only."""
        return {
            "identifier": self.identifier,
            "title": self.title,
            "description": self.description,
        }


@dataclass(frozen=True, slots=True)
class SearchResult:
    """A candidate document with its similarity score and scan position."""

    document: Document
    similarity: float
    position: int

    def sort_key(self) -> tuple[float, int]:
        return (-self.similarity, self.position)
