"""Term-frequency cosine similarity helpers.

These functions are independent of any storage backend. Vectors are plain
integer occurrence counts over the joint vocabulary of a query and a single
segment; nothing is normalized or weighted.
"""

from __future__ import annotations

from collections.abc import Sequence
import math


def cosine_similarity(a: Sequence[int], b: Sequence[int]) -> float:
    """Return dot(a, b) / (|a| * |b|), or exactly 0.0 when the dot product is 0."""

    if len(a) != len(b):
        msg = f"Vector length mismatch: {len(a)} != {len(b)}"
        raise ValueError(msg)
    dot_product = sum(x * y for x, y in zip(a, b))
    if dot_product == 0:
        return 0.0
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    return dot_product / (norm_a * norm_b)


def term_frequency_vectors(query: Sequence[str], segment: Sequence[str]) -> tuple[list[int], list[int]]:
    """Build aligned count vectors over the distinct tokens of ``query`` and ``segment``."""

    counts: dict[str, list[int]] = {}
    for token in query:
        counts.setdefault(token, [0, 0])[0] += 1
    for token in segment:
        counts.setdefault(token, [0, 0])[1] += 1
    query_vector = [pair[0] for pair in counts.values()]
    segment_vector = [pair[1] for pair in counts.values()]
    return query_vector, segment_vector


def segment_similarity(query: Sequence[str], segment: Sequence[str]) -> float:
    query_vector, segment_vector = term_frequency_vectors(query, segment)
    return cosine_similarity(query_vector, segment_vector)


def document_similarity(query: Sequence[str], segments: Sequence[Sequence[str]]) -> float:
    """Average the per-segment similarities; a document without segments scores 0.0."""

    if not segments:
        return 0.0
    total = sum(segment_similarity(query, segment) for segment in segments)
    return total / len(segments)
