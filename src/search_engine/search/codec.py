"""Compact binary encoding for tokenized segments.

Layout (all integers are unsigned 32-bit big-endian)::

    segments := version:u8 body
    body     := count:u32 segment*
    segment  := count:u32 string*
    string   := length:u32 utf8-bytes

    record   := version:u8 string(identifier) string(title) string(description) body

``segments`` is the BLOB column of the relational backend; ``record`` is the
value stored per key by the key-value backend.
"""

from __future__ import annotations

from collections.abc import Sequence
import struct

from search_engine.search.errors import DeserializationError, SerializationError


FORMAT_VERSION = 1

_VERSION = struct.Struct(">B")
_LENGTH = struct.Struct(">I")
_MAX_LENGTH = 0xFFFFFFFF


def encode_segments(segments: Sequence[Sequence[str]]) -> bytes:
    """Serialize an ordered sequence of token sequences."""
    buffer = bytearray(_VERSION.pack(FORMAT_VERSION))
    _write_body(buffer, segments)
    return bytes(buffer)


def decode_segments(payload: bytes, *, record_key: str | None = None) -> tuple[tuple[str, ...], ...]:
    """Inverse of :func:`encode_segments`."""
    reader = _Reader(payload, record_key)
    reader.read_version()
    segments = reader.read_body()
    reader.expect_end()
    return segments


def encode_record(identifier: str, title: str, description: str, segments: Sequence[Sequence[str]]) -> bytes:
    """Serialize a full document for the key-value backend."""
    buffer = bytearray(_VERSION.pack(FORMAT_VERSION))
    for value in (identifier, title, description):
        _write_string(buffer, value)
    _write_body(buffer, segments)
    return bytes(buffer)


def decode_record(
    payload: bytes, *, record_key: str | None = None
) -> tuple[str, str, str, tuple[tuple[str, ...], ...]]:
    """Inverse of :func:`encode_record`, returns (identifier, title, description, segments)."""
    reader = _Reader(payload, record_key)
    reader.read_version()
    identifier = reader.read_string()
    title = reader.read_string()
    description = reader.read_string()
    segments = reader.read_body()
    reader.expect_end()
    return identifier, title, description, segments


def _write_body(buffer: bytearray, segments: Sequence[Sequence[str]]) -> None:
    if isinstance(segments, (str, bytes)) or not isinstance(segments, Sequence):
        raise SerializationError(f"Segments must be a sequence of token sequences, got {type(segments).__name__}")
    _write_length(buffer, len(segments))
    for segment in segments:
        if isinstance(segment, (str, bytes)) or not isinstance(segment, Sequence):
            raise SerializationError(f"Segment must be a sequence of tokens, got {type(segment).__name__}")
        _write_length(buffer, len(segment))
        for token in segment:
            _write_string(buffer, token)


def _write_string(buffer: bytearray, value: str) -> None:
    if not isinstance(value, str):
        raise SerializationError(f"Expected str, got {type(value).__name__}")
    try:
        data = value.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise SerializationError(f"Cannot encode string as UTF-8: {exc}") from exc
    _write_length(buffer, len(data))
    buffer += data


def _write_length(buffer: bytearray, length: int) -> None:
    if length > _MAX_LENGTH:
        raise SerializationError(f"Length {length} exceeds the 32-bit prefix")
    buffer += _LENGTH.pack(length)


class _Reader:
    """Cursor over a payload that raises DeserializationError on any malformation."""

    def __init__(self, payload: bytes, record_key: str | None) -> None:
        if not isinstance(payload, (bytes, bytearray, memoryview)):
            raise DeserializationError(f"Expected bytes payload, got {type(payload).__name__}", record_key=record_key)
        self._view = memoryview(payload)
        self._offset = 0
        self._record_key = record_key

    def _fail(self, message: str) -> DeserializationError:
        return DeserializationError(message, record_key=self._record_key)

    def _take(self, size: int) -> memoryview:
        end = self._offset + size
        if end > len(self._view):
            raise self._fail(f"Truncated payload: need {size} bytes at offset {self._offset}")
        chunk = self._view[self._offset : end]
        self._offset = end
        return chunk

    def read_version(self) -> None:
        (version,) = _VERSION.unpack(self._take(_VERSION.size))
        if version != FORMAT_VERSION:
            raise self._fail(f"Unsupported format version {version}")

    def read_length(self) -> int:
        (length,) = _LENGTH.unpack(self._take(_LENGTH.size))
        return length

    def read_string(self) -> str:
        data = self._take(self.read_length())
        try:
            return bytes(data).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise self._fail(f"Invalid UTF-8 at offset {self._offset - len(data)}") from exc

    def read_body(self) -> tuple[tuple[str, ...], ...]:
        segment_count = self.read_length()
        segments: list[tuple[str, ...]] = []
        for _ in range(segment_count):
            token_count = self.read_length()
            segments.append(tuple(self.read_string() for _ in range(token_count)))
        return tuple(segments)

    def expect_end(self) -> None:
        remaining = len(self._view) - self._offset
        if remaining:
            raise self._fail(f"{remaining} trailing bytes after payload")
