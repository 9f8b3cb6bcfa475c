"""Relational document store backed by SQLite.

One table keyed by the natural identifier (usually the page URL):

    documents(identifier TEXT PRIMARY KEY, title TEXT NOT NULL, description TEXT, segments BLOB)

Inserting an identifier twice raises ``DuplicateKeyError``. Connections run
in autocommit mode, so each insert is its own atomic statement and scans see
whatever snapshot SQLite's WAL mode gives them.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
import logging
from pathlib import Path
import queue
import sqlite3
import threading

from search_engine.search.codec import decode_segments, encode_segments
from search_engine.search.errors import (
    ConfigurationError,
    DeserializationError,
    DuplicateKeyError,
    PoolExhaustionError,
    SchemaInitError,
    SerializationError,
    StorageIOError,
)
from search_engine.search.models import Document
from search_engine.search.sqlite_pragmas import apply_connection_pragmas
from search_engine.search.storage import CorruptRecordPolicy, DocumentStore


logger = logging.getLogger(__name__)

_CREATE_TABLE = """
    CREATE TABLE IF NOT EXISTS documents (
        identifier TEXT PRIMARY KEY,
        title TEXT NOT NULL,
        description TEXT,
        segments BLOB
    )
"""
_INSERT = "INSERT INTO documents (identifier, title, description, segments) VALUES (?, ?, ?, ?)"
_SELECT_ALL = "SELECT identifier, title, description, segments FROM documents"
_COUNT = "SELECT COUNT(*) FROM documents"


class SQLiteConnectionPool:
    """Thread-safe bounded pool of SQLite connections.

    Connections are created lazily up to ``max_connections``; once all are
    checked out, ``get_connection`` waits ``timeout`` seconds and then raises
    ``PoolExhaustionError``.
    """

    def __init__(
        self,
        db_path: Path,
        max_connections: int = 5,
        *,
        timeout: float = 30.0,
        busy_timeout_ms: int = 30000,
    ):
        if max_connections < 1:
            raise ConfigurationError("max_connections must be at least 1")
        self.db_path = db_path
        self.max_connections = max_connections
        self.timeout = timeout
        self.busy_timeout_ms = busy_timeout_ms
        self._idle: queue.LifoQueue[sqlite3.Connection] = queue.LifoQueue()
        self._created = 0
        self._lock = threading.Lock()
        self._closed = False

    @contextmanager
    def get_connection(self) -> Iterator[sqlite3.Connection]:
        """Check a connection out for the duration of the block."""
        conn = self._acquire()
        try:
            yield conn
        finally:
            self._release(conn)

    def _acquire(self) -> sqlite3.Connection:
        if self._closed:
            raise StorageIOError(f"Connection pool for {self.db_path} is closed")
        try:
            return self._idle.get_nowait()
        except queue.Empty:
            pass
        with self._lock:
            if self._created < self.max_connections:
                conn = self._create_connection()
                self._created += 1
                return conn
        try:
            return self._idle.get(timeout=self.timeout)
        except queue.Empty as exc:
            msg = f"No SQLite connection available after {self.timeout}s ({self.max_connections} in use)"
            raise PoolExhaustionError(msg) from exc

    def _release(self, conn: sqlite3.Connection) -> None:
        if self._closed:
            conn.close()
            return
        self._idle.put(conn)

    def _create_connection(self) -> sqlite3.Connection:
        """Create an autocommit connection with WAL pragmas applied."""
        try:
            conn = sqlite3.connect(self.db_path, check_same_thread=False, isolation_level=None)
        except sqlite3.Error as exc:
            raise ConfigurationError(f"Cannot open SQLite database at {self.db_path}: {exc}") from exc
        try:
            apply_connection_pragmas(conn, busy_timeout_ms=self.busy_timeout_ms)
        except sqlite3.Error as exc:
            conn.close()
            raise StorageIOError(f"Failed to configure SQLite connection: {exc}") from exc
        return conn

    def close_all(self) -> None:
        """Close idle connections; checked-out ones close when released."""
        self._closed = True
        while True:
            try:
                conn = self._idle.get_nowait()
            except queue.Empty:
                break
            try:
                conn.close()
            except sqlite3.Error:
                pass  # Ignore errors during cleanup


class SqliteDocumentStore(DocumentStore):
    """SQLite implementation of :class:`DocumentStore`."""

    backend_name = "sqlite"

    def __init__(
        self,
        db_path: str | Path,
        *,
        max_connections: int = 5,
        pool_timeout: float = 30.0,
        busy_timeout_ms: int = 30000,
        corrupt_record_policy: CorruptRecordPolicy = "skip",
    ) -> None:
        super().__init__(corrupt_record_policy=corrupt_record_policy)
        self.db_path = Path(db_path)
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ConfigurationError(f"Cannot create directory for {self.db_path}: {exc}") from exc
        if self.db_path.is_dir():
            raise ConfigurationError(f"SQLite path {self.db_path} is a directory")
        self._pool = SQLiteConnectionPool(
            self.db_path,
            max_connections,
            timeout=pool_timeout,
            busy_timeout_ms=busy_timeout_ms,
        )
        try:
            self._create_schema()
        except SchemaInitError:
            self._pool.close_all()
            raise

    def _create_schema(self) -> None:
        try:
            with self._pool.get_connection() as conn:
                conn.execute(_CREATE_TABLE)
        except (sqlite3.Error, StorageIOError) as exc:
            raise SchemaInitError(f"Failed to create documents table in {self.db_path}: {exc}") from exc
        logger.debug("SQLite document store ready at %s", self.db_path)

    def insert(self, document: Document) -> None:
        blob = encode_segments(document.segments)
        try:
            with self._pool.get_connection() as conn:
                conn.execute(_INSERT, (document.identifier, document.title, document.description, blob))
        except sqlite3.IntegrityError as exc:
            if "UNIQUE" in str(exc).upper():
                raise DuplicateKeyError(document.identifier) from exc
            raise StorageIOError(f"Failed to insert {document.identifier}: {exc}") from exc
        except UnicodeEncodeError as exc:
            raise SerializationError(f"Cannot encode document {document.identifier!r} as UTF-8: {exc}") from exc
        except sqlite3.Error as exc:
            raise StorageIOError(f"Failed to insert {document.identifier}: {exc}") from exc

    def scan_all(self) -> Iterator[Document]:
        with self._pool.get_connection() as conn:
            try:
                cursor = conn.execute(_SELECT_ALL)
                for identifier, title, description, blob in cursor:
                    try:
                        segments = decode_segments(blob, record_key=identifier)
                    except DeserializationError as error:
                        self._handle_corrupt_record(error)
                        continue
                    yield Document(
                        identifier=identifier,
                        title=title,
                        description=description or "",
                        segments=segments,
                    )
            except sqlite3.Error as exc:
                raise StorageIOError(f"Failed to scan documents in {self.db_path}: {exc}") from exc

    def count(self) -> int:
        try:
            with self._pool.get_connection() as conn:
                return int(conn.execute(_COUNT).fetchone()[0])
        except sqlite3.Error as exc:
            raise StorageIOError(f"Failed to count documents in {self.db_path}: {exc}") from exc

    def close(self) -> None:
        self._pool.close_all()
