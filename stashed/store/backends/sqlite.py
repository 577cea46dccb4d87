"""SQLite storage backend."""

import sqlite3
import threading
from typing import Optional

from ..serialization import Serializer
from .base import StorageBackend, StoredRecord


class SQLiteBackend(StorageBackend):
    """SQLite storage backend.

    Stores records in a SQLite database file. Zero configuration required.
    Several backends (or processes) may open the same file; the
    compare-and-swap is a single conditional UPDATE, so the database
    arbitrates between them.

    Example:
        backend = SQLiteBackend()
        backend.connect(path="records.db")

        # Or in-memory
        backend.connect(path=":memory:")
    """

    def __init__(self, serializer: Optional[Serializer] = None):
        self._conn: Optional[sqlite3.Connection] = None
        self._path: Optional[str] = None
        self._serializer = serializer or Serializer()
        # One connection is shared by every thread using this backend
        self._lock = threading.Lock()

    def connect(self, path: str = ":memory:", timeout: float = 5.0, **kwargs) -> None:
        """Connect to SQLite database.

        Args:
            path: Database file path, or ":memory:" for in-memory database
            timeout: Seconds to wait on a database locked by another writer
        """
        self._path = path
        self._conn = sqlite3.connect(path, timeout=timeout, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._create_tables()

    def _create_tables(self) -> None:
        """Create the records table if it doesn't exist."""
        with self._lock:
            self._conn.execute(
                """
                CREATE TABLE IF NOT EXISTS records (
                    path TEXT PRIMARY KEY,
                    data TEXT NOT NULL,
                    version INTEGER NOT NULL DEFAULT 1,
                    created_at REAL NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )
            self._conn.commit()

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            if self._conn:
                self._conn.close()
                self._conn = None

    def get(self, path: str) -> Optional[StoredRecord]:
        """Retrieve record by path."""
        with self._lock:
            cursor = self._conn.execute(
                "SELECT * FROM records WHERE path = ?", (path,)
            )
            row = cursor.fetchone()
        if row is None:
            return None

        return StoredRecord(
            path=row["path"],
            data=self._serializer.from_json(row["data"]),
            version=row["version"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def insert(self, record: StoredRecord) -> bool:
        """Store a new record unless the path is taken."""
        data = self._serializer.to_json(record.data)
        with self._lock:
            try:
                self._conn.execute(
                    """
                    INSERT INTO records
                        (path, data, version, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (
                        record.path,
                        data,
                        record.version,
                        record.created_at,
                        record.updated_at,
                    ),
                )
            except sqlite3.IntegrityError:
                self._conn.rollback()
                return False
            self._conn.commit()
            return True

    def compare_and_swap(self, record: StoredRecord, expected_version: int) -> bool:
        """Replace a record if it is still at expected_version."""
        data = self._serializer.to_json(record.data)
        with self._lock:
            cursor = self._conn.execute(
                """
                UPDATE records
                   SET data = ?, version = ?, updated_at = ?
                 WHERE path = ? AND version = ?
                """,
                (data, record.version, record.updated_at, record.path, expected_version),
            )
            self._conn.commit()
            return cursor.rowcount == 1

    def delete(self, path: str) -> bool:
        """Delete record at path."""
        with self._lock:
            cursor = self._conn.execute(
                "DELETE FROM records WHERE path = ?", (path,)
            )
            self._conn.commit()
            return cursor.rowcount > 0

    def exists(self, path: str) -> bool:
        """Check if path exists."""
        with self._lock:
            cursor = self._conn.execute(
                "SELECT 1 FROM records WHERE path = ?", (path,)
            )
            return cursor.fetchone() is not None
