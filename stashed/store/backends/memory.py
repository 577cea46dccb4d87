"""In-memory storage backend for testing."""

import copy
import threading
from typing import Dict, Optional

from .base import StorageBackend, StoredRecord


class MemoryBackend(StorageBackend):
    """In-memory storage backend.

    Useful for testing and temporary storage. Data is lost when the
    backend is closed or the process ends. Safe to share between threads.

    Example:
        backend = MemoryBackend()
        backend.connect()

        backend.insert(StoredRecord(path="/test", data={"x": 1}))
        record = backend.get("/test")
    """

    def __init__(self):
        self._data: Dict[str, StoredRecord] = {}
        self._lock = threading.Lock()
        self._connected = False

    def connect(self, **kwargs) -> None:
        """Initialize the in-memory store."""
        with self._lock:
            self._data = {}
            self._connected = True

    def close(self) -> None:
        """Clear the in-memory store."""
        with self._lock:
            self._data.clear()
            self._connected = False

    def get(self, path: str) -> Optional[StoredRecord]:
        """Retrieve record by path."""
        with self._lock:
            record = self._data.get(path)
            return copy.deepcopy(record) if record is not None else None

    def insert(self, record: StoredRecord) -> bool:
        """Store a new record unless the path is taken."""
        with self._lock:
            if record.path in self._data:
                return False
            self._data[record.path] = copy.deepcopy(record)
            return True

    def compare_and_swap(self, record: StoredRecord, expected_version: int) -> bool:
        """Replace a record if it is still at expected_version."""
        with self._lock:
            current = self._data.get(record.path)
            if current is None or current.version != expected_version:
                return False
            self._data[record.path] = copy.deepcopy(record)
            return True

    def delete(self, path: str) -> bool:
        """Delete record at path."""
        with self._lock:
            if path in self._data:
                del self._data[path]
                return True
            return False

    def exists(self, path: str) -> bool:
        """Check if path exists."""
        with self._lock:
            return path in self._data
