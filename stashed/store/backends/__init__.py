"""Storage backends for stashed.store."""

from .base import StorageBackend, StoredRecord
from .memory import MemoryBackend
from .sqlite import SQLiteBackend

__all__ = [
    "StorageBackend",
    "StoredRecord",
    "MemoryBackend",
    "SQLiteBackend",
]
