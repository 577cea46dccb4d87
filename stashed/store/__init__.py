"""Versioned record storage.

Records live at paths like "/users/42" and hold a dict of field values.
Every write is conditional on the version the writer read, so concurrent
writers cannot silently overwrite each other.

Quick Start:
    from stashed.store import connect

    db = connect("sqlite:///app.db")

    record = db.create("/users/42", {"name": "Casey"})
    record = db.write(record, {"name": "Casey Jones"})
    print(record.version)  # 2

Supported backends:
    - memory://           In-memory storage (testing)
    - sqlite:///path.db   SQLite file storage
    - sqlite:///:memory:  SQLite in-memory

Key Classes:
    - Store: Record lifecycle, conditional writes, stashed column config
    - connect(): Create a Store from a URL

Backend Classes:
    - MemoryBackend: In-memory storage for testing
    - SQLiteBackend: SQLite file storage
"""

from .core import Store, connect, DEFAULT_MAX_RETRIES
from .backends import StorageBackend, StoredRecord, MemoryBackend, SQLiteBackend
from .serialization import Serializer
from .exceptions import (
    StoreError,
    RecordNotFoundError,
    RecordExistsError,
    VersionConflictError,
    SerializationError,
)

__all__ = [
    # Main API
    "Store",
    "connect",
    "DEFAULT_MAX_RETRIES",
    # Backends
    "StorageBackend",
    "StoredRecord",
    "MemoryBackend",
    "SQLiteBackend",
    # Serialization
    "Serializer",
    # Exceptions
    "StoreError",
    "RecordNotFoundError",
    "RecordExistsError",
    "VersionConflictError",
    "SerializationError",
]
