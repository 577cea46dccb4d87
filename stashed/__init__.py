"""
Stashed - nested, path-addressed documents in versioned records.

Submodules:
    stashed.stash - Path codec and the read-modify-write stash controller
    stashed.store - Versioned record storage with conditional writes
"""

from .store import (
    Store,
    connect,
    StoredRecord,
    MemoryBackend,
    SQLiteBackend,
    StoreError,
    RecordNotFoundError,
    RecordExistsError,
    VersionConflictError,
)
from .stash import (
    NOT_FOUND,
    StashController,
    StashedColumn,
    StashError,
    InvalidPathError,
    KeyNotSetError,
    TypeMismatchError,
    ConcurrentModificationError,
)
from . import stash
from . import store

__all__ = [
    # Submodules
    "stash",
    "store",
    # Store
    "Store",
    "connect",
    "StoredRecord",
    "MemoryBackend",
    "SQLiteBackend",
    # Stash
    "NOT_FOUND",
    "StashController",
    "StashedColumn",
    # Exceptions
    "StoreError",
    "RecordNotFoundError",
    "RecordExistsError",
    "VersionConflictError",
    "StashError",
    "InvalidPathError",
    "KeyNotSetError",
    "TypeMismatchError",
    "ConcurrentModificationError",
]

__version__ = "0.1.0"
