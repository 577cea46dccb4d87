"""Abstract base class for storage backends."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
import time


@dataclass
class StoredRecord:
    """A host record as held by the backend.

    The version is the record's change token: it starts at 1 and goes up
    by one on every committed write.
    """

    path: str
    data: Dict[str, Any]  # Field values (JSON-compatible)
    version: int = 1
    created_at: float = field(default_factory=time.time)
    updated_at: float = field(default_factory=time.time)


class StorageBackend(ABC):
    """Abstract base class for storage backends.

    Backends implement the actual storage mechanism (memory, SQLite, ...)
    while the Store class handles record lifecycle and the public API.

    Records returned by get() and records passed to insert() and
    compare_and_swap() are never shared with the backend's own state;
    callers may mutate them freely.
    """

    @abstractmethod
    def connect(self, **kwargs) -> None:
        """Establish connection to storage.

        Args:
            **kwargs: Backend-specific connection parameters
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Close connection and release resources."""
        pass

    @abstractmethod
    def get(self, path: str) -> Optional[StoredRecord]:
        """Retrieve record by path.

        Args:
            path: The record path (e.g., "/users/42")

        Returns:
            StoredRecord if found, None otherwise
        """
        pass

    @abstractmethod
    def insert(self, record: StoredRecord) -> bool:
        """Store a new record.

        Args:
            record: The StoredRecord to persist

        Returns:
            True if inserted, False if a record already exists at the path
        """
        pass

    @abstractmethod
    def compare_and_swap(self, record: StoredRecord, expected_version: int) -> bool:
        """Replace a record only if it is still at the expected version.

        The check and the write happen atomically with respect to every
        other writer of the same storage.

        Args:
            record: The new record contents (carrying its new version)
            expected_version: Version the caller read before computing record

        Returns:
            True if written, False on version mismatch or missing record
        """
        pass

    @abstractmethod
    def delete(self, path: str) -> bool:
        """Delete record at path.

        Args:
            path: The record path to delete

        Returns:
            True if record existed and was deleted, False if not found
        """
        pass

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Check if path exists.

        Args:
            path: The record path to check

        Returns:
            True if a record exists at path
        """
        pass
