"""Core Store class for versioned host records."""

import logging
import time
from typing import TYPE_CHECKING, Any, Dict, Optional
from urllib.parse import parse_qs, urlparse

from ..stash.column import ColumnRegistry, StashedColumn
from .backends.base import StorageBackend, StoredRecord
from .backends.memory import MemoryBackend
from .exceptions import (
    RecordExistsError,
    RecordNotFoundError,
    VersionConflictError,
)

if TYPE_CHECKING:
    from ..stash.controller import StashController

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 8


class Store:
    """Versioned record storage with stashed columns.

    Records live at paths like "/users/42" and hold a dict of field values.
    Fields configured with stash() are nested documents, created with
    their initial value when the record is created and edited afterwards
    through a StashController.

    Example:
        from stashed import connect

        db = connect("sqlite:///app.db")

        # Configure stashed columns
        db.stash("/users/*", "prefs", initial={"theme": "light"})

        # Create a record (prefs filled in from the initial value)
        db.create("/users/42", {"name": "Casey"})

        # Edit the stash
        prefs = db.stash_for("/users/42", "prefs")
        prefs.set("notifications/email", False)
        print(prefs.get("theme"))  # light
    """

    def __init__(self, backend: StorageBackend, max_retries: int = DEFAULT_MAX_RETRIES):
        """Create a Store with the given backend.

        Use connect() for convenient URL-based connection.

        Args:
            backend: Storage backend instance
            max_retries: Attempts a stash write makes before giving up
        """
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        self._backend = backend
        self._columns = ColumnRegistry()
        self.max_retries = max_retries

    # Configuration

    def stash(
        self,
        pattern: str,
        field_name: str,
        initial: Optional[Dict[str, Any]] = None,
    ) -> StashedColumn:
        """Treat a field of matching records as a stashed column.

        Args:
            pattern: Record path pattern with wildcards (e.g., "/users/*")
            field_name: Name of the field holding the stash
            initial: Value given to the field at record creation.
                Defaults to an empty dict.

        Returns:
            The registered StashedColumn

        Example:
            db.stash("/users/*", "prefs")
            db.stash("/teams/*", "stats", initial={"wins": 0, "losses": 0})
        """
        column = StashedColumn(field_name, initial)
        self._columns.register(pattern, column)
        return column

    # Record lifecycle

    def create(self, path: str, data: Optional[Dict[str, Any]] = None) -> StoredRecord:
        """Create a new record at path.

        Stashed columns configured for the path are filled in with their
        initial value unless data already sets them.

        Args:
            path: Record path (e.g., "/users/42")
            data: Initial field values

        Returns:
            The stored record, at version 1

        Raises:
            RecordExistsError: If a record already exists at path
        """
        data = dict(data or {})
        for column in self._columns.columns_for(path):
            column.initialize(data)

        now = time.time()
        record = StoredRecord(
            path=path,
            data=data,
            version=1,
            created_at=now,
            updated_at=now,
        )
        if not self._backend.insert(record):
            raise RecordExistsError(path)
        logger.debug("Created record %s with fields %s", path, sorted(data))
        return record

    def read(self, path: str) -> StoredRecord:
        """Read the current state of a record.

        Raises:
            RecordNotFoundError: If no record exists at path
        """
        record = self._backend.get(path)
        if record is None:
            raise RecordNotFoundError(path)
        return record

    def write(self, record: StoredRecord, data: Dict[str, Any]) -> StoredRecord:
        """Replace a record's data if it hasn't changed since it was read.

        Args:
            record: The record as previously returned by read()
            data: New field values

        Returns:
            The record as written, with its version bumped

        Raises:
            VersionConflictError: If someone else wrote the record first
            RecordNotFoundError: If the record has been deleted
        """
        updated = StoredRecord(
            path=record.path,
            data=data,
            version=record.version + 1,
            created_at=record.created_at,
            updated_at=time.time(),
        )
        if not self._backend.compare_and_swap(updated, record.version):
            if not self._backend.exists(record.path):
                raise RecordNotFoundError(record.path)
            raise VersionConflictError(record.path, record.version)
        return updated

    def delete(self, path: str) -> None:
        """Delete the record at path, stashes included.

        Raises:
            RecordNotFoundError: If no record exists at path
        """
        if not self._backend.delete(path):
            raise RecordNotFoundError(path)

    def __contains__(self, path: str) -> bool:
        """Check if a record exists at path."""
        return self._backend.exists(path)

    # Stash access

    def stash_for(self, path: str, field_name: str) -> "StashController":
        """Get a controller for one stashed column of one record.

        Args:
            path: Record path
            field_name: A field configured with stash() for this path

        Raises:
            ValueError: If the field is not a stashed column for path
        """
        from ..stash.controller import StashController

        column = self._columns.get(path, field_name)
        if column is None:
            raise ValueError(f"{field_name!r} is not a stashed column for {path}")
        return StashController(self, path, column)

    # Lifecycle

    def close(self) -> None:
        """Close the store and release resources."""
        self._backend.close()

    def __enter__(self) -> "Store":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()


def connect(url: str) -> Store:
    """Connect to a store using a URL.

    Supported URL schemes:
        - memory://          In-memory storage (testing)
        - sqlite:///path.db  SQLite file storage
        - sqlite:///:memory: SQLite in-memory

    Query parameters:
        - max_retries=N      Attempts per stash write before giving up

    Args:
        url: Connection URL

    Returns:
        Connected Store instance

    Example:
        db = connect("sqlite:///app.db")
        db = connect("memory://?max_retries=20")
    """
    parsed = urlparse(url)
    scheme = parsed.scheme
    params = parse_qs(parsed.query)

    max_retries = DEFAULT_MAX_RETRIES
    if "max_retries" in params:
        try:
            max_retries = int(params["max_retries"][-1])
        except ValueError:
            raise ValueError(f"Invalid max_retries in {url!r}")

    if scheme == "memory":
        backend = MemoryBackend()
        backend.connect()
        return Store(backend, max_retries=max_retries)

    elif scheme == "sqlite":
        from .backends.sqlite import SQLiteBackend

        # Handle sqlite:///path and sqlite:///:memory:
        path = parsed.path
        if path.startswith("/"):
            path = path[1:]  # Remove leading slash from file path

        backend = SQLiteBackend()
        backend.connect(path=path if path else ":memory:")
        return Store(backend, max_retries=max_retries)

    else:
        raise ValueError(f"Unknown storage scheme: {scheme}")
