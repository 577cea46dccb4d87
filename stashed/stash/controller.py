"""Read-modify-write access to one stashed column of one record."""

import logging
from numbers import Number
from typing import TYPE_CHECKING, Any, Callable, Optional, Tuple

from ..store.backends.base import StoredRecord
from ..store.exceptions import VersionConflictError
from .column import StashedColumn
from .exceptions import ConcurrentModificationError, KeyNotSetError, TypeMismatchError
from .paths import (
    NOT_FOUND,
    Document,
    PathLike,
    delete_path,
    get_path,
    join_path,
    parse_path,
    set_path,
)

if TYPE_CHECKING:
    from ..store.core import Store

logger = logging.getLogger(__name__)

# change(doc) -> (new_doc or None to skip the write, result)
Change = Callable[[Document], Tuple[Optional[Document], Any]]


def _is_number(value: Any) -> bool:
    return isinstance(value, Number) and not isinstance(value, bool)


class StashController:
    """Path-addressed operations on a record's stash.

    Every call reads the record fresh; nothing is cached between calls.
    Mutations run as optimistic read-modify-write cycles: read the record
    and its version, compute the new stash, then write it back only if the
    version is unchanged. On a conflict the whole cycle is repeated against
    the newly committed state, up to the store's max_retries.

    Example:
        db = connect("memory://")
        db.stash("/players/*", "stats")
        db.create("/players/casey")

        stats = db.stash_for("/players/casey", "stats")
        stats.set("sports/baseball/RBIs", 4)
        stats.increment("sports/baseball/RBIs")  # 5
        stats.get("sports/baseball")             # {'RBIs': 5}
        stats.delete("sports/baseball/RBIs")     # 5
    """

    def __init__(
        self,
        store: "Store",
        record_path: str,
        column: StashedColumn,
        max_retries: Optional[int] = None,
    ):
        self._store = store
        self._record_path = record_path
        self._column = column
        self._max_retries = max_retries if max_retries is not None else store.max_retries
        if self._max_retries < 1:
            raise ValueError("max_retries must be at least 1")

    @property
    def record_path(self) -> str:
        return self._record_path

    @property
    def field_name(self) -> str:
        return self._column.field_name

    def __repr__(self) -> str:
        return f"StashController({self._record_path!r}, {self.field_name!r})"

    # Reads

    def get(self, key: PathLike, default: Any = NOT_FOUND) -> Any:
        """Get the value at a path.

        Args:
            key: Slash-delimited path (e.g., "sports/baseball/RBIs")
            default: Returned when nothing is stored at the path

        Returns:
            The stored value (a stored None is returned as None), or default
        """
        path = parse_path(key)
        _, doc = self._load()
        value = get_path(doc, path)
        return default if value is NOT_FOUND else value

    def document(self) -> Document:
        """Return a fresh copy of the whole stash."""
        _, doc = self._load()
        return doc

    # Writes

    def set(self, key: PathLike, value: Any) -> Any:
        """Store value at a path, creating intermediate levels as needed.

        Returns:
            value
        """
        path = parse_path(key)

        def change(doc):
            return set_path(doc, path, value), value

        return self._update(change)

    def delete(self, key: PathLike) -> Any:
        """Remove the value at a path.

        Returns:
            The removed value, or NOT_FOUND if nothing was there (in which
            case the record is not written)
        """
        path = parse_path(key)

        def change(doc):
            updated, removed = delete_path(doc, path)
            if removed is NOT_FOUND:
                return None, NOT_FOUND
            return updated, removed

        return self._update(change)

    def modify(self, key: PathLike, transform: Callable[[Any], Any]) -> Any:
        """Replace the value at a path with transform(current value).

        transform may be called more than once if other writers get in
        first, so it must be a pure function of its argument.

        Returns:
            The new value

        Raises:
            KeyNotSetError: If nothing is stored at the path
        """
        path = parse_path(key)

        def change(doc):
            current = get_path(doc, path)
            if current is NOT_FOUND:
                raise KeyNotSetError(join_path(path))
            new_value = transform(current)
            return set_path(doc, path, new_value), new_value

        return self._update(change)

    def increment(self, key: PathLike, delta: Number = 1) -> Any:
        """Add delta to the number stored at a path.

        Returns:
            The new value

        Raises:
            KeyNotSetError: If nothing is stored at the path
            TypeMismatchError: If the stored value or delta is not a number
        """
        path = parse_path(key)
        where = join_path(path)
        if not _is_number(delta):
            raise TypeMismatchError(where, f"cannot increment by {type(delta).__name__}")

        def add(value):
            if not _is_number(value):
                raise TypeMismatchError(
                    where, f"cannot increment a {type(value).__name__} value"
                )
            try:
                return value + delta
            except TypeError:
                raise TypeMismatchError(
                    where,
                    f"cannot add {type(delta).__name__} to {type(value).__name__}",
                )

        return self.modify(path, add)

    # Internals

    def _load(self) -> Tuple[StoredRecord, Document]:
        """Read the record and pull out this column's stash."""
        record = self._store.read(self._record_path)
        doc = record.data.get(self.field_name)
        if doc is None:
            # Unset field reads as an empty stash
            doc = {}
        elif not isinstance(doc, dict):
            raise TypeMismatchError(
                self.field_name,
                f"stashed column holds a {type(doc).__name__}, not a dict",
            )
        return record, doc

    def _update(self, change: Change) -> Any:
        """Run change() inside the optimistic retry loop."""
        for attempt in range(1, self._max_retries + 1):
            record, doc = self._load()
            new_doc, result = change(doc)
            if new_doc is None:
                return result

            data = dict(record.data)
            data[self.field_name] = new_doc
            try:
                self._store.write(record, data)
            except VersionConflictError:
                logger.debug(
                    "Version conflict on %s#%s at version %d (attempt %d/%d)",
                    self._record_path,
                    self.field_name,
                    record.version,
                    attempt,
                    self._max_retries,
                )
                continue
            return result

        logger.warning(
            "Giving up on %s#%s after %d conflicting attempts",
            self._record_path,
            self.field_name,
            self._max_retries,
        )
        raise ConcurrentModificationError(
            self._record_path, self._max_retries, self.field_name
        )
