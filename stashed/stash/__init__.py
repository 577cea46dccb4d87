"""Nested documents stored in a single record field.

A stashed column holds a dict of arbitrarily nested values, addressed with
slash-delimited paths like "sports/baseball/stats/RBIs".

Quick Start:
    from stashed import connect

    db = connect("memory://")
    db.stash("/players/*", "stats")
    db.create("/players/casey")

    stats = db.stash_for("/players/casey", "stats")
    stats.set("sports/baseball/stats/RBIs", 4)
    stats.increment("sports/baseball/stats/RBIs")  # 5

Key Classes:
    - StashController: get/set/delete/modify/increment on one record's stash
    - StashedColumn: Field name plus the initial value for new records

Path helpers (pure, usable on any dict):
    - parse_path, get_path, set_path, delete_path, NOT_FOUND
"""

from .paths import (
    NOT_FOUND,
    parse_path,
    join_path,
    get_path,
    set_path,
    delete_path,
)
from .column import StashedColumn, ColumnRegistry
from .controller import StashController
from .exceptions import (
    StashError,
    InvalidPathError,
    KeyNotSetError,
    TypeMismatchError,
    ConcurrentModificationError,
)

__all__ = [
    # Main API
    "StashController",
    "StashedColumn",
    "ColumnRegistry",
    # Paths
    "NOT_FOUND",
    "parse_path",
    "join_path",
    "get_path",
    "set_path",
    "delete_path",
    # Exceptions
    "StashError",
    "InvalidPathError",
    "KeyNotSetError",
    "TypeMismatchError",
    "ConcurrentModificationError",
]
