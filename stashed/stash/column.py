"""Stashed column configuration and the pattern registry that holds it."""

import copy
import fnmatch
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class StashedColumn:
    """A record field treated as a nested stash.

    The initial value is copied into the field once, when the record is
    created, and only if the field is unset. Each record gets its own deep
    copy, so records never share a dict with each other or with the column.

    Example:
        prefs = StashedColumn("prefs", initial={"theme": "dark"})
        data = prefs.initialize({})
        # {'prefs': {'theme': 'dark'}}
    """

    field_name: str
    initial: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not isinstance(self.field_name, str) or not self.field_name:
            raise ValueError(f"{self.field_name!r} is not a valid field name")
        if self.initial is None:
            object.__setattr__(self, "initial", {})
        elif not isinstance(self.initial, dict):
            raise TypeError(
                f"Initial value for {self.field_name!r} must be a dict, "
                f"got {type(self.initial).__name__}"
            )

    def default(self) -> Dict[str, Any]:
        """Return a fresh, independent copy of the initial value."""
        return copy.deepcopy(self.initial)

    def initialize(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Fill in the field on a record being created.

        No-op if the field already holds a value.

        Args:
            data: The new record's field values (modified in place)

        Returns:
            The same data dict
        """
        if data.get(self.field_name) is None:
            data[self.field_name] = self.default()
        return data


class ColumnRegistry:
    """Maps record path patterns to their stashed columns.

    Example:
        registry = ColumnRegistry()
        registry.register("/users/*", StashedColumn("prefs"))

        registry.columns_for("/users/42")  # [StashedColumn('prefs', {})]
    """

    def __init__(self):
        self._patterns: List[Tuple[str, StashedColumn]] = []

    def register(self, pattern: str, column: StashedColumn) -> None:
        """Register a column for every record whose path matches pattern.

        Registering the same field name twice for one pattern replaces the
        earlier column.
        """
        self._patterns = [
            (p, c)
            for p, c in self._patterns
            if not (p == pattern and c.field_name == column.field_name)
        ]
        self._patterns.append((pattern, column))

    def columns_for(self, path: str) -> List[StashedColumn]:
        """Get all columns configured for a record path.

        When several patterns configure the same field, the first
        registered one wins.
        """
        seen = set()
        columns = []
        for pattern, column in self._patterns:
            if column.field_name in seen:
                continue
            if fnmatch.fnmatch(path, pattern):
                seen.add(column.field_name)
                columns.append(column)
        return columns

    def get(self, path: str, field_name: str) -> Optional[StashedColumn]:
        """Get the column for one field of a record, or None."""
        for column in self.columns_for(path):
            if column.field_name == field_name:
                return column
        return None

    def clear(self) -> None:
        """Remove all registered columns."""
        self._patterns.clear()
