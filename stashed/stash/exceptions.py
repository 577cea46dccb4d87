"""Exceptions for the stashed.stash module."""

from typing import Optional


class StashError(Exception):
    """Base exception for all stash errors."""

    pass


class InvalidPathError(StashError, ValueError):
    """Path is empty or contains an empty segment."""

    def __init__(self, key, reason: str = "empty path"):
        self.key = key
        self.reason = reason
        super().__init__(f"Invalid stash path {key!r}: {reason}")


class KeyNotSetError(StashError, KeyError):
    """modify() or increment() called on a path with no value."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"No value set at stash path: {path}")


class TypeMismatchError(StashError, TypeError):
    """Value at a path has the wrong shape for the operation."""

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"{message} (at {path})")


class ConcurrentModificationError(StashError):
    """Gave up after repeated version conflicts on the same record."""

    def __init__(self, record_path: str, attempts: int, field_name: Optional[str] = None):
        self.record_path = record_path
        self.field_name = field_name
        self.attempts = attempts
        where = f"{record_path}#{field_name}" if field_name else record_path
        super().__init__(
            f"Concurrent modification of {where}: "
            f"gave up after {attempts} attempts"
        )
