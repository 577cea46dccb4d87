"""Exceptions for the stashed.store module."""


class StoreError(Exception):
    """Base exception for all store errors."""

    pass


class RecordNotFoundError(StoreError, KeyError):
    """No record at the specified path."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"No record at path: {path}")


class RecordExistsError(StoreError):
    """A record already exists at the path being created."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Record already exists at path: {path}")


class VersionConflictError(StoreError):
    """The record changed between read and conditional write."""

    def __init__(self, path: str, expected_version: int):
        self.path = path
        self.expected_version = expected_version
        super().__init__(
            f"Record {path} is no longer at version {expected_version}"
        )


class SerializationError(StoreError):
    """Failed to encode or decode record data."""

    pass
