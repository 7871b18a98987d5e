"""idsync exception hierarchy."""

from __future__ import annotations


class IdSyncError(Exception):
    """Base exception for all idsync errors."""


class MalformedExtendedValue(IdSyncError):
    """A tagged extended-JSON value does not match its tag's shape."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        super().__init__(f"Malformed extended value at {path}: {message}")


class StoreError(IdSyncError):
    """Live document store operation failed."""


class StoreUnavailable(StoreError):
    """Store cannot be reached or read before a batch starts."""


class StoreWriteFailure(StoreError):
    """A single update call was rejected by the store."""

    def __init__(self, record_key: str, message: str) -> None:
        self.record_key = record_key
        super().__init__(f"Write failed for {record_key}: {message}")


class FileUnavailable(IdSyncError):
    """Snapshot file is missing, unreadable, unparseable or not writable."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        super().__init__(f"Snapshot {path!r} unavailable: {message}")
