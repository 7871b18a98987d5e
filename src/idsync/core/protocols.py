"""Protocol interfaces for the idsync store abstractions.

The sync engine only talks to these Protocols. Backends satisfy them by
structural typing, so tests can swap in the dict-backed fakes.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from idsync.core.types import Document, Filter, Patch
from idsync.models.report import WriteOutcome


# ---------------------------------------------------------------------------
# Live store: Collection
# ---------------------------------------------------------------------------

@runtime_checkable
class IDocumentCollection(Protocol):
    """One collection of a MongoDB-style document store."""

    name: str

    def find_all(self) -> list[Document]: ...

    def find_one(self, filter: Filter) -> Document | None: ...

    def update_one(self, filter: Filter, patch: Patch) -> WriteOutcome: ...

    def update_many(self, filter: Filter, patch: Patch) -> WriteOutcome: ...


# ---------------------------------------------------------------------------
# Live store: Database
# ---------------------------------------------------------------------------

@runtime_checkable
class IDocumentStore(Protocol):
    """Named collections plus a reachability probe."""

    def collection(self, name: str) -> IDocumentCollection: ...

    def ping(self) -> None: ...


# ---------------------------------------------------------------------------
# Snapshot: File Store
# ---------------------------------------------------------------------------

@runtime_checkable
class IFileStore(Protocol):
    """Whole-file read/write storage for JSON snapshots."""

    def read(self, path: str) -> bytes: ...

    def write(self, path: str, data: bytes, content_type: str = "application/json") -> str: ...

    def exists(self, path: str) -> bool: ...
