"""In-memory backends: dict-backed fakes for unit tests and in-memory runs."""

from __future__ import annotations

import copy
from typing import Any

from idsync.core.exceptions import FileUnavailable, StoreUnavailable, StoreWriteFailure
from idsync.core.types import Document, Filter, Patch
from idsync.models.identity import get_path
from idsync.models.report import WriteOutcome


def _matches(document: Document, filter: Filter) -> bool:
    return all(get_path(document, field) == value for field, value in filter.items())


def _apply_set(document: Document, fields: dict[str, Any]) -> bool:
    """Apply a ``$set`` body in place (dotted paths allowed); True if anything changed."""
    changed = False
    for path, value in fields.items():
        *parents, leaf = path.split(".")
        target = document
        for segment in parents:
            target = target.setdefault(segment, {})
        if leaf not in target or target[leaf] != value:
            target[leaf] = copy.deepcopy(value)
            changed = True
    return changed


class MemoryCollection:
    """List-backed IDocumentCollection supporting ``$set`` patches."""

    def __init__(self, name: str = "memory", documents: list[Document] | None = None) -> None:
        self.name = name
        self._documents: list[Document] = [copy.deepcopy(d) for d in documents or []]
        self.reject_keys: set[Any] = set()  # filter values whose writes fail
        self.available = True

    def find_all(self) -> list[Document]:
        if not self.available:
            raise StoreUnavailable(f"collection {self.name!r} marked unavailable")
        return copy.deepcopy(self._documents)

    def find_one(self, filter: Filter) -> Document | None:
        if not self.available:
            raise StoreUnavailable(f"collection {self.name!r} marked unavailable")
        for document in self._documents:
            if _matches(document, filter):
                return copy.deepcopy(document)
        return None

    def update_one(self, filter: Filter, patch: Patch) -> WriteOutcome:
        self._check_rejected(filter)
        for document in self._documents:
            if _matches(document, filter):
                modified = _apply_set(document, patch.get("$set", {}))
                return WriteOutcome(matched_count=1, modified_count=int(modified))
        return WriteOutcome()

    def update_many(self, filter: Filter, patch: Patch) -> WriteOutcome:
        self._check_rejected(filter)
        matched = modified = 0
        for document in self._documents:
            if _matches(document, filter):
                matched += 1
                if _apply_set(document, patch.get("$set", {})):
                    modified += 1
        return WriteOutcome(matched_count=matched, modified_count=modified)

    def _check_rejected(self, filter: Filter) -> None:
        for value in filter.values():
            if value in self.reject_keys:
                raise StoreWriteFailure(str(value), "rejected by memory collection")


class MemoryDocumentStore:
    """Dict of MemoryCollections behind the IDocumentStore interface."""

    def __init__(self, collections: dict[str, list[Document]] | None = None) -> None:
        self._collections: dict[str, MemoryCollection] = {
            name: MemoryCollection(name, docs) for name, docs in (collections or {}).items()
        }
        self.available = True

    def collection(self, name: str) -> MemoryCollection:
        if name not in self._collections:
            self._collections[name] = MemoryCollection(name)
        return self._collections[name]

    def ping(self) -> None:
        if not self.available:
            raise StoreUnavailable("memory store marked unavailable")


class MemoryFileStore:
    """Dict-backed IFileStore for unit tests."""

    def __init__(self) -> None:
        self._files: dict[str, bytes] = {}
        self.writable = True

    def read(self, path: str) -> bytes:
        try:
            return self._files[path]
        except KeyError as exc:
            raise FileUnavailable(path, "no such file") from exc

    def write(self, path: str, data: bytes, content_type: str = "application/json") -> str:
        if not self.writable:
            raise FileUnavailable(path, "memory file store is read-only")
        self._files[path] = data
        return path

    def exists(self, path: str) -> bool:
        return path in self._files
