"""Shared test doubles: re-export memory backends."""

from __future__ import annotations

from idsync.persistence.memory_backend import (
    MemoryCollection,
    MemoryDocumentStore,
    MemoryFileStore,
)

__all__ = ["MemoryCollection", "MemoryDocumentStore", "MemoryFileStore"]
