"""Re-export persistence protocols from core for convenience."""

from __future__ import annotations

from idsync.core.protocols import IDocumentCollection, IDocumentStore, IFileStore

__all__ = ["IDocumentCollection", "IDocumentStore", "IFileStore"]
