"""Pluggable persistence backends behind Protocol interfaces."""

from __future__ import annotations

from idsync.core.config import AppSettings
from idsync.core.protocols import IDocumentStore, IFileStore
from idsync.persistence.local_backend import LocalFileStore
from idsync.persistence.mongo_backend import MongoDocumentStore
from idsync.persistence.s3_backend import S3FileStore


def create_snapshot_store(settings: AppSettings) -> IFileStore:
    if settings.snapshot.backend == "s3":
        return S3FileStore(
            bucket=settings.snapshot.bucket,
            prefix=settings.snapshot.prefix,
            region=settings.snapshot.region,
            endpoint_url=settings.snapshot.endpoint_url,
        )
    return LocalFileStore(settings.snapshot.directory)


def create_persistence(settings: AppSettings | None = None) -> tuple[IDocumentStore, IFileStore]:
    """Create wired-up persistence backends from application settings.

    Returns:
        Tuple of (document_store, snapshot_store).
    """
    if settings is None:
        settings = AppSettings()

    document_store = MongoDocumentStore(
        uri=settings.mongo.uri,
        database=settings.mongo.database,
        server_selection_timeout_ms=settings.mongo.server_selection_timeout_ms,
    )

    return document_store, create_snapshot_store(settings)
