"""MongoDB backend implementing IDocumentStore / IDocumentCollection."""

from __future__ import annotations

import logging
from typing import Any

from pymongo import MongoClient
from pymongo.errors import ConnectionFailure, PyMongoError

from idsync.core.exceptions import StoreUnavailable, StoreWriteFailure
from idsync.core.types import Document, Filter, Patch
from idsync.models.report import WriteOutcome

logger = logging.getLogger(__name__)


def _describe(filter: Filter) -> str:
    return ",".join(f"{k}={v}" for k, v in filter.items())


class MongoCollection:
    """Production IDocumentCollection wrapping a pymongo collection."""

    def __init__(self, collection: Any) -> None:
        self._collection = collection
        self.name = collection.name

    def find_all(self) -> list[Document]:
        try:
            return list(self._collection.find({}))
        except PyMongoError as exc:
            raise StoreUnavailable(f"Mongo find failed on {self.name!r}: {exc}") from exc

    def find_one(self, filter: Filter) -> Document | None:
        try:
            return self._collection.find_one(filter)
        except PyMongoError as exc:
            raise StoreUnavailable(f"Mongo find_one failed on {self.name!r}: {exc}") from exc

    def update_one(self, filter: Filter, patch: Patch) -> WriteOutcome:
        try:
            result = self._collection.update_one(filter, patch)
        except PyMongoError as exc:
            raise StoreWriteFailure(_describe(filter), str(exc)) from exc
        return WriteOutcome(matched_count=result.matched_count, modified_count=result.modified_count)

    def update_many(self, filter: Filter, patch: Patch) -> WriteOutcome:
        try:
            result = self._collection.update_many(filter, patch)
        except PyMongoError as exc:
            raise StoreWriteFailure(_describe(filter), str(exc)) from exc
        return WriteOutcome(matched_count=result.matched_count, modified_count=result.modified_count)


class MongoDocumentStore:
    """Production IDocumentStore backed by a MongoDB database."""

    def __init__(self, uri: str = "mongodb://localhost:27017", database: str = "vgreen",
                 server_selection_timeout_ms: int = 5000, client: Any = None) -> None:
        self._uri = uri
        self._database = database
        self._client = client or MongoClient(uri, serverSelectionTimeoutMS=server_selection_timeout_ms)
        self._db = self._client[database]

    def collection(self, name: str) -> MongoCollection:
        return MongoCollection(self._db[name])

    def ping(self) -> None:
        try:
            self._client.admin.command("ping")
        except (ConnectionFailure, PyMongoError) as exc:
            raise StoreUnavailable(f"MongoDB at {self._uri!r} unreachable: {exc}") from exc
        logger.debug("Connected to MongoDB database %s", self._database)

    def close(self) -> None:
        self._client.close()
