"""Integration test fixtures: a live MongoDB server."""

from __future__ import annotations

import os
import uuid

import pytest
from pymongo import MongoClient

MONGO_URL = os.environ.get("IDSYNC_TEST_MONGO_URI", "mongodb://localhost:27017")


def _mongo_available() -> bool:
    """Check if a MongoDB server answers ping."""
    try:
        client = MongoClient(MONGO_URL, serverSelectionTimeoutMS=500)
        client.admin.command("ping")
        client.close()
        return True
    except Exception:
        return False


skip_no_mongo = pytest.mark.skipif(
    not _mongo_available(),
    reason="MongoDB not available",
)


@pytest.fixture
def mongo_database():
    """Throwaway database name, dropped after the test."""
    name = f"idsync_test_{uuid.uuid4().hex[:8]}"
    client = MongoClient(MONGO_URL, serverSelectionTimeoutMS=500)
    yield client, name
    client.drop_database(name)
    client.close()
