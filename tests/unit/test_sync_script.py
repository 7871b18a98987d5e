"""Tests for the sync_customer_ids host script."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest
from bson import ObjectId

from idsync.sync.engine import SyncEngine
from tests.fakes import MemoryDocumentStore, MemoryFileStore

# Make scripts/ importable
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent / "scripts"))

from sync_customer_ids import main, parse_mapping  # noqa: E402


@pytest.fixture
def store():
    return MemoryDocumentStore({
        "users": [{"_id": ObjectId(), "CustomerID": "CUS000001", "FullName": "Nguyễn Như Huyền", "Phone": "0815275677"}],
        "orders": [{
            "_id": ObjectId(),
            "OrderID": "ORD001",
            "shippingInfo": {"fullName": "Nguyễn Như Huyền", "phone": "0815275677"},
            "CustomerID": "CUS326736493",
        }],
        "reviews": [{"_id": ObjectId(), "customer_id": "CUS326736493"}],
    })


@pytest.fixture
def files():
    return MemoryFileStore()


@pytest.fixture
def engine(store, files):
    return SyncEngine(document_store=store, snapshot_store=files)


class TestParseMapping:
    def test_parses_pairs(self):
        assert parse_mapping(["A=B", " C = D "]) == {"A": "B", "C": "D"}

    @pytest.mark.parametrize("pair", ["A", "=B", "A="])
    def test_rejects_malformed_pairs(self, pair):
        with pytest.raises(ValueError):
            parse_mapping([pair])


class TestMain:
    def test_reconcile_command(self, engine, store, files):
        assert main(["reconcile", "--collection", "orders"], engine=engine) == 0
        assert store.collection("orders").find_all()[0]["CustomerID"] == "CUS000001"
        assert json.loads(files.read("orders.json"))[0]["CustomerID"] == "CUS000001"

    def test_reconcile_dry_run(self, engine, store, files):
        assert main(["reconcile", "--dry-run"], engine=engine) == 0
        assert store.collection("orders").find_all()[0]["CustomerID"] == "CUS326736493"
        assert not files.exists("orders.json")

    def test_reconcile_rejects_collection_without_identity_block(self, engine):
        assert main(["reconcile", "--collection", "reviews"], engine=engine) == 1

    def test_remap_skips_missing_snapshots(self, engine, store, files):
        files.write("reviews.json", b'[{"customer_id": "CUS326736493"}]')

        assert main(["remap", "CUS326736493=CUS000001"], engine=engine) == 0

        assert store.collection("reviews").find_all()[0]["customer_id"] == "CUS000001"
        assert json.loads(files.read("reviews.json")) == [{"customer_id": "CUS000001"}]
        assert not files.exists("orders.json")

    def test_export_command(self, engine, files):
        assert main(["export", "users"], engine=engine) == 0
        assert json.loads(files.read("users.json"))[0]["FullName"] == "Nguyễn Như Huyền"

    def test_fatal_error_returns_one(self, engine, store):
        store.available = False
        assert main(["reconcile"], engine=engine) == 1

    def test_snapshot_refresh_failure_returns_one_after_live_update(self, engine, store, files):
        files.writable = False
        assert main(["reconcile", "--collection", "orders"], engine=engine) == 1
        assert store.collection("orders").find_all()[0]["CustomerID"] == "CUS000001"
