"""Unit tests for S3FileStore using moto."""

from __future__ import annotations

import boto3
import pytest
from moto import mock_aws

from idsync.core.exceptions import FileUnavailable
from idsync.persistence.s3_backend import S3FileStore

BUCKET = "test-snapshots"


@pytest.fixture
def s3_client():
    with mock_aws():
        client = boto3.client("s3", region_name="us-east-1")
        client.create_bucket(Bucket=BUCKET)
        yield client


@pytest.fixture
def s3_backend(s3_client):
    return S3FileStore(bucket=BUCKET, prefix="temp/", region="us-east-1")


class TestWrite:
    def test_write_returns_path(self, s3_backend):
        assert s3_backend.write("orders.json", b"[]") == "orders.json"

    def test_write_applies_prefix(self, s3_backend, s3_client):
        s3_backend.write("users.json", b"[]")
        keys = [o["Key"] for o in s3_client.list_objects_v2(Bucket=BUCKET)["Contents"]]
        assert keys == ["temp/users.json"]

    def test_write_sets_json_content_type(self, s3_backend, s3_client):
        s3_backend.write("users.json", b"[]")
        head = s3_client.head_object(Bucket=BUCKET, Key="temp/users.json")
        assert head["ContentType"] == "application/json"


class TestRead:
    def test_read_returns_bytes(self, s3_backend):
        s3_backend.write("carts.json", '[{"name": "Huyền"}]'.encode("utf-8"))
        assert s3_backend.read("carts.json").decode("utf-8") == '[{"name": "Huyền"}]'

    def test_read_missing_key_raises(self, s3_backend):
        with pytest.raises(FileUnavailable):
            s3_backend.read("does/not/exist.json")


class TestExists:
    def test_exists_after_write(self, s3_backend):
        s3_backend.write("reviews.json", b"[]")
        assert s3_backend.exists("reviews.json")

    def test_missing_key(self, s3_backend):
        assert not s3_backend.exists("reviews.json")
