"""S3 snapshot storage backend implementing IFileStore."""

from __future__ import annotations

import boto3
from botocore.exceptions import ClientError

from idsync.core.exceptions import FileUnavailable


class S3FileStore:
    """IFileStore keeping snapshot files as objects under a bucket prefix."""

    def __init__(self, bucket: str, prefix: str = "", region: str = "us-east-1",
                 endpoint_url: str | None = None) -> None:
        self._bucket = bucket
        self._prefix = prefix
        self._region = region
        self._endpoint_url = endpoint_url
        kwargs: dict = {"region_name": region}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        self._client = boto3.client("s3", **kwargs)

    def _key(self, path: str) -> str:
        return f"{self._prefix}{path}"

    def read(self, path: str) -> bytes:
        try:
            resp = self._client.get_object(Bucket=self._bucket, Key=self._key(path))
            return resp["Body"].read()
        except ClientError as exc:
            raise FileUnavailable(path, f"S3 read failed: {exc}") from exc

    def write(self, path: str, data: bytes, content_type: str = "application/json") -> str:
        try:
            self._client.put_object(
                Bucket=self._bucket, Key=self._key(path), Body=data, ContentType=content_type,
            )
            return path
        except ClientError as exc:
            raise FileUnavailable(path, f"S3 write failed: {exc}") from exc

    def exists(self, path: str) -> bool:
        try:
            self._client.head_object(Bucket=self._bucket, Key=self._key(path))
            return True
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") in ("404", "NoSuchKey", "NotFound"):
                return False
            raise FileUnavailable(path, f"S3 head failed: {exc}") from exc
