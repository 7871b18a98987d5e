"""Application configuration using pydantic-settings with grouped env prefixes."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings


class MongoConfig(BaseSettings):
    """Live document store (MongoDB) configuration."""

    model_config = {"env_prefix": "IDSYNC_MONGO_"}

    uri: str = "mongodb://localhost:27017"
    database: str = "vgreen"
    server_selection_timeout_ms: int = 5000


class SnapshotConfig(BaseSettings):
    """JSON snapshot file storage configuration."""

    model_config = {"env_prefix": "IDSYNC_SNAPSHOT_"}

    backend: Literal["local", "s3"] = "local"
    directory: str = "data/temp"
    bucket: str = "idsync-snapshots"
    prefix: str = ""
    region: str = "us-east-1"
    endpoint_url: str | None = None  # LocalStack override
    indent: str = "\t"


class ReconcileConfig(BaseSettings):
    """Defaults for a reconciliation pass."""

    model_config = {"env_prefix": "IDSYNC_RECONCILE_"}

    identity_collection: str = "users"
    target_collection: str = "orders"
    touch_field: str = "updatedAt"  # "" disables stamping
    dry_run: bool = False


class AppSettings(BaseSettings):
    """Root application settings aggregating all sub-configs."""

    model_config = {"env_prefix": "IDSYNC_"}

    environment: Literal["dev", "uat", "prod"] = "dev"
    log_level: str = "INFO"

    mongo: MongoConfig = MongoConfig()
    snapshot: SnapshotConfig = SnapshotConfig()
    reconcile: ReconcileConfig = ReconcileConfig()
