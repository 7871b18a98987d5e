"""Customer identity reconciliation and dual-store synchronization."""

from idsync.matching.resolver import ResolverIndex, build, resolve
from idsync.sync.codec import decode, encode
from idsync.sync.engine import SyncEngine, export_snapshot, reconcile_targets
from idsync.sync.rewriter import rewrite

__all__ = [
    "ResolverIndex",
    "SyncEngine",
    "build",
    "decode",
    "encode",
    "export_snapshot",
    "reconcile_targets",
    "resolve",
    "rewrite",
]
