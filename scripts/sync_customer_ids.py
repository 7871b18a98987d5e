"""Reconcile customer ids and keep MongoDB and the JSON snapshots in step.

Usage:
    python scripts/sync_customer_ids.py reconcile --collection orders
    python scripts/sync_customer_ids.py remap CUS326736493=CUS000001 CUS305416310=CUS000002
    python scripts/sync_customer_ids.py export users
"""

from __future__ import annotations

import argparse
import logging
import sys

from idsync.core.config import AppSettings
from idsync.core.exceptions import IdSyncError
from idsync.models.field_spec import CUSTOMER_COLLECTIONS, PRESETS
from idsync.models.report import PropagationReport, ReconcileReport
from idsync.sync.engine import SyncEngine

logger = logging.getLogger("sync_customer_ids")


def parse_mapping(pairs: list[str]) -> dict[str, str]:
    """Turn ``OLD=NEW`` arguments into a mapping."""
    mapping: dict[str, str] = {}
    for pair in pairs:
        old_id, sep, new_id = pair.partition("=")
        if not sep or not old_id.strip() or not new_id.strip():
            raise ValueError(f"Expected OLD=NEW, got {pair!r}")
        mapping[old_id.strip()] = new_id.strip()
    return mapping


def run_reconcile(engine: SyncEngine, settings: AppSettings, collection: str,
                  dry_run: bool, no_snapshot: bool) -> ReconcileReport:
    if collection not in PRESETS or not PRESETS[collection].has_identity_block:
        raise ValueError(f"Collection {collection!r} has no identity block to reconcile")
    spec = PRESETS[collection].model_copy(update={"touch_field": settings.reconcile.touch_field})
    report = engine.reconcile(
        spec,
        identity_collection=settings.reconcile.identity_collection,
        dry_run=dry_run,
        snapshot_path=None if no_snapshot else f"{collection}.json",
    )

    logger.info("=" * 60)
    logger.info("updated=%d already_correct=%d not_found=%d skipped=%d failed=%d%s",
                report.updated, report.already_correct, report.not_found, report.skipped,
                report.failed, " (dry run)" if report.dry_run else "")
    for missing in report.not_found_records:
        logger.info("  not found %s: %s (%s) current=%s",
                    missing.record_key, missing.full_name, missing.phone, missing.current_id)
    for failure in report.write_failures:
        logger.info("  failed %s: %s", failure.record_key, failure.error)
    if report.snapshot_error:
        logger.error("Snapshot not refreshed: %s", report.snapshot_error)
    return report


def run_remap(engine: SyncEngine, mapping: dict[str, str], no_snapshot: bool) -> PropagationReport:
    snapshot_paths: dict[str, str] = {}
    if not no_snapshot:
        for spec in CUSTOMER_COLLECTIONS:
            path = f"{spec.collection}.json"
            if engine.has_snapshot(path):
                snapshot_paths[spec.collection] = path
            else:
                logger.warning("Snapshot %s not found, skipped", path)
    report = engine.propagate(mapping, CUSTOMER_COLLECTIONS, snapshot_paths=snapshot_paths)

    logger.info("=" * 60)
    logger.info("MongoDB: %d documents updated", report.store_modified)
    logger.info("Snapshots: %d documents updated", report.snapshot_changed)
    for remap in report.collections:
        if remap.error:
            logger.info("  %s.%s failed: %s", remap.collection, remap.field, remap.error)
    return report


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Customer id reconciliation for MongoDB + JSON snapshots")
    subparsers = parser.add_subparsers(dest="command", required=True)

    reconcile_parser = subparsers.add_parser("reconcile", help="Re-derive customer ids from shipping info")
    reconcile_parser.add_argument("--collection", default=None, help="Target collection (default from settings)")
    reconcile_parser.add_argument("--dry-run", action="store_true")
    reconcile_parser.add_argument("--no-snapshot", action="store_true", help="Do not refresh the JSON snapshot")

    remap_parser = subparsers.add_parser("remap", help="Apply OLD=NEW customer id replacements everywhere")
    remap_parser.add_argument("pairs", nargs="+", metavar="OLD=NEW")
    remap_parser.add_argument("--no-snapshot", action="store_true", help="Only update MongoDB")

    export_parser = subparsers.add_parser("export", help="Dump a collection to its JSON snapshot")
    export_parser.add_argument("collection")
    export_parser.add_argument("--path", default=None)
    return parser


def main(argv: list[str] | None = None, engine: SyncEngine | None = None) -> int:
    args = _build_parser().parse_args(argv)
    settings = AppSettings()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    engine = engine or SyncEngine.from_settings(settings)

    try:
        if args.command == "reconcile":
            collection = args.collection or settings.reconcile.target_collection
            report = run_reconcile(engine, settings, collection,
                                   dry_run=args.dry_run or settings.reconcile.dry_run,
                                   no_snapshot=args.no_snapshot)
            if report.snapshot_error:
                return 1
        elif args.command == "remap":
            run_remap(engine, parse_mapping(args.pairs), no_snapshot=args.no_snapshot)
        else:
            engine.export_collection(args.collection, args.path)
    except (IdSyncError, ValueError) as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
