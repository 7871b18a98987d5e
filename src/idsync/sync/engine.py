"""Reconciliation passes and live-store / snapshot synchronization."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime, timezone
from typing import Any

from idsync.core.config import AppSettings
from idsync.core.exceptions import FileUnavailable, StoreError, StoreWriteFailure
from idsync.core.protocols import IDocumentCollection, IDocumentStore, IFileStore
from idsync.core.types import Document
from idsync.matching.resolver import build, resolve
from idsync.models.field_spec import FieldSpec
from idsync.models.identity import IdentityRecord, IdentitySpec, get_path
from idsync.models.report import (
    CollectionRemap,
    NotFoundRecord,
    PropagationReport,
    ReconcileReport,
    ResolutionStatus,
    SnapshotRemap,
    StagedUpdate,
    WriteFailure,
)
from idsync.persistence import create_persistence
from idsync.sync.codec import decode, encode
from idsync.sync.rewriter import rewrite_all

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    # naive UTC, the form pymongo hands back
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _as_id(value: Any) -> str | None:
    return None if value is None else str(value)


def export_snapshot(live_records: Iterable[Document]) -> list[Any]:
    """Encode native documents into their JSON-safe snapshot form."""
    return [encode(record) for record in live_records]


def reconcile_targets(
    identity_records: Iterable[IdentityRecord],
    target_records: Iterable[Document],
    field_spec: FieldSpec,
    *,
    collection: IDocumentCollection | None = None,
    dry_run: bool = False,
    now: datetime | None = None,
) -> ReconcileReport:
    """Resolve every target record and correct its tracked identifier fields.

    Updates are staged first, then written one ``update_one`` per record.
    A rejected write is recorded in the report and the pass continues.
    Without a collection the pass is a dry run.
    """
    index = build(identity_records)
    logger.debug("Built resolver index: %r", index)
    dry_run = dry_run or collection is None
    report = ReconcileReport(collection=field_spec.collection, dry_run=dry_run)
    stamp = now or _utcnow()

    staged: list[tuple[Document, list[StagedUpdate]]] = []
    for document in target_records:
        record_key = field_spec.record_key_of(document)
        candidate = field_spec.candidate(document)
        resolution = resolve(index, candidate)

        if resolution.status is ResolutionStatus.SKIPPED:
            logger.warning("%s %s: no customer information, skipped", field_spec.collection, record_key)
            report.skipped += 1
            report.skipped_records.append(record_key)
            continue

        if resolution.status is ResolutionStatus.NOT_FOUND:
            current = get_path(document, field_spec.identifier_fields[0]) if field_spec.identifier_fields else None
            logger.warning(
                "%s %s: no customer for %r (%s)",
                field_spec.collection, record_key, candidate.full_name, candidate.phone,
            )
            report.not_found += 1
            report.not_found_records.append(
                NotFoundRecord(
                    record_key=record_key,
                    full_name=candidate.full_name,
                    phone=candidate.phone,
                    email=candidate.email,
                    current_id=_as_id(current),
                )
            )
            continue

        changes = [
            StagedUpdate(
                record_key=record_key,
                field=path,
                old_id=_as_id(get_path(document, path)),
                new_id=resolution.stable_id,
                tier=resolution.tier,
            )
            for path in field_spec.identifier_fields
            if get_path(document, path) != resolution.stable_id
        ]
        if not changes:
            logger.debug("%s %s: already %s", field_spec.collection, record_key, resolution.stable_id)
            report.already_correct += 1
            continue
        staged.append((document, changes))

    for document, changes in staged:
        record_key = changes[0].record_key
        if dry_run:
            report.updated += 1
            report.updates.extend(changes)
            continue

        if get_path(document, field_spec.filter_field) is None:
            logger.warning("%s %s: no %s to address the update, not written",
                           field_spec.collection, record_key, field_spec.filter_field)
            report.failed += 1
            report.write_failures.append(
                WriteFailure(record_key=record_key, error=f"record has no {field_spec.filter_field}")
            )
            continue

        fields: dict[str, Any] = {change.field: change.new_id for change in changes}
        if field_spec.touch_field:
            fields[field_spec.touch_field] = stamp
        try:
            outcome = collection.update_one(field_spec.filter_for(document), {"$set": fields})
            if outcome.matched_count == 0:
                raise StoreWriteFailure(record_key, "no document matched the filter")
        except StoreWriteFailure as exc:
            logger.warning("%s %s: update failed: %s", field_spec.collection, record_key, exc)
            report.failed += 1
            report.write_failures.append(WriteFailure(record_key=record_key, error=str(exc)))
            continue

        for change in changes:
            logger.info(
                "%s %s: %s %s -> %s (%s)",
                field_spec.collection, record_key, change.field, change.old_id, change.new_id, change.tier,
            )
        report.updated += 1
        report.updates.extend(changes)

    return report


class SyncEngine:
    """Drives reconciliation and remaps across the live store and its snapshots."""

    def __init__(
        self,
        *,
        document_store: IDocumentStore,
        snapshot_store: IFileStore | None = None,
        identity_spec: IdentitySpec | None = None,
        indent: str = "\t",
    ) -> None:
        self._store = document_store
        self._snapshots = snapshot_store
        self._identity_spec = identity_spec or IdentitySpec()
        self._indent = indent

    @classmethod
    def from_settings(cls, settings: AppSettings | None = None) -> "SyncEngine":
        settings = settings or AppSettings()
        document_store, snapshot_store = create_persistence(settings)
        return cls(
            document_store=document_store,
            snapshot_store=snapshot_store,
            indent=settings.snapshot.indent,
        )

    # ---- snapshots ----

    def _snapshot_store(self, path: str) -> IFileStore:
        if self._snapshots is None:
            raise FileUnavailable(path, "no snapshot store configured")
        return self._snapshots

    def has_snapshot(self, path: str) -> bool:
        return self._snapshots is not None and self._snapshots.exists(path)

    def load_snapshot(self, path: str, tz_aware: bool = False) -> list[Any]:
        """Read a snapshot file and decode it back into native values."""
        raw = self._snapshot_store(path).read(path)
        try:
            data = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise FileUnavailable(path, f"not valid UTF-8 JSON: {exc}") from exc
        if not isinstance(data, list):
            raise FileUnavailable(path, "expected a JSON array of documents")
        return decode(data, tz_aware=tz_aware)

    def write_snapshot(self, path: str, documents: Sequence[Document]) -> str:
        payload = json.dumps(export_snapshot(documents), indent=self._indent, ensure_ascii=False)
        return self._snapshot_store(path).write(path, payload.encode("utf-8"), content_type="application/json")

    def export_collection(self, collection_name: str, path: str | None = None) -> int:
        """Dump a live collection into its snapshot file; returns the document count."""
        path = path or f"{collection_name}.json"
        self._snapshot_store(path)
        documents = self._store.collection(collection_name).find_all()
        self.write_snapshot(path, documents)
        logger.info("Exported %d %s documents to %s", len(documents), collection_name, path)
        return len(documents)

    # ---- reconciliation ----

    def load_identities(self, collection_name: str = "users") -> list[IdentityRecord]:
        documents = self._store.collection(collection_name).find_all()
        return [IdentityRecord.from_document(d, self._identity_spec) for d in documents]

    def reconcile(
        self,
        field_spec: FieldSpec,
        *,
        identity_collection: str = "users",
        dry_run: bool = False,
        snapshot_path: str | None = None,
    ) -> ReconcileReport:
        """Reconcile one target collection, then refresh its snapshot if anything changed.

        Store and snapshot-store problems surface before any write is made.
        """
        self._store.ping()
        if snapshot_path and not dry_run:
            self._snapshot_store(snapshot_path)
        identities = self.load_identities(identity_collection)
        collection = self._store.collection(field_spec.collection)
        targets = collection.find_all()
        logger.info(
            "Reconciling %d %s against %d identities",
            len(targets), field_spec.collection, len(identities),
        )

        report = reconcile_targets(identities, targets, field_spec, collection=collection, dry_run=dry_run)

        if snapshot_path and not report.dry_run and report.updated:
            try:
                self.export_collection(field_spec.collection, snapshot_path)
            except (FileUnavailable, StoreError) as exc:
                logger.error("Snapshot %s not refreshed: %s", snapshot_path, exc)
                report.snapshot_error = str(exc)
        return report

    # ---- remap propagation ----

    def propagate(
        self,
        mapping: Mapping[str, str],
        specs: Sequence[FieldSpec],
        *,
        snapshot_paths: Mapping[str, str] | None = None,
    ) -> PropagationReport:
        """Push an explicit old -> new id mapping into every collection and snapshot.

        ``snapshot_paths`` maps a collection name to its snapshot file. All
        snapshots are loaded before the first write.
        """
        chained = set(mapping) & set(mapping.values())
        if chained:
            raise ValueError(f"Mapping is chained through {sorted(chained)!r}; flatten it first")

        report = PropagationReport(mapping=dict(mapping))
        by_name = {spec.collection: spec for spec in specs}

        self._store.ping()
        loaded: dict[str, list[Any]] = {}
        for name, path in (snapshot_paths or {}).items():
            if name not in by_name:
                raise ValueError(f"No field spec for snapshot collection {name!r}")
            loaded[name] = self.load_snapshot(path)

        for spec in specs:
            report.collections.extend(self._remap_collection(spec, mapping))

        for name, documents in loaded.items():
            path = snapshot_paths[name]
            rewritten, changed = rewrite_all(documents, by_name[name].identifier_names, mapping)
            if changed:
                self.write_snapshot(path, rewritten)
            logger.info("Snapshot %s: %d documents rewritten", path, changed)
            report.snapshots.append(SnapshotRemap(path=path, changed_documents=changed))

        return report

    def _remap_collection(self, spec: FieldSpec, mapping: Mapping[str, str]) -> list[CollectionRemap]:
        collection = self._store.collection(spec.collection)
        try:
            empty = collection.find_one({}) is None
        except StoreError as exc:
            logger.warning("%s: remap failed: %s", spec.collection, exc)
            return [CollectionRemap(collection=spec.collection, field=f, error=str(exc))
                    for f in spec.identifier_fields]
        if empty:
            logger.info("Collection %s is empty, skipped", spec.collection)
            return [CollectionRemap(collection=spec.collection, field=f, skipped_empty=True)
                    for f in spec.identifier_fields]

        results: list[CollectionRemap] = []
        for field in spec.identifier_fields:
            remap = CollectionRemap(collection=spec.collection, field=field)
            try:
                for old_id, new_id in mapping.items():
                    outcome = collection.update_many({field: old_id}, {"$set": {field: new_id}})
                    if outcome.modified_count:
                        logger.info(
                            "%s.%s: %s -> %s (%d documents)",
                            spec.collection, field, old_id, new_id, outcome.modified_count,
                        )
                    remap.modified += outcome.modified_count
            except StoreError as exc:
                logger.warning("%s.%s: remap failed: %s", spec.collection, field, exc)
                remap.error = str(exc)
            results.append(remap)
        return results
