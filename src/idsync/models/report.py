"""Resolution outcomes and batch reports."""

from __future__ import annotations

from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, Field


class ResolutionStatus(StrEnum):
    MATCHED = "MATCHED"
    NOT_FOUND = "NOT_FOUND"
    SKIPPED = "SKIPPED"


class MatchTier(StrEnum):
    """Key shapes in priority order, most specific first."""

    NAME_PHONE = "NAME_PHONE"
    NAME_EMAIL = "NAME_EMAIL"
    PHONE = "PHONE"
    NAME = "NAME"


class Resolution(BaseModel):
    status: ResolutionStatus
    stable_id: Optional[str] = None
    tier: Optional[MatchTier] = None

    @property
    def matched(self) -> bool:
        return self.status is ResolutionStatus.MATCHED


class WriteOutcome(BaseModel):
    """Result of a single update call against the live store."""

    matched_count: int = 0
    modified_count: int = 0


class StagedUpdate(BaseModel):
    record_key: str
    field: str
    old_id: Optional[str] = None
    new_id: str
    tier: Optional[MatchTier] = None


class NotFoundRecord(BaseModel):
    """Raw identity fields of a record no tier could match, for follow-up."""

    record_key: str
    full_name: str = ""
    phone: str = ""
    email: str = ""
    current_id: Optional[str] = None


class WriteFailure(BaseModel):
    record_key: str
    error: str


class ReconcileReport(BaseModel):
    """Outcome of one reconciliation pass over a target collection."""

    collection: str = ""
    dry_run: bool = False
    updated: int = 0
    already_correct: int = 0
    not_found: int = 0
    skipped: int = 0
    failed: int = 0
    updates: list[StagedUpdate] = Field(default_factory=list)
    not_found_records: list[NotFoundRecord] = Field(default_factory=list)
    skipped_records: list[str] = Field(default_factory=list)
    write_failures: list[WriteFailure] = Field(default_factory=list)
    snapshot_error: str = ""

    @property
    def total(self) -> int:
        return self.updated + self.already_correct + self.not_found + self.skipped + self.failed


class CollectionRemap(BaseModel):
    collection: str
    field: str
    modified: int = 0
    skipped_empty: bool = False
    error: str = ""


class SnapshotRemap(BaseModel):
    path: str
    changed_documents: int = 0


class PropagationReport(BaseModel):
    """Outcome of pushing an explicit old->new id mapping to both stores."""

    mapping: dict[str, str] = Field(default_factory=dict)
    collections: list[CollectionRemap] = Field(default_factory=list)
    snapshots: list[SnapshotRemap] = Field(default_factory=list)

    @property
    def store_modified(self) -> int:
        return sum(c.modified for c in self.collections)

    @property
    def snapshot_changed(self) -> int:
        return sum(s.changed_documents for s in self.snapshots)
