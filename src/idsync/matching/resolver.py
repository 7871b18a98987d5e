"""Priority-tiered identity resolution.

A record contributes up to four keys, tried in this order:

1. ``name|phone``
2. ``name|email``
3. ``|phone``
4. ``name|``

An existing key is never overwritten, so the first record to claim a key
keeps it. Name-only and phone-only keys can still join unrelated
customers who share a common name or a household phone.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping

from idsync.matching.normalize import match_key, normalize
from idsync.models.identity import CandidateIdentity, IdentityRecord
from idsync.models.report import MatchTier, Resolution, ResolutionStatus


def _tier_keys(full_name: str, phone: str, email: str) -> Iterator[tuple[MatchTier, str]]:
    """Yield (tier, key) for every tier whose fields are all present."""
    if full_name and phone:
        yield MatchTier.NAME_PHONE, match_key(full_name, phone)
    if full_name and email:
        yield MatchTier.NAME_EMAIL, match_key(full_name, email)
    if phone:
        yield MatchTier.PHONE, match_key("", phone)
    if full_name:
        yield MatchTier.NAME, match_key(full_name, "")


class ResolverIndex(Mapping[str, str]):
    """Read-only key -> stable id mapping, built once per pass."""

    def __init__(self, keys: dict[str, str], record_count: int = 0) -> None:
        self._keys = keys
        self.record_count = record_count

    def __getitem__(self, key: str) -> str:
        return self._keys[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._keys)

    def __len__(self) -> int:
        return len(self._keys)

    def __repr__(self) -> str:
        return f"ResolverIndex(keys={len(self._keys)}, records={self.record_count})"


def build(identity_records: Iterable[IdentityRecord]) -> ResolverIndex:
    keys: dict[str, str] = {}
    count = 0
    for record in identity_records:
        stable_id = record.stable_id.strip()
        if not stable_id:
            continue
        count += 1
        full_name = normalize(record.full_name)
        phone = normalize(record.phone)
        email = normalize(record.email)
        for _tier, key in _tier_keys(full_name, phone, email):
            keys.setdefault(key, stable_id)
    return ResolverIndex(keys, record_count=count)


def resolve(index: Mapping[str, str], candidate: CandidateIdentity) -> Resolution:
    """Look the candidate up tier by tier.

    ``SKIPPED`` means there was nothing to look up (no name and no phone);
    ``NOT_FOUND`` means every applicable tier was tried and missed.
    """
    if candidate.is_empty:
        return Resolution(status=ResolutionStatus.SKIPPED)

    full_name = normalize(candidate.full_name)
    phone = normalize(candidate.phone)
    email = normalize(candidate.email)

    for tier, key in _tier_keys(full_name, phone, email):
        stable_id = index.get(key)
        if stable_id:
            return Resolution(status=ResolutionStatus.MATCHED, stable_id=stable_id, tier=tier)
    return Resolution(status=ResolutionStatus.NOT_FOUND)
