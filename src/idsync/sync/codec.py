"""Extended-JSON codec between native document values and snapshot JSON.

``ObjectId`` becomes ``{"$oid": "<hex>"}`` and ``datetime`` becomes
``{"$date": "<ISO-8601, ms, Z>"}``. Lists and dicts are walked
recursively; plain scalars pass through.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from bson import ObjectId
from bson.errors import InvalidId

from idsync.core.exceptions import MalformedExtendedValue

OID_TAG = "$oid"
DATE_TAG = "$date"
NUMBER_LONG_TAG = "$numberLong"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def format_date(value: datetime) -> str:
    """UTC, millisecond precision, trailing ``Z`` (naive values are UTC)."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d}T"
        f"{value.hour:02d}:{value.minute:02d}:{value.second:02d}.{value.microsecond // 1000:03d}Z"
    )


def encode(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return {OID_TAG: str(value)}
    if isinstance(value, datetime):
        return {DATE_TAG: format_date(value)}
    if isinstance(value, dict):
        return {key: encode(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [encode(item) for item in value]
    return value


def decode(value: Any, tz_aware: bool = False, path: str = "$") -> Any:
    """Inverse of :func:`encode`.

    Raises MalformedExtendedValue (with the JSON path) for a tagged value
    that does not fit its tag. Values without tags come back unchanged.
    """
    if isinstance(value, dict):
        if len(value) == 1 and OID_TAG in value:
            return _decode_oid(value[OID_TAG], path)
        if len(value) == 1 and DATE_TAG in value:
            return _decode_date(value[DATE_TAG], tz_aware, path)
        return {key: decode(item, tz_aware, f"{path}.{key}") for key, item in value.items()}
    if isinstance(value, list):
        return [decode(item, tz_aware, f"{path}[{i}]") for i, item in enumerate(value)]
    return value


def _decode_oid(raw: Any, path: str) -> ObjectId:
    if not isinstance(raw, str):
        raise MalformedExtendedValue(path, f"$oid must be a string, got {type(raw).__name__}")
    try:
        return ObjectId(raw)
    except InvalidId as exc:
        raise MalformedExtendedValue(path, f"$oid {raw!r} is not a 24-character hex id") from exc


def _decode_date(raw: Any, tz_aware: bool, path: str) -> datetime:
    if isinstance(raw, dict) and len(raw) == 1 and NUMBER_LONG_TAG in raw:
        try:
            raw = int(raw[NUMBER_LONG_TAG])
        except (TypeError, ValueError) as exc:
            raise MalformedExtendedValue(path, f"$numberLong {raw[NUMBER_LONG_TAG]!r} is not an integer") from exc

    if isinstance(raw, bool):
        raise MalformedExtendedValue(path, "$date must be a string or epoch milliseconds")
    if isinstance(raw, int):
        try:
            parsed = _EPOCH + timedelta(milliseconds=raw)
        except (OverflowError, OSError, ValueError) as exc:
            raise MalformedExtendedValue(path, f"$date {raw!r} is out of range") from exc
    elif isinstance(raw, str):
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError as exc:
            raise MalformedExtendedValue(path, f"$date {raw!r} is not ISO-8601") from exc
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        else:
            parsed = parsed.astimezone(timezone.utc)
    else:
        raise MalformedExtendedValue(path, "$date must be a string or epoch milliseconds")

    return parsed if tz_aware else parsed.replace(tzinfo=None)
