"""Type aliases used across idsync."""

from __future__ import annotations

from typing import Any, Union

JsonScalar = Union[str, int, float, bool, None]
JsonValue = Union[JsonScalar, list["JsonValue"], dict[str, "JsonValue"]]
Document = dict[str, Any]
Filter = dict[str, Any]
Patch = dict[str, dict[str, Any]]
StableId = str
