"""Canonical lookup keys built from free-text identity fields."""

from __future__ import annotations

from typing import Any

KEY_SEPARATOR = "|"


def normalize(value: Any) -> str:
    """Trim and case-fold; None becomes the empty string."""
    if value is None:
        return ""
    return str(value).strip().lower()


def match_key(left: str, right: str) -> str:
    """Compose two normalized parts; either side may be empty (``|phone``, ``name|``)."""
    return f"{left}{KEY_SEPARATOR}{right}"
