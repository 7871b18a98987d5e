"""Rewrite tracked identifier fields anywhere inside a document tree."""

from __future__ import annotations

import copy
from collections.abc import Collection, Mapping
from typing import Any


def rewrite(doc: Any, field_names: Collection[str], mapping: Mapping[str, str]) -> tuple[Any, bool]:
    """Return ``(new_doc, changed)``.

    Every key named in ``field_names`` whose value is a string present in
    ``mapping`` is replaced, at any depth and inside lists. Everything else
    is deep-copied, so the result never shares structure with ``doc``.
    Cyclic input is not supported.
    """
    if isinstance(doc, list):
        changed = False
        items = []
        for item in doc:
            new_item, item_changed = rewrite(item, field_names, mapping)
            items.append(new_item)
            changed = changed or item_changed
        return items, changed

    if isinstance(doc, dict):
        changed = False
        out: dict[Any, Any] = {}
        for key, value in doc.items():
            if key in field_names and isinstance(value, str) and value in mapping:
                out[key] = mapping[value]
                changed = True
            else:
                out[key], value_changed = rewrite(value, field_names, mapping)
                changed = changed or value_changed
        return out, changed

    return copy.deepcopy(doc), False


def rewrite_all(docs: list[Any], field_names: Collection[str], mapping: Mapping[str, str]) -> tuple[list[Any], int]:
    """Rewrite a snapshot's documents; returns the new list and how many changed."""
    result = []
    changed_count = 0
    for doc in docs:
        new_doc, changed = rewrite(doc, field_names, mapping)
        result.append(new_doc)
        if changed:
            changed_count += 1
    return result, changed_count
