"""Identity records and the loose identity blocks matched against them."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel

from idsync.core.types import Document


def get_path(document: Document, path: str) -> Any:
    """Read a dotted path (``shippingInfo.fullName``); missing segments give None."""
    current: Any = document
    for segment in path.split("."):
        if not isinstance(current, dict):
            return None
        current = current.get(segment)
    return current


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


class IdentitySpec(BaseModel):
    """Where the canonical customer fields live on an identity document."""

    stable_id_field: str = "CustomerID"
    full_name_field: str = "FullName"
    phone_field: str = "Phone"
    email_field: str = "Email"
    created_at_field: str = "createdAt"
    updated_at_field: str = "updatedAt"


class IdentityRecord(BaseModel):
    """One canonical customer."""

    stable_id: str
    full_name: str = ""
    phone: str = ""
    email: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, document: Document, spec: IdentitySpec | None = None) -> "IdentityRecord":
        spec = spec or IdentitySpec()
        created = get_path(document, spec.created_at_field)
        updated = get_path(document, spec.updated_at_field)
        return cls(
            stable_id=_text(get_path(document, spec.stable_id_field)),
            full_name=_text(get_path(document, spec.full_name_field)),
            phone=_text(get_path(document, spec.phone_field)),
            email=_text(get_path(document, spec.email_field)),
            created_at=created if isinstance(created, datetime) else None,
            updated_at=updated if isinstance(updated, datetime) else None,
        )


class CandidateIdentity(BaseModel):
    """Free-form name/phone/email block copied onto a dependent record."""

    full_name: str = ""
    phone: str = ""
    email: str = ""

    model_config = {"str_strip_whitespace": True}

    @property
    def is_empty(self) -> bool:
        """No name and no phone: nothing to resolve with."""
        return not self.full_name and not self.phone
