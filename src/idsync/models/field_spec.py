"""Field specifications for dependent (target) collections."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from idsync.core.types import Document
from idsync.models.identity import CandidateIdentity, get_path


class FieldSpec(BaseModel):
    """Declares where a target record keeps its identity block and tracked ids."""

    collection: str
    record_key: str = "_id"  # reported to operators
    filter_field: str = "_id"  # equality filter used for writes
    full_name_path: str = ""
    phone_path: str = ""
    email_path: str = ""
    identifier_fields: list[str] = Field(default_factory=lambda: ["CustomerID"])
    touch_field: str = ""

    @property
    def has_identity_block(self) -> bool:
        return bool(self.full_name_path or self.phone_path or self.email_path)

    @property
    def identifier_names(self) -> set[str]:
        """Leaf key names of the tracked fields, as matched by the rewriter."""
        return {path.rsplit(".", 1)[-1] for path in self.identifier_fields}

    def candidate(self, document: Document) -> CandidateIdentity:
        return CandidateIdentity(
            full_name=_text_at(document, self.full_name_path),
            phone=_text_at(document, self.phone_path),
            email=_text_at(document, self.email_path),
        )

    def record_key_of(self, document: Document) -> str:
        value = get_path(document, self.record_key)
        return "" if value is None else str(value)

    def filter_for(self, document: Document) -> dict[str, Any]:
        return {self.filter_field: get_path(document, self.filter_field)}


def _text_at(document: Document, path: str) -> str:
    if not path:
        return ""
    value = get_path(document, path)
    if value is None:
        return ""
    return str(value).strip()


# Collections of the storefront data set and the field holding the customer id.
USERS = FieldSpec(collection="users", record_key="CustomerID")
ORDERS = FieldSpec(
    collection="orders",
    record_key="OrderID",
    full_name_path="shippingInfo.fullName",
    phone_path="shippingInfo.phone",
    email_path="shippingInfo.email",
    touch_field="updatedAt",
)
REVIEWS = FieldSpec(collection="reviews", identifier_fields=["customer_id"])
USER_ADDRESSES = FieldSpec(collection="useraddresses")
USER_WISHLISTS = FieldSpec(collection="userwishlists")
CARTS = FieldSpec(collection="carts")

CUSTOMER_COLLECTIONS: list[FieldSpec] = [
    USERS,
    ORDERS,
    REVIEWS,
    USER_ADDRESSES,
    USER_WISHLISTS,
    CARTS,
]

PRESETS: dict[str, FieldSpec] = {spec.collection: spec for spec in CUSTOMER_COLLECTIONS}
