"""Records flowing between the store, the normalizer and the exporters."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

# Descriptive fields copied verbatim from the source document.
PASSTHROUGH_FIELDS = (
    "customer_full_name",
    "customer_first_name",
    "customer_last_name",
    "customer_gender",
    "user",
)


@dataclass(slots=True)
class SourceHit:
    """One raw document as returned by the store: its own id plus `_source`."""

    doc_id: str | None
    source: Mapping[str, Any] | None


@dataclass(slots=True)
class SearchPage:
    """A page of hits together with the (possibly rotated) cursor handle."""

    cursor: str | None
    hits: list[SourceHit] | None = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.hits


@dataclass(slots=True)
class CanonicalCustomer:
    """The single deduplicated record written to the destination collection."""

    customer_id: int
    email: str
    customer_full_name: Any = None
    customer_first_name: Any = None
    customer_last_name: Any = None
    customer_gender: Any = None
    customer_phone: Any = ""
    user: Any = None

    @property
    def document_id(self) -> str:
        return str(self.customer_id)

    def to_document(self) -> dict[str, Any]:
        return {
            "customer_id": self.customer_id,
            "customer_full_name": self.customer_full_name,
            "customer_first_name": self.customer_first_name,
            "customer_last_name": self.customer_last_name,
            "customer_gender": self.customer_gender,
            "email": self.email,
            "customer_phone": self.customer_phone,
            "user": self.user,
        }


__all__ = ["CanonicalCustomer", "PASSTHROUGH_FIELDS", "SearchPage", "SourceHit"]
