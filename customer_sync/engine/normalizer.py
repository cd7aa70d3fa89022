"""Project raw source documents onto canonical customer records."""

from __future__ import annotations

import math
from dataclasses import dataclass
from numbers import Real
from typing import Any, Mapping

from .models import PASSTHROUGH_FIELDS, CanonicalCustomer, SourceHit

MISSING_SOURCE = "missing_source"
MISSING_CUSTOMER_ID = "missing_customer_id"
INVALID_CUSTOMER_ID = "invalid_customer_id"
INVALID_EMAIL = "invalid_email"
BLANK_EMAIL = "blank_email"


@dataclass(slots=True)
class NormalizationResult:
    customer: CanonicalCustomer | None = None
    reason: str | None = None
    # populated when the id could be read even though the document was rejected
    customer_id: int | None = None

    @property
    def accepted(self) -> bool:
        return self.customer is not None


class DocumentNormalizer:
    """Validate one source document and build its canonical customer.

    Pure: rejections are reported through the result, the caller decides how
    to log them.
    """

    def normalize(self, hit: SourceHit) -> NormalizationResult:
        source = hit.source
        if source is None:
            return NormalizationResult(reason=MISSING_SOURCE)

        raw_id = source.get("customer_id")
        if raw_id is None:
            return NormalizationResult(reason=MISSING_CUSTOMER_ID)
        customer_id = _coerce_customer_id(raw_id)
        if customer_id is None:
            return NormalizationResult(reason=INVALID_CUSTOMER_ID)

        email = source.get("email")
        if not isinstance(email, str):
            return NormalizationResult(reason=INVALID_EMAIL, customer_id=customer_id)
        if not email.strip():
            return NormalizationResult(reason=BLANK_EMAIL, customer_id=customer_id)

        return NormalizationResult(customer=_build_customer(customer_id, email, source))


def _coerce_customer_id(value: Any) -> int | None:
    """Truncate a numeric id toward zero; anything non-numeric is rejected."""

    if isinstance(value, bool) or not isinstance(value, Real):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return math.trunc(value)


def _build_customer(customer_id: int, email: str, source: Mapping[str, Any]) -> CanonicalCustomer:
    passthrough = {name: source.get(name) for name in PASSTHROUGH_FIELDS}
    return CanonicalCustomer(
        customer_id=customer_id,
        email=email,
        customer_phone=source.get("customer_phone", ""),
        **passthrough,
    )


__all__ = [
    "BLANK_EMAIL",
    "DocumentNormalizer",
    "INVALID_CUSTOMER_ID",
    "INVALID_EMAIL",
    "MISSING_CUSTOMER_ID",
    "MISSING_SOURCE",
    "NormalizationResult",
]
