"""Label artefacts and ledger records."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True, slots=True)
class RenderedLabel:
    """Binary label document returned by the portal."""

    content: bytes
    filename: str
    tracking_number: str
    mail_class: str


@dataclass(frozen=True, slots=True)
class LabelRecord:
    """One successfully generated label, as kept in the ledger."""

    shipment_date: datetime
    account_used: str
    balance_used: Decimal
    shipment_type: str
    file_id: str
    created_at: datetime
    updated_at: datetime
    id: Optional[int] = None

    def with_id(self, record_id: int) -> "LabelRecord":
        return replace(self, id=record_id)


@dataclass(frozen=True, slots=True)
class LabelStats:
    """Aggregate usage over a date range."""

    number_of_shipments: int
    accounts_used: int
    balance_used: Decimal
    shipment_types: int


__all__ = ["RenderedLabel", "LabelRecord", "LabelStats"]
