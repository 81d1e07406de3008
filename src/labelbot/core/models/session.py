"""Authenticated portal session captured for one account."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional

FRESHNESS_WINDOW = timedelta(minutes=5)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: str | datetime) -> datetime:
    """Parse an ISO-8601 timestamp, treating naive values as UTC."""

    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds").replace("+00:00", "Z")


def to_decimal(value: Any) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return None


@dataclass(frozen=True, slots=True)
class Session:
    """Hold the auth context and account snapshot of a portal login."""

    username: str
    headers: Mapping[str, str] = field(repr=False)
    created_at: datetime
    customer_id: Optional[str] = None
    user_id: Optional[str] = None
    balance: Optional[Decimal] = None
    control_total: Optional[Decimal] = None

    def age(self, now: Optional[datetime] = None) -> timedelta:
        return (now or utcnow()) - self.created_at

    def is_fresh(self, now: Optional[datetime] = None, window: timedelta = FRESHNESS_WINDOW) -> bool:
        """A session is usable while it is younger than ``window``."""

        return self.age(now) < window

    def with_funds(self, balance: Optional[Decimal], control_total: Optional[Decimal]) -> "Session":
        return replace(self, balance=balance, control_total=control_total)

    def to_dict(self) -> dict[str, Any]:
        return {
            "username": self.username,
            "customerId": self.customer_id,
            "userId": self.user_id,
            "headers": dict(self.headers),
            "createdAt": format_timestamp(self.created_at),
            "balance": str(self.balance) if self.balance is not None else None,
            "controlTotal": str(self.control_total) if self.control_total is not None else None,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Session":
        return cls(
            username=str(data["username"]),
            headers=dict(data.get("headers") or {}),
            created_at=parse_timestamp(data["createdAt"]),
            customer_id=data.get("customerId"),
            user_id=data.get("userId"),
            balance=to_decimal(data.get("balance")),
            control_total=to_decimal(data.get("controlTotal")),
        )


__all__ = [
    "FRESHNESS_WINDOW",
    "Session",
    "utcnow",
    "parse_timestamp",
    "format_timestamp",
    "to_decimal",
]
