"""Domain models."""

from labelbot.core.models.account import Account, AccountRecord, enabled_accounts, parse_accounts
from labelbot.core.models.jobs import JobOutcome, JobStatus, LabelJob, SessionJob
from labelbot.core.models.label import LabelRecord, LabelStats, RenderedLabel
from labelbot.core.models.session import FRESHNESS_WINDOW, Session, format_timestamp, to_decimal, utcnow
from labelbot.core.models.shipment import GROUND, Recipient, Sender, Shipment, validate_shipment

__all__ = [
    "Account",
    "AccountRecord",
    "enabled_accounts",
    "parse_accounts",
    "JobOutcome",
    "JobStatus",
    "LabelJob",
    "SessionJob",
    "LabelRecord",
    "LabelStats",
    "RenderedLabel",
    "FRESHNESS_WINDOW",
    "Session",
    "utcnow",
    "format_timestamp",
    "to_decimal",
    "GROUND",
    "Recipient",
    "Sender",
    "Shipment",
    "validate_shipment",
]
