"""Queue payloads and the outcome values returned by job handlers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional

from labelbot.core.exceptions import AccountErrorKind
from labelbot.core.models.shipment import Shipment, validate_shipment


@dataclass(frozen=True, slots=True)
class SessionJob:
    """Request to (re)acquire the session of one account."""

    username: str
    password: str = field(repr=False)

    def to_payload(self) -> dict[str, str]:
        return {"username": self.username, "password": self.password}

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "SessionJob":
        return cls(username=str(payload["username"]), password=str(payload["password"]))


@dataclass(frozen=True, slots=True)
class LabelJob:
    """Request to render one label and deliver it to a requester."""

    shipment: Shipment
    label_id: str
    requester_ref: str

    def to_payload(self) -> dict[str, Any]:
        return {
            "shipment": self.shipment.to_payload(),
            "labelId": self.label_id,
            "requesterRef": self.requester_ref,
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "LabelJob":
        return cls(
            shipment=validate_shipment(payload["shipment"]),
            label_id=str(payload["labelId"]),
            requester_ref=str(payload["requesterRef"]),
        )


class JobStatus(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True, slots=True)
class JobOutcome:
    """Result of one job handler invocation."""

    status: JobStatus
    message: str = ""
    kind: Optional[AccountErrorKind] = None
    account: Optional[str] = None
    file_id: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is JobStatus.SUCCEEDED

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "message": self.message,
            "kind": self.kind.value if self.kind else None,
            "account": self.account,
            "fileId": self.file_id,
        }


__all__ = ["SessionJob", "LabelJob", "JobStatus", "JobOutcome"]
