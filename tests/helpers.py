"""Shared fakes and sample data for the test-suite."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Optional

import requests

from labelbot.core.interfaces import JobDispatcher, Notifier, SessionAcquirer
from labelbot.core.models import LabelJob, RenderedLabel, Session, SessionJob, Shipment, validate_shipment

NOW = datetime(2024, 6, 3, 12, 0, 0, tzinfo=timezone.utc)


def shipment_data(**to_overrides: Any) -> dict[str, Any]:
    to = {
        "recipient_name": "Jane Roe",
        "recipient_phone": "5551234567",
        "recipient_postcode": "93710-3610",
        "address1": "12 Elm St",
        "city": "Fresno",
        "state": "ca",
        "weight_lb": 2.5,
        "length_in": 10,
        "width_in": 8,
        "height_in": 4,
        "mail_class": "USGA",
    }
    to.update(to_overrides)
    return {
        "From": {
            "FullName": "John Smith Doe",
            "Address1": "1 Main St",
            "City": "Ontario",
            "State": "CA",
            "ZIPCode": "91762",
            "PhoneNumber": "5550001111",
        },
        "To": to,
    }


def make_shipment(**to_overrides: Any) -> Shipment:
    return validate_shipment(shipment_data(**to_overrides))


def make_session(
    username: str = "alice",
    *,
    age: timedelta = timedelta(minutes=1),
    balance: Optional[str] = "100",
    control_total: Optional[str] = "900",
    now: datetime = NOW,
) -> Session:
    return Session(
        username=username,
        headers={"cookie": f"user-info=custid=1&uid={username}"},
        created_at=now - age,
        customer_id="cust-1",
        user_id=f"uid-{username}",
        balance=Decimal(balance) if balance is not None else None,
        control_total=Decimal(control_total) if control_total is not None else None,
    )


class FakeResponse:
    def __init__(self, data: Any = None, *, content: bytes = b"", status_code: int = 200):
        self._data = data
        self.content = content
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}")

    def json(self) -> Any:
        if isinstance(self._data, Exception):
            raise self._data
        return self._data


class FakeHttp:
    """Stands in for ``requests.Session``; replays queued responses."""

    def __init__(self, responses: list[Any]):
        self._responses = list(responses)
        self.calls: list[tuple[str, str, Any]] = []
        self.headers: dict[str, str] = {}
        self.proxies: dict[str, str] = {}

    def __enter__(self) -> "FakeHttp":
        return self

    def __exit__(self, *exc: Any) -> None:
        return None

    def _next(self) -> FakeResponse:
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def post(self, url: str, data: Any = None, files: Any = None, timeout: Any = None) -> FakeResponse:
        body = json.loads(data) if isinstance(data, str) else data
        self.calls.append(("POST", url, body if files is None else {"data": data, "files": files}))
        return self._next()

    def get(self, url: str, timeout: Any = None) -> FakeResponse:
        self.calls.append(("GET", url, None))
        return self._next()


class FakeAcquirer(SessionAcquirer):
    def __init__(self, result: Any):
        self.result = result
        self.calls: list[tuple[str, str]] = []

    def acquire(self, username: str, password: str) -> Session:
        self.calls.append((username, password))
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


class FakeDispatcher(JobDispatcher):
    def __init__(self):
        self.session_jobs: list[SessionJob] = []
        self.label_jobs: list[LabelJob] = []

    def enqueue_session_job(self, job: SessionJob) -> str:
        self.session_jobs.append(job)
        return f"session-{len(self.session_jobs)}"

    def enqueue_label_job(self, job: LabelJob) -> str:
        self.label_jobs.append(job)
        return f"label-{len(self.label_jobs)}"


class FakeNotifier(Notifier):
    def __init__(self):
        self.messages: list[tuple[str, str]] = []
        self.documents: list[tuple[str, bytes, str, str]] = []

    def send_message(self, requester_ref: str, text: str) -> None:
        self.messages.append((requester_ref, text))

    def send_document(self, requester_ref: str, content: bytes, filename: str, caption: str) -> None:
        self.documents.append((requester_ref, content, filename, caption))


class FakeExplainer:
    def __init__(self, answer: str = "The account ran out of postage."):
        self.answer = answer
        self.calls: list[str] = []

    def explain(self, error_text: str) -> str:
        self.calls.append(error_text)
        return self.answer


class FakeProtocol:
    def __init__(self, result: Any = None):
        self.result = result or RenderedLabel(
            content=b"%PDF-1.4", filename="Ground-9400.pdf", tracking_number="9400", mail_class="USGA"
        )
        self.calls: list[tuple[Shipment, Session]] = []

    def create_label(self, shipment: Shipment, session: Session) -> RenderedLabel:
        self.calls.append((shipment, session))
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


class FakeLogger:
    """Collects log calls instead of printing them."""

    def __init__(self):
        self.records: list[tuple[str, str, dict[str, Any]]] = []

    def bind(self, **context: Any) -> "FakeLogger":
        return self

    def _record(self, level: str, message: str, extra: dict[str, Any]) -> None:
        self.records.append((level, message, extra))

    def debug(self, message: str, **extra: Any) -> None:
        self._record("debug", message, extra)

    def info(self, message: str, **extra: Any) -> None:
        self._record("info", message, extra)

    def success(self, message: str, **extra: Any) -> None:
        self._record("success", message, extra)

    def warning(self, message: str, **extra: Any) -> None:
        self._record("warning", message, extra)

    def error(self, message: str, **extra: Any) -> None:
        self._record("error", message, extra)

    def exception(self, message: str, **extra: Any) -> None:
        self._record("exception", message, extra)

    def messages(self, level: str) -> list[str]:
        return [message for lvl, message, _ in self.records if lvl == level]
