"""
Core interfaces (ports).

Contracts that infrastructure adapters implement so the services stay
independent of redis, rq, the browser and the chat transport.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Callable, Optional, Protocol, Sequence

from labelbot.core.models import LabelJob, LabelRecord, LabelStats, Session, SessionJob, Shipment


class KeyValueStore(ABC):
    """String values addressed by key, with an atomic read-modify-write."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored value or ``None`` when the key is absent."""
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Overwrite the value stored under ``key``."""
        ...

    @abstractmethod
    def update(self, key: str, mutate: Callable[[Optional[str]], str]) -> str:
        """
        Replace the value of ``key`` with ``mutate(current)`` atomically.

        ``mutate`` may be called more than once when a concurrent writer
        wins the race, so it must not have side effects.
        """
        ...


class SessionAcquirer(ABC):
    """Turns credentials into an authenticated portal session."""

    @abstractmethod
    def acquire(self, username: str, password: str) -> Session:
        """
        Log in and capture the session.

        Raises:
            AccountError: ``CANNOT_LOGIN`` when the portal rejects the login.
        """
        ...


class Notifier(ABC):
    """Delivers results back to whoever requested a label."""

    @abstractmethod
    def send_message(self, requester_ref: str, text: str) -> None:
        ...

    @abstractmethod
    def send_document(self, requester_ref: str, content: bytes, filename: str, caption: str) -> None:
        ...


class LabelLedger(ABC):
    """Append-only store of generated labels."""

    @abstractmethod
    def append(self, record: LabelRecord) -> LabelRecord:
        """Persist ``record`` and return it with its assigned id."""
        ...

    @abstractmethod
    def query(self, start: datetime, end: datetime) -> list[LabelRecord]:
        """Records whose ``created_at`` falls in ``[start, end)``."""
        ...

    @abstractmethod
    def stats(self, day: date, now: Optional[datetime] = None) -> LabelStats:
        """Aggregate usage from the start of ``day`` until ``now``."""
        ...


class JobDispatcher(ABC):
    """Hands jobs to the background queues."""

    @abstractmethod
    def enqueue_session_job(self, job: SessionJob) -> str:
        """Queue a session refresh and return the job id."""
        ...

    @abstractmethod
    def enqueue_label_job(self, job: LabelJob) -> str:
        """Queue a label generation and return the job id."""
        ...


class ErrorExplainer(Protocol):
    """Produces a short human readable explanation for a failure."""

    def explain(self, error_text: str) -> str: ...


class ShipmentExtractor(Protocol):
    """Turns one spreadsheet row into a validated shipment."""

    def extract(self, header: Sequence[str], record: Sequence[str]) -> Shipment: ...


__all__ = [
    "KeyValueStore",
    "SessionAcquirer",
    "Notifier",
    "LabelLedger",
    "JobDispatcher",
    "ErrorExplainer",
    "ShipmentExtractor",
]
