"""Registry of acquired portal sessions and the active-session rule."""

from __future__ import annotations

import json
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable, Iterable, Optional

from labelbot.config.constants import SESSIONS_KEY
from labelbot.core.exceptions import StoreException
from labelbot.core.interfaces import KeyValueStore
from labelbot.core.models import FRESHNESS_WINDOW, Session, utcnow
from labelbot.infrastructure.logging import get_logger


class SessionStore:
    """
    Sessions keyed by account username, at most one per username.

    A session is fresh while younger than ``fresh_for``; the active session
    is the newest fresh one.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        key: str = SESSIONS_KEY,
        fresh_for: timedelta = FRESHNESS_WINDOW,
        clock: Callable[[], datetime] = utcnow,
        logger=None,
    ):
        self._store = store
        self._key = key
        self.fresh_for = fresh_for
        self._clock = clock
        self.logger = (logger or get_logger()).bind(component="sessions")

    def _decode(self, raw: Optional[str]) -> list[Session]:
        if raw is None:
            return []
        try:
            return [Session.from_dict(item) for item in json.loads(raw)]
        except (ValueError, TypeError, KeyError) as e:
            raise StoreException("Stored sessions collection is corrupt", details={"key": self._key}, cause=e) from e

    @staticmethod
    def _encode(sessions: Iterable[Session]) -> str:
        return json.dumps([session.to_dict() for session in sessions])

    def list(self) -> list[Session]:
        return self._decode(self._store.get(self._key))

    def get(self, username: str) -> Optional[Session]:
        return next((s for s in self.list() if s.username == username), None)

    def set_for_username(self, username: str, session: Session) -> Session:
        """Insert or replace the session stored for ``username``."""

        if session.username != username:
            raise ValueError(f"session belongs to {session.username!r}, not {username!r}")

        def mutate(raw: Optional[str]) -> str:
            sessions = self._decode(raw)
            for index, existing in enumerate(sessions):
                if existing.username == username:
                    sessions[index] = session
                    break
            else:
                sessions.append(session)
            return self._encode(sessions)

        self._store.update(self._key, mutate)
        self.logger.debug("Session stored", account=username)
        return session

    def update_funds(self, username: str, balance: Optional[Decimal], control_total: Optional[Decimal]) -> Optional[Session]:
        """Refresh the balance snapshot of a stored session, if it is still stored."""

        updated: Optional[Session] = None

        def mutate(raw: Optional[str]) -> str:
            nonlocal updated
            updated = None
            sessions = self._decode(raw)
            for index, existing in enumerate(sessions):
                if existing.username == username:
                    updated = existing.with_funds(balance, control_total)
                    sessions[index] = updated
            return self._encode(sessions)

        self._store.update(self._key, mutate)
        return updated

    def delete(self, username: str) -> bool:
        removed = False

        def mutate(raw: Optional[str]) -> str:
            nonlocal removed
            sessions = self._decode(raw)
            remaining = [s for s in sessions if s.username != username]
            removed = len(remaining) != len(sessions)
            return self._encode(remaining)

        self._store.update(self._key, mutate)
        if removed:
            self.logger.info("Session deleted", account=username)
        return removed

    def clear(self) -> None:
        self._store.set(self._key, self._encode([]))
        self.logger.info("Sessions cleared")

    def get_active(self, now: Optional[datetime] = None) -> Optional[Session]:
        """
        Return the most recently created fresh session.

        ``None`` means no session is usable right now; callers report it
        instead of waiting.
        """
        now = now or self._clock()
        ordered = sorted(self.list(), key=lambda s: s.created_at, reverse=True)
        for session in ordered:
            if session.is_fresh(now, self.fresh_for):
                return session
        return None

    def total_balance(self) -> Decimal:
        """Sum of known balances; unknown balances count as zero."""

        return sum((s.balance or Decimal("0") for s in self.list()), Decimal("0"))


__all__ = ["SessionStore"]
