"""Registry of carrier portal credentials."""

from __future__ import annotations

import json
from typing import Iterable, Optional

from labelbot.config.constants import ACCOUNTS_KEY
from labelbot.core.exceptions import AccountError, AccountErrorKind, StoreException
from labelbot.core.interfaces import KeyValueStore
from labelbot.core.models import Account
from labelbot.infrastructure.logging import get_logger


class AccountStore:
    """
    Account pool kept as one serialised collection.

    Every write is a read-modify-write of the whole collection performed
    through :meth:`KeyValueStore.update`, so concurrent writers do not lose
    each other's changes.
    """

    def __init__(self, store: KeyValueStore, *, key: str = ACCOUNTS_KEY, logger=None):
        self._store = store
        self._key = key
        self.logger = (logger or get_logger()).bind(component="accounts")

    # ------------------------------------------------------------------ #
    # Serialisation
    # ------------------------------------------------------------------ #

    def _decode(self, raw: Optional[str]) -> Optional[list[Account]]:
        if raw is None:
            return None
        try:
            data = json.loads(raw)
            return [Account.from_dict(item) for item in data]
        except (ValueError, TypeError, KeyError) as e:
            raise StoreException("Stored accounts collection is corrupt", details={"key": self._key}, cause=e) from e

    @staticmethod
    def _encode(accounts: Iterable[Account]) -> str:
        return json.dumps([account.to_dict() for account in accounts])

    def _require(self, raw: Optional[str]) -> list[Account]:
        accounts = self._decode(raw)
        if accounts is None:
            raise AccountError(AccountErrorKind.NO_ACCOUNTS_FOUND)
        return accounts

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #

    def list(self) -> list[Account]:
        """All accounts, or an empty list when nothing was stored yet."""

        accounts = self._decode(self._store.get(self._key))
        if accounts is None:
            self.logger.error(AccountErrorKind.NO_ACCOUNTS_FOUND.default_message)
            return []
        return accounts

    def get(self, username: Optional[str] = None) -> Optional[Account]:
        """
        Look up one account.

        Without ``username`` the first enabled account is returned.

        Raises:
            AccountError: ``NO_ACCOUNTS_FOUND`` when no collection is stored.
        """
        accounts = self._require(self._store.get(self._key))
        if username is None:
            return next((a for a in accounts if a.enabled), None)
        return next((a for a in accounts if a.username == username), None)

    # ------------------------------------------------------------------ #
    # Writes
    # ------------------------------------------------------------------ #

    def load(self, accounts: Iterable[Account]) -> list[Account]:
        """Replace the whole collection, keeping one entry per username."""

        unique: dict[str, Account] = {}
        for account in accounts:
            unique[account.username] = account
        self._store.set(self._key, self._encode(unique.values()))
        self.logger.info("Accounts loaded", total=len(unique))
        return list(unique.values())

    def add(self, username: str, password: str) -> Account:
        """Add an enabled account, replacing an existing one with the same username."""

        if not username or not password:
            raise ValueError("username and password are required")
        account = Account(username=username, password=password, enabled=True)

        def mutate(raw: Optional[str]) -> str:
            accounts = [a for a in self._require(raw) if a.username != username]
            accounts.append(account)
            return self._encode(accounts)

        self._store.update(self._key, mutate)
        self.logger.info("Account added", account=account.masked_username())
        return account

    def delete(self, username: str) -> bool:
        removed = False

        def mutate(raw: Optional[str]) -> str:
            nonlocal removed
            accounts = self._require(raw)
            remaining = [a for a in accounts if a.username != username]
            removed = len(remaining) != len(accounts)
            return self._encode(remaining)

        self._store.update(self._key, mutate)
        if removed:
            self.logger.info("Account deleted", account=username)
        return removed

    def disable(self, username: str) -> Optional[Account]:
        """Mark an account disabled. Disabling twice is a no-op."""

        result: Optional[Account] = None

        def mutate(raw: Optional[str]) -> str:
            nonlocal result
            result = None
            updated = []
            for account in self._require(raw):
                if account.username == username:
                    account = account.disabled()
                    result = account
                updated.append(account)
            return self._encode(updated)

        self._store.update(self._key, mutate)
        if result is None:
            self.logger.warning("Cannot disable unknown account", account=username)
        else:
            self.logger.info("Account disabled", account=username)
        return result

    def rotate(self, username: str) -> Account:
        """
        Disable ``username`` and return the next enabled account.

        Raises:
            AccountError: ``NO_VALID_ACCOUNT`` when no enabled account remains.
        """
        self.disable(username)
        replacement = self.get()
        if replacement is None:
            raise AccountError(AccountErrorKind.NO_VALID_ACCOUNT, details={"rotated_from": username})
        self.logger.info("Account rotated", previous=username, current=replacement.username)
        return replacement


__all__ = ["AccountStore"]
