"""Startup loading of the account pool."""

from __future__ import annotations

import json
from pathlib import Path

from labelbot.core.exceptions import AccountError, AccountErrorKind
from labelbot.core.models import Account, parse_accounts
from labelbot.core.services.account_store import AccountStore
from labelbot.infrastructure.logging import get_logger


def read_accounts_file(path: Path | str) -> list[Account]:
    """
    Read and validate the accounts bootstrap file.

    Raises:
        AccountError: ``NO_ACCOUNTS_FOUND`` when the file is missing or not JSON.
        ValidationError: When the JSON is not an array of account records.
    """
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise AccountError(
            AccountErrorKind.NO_ACCOUNTS_FOUND,
            f"Accounts file not found: {path}",
            cause=e,
        ) from e
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise AccountError(
            AccountErrorKind.NO_ACCOUNTS_FOUND,
            f"Accounts file is not valid JSON: {path}",
            details={"line": e.lineno},
            cause=e,
        ) from e
    return parse_accounts(data)


def bootstrap_accounts(store: AccountStore, path: Path | str, *, logger=None) -> list[Account]:
    """Replace the stored account pool with the contents of ``path``."""

    log = (logger or get_logger()).bind(component="bootstrap")
    accounts = read_accounts_file(path)
    loaded = store.load(accounts)
    log.success("Account pool bootstrapped", total=len(loaded), enabled=sum(a.enabled for a in loaded))
    return loaded


__all__ = ["read_accounts_file", "bootstrap_accounts"]
