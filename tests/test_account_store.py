"""Tests for the account pool and its bootstrap file."""

from __future__ import annotations

import json
import pathlib
import tempfile
import unittest

from labelbot.core.exceptions import AccountError, AccountErrorKind, ValidationError
from labelbot.core.models import Account
from labelbot.core.services import AccountStore, bootstrap_accounts, read_accounts_file
from labelbot.infrastructure.storage import InMemoryKeyValueStore

from tests.helpers import FakeLogger


class AccountStoreTests(unittest.TestCase):
    """Behaviour of :class:`AccountStore` over an in-memory backend."""

    def setUp(self) -> None:
        self.backend = InMemoryKeyValueStore()
        self.logger = FakeLogger()
        self.store = AccountStore(self.backend, logger=self.logger)
        self.store.load([
            Account("alice", "pw-a"),
            Account("bob", "pw-b"),
            Account("carol", "pw-c", enabled=False),
        ])

    def test_list_without_collection_is_empty(self) -> None:
        store = AccountStore(InMemoryKeyValueStore(), logger=self.logger)

        self.assertEqual(store.list(), [])
        self.assertIn("No accounts found!", self.logger.messages("error"))

    def test_get_without_collection_raises(self) -> None:
        store = AccountStore(InMemoryKeyValueStore(), logger=self.logger)

        with self.assertRaises(AccountError) as ctx:
            store.get("alice")
        self.assertIs(ctx.exception.kind, AccountErrorKind.NO_ACCOUNTS_FOUND)

    def test_get_defaults_to_first_enabled(self) -> None:
        self.assertEqual(self.store.get().username, "alice")
        self.assertEqual(self.store.get("carol").enabled, False)
        self.assertIsNone(self.store.get("nobody"))

    def test_load_keeps_last_entry_per_username(self) -> None:
        loaded = self.store.load([Account("dan", "one"), Account("dan", "two")])

        self.assertEqual(len(loaded), 1)
        self.assertEqual(self.store.get("dan").password, "two")

    def test_add_replaces_and_reenables(self) -> None:
        self.store.add("carol", "new-pw")

        carol = self.store.get("carol")
        self.assertTrue(carol.enabled)
        self.assertEqual(carol.password, "new-pw")
        self.assertEqual(sum(1 for a in self.store.list() if a.username == "carol"), 1)

    def test_add_requires_credentials(self) -> None:
        with self.assertRaises(ValueError):
            self.store.add("eve", "")

    def test_delete_reports_whether_removed(self) -> None:
        self.assertTrue(self.store.delete("bob"))
        self.assertFalse(self.store.delete("bob"))
        self.assertEqual([a.username for a in self.store.list()], ["alice", "carol"])

    def test_disable_is_idempotent(self) -> None:
        first = self.store.disable("alice")
        second = self.store.disable("alice")

        self.assertFalse(first.enabled)
        self.assertFalse(second.enabled)
        self.assertIsNone(self.store.disable("ghost"))

    def test_rotate_returns_next_enabled(self) -> None:
        replacement = self.store.rotate("alice")

        self.assertEqual(replacement.username, "bob")
        self.assertFalse(self.store.get("alice").enabled)

    def test_rotate_without_enabled_accounts_raises(self) -> None:
        self.store.disable("alice")

        with self.assertRaises(AccountError) as ctx:
            self.store.rotate("bob")
        self.assertIs(ctx.exception.kind, AccountErrorKind.NO_VALID_ACCOUNT)

    def test_passwords_are_persisted_but_not_logged(self) -> None:
        self.store.add("dave@example.com", "secret")

        stored = json.loads(self.backend.get("accounts"))
        self.assertIn({"username": "dave@example.com", "password": "secret", "enabled": True}, stored)
        logged = " ".join(str(extra) for _, _, extra in self.logger.records)
        self.assertNotIn("secret", logged)


class BootstrapTests(unittest.TestCase):
    """Loading the account pool from its JSON file."""

    def _write(self, content: str) -> pathlib.Path:
        with tempfile.NamedTemporaryFile("w+", encoding="utf-8", suffix=".json", delete=False) as handle:
            handle.write(content)
            path = pathlib.Path(handle.name)
        self.addCleanup(path.unlink, missing_ok=True)
        return path

    def test_bootstrap_replaces_pool(self) -> None:
        path = self._write(json.dumps([
            {"username": "alice", "password": "a"},
            {"username": "bob", "password": "b", "enabled": False},
        ]))
        store = AccountStore(InMemoryKeyValueStore(), logger=FakeLogger())
        store.load([Account("old", "x")])

        loaded = bootstrap_accounts(store, path, logger=FakeLogger())

        self.assertEqual([a.username for a in loaded], ["alice", "bob"])
        self.assertIsNone(store.get("old"))
        self.assertTrue(store.get("alice").enabled)
        self.assertFalse(store.get("bob").enabled)

    def test_missing_file_means_no_accounts(self) -> None:
        with self.assertRaises(AccountError) as ctx:
            read_accounts_file("/nonexistent/accounts.json")
        self.assertIs(ctx.exception.kind, AccountErrorKind.NO_ACCOUNTS_FOUND)

    def test_invalid_json_means_no_accounts(self) -> None:
        path = self._write("[{not json")

        with self.assertRaises(AccountError) as ctx:
            read_accounts_file(path)
        self.assertIs(ctx.exception.kind, AccountErrorKind.NO_ACCOUNTS_FOUND)

    def test_records_without_password_are_rejected(self) -> None:
        path = self._write(json.dumps([{"username": "alice"}]))

        with self.assertRaises(ValidationError) as ctx:
            read_accounts_file(path)
        self.assertIn("0.password", ctx.exception.errors)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
