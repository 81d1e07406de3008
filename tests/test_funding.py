"""Tests for postage purchases and the balance top-up sweep."""

from __future__ import annotations

import unittest
from decimal import Decimal

import requests

from labelbot.config.constants import PURCHASE_POSTAGE_PATH
from labelbot.config.models import FundingConfig, PortalConfig
from labelbot.core.exceptions import FundingError
from labelbot.core.services import BalanceTopUp, FundingClient, SessionStore
from labelbot.core.services.funding import Purchase
from labelbot.infrastructure.http import PortalClient
from labelbot.infrastructure.storage import InMemoryKeyValueStore

from tests.helpers import NOW, FakeHttp, FakeLogger, FakeResponse, make_session


class FixedRandom:
    def __init__(self, value: int):
        self.value = value
        self.calls: list[tuple[int, int]] = []

    def randint(self, low: int, high: int) -> int:
        self.calls.append((low, high))
        return self.value


class FakeFunding:
    def __init__(self, failures: dict[str, str] | None = None, balance: str | None = "250"):
        self.failures = failures or {}
        self.balance = balance
        self.calls: list[tuple[str, int]] = []

    def purchase(self, session, amount: int) -> Purchase:
        self.calls.append((session.username, amount))
        if session.username in self.failures:
            raise FundingError(self.failures[session.username])
        return Purchase(
            username=session.username,
            amount=amount,
            balance=Decimal(self.balance) if self.balance is not None else None,
            control_total=Decimal("2000"),
        )


class FundingClientTests(unittest.TestCase):

    def _client(self, http: FakeHttp) -> FundingClient:
        portal = PortalClient(PortalConfig(), http_factory=lambda: http, logger=FakeLogger())
        return FundingClient(portal, logger=FakeLogger())

    def test_successful_purchase(self) -> None:
        http = FakeHttp([FakeResponse({
            "PurchaseStatus": "Success",
            "info": {"PostageBalance": {"AvailablePostage": 150.5, "ControlTotal": 1000}},
        })])

        purchase = self._client(http).purchase(make_session("alice", control_total="900"), 50)

        self.assertEqual(purchase.balance, Decimal("150.5"))
        self.assertEqual(purchase.control_total, Decimal("1000"))
        method, url, body = http.calls[0]
        self.assertEqual(method, "POST")
        self.assertTrue(url.endswith(PURCHASE_POSTAGE_PATH))
        self.assertEqual(body["PurchaseAmount"], 50)
        self.assertEqual(body["ControlTotal"], 900.0)

    def test_rejected_purchase(self) -> None:
        http = FakeHttp([FakeResponse({"PurchaseStatus": "Rejected", "ErrorDescription": "Card declined"})])

        with self.assertRaises(FundingError) as ctx:
            self._client(http).purchase(make_session(), 20)
        self.assertEqual(ctx.exception.reason, "Card declined")

    def test_transport_failure(self) -> None:
        http = FakeHttp([requests.Timeout("timed out")])

        with self.assertRaises(FundingError) as ctx:
            self._client(http).purchase(make_session(), 20)
        self.assertIn("Unable to fund account", ctx.exception.reason)


class BalanceTopUpTests(unittest.TestCase):

    def setUp(self) -> None:
        self.sessions = SessionStore(InMemoryKeyValueStore(), clock=lambda: NOW, logger=FakeLogger())

    def _sweep(self, funding: FakeFunding, rng: FixedRandom | None = None) -> BalanceTopUp:
        return BalanceTopUp(
            self.sessions,
            funding,
            FundingConfig(balance_floor=500, min_amount=10, max_amount=500),
            rng=rng or FixedRandom(100),
            logger=FakeLogger(),
        )

    def test_funds_every_session_when_below_floor(self) -> None:
        self.sessions.set_for_username("alice", make_session("alice", balance="100"))
        self.sessions.set_for_username("bob", make_session("bob", balance="150"))
        funding = FakeFunding()
        rng = FixedRandom(42)

        report = self._sweep(funding, rng).run()

        self.assertTrue(report.triggered)
        self.assertEqual(report.total_balance, Decimal("250"))
        self.assertEqual(funding.calls, [("alice", 42), ("bob", 42)])
        self.assertEqual(rng.calls, [(10, 500), (10, 500)])
        self.assertEqual(report.funded, ["alice", "bob"])
        self.assertEqual(self.sessions.get("alice").balance, Decimal("250"))
        self.assertEqual(self.sessions.get("bob").control_total, Decimal("2000"))

    def test_no_purchase_at_or_above_floor(self) -> None:
        self.sessions.set_for_username("alice", make_session("alice", balance="300"))
        self.sessions.set_for_username("bob", make_session("bob", balance="200"))
        funding = FakeFunding()

        report = self._sweep(funding).run()

        self.assertFalse(report.triggered)
        self.assertEqual(funding.calls, [])

    def test_failure_does_not_stop_the_sweep(self) -> None:
        for name in ("alice", "bob", "carol"):
            self.sessions.set_for_username(name, make_session(name, balance="10"))
        funding = FakeFunding(failures={"bob": "Card declined"})

        report = self._sweep(funding).run()

        self.assertEqual([name for name, _ in funding.calls], ["alice", "bob", "carol"])
        self.assertEqual(report.funded, ["alice", "carol"])
        self.assertEqual(report.failed, {"bob": "Card declined"})
        self.assertEqual(self.sessions.get("bob").balance, Decimal("10"))

    def test_unknown_purchase_balance_keeps_snapshot(self) -> None:
        self.sessions.set_for_username("alice", make_session("alice", balance="10"))

        report = self._sweep(FakeFunding(balance=None)).run()

        self.assertEqual(report.funded, ["alice"])
        self.assertEqual(self.sessions.get("alice").balance, Decimal("10"))

    def test_empty_pool_triggers_without_purchases(self) -> None:
        funding = FakeFunding()

        report = self._sweep(funding).run()

        self.assertTrue(report.triggered)
        self.assertEqual(funding.calls, [])


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
