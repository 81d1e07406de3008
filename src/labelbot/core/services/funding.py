"""Postage purchases and the periodic balance top-up sweep."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

import requests

from labelbot.config.constants import PURCHASE_POSTAGE_PATH
from labelbot.config.models import FundingConfig
from labelbot.core.exceptions import FundingError
from labelbot.core.models import Session, to_decimal
from labelbot.core.services.session_store import SessionStore
from labelbot.infrastructure.http.portal_client import PortalClient, postage_balance
from labelbot.infrastructure.logging import get_logger


@dataclass(frozen=True, slots=True)
class Purchase:
    """Result of an accepted postage purchase."""

    username: str
    amount: int
    balance: Optional[Decimal]
    control_total: Optional[Decimal]


class FundingClient:
    """Sends one postage purchase for a session."""

    def __init__(self, portal: PortalClient, *, logger=None):
        self.portal = portal
        self.logger = (logger or get_logger()).bind(component="funding")

    def purchase(self, session: Session, amount: int) -> Purchase:
        """
        Buy ``amount`` dollars of postage.

        Raises:
            FundingError: When the portal refuses or the call fails.
        """
        payload = {
            "PurchaseAmount": amount,
            "ControlTotal": float(session.control_total) if session.control_total is not None else None,
            "ClientFingerprint": "",
        }
        try:
            with self.portal.open(session.headers) as http:
                data = self.portal.post_json(http, PURCHASE_POSTAGE_PATH, payload)
        except (requests.RequestException, ValueError) as e:
            raise FundingError(f"Unable to fund account: {e}", details={"account": session.username}, cause=e) from e

        if data.get("PurchaseStatus") != "Success":
            raise FundingError(
                data.get("ErrorDescription") or "Unable to fund account",
                details={"account": session.username, "error_code": data.get("ErrorCode")},
            )

        balance = postage_balance(data)
        return Purchase(
            username=session.username,
            amount=amount,
            balance=to_decimal(balance.get("AvailablePostage")),
            control_total=to_decimal(balance.get("ControlTotal")),
        )


@dataclass
class TopUpReport:
    """Summary of one sweep."""

    total_balance: Decimal
    triggered: bool
    funded: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)


class BalanceTopUp:
    """Funds every session when the pooled balance drops below the floor."""

    def __init__(
        self,
        sessions: SessionStore,
        funding: FundingClient,
        config: Optional[FundingConfig] = None,
        *,
        rng: Optional[random.Random] = None,
        logger=None,
    ):
        self.sessions = sessions
        self.funding = funding
        self.config = config or FundingConfig()
        self._rng = rng or random.Random()
        self.logger = (logger or get_logger()).bind(component="topup")

    def run(self) -> TopUpReport:
        sessions = self.sessions.list()
        total = sum((s.balance or Decimal("0") for s in sessions), Decimal("0"))
        if total >= self.config.balance_floor:
            self.logger.debug("Balance above floor", total=total, floor=self.config.balance_floor)
            return TopUpReport(total_balance=total, triggered=False)

        self.logger.info("Balance below floor, topping up", total=total, sessions=len(sessions))
        report = TopUpReport(total_balance=total, triggered=True)
        for session in sessions:
            amount = self._rng.randint(self.config.min_amount, self.config.max_amount)
            try:
                purchase = self.funding.purchase(session, amount)
            except FundingError as e:
                self.logger.error("Top-up failed", account=session.username, amount=amount, error=e.reason)
                report.failed[session.username] = e.reason
                continue
            if purchase.balance is not None:
                self.sessions.update_funds(session.username, purchase.balance, purchase.control_total)
            report.funded.append(session.username)
            self.logger.success("Account funded", account=session.username, amount=amount, balance=purchase.balance)
        return report


__all__ = ["Purchase", "FundingClient", "TopUpReport", "BalanceTopUp"]
