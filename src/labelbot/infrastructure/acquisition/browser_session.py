"""
Browser driven login to the carrier portal.

Logs in with botasaurus, captures the cookies the portal issues and reads
the account snapshot over HTTP with the captured auth headers.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Callable, Mapping, Optional

from botasaurus.browser import Driver, Wait, browser

from labelbot.config.constants import CLIENT_HINT_HEADERS, USER_INFO_COOKIE
from labelbot.config.models import BrowserConfig
from labelbot.core.exceptions import AccountError, AccountErrorKind
from labelbot.core.interfaces import SessionAcquirer
from labelbot.core.models import Session, to_decimal, utcnow
from labelbot.infrastructure.http.portal_client import PortalClient, postage_balance
from labelbot.infrastructure.logging import get_logger

_CUSTID = re.compile(r"(?:^|&)custid=([^&]*)")
_UID = re.compile(r"(?:^|&)uid=([^&]*)")


def parse_user_info(value: Optional[str]) -> tuple[Optional[str], Optional[str]]:
    """Return ``(customer_id, user_id)`` from the ``user-info`` cookie."""

    if not value:
        return None, None
    custid = _CUSTID.search(value)
    uid = _UID.search(value)
    return (custid.group(1) or None) if custid else None, (uid.group(1) or None) if uid else None


def build_auth_headers(cookies: Mapping[str, str], client_hints: Optional[Mapping[str, str]] = None) -> dict[str, str]:
    headers = {"cookie": "; ".join(f"{name}={value}" for name, value in cookies.items())}
    headers.update(client_hints or CLIENT_HINT_HEADERS)
    return headers


class BrowserSessionAcquirer(SessionAcquirer):
    """Acquires portal sessions by logging in with a real browser."""

    def __init__(
        self,
        config: BrowserConfig,
        portal: PortalClient,
        *,
        clock: Callable[[], datetime] = utcnow,
        logger=None,
    ):
        self.config = config
        self.portal = portal
        self._clock = clock
        self.logger = (logger or get_logger()).bind(component="browser_login")

    @staticmethod
    @browser(
        reuse_driver=False,
        raise_exception=True,
        close_on_crash=True,
        block_images=True,
        output=None,
        wait_for_complete_page_load=True,
    )
    def _login_in_browser(driver: Driver, data: Mapping[str, Any]) -> dict[str, Any]:
        """Fill the sign-in form and return the cookies set afterwards."""

        selectors = data["selectors"]
        driver.get(data["login_url"])
        driver.type(selectors["username_input"], data["username"], wait=data["login_timeout"])
        driver.short_random_sleep()
        driver.type(selectors["password_input"], data["password"], wait=Wait.LONG)
        driver.short_random_sleep()
        driver.click(selectors["login_button"], wait=Wait.LONG)
        driver.sleep(data["settle_seconds"])
        return {"cookies": driver.get_cookies_dict(), "url": driver.current_url}

    def acquire(self, username: str, password: str) -> Session:
        if not username or not password:
            raise ValueError("username and password are required")

        log = self.logger.bind(account=username)
        log.info("Opening browser for login")
        result = self._login_in_browser(
            headless=self.config.headless,
            proxy=self.portal.config.proxy_url,
            data={
                "login_url": self.config.login_url,
                "selectors": self.config.selectors,
                "username": username,
                "password": password,
                "settle_seconds": self.config.settle_seconds,
                "login_timeout": self.config.login_timeout,
            },
        )

        cookies: Mapping[str, str] = result.get("cookies") or {}
        customer_id, user_id = parse_user_info(cookies.get(USER_INFO_COOKIE))
        if not user_id:
            raise AccountError(
                AccountErrorKind.CANNOT_LOGIN,
                f"{AccountErrorKind.CANNOT_LOGIN.default_message}: {username}",
                details={"url": result.get("url")},
            )

        headers = build_auth_headers(cookies, self.portal.config.client_hints)
        balance = postage_balance(self.portal.fetch_account_info(headers))
        session = Session(
            username=username,
            headers=headers,
            created_at=self._clock(),
            customer_id=customer_id,
            user_id=user_id,
            balance=to_decimal(balance.get("AvailablePostage")),
            control_total=to_decimal(balance.get("ControlTotal")),
        )
        log.success("Session acquired", user_id=user_id, balance=session.balance)
        return session


__all__ = ["BrowserSessionAcquirer", "parse_user_info", "build_auth_headers"]
