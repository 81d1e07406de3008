"""Tests for browser session acquisition."""

from __future__ import annotations

import unittest
from decimal import Decimal

from labelbot.config.constants import ACCOUNT_INFO_PATH
from labelbot.config.models import BrowserConfig, PortalConfig
from labelbot.core.exceptions import AccountError, AccountErrorKind
from labelbot.infrastructure.acquisition.browser_session import (
    BrowserSessionAcquirer,
    build_auth_headers,
    parse_user_info,
)
from labelbot.infrastructure.http import PortalClient

from tests.helpers import NOW, FakeHttp, FakeLogger, FakeResponse


class UserInfoCookieTests(unittest.TestCase):

    def test_parses_customer_and_user_ids(self) -> None:
        self.assertEqual(parse_user_info("custid=123&uid=456&name=x"), ("123", "456"))

    def test_does_not_match_inside_other_keys(self) -> None:
        self.assertEqual(parse_user_info("xcustid=1&fooid=2&uid=9"), (None, "9"))

    def test_missing_or_empty(self) -> None:
        self.assertEqual(parse_user_info(None), (None, None))
        self.assertEqual(parse_user_info("custid=&uid="), (None, None))

    def test_auth_headers_join_cookies(self) -> None:
        headers = build_auth_headers({"a": "1", "user-info": "uid=2"}, {"sec-ch-ua-mobile": "?0"})

        self.assertEqual(headers, {"cookie": "a=1; user-info=uid=2", "sec-ch-ua-mobile": "?0"})


class BrowserSessionAcquirerTests(unittest.TestCase):

    def _acquirer(self, cookies: dict, http: FakeHttp) -> BrowserSessionAcquirer:
        portal = PortalClient(PortalConfig(), http_factory=lambda: http, logger=FakeLogger())
        acquirer = BrowserSessionAcquirer(BrowserConfig(), portal, clock=lambda: NOW, logger=FakeLogger())
        self.browser_calls = []

        def fake_login(**kwargs):
            self.browser_calls.append(kwargs)
            return {"cookies": cookies, "url": "https://print.stamps.com/"}

        acquirer._login_in_browser = fake_login
        return acquirer

    def test_session_is_built_from_cookies_and_account_info(self) -> None:
        http = FakeHttp([FakeResponse({
            "ErrorCode": 0,
            "info": {"PostageBalance": {"AvailablePostage": 42.5, "ControlTotal": 700}},
        })])
        acquirer = self._acquirer({"user-info": "custid=77&uid=88", "sid": "abc"}, http)

        session = acquirer.acquire("alice", "pw")

        self.assertEqual((session.customer_id, session.user_id), ("77", "88"))
        self.assertEqual(session.balance, Decimal("42.5"))
        self.assertEqual(session.control_total, Decimal("700"))
        self.assertEqual(session.created_at, NOW)
        self.assertIn("sid=abc", session.headers["cookie"])
        self.assertTrue(http.calls[0][1].endswith(ACCOUNT_INFO_PATH))
        self.assertEqual(self.browser_calls[0]["data"]["username"], "alice")

    def test_unavailable_account_info_leaves_balance_unknown(self) -> None:
        http = FakeHttp([FakeResponse({"ErrorCode": 3})])
        acquirer = self._acquirer({"user-info": "custid=77&uid=88"}, http)

        session = acquirer.acquire("alice", "pw")

        self.assertIsNone(session.balance)

    def test_missing_user_id_means_login_failed(self) -> None:
        acquirer = self._acquirer({"sid": "abc"}, FakeHttp([]))

        with self.assertRaises(AccountError) as ctx:
            acquirer.acquire("alice", "wrong")

        self.assertIs(ctx.exception.kind, AccountErrorKind.CANNOT_LOGIN)
        self.assertEqual(ctx.exception.message, "Cannot login to carrier portal: alice")


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
