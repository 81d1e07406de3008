"""Tests for requester notifications."""

from __future__ import annotations

import unittest

import requests

from labelbot.config.models import TelegramConfig
from labelbot.infrastructure.notify import LogNotifier, NotificationException, TelegramNotifier

from tests.helpers import FakeHttp, FakeLogger, FakeResponse


class TelegramNotifierTests(unittest.TestCase):

    def _notifier(self, http: FakeHttp) -> TelegramNotifier:
        config = TelegramConfig(bot_token="123:abc", api_url="https://api.telegram.org/")
        return TelegramNotifier(config, http=http, logger=FakeLogger())

    def test_requires_token(self) -> None:
        with self.assertRaises(ValueError):
            TelegramNotifier(TelegramConfig(), logger=FakeLogger())

    def test_send_message(self) -> None:
        http = FakeHttp([FakeResponse({"ok": True, "result": {"message_id": 1}})])

        self._notifier(http).send_message("chat-42", "No active session found, please try again later")

        method, url, body = http.calls[0]
        self.assertEqual(url, "https://api.telegram.org/bot123:abc/sendMessage")
        self.assertEqual(body, {"chat_id": "chat-42", "text": "No active session found, please try again later"})

    def test_send_document_uploads_pdf(self) -> None:
        http = FakeHttp([FakeResponse({"ok": True, "result": {}})])

        self._notifier(http).send_document("chat-42", b"%PDF", "Ground-9400.pdf", caption="label-1-Ground-9400.pdf")

        _, url, body = http.calls[0]
        self.assertTrue(url.endswith("/sendDocument"))
        self.assertEqual(body["data"], {"chat_id": "chat-42", "caption": "label-1-Ground-9400.pdf"})
        self.assertEqual(body["files"], {"document": ("Ground-9400.pdf", b"%PDF", "application/pdf")})

    def test_rejection_raises(self) -> None:
        http = FakeHttp([FakeResponse({"ok": False, "error_code": 400, "description": "chat not found"})])

        with self.assertRaises(NotificationException) as ctx:
            self._notifier(http).send_message("chat-0", "hello")
        self.assertEqual(ctx.exception.details["description"], "chat not found")

    def test_transport_error_raises(self) -> None:
        http = FakeHttp([requests.ConnectionError("unreachable")])

        with self.assertRaises(NotificationException):
            self._notifier(http).send_message("chat-42", "hello")


class LogNotifierTests(unittest.TestCase):

    def test_writes_to_log(self) -> None:
        logger = FakeLogger()
        notifier = LogNotifier(logger=logger)

        notifier.send_message("chat-42", "hello")
        notifier.send_document("chat-42", b"1234", "Ground-1.pdf", caption="caption")

        self.assertEqual(logger.messages("info"), ["Notification", "Document ready"])
        self.assertEqual(logger.records[1][2]["size"], 4)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
