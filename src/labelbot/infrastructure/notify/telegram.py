"""
Requester notifications.

Label requesters are chat ids of the Telegram bot the operators use;
``LogNotifier`` stands in when no bot token is configured.
"""

from __future__ import annotations

from typing import Any, Optional

import requests

from labelbot.config.models import TelegramConfig
from labelbot.core.exceptions import LabelBotException, wrap_exception
from labelbot.core.interfaces import Notifier
from labelbot.infrastructure.logging import get_logger


class NotificationException(LabelBotException):
    """A message could not be delivered to the requester."""
    pass


class TelegramNotifier(Notifier):
    """Client for the Telegram Bot API (messages and documents)."""

    def __init__(self, config: TelegramConfig, *, http: Optional[requests.Session] = None, logger=None):
        if not config.bot_token:
            raise ValueError("Telegram bot token is required")
        self.config = config
        self.base_url = f"{config.api_url.rstrip('/')}/bot{config.bot_token}"
        self.http = http or requests.Session()
        self.logger = (logger or get_logger()).bind(component="telegram")

    def _call(self, method: str, *, data: dict[str, Any], files: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        try:
            resp = self.http.post(f"{self.base_url}/{method}", data=data, files=files, timeout=self.config.timeout)
            payload = resp.json()
        except (requests.RequestException, ValueError) as e:
            raise wrap_exception(e, NotificationException, "Telegram request failed", method=method) from e
        if not payload.get("ok"):
            raise NotificationException(
                f"Telegram rejected {method}",
                details={"description": payload.get("description"), "error_code": payload.get("error_code")},
            )
        return payload.get("result") or {}

    def send_message(self, requester_ref: str, text: str) -> None:
        self._call("sendMessage", data={"chat_id": requester_ref, "text": text})
        self.logger.debug("Message sent", chat_id=requester_ref)

    def send_document(self, requester_ref: str, content: bytes, filename: str, caption: str) -> None:
        self._call(
            "sendDocument",
            data={"chat_id": requester_ref, "caption": caption},
            files={"document": (filename, content, "application/pdf")},
        )
        self.logger.info("Document sent", chat_id=requester_ref, file=filename)


class LogNotifier(Notifier):
    """Writes notifications to the log instead of a chat."""

    def __init__(self, logger=None):
        self.logger = (logger or get_logger()).bind(component="notifier")

    def send_message(self, requester_ref: str, text: str) -> None:
        self.logger.info("Notification", requester=requester_ref, text=text)

    def send_document(self, requester_ref: str, content: bytes, filename: str, caption: str) -> None:
        self.logger.info("Document ready", requester=requester_ref, file=filename, size=len(content), caption=caption)


__all__ = ["NotificationException", "TelegramNotifier", "LogNotifier"]
