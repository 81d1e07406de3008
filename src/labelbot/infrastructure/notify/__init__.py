"""Requester notification transports."""

from labelbot.infrastructure.notify.telegram import LogNotifier, NotificationException, TelegramNotifier

__all__ = ["LogNotifier", "NotificationException", "TelegramNotifier"]
