"""
HTTP access to the carrier portal's XHR endpoints.

Every call reuses the captured browser auth headers plus the fixed XHR
headers the portal expects from its own web client.
"""

from __future__ import annotations

import json
from typing import Any, Callable, Mapping, Optional

import requests

from labelbot.config.constants import ACCOUNT_INFO_PATH, XHR_HEADERS
from labelbot.config.models import PortalConfig
from labelbot.infrastructure.logging import get_logger


class PortalClient:
    """Builds authenticated HTTP sessions and performs portal calls."""

    def __init__(
        self,
        config: Optional[PortalConfig] = None,
        *,
        http_factory: Callable[[], requests.Session] = requests.Session,
        logger=None,
    ):
        self.config = config or PortalConfig()
        self._http_factory = http_factory
        self.logger = (logger or get_logger()).bind(component="portal")

    def url(self, path: str) -> str:
        return f"{self.config.base_url}{path}"

    def open(self, auth_headers: Mapping[str, str]) -> requests.Session:
        """Return an HTTP session carrying ``auth_headers`` and the XHR headers."""

        http = self._http_factory()
        http.headers.update(dict(auth_headers))
        http.headers.update(XHR_HEADERS)
        http.headers["Referer"] = self.config.referer
        proxies = self.config.proxies
        if proxies:
            http.proxies.update(proxies)
        return http

    def post_json(self, http: requests.Session, path: str, payload: Optional[Mapping[str, Any]] = None) -> dict[str, Any]:
        """
        POST a JSON encoded body and decode the JSON answer.

        Raises:
            requests.RequestException: On transport or HTTP status errors.
            ValueError: When the answer is not a JSON object.
        """
        body = json.dumps(payload) if payload is not None else None
        response = http.post(self.url(path), data=body, timeout=self.config.timeout)
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict):
            raise ValueError(f"Unexpected response from {path}: {type(data).__name__}")
        return data

    def get_bytes(self, http: requests.Session, url: str) -> bytes:
        response = http.get(url, timeout=self.config.timeout)
        response.raise_for_status()
        return response.content

    def fetch_account_info(self, auth_headers: Mapping[str, str]) -> Optional[dict[str, Any]]:
        """
        Read the account snapshot (balance and control total).

        Returns ``None`` when the portal answers with a non-zero ``ErrorCode``.
        """
        with self.open(auth_headers) as http:
            data = self.post_json(http, ACCOUNT_INFO_PATH)
        if data.get("ErrorCode") != 0:
            self.logger.warning("Account info unavailable", error_code=data.get("ErrorCode"))
            return None
        return data


def postage_balance(account_info: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    """Extract the ``PostageBalance`` block from an account info answer."""

    if not account_info:
        return {}
    info = account_info.get("info") or account_info
    return info.get("PostageBalance") or {}


__all__ = ["PortalClient", "postage_balance"]
