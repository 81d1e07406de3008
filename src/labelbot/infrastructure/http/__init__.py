"""HTTP access to the carrier portal."""

from labelbot.infrastructure.http.portal_client import PortalClient, postage_balance

__all__ = ["PortalClient", "postage_balance"]
