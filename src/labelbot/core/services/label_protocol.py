"""
Three step label rendering against the carrier portal.

1. create the indicium (postage) from the shipment,
2. lay it out as a two-up PDF,
3. download the rendered document.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Callable, Mapping, Optional

import requests

from labelbot.config.constants import CREATE_INDICIUM_PATH, CREATE_TWO_UP_PATH, RENDER_QUERY
from labelbot.core.exceptions import AccountError, AccountErrorKind
from labelbot.core.models import RenderedLabel, Session, Shipment, utcnow, validate_shipment
from labelbot.infrastructure.http.portal_client import PortalClient
from labelbot.infrastructure.logging import get_logger

NULL_TX_ID = "00000000-0000-0000-0000-000000000000"
PRINT_LAYOUT = "Normal4X6"
GENERIC_TAG = "generic"


@dataclass(frozen=True, slots=True)
class ErrorRule:
    """Maps a fragment of the portal's error text to a requester message."""

    needle: str
    tag: str
    message: str


# Evaluated in order, first match wins.
ERROR_RULES: tuple[ErrorRule, ...] = (
    ErrorRule(
        "insufficient",
        "insufficient_funds",
        "Insufficient funds on account. Please check the account or change it and try again.",
    ),
    ErrorRule(
        "due to the current status of your account",
        "billing_inactive",
        "Failed: Account billing inactivity, cannot be used.",
    ),
    ErrorRule(
        "only",
        "service_restricted",
        "This account can not be used for usual Ground or Priority.",
    ),
    ErrorRule(
        "expired",
        "session_expired",
        "Cookie expired. Please check the account or change it and try again.",
    ),
    ErrorRule(
        "limit",
        "print_limit",
        "This account has reached monthly print limit.",
    ),
)


def classify_indicium_error(response: Mapping[str, Any]) -> AccountError:
    """Build the ``LABEL_CREATION_FAILED`` error for a rejected indicium request."""

    description = str(response.get("ErrorDescription") or "")
    text = (description or json.dumps(response, default=str)).lower()
    details = {"error_code": response.get("ErrorCode")}
    for rule in ERROR_RULES:
        if rule.needle in text:
            return AccountError(
                AccountErrorKind.LABEL_CREATION_FAILED,
                rule.message,
                classification=rule.tag,
                details=details,
            )
    return AccountError(
        AccountErrorKind.LABEL_CREATION_FAILED,
        f"Failed to create label: {description or 'no label URL returned'}",
        classification=GENERIC_TAG,
        details=details,
    )


def _sender_block(shipment: Shipment) -> dict[str, Any]:
    sender = shipment.sender
    return {
        "FullName": sender.full_name,
        "Company": sender.company,
        "Address1": sender.address1,
        "Address2": sender.address2,
        "Address3": sender.address3,
        "City": sender.city,
        "State": sender.state,
        "ZIPCode": sender.zip_code,
        "PhoneNumber": sender.phone_number,
        "CleanseHash": "",
        "OverrideHash": "",
    }


def build_indicium_payload(shipment: Shipment, customer_id: Optional[str], ship_date: date) -> dict[str, Any]:
    """Merge a shipment with the fixed 4x6 layout defaults."""

    to = shipment.recipient
    state = to.state.upper()
    return {
        "costCodeID": 0,
        "CustomerID": customer_id,
        "Customs": "",
        "deliveryNotification": False,
        "EltronPrinterDPType": "Default",
        "integratorTxId": NULL_TX_ID,
        "keepUrlSplit": True,
        "labelColumn": 1,
        "labelRow": 1,
        "Reference1": "",
        "memo": "",
        "printMemo": False,
        "NonDeliveryOption": "Return",
        "OrderID": "",
        "printerName": None,
        "printerOrientation": "portrait",
        "printerTray": None,
        "printInstructions": False,
        "PrintLayout": PRINT_LAYOUT,
        "recipientEmail": "",
        "rotationDegrees": 0,
        "SampleOnly": False,
        "TrackingNumber": "",
        "verticalOffset": 0,
        "ImageType": "EncryptedPngUrl",
        "ReturnTo": _sender_block(shipment),
        "Rate": {
            "From": _sender_block(shipment),
            "To": {
                "FullName": to.recipient_name,
                "Company": "",
                "PhoneNumber": to.recipient_phone,
                "Address1": to.address1,
                "Address2": to.address2,
                "Address3": "",
                "City": to.city,
                "Country": "US",
                "freeFormAddress": f"{to.recipient_name}\n{to.address1}\n{to.city}, {state} {to.recipient_postcode}",
                "CleanseMessage": "Cleansed",
                "CleanseHash": "",
                "OverrideHash": "",
                "EmailAddress": "",
                "State": state,
                "ZIPCode": to.zip_base,
                "ZIPCodeAddOn": to.zip_add_on,
            },
            "Amount": 8.62,
            "ServiceType": to.mail_class,
            "DeliverDays": None,
            "Error": None,
            "WeightLb": to.weight_lb,
            "WeightOz": 0,
            "PackageType": "Package",
            "ShipDate": ship_date.isoformat(),
            "ShipDateSpecified": True,
            "InsuredValue": 0,
            "RegisteredValue": 0,
            "CODValue": 0,
            "DeclaredValue": 1,
            "RectangularShaped": True,
            "AddOns": [
                {"AddOnType": "SCAHP", "Amount": 0},
                {"AddOnType": "USADC", "Amount": 0},
            ],
            "EffectiveWeightInOunces": 0,
            "IsIntraBMC": False,
            "Zone": 0,
            "RateCategory": 0,
            "NonMachinable": False,
            "Length": to.length_in,
            "Width": to.width_in,
            "Height": to.height_in,
            "PrintLayout": PRINT_LAYOUT,
        },
        "printerPaperHeight": 6,
        "printerPaperWidth": 4,
    }


def shipment_from_payload(payload: Mapping[str, Any]) -> Shipment:
    """Rebuild the shipment an indicium payload was built from."""

    rate = payload["Rate"]
    sender, to = rate["From"], rate["To"]
    postcode = to["ZIPCode"] + (f"-{to['ZIPCodeAddOn']}" if to.get("ZIPCodeAddOn") else "")
    return validate_shipment({
        "From": {k: v for k, v in sender.items() if k not in ("CleanseHash", "OverrideHash") and v is not None},
        "To": {
            "recipient_name": to["FullName"],
            "recipient_phone": to["PhoneNumber"],
            "recipient_postcode": postcode,
            "address1": to["Address1"],
            "address2": to.get("Address2"),
            "city": to["City"],
            "state": to["State"],
            "weight_lb": rate["WeightLb"],
            "length_in": rate["Length"],
            "width_in": rate["Width"],
            "height_in": rate["Height"],
            "mail_class": rate["ServiceType"],
        },
    })


class LabelProtocolClient:
    """Runs the indicium, two-up and render calls in order for one shipment."""

    def __init__(self, portal: PortalClient, *, clock: Callable[[], datetime] = utcnow, logger=None):
        self.portal = portal
        self._clock = clock
        self.logger = (logger or get_logger()).bind(component="label_protocol")

    def create_label(self, shipment: Shipment, session: Session) -> RenderedLabel:
        """
        Render a label with ``session``.

        Raises:
            AccountError: ``LABEL_CREATION_FAILED`` with a classified message.
        """
        log = self.logger.bind(account=session.username, mail_class=shipment.recipient.mail_class)
        payload = build_indicium_payload(shipment, session.customer_id, self._clock().date())

        try:
            with self.portal.open(session.headers) as http:
                indicium = self.portal.post_json(http, CREATE_INDICIUM_PATH, payload)
                label_url = indicium.get("URL")
                if not label_url:
                    error = classify_indicium_error(indicium)
                    log.error("Indicium rejected", error_code=indicium.get("ErrorCode"), reason=error.classification)
                    raise error

                two_up = self.portal.post_json(
                    http,
                    CREATE_TWO_UP_PATH,
                    {
                        "isCreateTwoUpForPdf": True,
                        "layoutLeft": "domestic_pdf",
                        "layoutRight": "roll4x6",
                        "labelUrl": label_url,
                    },
                )
                render_url = two_up.get("URL")
                if not render_url:
                    log.error("Two-up layout returned no URL", error_code=two_up.get("ErrorCode"))
                    raise AccountError(
                        AccountErrorKind.LABEL_CREATION_FAILED,
                        f"Failed to create two up label: {two_up.get('ErrorDescription') or 'no URL returned'}",
                        classification="two_up",
                    )

                content = self.portal.get_bytes(http, f"{render_url}{RENDER_QUERY}")
        except (requests.RequestException, ValueError) as e:
            log.error("Portal call failed", error=str(e))
            raise AccountError(
                AccountErrorKind.LABEL_CREATION_FAILED,
                f"Failed to create label: {e}",
                classification="transport",
                cause=e,
            ) from e

        tracking_number = str(indicium.get("trackingNumber") or indicium.get("TrackingNumber") or "")
        filename = f"{shipment.service_name}-{tracking_number}.pdf"
        log.success("Label rendered", file=filename)
        return RenderedLabel(
            content=content,
            filename=filename,
            tracking_number=tracking_number,
            mail_class=shipment.recipient.mail_class,
        )


__all__ = [
    "ERROR_RULES",
    "ErrorRule",
    "LabelProtocolClient",
    "build_indicium_payload",
    "classify_indicium_error",
    "shipment_from_payload",
]
