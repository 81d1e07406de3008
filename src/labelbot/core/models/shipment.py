"""Validated shipment records submitted for label generation."""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from labelbot.core.exceptions import ValidationError
from labelbot.core.models.account import field_errors

GROUND = "USGA"

MailClass = Literal["USGA", "USPM"]


class Sender(BaseModel):
    """Return address printed on the label."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, str_strip_whitespace=True)

    full_name: str = Field(alias="FullName", min_length=1)
    company: Optional[str] = Field(default=None, alias="Company")
    address1: str = Field(alias="Address1", min_length=1)
    address2: Optional[str] = Field(default=None, alias="Address2")
    address3: Optional[str] = Field(default=None, alias="Address3")
    city: str = Field(alias="City", min_length=1)
    state: str = Field(alias="State", min_length=1)
    zip_code: str = Field(alias="ZIPCode", min_length=1)
    phone_number: Optional[str] = Field(default=None, alias="PhoneNumber")


class Recipient(BaseModel):
    """Destination address plus the package being shipped."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    recipient_name: str = Field(min_length=1)
    recipient_phone: str
    recipient_postcode: str = Field(pattern=r"^\d{5}(-\d{4})?$")
    address1: str = Field(min_length=1)
    address2: Optional[str] = None
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    weight_lb: float = Field(gt=0)
    length_in: float = Field(gt=0)
    width_in: float = Field(gt=0)
    height_in: float = Field(gt=0)
    mail_class: MailClass

    @property
    def zip_base(self) -> str:
        return self.recipient_postcode.split("-")[0]

    @property
    def zip_add_on(self) -> str:
        parts = self.recipient_postcode.split("-")
        return parts[1] if len(parts) > 1 else ""


class Shipment(BaseModel):
    """Sender, recipient and package details for one label."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    sender: Sender = Field(alias="From")
    recipient: Recipient = Field(alias="To")

    @property
    def is_ground(self) -> bool:
        return self.recipient.mail_class == GROUND

    @property
    def service_name(self) -> str:
        return "Ground" if self.is_ground else "Priority"

    def to_payload(self) -> dict[str, Any]:
        """Serialise with the external field names."""

        return self.model_dump(by_alias=True, exclude_none=True)


def validate_shipment(data: Any) -> Shipment:
    """
    Validate a raw mapping into a :class:`Shipment`.

    Raises:
        ValidationError: With a dotted field path -> message map.
    """
    if isinstance(data, Shipment):
        return data
    try:
        return Shipment.model_validate(data)
    except PydanticValidationError as exc:
        raise ValidationError("Invalid shipment", field_errors(exc), cause=exc) from exc


__all__ = [
    "GROUND",
    "MailClass",
    "Sender",
    "Recipient",
    "Shipment",
    "validate_shipment",
]
