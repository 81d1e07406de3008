"""Domain representation for carrier portal accounts."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Mapping

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from labelbot.core.exceptions import ValidationError


@dataclass(frozen=True, slots=True)
class Account:
    """Credential holder for one carrier portal login."""

    username: str
    password: str = field(repr=False)
    enabled: bool = True

    def disabled(self) -> "Account":
        return replace(self, enabled=False)

    def masked_username(self) -> str:
        """Return a redacted username for log messages."""

        name, sep, domain = self.username.partition("@")
        if len(name) <= 2:
            return f"***{sep}{domain}"
        return f"{name[0]}***{name[-1]}{sep}{domain}"

    def to_dict(self) -> dict[str, Any]:
        return {"username": self.username, "password": self.password, "enabled": self.enabled}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Account":
        return cls(
            username=str(data["username"]),
            password=str(data["password"]),
            enabled=_FLAG.validate_python(data.get("enabled", True)),
        )


class AccountRecord(BaseModel):
    """Schema of one entry in the accounts bootstrap file."""

    model_config = ConfigDict(str_strip_whitespace=True)

    username: str = Field(min_length=1)
    password: str = Field(min_length=1)
    enabled: bool = True


_ACCOUNT_LIST = TypeAdapter(list[AccountRecord])
_FLAG = TypeAdapter(bool)


def parse_accounts(data: Any) -> list[Account]:
    """
    Validate raw bootstrap data and build accounts from it.

    Raises:
        ValidationError: When ``data`` is not an array of account records.
    """
    try:
        records = _ACCOUNT_LIST.validate_python(data)
    except PydanticValidationError as exc:
        raise ValidationError("Invalid accounts data", field_errors(exc), cause=exc) from exc
    return [Account(username=r.username, password=r.password, enabled=r.enabled) for r in records]


def field_errors(exc: PydanticValidationError) -> dict[str, str]:
    """Flatten pydantic errors into a dotted-path -> message map."""

    errors: dict[str, str] = {}
    for error in exc.errors():
        path = ".".join(str(part) for part in error.get("loc", ())) or "__root__"
        errors.setdefault(path, error.get("msg", "Invalid value"))
    return errors


def enabled_accounts(accounts: Iterable[Account]) -> list[Account]:
    return [account for account in accounts if account.enabled]


__all__ = ["Account", "AccountRecord", "parse_accounts", "field_errors", "enabled_accounts"]
