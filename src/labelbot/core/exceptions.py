"""Centralised exception hierarchy for labelbot."""

from __future__ import annotations

from enum import Enum
from typing import Any, Mapping, Optional


class LabelBotException(Exception):
    """Base class for every custom labelbot exception."""

    def __init__(self, message: str, *, details: Optional[dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.cause = cause

    def __str__(self) -> str:
        base = self.message
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            base = f"{base} ({details_str})"
        if self.cause:
            base = f"{base} | Cause: {self.cause}"
        return base

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, details={self.details!r})"


# ==================== Account errors ====================

class AccountErrorKind(str, Enum):
    """Closed set of account and session failure kinds."""

    NO_ACCOUNTS_FOUND = "NO_ACCOUNTS_FOUND"
    NO_VALID_ACCOUNT = "NO_VALID_ACCOUNT"
    CANNOT_LOGIN = "CANNOT_LOGIN"
    NO_SESSION_FOUND = "NO_SESSION_FOUND"
    LABEL_CREATION_FAILED = "LABEL_CREATION_FAILED"
    ERROR = "ERROR"

    @property
    def default_message(self) -> str:
        return ERROR_MESSAGES[self]


ERROR_MESSAGES: Mapping[AccountErrorKind, str] = {
    AccountErrorKind.NO_ACCOUNTS_FOUND: "No accounts found!",
    AccountErrorKind.NO_VALID_ACCOUNT: "No valid account found to process label",
    AccountErrorKind.CANNOT_LOGIN: "Cannot login to carrier portal",
    AccountErrorKind.NO_SESSION_FOUND: "No session found!",
    AccountErrorKind.LABEL_CREATION_FAILED: "Failed to create label",
    AccountErrorKind.ERROR: "An error occured",
}


class AccountError(LabelBotException):
    """Failure tied to an account, a session or a label attempt."""

    def __init__(
        self,
        kind: AccountErrorKind,
        message: Optional[str] = None,
        *,
        classification: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        self.kind = kind
        self.classification = classification
        merged = dict(details or {})
        merged.setdefault("kind", kind.value)
        if classification:
            merged.setdefault("classification", classification)
        super().__init__(message or kind.default_message, details=merged, cause=cause)


# ==================== Funding errors ====================

class FundingError(LabelBotException):
    """A postage purchase was rejected or could not be sent."""

    def __init__(self, reason: str, *, details: Optional[dict[str, Any]] = None, cause: Optional[Exception] = None):
        self.reason = reason
        super().__init__(reason, details=details, cause=cause)


# ==================== Validation errors ====================

class ValidationError(LabelBotException):
    """Input record failed schema validation."""

    def __init__(self, message: str, errors: Optional[Mapping[str, str]] = None, *, cause: Optional[Exception] = None):
        self.errors: dict[str, str] = dict(errors or {})
        super().__init__(message, details={"fields": len(self.errors)} if self.errors else None, cause=cause)

    def describe(self) -> str:
        """Render the field map one entry per line."""

        if not self.errors:
            return self.message
        lines = [f"{field}: {reason}" for field, reason in self.errors.items()]
        return "\n".join([self.message, *lines])


# ==================== Configuration errors ====================

class ConfigurationException(LabelBotException):
    """Base class for configuration problems."""
    pass


class InvalidConfigException(ConfigurationException):
    """Configuration value is invalid."""
    pass


# ==================== Storage errors ====================

class StoreException(LabelBotException):
    """Storage backend failed or returned corrupt data."""
    pass


def wrap_exception(exc: Exception, wrapper_class: type[LabelBotException], message: str, **details: Any) -> LabelBotException:
    """
    Wrap an existing exception in a labelbot exception.

    Args:
        exc: Original exception
        wrapper_class: Target exception class
        message: Human readable message
        **details: Additional context

    Returns:
        Instance of ``wrapper_class`` chained to ``exc``
    """
    return wrapper_class(message, details=details, cause=exc)


__all__ = [
    # Base
    "LabelBotException",
    # Accounts
    "AccountErrorKind",
    "AccountError",
    "ERROR_MESSAGES",
    # Funding
    "FundingError",
    # Validation
    "ValidationError",
    # Configuration
    "ConfigurationException",
    "InvalidConfigException",
    # Storage
    "StoreException",
    # Helpers
    "wrap_exception",
]
