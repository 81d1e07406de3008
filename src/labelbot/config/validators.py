"""
Reusable validation functions.

Pure checks applied to configuration values before they are used.
Every failure raises :class:`InvalidConfigException`.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional, Set

from labelbot.core.exceptions import InvalidConfigException


def validate_positive_int(value: int, field_name: str, min_value: int = 1) -> None:
    """
    Check that an integer is at least ``min_value``.

    Args:
        value: Value to check.
        field_name: Field name for the error message.
        min_value: Smallest accepted value (default: 1).

    Raises:
        InvalidConfigException: If the value is not an int or is too small.
    """
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidConfigException(
            f"{field_name} must be an integer",
            details={"value": value, "type": type(value).__name__},
        )

    if value < min_value:
        raise InvalidConfigException(
            f"{field_name} must be >= {min_value}",
            details={"value": value, "min_value": min_value},
        )


def validate_positive_float(value: float, field_name: str, min_value: float = 0.0) -> None:
    """Check that a number is at least ``min_value``."""
    if not isinstance(value, (float, int)) or isinstance(value, bool):
        raise InvalidConfigException(
            f"{field_name} must be a number",
            details={"value": value, "type": type(value).__name__},
        )

    if value < min_value:
        raise InvalidConfigException(
            f"{field_name} must be >= {min_value}",
            details={"value": value, "min_value": min_value},
        )


def validate_not_empty(value: Iterable[Any], field_name: str) -> None:
    if not value:
        raise InvalidConfigException(f"{field_name} must not be empty")


def validate_choice(value: Any, choices: Set[Any], field_name: str) -> None:
    """Check that ``value`` is one of ``choices``."""
    if value not in choices:
        raise InvalidConfigException(
            f"{field_name} must be one of {sorted(choices)}",
            details={"value": value},
        )


def validate_type(value: Any, expected: type | tuple[type, ...], field_name: str) -> None:
    if not isinstance(value, expected):
        raise InvalidConfigException(
            f"{field_name} has the wrong type",
            details={"value": value, "expected": getattr(expected, "__name__", str(expected))},
        )


def validate_url(value: Optional[str], field_name: str) -> None:
    """Accept ``None`` or an http(s)/redis URL."""
    if value is None:
        return
    if not value.startswith(("http://", "https://", "redis://", "rediss://", "unix://")):
        raise InvalidConfigException(f"{field_name} is not a valid URL", details={"value": value})


def validate_range(low: int, high: int, field_name: str) -> None:
    if low > high:
        raise InvalidConfigException(
            f"{field_name} lower bound is above its upper bound",
            details={"low": low, "high": high},
        )


__all__ = [
    "validate_positive_int",
    "validate_positive_float",
    "validate_not_empty",
    "validate_choice",
    "validate_type",
    "validate_url",
    "validate_range",
]
