"""
Logging package.

Use ``get_logger()`` to obtain the process-wide logger and
``configure_logging()`` once at startup to apply the configured level.
"""

from __future__ import annotations

from typing import Any, Optional

from labelbot.infrastructure.logging.structured_logger import StructuredLogger

_LOGGER_INSTANCE: Optional[StructuredLogger] = None


def get_logger(name: str = "labelbot") -> StructuredLogger:
    """Return the global logger singleton."""
    global _LOGGER_INSTANCE

    if _LOGGER_INSTANCE is None:
        _LOGGER_INSTANCE = StructuredLogger(name)
    return _LOGGER_INSTANCE


def configure_logging(config: Any) -> StructuredLogger:
    """
    Apply a ``LoggerConfig`` to the global logger.

    Args:
        config: Object exposing ``level`` and ``file``.
    """
    logger = get_logger()
    logger.configure(config.level, log_file=config.file)
    return logger


__all__ = ["StructuredLogger", "get_logger", "configure_logging"]
