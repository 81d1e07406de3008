"""Lightweight structured logger with contextual support."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

DEFAULT_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


class StructuredLogger:
    """Thin wrapper above :mod:`logging` focused on context-rich messages."""

    SUCCESS_LEVEL = 25

    def __init__(self, name: str = "labelbot", *, context: Mapping[str, Any] | None = None) -> None:
        logging.addLevelName(self.SUCCESS_LEVEL, "SUCCESS")
        self._logger = logging.getLogger(name)
        if not self._logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
            self._logger.addHandler(handler)
            self._logger.setLevel(logging.INFO)
        self._context: Dict[str, Any] = dict(context or {})

    @property
    def name(self) -> str:
        return self._logger.name

    @property
    def context(self) -> Mapping[str, Any]:
        return dict(self._context)

    def bind(self, **context: Any) -> "StructuredLogger":
        """Return a new logger that always includes the provided context."""

        merged = {**self._context}
        merged.update({k: v for k, v in context.items() if v is not None})
        return StructuredLogger(self._logger.name, context=merged)

    def configure(self, level: str = "INFO", *, log_file: Optional[Path] = None) -> None:
        """Apply level and optional file output to the wrapped logger."""

        self._logger.setLevel(logging.getLevelName(level.upper()))
        if log_file is None:
            return
        target = str(Path(log_file).resolve())
        for handler in self._logger.handlers:
            if isinstance(handler, logging.FileHandler) and handler.baseFilename == target:
                return
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
        self._logger.addHandler(file_handler)

    def debug(self, message: str, **extra: Any) -> None:
        self._log(logging.DEBUG, message, extra)

    def info(self, message: str, **extra: Any) -> None:
        self._log(logging.INFO, message, extra)

    def success(self, message: str, **extra: Any) -> None:
        self._log(self.SUCCESS_LEVEL, message, extra)

    def warning(self, message: str, **extra: Any) -> None:
        self._log(logging.WARNING, message, extra)

    def error(self, message: str, **extra: Any) -> None:
        self._log(logging.ERROR, message, extra)

    def exception(self, message: str, **extra: Any) -> None:
        """Log at ERROR level including the active traceback."""

        self._log(logging.ERROR, message, extra, exc_info=True)

    def _log(self, level: int, message: str, extra: Mapping[str, Any], *, exc_info: bool = False) -> None:
        """Compose the final log message and delegate to the wrapped logger."""

        payload = {**self._context}
        payload.update({k: v for k, v in extra.items() if v is not None})
        suffix = " ".join(f"{key}={value}" for key, value in payload.items())
        text = f"{message} | {suffix}" if suffix else message
        self._logger.log(level, text, exc_info=exc_info)


__all__ = ["StructuredLogger", "DEFAULT_FORMAT"]
