"""
Configuration loader.

Reads the YAML configuration file and applies environment variable
overrides, returning a validated :class:`AppConfig`.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

import yaml
from dotenv import load_dotenv

from labelbot.config.constants import ENV_PREFIX
from labelbot.config.models import AppConfig
from labelbot.core.exceptions import ConfigurationException


class ConfigLoaderException(ConfigurationException):
    """Configuration could not be read or validated."""
    pass


class ConfigLoader:
    """Builds :class:`AppConfig` from defaults, YAML and the environment."""

    DEFAULT_FILENAME = "config.yaml"

    @classmethod
    def load(cls, path: Optional[Path | str] = None, *, use_dotenv: bool = True) -> AppConfig:
        """
        Load the full configuration.

        Precedence:
        1. Code defaults
        2. YAML file
        3. Environment variables (LABELBOT_*), including a local ``.env``

        Args:
            path: Optional path to ``config.yaml``.
            use_dotenv: Read ``.env`` into the environment first.

        Returns:
            AppConfig: Validated configuration.

        Raises:
            ConfigLoaderException: On parse, IO or validation errors.
        """
        if use_dotenv:
            load_dotenv()

        config_path = Path(path) if path else Path(os.getenv(f"{ENV_PREFIX}CONFIG", cls.DEFAULT_FILENAME))

        file_data = cls._read_yaml(config_path)
        merged_data = cls._apply_env_overrides(file_data)

        try:
            return AppConfig.from_dict(merged_data)
        except Exception as e:
            raise ConfigLoaderException(f"Invalid configuration: {e}", cause=e) from e

    @staticmethod
    def _read_yaml(path: Path) -> Dict[str, Any]:
        """Read a YAML file, returning an empty mapping when it is absent."""
        if not path.exists():
            return {}

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigLoaderException(f"Could not read {path}: {e}", cause=e) from e

        if not isinstance(data, dict):
            raise ConfigLoaderException(f"{path} must contain a mapping at the top level")
        return data

    @classmethod
    def _env_overrides(cls) -> Dict[str, Tuple[list, Callable[[str], Any]]]:
        """ENV_VAR -> (nested path, parser)."""
        p = ENV_PREFIX
        return {
            f"{p}ENVIRONMENT": (["environment"], str),
            f"{p}DEBUG": (["debug"], cls._parse_bool),
            f"{p}ACCOUNTS_FILE": (["accounts_file"], str),
            f"{p}LOG_LEVEL": (["logging", "level"], str),
            f"{p}LOG_FILE": (["logging", "file"], str),
            f"{p}REDIS_URL": (["redis", "url"], str),
            f"{p}REDIS_HOST": (["redis", "host"], str),
            f"{p}REDIS_PORT": (["redis", "port"], int),
            f"{p}REDIS_DB": (["redis", "db"], int),
            f"{p}REDIS_PASSWORD": (["redis", "password"], str),
            f"{p}REFRESH_INTERVAL": (["scheduler", "refresh_interval_seconds"], int),
            f"{p}TOPUP_INTERVAL": (["scheduler", "topup_interval_seconds"], int),
            f"{p}BALANCE_FLOOR": (["funding", "balance_floor"], int),
            f"{p}PORTAL_URL": (["portal", "base_url"], str),
            f"{p}PORTAL_TIMEOUT": (["portal", "timeout"], float),
            f"{p}PROXY_URL": (["portal", "proxy_url"], str),
            f"{p}HEADLESS": (["browser", "headless"], cls._parse_bool),
            f"{p}LOGIN_URL": (["browser", "login_url"], str),
            f"{p}BOT_TOKEN": (["telegram", "bot_token"], str),
            f"{p}OPENAI_KEY": (["ai", "api_key"], str),
            f"{p}OPENAI_BASE_URL": (["ai", "base_url"], str),
            f"{p}OPENAI_MODEL": (["ai", "model"], str),
            f"{p}LEDGER_PATH": (["ledger", "path"], str),
        }

    @classmethod
    def _apply_env_overrides(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        """Apply LABELBOT_* environment overrides on top of ``data``."""
        out = {k: (dict(v) if isinstance(v, dict) else v) for k, v in data.items()}

        for env_var, (keys, type_func) in cls._env_overrides().items():
            val = os.getenv(env_var)
            if val is None or val == "":
                continue
            try:
                parsed = type_func(val)
            except ValueError as e:
                raise ConfigLoaderException(f"{env_var} has an invalid value: {val!r}", cause=e) from e
            cls._set_nested(out, keys, parsed)

        return out

    @staticmethod
    def _set_nested(data: Dict[str, Any], keys: list, value: Any) -> None:
        """Set a value inside nested dictionaries."""
        current = data
        for key in keys[:-1]:
            current = current.setdefault(key, {})
        current[keys[-1]] = value

    @staticmethod
    def _parse_bool(val: str) -> bool:
        return val.lower() in ("true", "1", "yes", "on")


__all__ = ["ConfigLoader", "ConfigLoaderException"]
