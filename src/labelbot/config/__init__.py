"""
Configuration package.

Use ``get_config()`` to obtain the process-wide configuration instance.
"""

from typing import Optional

from labelbot.config.loader import ConfigLoader, ConfigLoaderException
from labelbot.config.models import (
    AIConfig,
    AppConfig,
    BrowserConfig,
    FundingConfig,
    LedgerConfig,
    LoggerConfig,
    PortalConfig,
    QueueConfig,
    RedisConfig,
    SchedulerConfig,
    SessionConfig,
    TelegramConfig,
)

_CONFIG_INSTANCE: Optional[AppConfig] = None


def get_config(reload: bool = False, config_path: Optional[str] = None) -> AppConfig:
    """
    Return the global configuration singleton.

    Args:
        reload: Re-read configuration from disk and environment.
        config_path: Optional path to the YAML file.
    """
    global _CONFIG_INSTANCE

    if _CONFIG_INSTANCE is None or reload:
        _CONFIG_INSTANCE = ConfigLoader.load(config_path)

    return _CONFIG_INSTANCE


__all__ = [
    "get_config",
    "ConfigLoader",
    "ConfigLoaderException",
    "AppConfig",
    "AIConfig",
    "BrowserConfig",
    "FundingConfig",
    "LedgerConfig",
    "LoggerConfig",
    "PortalConfig",
    "QueueConfig",
    "RedisConfig",
    "SchedulerConfig",
    "SessionConfig",
    "TelegramConfig",
]
