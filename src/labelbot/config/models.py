"""
Configuration data models.

Typed configuration sections built with dataclasses. Each section validates
itself in ``__post_init__`` and can be built from a plain mapping.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from labelbot.config.constants import (
    ACCOUNTS_KEY,
    BALANCE_FLOOR,
    CLIENT_HINT_HEADERS,
    DEFAULT_ACCOUNTS_FILE,
    DEFAULT_AI_MODEL,
    DEFAULT_LEDGER_PATH,
    DEFAULT_SELECTORS,
    LABEL_JOB_RETRIES,
    LABEL_QUEUE_NAME,
    LEVEL_VALUES,
    LOGIN_TIMEOUT_SECONDS,
    LOGIN_URL,
    MAX_PURCHASE_AMOUNT,
    MIN_PURCHASE_AMOUNT,
    PORTAL_BASE_URL,
    PORTAL_REFERER,
    REFRESH_INTERVAL_SECONDS,
    SESSION_FRESH_MINUTES,
    SESSION_JOB_RETRIES,
    SESSION_QUEUE_NAME,
    SESSIONS_KEY,
    TELEGRAM_API_URL,
    TOPUP_INTERVAL_SECONDS,
    VALID_ENVIRONMENTS,
)
from labelbot.config.validators import (
    validate_choice,
    validate_not_empty,
    validate_positive_float,
    validate_positive_int,
    validate_range,
    validate_type,
    validate_url,
)


def _known_fields(cls: type, data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in (data or {}).items() if k in cls.__dataclass_fields__}


@dataclass
class LoggerConfig:
    """Logging settings."""

    level: str = "INFO"
    file: Optional[Path] = None

    def __post_init__(self):
        self.level = self.level.upper()
        validate_choice(self.level, set(LEVEL_VALUES), "logging.level")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> LoggerConfig:
        clean = _known_fields(cls, data)
        if clean.get("file"):
            clean["file"] = Path(clean["file"])
        return cls(**clean)


@dataclass
class RedisConfig:
    """Connection to the redis server backing stores and queues."""

    url: Optional[str] = None
    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: Optional[str] = None
    accounts_key: str = ACCOUNTS_KEY
    sessions_key: str = SESSIONS_KEY

    def __post_init__(self):
        validate_url(self.url, "redis.url")
        validate_positive_int(self.port, "redis.port")
        validate_positive_int(self.db, "redis.db", min_value=0)
        validate_not_empty(self.accounts_key, "redis.accounts_key")
        validate_not_empty(self.sessions_key, "redis.sessions_key")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> RedisConfig:
        clean = _known_fields(cls, data)
        if "port" in clean:
            validate_type(clean["port"], int, "redis.port")
        if "db" in clean:
            validate_type(clean["db"], int, "redis.db")
        return cls(**clean)


@dataclass
class QueueConfig:
    """Background queue names, retry budgets and timeouts."""

    session_queue: str = SESSION_QUEUE_NAME
    label_queue: str = LABEL_QUEUE_NAME
    session_retries: int = SESSION_JOB_RETRIES
    label_retries: int = LABEL_JOB_RETRIES
    session_job_timeout: int = 300
    label_job_timeout: int = 180
    result_ttl: int = 3600
    failure_ttl: int = 86400

    def __post_init__(self):
        validate_not_empty(self.session_queue, "queues.session_queue")
        validate_not_empty(self.label_queue, "queues.label_queue")
        validate_positive_int(self.session_retries, "queues.session_retries", min_value=0)
        validate_positive_int(self.label_retries, "queues.label_retries", min_value=0)
        validate_positive_int(self.session_job_timeout, "queues.session_job_timeout")
        validate_positive_int(self.label_job_timeout, "queues.label_job_timeout")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> QueueConfig:
        return cls(**_known_fields(cls, data))


@dataclass
class SchedulerConfig:
    """Periodic trigger intervals."""

    refresh_interval_seconds: int = REFRESH_INTERVAL_SECONDS
    topup_interval_seconds: int = TOPUP_INTERVAL_SECONDS
    refresh_on_start: bool = True

    def __post_init__(self):
        validate_positive_int(self.refresh_interval_seconds, "scheduler.refresh_interval_seconds")
        validate_positive_int(self.topup_interval_seconds, "scheduler.topup_interval_seconds")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> SchedulerConfig:
        return cls(**_known_fields(cls, data))


@dataclass
class SessionConfig:
    """Session freshness rule."""

    fresh_minutes: int = SESSION_FRESH_MINUTES

    def __post_init__(self):
        validate_positive_int(self.fresh_minutes, "sessions.fresh_minutes")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> SessionConfig:
        return cls(**_known_fields(cls, data))


@dataclass
class FundingConfig:
    """Balance floor and purchase amount bounds for the top-up sweep."""

    balance_floor: int = BALANCE_FLOOR
    min_amount: int = MIN_PURCHASE_AMOUNT
    max_amount: int = MAX_PURCHASE_AMOUNT

    def __post_init__(self):
        validate_positive_int(self.balance_floor, "funding.balance_floor", min_value=0)
        validate_positive_int(self.min_amount, "funding.min_amount")
        validate_positive_int(self.max_amount, "funding.max_amount")
        validate_range(self.min_amount, self.max_amount, "funding.amount")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> FundingConfig:
        return cls(**_known_fields(cls, data))


@dataclass
class PortalConfig:
    """Carrier portal endpoints, shared headers and outbound proxy."""

    base_url: str = PORTAL_BASE_URL
    referer: str = PORTAL_REFERER
    timeout: float = 60.0
    proxy_url: Optional[str] = None
    client_hints: Dict[str, str] = field(default_factory=lambda: dict(CLIENT_HINT_HEADERS))

    def __post_init__(self):
        validate_url(self.base_url, "portal.base_url")
        validate_url(self.proxy_url, "portal.proxy_url")
        validate_positive_float(self.timeout, "portal.timeout", min_value=1.0)
        self.base_url = self.base_url.rstrip("/")

    @property
    def proxies(self) -> Optional[Dict[str, str]]:
        if not self.proxy_url:
            return None
        return {"http": self.proxy_url, "https": self.proxy_url}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> PortalConfig:
        clean = _known_fields(cls, data)
        if "client_hints" in clean:
            validate_type(clean["client_hints"], dict, "portal.client_hints")
        return cls(**clean)


@dataclass
class BrowserConfig:
    """Browser driven login."""

    login_url: str = LOGIN_URL
    headless: bool = True
    login_timeout: int = LOGIN_TIMEOUT_SECONDS
    settle_seconds: float = 5.0
    selectors: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_SELECTORS))

    def __post_init__(self):
        validate_url(self.login_url, "browser.login_url")
        validate_positive_int(self.login_timeout, "browser.login_timeout")
        missing = set(DEFAULT_SELECTORS) - set(self.selectors)
        if missing:
            self.selectors = {**DEFAULT_SELECTORS, **self.selectors}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> BrowserConfig:
        clean = _known_fields(cls, data)
        if "headless" in clean:
            validate_type(clean["headless"], bool, "browser.headless")
        if "selectors" in clean:
            validate_type(clean["selectors"], dict, "browser.selectors")
        return cls(**clean)


@dataclass
class TelegramConfig:
    """Chat transport used to answer label requesters."""

    bot_token: Optional[str] = None
    api_url: str = TELEGRAM_API_URL
    timeout: float = 30.0

    @property
    def enabled(self) -> bool:
        return bool(self.bot_token)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> TelegramConfig:
        return cls(**_known_fields(cls, data))


@dataclass
class AIConfig:
    """Language model used for error explanations and row extraction."""

    api_key: Optional[str] = None
    base_url: Optional[str] = None
    model: str = DEFAULT_AI_MODEL

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> AIConfig:
        return cls(**_known_fields(cls, data))


@dataclass
class LedgerConfig:
    """Label ledger storage."""

    path: Path = Path(DEFAULT_LEDGER_PATH)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> LedgerConfig:
        clean = _known_fields(cls, data)
        if clean.get("path"):
            clean["path"] = Path(clean["path"])
        return cls(**clean)


@dataclass
class AppConfig:
    """Root configuration object."""

    environment: str = "production"
    debug: bool = False
    accounts_file: Path = Path(DEFAULT_ACCOUNTS_FILE)
    logging: LoggerConfig = field(default_factory=LoggerConfig)
    redis: RedisConfig = field(default_factory=RedisConfig)
    queues: QueueConfig = field(default_factory=QueueConfig)
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)
    sessions: SessionConfig = field(default_factory=SessionConfig)
    funding: FundingConfig = field(default_factory=FundingConfig)
    portal: PortalConfig = field(default_factory=PortalConfig)
    browser: BrowserConfig = field(default_factory=BrowserConfig)
    telegram: TelegramConfig = field(default_factory=TelegramConfig)
    ai: AIConfig = field(default_factory=AIConfig)
    ledger: LedgerConfig = field(default_factory=LedgerConfig)

    def __post_init__(self):
        validate_choice(self.environment, VALID_ENVIRONMENTS, "environment")
        if self.debug:
            self.logging.level = "DEBUG"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> AppConfig:
        data = data or {}
        if "debug" in data:
            validate_type(data["debug"], bool, "debug")
        return cls(
            environment=data.get("environment", "production"),
            debug=data.get("debug", False),
            accounts_file=Path(data.get("accounts_file", DEFAULT_ACCOUNTS_FILE)),
            logging=LoggerConfig.from_dict(data.get("logging", {})),
            redis=RedisConfig.from_dict(data.get("redis", {})),
            queues=QueueConfig.from_dict(data.get("queues", {})),
            scheduler=SchedulerConfig.from_dict(data.get("scheduler", {})),
            sessions=SessionConfig.from_dict(data.get("sessions", {})),
            funding=FundingConfig.from_dict(data.get("funding", {})),
            portal=PortalConfig.from_dict(data.get("portal", {})),
            browser=BrowserConfig.from_dict(data.get("browser", {})),
            telegram=TelegramConfig.from_dict(data.get("telegram", {})),
            ai=AIConfig.from_dict(data.get("ai", {})),
            ledger=LedgerConfig.from_dict(data.get("ledger", {})),
        )


__all__ = [
    "LoggerConfig",
    "RedisConfig",
    "QueueConfig",
    "SchedulerConfig",
    "SessionConfig",
    "FundingConfig",
    "PortalConfig",
    "BrowserConfig",
    "TelegramConfig",
    "AIConfig",
    "LedgerConfig",
    "AppConfig",
]
