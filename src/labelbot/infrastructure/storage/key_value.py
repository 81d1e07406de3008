"""
Key-value store implementations.

Redis holds the shared collections in production; the in-memory store is
used by tests and single-process tooling.
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Dict, Optional

from redis import Redis
from redis.exceptions import RedisError, WatchError

from labelbot.config.models import RedisConfig
from labelbot.core.exceptions import StoreException, wrap_exception
from labelbot.core.interfaces import KeyValueStore
from labelbot.infrastructure.logging import get_logger


class InMemoryKeyValueStore(KeyValueStore):
    """
    Process-local store.

    Not persistent across restarts. ``update`` is serialised with a lock.
    """

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._storage: Dict[str, str] = dict(initial or {})
        self._lock = threading.RLock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._storage.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._storage[key] = value

    def update(self, key: str, mutate: Callable[[Optional[str]], str]) -> str:
        with self._lock:
            new_value = mutate(self._storage.get(key))
            self._storage[key] = new_value
            return new_value


class RedisKeyValueStore(KeyValueStore):
    """Redis backed store using WATCH/MULTI for ``update``."""

    def __init__(self, redis_client: Redis, *, max_retries: int = 25, logger=None):
        """
        Args:
            redis_client: ``redis.Redis`` instance or compatible.
            max_retries: Optimistic transaction attempts before giving up.
        """
        self.redis = redis_client
        self.max_retries = max_retries
        self.logger = logger or get_logger()

    @staticmethod
    def _decode(value: Any) -> Optional[str]:
        if value is None:
            return None
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return str(value)

    def get(self, key: str) -> Optional[str]:
        try:
            return self._decode(self.redis.get(key))
        except RedisError as e:
            raise wrap_exception(e, StoreException, "Redis read failed", key=key) from e

    def set(self, key: str, value: str) -> None:
        try:
            self.redis.set(key, value)
        except RedisError as e:
            raise wrap_exception(e, StoreException, "Redis write failed", key=key) from e

    def update(self, key: str, mutate: Callable[[Optional[str]], str]) -> str:
        for attempt in range(1, self.max_retries + 1):
            try:
                with self.redis.pipeline() as pipe:
                    pipe.watch(key)
                    current = self._decode(pipe.get(key))
                    new_value = mutate(current)
                    pipe.multi()
                    pipe.set(key, new_value)
                    pipe.execute()
                    return new_value
            except WatchError:
                self.logger.debug("Concurrent write detected, retrying", key=key, attempt=attempt)
                continue
            except RedisError as e:
                raise wrap_exception(e, StoreException, "Redis update failed", key=key) from e

        raise StoreException(
            "Could not update value after repeated conflicts",
            details={"key": key, "attempts": self.max_retries},
        )


def create_redis_connection(config: RedisConfig) -> Redis:
    """Build a redis client from the URL, or from host and port when no URL is set."""

    if config.url:
        return Redis.from_url(config.url)
    return Redis(host=config.host, port=config.port, db=config.db, password=config.password)


__all__ = ["InMemoryKeyValueStore", "RedisKeyValueStore", "create_redis_connection"]
