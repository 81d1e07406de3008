"""Storage backends for the shared collections and the label ledger."""

from labelbot.infrastructure.storage.key_value import InMemoryKeyValueStore, RedisKeyValueStore, create_redis_connection
from labelbot.infrastructure.storage.ledger import InMemoryLabelLedger, SQLiteLabelLedger

__all__ = [
    "InMemoryKeyValueStore",
    "RedisKeyValueStore",
    "create_redis_connection",
    "InMemoryLabelLedger",
    "SQLiteLabelLedger",
]
