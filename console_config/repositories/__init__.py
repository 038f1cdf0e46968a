"""Persistence adapters."""
from console_config.repositories.kv_store import InMemoryKeyValueStore, RedisKeyValueStore
from console_config.repositories.protocols import KeyValueStoreProtocol

__all__ = [
    "InMemoryKeyValueStore",
    "KeyValueStoreProtocol",
    "RedisKeyValueStore",
]
