"""Persistent key-value storage backends with abstract base."""

from chat_cache.storage.base import BaseStorage
from chat_cache.storage.memory import MemoryStorage
from chat_cache.storage.sqlite import SQLiteStorage

__all__ = [
    "BaseStorage",
    "MemoryStorage",
    "SQLiteStorage",
]
