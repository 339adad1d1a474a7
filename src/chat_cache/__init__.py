"""Offline, size- and age-bounded cache of recent chat messages."""

from chat_cache.events import CacheEvent, EventBus
from chat_cache.messages import CachedMessage, parse_message_row
from chat_cache.metrics import CacheMetrics
from chat_cache.offline import OfflineMessageCache
from chat_cache.query import QueryClient
from chat_cache.storage import MemoryStorage, SQLiteStorage

__all__ = [
    "OfflineMessageCache",
    "CachedMessage",
    "parse_message_row",
    "MemoryStorage",
    "SQLiteStorage",
    "QueryClient",
    "EventBus",
    "CacheEvent",
    "CacheMetrics",
]
