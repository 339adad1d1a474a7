"""Offline message cache with TTL, size caps and LRU eviction."""

from chat_cache.offline.cache import (
    CACHE_PREFIX,
    CACHE_TTL_SECONDS,
    CACHE_VERSION,
    MAX_CONVERSATIONS,
    MAX_MESSAGES,
    CacheStats,
    OfflineMessageCache,
)

__all__ = [
    "OfflineMessageCache",
    "CacheStats",
    "CACHE_PREFIX",
    "CACHE_VERSION",
    "CACHE_TTL_SECONDS",
    "MAX_MESSAGES",
    "MAX_CONVERSATIONS",
]
