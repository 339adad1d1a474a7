"""In-memory query layer seeded by cache hydration."""

from chat_cache.query.client import QueryClient, messages_key

__all__ = [
    "QueryClient",
    "messages_key",
]
