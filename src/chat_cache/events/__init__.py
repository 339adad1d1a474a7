"""Publish/subscribe channel for cache events."""

from chat_cache.events.bus import EVENT_KINDS, CacheEvent, EventBus

__all__ = [
    "EventBus",
    "CacheEvent",
    "EVENT_KINDS",
]
