"""Cached message models and the backend row boundary."""

from chat_cache.messages.media import detect_media_type
from chat_cache.messages.models import (
    Attachment,
    CacheEntry,
    CacheMetadata,
    CachedMessage,
    ClientAccess,
)
from chat_cache.messages.parser import parse_message_row, parse_message_row_strict

__all__ = [
    "CachedMessage",
    "Attachment",
    "CacheEntry",
    "CacheMetadata",
    "ClientAccess",
    "parse_message_row",
    "parse_message_row_strict",
    "detect_media_type",
]
