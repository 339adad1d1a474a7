"""Unified exception hierarchy for chat-cache."""


class ChatCacheError(Exception):
    """Base exception for all chat-cache errors."""


# Storage
class StorageError(ChatCacheError):
    """Base exception for key-value storage operations."""


class StorageAccessError(StorageError):
    """Storage is unavailable, disabled or failed to read/write."""


class StorageQuotaError(StorageError):
    """A write would exceed the storage quota."""


# Messages
class MessageParseError(ChatCacheError):
    """A backend message row could not be turned into a cached message."""
