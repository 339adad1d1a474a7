"""Abstract base class for persistent key-value storage backends."""

from __future__ import annotations

from abc import ABC, abstractmethod


class BaseStorage(ABC):
    """String-keyed, string-valued persistent store.

    Backends raise ``StorageAccessError`` when the store cannot be used and
    ``StorageQuotaError`` when a write would exceed the configured quota.
    """

    @abstractmethod
    def get_item(self, key: str) -> str | None:
        """Return the stored value, or None if the key is absent."""
        ...

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Insert or overwrite a value."""
        ...

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove a key; missing keys are ignored."""
        ...

    @abstractmethod
    def keys(self) -> list[str]:
        """All keys currently stored."""
        ...

    @abstractmethod
    def clear(self) -> None:
        """Remove every key."""
        ...

    def length(self) -> int:
        return len(self.keys())


def item_size(key: str, value: str) -> int:
    """Approximate stored size of one item, in characters."""
    return len(key) + len(value)
