"""Dict-backed storage, mainly for tests and short-lived processes."""

from __future__ import annotations

from chat_cache.exceptions import StorageQuotaError
from chat_cache.storage.base import BaseStorage, item_size


class MemoryStorage(BaseStorage):
    """In-process key-value store with an optional size quota.

    Args:
        quota_bytes: Maximum total of key + value lengths. None disables
            the check.
    """

    def __init__(self, quota_bytes: int | None = None):
        self.quota_bytes = quota_bytes
        self._items: dict[str, str] = {}

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self.quota_bytes is not None:
            current = self.used_bytes()
            if key in self._items:
                current -= item_size(key, self._items[key])
            if current + item_size(key, value) > self.quota_bytes:
                raise StorageQuotaError(
                    f"Storage quota of {self.quota_bytes} exceeded writing '{key}'."
                )
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._items)

    def clear(self) -> None:
        self._items.clear()

    def used_bytes(self) -> int:
        return sum(item_size(k, v) for k, v in self._items.items())
