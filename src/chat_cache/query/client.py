"""Minimal in-memory query data store with get/set semantics."""

from __future__ import annotations

import threading
from typing import Any


def messages_key(conversation_id: str) -> tuple[str, str]:
    """Query key under which a conversation's messages are held."""
    return ("messages", conversation_id)


class QueryClient:
    """Holds the latest fetched data per query key.

    Stands in for the UI's data-fetching layer: the network layer writes
    fresh results with ``set_data``, views read them with ``get_data``.
    """

    def __init__(self) -> None:
        self._data: dict[tuple, Any] = {}
        self._lock = threading.Lock()

    def get_data(self, key: tuple) -> Any | None:
        with self._lock:
            return self._data.get(key)

    def set_data(self, key: tuple, value: Any) -> None:
        with self._lock:
            self._data[key] = value

    def set_data_if_empty(self, key: tuple, value: Any) -> bool:
        """Store value only when the key holds no data; returns True if stored."""
        with self._lock:
            if self._data.get(key) is not None:
                return False
            self._data[key] = value
            return True

    def remove(self, key: tuple) -> None:
        with self._lock:
            self._data.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()
