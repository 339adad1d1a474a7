"""Typed publish/subscribe channel, decoupled from any UI runtime."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable

logger = logging.getLogger(__name__)

EVENT_KINDS = (
    "written",
    "write_dropped",
    "read_hit",
    "read_miss",
    "expired",
    "evicted",
    "cleaned",
    "cleared",
)


@dataclass(frozen=True)
class CacheEvent:
    """Something that happened to the offline cache."""

    kind: str  # one of EVENT_KINDS
    conversation_id: str | None = None
    count: int = 0  # messages written, keys removed, ...
    timestamp: float = field(default_factory=time.time)


Handler = Callable[[CacheEvent], None]


class EventBus:
    """Fan out CacheEvents to subscribers.

    Handler exceptions are logged and isolated so a faulty subscriber can
    never break the publisher.
    """

    def __init__(self) -> None:
        self._handlers: dict[str | None, list[Handler]] = {}
        self._lock = threading.Lock()

    def subscribe(self, kind: str, handler: Handler) -> Callable[[], None]:
        """Register a handler for one event kind; returns an unsubscribe callable."""
        if kind not in EVENT_KINDS:
            raise ValueError(f"Unknown event kind: {kind}")
        return self._add(kind, handler)

    def subscribe_all(self, handler: Handler) -> Callable[[], None]:
        """Register a handler for every event kind."""
        return self._add(None, handler)

    def publish(self, event: CacheEvent) -> None:
        with self._lock:
            handlers = list(self._handlers.get(event.kind, []))
            handlers.extend(self._handlers.get(None, []))
        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                logger.warning("Event handler failed for %s: %s", event.kind, e)

    def handler_count(self) -> int:
        with self._lock:
            return sum(len(h) for h in self._handlers.values())

    def _add(self, kind: str | None, handler: Handler) -> Callable[[], None]:
        with self._lock:
            self._handlers.setdefault(kind, []).append(handler)

        def unsubscribe() -> None:
            with self._lock:
                handlers = self._handlers.get(kind, [])
                if handler in handlers:
                    handlers.remove(handler)

        return unsubscribe
