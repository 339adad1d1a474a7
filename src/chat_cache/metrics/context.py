"""Counters for offline cache activity."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Callable

from chat_cache.events import CacheEvent, EventBus


@dataclass
class MetricsSnapshot:
    """Point-in-time copy of the cache counters."""

    hits: int = 0
    misses: int = 0
    writes: int = 0
    messages_written: int = 0
    dropped_writes: int = 0
    evictions: int = 0
    expirations: int = 0
    cleanups: int = 0
    keys_cleaned: int = 0
    clears: int = 0

    @property
    def hit_ratio(self) -> float:
        reads = self.hits + self.misses
        return self.hits / reads if reads else 0.0


class CacheMetrics:
    """Counts cache events published on an EventBus.

    Use ``create()`` to subscribe and ``dispose()`` to detach; there is no
    module-level instance, consumers are handed the context they report to.
    """

    def __init__(self) -> None:
        self._counts = MetricsSnapshot()
        self._lock = threading.Lock()
        self._unsubscribe: Callable[[], None] | None = None
        self.disposed = False

    @classmethod
    def create(cls, event_bus: EventBus) -> CacheMetrics:
        metrics = cls()
        metrics._unsubscribe = event_bus.subscribe_all(metrics.record)
        return metrics

    def dispose(self) -> None:
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None
        self.disposed = True

    def record(self, event: CacheEvent) -> None:
        if self.disposed:
            return
        with self._lock:
            c = self._counts
            if event.kind == "read_hit":
                c.hits += 1
            elif event.kind == "read_miss":
                c.misses += 1
            elif event.kind == "written":
                c.writes += 1
                c.messages_written += event.count
            elif event.kind == "write_dropped":
                c.dropped_writes += 1
            elif event.kind == "evicted":
                c.evictions += event.count or 1
            elif event.kind == "expired":
                c.expirations += 1
            elif event.kind == "cleaned":
                c.cleanups += 1
                c.keys_cleaned += event.count
            elif event.kind == "cleared":
                c.clears += 1

    def snapshot(self) -> MetricsSnapshot:
        with self._lock:
            return MetricsSnapshot(**vars(self._counts))

    def reset(self) -> None:
        with self._lock:
            self._counts = MetricsSnapshot()
