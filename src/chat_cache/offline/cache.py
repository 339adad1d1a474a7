"""Offline cache of recent chat messages per conversation.

Entries live in a persistent key-value store so a conversation can be painted
instantly before network data arrives. The cache is never a source of truth:
every public operation degrades to an empty or no-op result on storage
failure instead of raising.
"""

from __future__ import annotations

import functools
import json
import logging
import threading
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Iterable, Protocol

from chat_cache.events import CacheEvent, EventBus
from chat_cache.exceptions import ChatCacheError, StorageQuotaError
from chat_cache.messages import (
    CacheEntry,
    CacheMetadata,
    CachedMessage,
    ClientAccess,
    parse_message_row,
)
from chat_cache.query import messages_key
from chat_cache.storage import BaseStorage

logger = logging.getLogger(__name__)

CACHE_PREFIX = "chat_cache_"
CACHE_VERSION = "v1"
CACHE_TTL_SECONDS = 24 * 60 * 60
MAX_MESSAGES = 100
MAX_CONVERSATIONS = 50
CLEANUP_DELAY_SECONDS = 5.0

# Stored JSON that does not match the entry/metadata shape
_PARSE_ERRORS = (ValueError, KeyError, TypeError, AttributeError, OverflowError)


class QueryLayer(Protocol):
    def get_data(self, key: Any) -> Any: ...

    def set_data(self, key: Any, value: Any) -> None: ...


@dataclass
class CacheStats:
    """Diagnostics for the stored cache."""

    entry_count: int = 0
    total_size: int = 0  # characters of keys + values
    size_kb: float = 0.0
    size_mb: float = 0.0
    oldest_entry: datetime | None = None
    newest_entry: datetime | None = None


def _fail_safe(default):
    """Log storage faults at warning level and return ``default`` instead."""

    def decorator(func):
        @functools.wraps(func)
        def wrapper(self, *args, **kwargs):
            try:
                return func(self, *args, **kwargs)
            except (ChatCacheError, OSError) as e:
                logger.warning("Offline cache %s failed: %s", func.__name__, e)
                return default() if callable(default) else default

        return wrapper

    return decorator


class OfflineMessageCache:
    """Size- and age-bounded message cache with LRU eviction across conversations.

    Args:
        storage: Persistent key-value backend.
        prefix: Namespace for every key this cache writes.
        version: Format version; entries written under another version are
            discarded.
        ttl_seconds: Maximum entry age.
        max_messages: Messages kept per conversation.
        max_conversations: Conversations kept in the LRU index.
        cleanup_delay: Seconds after first use before the one-shot expiry
            sweep runs. None disables the scheduled sweep.
        event_bus: Channel receiving CacheEvents; a private one is created
            when omitted.
        clock: Returns the current time in seconds.
    """

    def __init__(
        self,
        storage: BaseStorage,
        *,
        prefix: str = CACHE_PREFIX,
        version: str = CACHE_VERSION,
        ttl_seconds: float = CACHE_TTL_SECONDS,
        max_messages: int = MAX_MESSAGES,
        max_conversations: int = MAX_CONVERSATIONS,
        cleanup_delay: float | None = CLEANUP_DELAY_SECONDS,
        event_bus: EventBus | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.storage = storage
        self.prefix = prefix
        self.version = version
        self.ttl_ms = int(ttl_seconds * 1000)
        self.max_messages = max_messages
        self.max_conversations = max_conversations
        self.cleanup_delay = cleanup_delay
        self.event_bus = event_bus or EventBus()
        self.clock = clock

        self._lock = threading.RLock()
        self._cleanup_scheduled = False
        self._cleanup_timer: threading.Timer | None = None

    # ------------------------------------------------------------------
    # Keys
    # ------------------------------------------------------------------

    @property
    def metadata_key(self) -> str:
        return f"{self.prefix}metadata"

    def entry_key(self, conversation_id: str) -> str:
        return f"{self.prefix}{self.version}_{conversation_id}"

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @_fail_safe(None)
    def read_from_cache(self, conversation_id: str) -> list[CachedMessage] | None:
        """Return cached messages most-recent-first, or None on a miss.

        Stale, foreign-version and corrupt entries are removed as they are
        found.
        """
        self._schedule_cleanup()
        key = self.entry_key(conversation_id)
        with self._lock:
            raw = self.storage.get_item(key)
            if raw is None:
                self._purge_other_versions(conversation_id)
                self._publish("read_miss", conversation_id)
                return None

            try:
                entry = CacheEntry.from_dict(json.loads(raw))
            except _PARSE_ERRORS as e:
                logger.warning("Discarding corrupt cache entry %s: %s", key, e)
                self.storage.remove_item(key)
                self._publish("read_miss", conversation_id)
                return None

            if entry.version != self.version or self._is_expired(entry.timestamp):
                logger.debug("Cache entry %s is stale, removing", key)
                self.storage.remove_item(key)
                self._publish("expired", conversation_id)
                self._publish("read_miss", conversation_id)
                return None

        self._publish("read_hit", conversation_id, len(entry.messages))
        return entry.messages

    @_fail_safe(None)
    def write_to_cache(
        self,
        conversation_id: str,
        messages: Iterable[CachedMessage | dict],
    ) -> None:
        """Replace the conversation's entry with the first ``max_messages`` items.

        Items may be CachedMessage instances or raw backend rows. A write
        that hits the storage quota is dropped and an expiry sweep runs
        instead; it is not retried.
        """
        self._schedule_cleanup()
        projected = self._project(conversation_id, list(messages)[: self.max_messages])
        entry = CacheEntry(version=self.version, timestamp=self._now_ms(), messages=projected)
        payload = json.dumps(entry.to_dict(), ensure_ascii=False, separators=(",", ":"))

        with self._lock:
            try:
                self.storage.set_item(self.entry_key(conversation_id), payload)
            except StorageQuotaError as e:
                logger.warning(
                    "Storage quota exceeded caching %s, dropping write: %s",
                    conversation_id,
                    e,
                )
                self._publish("write_dropped", conversation_id, len(projected))
                self.cleanup_old_entries()
                return

            self._publish("written", conversation_id, len(projected))
            self.update_metadata(conversation_id)

    @_fail_safe(None)
    def update_metadata(self, conversation_id: str) -> None:
        """Mark the conversation as most recently accessed and enforce the LRU cap."""
        with self._lock:
            metadata = self._load_metadata()
            clients = [c for c in metadata.clients if c.id != conversation_id]
            clients.insert(0, ClientAccess(id=conversation_id, last_access=self._now_ms()))
            clients.sort(key=lambda c: c.last_access, reverse=True)

            evicted = clients[self.max_conversations:]
            metadata.clients = clients[: self.max_conversations]
            for client in evicted:
                self.storage.remove_item(self.entry_key(client.id))
                logger.debug("Evicted cached conversation %s", client.id)

            self._save_metadata(metadata)

        if evicted:
            self._publish("evicted", None, len(evicted))

    @_fail_safe(0)
    def cleanup_old_entries(self) -> int:
        """Remove expired, foreign-version and unparseable entries.

        Returns the number of keys removed.
        """
        removed = 0
        with self._lock:
            for key in self._namespace_keys():
                if key == self.metadata_key:
                    continue
                raw = self.storage.get_item(key)
                if raw is None:
                    continue
                try:
                    entry = CacheEntry.from_dict(json.loads(raw))
                    stale = entry.version != self.version or self._is_expired(entry.timestamp)
                except _PARSE_ERRORS:
                    stale = True
                if stale:
                    self.storage.remove_item(key)
                    removed += 1

            metadata = self._load_metadata()
            remaining = set(self.storage.keys())
            metadata.clients = [
                c for c in metadata.clients if self.entry_key(c.id) in remaining
            ]
            metadata.last_cleanup = self._now_ms()
            self._save_metadata(metadata)

        if removed:
            logger.info("Offline cache cleanup removed %d entries", removed)
        self._publish("cleaned", None, removed)
        return removed

    @_fail_safe(None)
    def clear_all_cache(self) -> None:
        """Remove every key in the cache namespace."""
        with self._lock:
            keys = self._namespace_keys()
            for key in keys:
                self.storage.remove_item(key)
        logger.info("Offline cache cleared (%d keys)", len(keys))
        self._publish("cleared", None, len(keys))

    @_fail_safe(CacheStats)
    def get_cache_stats(self) -> CacheStats:
        """Entry count and approximate size; zeros when storage is unreadable."""
        stats = CacheStats()
        timestamps: list[int] = []
        with self._lock:
            for key in self._namespace_keys():
                raw = self.storage.get_item(key)
                if raw is None:
                    continue
                stats.total_size += len(key) + len(raw)
                if key == self.metadata_key:
                    continue
                stats.entry_count += 1
                try:
                    timestamps.append(int(json.loads(raw)["timestamp"]))
                except _PARSE_ERRORS:
                    pass

        stats.size_kb = round(stats.total_size / 1024, 2)
        stats.size_mb = round(stats.total_size / 1024 / 1024, 2)
        dates: list[datetime] = []
        for ts in timestamps:
            try:
                dates.append(datetime.fromtimestamp(ts / 1000))
            except (ValueError, OverflowError, OSError):
                logger.debug("Ignoring unrepresentable cache timestamp %s", ts)
        if dates:
            stats.oldest_entry = min(dates)
            stats.newest_entry = max(dates)
        return stats

    def hydrate_from_cache(self, conversation_id: str, query_client: QueryLayer) -> bool:
        """Seed the query layer from the cache if it holds nothing for the conversation.

        Existing query data is never overwritten. Returns True when seeded.
        """
        messages = self.read_from_cache(conversation_id)
        if not messages:
            return False

        key = messages_key(conversation_id)
        set_if_empty = getattr(query_client, "set_data_if_empty", None)
        if set_if_empty is not None:
            if not set_if_empty(key, messages):
                return False
        elif query_client.get_data(key) is not None:
            return False
        else:
            query_client.set_data(key, messages)
        logger.debug("Hydrated %s with %d cached messages", conversation_id, len(messages))
        return True

    def dispose(self) -> None:
        """Cancel the pending cleanup sweep, if any."""
        with self._lock:
            if self._cleanup_timer is not None:
                self._cleanup_timer.cancel()
                self._cleanup_timer = None

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _now_ms(self) -> int:
        return int(self.clock() * 1000)

    def _is_expired(self, timestamp: int) -> bool:
        return self._now_ms() - timestamp > self.ttl_ms

    def _namespace_keys(self) -> list[str]:
        return [k for k in self.storage.keys() if k.startswith(self.prefix)]

    def _purge_other_versions(self, conversation_id: str) -> None:
        """Drop entries for this conversation written under another format version."""
        for key in self._namespace_keys():
            if key == self.metadata_key:
                continue
            # Versions never contain "_", conversation ids may
            version, _, owner = key[len(self.prefix):].partition("_")
            if owner == conversation_id and version != self.version:
                self.storage.remove_item(key)
                logger.debug("Removed foreign-version cache entry %s", key)

    def _project(self, conversation_id: str, items: list) -> list[CachedMessage]:
        projected: list[CachedMessage] = []
        for item in items:
            if isinstance(item, CachedMessage):
                projected.append(item)
                continue
            message = parse_message_row(item, conversation_id)
            if message is not None:
                projected.append(message)
        return projected

    def _load_metadata(self) -> CacheMetadata:
        raw = self.storage.get_item(self.metadata_key)
        if raw is not None:
            try:
                metadata = CacheMetadata.from_dict(json.loads(raw))
                if metadata.version == self.version:
                    return metadata
            except _PARSE_ERRORS as e:
                logger.warning("Discarding corrupt cache metadata: %s", e)
        return self._rebuild_metadata()

    def _rebuild_metadata(self) -> CacheMetadata:
        """Recreate the LRU index from stored entries, using their write time."""
        entry_prefix = f"{self.prefix}{self.version}_"
        clients: list[ClientAccess] = []
        for key in self._namespace_keys():
            if not key.startswith(entry_prefix):
                continue
            raw = self.storage.get_item(key)
            if raw is None:
                continue
            try:
                timestamp = int(json.loads(raw)["timestamp"])
            except _PARSE_ERRORS:
                continue
            clients.append(ClientAccess(id=key[len(entry_prefix):], last_access=timestamp))
        clients.sort(key=lambda c: c.last_access, reverse=True)
        return CacheMetadata(version=self.version, clients=clients)

    def _save_metadata(self, metadata: CacheMetadata) -> None:
        self.storage.set_item(
            self.metadata_key,
            json.dumps(metadata.to_dict(), separators=(",", ":")),
        )

    def _schedule_cleanup(self) -> None:
        """Start the one-shot expiry sweep on first use."""
        if self._cleanup_scheduled or self.cleanup_delay is None:
            return
        with self._lock:
            if self._cleanup_scheduled:
                return
            self._cleanup_scheduled = True
            timer = threading.Timer(self.cleanup_delay, self._run_scheduled_cleanup)
            timer.daemon = True
            self._cleanup_timer = timer
            timer.start()

    def _run_scheduled_cleanup(self) -> None:
        with self._lock:
            self._cleanup_timer = None
        self.cleanup_old_entries()

    def _publish(self, kind: str, conversation_id: str | None, count: int = 0) -> None:
        self.event_bus.publish(
            CacheEvent(kind=kind, conversation_id=conversation_id, count=count)
        )
