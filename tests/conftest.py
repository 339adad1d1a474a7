"""Shared fixtures for chat-cache tests."""

import pytest

from chat_cache.messages import CachedMessage
from chat_cache.offline import OfflineMessageCache
from chat_cache.storage import MemoryStorage


class FakeClock:
    """Manually advanced clock, in seconds."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_message(n: int, conversation_id: str = "c1", **overrides) -> CachedMessage:
    fields = {
        "id": f"m{n}",
        "conversation_id": conversation_id,
        "text": f"message {n}",
        "created_at": 1_700_000_000_000 - n * 1000,
        "is_outgoing": n % 2 == 0,
        "channel": "whatsapp",
    }
    fields.update(overrides)
    return CachedMessage(**fields)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def cache(storage, clock):
    c = OfflineMessageCache(storage, clock=clock, cleanup_delay=None)
    yield c
    c.dispose()


@pytest.fixture
def message():
    """Factory for CachedMessage instances."""
    return make_message
