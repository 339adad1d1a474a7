"""Tests for cached message models."""

import dataclasses

import pytest

from chat_cache.messages import Attachment, CacheEntry, CacheMetadata, CachedMessage


def _message():
    return CachedMessage(
        id="m1",
        conversation_id="c1",
        text="Привет",
        created_at=1_700_000_000_000,
        is_outgoing=True,
        channel="max",
        attachment=Attachment(url="https://x/a.pdf", name="a.pdf", type="application/pdf"),
    )


def test_cached_message_is_frozen():
    with pytest.raises(dataclasses.FrozenInstanceError):
        _message().text = "changed"


def test_cached_message_dict_keys():
    data = _message().to_dict()
    assert set(data) == {
        "id", "conversationId", "text", "createdAt", "isOutgoing", "channel", "attachment",
    }
    assert CachedMessage.from_dict(data) == _message()


def test_cache_entry_from_dict():
    entry = CacheEntry.from_dict(
        {"version": "v1", "timestamp": 5, "messages": [_message().to_dict()]}
    )
    assert entry.messages == [_message()]


def test_metadata_from_dict_requires_version():
    with pytest.raises(KeyError):
        CacheMetadata.from_dict({"clients": []})
