"""Tests for the in-memory query layer."""

from chat_cache.query import QueryClient, messages_key


def test_get_set():
    client = QueryClient()
    assert client.get_data(messages_key("c1")) is None
    client.set_data(messages_key("c1"), [1, 2])
    assert client.get_data(("messages", "c1")) == [1, 2]


def test_set_if_empty():
    client = QueryClient()
    assert client.set_data_if_empty(messages_key("c1"), ["cached"]) is True
    assert client.set_data_if_empty(messages_key("c1"), ["other"]) is False
    assert client.get_data(messages_key("c1")) == ["cached"]


def test_remove_and_clear():
    client = QueryClient()
    client.set_data(messages_key("a"), 1)
    client.set_data(messages_key("b"), 2)
    client.remove(messages_key("a"))
    assert client.get_data(messages_key("a")) is None
    client.clear()
    assert client.get_data(messages_key("b")) is None
