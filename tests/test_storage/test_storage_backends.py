"""Tests for key-value storage backends."""

import sqlite3

import pytest

from chat_cache.exceptions import StorageAccessError, StorageQuotaError
from chat_cache.storage import BaseStorage, MemoryStorage, SQLiteStorage


def test_base_storage_is_abstract():
    with pytest.raises(TypeError):
        BaseStorage()


@pytest.fixture(params=["memory", "sqlite"])
def backend(request, tmp_path):
    if request.param == "memory":
        return MemoryStorage()
    return SQLiteStorage(tmp_path / "kv.db")


def test_set_get_remove(backend):
    assert backend.get_item("a") is None
    backend.set_item("a", "1")
    backend.set_item("a", "2")
    assert backend.get_item("a") == "2"
    backend.remove_item("a")
    assert backend.get_item("a") is None
    backend.remove_item("missing")


def test_keys_and_clear(backend):
    backend.set_item("x", "1")
    backend.set_item("y", "2")
    assert sorted(backend.keys()) == ["x", "y"]
    assert backend.length() == 2
    backend.clear()
    assert backend.keys() == []


def test_unicode_values(backend):
    backend.set_item("greeting", "Здравствуйте! 👋")
    assert backend.get_item("greeting") == "Здравствуйте! 👋"


def test_memory_quota():
    storage = MemoryStorage(quota_bytes=10)
    storage.set_item("k", "12345")
    with pytest.raises(StorageQuotaError):
        storage.set_item("k2", "123456789")
    # overwriting an existing key only counts the new value
    storage.set_item("k", "123456789")
    assert storage.used_bytes() == 10


def test_sqlite_quota(tmp_path):
    storage = SQLiteStorage(tmp_path / "kv.db", quota_bytes=10)
    storage.set_item("k", "12345")
    with pytest.raises(StorageQuotaError):
        storage.set_item("k2", "123456789")
    storage.set_item("k", "123456789")
    assert storage.get_item("k") == "123456789"


def test_sqlite_persists_across_instances(tmp_path):
    SQLiteStorage(tmp_path / "kv.db").set_item("k", "v")
    assert SQLiteStorage(tmp_path / "kv.db").get_item("k") == "v"


def test_sqlite_default_path_from_env(tmp_path, monkeypatch):
    monkeypatch.setenv("CHAT_CACHE_DB", str(tmp_path / "env.db"))
    storage = SQLiteStorage()
    assert storage.db_path == tmp_path / "env.db"


def test_sqlite_unopenable_path(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("not a dir")
    storage = SQLiteStorage(blocker / "kv.db")
    with pytest.raises(StorageAccessError):
        storage.get_item("k")


def test_sqlite_errors_are_wrapped(tmp_path, monkeypatch):
    storage = SQLiteStorage(tmp_path / "kv.db")
    storage.set_item("k", "v")

    def broken_connect(*args, **kwargs):
        raise sqlite3.OperationalError("disk I/O error")

    monkeypatch.setattr("chat_cache.storage.sqlite.sqlite3.connect", broken_connect)
    with pytest.raises(StorageAccessError):
        storage.keys()
