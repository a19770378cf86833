"""Tests for the scoped key-value stores."""

import sqlite3

import pytest

from adapters.config_store import MemoryConfigStore, SqliteConfigStore, scope_key


def test_scope_key():
    assert scope_key("pomodoro-storage", "u1") == "pomodoro-storage-u1"
    assert scope_key("pomodoro-storage", None) == "pomodoro-storage-guest"
    assert scope_key("recently-played", "") == "recently-played-guest"


class TestMemoryConfigStore:
    def test_missing_scope(self):
        assert MemoryConfigStore().load("nothing") is None

    def test_save_merges(self):
        store = MemoryConfigStore()
        store.save("s", {"a": 1})
        store.save("s", {"b": 2})
        assert store.load("s") == {"a": 1, "b": 2}

    def test_load_returns_copy(self):
        store = MemoryConfigStore({"s": {"a": 1}})
        store.load("s")["a"] = 99
        assert store.load("s") == {"a": 1}


class TestSqliteConfigStore:
    @pytest.fixture
    def db_path(self, tmp_path):
        return str(tmp_path / "client.db")

    def test_round_trip_and_merge(self, db_path):
        store = SqliteConfigStore(db_path)
        store.save("pomodoro-storage-u1", {"work_duration": 40})
        store.save("pomodoro-storage-u1", {"completed_sessions": 2})
        assert store.load("pomodoro-storage-u1") == {"work_duration": 40, "completed_sessions": 2}

    def test_survives_reopen(self, db_path):
        SqliteConfigStore(db_path).save("music-player-storage", {"volume": 0.4})
        assert SqliteConfigStore(db_path).load("music-player-storage") == {"volume": 0.4}

    def test_missing_scope(self, db_path):
        assert SqliteConfigStore(db_path).load("nope") is None

    def test_corrupt_record_reads_as_absent(self, db_path):
        store = SqliteConfigStore(db_path)
        with sqlite3.connect(db_path) as conn:
            conn.execute("INSERT INTO records (scope, data) VALUES (?, ?)", ("broken", "{not json"))
        assert store.load("broken") is None
        store.save("broken", {"a": 1})
        assert store.load("broken") == {"a": 1}

    def test_delete(self, db_path):
        store = SqliteConfigStore(db_path)
        store.save("s", {"a": 1})
        store.delete("s")
        assert store.load("s") is None
