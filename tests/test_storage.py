"""Tests for key-value storage backends."""

import json
import sqlite3

import pytest

from lawmasters.exceptions import StorageError, StorageReadError, StorageWriteError
from lawmasters.store.storage import (
    JSONFileStorage,
    KeyValueStorage,
    MemoryStorage,
    SQLiteStorage,
)


@pytest.fixture(params=["memory", "json", "sqlite"])
def backend(request, tmp_path):
    if request.param == "memory":
        yield MemoryStorage()
    elif request.param == "json":
        yield JSONFileStorage(tmp_path / "prefs")
    else:
        storage = SQLiteStorage(":memory:")
        storage.initialize()
        yield storage
        storage.close()


class TestKeyValueContract:
    def test_missing_key_returns_none(self, backend: KeyValueStorage):
        assert backend.get_item("absent") is None

    def test_set_then_get(self, backend: KeyValueStorage):
        backend.set_item("k", '{"a": 1}')

        assert backend.get_item("k") == '{"a": 1}'

    def test_set_overwrites(self, backend: KeyValueStorage):
        backend.set_item("k", "one")
        backend.set_item("k", "two")

        assert backend.get_item("k") == "two"

    def test_remove_item(self, backend: KeyValueStorage):
        backend.set_item("k", "v")
        backend.remove_item("k")

        assert backend.get_item("k") is None

    def test_remove_missing_key_is_noop(self, backend: KeyValueStorage):
        backend.remove_item("never-set")

        assert backend.get_item("never-set") is None

    def test_keys_are_independent(self, backend: KeyValueStorage):
        backend.set_item("a", "1")
        backend.set_item("b", "2")

        assert backend.get_item("a") == "1"
        assert backend.get_item("b") == "2"


class TestMemoryStorage:
    def test_initial_items(self):
        storage = MemoryStorage({"x": "1"})

        assert storage.get_item("x") == "1"
        assert storage.keys() == ["x"]

    def test_initial_dict_is_copied(self):
        initial = {"x": "1"}
        storage = MemoryStorage(initial)
        storage.set_item("y", "2")

        assert "y" not in initial


class TestJSONFileStorage:
    def test_creates_directory_on_first_write(self, tmp_path):
        directory = tmp_path / "nested" / "prefs"
        storage = JSONFileStorage(directory)

        storage.set_item("lawmasters-app-store", json.dumps({"version": 0}))

        assert directory.is_dir()
        assert storage.path_for("lawmasters-app-store").exists()

    def test_unsafe_key_characters_are_replaced(self, tmp_path):
        storage = JSONFileStorage(tmp_path)

        path = storage.path_for("../etc/passwd")

        assert path.parent == tmp_path
        assert path.name == ".._etc_passwd.json"

    def test_write_leaves_no_temp_files(self, tmp_path):
        storage = JSONFileStorage(tmp_path)

        storage.set_item("k", "v")
        storage.set_item("k", "w")

        assert sorted(p.name for p in tmp_path.iterdir()) == ["k.json"]

    def test_values_survive_new_instance(self, tmp_path):
        JSONFileStorage(tmp_path).set_item("k", "persisted")

        assert JSONFileStorage(tmp_path).get_item("k") == "persisted"

    def test_unreadable_file_raises_read_error(self, tmp_path):
        storage = JSONFileStorage(tmp_path)
        storage.path_for("k").write_bytes(b"\xff\xfe\x00bad")

        with pytest.raises(StorageReadError) as exc_info:
            storage.get_item("k")

        assert exc_info.value.context["key"] == "k"

    def test_write_into_file_path_raises_write_error(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        storage = JSONFileStorage(blocker)

        with pytest.raises(StorageWriteError):
            storage.set_item("k", "v")

    def test_directory_under_a_file_raises_read_error(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        storage = JSONFileStorage(blocker / "prefs")

        with pytest.raises(StorageReadError):
            storage.get_item("k")


class TestSQLiteStorage:
    def test_values_survive_reconnect(self, tmp_path):
        path = tmp_path / "db" / "preferences.db"
        first = SQLiteStorage(path)
        first.initialize()
        first.set_item("k", "v")
        first.close()

        second = SQLiteStorage(path)
        second.initialize()

        assert second.get_item("k") == "v"
        second.close()

    def test_upsert_keeps_single_row(self):
        storage = SQLiteStorage()
        storage.initialize()
        storage.set_item("k", "one")
        storage.set_item("k", "two")

        count = storage.get_connection().execute(
            "SELECT COUNT(*) FROM kv_store"
        ).fetchone()[0]

        assert count == 1
        storage.close()

    def test_missing_table_raises_read_error(self):
        storage = SQLiteStorage()

        with pytest.raises(StorageReadError):
            storage.get_item("k")
        storage.close()

    def test_missing_table_raises_write_error(self):
        storage = SQLiteStorage()

        with pytest.raises(StorageWriteError) as exc_info:
            storage.set_item("k", "v")

        assert isinstance(exc_info.value.__cause__, sqlite3.Error)
        storage.close()

    def test_close_is_idempotent(self):
        storage = SQLiteStorage()
        storage.initialize()

        storage.close()
        storage.close()

    def test_unreachable_path_raises_storage_errors(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        storage = SQLiteStorage(blocker / "db" / "preferences.db")

        with pytest.raises(StorageError) as exc_info:
            storage.initialize()
        with pytest.raises(StorageReadError):
            storage.get_item("k")
        with pytest.raises(StorageWriteError):
            storage.set_item("k", "v")
        with pytest.raises(StorageWriteError):
            storage.remove_item("k")

        assert isinstance(exc_info.value.__cause__, OSError)
        storage.close()
