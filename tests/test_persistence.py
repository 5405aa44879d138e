"""Tests for session stores."""

import pytest

from formbuilder.errors import PersistenceError
from formbuilder.persistence import MemorySessionStore, TinyDBSessionStore


@pytest.fixture
def tinydb_store(tmp_path) -> TinyDBSessionStore:
    return TinyDBSessionStore(tmp_path / "sessions.json")


class TestTinyDBSessionStore:
    def test_missing_key(self, tinydb_store) -> None:
        assert tinydb_store.load("form-builder-new-form") is None

    def test_save_then_load(self, tinydb_store) -> None:
        blob = {"formName": "Survey", "history": [], "currentHistoryIndex": 0}
        tinydb_store.save("form-builder-new-form", blob)
        assert tinydb_store.load("form-builder-new-form") == blob

    def test_last_write_wins(self, tinydb_store) -> None:
        tinydb_store.save("k", {"formName": "first"})
        tinydb_store.save("k", {"formName": "second"})
        assert tinydb_store.load("k") == {"formName": "second"}
        assert tinydb_store.keys() == ["k"]

    def test_delete(self, tinydb_store) -> None:
        tinydb_store.save("k", {"formName": "x"})
        tinydb_store.delete("k")
        assert tinydb_store.load("k") is None

    def test_corrupt_file_raises_persistence_error(self, tmp_path) -> None:
        path = tmp_path / "sessions.json"
        path.write_text("{not json")
        with pytest.raises(PersistenceError):
            TinyDBSessionStore(path).load("k")


class TestMemorySessionStore:
    def test_loaded_blob_is_a_copy(self) -> None:
        store = MemorySessionStore()
        store.save("k", {"fields": [{"id": "a"}]})
        loaded = store.load("k")
        loaded["fields"].append({"id": "b"})
        assert store.load("k") == {"fields": [{"id": "a"}]}

    def test_delete_and_keys(self) -> None:
        store = MemorySessionStore()
        store.save("b", {})
        store.save("a", {})
        store.delete("b")
        store.delete("missing")
        assert store.keys() == ["a"]
