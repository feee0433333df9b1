import json
import logging

from core.storage import JsonFileStore, MemoryStore


def test_json_file_store_round_trip(tmp_path):
    """Test writes, reads and deletes against the JSON file."""
    path = tmp_path / "nested" / "store.json"
    store = JsonFileStore(str(path))

    assert store.get("missing") is None

    store.set_many({"a": "1", "b": "2"})
    store.set("c", "3")
    store.delete_many(["a", "not-there"])

    assert json.loads(path.read_text(encoding="utf-8")) == {"b": "2", "c": "3"}
    assert JsonFileStore(str(path)).get("c") == "3"


def test_json_file_store_ignores_unreadable_file(tmp_path, caplog):
    """Test that a corrupt file reads as empty and is replaced on write."""
    caplog.set_level(logging.WARNING, logger="core.storage")
    path = tmp_path / "store.json"
    path.write_text("{broken", encoding="utf-8")
    store = JsonFileStore(str(path))

    assert store.get("a") is None
    assert "Ignoring unreadable store file" in caplog.text

    store.set("a", "1")
    assert json.loads(path.read_text(encoding="utf-8")) == {"a": "1"}


def test_json_file_store_leaves_no_temp_files(tmp_path):
    """Test that atomic writes clean up after themselves."""
    store = JsonFileStore(str(tmp_path / "store.json"))
    store.set_many({"a": "1"})
    store.set_many({"b": "2"})

    assert [p.name for p in tmp_path.iterdir()] == ["store.json"]


def test_memory_store():
    """Test the in-process store."""
    store = MemoryStore({"x": "1"})
    store.set("y", "2")
    store.delete("x")

    assert store.keys() == {"y"}
    assert store.get("x") is None
