"""
Tests for write-through persistence and the storage ports.
"""

import json

import pytest

from codeshell.vfs.storage import FileStorage, MemoryStorage, StorageError, StoragePort
from codeshell.vfs.store import EntityStore


class FailingStorage(StoragePort):
    """Storage whose reads and/or writes always fail"""

    def __init__(self, fail_get=False, fail_set=True):
        self.fail_get = fail_get
        self.fail_set = fail_set
        self.data = {}

    def get(self, key):
        if self.fail_get:
            raise StorageError("disk on fire")
        return self.data.get(key)

    def set(self, key, data):
        if self.fail_set:
            raise StorageError("quota exceeded")
        self.data[key] = data

    def delete(self, key):
        self.data.pop(key, None)


class TestMemoryStorage:
    """MemoryStorage"""

    def test_get_set_delete(self):
        storage = MemoryStorage()

        assert storage.get("k") is None
        storage.set("k", b"value")
        assert storage.get("k") == b"value"
        storage.delete("k")
        assert storage.get("k") is None

    def test_delete_missing_key(self):
        MemoryStorage().delete("missing")


class TestFileStorage:
    """FileStorage"""

    def test_round_trip(self, tmp_path):
        storage = FileStorage(tmp_path / "data")

        assert storage.get("codeEditor_data") is None
        storage.set("codeEditor_data", b'{"files": []}')

        assert storage.get("codeEditor_data") == b'{"files": []}'
        assert (tmp_path / "data" / "codeEditor_data.json").exists()

    def test_overwrite_leaves_no_temp_files(self, tmp_path):
        storage = FileStorage(tmp_path)
        storage.set("key", b"one")
        storage.set("key", b"two")

        assert storage.get("key") == b"two"
        assert [p.name for p in tmp_path.iterdir()] == ["key.json"]

    def test_unsafe_key_characters_are_replaced(self, tmp_path):
        storage = FileStorage(tmp_path)
        storage.set("../escape/key", b"x")

        assert storage.get("../escape/key") == b"x"
        assert all(p.parent == tmp_path for p in tmp_path.iterdir())

    def test_delete(self, tmp_path):
        storage = FileStorage(tmp_path)
        storage.set("key", b"x")

        storage.delete("key")
        storage.delete("key")

        assert storage.get("key") is None

    def test_write_failure_raises_storage_error(self, tmp_path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("file in the way")
        storage = FileStorage(blocker)

        with pytest.raises(StorageError):
            storage.set("key", b"x")

    def test_default_directory_follows_xdg(self, tmp_path, monkeypatch):
        monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))

        storage = FileStorage()

        assert storage.directory == tmp_path / "codeshell"


class TestWriteThrough:
    """Every mutation is flushed before the call returns"""

    def test_each_mutation_persists(self):
        storage = MemoryStorage()
        store = EntityStore(storage)

        file = store.create_file("a.txt", "one")
        first = storage.data[store.storage_key]
        store.update_file_content(file, "two")
        second = storage.data[store.storage_key]

        assert first != second
        assert "two" in second.decode("utf-8")

    def test_snapshot_is_json(self):
        storage = MemoryStorage()
        store = EntityStore(storage)
        store.create_folder("src")

        data = json.loads(storage.data[store.storage_key])

        assert data["folders"][0][1]["name"] == "src"

    def test_custom_storage_key(self):
        storage = MemoryStorage()
        store = EntityStore(storage, storage_key="workspace")
        store.create_file("a.txt")

        assert set(storage.data) == {"workspace"}

    def test_reload_from_storage(self):
        storage = MemoryStorage()
        store = EntityStore(storage)
        src = store.create_folder("src")
        file = store.create_file("app.js", "let x;", src)
        store.update_file_content(file, "let y;")

        reopened = EntityStore(storage)

        copy = reopened.get_file(file.id)
        assert copy.path == "src/app.js"
        assert copy.content == "let y;"
        assert copy.is_modified is True
        assert reopened.get_folder(src.id).child_ids == [file.id]

    def test_reload_through_file_storage(self, tmp_path):
        store = EntityStore(FileStorage(tmp_path))
        store.create_file("notes.md", "# Notes")

        reopened = EntityStore(FileStorage(tmp_path))

        assert reopened.get_file_by_path("notes.md").content == "# Notes"

    def test_reloaded_store_does_not_reuse_ids(self):
        storage = MemoryStorage()
        store = EntityStore(storage)
        old_ids = {store.create_file(f"{i}.txt").id for i in range(3)}

        reopened = EntityStore(storage)
        new = reopened.create_file("new.txt")

        assert new.id not in old_ids


class TestFailures:
    """Persistence failures never reach the caller"""

    def test_write_failure_is_swallowed(self, capsys):
        store = EntityStore(FailingStorage(fail_set=True))

        file = store.create_file("a.txt", "text")
        store.rename_file(file, "b.txt")

        assert store.get_file(file.id).name == "b.txt"
        assert "Failed to save to storage" in capsys.readouterr().out

    def test_read_failure_starts_empty(self, capsys):
        store = EntityStore(FailingStorage(fail_get=True, fail_set=False))

        assert store.get_files() == []
        assert "Failed to load from storage" in capsys.readouterr().out

    def test_corrupt_data_starts_empty(self):
        storage = MemoryStorage({"codeEditor_data": b"\x00garbage"})

        store = EntityStore(storage)

        assert store.get_files() == []
        assert store.get_folders() == []

    def test_inconsistent_data_starts_empty(self):
        snapshot = {"files": [["f1", {"name": "a.txt", "parent": "ghost"}]], "folders": []}
        storage = MemoryStorage({"codeEditor_data": json.dumps(snapshot).encode()})

        store = EntityStore(storage)

        assert store.get_files() == []
