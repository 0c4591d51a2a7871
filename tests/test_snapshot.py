"""
Tests for snapshot export/import.

These tests cover:
- Export/import round-trip preserving ids, names, content and paths
- Legacy nested records
- Structural validation (missing links, cycles, bad types)
- Import atomicity: a rejected snapshot leaves the store untouched
- The id counter never moving backwards
"""

import json
from datetime import datetime

import pytest

from codeshell.vfs.events import DataImported
from codeshell.vfs.ids import counter_of
from codeshell.vfs.snapshot import SnapshotError, decode_snapshot, parse_snapshot
from codeshell.vfs.storage import MemoryStorage
from codeshell.vfs.store import EntityStore


def make_store():
    return EntityStore(MemoryStorage())


def sample_store():
    store = make_store()
    src = store.create_folder("src")
    lib = store.create_folder("lib", src)
    store.create_file("index.html", "<h1>Hi</h1>")
    store.create_file("app.js", "console.log('hi')", src)
    util = store.create_file("util.js", "export {}", lib)
    store.update_file_content(util, "export const x = 1")
    return store


class TestExport:
    """export_data()"""

    def test_export_layout(self):
        store = sample_store()
        data = store.export_data()

        assert set(data) == {"files", "folders", "nextId", "exportedAt"}
        assert len(data["files"]) == 3
        assert len(data["folders"]) == 2
        assert isinstance(data["nextId"], int)
        datetime.fromisoformat(data["exportedAt"])

    def test_records_use_ids_for_links(self):
        store = sample_store()
        src = store.get_folder_by_path("src")
        app = store.get_file_by_path("src/app.js")

        data = store.export_data()
        files = dict((i, r) for i, r in data["files"])
        folders = dict((i, r) for i, r in data["folders"])

        assert files[app.id]["parent"] == src.id
        assert files[app.id]["type"] == "file"
        assert files[app.id]["path"] == "src/app.js"
        assert app.id in folders[src.id]["children"]
        assert folders[src.id]["parent"] is None
        assert folders[src.id]["type"] == "folder"

    def test_export_is_json_serializable(self):
        store = sample_store()

        text = json.dumps(store.export_data())

        assert "util.js" in text

    def test_next_id_exceeds_every_counter(self):
        store = sample_store()
        data = store.export_data()
        ids = [i for i, _ in data["files"]] + [i for i, _ in data["folders"]]

        assert all(counter_of(i) < data["nextId"] for i in ids)


class TestRoundTrip:
    """import_data(export_data())"""

    def test_round_trip_preserves_tree(self):
        original = sample_store()
        snapshot = original.export_data()

        restored = make_store()
        assert restored.import_data(snapshot) is True

        assert {f.id for f in restored.get_files()} == {f.id for f in original.get_files()}
        for file in original.get_files():
            copy = restored.get_file(file.id)
            assert copy.name == file.name
            assert copy.content == file.content
            assert copy.path == file.path
            assert copy.parent_id == file.parent_id
            assert copy.is_modified == file.is_modified
            assert copy.created_at == file.created_at
        for folder in original.get_folders():
            copy = restored.get_folder(folder.id)
            assert copy.path == folder.path
            assert copy.child_ids == folder.child_ids

    def test_round_trip_through_json(self):
        original = sample_store()
        snapshot = json.loads(json.dumps(original.export_data()))

        restored = make_store()
        restored.import_data(snapshot)

        assert restored.get_file_by_path("src/lib/util.js").content == "export const x = 1"

    def test_import_replaces_existing_content(self):
        store = make_store()
        store.create_file("old.txt")

        store.import_data(sample_store().export_data())

        assert store.get_file_by_path("old.txt") is None
        assert len(store.get_files()) == 3

    def test_import_publishes_event(self):
        store = make_store()
        events = []
        store.bus.subscribe(DataImported, events.append)

        store.import_data(sample_store().export_data())

        assert len(events) == 1

    def test_ids_are_not_reused_after_import(self):
        source = sample_store()
        snapshot = source.export_data()

        store = make_store()
        store.import_data(snapshot)
        new = store.create_file("new.txt")

        assert new.id not in {i for i, _ in snapshot["files"]}
        assert new.id not in {i for i, _ in snapshot["folders"]}

    def test_low_next_id_does_not_rewind_counter(self):
        store = make_store()
        for i in range(5):
            store.create_file(f"{i}.txt")
        earlier = store.create_file("last.txt")

        store.import_data({"files": [], "folders": [], "nextId": 1})
        later = store.create_file("after.txt")

        assert counter_of(later.id) > counter_of(earlier.id)

    def test_paths_are_recomputed(self):
        """Stored paths are ignored in favour of names and links"""
        store = sample_store()
        snapshot = store.export_data()
        for _, record in snapshot["files"]:
            record["path"] = "bogus"

        restored = make_store()
        restored.import_data(snapshot)

        assert restored.get_file_by_path("src/app.js") is not None


class TestLegacyFormat:
    """Nested records from older exports"""

    def test_nested_parent_and_children(self):
        folder_record = {
            "id": "item_1_1000",
            "name": "src",
            "type": "folder",
            "createdAt": "2024-01-01T10:00:00.000Z",
            "parent": None,
            "path": "src",
        }
        file_record = {
            "id": "item_2_1001",
            "name": "app.js",
            "content": "let a = 1;",
            "type": "file",
            "createdAt": "2024-01-01T10:00:01.000Z",
            "modifiedAt": "2024-01-01T10:00:02.000Z",
            "parent": folder_record,
            "isModified": False,
            "path": "src/app.js",
        }
        folder_record = {**folder_record, "children": [dict(file_record, parent=None)]}
        snapshot = {
            "files": [["item_2_1001", file_record]],
            "folders": [["item_1_1000", folder_record]],
            "nextId": 3,
            "exportedAt": "2024-01-01T10:05:00.000Z",
        }

        store = make_store()
        assert store.import_data(snapshot) is True

        app = store.get_file("item_2_1001")
        assert app.path == "src/app.js"
        assert app.parent_id == "item_1_1000"
        assert store.get_folder("item_1_1000").child_ids == ["item_2_1001"]

    def test_missing_next_id_is_derived(self):
        snapshot = {
            "files": [["item_7_1", {"id": "item_7_1", "name": "a.txt", "parent": None}]],
            "folders": [],
        }

        state = parse_snapshot(snapshot)

        assert state.next_id == 8

    def test_foreign_ids_are_accepted(self):
        snapshot = {
            "files": [["abc", {"name": "a.txt", "parent": None}]],
            "folders": [],
            "nextId": 4,
        }

        state = parse_snapshot(snapshot)

        assert state.files["abc"].path == "a.txt"
        assert state.next_id == 4


class TestValidation:
    """Rejected snapshots"""

    def test_not_a_mapping(self):
        with pytest.raises(SnapshotError):
            parse_snapshot(["files"])

    def test_missing_child(self):
        snapshot = {
            "files": [],
            "folders": [
                ["d1", {"name": "src", "parent": None, "children": ["ghost"]}],
            ],
        }
        with pytest.raises(SnapshotError, match="missing child"):
            parse_snapshot(snapshot)

    def test_missing_parent(self):
        snapshot = {
            "files": [["f1", {"name": "a.txt", "parent": "ghost"}]],
            "folders": [],
        }
        with pytest.raises(SnapshotError, match="missing parent"):
            parse_snapshot(snapshot)

    def test_parent_not_listing_child(self):
        snapshot = {
            "files": [["f1", {"name": "a.txt", "parent": "d1"}]],
            "folders": [["d1", {"name": "src", "parent": None, "children": []}]],
        }
        with pytest.raises(SnapshotError):
            parse_snapshot(snapshot)

    def test_child_listed_twice(self):
        snapshot = {
            "files": [["f1", {"name": "a.txt", "parent": "d1"}]],
            "folders": [["d1", {"name": "src", "parent": None, "children": ["f1", "f1"]}]],
        }
        with pytest.raises(SnapshotError, match="twice"):
            parse_snapshot(snapshot)

    def test_parent_cycle(self):
        snapshot = {
            "files": [],
            "folders": [
                ["d1", {"name": "a", "parent": "d2", "children": ["d2"]}],
                ["d2", {"name": "b", "parent": "d1", "children": ["d1"]}],
            ],
        }
        with pytest.raises(SnapshotError, match="cycle"):
            parse_snapshot(snapshot)

    def test_wrong_type(self):
        snapshot = {
            "files": [["f1", {"name": "a", "type": "folder"}]],
            "folders": [],
        }
        with pytest.raises(SnapshotError):
            parse_snapshot(snapshot)

    def test_bad_timestamp(self):
        snapshot = {
            "files": [["f1", {"name": "a.txt", "createdAt": "yesterday"}]],
            "folders": [],
        }
        with pytest.raises(SnapshotError, match="timestamp"):
            parse_snapshot(snapshot)

    def test_bad_next_id(self):
        with pytest.raises(SnapshotError, match="nextId"):
            parse_snapshot({"files": [], "folders": [], "nextId": "seven"})

    def test_decode_rejects_garbage(self):
        with pytest.raises(SnapshotError):
            decode_snapshot(b"{not json")
        with pytest.raises(SnapshotError):
            decode_snapshot(b"[1, 2]")


class TestAtomicImport:
    """A failed import changes nothing"""

    def test_rejected_import_keeps_state(self):
        store = sample_store()
        before = store.export_data()
        events = []
        store.bus.subscribe_all(events.append)

        ok = store.import_data(
            {"files": [["f1", {"name": "a.txt", "parent": "ghost"}]], "folders": []}
        )

        assert ok is False
        assert events == []
        after = store.export_data()
        assert after["files"] == before["files"]
        assert after["folders"] == before["folders"]

    def test_rejected_import_is_not_persisted(self):
        storage = MemoryStorage()
        store = EntityStore(storage)
        store.create_file("keep.txt")
        saved = storage.data[store.storage_key]

        store.import_data({"files": "oops"})

        assert storage.data[store.storage_key] == saved
