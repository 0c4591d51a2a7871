"""Tests for the event bus and the events the store publishes."""

import pytest

from codeshell.vfs.events import (
    DataCleared,
    EventBus,
    FileAdded,
    FileContentChanged,
    FileMoved,
    FileRenamed,
    FileSaved,
    FolderAdded,
    FolderMoved,
    FolderRenamed,
)
from codeshell.vfs.storage import MemoryStorage, StoragePort
from codeshell.vfs.store import EntityStore


class TestEventBus:
    """Subscription and delivery"""

    def test_handlers_receive_their_type_only(self):
        bus = EventBus()
        added, cleared = [], []
        bus.subscribe(FileAdded, added.append)
        bus.subscribe(DataCleared, cleared.append)

        bus.publish(DataCleared())

        assert added == []
        assert len(cleared) == 1

    def test_unknown_event_type_is_rejected(self):
        bus = EventBus()

        with pytest.raises(TypeError):
            bus.subscribe(str, print)
        with pytest.raises(TypeError):
            bus.publish("fileAdded")

    def test_handlers_run_in_registration_order(self):
        bus = EventBus()
        calls = []
        bus.subscribe_all(lambda e: calls.append("all"))
        bus.subscribe(DataCleared, lambda e: calls.append("first"))
        bus.subscribe(DataCleared, lambda e: calls.append("second"))

        bus.publish(DataCleared())

        assert calls == ["first", "second", "all"]

    def test_unsubscribe(self):
        bus = EventBus()
        calls = []
        handler = calls.append
        bus.subscribe(DataCleared, handler)
        bus.unsubscribe(DataCleared, handler)
        bus.unsubscribe(DataCleared, handler)

        bus.publish(DataCleared())

        assert calls == []

    def test_unsubscribe_all(self):
        bus = EventBus()
        calls = []
        bus.subscribe_all(calls.append)
        bus.unsubscribe_all(calls.append)

        bus.publish(DataCleared())

        assert calls == []

    def test_failing_handler_does_not_stop_delivery(self, capsys):
        bus = EventBus()
        calls = []

        def broken(event):
            raise RuntimeError("boom")

        bus.subscribe(DataCleared, broken)
        bus.subscribe(DataCleared, calls.append)

        bus.publish(DataCleared())

        assert len(calls) == 1
        assert "boom" in capsys.readouterr().out


class RecordingStorage(StoragePort):
    """Remembers the order of writes relative to events"""

    def __init__(self, log):
        self.log = log
        self.data = {}

    def get(self, key):
        return self.data.get(key)

    def set(self, key, data):
        self.log.append("saved")
        self.data[key] = data

    def delete(self, key):
        self.data.pop(key, None)


class TestStoreEvents:
    """One event per mutation, after persistence"""

    def make_store(self):
        self.events = []
        store = EntityStore(MemoryStorage())
        store.bus.subscribe_all(self.events.append)
        return store

    def test_create_events(self):
        store = self.make_store()
        folder = store.create_folder("src")
        file = store.create_file("a.js", "", folder)

        assert [type(e) for e in self.events] == [FolderAdded, FileAdded]
        assert self.events[0].folder is folder
        assert self.events[1].file is file

    def test_rename_events_carry_old_name(self):
        store = self.make_store()
        folder = store.create_folder("src")
        file = store.create_file("a.js")
        self.events.clear()

        store.rename_file(file, "b.js")
        store.rename_folder(folder, "lib")

        assert isinstance(self.events[0], FileRenamed)
        assert self.events[0].old_name == "a.js"
        assert self.events[0].file.name == "b.js"
        assert isinstance(self.events[1], FolderRenamed)
        assert self.events[1].old_name == "src"

    def test_move_events_carry_target(self):
        store = self.make_store()
        target = store.create_folder("target")
        folder = store.create_folder("src")
        file = store.create_file("a.js")
        self.events.clear()

        store.move_file(file, target)
        store.move_folder(folder, None)

        assert isinstance(self.events[0], FileMoved)
        assert self.events[0].target is target
        assert isinstance(self.events[1], FolderMoved)
        assert self.events[1].target is None

    def test_content_and_save_events(self):
        store = self.make_store()
        file = store.create_file("a.txt")
        self.events.clear()

        store.update_file_content(file, "x")
        store.mark_file_as_saved(file)

        assert [type(e) for e in self.events] == [FileContentChanged, FileSaved]

    def test_rejected_move_publishes_nothing(self):
        store = self.make_store()
        folder = store.create_folder("src")
        self.events.clear()

        with pytest.raises(ValueError):
            store.move_folder(folder, folder)

        assert self.events == []

    def test_event_follows_persistence(self):
        log = []
        store = EntityStore(RecordingStorage(log))
        store.bus.subscribe(FileAdded, lambda e: log.append("event"))

        store.create_file("a.txt")

        assert log == ["saved", "event"]

    def test_observer_sees_persisted_state(self):
        storage = MemoryStorage()
        store = EntityStore(storage)
        seen = []
        store.bus.subscribe(
            FileAdded, lambda e: seen.append(e.file.name.encode() in storage.data["codeEditor_data"])
        )

        store.create_file("visible.txt")

        assert seen == [True]
