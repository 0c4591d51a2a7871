"""
Open editor tabs derived from the entity store.

Each tab keeps its own modified flag: it turns on as soon as the buffer is
edited, long before anything is written to the store, and turns off when
the store reports the file saved.
"""

from collections.abc import Callable
from dataclasses import dataclass

from codeshell.constants import MODIFIED_MARKER
from codeshell.editor.buffers import EditorBuffers
from codeshell.editor.languages import language_for
from codeshell.vfs.entities import FileNode
from codeshell.vfs.events import (
    DataCleared,
    DataImported,
    EventBus,
    FileRemoved,
    FileRenamed,
    FileSaved,
    FolderRemoved,
)
from codeshell.vfs.store import EntityStore


@dataclass
class Tab:
    """An open file"""

    file_id: str
    name: str
    language: str
    is_modified: bool = False

    @property
    def title(self) -> str:
        return f"{self.name}{MODIFIED_MARKER}" if self.is_modified else self.name


class OpenTabs:
    """
    Ordered set of open files plus the active one.

    All text lives in the editor buffers; the tab list only tracks which
    files are open and whether their buffers hold unsaved edits.
    """

    def __init__(
        self, store: EntityStore, buffers: EditorBuffers, bus: EventBus | None = None
    ) -> None:
        self.store = store
        self.buffers = buffers
        self._tabs: dict[str, Tab] = {}
        self.active_id: str | None = None
        self._listeners: list[Callable[[], None]] = []
        self._edit_listeners: list[Callable[[str], None]] = []
        self._close_listeners: list[Callable[[str], None]] = []

        bus = bus if bus is not None else store.bus
        bus.subscribe(FileRemoved, self._on_file_removed)
        bus.subscribe(FolderRemoved, self._on_entities_gone)
        bus.subscribe(FileRenamed, self._on_file_renamed)
        bus.subscribe(FileSaved, self._on_file_saved)
        bus.subscribe(DataImported, self._on_entities_gone)
        bus.subscribe(DataCleared, self._on_entities_gone)

    def on_change(self, callback: Callable[[], None]) -> None:
        """Register a callback run whenever tabs open, close or change state"""
        self._listeners.append(callback)

    def on_buffer_edited(self, callback: Callable[[str], None]) -> None:
        """Register a callback taking the file id when a clean tab is first edited"""
        self._edit_listeners.append(callback)

    def on_tab_closed(self, callback: Callable[[str], None]) -> None:
        """Register a callback taking the file id of every closed tab"""
        self._close_listeners.append(callback)

    # --- Queries ---

    @property
    def tabs(self) -> list[Tab]:
        return list(self._tabs.values())

    def get_tab(self, file_id: str) -> Tab | None:
        return self._tabs.get(file_id)

    def is_open(self, file: FileNode) -> bool:
        return file.id in self._tabs

    def get_open_files(self) -> list[FileNode]:
        files = [self.store.get_file(file_id) for file_id in self._tabs]
        return [f for f in files if f is not None]

    def get_active_file(self) -> FileNode | None:
        if self.active_id is None:
            return None
        return self.store.get_file(self.active_id)

    def has_unsaved_changes(self) -> bool:
        return any(tab.is_modified for tab in self._tabs.values())

    # --- Opening / closing ---

    def open_file(self, file: FileNode) -> Tab:
        """Open ``file`` in a new tab, or activate its existing tab"""
        tab = self._tabs.get(file.id)
        if tab is None:
            tab = Tab(file_id=file.id, name=file.name, language=language_for(file.name))
            self._tabs[file.id] = tab
            self.buffers.open_buffer(file.id, file.name, file.content, tab.language)
            self.buffers.on_content_changed(
                file.id, lambda fid=file.id: self._on_buffer_edited(fid)
            )

        self.switch_to(file.id)
        return tab

    def switch_to(self, file_id: str) -> bool:
        """Activate an open tab. Returns False if it is not open."""
        if file_id not in self._tabs:
            return False
        self.active_id = file_id
        self.buffers.show_buffer(file_id)
        self._notify()
        return True

    def close_tab(self, file_id: str) -> bool:
        """Close a tab, discarding unsaved buffer edits.

        Returns True if the tab was open.
        """
        if self._tabs.pop(file_id, None) is None:
            return False

        self.buffers.close_buffer(file_id)
        for callback in list(self._close_listeners):
            callback(file_id)
        if self.active_id == file_id:
            self.active_id = None
            remaining = next(iter(self._tabs), None)
            if remaining is not None:
                self.switch_to(remaining)
                return True
        self._notify()
        return True

    def close_active(self) -> bool:
        if self.active_id is None:
            return False
        return self.close_tab(self.active_id)

    # --- Saving ---

    def save(self, file_id: str) -> bool:
        """Write a tab's buffer text into the store and mark it saved"""
        tab = self._tabs.get(file_id)
        file = self.store.get_file(file_id)
        if tab is None or file is None:
            return False

        content = self.buffers.get_buffer_value(file_id)
        if content != file.content:
            self.store.update_file_content(file, content)
        self.store.mark_file_as_saved(file)
        return True

    def save_active(self) -> bool:
        if self.active_id is None:
            return False
        return self.save(self.active_id)

    def save_all(self) -> int:
        """Save every modified tab, returning how many were saved"""
        modified = [tab.file_id for tab in self._tabs.values() if tab.is_modified]
        return sum(1 for file_id in modified if self.save(file_id))

    # --- Event handlers ---

    def _on_buffer_edited(self, file_id: str) -> None:
        tab = self._tabs.get(file_id)
        if tab is None or tab.is_modified:
            return
        tab.is_modified = True
        self.buffers.set_buffer_title(file_id, tab.title)
        for callback in list(self._edit_listeners):
            callback(file_id)
        self._notify()

    def _on_file_removed(self, event: FileRemoved) -> None:
        self.close_tab(event.file.id)

    def _on_file_renamed(self, event: FileRenamed) -> None:
        tab = self._tabs.get(event.file.id)
        if tab is None:
            return
        tab.name = event.file.name
        tab.language = language_for(event.file.name)
        self.buffers.set_buffer_title(tab.file_id, tab.title)
        self._notify()

    def _on_file_saved(self, event: FileSaved) -> None:
        tab = self._tabs.get(event.file.id)
        if tab is None:
            return
        tab.is_modified = False
        self.buffers.set_buffer_title(tab.file_id, tab.title)
        self._notify()

    def _on_entities_gone(self, event: FolderRemoved | DataImported | DataCleared) -> None:
        """Close tabs whose file no longer exists in the store"""
        for file_id in list(self._tabs):
            if self.store.get_file(file_id) is None:
                self.close_tab(file_id)

    def _notify(self) -> None:
        for callback in list(self._listeners):
            callback()
