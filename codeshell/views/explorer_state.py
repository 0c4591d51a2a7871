"""
Explorer tree state derived from the entity store.

Expansion, selection, the filter term and the unsaved-edit markers belong
to the explorer, not to the store. The store is re-read on every
visible_rows() call; events only prune ids that no longer exist and tell
the widget to re-render.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from codeshell.vfs.entities import Entity, FileNode, FolderNode
from codeshell.vfs.events import (
    DataCleared,
    DataImported,
    EventBus,
    FileRemoved,
    FileSaved,
    FolderRemoved,
)
from codeshell.vfs.paths import ancestors_of
from codeshell.vfs.store import EntityStore

if TYPE_CHECKING:
    from codeshell.views.open_tabs import OpenTabs


@dataclass(frozen=True)
class TreeRow:
    """One visible line of the explorer"""

    depth: int
    entity: Entity
    expanded: bool = False
    is_modified: bool = False

    @property
    def is_folder(self) -> bool:
        return isinstance(self.entity, FolderNode)


class ExplorerState:
    """Expansion/selection/filter state for the file explorer"""

    def __init__(self, store: EntityStore, bus: EventBus | None = None) -> None:
        self.store = store
        self.expanded: set[str] = set()
        self.selected_id: str | None = None
        self.filter_term: str = ""
        # Files whose open buffer holds unsaved edits
        self.modified_ids: set[str] = set()
        self._listeners: list[Callable[[], None]] = []

        bus = bus if bus is not None else store.bus
        bus.subscribe(FileRemoved, self._on_file_removed)
        bus.subscribe(FileSaved, self._on_file_saved)
        bus.subscribe(FolderRemoved, self._on_folder_removed)
        bus.subscribe(DataImported, self._on_reloaded)
        bus.subscribe(DataCleared, self._on_reloaded)
        bus.subscribe_all(self._notify)

    def on_change(self, callback: Callable[[], None]) -> None:
        """Register a callback run after every store event or state change"""
        self._listeners.append(callback)

    def follow_tabs(self, tabs: "OpenTabs") -> None:
        """Mark files modified while their tab holds unsaved edits"""
        tabs.on_buffer_edited(self.mark_modified)
        tabs.on_tab_closed(self.clear_modified)

    # --- Expansion ---

    def is_expanded(self, folder: FolderNode) -> bool:
        return folder.id in self.expanded

    def expand(self, folder: FolderNode) -> None:
        self.expanded.add(folder.id)
        self._notify()

    def collapse(self, folder: FolderNode) -> None:
        self.expanded.discard(folder.id)
        self._notify()

    def toggle_folder(self, folder: FolderNode) -> bool:
        """Flip expansion, returning the new state"""
        if folder.id in self.expanded:
            self.expanded.discard(folder.id)
        else:
            self.expanded.add(folder.id)
        self._notify()
        return folder.id in self.expanded

    def expand_to_file(self, file: FileNode) -> None:
        """Expand every folder above ``file`` so it becomes visible"""
        for folder in ancestors_of(file, self.store.get_folder):
            self.expanded.add(folder.id)
        self._notify()

    def reveal_folder(self, folder: FolderNode) -> None:
        """Expand ``folder`` and every folder above it"""
        self.expanded.add(folder.id)
        for ancestor in ancestors_of(folder, self.store.get_folder):
            self.expanded.add(ancestor.id)
        self._notify()

    # --- Selection ---

    def select_file(self, file: FileNode) -> None:
        self.selected_id = file.id
        self._notify()

    def clear_selection(self) -> None:
        self.selected_id = None
        self._notify()

    def get_selected_file(self) -> FileNode | None:
        if self.selected_id is None:
            return None
        return self.store.get_file(self.selected_id)

    # --- Modification markers ---

    def mark_modified(self, file_id: str) -> None:
        self.modified_ids.add(file_id)
        self._notify()

    def clear_modified(self, file_id: str) -> None:
        if file_id in self.modified_ids:
            self.modified_ids.discard(file_id)
            self._notify()

    def is_modified(self, file: FileNode) -> bool:
        """Unsaved edits in an open buffer, or a modified flag in the store"""
        return file.id in self.modified_ids or file.is_modified

    # --- Rows ---

    def set_filter(self, term: str) -> None:
        self.filter_term = term
        self._notify()

    def visible_rows(self) -> list[TreeRow]:
        """Rows to display, folders before files at each level.

        With a filter term the tree collapses into a flat list of every
        folder and file whose name contains the term.
        """
        if self.filter_term:
            needle = self.filter_term.lower()
            matches: list[Entity] = [
                *[f for f in self.store.get_folders() if needle in f.name.lower()],
                *[f for f in self.store.get_files() if needle in f.name.lower()],
            ]
            return [self._row(0, e) for e in matches]

        rows: list[TreeRow] = []
        roots: list[Entity] = [*self.store.get_root_folders(), *self.store.get_root_files()]
        self._collect(roots, 0, rows)
        return rows

    def _collect(self, entities: list[Entity], depth: int, rows: list[TreeRow]) -> None:
        for entity in entities:
            row = self._row(depth, entity)
            rows.append(row)
            if isinstance(entity, FolderNode) and row.expanded:
                children = self.store.get_children(entity)
                ordered: list[Entity] = [
                    *[c for c in children if isinstance(c, FolderNode)],
                    *[c for c in children if isinstance(c, FileNode)],
                ]
                self._collect(ordered, depth + 1, rows)

    def _row(self, depth: int, entity: Entity) -> TreeRow:
        if isinstance(entity, FolderNode):
            return TreeRow(depth, entity, expanded=entity.id in self.expanded)
        return TreeRow(depth, entity, is_modified=self.is_modified(entity))

    # --- Event handlers ---

    def _on_file_removed(self, event: FileRemoved) -> None:
        self.modified_ids.discard(event.file.id)
        if self.selected_id == event.file.id:
            self.selected_id = None

    def _on_file_saved(self, event: FileSaved) -> None:
        self.modified_ids.discard(event.file.id)

    def _on_folder_removed(self, event: FolderRemoved) -> None:
        self.expanded.discard(event.folder.id)
        self.modified_ids = {i for i in self.modified_ids if self.store.get_file(i) is not None}

    def _on_reloaded(self, event: DataImported | DataCleared) -> None:
        self.expanded = {i for i in self.expanded if self.store.get_folder(i) is not None}
        self.modified_ids = {i for i in self.modified_ids if self.store.get_file(i) is not None}
        if self.selected_id is not None and self.store.get_file(self.selected_id) is None:
            self.selected_id = None

    def _notify(self, event: object = None) -> None:
        for callback in list(self._listeners):
            callback()
