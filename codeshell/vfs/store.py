"""
Entity store - the single source of truth for the virtual file tree
"""

import traceback
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from codeshell.constants import STORAGE_KEY, UNKNOWN_EXTENSION
from codeshell.vfs.base import ThreadOwned
from codeshell.vfs.entities import Entity, FileNode, FolderNode
from codeshell.vfs.events import (
    DataCleared,
    DataImported,
    EventBus,
    FileAdded,
    FileContentChanged,
    FileMoved,
    FileRemoved,
    FileRenamed,
    FileSaved,
    FolderAdded,
    FolderMoved,
    FolderRemoved,
    FolderRenamed,
    StoreEvent,
)
from codeshell.vfs.ids import IdGenerator
from codeshell.vfs.naming import unique_name
from codeshell.vfs.paths import is_ancestor, join_path, refresh_path
from codeshell.vfs.snapshot import (
    SnapshotError,
    StoreState,
    build_snapshot,
    decode_snapshot,
    encode_snapshot,
    parse_snapshot,
)
from codeshell.vfs.storage import StorageError, StoragePort


class InvalidMoveError(ValueError):
    """Raised when a folder would be moved into itself or its own subtree"""


@dataclass
class StoreStats:
    """Aggregate counts, recomputed on every call"""

    total_files: int = 0
    total_folders: int = 0
    modified_files: int = 0
    total_size: int = 0
    file_types: dict[str, int] = field(default_factory=dict)


class EntityStore(ThreadOwned):
    """
    In-memory hierarchical store of files and folders.

    Every mutation follows the same sequence: update the tables, recompute
    affected paths, write the whole snapshot through the storage port, then
    publish one event on the bus. Observers therefore always see a
    consistent, already-persisted tree.

    Name uniqueness is advisory: create/rename accept duplicate sibling
    names. Use create_unique_file()/create_unique_folder() or the
    generate_unique_*_name() helpers when a collision-free name is needed.
    """

    def __init__(
        self,
        storage: StoragePort,
        bus: EventBus | None = None,
        storage_key: str = STORAGE_KEY,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        super().__init__()
        self.storage = storage
        self.bus = bus if bus is not None else EventBus()
        self.storage_key = storage_key
        self._clock = clock

        self._files: dict[str, FileNode] = {}
        self._folders: dict[str, FolderNode] = {}
        self._ids = IdGenerator()

        self.load_from_storage()

    # --- Lookup ---

    def get_file(self, file_id: str) -> FileNode | None:
        """Get file by id, None if absent"""
        self._assert_owner()
        return self._files.get(file_id)

    def get_folder(self, folder_id: str) -> FolderNode | None:
        """Get folder by id, None if absent"""
        self._assert_owner()
        return self._folders.get(folder_id)

    def get_entity(self, entity_id: str) -> Entity | None:
        """Get a file or folder by id"""
        self._assert_owner()
        return self._files.get(entity_id) or self._folders.get(entity_id)

    def get_files(self) -> list[FileNode]:
        """All files in creation order"""
        self._assert_owner()
        return list(self._files.values())

    def get_folders(self) -> list[FolderNode]:
        """All folders in creation order"""
        self._assert_owner()
        return list(self._folders.values())

    def get_root_files(self) -> list[FileNode]:
        """Files not inside any folder"""
        return [f for f in self.get_files() if f.parent_id is None]

    def get_root_folders(self) -> list[FolderNode]:
        """Folders not inside any other folder"""
        return [f for f in self.get_folders() if f.parent_id is None]

    def get_children(self, folder: FolderNode) -> list[Entity]:
        """Children of ``folder`` in insertion order"""
        self._assert_owner()
        children: list[Entity] = []
        for child_id in folder.child_ids:
            child = self._files.get(child_id) or self._folders.get(child_id)
            if child is not None:
                children.append(child)
        return children

    def get_parent(self, entity: Entity) -> FolderNode | None:
        """Owning folder, None at the root"""
        self._assert_owner()
        if entity.parent_id is None:
            return None
        return self._folders.get(entity.parent_id)

    def get_file_by_path(self, path: str) -> FileNode | None:
        """First file whose materialized path equals ``path``"""
        return next((f for f in self.get_files() if f.path == path), None)

    def get_folder_by_path(self, path: str) -> FolderNode | None:
        """First folder whose materialized path equals ``path``"""
        return next((f for f in self.get_folders() if f.path == path), None)

    # --- Creation ---

    def create_file(
        self, name: str, content: str = "", parent: FolderNode | None = None
    ) -> FileNode:
        """Create a file at the root or inside ``parent``"""
        self._assert_owner()
        now = self._clock()
        file = FileNode(
            id=self._ids.generate(),
            name=name,
            content=content,
            created_at=now,
            modified_at=now,
            parent_id=parent.id if parent is not None else None,
        )
        file._path = join_path(parent.path if parent is not None else None, name)

        self._files[file.id] = file
        if parent is not None:
            parent.child_ids.append(file.id)

        self._commit(FileAdded(file))
        return file

    def create_folder(self, name: str, parent: FolderNode | None = None) -> FolderNode:
        """Create a folder at the root or inside ``parent``"""
        self._assert_owner()
        folder = FolderNode(
            id=self._ids.generate(),
            name=name,
            created_at=self._clock(),
            parent_id=parent.id if parent is not None else None,
        )
        folder._path = join_path(parent.path if parent is not None else None, name)

        self._folders[folder.id] = folder
        if parent is not None:
            parent.child_ids.append(folder.id)

        self._commit(FolderAdded(folder))
        return folder

    def create_unique_file(
        self, name: str, content: str = "", parent: FolderNode | None = None
    ) -> FileNode:
        """Create a file, renaming it "name (n).ext" if a sibling file has that name"""
        return self.create_file(self.generate_unique_file_name(name, parent), content, parent)

    def create_unique_folder(self, name: str, parent: FolderNode | None = None) -> FolderNode:
        """Create a folder, renaming it "name (n)" if a sibling folder has that name"""
        return self.create_folder(self.generate_unique_folder_name(name, parent), parent)

    # --- Removal ---

    def remove_file(self, file: FileNode) -> None:
        """Detach ``file`` from its parent and delete it"""
        self._assert_owner()
        self._detach(file)
        self._files.pop(file.id, None)
        self._commit(FileRemoved(file))

    def remove_folder(self, folder: FolderNode) -> None:
        """Delete ``folder`` after recursively deleting everything inside it"""
        self._assert_owner()
        for child in self.get_children(folder):
            if isinstance(child, FileNode):
                self.remove_file(child)
            else:
                self.remove_folder(child)

        self._detach(folder)
        self._folders.pop(folder.id, None)
        self._commit(FolderRemoved(folder))

    # --- Rename / move ---

    def rename_file(self, file: FileNode, new_name: str) -> FileNode:
        """Rename a file and recompute its path"""
        self._assert_owner()
        old_name = file.name
        file.name = new_name
        file.modified_at = self._clock()
        self._refresh_path(file)

        self._commit(FileRenamed(file, old_name))
        return file

    def rename_folder(self, folder: FolderNode, new_name: str) -> FolderNode:
        """Rename a folder and recompute the paths of everything below it"""
        self._assert_owner()
        old_name = folder.name
        folder.name = new_name
        self._refresh_path(folder)

        self._commit(FolderRenamed(folder, old_name))
        return folder

    def move_file(self, file: FileNode, target: FolderNode | None = None) -> FileNode:
        """Move a file into ``target`` (None = root)"""
        self._assert_owner()
        self._detach(file)
        self._attach(file, target)
        self._refresh_path(file)

        self._commit(FileMoved(file, target))
        return file

    def move_folder(self, folder: FolderNode, target: FolderNode | None = None) -> FolderNode:
        """Move a folder into ``target`` (None = root), carrying its subtree.

        Raises:
            InvalidMoveError: if ``target`` is the folder itself or inside it
        """
        self._assert_owner()
        if target is not None and is_ancestor(folder, target, self._folders.get):
            raise InvalidMoveError(f"Cannot move '{folder.path}' into '{target.path}'")

        self._detach(folder)
        self._attach(folder, target)
        self._refresh_path(folder)

        self._commit(FolderMoved(folder, target))
        return folder

    # --- Content ---

    def update_file_content(self, file: FileNode, content: str) -> FileNode:
        """Replace a file's content and flag it as modified"""
        self._assert_owner()
        file.content = content
        file.modified_at = self._clock()
        file.is_modified = True

        self._commit(FileContentChanged(file))
        return file

    def mark_file_as_saved(self, file: FileNode) -> None:
        """Clear the modified flag"""
        self._assert_owner()
        file.is_modified = False
        self._commit(FileSaved(file))

    # --- Search / stats ---

    def search_files(self, query: str) -> list[FileNode]:
        """Files whose name or content contains ``query`` (case-insensitive)"""
        needle = query.lower()
        return [
            f for f in self.get_files() if needle in f.name.lower() or needle in f.content.lower()
        ]

    def search_folders(self, query: str) -> list[FolderNode]:
        """Folders whose name contains ``query`` (case-insensitive)"""
        needle = query.lower()
        return [f for f in self.get_folders() if needle in f.name.lower()]

    def get_stats(self) -> StoreStats:
        """Compute aggregate statistics with a full scan"""
        files = self.get_files()
        file_types: dict[str, int] = {}
        for f in files:
            ext = f.extension or UNKNOWN_EXTENSION
            file_types[ext] = file_types.get(ext, 0) + 1

        return StoreStats(
            total_files=len(files),
            total_folders=len(self.get_folders()),
            modified_files=sum(1 for f in files if f.is_modified),
            total_size=sum(len(f.content) for f in files),
            file_types=file_types,
        )

    # --- Naming helpers ---

    def file_name_exists(self, name: str, parent: FolderNode | None = None) -> bool:
        """Check for a file called ``name`` directly inside ``parent`` (None = root)"""
        siblings = self.get_children(parent) if parent is not None else self.get_root_files()
        return any(isinstance(s, FileNode) and s.name == name for s in siblings)

    def folder_name_exists(self, name: str, parent: FolderNode | None = None) -> bool:
        """Check for a folder called ``name`` directly inside ``parent`` (None = root)"""
        siblings = self.get_children(parent) if parent is not None else self.get_root_folders()
        return any(isinstance(s, FolderNode) and s.name == name for s in siblings)

    def generate_unique_file_name(self, base_name: str, parent: FolderNode | None = None) -> str:
        """Pick a file name free among ``parent``'s files, keeping the extension"""
        return unique_name(
            base_name, lambda n: self.file_name_exists(n, parent), keep_extension=True
        )

    def generate_unique_folder_name(
        self, base_name: str, parent: FolderNode | None = None
    ) -> str:
        """Pick a folder name free among ``parent``'s folders"""
        return unique_name(
            base_name, lambda n: self.folder_name_exists(n, parent), keep_extension=False
        )

    # --- Snapshot / persistence ---

    def export_data(self) -> dict[str, Any]:
        """Full serializable copy of the store"""
        self._assert_owner()
        return build_snapshot(self._state(), self._clock())

    def import_data(self, snapshot: Any) -> bool:
        """Replace the whole store with ``snapshot``.

        The new tree is built and validated separately and swapped in only
        if it is complete, so a bad snapshot leaves the store untouched.

        Returns:
            True on success, False if the snapshot was rejected
        """
        self._assert_owner()
        try:
            state = parse_snapshot(snapshot, self._clock)
        except SnapshotError as e:
            print(f"❌ Failed to import data: {e}")
            return False

        self._apply_state(state)
        self._commit(DataImported())
        return True

    def clear_all(self) -> None:
        """Remove every file and folder.

        The id counter is kept so ids are never handed out twice.
        """
        self._assert_owner()
        self._files.clear()
        self._folders.clear()
        self._commit(DataCleared())

    def save_to_storage(self) -> None:
        """Write the current snapshot through the storage port.

        Failures are reported and swallowed; memory stays authoritative
        until the next successful write.
        """
        try:
            data = encode_snapshot(self.export_data())
            self.storage.set(self.storage_key, data)
        except (StorageError, OSError, TypeError, ValueError) as e:
            print(f"⚠️ Failed to save to storage: {e}")

    def load_from_storage(self) -> None:
        """Replace in-memory state with the persisted snapshot, if any.

        Unreadable or invalid data is reported and the store starts empty.
        """
        try:
            raw = self.storage.get(self.storage_key)
            if raw is None:
                return
            state = parse_snapshot(decode_snapshot(raw), self._clock)
        except (StorageError, OSError, SnapshotError) as e:
            print(f"⚠️ Failed to load from storage: {e}")
            traceback.print_exc()
            return

        self._apply_state(state)
        self.bus.publish(DataImported())

    # --- Internals ---

    def _state(self) -> StoreState:
        return StoreState(
            files=self._files, folders=self._folders, next_id=self._ids.next_value
        )

    def _apply_state(self, state: StoreState) -> None:
        """Swap in a fully built state"""
        self._files = state.files
        self._folders = state.folders
        self._ids.advance_to(state.next_id)

    def _detach(self, entity: Entity) -> None:
        """Remove ``entity`` from its parent's child list (if it has a parent)"""
        if entity.parent_id is None:
            return
        parent = self._folders.get(entity.parent_id)
        if parent is not None and entity.id in parent.child_ids:
            parent.child_ids.remove(entity.id)
        entity.parent_id = None

    def _attach(self, entity: Entity, target: FolderNode | None) -> None:
        if target is None:
            entity.parent_id = None
            return
        entity.parent_id = target.id
        target.child_ids.append(entity.id)

    def _refresh_path(self, entity: Entity) -> None:
        refresh_path(entity, self._folders.get, self.get_entity)

    def _commit(self, event: StoreEvent) -> None:
        """Persist, then notify observers"""
        self.save_to_storage()
        self.bus.publish(event)
