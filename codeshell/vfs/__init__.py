"""In-memory virtual file system: entities, store, events and persistence"""

from codeshell.vfs.entities import Entity, FileNode, FolderNode
from codeshell.vfs.events import EventBus
from codeshell.vfs.storage import FileStorage, MemoryStorage, StorageError, StoragePort
from codeshell.vfs.store import EntityStore, InvalidMoveError, StoreStats

__all__ = [
    "Entity",
    "EntityStore",
    "EventBus",
    "FileNode",
    "FileStorage",
    "FolderNode",
    "InvalidMoveError",
    "MemoryStorage",
    "StorageError",
    "StoragePort",
    "StoreStats",
]
