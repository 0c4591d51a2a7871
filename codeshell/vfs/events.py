"""
Lifecycle events published by the entity store.

The set of event types is closed: subscribing to anything else is a
TypeError, so a misspelled channel fails loudly at registration time
instead of silently never firing.
"""

import traceback
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from codeshell.vfs.entities import FileNode, FolderNode


@dataclass(frozen=True)
class FileAdded:
    file: FileNode


@dataclass(frozen=True)
class FolderAdded:
    folder: FolderNode


@dataclass(frozen=True)
class FileRemoved:
    file: FileNode


@dataclass(frozen=True)
class FolderRemoved:
    folder: FolderNode


@dataclass(frozen=True)
class FileRenamed:
    file: FileNode
    old_name: str


@dataclass(frozen=True)
class FolderRenamed:
    folder: FolderNode
    old_name: str


@dataclass(frozen=True)
class FileMoved:
    file: FileNode
    target: FolderNode | None


@dataclass(frozen=True)
class FolderMoved:
    folder: FolderNode
    target: FolderNode | None


@dataclass(frozen=True)
class FileContentChanged:
    file: FileNode


@dataclass(frozen=True)
class FileSaved:
    file: FileNode


@dataclass(frozen=True)
class DataImported:
    pass


@dataclass(frozen=True)
class DataCleared:
    pass


StoreEvent = (
    FileAdded
    | FolderAdded
    | FileRemoved
    | FolderRemoved
    | FileRenamed
    | FolderRenamed
    | FileMoved
    | FolderMoved
    | FileContentChanged
    | FileSaved
    | DataImported
    | DataCleared
)

EVENT_TYPES: tuple[type, ...] = (
    FileAdded,
    FolderAdded,
    FileRemoved,
    FolderRemoved,
    FileRenamed,
    FolderRenamed,
    FileMoved,
    FolderMoved,
    FileContentChanged,
    FileSaved,
    DataImported,
    DataCleared,
)

E = TypeVar("E")


class EventBus:
    """
    Synchronous publish/subscribe channel for store events.

    Handlers run on the publishing thread, in registration order, before
    publish() returns. Handlers registered with subscribe_all() run after
    the type-specific ones.
    """

    def __init__(self) -> None:
        self._handlers: dict[type, list[Callable[[Any], None]]] = {t: [] for t in EVENT_TYPES}
        self._catch_all: list[Callable[[Any], None]] = []

    def subscribe(self, event_type: type[E], handler: Callable[[E], None]) -> None:
        """Register ``handler`` for one event type"""
        if event_type not in self._handlers:
            raise TypeError(f"Not a store event type: {event_type!r}")
        self._handlers[event_type].append(handler)

    def unsubscribe(self, event_type: type[E], handler: Callable[[E], None]) -> None:
        """Remove a handler; unknown handlers are ignored"""
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def subscribe_all(self, handler: Callable[[Any], None]) -> None:
        """Register ``handler`` for every event"""
        self._catch_all.append(handler)

    def unsubscribe_all(self, handler: Callable[[Any], None]) -> None:
        if handler in self._catch_all:
            self._catch_all.remove(handler)

    def publish(self, event: StoreEvent) -> None:
        """Deliver ``event`` to its subscribers.

        A failing handler is reported and skipped so the remaining
        observers still see the event.
        """
        event_type = type(event)
        if event_type not in self._handlers:
            raise TypeError(f"Not a store event: {event!r}")

        for handler in [*self._handlers[event_type], *self._catch_all]:
            try:
                handler(event)
            except Exception as e:
                print(f"❌ Handler {handler!r} failed for {event_type.__name__}: {e}")
                traceback.print_exc()
