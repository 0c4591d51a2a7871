"""
Editor collaborator contract.

The store never talks to the text widget directly. Open tabs push content
into named buffers and pull edited text back out through this interface,
so the same tab logic drives the Qt editor and the in-memory buffers used
in tests and headless sessions.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable


class EditorBuffers(ABC):
    """Named text buffers hosted by an editor component"""

    @abstractmethod
    def open_buffer(self, buffer_id: str, name: str, content: str, language: str) -> None:
        """Create a buffer holding ``content``"""
        pass

    @abstractmethod
    def get_buffer_value(self, buffer_id: str) -> str:
        """Current (possibly edited) text of a buffer"""
        pass

    @abstractmethod
    def close_buffer(self, buffer_id: str) -> None:
        """Dispose of a buffer"""
        pass

    @abstractmethod
    def on_content_changed(self, buffer_id: str, callback: Callable[[], None]) -> None:
        """Call ``callback`` whenever the user edits the buffer"""
        pass

    def show_buffer(self, buffer_id: str) -> None:
        """Bring a buffer to the front (presentation hook)"""
        pass

    def set_buffer_title(self, buffer_id: str, title: str) -> None:
        """Update the label shown for a buffer (presentation hook)"""
        pass


class MemoryBuffers(EditorBuffers):
    """Buffers kept in plain dicts; edit() simulates typing"""

    def __init__(self) -> None:
        self.values: dict[str, str] = {}
        self.languages: dict[str, str] = {}
        self.titles: dict[str, str] = {}
        self.shown: str | None = None
        self._listeners: dict[str, list[Callable[[], None]]] = {}

    def open_buffer(self, buffer_id: str, name: str, content: str, language: str) -> None:
        self.values[buffer_id] = content
        self.languages[buffer_id] = language
        self.titles[buffer_id] = name

    def get_buffer_value(self, buffer_id: str) -> str:
        return self.values[buffer_id]

    def close_buffer(self, buffer_id: str) -> None:
        self.values.pop(buffer_id, None)
        self.languages.pop(buffer_id, None)
        self.titles.pop(buffer_id, None)
        self._listeners.pop(buffer_id, None)
        if self.shown == buffer_id:
            self.shown = None

    def on_content_changed(self, buffer_id: str, callback: Callable[[], None]) -> None:
        self._listeners.setdefault(buffer_id, []).append(callback)

    def show_buffer(self, buffer_id: str) -> None:
        self.shown = buffer_id

    def set_buffer_title(self, buffer_id: str, title: str) -> None:
        self.titles[buffer_id] = title

    def edit(self, buffer_id: str, content: str) -> None:
        """Replace buffer text as if typed, notifying listeners"""
        self.values[buffer_id] = content
        for callback in list(self._listeners.get(buffer_id, [])):
            callback()
