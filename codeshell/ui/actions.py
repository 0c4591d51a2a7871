"""
Keyboard actions for the editor shell.

Every command the window offers is registered here once, with its default
shortcut. Users can remap shortcuts through the "shortcuts" section of
the settings file.
"""

from collections.abc import Callable
from dataclasses import dataclass, field

from PySide6.QtGui import QKeySequence, QShortcut
from PySide6.QtWidgets import QWidget

# action_id, display name, default shortcut
DEFAULT_ACTIONS: list[tuple[str, str, str]] = [
    ("file.new", "New File", "Ctrl+N"),
    ("folder.new", "New Folder", "Ctrl+Shift+N"),
    ("file.open", "Open Local Files...", "Ctrl+O"),
    ("file.save", "Save", "Ctrl+S"),
    ("file.save_all", "Save All", "Ctrl+Shift+S"),
    ("tab.close", "Close Tab", "Ctrl+W"),
    ("view.search", "Search Files", "Ctrl+Shift+F"),
]


@dataclass
class Action:
    """A command that can be triggered from a shortcut or a menu"""

    id: str  # e.g. "file.save"
    name: str
    callback: Callable[[], None]
    shortcut: str = ""  # default, e.g. "Ctrl+S"

    _shortcut_obj: QShortcut | None = field(default=None, repr=False)


class ActionRegistry:
    """
    Registry of the window's actions and their key bindings.

    Custom shortcuts must be loaded before actions are registered, or
    re-applied with load_custom_shortcuts() afterwards.
    """

    def __init__(self, parent_widget: QWidget) -> None:
        self.parent = parent_widget
        self._actions: dict[str, Action] = {}
        self._custom_shortcuts: dict[str, str] = {}

    def register(
        self, action_id: str, name: str, callback: Callable[[], None], shortcut: str = ""
    ) -> Action:
        """Register an action and bind its effective shortcut"""
        action = Action(id=action_id, name=name, callback=callback, shortcut=shortcut)
        self._actions[action_id] = action

        effective = self.get_effective_shortcut(action_id)
        if effective:
            self._bind_shortcut(action, effective)
        return action

    def register_defaults(self, callbacks: dict[str, Callable[[], None]]) -> None:
        """Register every default action that has a callback"""
        for action_id, name, shortcut in DEFAULT_ACTIONS:
            callback = callbacks.get(action_id)
            if callback is not None:
                self.register(action_id, name, callback, shortcut)

    def get(self, action_id: str) -> Action | None:
        return self._actions.get(action_id)

    def get_all(self) -> list[Action]:
        return list(self._actions.values())

    def trigger(self, action_id: str) -> bool:
        """Run an action by id. Returns False if no such action exists."""
        action = self._actions.get(action_id)
        if action is None:
            return False
        action.callback()
        return True

    def get_effective_shortcut(self, action_id: str) -> str:
        """Custom shortcut if one is set, otherwise the default"""
        action = self._actions.get(action_id)
        if action is None:
            return ""
        return self._custom_shortcuts.get(action_id, action.shortcut)

    def load_custom_shortcuts(self, shortcuts: dict[str, str]) -> None:
        """Apply user overrides, rebinding any actions already registered"""
        self._custom_shortcuts = dict(shortcuts)
        for action in self._actions.values():
            self._unbind_shortcut(action)
            effective = self.get_effective_shortcut(action.id)
            if effective:
                self._bind_shortcut(action, effective)

    def _bind_shortcut(self, action: Action, shortcut: str) -> None:
        sequence = QKeySequence(shortcut)
        if sequence.isEmpty():
            print(f"⚠️ Invalid shortcut {shortcut!r} for {action.id}")
            return
        shortcut_obj = QShortcut(sequence, self.parent)
        shortcut_obj.activated.connect(action.callback)
        action._shortcut_obj = shortcut_obj

    def _unbind_shortcut(self, action: Action) -> None:
        if action._shortcut_obj is not None:
            action._shortcut_obj.setEnabled(False)
            action._shortcut_obj.deleteLater()
            action._shortcut_obj = None
