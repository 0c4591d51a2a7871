"""
Settings management for Codeshell
"""

import copy
import json
from pathlib import Path
from typing import Any

from codeshell.constants import SIDEBAR_MAX_WIDTH, SIDEBAR_MIN_WIDTH, STORAGE_KEY


class Settings:
    """Manages application settings"""

    DEFAULT_SETTINGS: dict[str, Any] = {
        "editor": {
            "font_size": 14,
            "tab_width": 4,
            "word_wrap": True,
            "show_line_numbers": True,
        },
        "ui": {
            "theme": "dark",
            "sidebar_width": 250,
        },
        "storage": {
            "directory": "",  # Empty = XDG data dir
            "key": STORAGE_KEY,
        },
        "shortcuts": {},  # action_id -> custom shortcut
    }

    def __init__(self, config_path: Path | None = None) -> None:
        """Initialize settings"""
        if config_path is None:
            config_path = Path.home() / ".config" / "codeshell" / "settings.json"

        self.config_path = config_path
        self.settings = copy.deepcopy(self.DEFAULT_SETTINGS)
        self.load()

    def load(self) -> None:
        """Load settings from file, keeping defaults if it is missing or corrupt"""
        if not self.config_path.exists():
            return
        try:
            with open(self.config_path) as f:
                loaded = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            print(f"⚠️ Ignoring unreadable settings file {self.config_path}: {e}")
            return
        if isinstance(loaded, dict):
            # Merge with defaults to handle new settings
            self._merge_settings(self.settings, loaded)

    def save(self) -> None:
        """Save settings to file"""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "w") as f:
            json.dump(self.settings, f, indent=2)

    def _merge_settings(self, base: dict[str, Any], updates: dict[str, Any]) -> None:
        """Recursively merge settings dictionaries"""
        for key, value in updates.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._merge_settings(base[key], value)
            else:
                base[key] = value

    def get(self, path: str, default: Any = None) -> Any:
        """Get a setting by dot-separated path (e.g., 'editor.font_size')"""
        value: Any = self.settings
        for part in path.split("."):
            if isinstance(value, dict) and part in value:
                value = value[part]
            else:
                return default
        return value

    def set(self, path: str, value: Any) -> None:
        """Set a setting by dot-separated path"""
        parts = path.split(".")
        target: Any = self.settings

        for part in parts[:-1]:
            if part not in target:
                target[part] = {}
            target = target[part]

        target[parts[-1]] = value

    def get_storage_dir(self) -> Path | None:
        """Directory configured for persisted workspace data.

        None means FileStorage picks its default data directory.
        """
        directory = str(self.get("storage.directory", "") or "")
        if directory:
            return Path(directory).expanduser()
        return None

    def get_storage_key(self) -> str:
        """Key the workspace snapshot is stored under"""
        return str(self.get("storage.key", STORAGE_KEY) or STORAGE_KEY)

    def get_sidebar_width(self) -> int:
        """Explorer width in pixels, clamped to the allowed range"""
        try:
            width = int(self.get("ui.sidebar_width", 250))
        except (TypeError, ValueError):
            width = 250
        return max(SIDEBAR_MIN_WIDTH, min(SIDEBAR_MAX_WIDTH, width))

    def get_tab_width(self) -> int:
        """Tab stop width in spaces"""
        try:
            tab_width = int(self.get("editor.tab_width", 4))
        except (TypeError, ValueError):
            tab_width = 4
        return max(1, tab_width)

    def get_custom_shortcuts(self) -> dict[str, str]:
        """User overrides for action shortcuts"""
        shortcuts = self.get("shortcuts", {})
        if not isinstance(shortcuts, dict):
            return {}
        return {str(k): str(v) for k, v in shortcuts.items()}
