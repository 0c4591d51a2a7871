"""
Key-value storage ports for store persistence
"""

import os
import re
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path


class StorageError(Exception):
    """Raised by a storage port when a read or write cannot be completed"""


class StoragePort(ABC):
    """Abstract blocking key-value byte store.

    The entity store writes its whole snapshot under one key after every
    mutation and reads it back once at startup.
    """

    @abstractmethod
    def get(self, key: str) -> bytes | None:
        """Read the value for ``key``, or None if nothing is stored"""
        pass

    @abstractmethod
    def set(self, key: str, data: bytes) -> None:
        """Store ``data`` under ``key``, replacing any previous value"""
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove ``key``; missing keys are ignored"""
        pass


class MemoryStorage(StoragePort):
    """In-process storage, used for tests and throwaway sessions"""

    def __init__(self, initial: dict[str, bytes] | None = None) -> None:
        self.data: dict[str, bytes] = dict(initial or {})

    def get(self, key: str) -> bytes | None:
        return self.data.get(key)

    def set(self, key: str, data: bytes) -> None:
        self.data[key] = bytes(data)

    def delete(self, key: str) -> None:
        self.data.pop(key, None)


def _get_default_data_dir() -> Path:
    """Get the XDG data directory for Codeshell"""
    xdg_data = os.environ.get("XDG_DATA_HOME", str(Path.home() / ".local" / "share"))
    return Path(xdg_data) / "codeshell"


class FileStorage(StoragePort):
    """
    One file per key inside a data directory.

    Writes go to a temporary file in the same directory which then replaces
    the old one, so a crash mid-write never leaves a truncated snapshot.
    """

    _SAFE_KEY = re.compile(r"[^A-Za-z0-9_.-]")

    def __init__(self, directory: Path | None = None) -> None:
        self.directory = directory if directory is not None else _get_default_data_dir()

    def _path_for(self, key: str) -> Path:
        """Map a key to a file name that is safe on every platform"""
        return self.directory / f"{self._SAFE_KEY.sub('_', key)}.json"

    def get(self, key: str) -> bytes | None:
        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_bytes()
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}") from e

    def set(self, key: str, data: bytes) -> None:
        path = self._path_for(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=".tmp_", dir=self.directory)
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(data)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(f"Failed to write {path}: {e}") from e

    def delete(self, key: str) -> None:
        try:
            self._path_for(key).unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to delete {key}: {e}") from e
