"""
Local file input adapter.

Turns a file on disk into a (name, content) pair for the entity store.
Reading is the only asynchronous boundary in the application; the Qt
shell runs read_local_files() on a worker thread and hands the results
back to the UI thread, which creates the entities.
"""

from dataclasses import dataclass
from pathlib import Path

from codeshell.vfs.binary import is_binary_file, looks_binary


class FileReadError(Exception):
    """Raised when a local file cannot be read as text"""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Failed to read file: {path.name} ({reason})")
        self.path = path
        self.reason = reason


@dataclass(frozen=True)
class LoadedFile:
    """Result of reading one local file"""

    name: str
    content: str


def read_local_file(path: Path | str) -> LoadedFile:
    """Read a text file from disk.

    Invalid UTF-8 sequences are replaced rather than rejected.

    Raises:
        FileReadError: if the file is missing, unreadable or binary
    """
    path = Path(path)
    if is_binary_file(path.name):
        raise FileReadError(path, "binary file")

    try:
        data = path.read_bytes()
    except OSError as e:
        raise FileReadError(path, e.strerror or str(e)) from e

    if looks_binary(data):
        raise FileReadError(path, "binary file")

    return LoadedFile(name=path.name, content=data.decode("utf-8", errors="replace"))


def read_local_files(paths: list[Path | str]) -> tuple[list[LoadedFile], list[FileReadError]]:
    """Read several files, collecting failures instead of stopping at the first"""
    loaded: list[LoadedFile] = []
    errors: list[FileReadError] = []
    for path in paths:
        try:
            loaded.append(read_local_file(path))
        except FileReadError as e:
            errors.append(e)
    return loaded, errors


def dropped_file_paths(local_paths: list[str]) -> list[str]:
    """Keep the dropped entries that name local files.

    Remote URLs come through as empty strings and folders are not
    imported.
    """
    return [p for p in local_paths if p and not Path(p).is_dir()]
