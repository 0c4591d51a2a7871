"""
Background worker that reads local files off the UI thread.
"""

from pathlib import Path

from PySide6.QtCore import QObject, Signal

from codeshell.vfs.loader import read_local_files


class FileLoadWorker(QObject):
    """
    Reads files from disk in a QThread.

    The worker never touches the entity store: it hands the loaded files
    back through `finished` and the window creates entities on the UI
    thread.
    """

    # list[LoadedFile], list[FileReadError]
    finished = Signal(list, list)
    # unexpected failure message
    error = Signal(str)

    def __init__(self, paths: list[Path | str]) -> None:
        super().__init__()
        self.paths = paths

    def run(self) -> None:
        try:
            loaded, errors = read_local_files(self.paths)
        except Exception as e:
            self.error.emit(str(e))
            return
        self.finished.emit(loaded, errors)
