#!/usr/bin/env python3
"""
Codeshell - a small code editor over a persistent virtual workspace
"""

import argparse
import sys

from PySide6.QtWidgets import QApplication

from codeshell.config.settings import Settings
from codeshell.ui.main_window import MainWindow
from codeshell.vfs.storage import FileStorage
from codeshell.vfs.store import EntityStore


def parse_args() -> argparse.Namespace:
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        prog="codeshell",
        description="Codeshell - a small code editor over a persistent virtual workspace",
    )
    parser.add_argument(
        "files",
        nargs="*",
        help="Local files to add to the workspace on startup",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()

    app = QApplication(sys.argv)
    app.setApplicationName("Codeshell")
    app.setOrganizationName("Codeshell")

    settings = Settings()
    storage = FileStorage(settings.get_storage_dir())
    store = EntityStore(storage, storage_key=settings.get_storage_key())
    store.claim_thread()

    window = MainWindow(store, settings, initial_files=args.files)
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
