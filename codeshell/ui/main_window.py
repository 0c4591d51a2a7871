"""
Main window for Codeshell
"""

from typing import Any

from PySide6.QtCore import Qt, QThread
from PySide6.QtWidgets import (
    QFileDialog,
    QInputDialog,
    QLabel,
    QMainWindow,
    QMessageBox,
    QSplitter,
    QStatusBar,
    QTabWidget,
)

from codeshell.config.settings import Settings
from codeshell.editor.languages import display_name_for
from codeshell.ui.actions import ActionRegistry
from codeshell.ui.editor_widget import QtEditorBuffers
from codeshell.ui.file_loader import FileLoadWorker
from codeshell.ui.side_panel import SidePanelWidget
from codeshell.views.explorer_state import ExplorerState
from codeshell.views.open_tabs import OpenTabs
from codeshell.vfs.entities import Entity, FileNode, FolderNode
from codeshell.vfs.loader import FileReadError, LoadedFile, dropped_file_paths
from codeshell.vfs.naming import is_valid_file_name, is_valid_folder_name
from codeshell.vfs.paths import iter_descendants
from codeshell.vfs.store import EntityStore, InvalidMoveError

ROOT_CHOICE = "/ (root)"
FILE_NAME_HINT = "Allowed extensions: .html .css .js .txt .json .md"
FOLDER_NAME_HINT = "Use letters, digits, '-' and '_' only."


class MainWindow(QMainWindow):
    """Explorer on the left, editor tabs on the right"""

    def __init__(
        self,
        store: EntityStore,
        settings: Settings,
        initial_files: list[str] | None = None,
    ) -> None:
        super().__init__()
        self.setGeometry(100, 100, 1200, 800)
        self.setAcceptDrops(True)
        self.store = store
        self.settings = settings
        self._load_thread: QThread | None = None
        self._load_worker: FileLoadWorker | None = None

        self.explorer_state = ExplorerState(store)

        self._setup_ui()
        self.open_tabs = OpenTabs(store, self.buffers)
        self.open_tabs.on_change(self._update_status)
        self.explorer_state.follow_tabs(self.open_tabs)
        self._setup_menus()
        self._setup_shortcuts()
        self._update_status()

        if initial_files:
            self.load_local_files(initial_files)

    def _setup_ui(self) -> None:
        self.splitter = QSplitter(Qt.Orientation.Horizontal)
        self.setCentralWidget(self.splitter)

        self.side_panel = SidePanelWidget(self.explorer_state)
        self.side_panel.file_open_requested.connect(self.open_file_by_id)
        self.side_panel.action_requested.connect(self._on_explorer_action)
        self.side_panel.folder_reveal_requested.connect(self._reveal_folder)
        self.splitter.addWidget(self.side_panel)

        self.editor_tabs = QTabWidget()
        self.editor_tabs.setTabsClosable(True)
        self.editor_tabs.setMovable(True)
        self.editor_tabs.tabCloseRequested.connect(self._on_tab_close_requested)
        self.editor_tabs.currentChanged.connect(self._on_current_tab_changed)
        self.splitter.addWidget(self.editor_tabs)

        sidebar_width = self.settings.get_sidebar_width()
        self.splitter.setSizes([sidebar_width, self.width() - sidebar_width])
        self.splitter.setStretchFactor(1, 1)

        self.buffers = QtEditorBuffers(
            self.editor_tabs,
            {
                "font_size": int(self.settings.get("editor.font_size", 14)),
                "tab_width": self.settings.get_tab_width(),
                "word_wrap": bool(self.settings.get("editor.word_wrap", True)),
                "show_line_numbers": bool(self.settings.get("editor.show_line_numbers", True)),
            },
        )
        self.buffers.on_cursor_moved(self._update_cursor_label)

        self.status_bar = QStatusBar()
        self.setStatusBar(self.status_bar)
        self.language_label = QLabel("")
        self.cursor_label = QLabel("")
        self.status_bar.addPermanentWidget(self.language_label)
        self.status_bar.addPermanentWidget(self.cursor_label)
        self.status_bar.showMessage("Ready")

    def _setup_menus(self) -> None:
        menubar = self.menuBar()

        file_menu = menubar.addMenu("&File")
        file_menu.addAction("&New File...", lambda: self.new_file())
        file_menu.addAction("New &Folder...", lambda: self.new_folder())
        file_menu.addAction("&Open Local Files...", self.open_local_files)
        file_menu.addSeparator()
        file_menu.addAction("&Save", self.save_current_file)
        file_menu.addAction("Save &All", self.save_all_files)
        file_menu.addAction("&Close Tab", self.close_current_tab)
        file_menu.addSeparator()
        file_menu.addAction("Clear &Workspace...", self.clear_workspace)
        file_menu.addSeparator()
        file_menu.addAction("E&xit", self.close)

        view_menu = menubar.addMenu("&View")
        view_menu.addAction("&Explorer", self.side_panel.focus_explorer)
        view_menu.addAction("&Search", self.side_panel.focus_search)

        help_menu = menubar.addMenu("&Help")
        help_menu.addAction("&Workspace Statistics", self.show_stats)

    def _setup_shortcuts(self) -> None:
        self.action_registry = ActionRegistry(self)
        self.action_registry.load_custom_shortcuts(self.settings.get_custom_shortcuts())
        self.action_registry.register_defaults(
            {
                "file.new": lambda: self.new_file(),
                "folder.new": lambda: self.new_folder(),
                "file.open": self.open_local_files,
                "file.save": self.save_current_file,
                "file.save_all": self.save_all_files,
                "tab.close": self.close_current_tab,
                "view.search": self.side_panel.focus_search,
            }
        )

    # --- Status ---

    def _update_status(self) -> None:
        file = self.open_tabs.get_active_file()
        if file is None:
            self.setWindowTitle("Codeshell")
            self.language_label.setText("")
            self.cursor_label.setText("")
            return

        tab = self.open_tabs.get_tab(file.id)
        title = tab.title if tab is not None else file.name
        self.setWindowTitle(f"Codeshell - {title}")
        self.language_label.setText(display_name_for(file.name))
        widget = self.buffers.widget_for(file.id)
        if widget is not None:
            self._update_cursor_label(*widget.cursor_position())

    def _update_cursor_label(self, line: int, column: int) -> None:
        self.cursor_label.setText(f"Ln {line}, Col {column}")

    # --- Tabs ---

    def open_file_by_id(self, file_id: str) -> None:
        file = self.store.get_file(file_id)
        if file is None:
            return
        self.open_file(file)

    def open_file(self, file: FileNode) -> None:
        self.open_tabs.open_file(file)
        self.explorer_state.expand_to_file(file)
        self.explorer_state.select_file(file)
        self.status_bar.showMessage(f"Opened {file.path}")

    def _on_current_tab_changed(self, index: int) -> None:
        file_id = self.buffers.buffer_id_at(index)
        if file_id is not None and file_id != self.open_tabs.active_id:
            self.open_tabs.switch_to(file_id)

    def _on_tab_close_requested(self, index: int) -> None:
        file_id = self.buffers.buffer_id_at(index)
        if file_id is not None:
            self._close_tab(file_id)

    def close_current_tab(self) -> None:
        if self.open_tabs.active_id is not None:
            self._close_tab(self.open_tabs.active_id)

    def _close_tab(self, file_id: str) -> None:
        tab = self.open_tabs.get_tab(file_id)
        if tab is not None and tab.is_modified:
            reply = QMessageBox.question(
                self,
                "Unsaved Changes",
                f"{tab.name} has unsaved changes. Save before closing?",
                QMessageBox.StandardButton.Save
                | QMessageBox.StandardButton.Discard
                | QMessageBox.StandardButton.Cancel,
                QMessageBox.StandardButton.Save,
            )
            if reply == QMessageBox.StandardButton.Cancel:
                return
            if reply == QMessageBox.StandardButton.Save:
                self.open_tabs.save(file_id)
        self.open_tabs.close_tab(file_id)

    def save_current_file(self) -> None:
        file = self.open_tabs.get_active_file()
        if file is not None and self.open_tabs.save(file.id):
            self.status_bar.showMessage(f"Saved {file.path}")

    def save_all_files(self) -> None:
        count = self.open_tabs.save_all()
        self.status_bar.showMessage(f"Saved {count} file(s)")

    # --- Explorer actions ---

    def _on_explorer_action(self, action: str, entity_id: str) -> None:
        entity = self.store.get_entity(entity_id) if entity_id else None
        if action == "new_file":
            self.new_file(entity if isinstance(entity, FolderNode) else None)
        elif action == "new_folder":
            self.new_folder(entity if isinstance(entity, FolderNode) else None)
        elif entity is None:
            return
        elif action == "rename":
            self.rename_entity(entity)
        elif action == "move":
            self.move_entity(entity)
        elif action == "delete":
            self.delete_entity(entity)

    def new_file(self, parent: FolderNode | None = None) -> None:
        name, ok = QInputDialog.getText(self, "New File", "File name:", text="untitled.txt")
        name = name.strip()
        if not ok or not name:
            return
        if not is_valid_file_name(name):
            QMessageBox.warning(self, "Invalid Name", f"Invalid file name: {name}\n{FILE_NAME_HINT}")
            return

        file = self.store.create_unique_file(name, "", parent)
        self.open_file(file)

    def new_folder(self, parent: FolderNode | None = None) -> None:
        name, ok = QInputDialog.getText(self, "New Folder", "Folder name:", text="new-folder")
        name = name.strip()
        if not ok or not name:
            return
        if not is_valid_folder_name(name):
            QMessageBox.warning(
                self, "Invalid Name", f"Invalid folder name: {name}\n{FOLDER_NAME_HINT}"
            )
            return

        folder = self.store.create_unique_folder(name, parent)
        if parent is not None:
            self.explorer_state.expand(parent)
        self.status_bar.showMessage(f"Created {folder.path}")

    def rename_entity(self, entity: Entity) -> None:
        kind = "File" if isinstance(entity, FileNode) else "Folder"
        name, ok = QInputDialog.getText(self, f"Rename {kind}", "New name:", text=entity.name)
        name = name.strip()
        if not ok or not name or name == entity.name:
            return

        parent = self.store.get_parent(entity)
        if isinstance(entity, FileNode):
            valid, hint = is_valid_file_name(name), FILE_NAME_HINT
            taken = self.store.file_name_exists(name, parent)
        else:
            valid, hint = is_valid_folder_name(name), FOLDER_NAME_HINT
            taken = self.store.folder_name_exists(name, parent)

        if not valid:
            QMessageBox.warning(self, "Invalid Name", f"Invalid name: {name}\n{hint}")
            return
        if taken:
            QMessageBox.warning(self, "Name Taken", f"'{name}' already exists in this folder.")
            return

        if isinstance(entity, FileNode):
            self.store.rename_file(entity, name)
        else:
            self.store.rename_folder(entity, name)
        self.status_bar.showMessage(f"Renamed to {entity.path}")

    def move_entity(self, entity: Entity) -> None:
        excluded: set[str] = set()
        if isinstance(entity, FolderNode):
            excluded = {entity.id}
            excluded.update(d.id for d in iter_descendants(entity, self.store.get_entity))

        targets: dict[str, FolderNode | None] = {ROOT_CHOICE: None}
        for folder in sorted(self.store.get_folders(), key=lambda f: f.path):
            if folder.id not in excluded:
                targets[folder.path] = folder

        choice, ok = QInputDialog.getItem(
            self, "Move", f"Move {entity.name} to:", list(targets), 0, False
        )
        if not ok:
            return
        target = targets[choice]

        if isinstance(entity, FileNode):
            if entity.parent_id != (target.id if target else None) and (
                self.store.file_name_exists(entity.name, target)
            ):
                QMessageBox.warning(self, "Name Taken", f"'{entity.name}' already exists there.")
                return
            self.store.move_file(entity, target)
        else:
            if entity.parent_id != (target.id if target else None) and (
                self.store.folder_name_exists(entity.name, target)
            ):
                QMessageBox.warning(self, "Name Taken", f"'{entity.name}' already exists there.")
                return
            try:
                self.store.move_folder(entity, target)
            except InvalidMoveError as e:
                QMessageBox.warning(self, "Invalid Move", str(e))
                return
        self.status_bar.showMessage(f"Moved to {entity.path}")

    def delete_entity(self, entity: Entity) -> None:
        if isinstance(entity, FolderNode):
            prompt = f"Delete folder '{entity.path}' and everything in it?"
        else:
            prompt = f"Delete '{entity.path}'?"
        reply = QMessageBox.question(
            self,
            "Delete",
            prompt,
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
            QMessageBox.StandardButton.No,
        )
        if reply != QMessageBox.StandardButton.Yes:
            return

        path = entity.path
        if isinstance(entity, FileNode):
            self.store.remove_file(entity)
        else:
            self.store.remove_folder(entity)
        self.status_bar.showMessage(f"Deleted {path}")

    def _reveal_folder(self, folder_id: str) -> None:
        folder = self.store.get_folder(folder_id)
        if folder is None:
            return
        self.explorer_state.reveal_folder(folder)
        self.side_panel.focus_explorer()

    def clear_workspace(self) -> None:
        reply = QMessageBox.question(
            self,
            "Clear Workspace",
            "Delete every file and folder? This cannot be undone.",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
            QMessageBox.StandardButton.No,
        )
        if reply == QMessageBox.StandardButton.Yes:
            self.store.clear_all()
            self.status_bar.showMessage("Workspace cleared")

    def show_stats(self) -> None:
        stats = self.store.get_stats()
        types = ", ".join(f"{ext}: {n}" for ext, n in sorted(stats.file_types.items())) or "none"
        QMessageBox.information(
            self,
            "Workspace Statistics",
            f"Files: {stats.total_files}\n"
            f"Folders: {stats.total_folders}\n"
            f"Unsaved: {stats.modified_files}\n"
            f"Total size: {stats.total_size:,} characters\n"
            f"Types: {types}",
        )

    # --- Local files ---

    def open_local_files(self) -> None:
        paths, _ = QFileDialog.getOpenFileNames(
            self,
            "Open Local Files",
            "",
            "Text files (*.html *.css *.js *.txt *.json *.md);;All files (*)",
        )
        if paths:
            self.load_local_files(paths)

    def load_local_files(self, paths: list[str]) -> None:
        """Read files on a worker thread, then add them to the workspace root"""
        if self._load_thread is not None:
            self.status_bar.showMessage("Still loading files...")
            return

        self.status_bar.showMessage(f"Loading {len(paths)} file(s)...")
        self._load_thread = QThread()
        self._load_worker = FileLoadWorker(list(paths))
        self._load_worker.moveToThread(self._load_thread)

        self._load_worker.finished.connect(self._on_files_loaded)
        self._load_worker.error.connect(self._on_load_error)
        self._load_thread.started.connect(self._load_worker.run)
        self._load_thread.start()

    def _finish_load_thread(self) -> None:
        if self._load_thread is not None:
            self._load_thread.quit()
            self._load_thread.wait()
        self._load_thread = None
        self._load_worker = None

    def _on_files_loaded(self, loaded: list[LoadedFile], errors: list[FileReadError]) -> None:
        self._finish_load_thread()

        created = [self.store.create_unique_file(f.name, f.content) for f in loaded]
        for file in created:
            self.open_file(file)
        self.status_bar.showMessage(f"Loaded {len(created)} file(s)")

        if errors:
            QMessageBox.warning(
                self, "Some Files Were Not Loaded", "\n".join(str(e) for e in errors)
            )

    def _on_load_error(self, message: str) -> None:
        self._finish_load_thread()
        QMessageBox.critical(self, "Error", f"Failed to load files: {message}")

    def dragEnterEvent(self, event: Any) -> None:  # noqa: N802
        """Accept drags that carry local files"""
        if event.mimeData().hasUrls():
            event.acceptProposedAction()
        else:
            event.ignore()

    def dropEvent(self, event: Any) -> None:  # noqa: N802
        """Add dropped files to the workspace root and open them"""
        if not event.mimeData().hasUrls():
            event.ignore()
            return

        paths = dropped_file_paths([url.toLocalFile() for url in event.mimeData().urls()])
        if not paths:
            event.ignore()
            return

        event.acceptProposedAction()
        self.load_local_files(paths)

    # --- Shutdown ---

    def closeEvent(self, event: Any) -> None:  # noqa: N802
        """Offer to save unsaved tabs, then remember the sidebar width"""
        if self.open_tabs.has_unsaved_changes():
            reply = QMessageBox.question(
                self,
                "Unsaved Changes",
                "Some files have unsaved changes. Save them before quitting?",
                QMessageBox.StandardButton.Save
                | QMessageBox.StandardButton.Discard
                | QMessageBox.StandardButton.Cancel,
                QMessageBox.StandardButton.Save,
            )
            if reply == QMessageBox.StandardButton.Cancel:
                event.ignore()
                return
            if reply == QMessageBox.StandardButton.Save:
                self.open_tabs.save_all()

        sizes = self.splitter.sizes()
        if sizes:
            self.settings.set("ui.sidebar_width", sizes[0])
            try:
                self.settings.save()
            except OSError as e:
                print(f"⚠️ Failed to save settings: {e}")

        super().closeEvent(event)
