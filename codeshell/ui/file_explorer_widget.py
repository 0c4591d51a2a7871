"""
File explorer widget that renders the explorer state of the entity store
"""

from typing import Any

from PySide6.QtCore import QTimer, Qt, Signal
from PySide6.QtWidgets import (
    QApplication,
    QLineEdit,
    QMenu,
    QTreeWidget,
    QTreeWidgetItem,
    QVBoxLayout,
    QWidget,
)

from codeshell.constants import MODIFIED_MARKER
from codeshell.editor.languages import icon_for
from codeshell.views.explorer_state import ExplorerState, TreeRow
from codeshell.vfs.entities import FileNode, FolderNode

ICON_FOLDER_CLOSED = "📁"
ICON_FOLDER_OPEN = "📂"

# Item data roles
ROLE_ID = Qt.ItemDataRole.UserRole
ROLE_KIND = Qt.ItemDataRole.UserRole + 1


class FileExplorerWidget(QWidget):
    """
    Tree of folders and files.

    The tree is rebuilt from ExplorerState.visible_rows() whenever the
    state reports a change; several changes in one event-loop turn produce
    a single rebuild. Double-clicking a file emits file_open_requested.
    Context menu commands are emitted as action_requested and carried out
    by the window, which owns the dialogs.
    """

    # file id
    file_open_requested = Signal(str)

    # action name ("new_file", "new_folder", "rename", "move", "delete"), entity id or ""
    action_requested = Signal(str, str)

    def __init__(self, state: ExplorerState, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.state = state
        self._refresh_pending = False
        self._setup_ui()
        self.state.on_change(self.schedule_refresh)
        self.refresh()

    def _setup_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self.filter_input = QLineEdit()
        self.filter_input.setPlaceholderText("Filter files...")
        self.filter_input.setClearButtonEnabled(True)
        self.filter_input.textChanged.connect(self.state.set_filter)
        layout.addWidget(self.filter_input)

        self.tree = QTreeWidget()
        self.tree.setHeaderHidden(True)
        self.tree.setContextMenuPolicy(Qt.ContextMenuPolicy.CustomContextMenu)
        self.tree.customContextMenuRequested.connect(self._show_context_menu)
        self.tree.itemDoubleClicked.connect(self._on_item_double_clicked)
        self.tree.itemClicked.connect(self._on_item_clicked)
        self.tree.itemExpanded.connect(self._on_item_expanded)
        self.tree.itemCollapsed.connect(self._on_item_collapsed)
        self.tree.setToolTip("Double-click to open a file\nRight-click for more actions")
        layout.addWidget(self.tree)

    def schedule_refresh(self) -> None:
        """Rebuild the tree once control returns to the event loop"""
        if self._refresh_pending:
            return
        self._refresh_pending = True
        QTimer.singleShot(0, self.refresh)

    def refresh(self) -> None:
        """Rebuild the tree from the explorer state"""
        self._refresh_pending = False
        store = self.state.store

        # Expansion is replayed from the state, not reported back to it
        self.tree.blockSignals(True)
        self.tree.clear()

        parents: list[QTreeWidgetItem | None] = [None]
        for row in self.state.visible_rows():
            del parents[row.depth + 1 :]
            item = self._make_item(row)
            parent = parents[row.depth] if row.depth < len(parents) else None
            if parent is None:
                self.tree.addTopLevelItem(item)
            else:
                parent.addChild(item)

            if isinstance(row.entity, FolderNode):
                if row.entity.child_ids and not self.state.filter_term:
                    item.setChildIndicatorPolicy(
                        QTreeWidgetItem.ChildIndicatorPolicy.ShowIndicator
                    )
                item.setExpanded(row.expanded)
                parents.append(item)
            elif row.entity.id == self.state.selected_id:
                self.tree.setCurrentItem(item)

        self.tree.blockSignals(False)

        if not store.get_files() and not store.get_folders():
            placeholder = QTreeWidgetItem()
            placeholder.setText(0, "No files yet")
            placeholder.setFlags(Qt.ItemFlag.NoItemFlags)
            self.tree.addTopLevelItem(placeholder)

    def _make_item(self, row: TreeRow) -> QTreeWidgetItem:
        entity = row.entity
        item = QTreeWidgetItem()
        if isinstance(entity, FolderNode):
            icon = ICON_FOLDER_OPEN if row.expanded else ICON_FOLDER_CLOSED
            item.setText(0, f"{icon} {entity.name}")
            item.setData(0, ROLE_KIND, "folder")
        else:
            marker = MODIFIED_MARKER if row.is_modified else ""
            item.setText(0, f"{icon_for(entity.name)} {entity.name}{marker}")
            item.setData(0, ROLE_KIND, "file")
        item.setData(0, ROLE_ID, entity.id)
        item.setToolTip(0, entity.path)
        return item

    # --- Tree signals ---

    def _on_item_clicked(self, item: QTreeWidgetItem, column: int) -> None:
        file = self._file_of(item)
        if file is not None:
            self.state.select_file(file)

    def _on_item_double_clicked(self, item: QTreeWidgetItem, column: int) -> None:
        file = self._file_of(item)
        if file is not None:
            self.file_open_requested.emit(file.id)
            return
        folder = self._folder_of(item)
        if folder is not None:
            self.state.toggle_folder(folder)

    def _on_item_expanded(self, item: QTreeWidgetItem) -> None:
        folder = self._folder_of(item)
        if folder is not None:
            self.state.expand(folder)

    def _on_item_collapsed(self, item: QTreeWidgetItem) -> None:
        folder = self._folder_of(item)
        if folder is not None:
            self.state.collapse(folder)

    # --- Context menu ---

    def _show_context_menu(self, pos: Any) -> None:
        item = self.tree.itemAt(pos)
        entity_id = item.data(0, ROLE_ID) if item is not None else None
        kind = item.data(0, ROLE_KIND) if item is not None else None

        menu = QMenu(self)
        if kind == "file":
            menu.addAction("Open").triggered.connect(
                lambda: self.file_open_requested.emit(entity_id)
            )
            menu.addSeparator()
        if kind in (None, "folder"):
            target = entity_id or ""
            menu.addAction("New File...").triggered.connect(
                lambda: self.action_requested.emit("new_file", target)
            )
            menu.addAction("New Folder...").triggered.connect(
                lambda: self.action_requested.emit("new_folder", target)
            )
        if kind in ("file", "folder"):
            if kind == "folder":
                menu.addSeparator()
            menu.addAction("Rename...").triggered.connect(
                lambda: self.action_requested.emit("rename", entity_id)
            )
            menu.addAction("Move to...").triggered.connect(
                lambda: self.action_requested.emit("move", entity_id)
            )
            menu.addAction("Copy Path").triggered.connect(lambda: self._copy_path(entity_id))
            menu.addSeparator()
            menu.addAction("Delete").triggered.connect(
                lambda: self.action_requested.emit("delete", entity_id)
            )

        menu.exec(self.tree.viewport().mapToGlobal(pos))

    def _copy_path(self, entity_id: str) -> None:
        entity = self.state.store.get_entity(entity_id)
        if entity is not None:
            QApplication.clipboard().setText(entity.path)

    # --- Helpers ---

    def _file_of(self, item: QTreeWidgetItem) -> FileNode | None:
        if item.data(0, ROLE_KIND) != "file":
            return None
        return self.state.store.get_file(item.data(0, ROLE_ID))

    def _folder_of(self, item: QTreeWidgetItem) -> FolderNode | None:
        if item.data(0, ROLE_KIND) != "folder":
            return None
        return self.state.store.get_folder(item.data(0, ROLE_ID))
