"""
Search panel: finds files by name or content and folders by name.
"""

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from codeshell.editor.languages import icon_for
from codeshell.vfs.store import EntityStore

MAX_RESULTS = 500
PREVIEW_CHARS = 80


def first_matching_line(content: str, query: str) -> tuple[int, str] | None:
    """1-based line number and trimmed text of the first line containing query"""
    needle = query.lower()
    for line_num, line in enumerate(content.split("\n"), 1):
        if needle in line.lower():
            return line_num, line.strip()[:PREVIEW_CHARS]
    return None


class SearchWidget(QWidget):
    """
    Case-insensitive search over the store.

    Files match by name or content, folders by name. Activating a file
    result emits file_selected; a folder result emits folder_selected.
    """

    # file id
    file_selected = Signal(str)
    # folder id
    folder_selected = Signal(str)

    def __init__(self, store: EntityStore, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.store = store
        self._setup_ui()

    def _setup_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(4, 4, 4, 4)

        search_row = QHBoxLayout()
        self.search_input = QLineEdit()
        self.search_input.setPlaceholderText("Search files...")
        self.search_input.returnPressed.connect(self.do_search)
        search_row.addWidget(self.search_input)

        self.search_button = QPushButton("🔍")
        self.search_button.setFixedWidth(32)
        self.search_button.clicked.connect(self.do_search)
        search_row.addWidget(self.search_button)
        layout.addLayout(search_row)

        self.status_label = QLabel("Enter a search term")
        self.status_label.setStyleSheet("color: #888; font-size: 11px;")
        layout.addWidget(self.status_label)

        self.results_list = QListWidget()
        self.results_list.itemActivated.connect(self._open_item)
        self.results_list.itemDoubleClicked.connect(self._open_item)
        layout.addWidget(self.results_list)

    def focus_input(self) -> None:
        self.search_input.setFocus()
        self.search_input.selectAll()

    def do_search(self) -> None:
        query = self.search_input.text().strip()
        self.results_list.clear()
        if not query:
            self.status_label.setText("Enter a search term")
            return

        folders = self.store.search_folders(query)
        files = self.store.search_files(query)

        for folder in folders[:MAX_RESULTS]:
            item = QListWidgetItem(f"📁 {folder.path}")
            item.setData(Qt.ItemDataRole.UserRole, ("folder", folder.id))
            self.results_list.addItem(item)

        for file in files[: max(0, MAX_RESULTS - len(folders))]:
            text = f"{icon_for(file.name)} {file.path}"
            match = first_matching_line(file.content, query)
            if match is not None:
                line_num, preview = match
                text += f"\n  {line_num}: {preview}"
            item = QListWidgetItem(text)
            item.setData(Qt.ItemDataRole.UserRole, ("file", file.id))
            self.results_list.addItem(item)

        total = len(folders) + len(files)
        if total > MAX_RESULTS:
            self.status_label.setText(f"{MAX_RESULTS}+ matches (first {MAX_RESULTS})")
        else:
            self.status_label.setText(f"{total} match(es)")

        if self.results_list.count() > 0:
            self.results_list.setCurrentRow(0)

    def _open_item(self, item: QListWidgetItem) -> None:
        data = item.data(Qt.ItemDataRole.UserRole)
        if not data:
            return
        kind, entity_id = data
        if kind == "file":
            self.file_selected.emit(entity_id)
        else:
            self.folder_selected.emit(entity_id)
