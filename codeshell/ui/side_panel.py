"""
Side panel widget with tabbed Explorer and Search views.
"""

from PySide6.QtCore import Signal
from PySide6.QtWidgets import QTabWidget, QVBoxLayout, QWidget

from codeshell.ui.file_explorer_widget import FileExplorerWidget
from codeshell.ui.search_widget import SearchWidget
from codeshell.views.explorer_state import ExplorerState


class SidePanelWidget(QWidget):
    """Explorer and Search tabs, with their signals forwarded"""

    # file id
    file_open_requested = Signal(str)
    # action name, entity id
    action_requested = Signal(str, str)
    # folder id
    folder_reveal_requested = Signal(str)

    def __init__(self, state: ExplorerState, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.state = state
        self._setup_ui()

    def _setup_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self.tabs = QTabWidget()
        self.tabs.setTabPosition(QTabWidget.TabPosition.North)

        self.explorer = FileExplorerWidget(self.state)
        self.explorer.file_open_requested.connect(self.file_open_requested.emit)
        self.explorer.action_requested.connect(self.action_requested.emit)
        self.tabs.addTab(self.explorer, "📁 Explorer")

        self.search = SearchWidget(self.state.store)
        self.search.file_selected.connect(self.file_open_requested.emit)
        self.search.folder_selected.connect(self.folder_reveal_requested.emit)
        self.tabs.addTab(self.search, "🔍 Search")

        layout.addWidget(self.tabs)

    def focus_search(self) -> None:
        self.tabs.setCurrentWidget(self.search)
        self.search.focus_input()

    def focus_explorer(self) -> None:
        self.tabs.setCurrentWidget(self.explorer)
