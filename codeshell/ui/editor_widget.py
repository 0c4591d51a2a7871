"""
Plain-text code editor with line numbers, and the tabbed buffer host
that connects it to the open-tabs model.
"""

from collections.abc import Callable
from typing import Any

from PySide6.QtCore import QRect, QSize, Qt, Signal
from PySide6.QtGui import QColor, QFont, QPainter, QTextFormat
from PySide6.QtWidgets import QPlainTextEdit, QTabWidget, QTextEdit, QVBoxLayout, QWidget

from codeshell.editor.buffers import EditorBuffers

BACKGROUND = "#1e1e1e"
FOREGROUND = "#d4d4d4"
GUTTER_BACKGROUND = "#252526"
GUTTER_FOREGROUND = "#858585"
CURRENT_LINE = "#2a2d2e"


class LineNumberArea(QWidget):
    """Gutter painted by its editor"""

    def __init__(self, editor: "CodeEditor") -> None:
        super().__init__(editor)
        self.editor = editor

    def sizeHint(self) -> QSize:
        return QSize(self.editor.line_number_area_width(), 0)

    def paintEvent(self, event: Any) -> None:
        self.editor.line_number_area_paint_event(event)


class CodeEditor(QPlainTextEdit):
    """Dark-themed plain-text editor with a line number gutter"""

    def __init__(
        self,
        font_size: int = 14,
        tab_width: int = 4,
        word_wrap: bool = True,
        show_line_numbers: bool = True,
    ) -> None:
        super().__init__()

        font = QFont("Monospace", font_size)
        font.setStyleHint(QFont.StyleHint.TypeWriter)
        self.setFont(font)
        self.setStyleSheet(f"QPlainTextEdit {{ background: {BACKGROUND}; color: {FOREGROUND}; }}")
        self.setTabStopDistance(self.fontMetrics().horizontalAdvance(" ") * tab_width)
        self.setLineWrapMode(
            QPlainTextEdit.LineWrapMode.WidgetWidth
            if word_wrap
            else QPlainTextEdit.LineWrapMode.NoWrap
        )

        self.show_line_numbers = show_line_numbers
        self.line_number_area = LineNumberArea(self)
        self.line_number_area.setVisible(show_line_numbers)

        self.blockCountChanged.connect(self.update_line_number_area_width)
        self.updateRequest.connect(self.update_line_number_area)
        self.cursorPositionChanged.connect(self.highlight_current_line)

        self.update_line_number_area_width(0)
        self.highlight_current_line()

    def line_number_area_width(self) -> int:
        if not self.show_line_numbers:
            return 0
        digits = len(str(max(1, self.blockCount())))
        return 10 + self.fontMetrics().horizontalAdvance("9") * digits

    def update_line_number_area_width(self, _: int) -> None:
        self.setViewportMargins(self.line_number_area_width(), 0, 0, 0)

    def update_line_number_area(self, rect: QRect, dy: int) -> None:
        if dy:
            self.line_number_area.scroll(0, dy)
        else:
            self.line_number_area.update(0, rect.y(), self.line_number_area.width(), rect.height())

        if rect.contains(self.viewport().rect()):
            self.update_line_number_area_width(0)

    def resizeEvent(self, event: Any) -> None:
        super().resizeEvent(event)
        cr = self.contentsRect()
        self.line_number_area.setGeometry(
            QRect(cr.left(), cr.top(), self.line_number_area_width(), cr.height())
        )

    def line_number_area_paint_event(self, event: Any) -> None:
        painter = QPainter(self.line_number_area)
        painter.fillRect(event.rect(), QColor(GUTTER_BACKGROUND))

        block = self.firstVisibleBlock()
        block_number = block.blockNumber()
        top = self.blockBoundingGeometry(block).translated(self.contentOffset()).top()
        bottom = top + self.blockBoundingRect(block).height()

        while block.isValid() and top <= event.rect().bottom():
            if block.isVisible() and bottom >= event.rect().top():
                painter.setPen(QColor(GUTTER_FOREGROUND))
                painter.drawText(
                    0,
                    int(top),
                    self.line_number_area.width() - 5,
                    self.fontMetrics().height(),
                    Qt.AlignmentFlag.AlignRight,
                    str(block_number + 1),
                )

            block = block.next()
            top = bottom
            bottom = top + self.blockBoundingRect(block).height()
            block_number += 1

    def highlight_current_line(self) -> None:
        extra_selections: list[Any] = []

        if not self.isReadOnly():
            selection: Any = QTextEdit.ExtraSelection()
            selection.format.setBackground(QColor(CURRENT_LINE))
            selection.format.setProperty(QTextFormat.Property.FullWidthSelection, True)
            selection.cursor = self.textCursor()
            selection.cursor.clearSelection()
            extra_selections.append(selection)

        self.setExtraSelections(extra_selections)


class EditorWidget(QWidget):
    """One buffer: a CodeEditor plus the bookkeeping the tab host needs"""

    # line, column (1-based)
    cursor_moved = Signal(int, int)

    def __init__(
        self,
        buffer_id: str,
        language: str,
        settings_kwargs: dict[str, Any] | None = None,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.buffer_id = buffer_id
        self.language = language

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        self.editor = CodeEditor(**(settings_kwargs or {}))
        self.editor.cursorPositionChanged.connect(self._emit_cursor)
        layout.addWidget(self.editor)

    def get_text(self) -> str:
        return self.editor.toPlainText()

    def set_text(self, text: str) -> None:
        # Loading text is not an edit
        self.editor.blockSignals(True)
        self.editor.setPlainText(text)
        self.editor.blockSignals(False)
        self.editor.document().setModified(False)

    def cursor_position(self) -> tuple[int, int]:
        cursor = self.editor.textCursor()
        return cursor.blockNumber() + 1, cursor.positionInBlock() + 1

    def _emit_cursor(self) -> None:
        self.cursor_moved.emit(*self.cursor_position())


class QtEditorBuffers(EditorBuffers):
    """
    Editor buffers hosted as pages of a QTabWidget.

    The tab widget stays owned by the window; this class only maps buffer
    ids to pages. The window routes tab close buttons through the open-tabs
    model, which calls close_buffer().
    """

    def __init__(self, tabs: QTabWidget, settings_kwargs: dict[str, Any] | None = None) -> None:
        self.tabs = tabs
        self.settings_kwargs = settings_kwargs or {}
        self._widgets: dict[str, EditorWidget] = {}
        self._cursor_callbacks: list[Callable[[int, int], None]] = []

    def open_buffer(self, buffer_id: str, name: str, content: str, language: str) -> None:
        widget = EditorWidget(buffer_id, language, self.settings_kwargs)
        widget.set_text(content)
        widget.cursor_moved.connect(self._on_cursor_moved)
        self._widgets[buffer_id] = widget
        self.tabs.addTab(widget, name)

    def get_buffer_value(self, buffer_id: str) -> str:
        return self._widgets[buffer_id].get_text()

    def close_buffer(self, buffer_id: str) -> None:
        widget = self._widgets.pop(buffer_id, None)
        if widget is None:
            return
        index = self.tabs.indexOf(widget)
        if index >= 0:
            self.tabs.removeTab(index)
        widget.deleteLater()

    def on_content_changed(self, buffer_id: str, callback: Callable[[], None]) -> None:
        self._widgets[buffer_id].editor.textChanged.connect(callback)

    def show_buffer(self, buffer_id: str) -> None:
        widget = self._widgets.get(buffer_id)
        if widget is not None:
            self.tabs.setCurrentWidget(widget)

    def set_buffer_title(self, buffer_id: str, title: str) -> None:
        widget = self._widgets.get(buffer_id)
        if widget is None:
            return
        index = self.tabs.indexOf(widget)
        if index >= 0:
            self.tabs.setTabText(index, title)

    def buffer_id_at(self, index: int) -> str | None:
        """Buffer id of the page at a tab index"""
        widget = self.tabs.widget(index)
        if isinstance(widget, EditorWidget):
            return widget.buffer_id
        return None

    def widget_for(self, buffer_id: str) -> EditorWidget | None:
        return self._widgets.get(buffer_id)

    def on_cursor_moved(self, callback: Callable[[int, int], None]) -> None:
        """Call ``callback(line, column)`` when the cursor moves in any buffer"""
        self._cursor_callbacks.append(callback)

    def _on_cursor_moved(self, line: int, column: int) -> None:
        for callback in list(self._cursor_callbacks):
            callback(line, column)
