"""Tests for language lookup and the in-memory editor buffers."""

from codeshell.editor.buffers import MemoryBuffers
from codeshell.editor.languages import display_name_for, icon_for, language_for


class TestLanguages:
    """Lookup by extension"""

    def test_language_hints(self):
        assert language_for("index.html") == "html"
        assert language_for("style.css") == "css"
        assert language_for("app.js") == "javascript"
        assert language_for("data.json") == "json"
        assert language_for("README.md") == "markdown"
        assert language_for("notes.txt") == "plaintext"

    def test_unknown_is_plain_text(self):
        assert language_for("script.py") == "plaintext"
        assert language_for("Makefile") == "plaintext"
        assert display_name_for("Makefile") == "Plain Text"

    def test_extension_case_is_ignored(self):
        assert language_for("INDEX.HTML") == "html"

    def test_uses_last_extension(self):
        assert language_for("bundle.min.js") == "javascript"
        assert language_for("archive.js.txt") == "plaintext"

    def test_display_names(self):
        assert display_name_for("a.js") == "JavaScript"
        assert display_name_for("a.md") == "Markdown"
        assert display_name_for("a.json") == "JSON"

    def test_icons(self):
        assert icon_for("a.html") != icon_for("a.css")
        assert icon_for("unknown.xyz") == icon_for("a.txt")


class TestMemoryBuffers:
    """Headless editor buffers"""

    def test_open_and_read(self):
        buffers = MemoryBuffers()
        buffers.open_buffer("f1", "a.js", "let a;", "javascript")

        assert buffers.get_buffer_value("f1") == "let a;"
        assert buffers.titles["f1"] == "a.js"

    def test_edit_notifies_listeners(self):
        buffers = MemoryBuffers()
        buffers.open_buffer("f1", "a.js", "", "javascript")
        calls = []
        buffers.on_content_changed("f1", lambda: calls.append("f1"))

        buffers.edit("f1", "typed")

        assert calls == ["f1"]
        assert buffers.get_buffer_value("f1") == "typed"

    def test_close_drops_listeners(self):
        buffers = MemoryBuffers()
        buffers.open_buffer("f1", "a.js", "", "javascript")
        calls = []
        buffers.on_content_changed("f1", lambda: calls.append("f1"))

        buffers.close_buffer("f1")
        buffers.open_buffer("f1", "a.js", "", "javascript")
        buffers.edit("f1", "typed")

        assert calls == []
