"""Tests for reading local files into the workspace."""

import pytest

from codeshell.vfs.binary import has_binary_extension, is_binary_file, looks_binary
from codeshell.vfs.loader import (
    FileReadError,
    dropped_file_paths,
    read_local_file,
    read_local_files,
)


class TestBinaryDetection:
    def test_extensions(self):
        assert has_binary_extension("photo.PNG")
        assert has_binary_extension("/tmp/archive.zip")
        assert not has_binary_extension("index.html")
        assert not has_binary_extension("Makefile")

    def test_content_sniffing(self):
        assert looks_binary(b"abc\x00def")
        assert not looks_binary("héllo".encode("utf-8"))

    def test_nul_past_sniff_window_is_ignored(self):
        assert not looks_binary(b"a" * 9000 + b"\x00")

    def test_is_binary_file(self):
        assert is_binary_file("a.png")
        assert is_binary_file("a.txt", b"\x00\x01")
        assert not is_binary_file("a.txt", b"plain")


class TestReadLocalFile:
    def test_reads_text(self, tmp_path):
        path = tmp_path / "index.html"
        path.write_text("<h1>Hi</h1>", encoding="utf-8")

        loaded = read_local_file(path)

        assert loaded.name == "index.html"
        assert loaded.content == "<h1>Hi</h1>"

    def test_accepts_string_paths(self, tmp_path):
        path = tmp_path / "a.txt"
        path.write_text("x")

        assert read_local_file(str(path)).content == "x"

    def test_invalid_utf8_is_replaced(self, tmp_path):
        path = tmp_path / "latin.txt"
        path.write_bytes(b"caf\xe9")

        assert read_local_file(path).content == "caf�"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileReadError, match="Failed to read file: nope.txt"):
            read_local_file(tmp_path / "nope.txt")

    def test_binary_extension_is_refused(self, tmp_path):
        path = tmp_path / "image.png"
        path.write_bytes(b"\x89PNG")

        with pytest.raises(FileReadError, match="binary"):
            read_local_file(path)

    def test_binary_content_is_refused(self, tmp_path):
        path = tmp_path / "data.txt"
        path.write_bytes(b"text\x00more")

        with pytest.raises(FileReadError, match="binary"):
            read_local_file(path)


class TestReadLocalFiles:
    def test_collects_errors(self, tmp_path):
        good = tmp_path / "good.md"
        good.write_text("# ok")
        bad = tmp_path / "bad.png"
        bad.write_bytes(b"\x00")

        loaded, errors = read_local_files([good, bad, tmp_path / "missing.js"])

        assert [f.name for f in loaded] == ["good.md"]
        assert [e.path.name for e in errors] == ["bad.png", "missing.js"]


class TestDroppedFilePaths:
    def test_keeps_files_and_skips_folders_and_remote_urls(self, tmp_path):
        file = tmp_path / "page.html"
        file.write_text("<p>")
        folder = tmp_path / "assets"
        folder.mkdir()

        paths = dropped_file_paths([str(file), str(folder), ""])

        assert paths == [str(file)]

    def test_dropped_files_load_into_workspace(self, tmp_path):
        first = tmp_path / "a.js"
        first.write_text("let a;")
        second = tmp_path / "b.css"
        second.write_text("p {}")

        loaded, errors = read_local_files(dropped_file_paths([str(first), str(second)]))

        assert [f.name for f in loaded] == ["a.js", "b.css"]
        assert errors == []
