"""Unit tests for artifact persistence helpers."""

from __future__ import annotations

import os
import stat
from pathlib import Path

import pytest

from icecube_core.compiler.artifacts import (
    DIRECTORY_MODE,
    FILE_MODE,
    ensure_directory,
    write_if_changed,
)


class TestEnsureDirectory:
    """Tests for ensure_directory()."""

    def test_creates_nested_directories(self, tmp_path: Path) -> None:
        """Missing parents are created."""
        target = tmp_path / "a" / "b" / "c"
        assert ensure_directory(target) == target
        assert target.is_dir()

    def test_existing_directory_is_kept(self, tmp_path: Path) -> None:
        """An existing directory is left as is."""
        (tmp_path / "keep.txt").write_text("x")
        ensure_directory(tmp_path)
        assert (tmp_path / "keep.txt").exists()

    def test_directory_mode(self, tmp_path: Path) -> None:
        """New directories get 0o750, minus the umask."""
        target = ensure_directory(tmp_path / "private")
        mode = stat.S_IMODE(target.stat().st_mode)
        assert mode & ~DIRECTORY_MODE == 0


class TestWriteIfChanged:
    """Tests for write_if_changed()."""

    def test_writes_new_file(self, tmp_path: Path) -> None:
        """A missing file is written."""
        target = tmp_path / "Foo.js"
        assert write_if_changed(target, "console.log(1)") is True
        assert target.read_text() == "console.log(1)"

    def test_file_mode(self, tmp_path: Path) -> None:
        """Written files are world-readable."""
        target = tmp_path / "Foo.css"
        write_if_changed(target, "a{}")
        assert stat.S_IMODE(target.stat().st_mode) == FILE_MODE

    def test_unchanged_content_is_not_rewritten(self, tmp_path: Path) -> None:
        """Identical content leaves the file and its mtime alone."""
        target = tmp_path / "Foo.py"
        write_if_changed(target, "x = 1")
        os.utime(target, (1_000_000, 1_000_000))

        assert write_if_changed(target, "x = 1") is False
        assert target.stat().st_mtime == 1_000_000

    def test_changed_content_is_replaced(self, tmp_path: Path) -> None:
        """Different content replaces the file."""
        target = tmp_path / "Foo.py"
        write_if_changed(target, "x = 1")
        assert write_if_changed(target, "x = 2") is True
        assert target.read_text() == "x = 2"

    def test_no_temporary_files_left(self, tmp_path: Path) -> None:
        """The temporary sibling is renamed away."""
        write_if_changed(tmp_path / "Foo.py", "x = 1")
        assert [p.name for p in tmp_path.iterdir()] == ["Foo.py"]

    def test_missing_directory_raises(self, tmp_path: Path) -> None:
        """Write failures propagate."""
        with pytest.raises(OSError):
            write_if_changed(tmp_path / "missing" / "Foo.py", "x = 1")

    def test_utf8_content(self, tmp_path: Path) -> None:
        """Content is written as UTF-8."""
        target = tmp_path / "Foo.css"
        write_if_changed(target, 'a::before { content: "✓" }')
        assert target.read_bytes() == 'a::before { content: "✓" }'.encode()
