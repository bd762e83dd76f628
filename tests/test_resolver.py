"""Tests for dirstream.resolver."""

from __future__ import annotations

import os
import stat
from pathlib import Path

import pytest

from dirstream.entry import FileType
from dirstream.errors import DirError, ErrorKind
from dirstream.resolver import classify, type_from_mode


class TestTypeFromMode:
    @pytest.mark.parametrize(
        ("mode", "expected"),
        [
            (stat.S_IFDIR | 0o755, FileType.DIRECTORY),
            (stat.S_IFREG | 0o644, FileType.REGULAR),
            (stat.S_IFLNK | 0o777, FileType.SYMLINK),
            (stat.S_IFCHR | 0o666, FileType.DEVICE),
            (stat.S_IFBLK | 0o660, FileType.DEVICE),
            (stat.S_IFIFO | 0o644, FileType.OTHER),
            (stat.S_IFSOCK | 0o755, FileType.OTHER),
        ],
    )
    def test_mode_mapping(self, mode: int, expected: FileType) -> None:
        assert type_from_mode(mode) is expected


class TestClassify:
    def test_regular_file(self, tmp_path: Path) -> None:
        path = tmp_path / "f.txt"
        path.write_text("f")
        assert classify(str(path)) is FileType.REGULAR

    def test_directory(self, tmp_path: Path) -> None:
        assert classify(str(tmp_path)) is FileType.DIRECTORY

    @pytest.mark.skipif(os.name == "nt", reason="symlinks need privileges on Windows")
    def test_symlink_to_directory_is_not_followed(self, tmp_path: Path) -> None:
        (tmp_path / "target").mkdir()
        link = tmp_path / "link"
        link.symlink_to(tmp_path / "target")
        assert classify(str(link)) is FileType.SYMLINK

    @pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="needs os.mkfifo")
    def test_fifo_is_other(self, tmp_path: Path) -> None:
        fifo = tmp_path / "pipe"
        os.mkfifo(fifo)
        assert classify(str(fifo)) is FileType.OTHER

    @pytest.mark.skipif(not os.path.exists("/dev/null"), reason="needs /dev/null")
    def test_character_device(self) -> None:
        assert classify("/dev/null") is FileType.DEVICE

    def test_vanished_entry_raises_not_found(self, tmp_path: Path) -> None:
        missing = str(tmp_path / "gone.txt")
        with pytest.raises(DirError) as exc_info:
            classify(missing)
        assert exc_info.value.kind is ErrorKind.NOT_FOUND
        assert exc_info.value.path == missing
        assert exc_info.value.action == "read file stats"
