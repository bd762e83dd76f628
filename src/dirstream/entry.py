"""Entry values produced by directory streaming."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum


class FileType(str, Enum):
    """Classification of a filesystem entry."""

    DIRECTORY = "directory"
    REGULAR = "regular"
    SYMLINK = "symlink"
    DEVICE = "device"
    OTHER = "other"
    UNDETERMINED = "undetermined"


@dataclass(frozen=True, slots=True)
class Entry:
    """A single entry produced while reading a directory.

    Attributes:
        path: Full path, prefixed by the path the directory was opened with
            and every intermediate directory name. ``bytes`` only for names
            that cannot be decoded and were read with ``raw=True``.
        type: Entry classification, or ``None`` when types were not
            requested.
    """

    path: str | bytes
    type: FileType | None = None

    @property
    def name(self) -> str | bytes:
        """Basename of the entry."""
        return os.path.basename(self.path)

    def __fspath__(self) -> str | bytes:
        return self.path
