"""Type resolver: classify entries the directory reader could not type."""

from __future__ import annotations

import logging
import os
import stat

from dirstream.entry import FileType
from dirstream.errors import from_os_error

logger = logging.getLogger(__name__)


def type_from_mode(mode: int) -> FileType:
    """Map an ``st_mode`` value to a :class:`FileType`."""
    if stat.S_ISDIR(mode):
        return FileType.DIRECTORY
    if stat.S_ISREG(mode):
        return FileType.REGULAR
    if stat.S_ISLNK(mode):
        return FileType.SYMLINK
    if stat.S_ISCHR(mode) or stat.S_ISBLK(mode):
        return FileType.DEVICE
    return FileType.OTHER


def classify(path: str) -> FileType:
    """Classify *path* with a single ``lstat`` call.

    Symbolic links are reported as ``SYMLINK``; their targets are never
    inspected. The entry may vanish between listing and this call, in which
    case a ``NOT_FOUND`` error is raised for the caller to handle.

    Args:
        path: Entry path as produced by the directory reader.

    Returns:
        FileType: Concrete classification, never ``UNDETERMINED``.

    Raises:
        DirError: If the status call fails.
    """
    try:
        st = os.lstat(path)
    except OSError as exc:
        raise from_os_error(exc, "read file stats", path) from exc
    file_type = type_from_mode(st.st_mode)
    logger.debug("Resolved type of %r: %s", path, file_type.value)
    return file_type
