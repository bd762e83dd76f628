"""Directory reader: open a directory and read one entry at a time.

A :class:`DirHandle` is a system resource and therefore mutable: every read
advances it, and once exhausted the only way to read the directory again is
to open it again. Handles are bound to the thread that opened them; reads
from any other thread fail with ``ErrorKind.NOT_OWNER`` until ownership is
handed off with :func:`set_controller`.
"""

from __future__ import annotations

import logging
import os
import sys
import threading
from dataclasses import dataclass
from types import TracebackType
from typing import TYPE_CHECKING

from dirstream.entry import Entry, FileType
from dirstream.errors import DirError, ErrorKind, from_os_error
from dirstream.resolver import classify, type_from_mode

if TYPE_CHECKING:
    from os import _ScandirIterator

logger = logging.getLogger(__name__)

_FS_ENCODING = sys.getfilesystemencoding()

PathArg = str | bytes | os.PathLike[str] | os.PathLike[bytes]


@dataclass(frozen=True, slots=True)
class RawEntry:
    """An entry as read from the OS, before any classification.

    Attributes:
        path: Full path of the entry. Undecodable bytes are carried as
            surrogate escapes so the path can still be opened.
        name: Basename of the entry.
        hint: Type reported by the directory read itself (or by the single
            lstat done in its place), or ``UNDETERMINED`` when that failed or
            no type was requested.
    """

    path: str
    name: str
    hint: FileType = FileType.UNDETERMINED


class DirHandle:
    """Open directory read cursor owned by a single controlling thread."""

    __slots__ = ("_closed", "_exhausted", "_iterator", "_owner", "path")

    def __init__(self, path: str, iterator: _ScandirIterator[str]) -> None:
        self.path = path
        self._iterator = iterator
        self._owner = threading.get_ident()
        self._exhausted = False
        self._closed = False

    @property
    def owner(self) -> int:
        """Identifier of the thread allowed to read this handle."""
        return self._owner

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Release the OS handle. Closing twice is a no-op."""
        if self._closed:
            return
        self._iterator.close()
        self._closed = True
        logger.debug("Closed directory: %r", self.path)

    def __enter__(self) -> DirHandle:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<DirHandle {self.path!r} {state}>"


def is_representable(name: str) -> bool:
    """Return whether *name* encodes cleanly in the filesystem encoding."""
    try:
        name.encode(_FS_ENCODING)
    except UnicodeEncodeError:
        return False
    return True


def fs_path(path: PathArg) -> str:
    """Return *path* as text; undecodable bytes become surrogate escapes."""
    return os.fsdecode(os.fspath(path))


def entry_path(path: str, raw: bool = False) -> str | bytes:
    """Return *path* as produced in an :class:`Entry`.

    Text is returned unchanged, surrogate escapes included, unless *raw* is
    set and the path cannot be decoded, in which case the verbatim OS bytes
    are returned.
    """
    if raw and not is_representable(path):
        return os.fsencode(path)
    return path


def opendir(path: PathArg = ".") -> DirHandle:
    """Open *path* for reading.

    Possible error kinds: ``NOT_FOUND`` (also for an empty path),
    ``PERMISSION_DENIED``, ``TOO_MANY_OPEN_FILES_PROCESS``,
    ``TOO_MANY_OPEN_FILES_SYSTEM``, ``OUT_OF_MEMORY``, ``NOT_A_DIRECTORY``.

    Args:
        path: Directory to open, as text, bytes or a path-like object.
            Defaults to the current directory.

    Returns:
        DirHandle: Handle bound to the calling thread. Its ``path`` is
        always text.

    Raises:
        DirError: If the directory cannot be opened.
    """
    path = fs_path(path)
    if path == "":
        raise DirError(ErrorKind.NOT_FOUND, path, "open directory")
    try:
        iterator = os.scandir(path)
    except OSError as exc:
        raise from_os_error(exc, "open directory", path) from exc
    logger.debug("Opened directory: %r", path)
    return DirHandle(path, iterator)


def _check_owner(handle: DirHandle, action: str) -> None:
    if handle.owner != threading.get_ident():
        raise DirError(ErrorKind.NOT_OWNER, handle.path, action)


def _type_hint(dir_entry: os.DirEntry[str]) -> FileType:
    # DirEntry answers from d_type when the filesystem reports it. Without
    # d_type, is_symlink() does one lstat and caches it on the entry, so the
    # remaining types are read from that cached result.
    try:
        if dir_entry.is_symlink():
            return FileType.SYMLINK
        if dir_entry.is_dir(follow_symlinks=False):
            return FileType.DIRECTORY
        if dir_entry.is_file(follow_symlinks=False):
            return FileType.REGULAR
        return type_from_mode(dir_entry.stat(follow_symlinks=False).st_mode)
    except OSError:
        logger.debug("No type hint for: %r", dir_entry.path)
    return FileType.UNDETERMINED


def read_raw(
    handle: DirHandle,
    *,
    raw: bool = False,
    hint: bool = False,
) -> RawEntry | None:
    """Read the next raw entry from *handle*.

    Args:
        handle: Open directory handle owned by the calling thread.
        raw: Return undecodable names instead of failing on them.
        hint: Attach the type reported by the directory read, if any.

    Returns:
        RawEntry | None: Next entry, or ``None`` once the directory is
        exhausted. ``.`` and ``..`` are never returned.

    Raises:
        DirError: ``NOT_OWNER`` for reads from another thread,
            ``NAME_NOT_REPRESENTABLE`` for an undecodable name without
            *raw*, or the OS classified kind of a failed read.
        ValueError: If the handle was closed before being exhausted.
    """
    _check_owner(handle, "read directory")
    if handle.exhausted:
        return None
    if handle.closed:
        raise ValueError(f"read from closed directory handle {handle.path!r}")

    while True:
        try:
            dir_entry = next(handle._iterator)
        except StopIteration:
            handle._exhausted = True
            handle.close()
            return None
        except OSError as exc:
            raise from_os_error(exc, "read directory", handle.path) from exc

        name = dir_entry.name
        if name in (".", ".."):
            continue
        if not raw and not is_representable(name):
            raise DirError(
                ErrorKind.NAME_NOT_REPRESENTABLE,
                handle.path,
                "read directory",
                raw_name=os.fsencode(name),
            )
        file_type = _type_hint(dir_entry) if hint else FileType.UNDETERMINED
        return RawEntry(path=dir_entry.path, name=name, hint=file_type)


def readdir(
    handle: DirHandle,
    *,
    with_type: bool = False,
    raw: bool = False,
) -> Entry | None:
    """Read the next entry from *handle*.

    Calling this twice on the same handle returns different entries. Names
    are full paths, starting with the path given to :func:`opendir`.

    Args:
        handle: Open directory handle owned by the calling thread.
        with_type: Attach a :class:`FileType` to the entry, checking the
            filesystem when the read reported no usable type.
        raw: Return undecodable names verbatim as ``bytes`` instead of
            raising ``NAME_NOT_REPRESENTABLE``.

    Returns:
        Entry | None: Next entry, or ``None`` when the directory is
        exhausted.

    Raises:
        DirError: On read or classification failure.
    """
    raw_entry = read_raw(handle, raw=raw, hint=with_type)
    if raw_entry is None:
        return None
    file_type: FileType | None = None
    if with_type:
        file_type = raw_entry.hint
        if file_type is FileType.UNDETERMINED:
            file_type = classify(raw_entry.path)
    return Entry(path=entry_path(raw_entry.path, raw), type=file_type)


def set_controller(handle: DirHandle, controller: threading.Thread | int) -> None:
    """Hand *handle* off to another thread.

    Must be called from the current owner. Afterwards only *controller* may
    read the handle.

    Args:
        handle: Handle to transfer.
        controller: Started thread, or a thread identifier.

    Raises:
        DirError: ``NOT_OWNER`` if called from a thread that does not own
            the handle.
        ValueError: If *controller* is a thread that has not been started.
    """
    _check_owner(handle, "hand off directory")
    ident = controller if isinstance(controller, int) else controller.ident
    if ident is None:
        raise ValueError("cannot hand off to a thread that has not been started")
    handle._owner = ident
    logger.debug("Handed off directory %r to thread %d", handle.path, ident)
