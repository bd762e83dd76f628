"""Error taxonomy for directory reading and streaming."""

from __future__ import annotations

import errno
import os
from enum import Enum
from typing import Final


class ErrorKind(str, Enum):
    """Kinds of failure reported by :class:`DirError`."""

    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    TOO_MANY_OPEN_FILES_PROCESS = "too_many_open_files_process"
    TOO_MANY_OPEN_FILES_SYSTEM = "too_many_open_files_system"
    OUT_OF_MEMORY = "out_of_memory"
    NOT_A_DIRECTORY = "not_a_directory"
    NAME_NOT_REPRESENTABLE = "name_not_representable"
    NOT_OWNER = "not_owner"
    OS_FAILURE = "os_failure"


_ERRNO_KINDS: Final[dict[int, ErrorKind]] = {
    errno.ENOENT: ErrorKind.NOT_FOUND,
    errno.EACCES: ErrorKind.PERMISSION_DENIED,
    errno.EMFILE: ErrorKind.TOO_MANY_OPEN_FILES_PROCESS,
    errno.ENFILE: ErrorKind.TOO_MANY_OPEN_FILES_SYSTEM,
    errno.ENOMEM: ErrorKind.OUT_OF_MEMORY,
    errno.ENOTDIR: ErrorKind.NOT_A_DIRECTORY,
}


class DirError(Exception):
    """Failure to open, read or classify a directory entry.

    Attributes:
        kind: Failure classification.
        path: Path involved in the failed action.
        action: Human-readable action that was attempted, e.g.
            ``"open directory"``.
        reason: Underlying ``OSError``, when the failure came from the OS.
        raw_name: Undecodable entry name, for
            ``ErrorKind.NAME_NOT_REPRESENTABLE``.
    """

    def __init__(
        self,
        kind: ErrorKind,
        path: str | bytes,
        action: str = "",
        *,
        reason: OSError | None = None,
        raw_name: bytes | None = None,
    ) -> None:
        self.kind = kind
        self.path = path
        self.action = action
        self.reason = reason
        self.raw_name = raw_name
        super().__init__(self._format())

    @property
    def errno(self) -> int | None:
        """OS error number, when the failure came from the OS."""
        return self.reason.errno if self.reason is not None else None

    def _format(self) -> str:
        if self.kind is ErrorKind.NAME_NOT_REPRESENTABLE:
            detail = f"cannot translate filename {self.raw_name!r}"
        elif self.kind is ErrorKind.NOT_OWNER:
            detail = "not the controlling thread"
        elif self.reason is not None and self.reason.errno is not None:
            detail = os.strerror(self.reason.errno)
        elif self.reason is not None:
            detail = str(self.reason)
        else:
            detail = self.kind.value.replace("_", " ")
        return f"could not {self.action} {self.path!r}: {detail}"


def from_os_error(exc: OSError, action: str, path: str | bytes) -> DirError:
    """Classify an ``OSError`` raised by the OS into a :class:`DirError`.

    Args:
        exc: Error raised by ``os.scandir``, ``os.lstat`` or a directory read.
        action: Action that was attempted.
        path: Path involved.

    Returns:
        DirError: Error with a kind derived from ``exc.errno``; unknown
        numbers map to ``ErrorKind.OS_FAILURE``.
    """
    kind = _ERRNO_KINDS.get(exc.errno or 0, ErrorKind.OS_FAILURE)
    return DirError(kind, path, action, reason=exc)


class NotSupportedError(TypeError):
    """Operation that would require materializing a whole stream."""


class StreamStateError(RuntimeError):
    """Signal issued to a cursor in a state that does not accept it."""
