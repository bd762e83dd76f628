"""dirstream: lazy, memory-bounded directory listing with recursive descent."""

from dirstream.entry import Entry, FileType
from dirstream.errors import DirError, ErrorKind, NotSupportedError, StreamStateError
from dirstream.reader import DirHandle, opendir, readdir, set_controller
from dirstream.stream import Cursor, DirStream, StreamState, stream

__version__ = "0.1.0"

__all__ = [
    "Cursor",
    "DirError",
    "DirHandle",
    "DirStream",
    "DstreamError",
    "Entry",
    "ErrorKind",
    "FileType",
    "NotSupportedError",
    "StreamState",
    "StreamStateError",
    "opendir",
    "readdir",
    "set_controller",
    "stream",
]


class DstreamError(Exception):
    """User-facing CLI error.

    Raised for invalid arguments and for any directory error met while
    streaming. The message is printed to stderr and the process exits with
    code 1.
    """
