"""Depth-first traversal over an explicit stack of open directory frames."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from dirstream.entry import Entry, FileType
from dirstream.errors import StreamStateError
from dirstream.reader import (
    DirHandle,
    PathArg,
    entry_path,
    fs_path,
    opendir,
    read_raw,
    set_controller,
)
from dirstream.resolver import classify

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StreamOptions:
    """Options controlling what a traversal produces.

    Attributes:
        recursive: Descend into subdirectories. Directory entries are then
            traversed instead of produced.
        with_type: Attach a :class:`FileType` to every entry.
        raw: Produce undecodable names verbatim instead of failing.
    """

    recursive: bool = False
    with_type: bool = False
    raw: bool = False


@dataclass(frozen=True, slots=True)
class Frame:
    """An open directory handle and the path it was opened from."""

    handle: DirHandle
    path: str


class TraversalStack:
    """Ordered stack of open frames; the top frame is the one being read.

    Frames are pushed when descending and popped (closing their handle) when
    exhausted, so handles are always closed in reverse opening order.
    """

    def __init__(self) -> None:
        self._frames: list[Frame] = []

    def __len__(self) -> int:
        return len(self._frames)

    @property
    def frames(self) -> tuple[Frame, ...]:
        """Open frames, bottom (root) first."""
        return tuple(self._frames)

    def open_root(self, path: PathArg) -> Frame:
        """Open *path* as the sole frame of an empty stack.

        Raises:
            DirError: If the directory cannot be opened.
            StreamStateError: If the stack already holds frames.
        """
        if self._frames:
            raise StreamStateError("traversal root is already open")
        return self._push(fs_path(path))

    def advance(self, options: StreamOptions) -> Entry | None:
        """Read until the next entry to produce, or until the stack is empty.

        Args:
            options: What to produce and whether to descend.

        Returns:
            Entry | None: Next entry, or ``None`` once every frame is
            exhausted and the stack is empty.

        Raises:
            DirError: If reading, opening or classifying fails. The frames
                still on the stack are left open.
        """
        need_type = options.with_type or options.recursive
        while self._frames:
            top = self._frames[-1]
            raw_entry = read_raw(top.handle, raw=options.raw, hint=need_type)
            if raw_entry is None:
                self._pop()
                continue

            file_type = raw_entry.hint
            if need_type and file_type is FileType.UNDETERMINED:
                file_type = classify(raw_entry.path)

            if options.recursive and file_type is FileType.DIRECTORY:
                self._push(raw_entry.path)
                continue

            return Entry(
                path=entry_path(raw_entry.path, options.raw),
                type=file_type if options.with_type else None,
            )
        return None

    def close(self) -> None:
        """Close every open frame, top first."""
        while self._frames:
            self._pop()

    def set_controller(self, controller: threading.Thread | int) -> None:
        """Hand every open frame off to *controller*."""
        for frame in self._frames:
            set_controller(frame.handle, controller)

    def _push(self, path: str) -> Frame:
        frame = Frame(handle=opendir(path), path=path)
        self._frames.append(frame)
        logger.debug("Pushed frame %r (depth %d)", path, len(self._frames))
        return frame

    def _pop(self) -> None:
        frame = self._frames.pop()
        frame.handle.close()
        logger.debug("Popped frame %r (depth %d)", frame.path, len(self._frames))
