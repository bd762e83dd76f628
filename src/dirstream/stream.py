"""Lazy, suspendable streaming of directory entries.

:class:`Cursor` is the explicit pull interface over a traversal. It accepts
three signals:

* ``next()`` reads until the next entry (or the end of the traversal),
* ``suspend()`` parks the cursor without touching any handle,
* ``halt()`` stops the traversal and closes every open handle.

:class:`DirStream` wraps a fresh cursor in a generator for each iteration,
so ordinary iteration tools (``for``, ``map``, ``filter``,
``itertools.islice``, ``functools.reduce``) drive it without knowing about
directories.

A traversal that fails with :class:`~dirstream.errors.DirError` ends in the
``ERRORED`` state with its remaining frames still open. Closing them is the
caller's job (``cursor.stack.close()``); neither the cursor nor the
generator does it for them.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Generator
from dataclasses import dataclass
from enum import Enum
from typing import Any

from dirstream.entry import Entry
from dirstream.errors import DirError, NotSupportedError, StreamStateError
from dirstream.reader import PathArg, fs_path
from dirstream.traversal import StreamOptions, TraversalStack

logger = logging.getLogger(__name__)


class StreamState(str, Enum):
    """Lifecycle of a :class:`Cursor`."""

    IDLE = "idle"
    READING = "reading"
    SUSPENDED = "suspended"
    HALTED = "halted"
    DONE = "done"
    ERRORED = "errored"


_TERMINAL_STATES = frozenset({StreamState.HALTED, StreamState.DONE, StreamState.ERRORED})


class StepKind(str, Enum):
    ITEM = "item"
    DONE = "done"
    SUSPENDED = "suspended"
    HALTED = "halted"


@dataclass(frozen=True, slots=True)
class Step:
    """Result of a signal sent to a :class:`Cursor`.

    Attributes:
        kind: What happened.
        entry: Produced entry, for ``ITEM``.
        value: Accumulator handed to ``halt()``, for ``HALTED``.
        resume: Continuation that resumes the cursor, for ``SUSPENDED``.
    """

    kind: StepKind
    entry: Entry | None = None
    value: Any = None
    resume: Callable[[], Cursor] | None = None


class Cursor:
    """Pull-based cursor over one traversal of *path*.

    Constructing a cursor performs no I/O; the root is opened by the first
    ``next()``.
    """

    def __init__(self, path: PathArg, options: StreamOptions | None = None) -> None:
        self._path = fs_path(path)
        self._options = options or StreamOptions()
        self._stack = TraversalStack()
        self._state = StreamState.IDLE

    @property
    def state(self) -> StreamState:
        return self._state

    @property
    def stack(self) -> TraversalStack:
        """Traversal stack, exposed for cleanup after an error."""
        return self._stack

    def next(self) -> Step:
        """Read the next entry.

        Returns:
            Step: ``ITEM`` with the entry, or ``DONE`` once the traversal is
            exhausted (and on every later call).

        Raises:
            DirError: If the traversal fails; the cursor becomes ``ERRORED``.
            StreamStateError: If the cursor is suspended, halted or errored.
        """
        if self._state is StreamState.DONE:
            return Step(StepKind.DONE)
        if self._state is StreamState.SUSPENDED:
            raise StreamStateError("cursor is suspended; resume it before reading")
        if self._state in _TERMINAL_STATES:
            raise StreamStateError(f"cannot read from a {self._state.value} cursor")

        try:
            if self._state is StreamState.IDLE:
                self._transition(StreamState.READING)
                self._stack.open_root(self._path)
            entry = self._stack.advance(self._options)
        except DirError:
            self._transition(StreamState.ERRORED)
            raise

        if entry is None:
            self._transition(StreamState.DONE)
            return Step(StepKind.DONE)
        return Step(StepKind.ITEM, entry=entry)

    def suspend(self) -> Step:
        """Park the cursor with its traversal state intact.

        Returns:
            Step: ``SUSPENDED`` carrying the ``resume`` continuation.

        Raises:
            StreamStateError: Unless the cursor is reading.
        """
        if self._state is not StreamState.READING:
            raise StreamStateError(f"cannot suspend a {self._state.value} cursor")
        self._transition(StreamState.SUSPENDED)
        return Step(StepKind.SUSPENDED, resume=self.resume)

    def resume(self) -> Cursor:
        """Return a suspended cursor to reading."""
        if self._state is not StreamState.SUSPENDED:
            raise StreamStateError(f"cannot resume a {self._state.value} cursor")
        self._transition(StreamState.READING)
        return self

    def halt(self, acc: Any = None) -> Step:
        """Stop the traversal and close every open handle.

        Terminal cursors are left untouched; in particular an ``ERRORED``
        cursor keeps its frames open.

        Args:
            acc: Accumulator to hand back to the consumer.

        Returns:
            Step: ``HALTED`` carrying *acc*.
        """
        if self._state not in _TERMINAL_STATES:
            self._stack.close()
            self._transition(StreamState.HALTED)
        return Step(StepKind.HALTED, value=acc)

    def set_controller(self, controller: threading.Thread | int) -> None:
        """Hand every open handle off to another thread."""
        self._stack.set_controller(controller)

    def _transition(self, state: StreamState) -> None:
        logger.debug("Cursor %r: %s -> %s", self._path, self._state.value, state.value)
        self._state = state


@dataclass(frozen=True, slots=True)
class DirStream:
    """Read-only lazy sequence of the entries under *path*.

    Every iteration opens the directory again. Only iteration is
    supported: ``len()``, ``in`` and indexing would need a full scan and
    raise :class:`~dirstream.errors.NotSupportedError` instead.

    Attributes:
        path: Root directory.
        options: Traversal options.
    """

    path: str
    options: StreamOptions = StreamOptions()

    @property
    def recursive(self) -> bool:
        return self.options.recursive

    def cursor(self) -> Cursor:
        """Return a new, idle cursor over this stream."""
        return Cursor(self.path, self.options)

    def __iter__(self) -> Generator[Entry, None, None]:
        cursor = self.cursor()
        try:
            while True:
                step = cursor.next()
                if step.kind is StepKind.DONE:
                    return
                if step.entry is not None:
                    yield step.entry
        finally:
            cursor.halt()

    def __len__(self) -> int:
        raise NotSupportedError("DirStream does not support len(); iterate it instead")

    def __contains__(self, item: object) -> bool:
        raise NotSupportedError("DirStream does not support membership tests")

    def __getitem__(self, index: object) -> Entry:
        raise NotSupportedError("DirStream does not support indexing or slicing")

    def __bool__(self) -> bool:
        return True


def stream(
    path: PathArg = ".",
    recursive: bool = False,
    *,
    with_type: bool = False,
    raw: bool = False,
) -> DirStream:
    """Return a lazy stream of the entries under *path*.

    No I/O happens until the stream is iterated. Entries are produced in
    whatever order the filesystem returns them.

    Args:
        path: Root directory, as text, bytes or a path-like object. Bytes
            are decoded with the filesystem encoding.
        recursive: Descend into subdirectories. Directory entries are then
            traversed and never produced themselves.
        with_type: Attach a :class:`~dirstream.entry.FileType` to each entry.
        raw: Produce undecodable names verbatim as ``bytes``. Otherwise such
            names raise ``ErrorKind.NAME_NOT_REPRESENTABLE``.

    Returns:
        DirStream: Iterable of :class:`~dirstream.entry.Entry`.
    """
    options = StreamOptions(recursive=recursive, with_type=with_type, raw=raw)
    return DirStream(path=fs_path(path), options=options)
