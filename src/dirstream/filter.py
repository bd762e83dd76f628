"""Entry filtering: fnmatch exclusion and .gitignore matching via pathspec."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator
from fnmatch import fnmatch
from pathlib import Path
from typing import Protocol

from pathspec import GitIgnoreSpec

from dirstream.entry import Entry, FileType

logger = logging.getLogger(__name__)


class EntryFilter(Protocol):
    """Protocol for entry filtering.

    Filters see paths relative to the stream root, ``/``-separated, with a
    trailing ``/`` for entries known to be directories.
    """

    def should_exclude(self, rel_path: str) -> bool: ...


class PatternFilter:
    """Exclude entries where any path component matches a pattern.

    Implements ``-I PATTERN`` exclusion behavior.
    """

    def __init__(self, patterns: list[str] | None = None) -> None:
        self._patterns: list[str] = list(patterns) if patterns else []

    def should_exclude(self, rel_path: str) -> bool:
        parts = [part for part in rel_path.split("/") if part]
        return any(fnmatch(part, pat) for part in parts for pat in self._patterns)


class GitignoreFilter:
    """Exclude entries matched by a compiled ``.gitignore``."""

    def __init__(self, spec: GitIgnoreSpec) -> None:
        self._spec = spec

    @classmethod
    def from_root(cls, root: Path) -> GitignoreFilter | None:
        """Load ``.gitignore`` from *root*.

        Returns:
            A filter when a ``.gitignore`` exists and is readable,
            otherwise ``None``.
        """
        gitignore_path = root / ".gitignore"
        try:
            lines = gitignore_path.read_text(encoding="utf-8").splitlines()
        except OSError:
            logger.debug("Cannot read .gitignore: %s", gitignore_path)
            return None
        return cls(GitIgnoreSpec.from_lines(lines))

    def should_exclude(self, rel_path: str) -> bool:
        return self._spec.match_file(rel_path)


def relative_key(entry: Entry, root: str) -> str:
    """Return the ``/``-separated path of *entry* relative to *root*."""
    rel = os.path.relpath(os.fsdecode(entry.path), root).replace(os.sep, "/")
    if entry.type is FileType.DIRECTORY:
        rel += "/"
    return rel


def filter_entries(
    entries: Iterable[Entry],
    root: str,
    filters: list[EntryFilter],
) -> Iterator[Entry]:
    """Lazily drop entries excluded by any of *filters*.

    Args:
        entries: Entries to filter, typically a stream.
        root: Root the entries were streamed from.
        filters: Active filters. An empty list passes everything.

    Yields:
        Entry: Entries no filter excludes, in input order.
    """
    for entry in entries:
        if filters:
            key = relative_key(entry, root)
            if any(f.should_exclude(key) for f in filters):
                logger.debug("Excluded: %s", key)
                continue
        yield entry
