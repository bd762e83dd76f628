"""Streaming output writers for dstream: plain lines or CSV."""

from __future__ import annotations

import csv
import sys
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TextIO

from dirstream.entry import Entry


@dataclass(frozen=True, slots=True)
class OutputOptions:
    """Options controlling how entries are written.

    Attributes:
        csv_mode: Write CSV with a header row instead of plain lines.
        with_type: Include the entry type (``type<TAB>path`` in line mode,
            a ``type`` column in CSV mode).
    """

    csv_mode: bool = False
    with_type: bool = False


def render_path(path: str | bytes) -> str:
    """Return a printable form of *path*.

    Undecodable ``bytes`` paths are rendered with backslash escapes.
    """
    if isinstance(path, bytes):
        return path.decode(sys.getfilesystemencoding(), "backslashreplace")
    return path


def _render_type(entry: Entry) -> str:
    return entry.type.value if entry.type is not None else ""


def write_entries(
    entries: Iterable[Entry],
    out: TextIO,
    options: OutputOptions | None = None,
) -> int:
    """Write *entries* to *out* as they arrive.

    Each entry is written before the next one is pulled, so output starts
    immediately even for huge directories.

    Args:
        entries: Entries to write.
        out: Text stream to write to.
        options: Output options. Defaults to ``OutputOptions()``.

    Returns:
        int: Number of entries written.
    """
    opts = options or OutputOptions()
    count = 0

    if opts.csv_mode:
        writer = csv.writer(out, lineterminator="\n")
        writer.writerow(["path", "type"] if opts.with_type else ["path"])
        for entry in entries:
            row = [render_path(entry.path)]
            if opts.with_type:
                row.append(_render_type(entry))
            writer.writerow(row)
            count += 1
        return count

    for entry in entries:
        if opts.with_type:
            out.write(f"{_render_type(entry)}\t{render_path(entry.path)}\n")
        else:
            out.write(f"{render_path(entry.path)}\n")
        count += 1
    return count
