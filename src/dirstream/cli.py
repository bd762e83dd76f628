"""CLI entry point for dstream: I/O boundary only."""

from __future__ import annotations

import argparse
import logging
import sys
from itertools import islice
from pathlib import Path
from typing import TextIO

from dirstream import DstreamError
from dirstream.errors import DirError
from dirstream.filter import EntryFilter, GitignoreFilter, PatternFilter, filter_entries
from dirstream.formatter import OutputOptions, write_entries
from dirstream.stream import stream


def build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser.

    Returns:
        argparse.ArgumentParser: Configured parser for the ``dstream`` command.
    """
    parser = argparse.ArgumentParser(
        prog="dstream",
        description="stream directory entries as they are read, without listing first",
    )
    parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help="Directory to stream (default: current directory)",
    )
    parser.add_argument(
        "-r",
        "--recursive",
        action="store_true",
        help="Descend into subdirectories (directories themselves are not listed)",
    )
    parser.add_argument(
        "-t",
        "--type",
        action="store_true",
        dest="with_type",
        help="Print the entry type before each path",
    )
    parser.add_argument(
        "--raw",
        action="store_true",
        help="Keep names that cannot be decoded instead of failing",
    )
    parser.add_argument(
        "-n",
        "--limit",
        type=int,
        default=None,
        help="Stop after this many entries",
    )
    parser.add_argument(
        "-I",
        "--exclude",
        action="append",
        default=[],
        dest="patterns",
        help="Exclude entries with a path component matching pattern (repeatable)",
    )
    parser.add_argument(
        "--gitignore",
        action="store_true",
        help=(
            "Hide entries matched by the root directory's .gitignore. Entries are "
            "filtered after reading, so ignored directories are still traversed "
            "and an unreadable one still fails the run"
        ),
    )
    parser.add_argument(
        "--csv",
        action="store_true",
        dest="csv_mode",
        help="Output as CSV (path[, type])",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=str,
        default=None,
        dest="output_file",
        help="Write output to a file instead of stdout",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log traversal details to stderr",
    )
    return parser


def run_dstream(argv: list[str] | None, out: TextIO) -> int:
    """Run dstream with provided CLI args, writing entries to *out*.

    This is the primary test target for CLI behavior.

    Args:
        argv: Command-line argument list without program name.
        out: Text stream receiving the output.

    Returns:
        int: Number of entries written.

    Raises:
        DstreamError: On any user-facing validation or I/O error.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    return _run_with_args(args, out)


def _validate_options(args: argparse.Namespace) -> None:
    """Validate option values.

    Raises:
        DstreamError: If an option value is invalid.
    """
    if args.limit is not None and args.limit < 1:
        raise DstreamError("--limit must be a positive integer")


def _build_filters(args: argparse.Namespace) -> list[EntryFilter]:
    """Build the active entry filters from CLI options."""
    filters: list[EntryFilter] = []
    if args.patterns:
        filters.append(PatternFilter(args.patterns))
    if args.gitignore:
        gitignore = GitignoreFilter.from_root(Path(args.directory))
        if gitignore is not None:
            filters.append(gitignore)
    return filters


def _run_with_args(args: argparse.Namespace, out: TextIO) -> int:
    """Stream, filter and write entries for parsed arguments.

    The stream is always closed before returning, which closes every
    directory handle still open when ``--limit`` stops early.

    Raises:
        DstreamError: On any user-facing validation or I/O error.
    """
    _validate_options(args)
    filters = _build_filters(args)

    # .gitignore directory patterns need to know which entries are directories
    dir_stream = stream(
        args.directory,
        args.recursive,
        with_type=args.with_type or args.gitignore,
        raw=args.raw,
    )
    output_opts = OutputOptions(csv_mode=args.csv_mode, with_type=args.with_type)

    entries = iter(dir_stream)
    try:
        selected = filter_entries(entries, args.directory, filters)
        if args.limit is not None:
            selected = islice(selected, args.limit)
        return write_entries(selected, out, output_opts)
    except DirError as exc:
        raise DstreamError(str(exc)) from exc
    finally:
        entries.close()


def main() -> None:
    """Run the CLI entry point with process arguments.

    Exits with code 1 on user-facing errors.
    """
    parser = build_parser()
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
        )

    out: TextIO = sys.stdout
    if args.output_file:
        try:
            out = open(args.output_file, "w", encoding="utf-8", newline="")
        except OSError as exc:
            sys.stderr.write(f"dstream: cannot write to '{args.output_file}': {exc}\n")
            sys.exit(1)

    try:
        _run_with_args(args, out)
    except DstreamError as exc:
        sys.stderr.write(f"dstream: {exc}\n")
        sys.exit(1)
    finally:
        if out is not sys.stdout:
            out.close()
