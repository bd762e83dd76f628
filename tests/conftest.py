"""Shared fixtures for dirstream tests."""

from __future__ import annotations

import os
import sys
from collections.abc import Callable
from pathlib import Path

import pytest


@pytest.fixture
def sample_tree(tmp_path: Path) -> Path:
    """Create the smallest tree with one level of nesting.

    Structure::

        root/
        ├── a.txt
        └── b/
            └── c.txt
    """
    (tmp_path / "a.txt").write_text("a")
    (tmp_path / "b").mkdir()
    (tmp_path / "b" / "c.txt").write_text("c")
    return tmp_path


@pytest.fixture
def nested_tree(tmp_path: Path) -> Path:
    """Create a deeper test directory tree.

    Structure::

        root/
        ├── README.md
        ├── docs/
        │   └── guide.md
        ├── empty/
        └── src/
            ├── api/
            │   ├── auth.py
            │   └── user.py
            └── models/
                └── user.py
    """
    (tmp_path / "README.md").write_text("readme")
    (tmp_path / "docs").mkdir()
    (tmp_path / "docs" / "guide.md").write_text("guide")
    (tmp_path / "empty").mkdir()
    (tmp_path / "src" / "api").mkdir(parents=True)
    (tmp_path / "src" / "api" / "auth.py").write_text("auth")
    (tmp_path / "src" / "api" / "user.py").write_text("user")
    (tmp_path / "src" / "models").mkdir()
    (tmp_path / "src" / "models" / "user.py").write_text("user")
    return tmp_path


NESTED_TREE_FILES = [
    "README.md",
    "docs/guide.md",
    "src/api/auth.py",
    "src/api/user.py",
    "src/models/user.py",
]


@pytest.fixture
def deep_tree(tmp_path: Path) -> Path:
    """Create a single chain of directories holding two files at the bottom.

    Structure::

        root/
        └── deep/
            └── a/
                └── b/
                    ├── one.txt
                    └── two.txt
    """
    bottom = tmp_path / "deep" / "a" / "b"
    bottom.mkdir(parents=True)
    (bottom / "one.txt").write_text("1")
    (bottom / "two.txt").write_text("2")
    return tmp_path


@pytest.fixture
def noisy_tree(tmp_path: Path) -> Path:
    """Tree with noise directories (node_modules, __pycache__, etc.).

    Structure::

        root/
        ├── node_modules/
        │   └── pkg/
        │       └── index.js
        ├── src/
        │   ├── app.py
        │   └── __pycache__/
        │       └── app.cpython-313.pyc
        ├── .venv/
        │   └── bin/
        │       └── activate
        └── README.md
    """
    (tmp_path / "node_modules" / "pkg").mkdir(parents=True)
    (tmp_path / "node_modules" / "pkg" / "index.js").write_text("js")
    (tmp_path / "src" / "__pycache__").mkdir(parents=True)
    (tmp_path / "src" / "app.py").write_text("app")
    (tmp_path / "src" / "__pycache__" / "app.cpython-313.pyc").write_bytes(b"\x00")
    (tmp_path / ".venv" / "bin").mkdir(parents=True)
    (tmp_path / ".venv" / "bin" / "activate").write_text("activate")
    (tmp_path / "README.md").write_text("readme")
    return tmp_path


@pytest.fixture
def gitignore_tree(tmp_path: Path) -> Path:
    """Tree with .gitignore for gitignore-integration testing.

    Structure::

        root/
        ├── .gitignore          (*.pyc, node_modules/, dist/)
        ├── dist/
        │   └── bundle.js
        ├── node_modules/
        │   └── pkg/
        │       └── index.js
        ├── src/
        │   ├── app.py
        │   └── app.pyc
        └── README.md
    """
    (tmp_path / ".gitignore").write_text("*.pyc\nnode_modules/\ndist/\n")
    (tmp_path / "dist").mkdir()
    (tmp_path / "dist" / "bundle.js").write_text("bundle")
    (tmp_path / "node_modules" / "pkg").mkdir(parents=True)
    (tmp_path / "node_modules" / "pkg" / "index.js").write_text("js")
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "app.py").write_text("app")
    (tmp_path / "src" / "app.pyc").write_bytes(b"\x00")
    (tmp_path / "README.md").write_text("readme")
    return tmp_path


UNDECODABLE_NAME = b"bad\xff.txt"


@pytest.fixture
def undecodable_dir(tmp_path: Path) -> Path:
    """Directory holding ``good.txt`` and a file whose name is not UTF-8."""
    if sys.platform != "linux" or sys.getfilesystemencoding().lower() != "utf-8":
        pytest.skip("needs a Linux filesystem with UTF-8 filename encoding")
    with open(os.path.join(os.fsencode(tmp_path), UNDECODABLE_NAME), "wb") as fh:
        fh.write(b"x")
    (tmp_path / "good.txt").write_text("good")
    return tmp_path


@pytest.fixture
def open_fd_count() -> Callable[[], int]:
    """Return a callable counting this process's open file descriptors."""
    if not os.path.isdir("/proc/self/fd"):
        pytest.skip("needs /proc/self/fd")

    def _count() -> int:
        return len(os.listdir("/proc/self/fd"))

    return _count


def make_files(root: Path, count: int) -> set[str]:
    """Create *count* files directly under *root* and return their paths."""
    paths: set[str] = set()
    for i in range(count):
        path = root / f"file_{i:03d}.txt"
        path.write_text(str(i))
        paths.add(str(path))
    return paths
