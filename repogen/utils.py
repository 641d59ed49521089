# File: repogen/utils.py
"""
repogen - Utility Functions & Helpers
=======================================
File I/O, source discovery and timing helpers used throughout the
generation pipeline.

- File writes go through a temporary file in the destination directory and
  an atomic rename, so a crash never leaves a half-written repository.
- Destination directories are never created implicitly.
- No external dependencies beyond the Python standard library.
"""

from __future__ import annotations

import hashlib
import logging
import os
import tempfile
import time
from pathlib import Path
from typing import List, Optional

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("repogen.utils")

GO_SOURCE_SUFFIX: str = ".go"
GO_TEST_SUFFIX: str = "_test.go"


# ---------------------------------------------------------------------------
# Source discovery
# ---------------------------------------------------------------------------


def discover_go_files(path: Path) -> List[Path]:
    """
    Resolve the input argument into the Go files to process.

    A file is returned as-is.  A directory contributes its ``*.go`` files
    (non-recursive, sorted, ``_test.go`` excluded).

    Raises:
        FileNotFoundError: If *path* does not exist.
    """
    if not path.exists():
        raise FileNotFoundError(f"Input path not found: {path}")

    if path.is_file():
        return [path]

    files: List[Path] = sorted(
        p
        for p in path.iterdir()
        if p.is_file()
        and p.name.endswith(GO_SOURCE_SUFFIX)
        and not p.name.endswith(GO_TEST_SUFFIX)
    )
    logger.debug("Discovered %d Go file(s) in %s", len(files), path)
    return files


# ---------------------------------------------------------------------------
# File I/O helpers
# ---------------------------------------------------------------------------


def write_file(path: Path, content: str, atomic: bool = True) -> int:
    """
    Write *content* to *path*, replacing any existing file.

    The parent directory must already exist.  When *atomic* is True, writes
    to a temporary file first then renames it over the target.

    Returns the number of bytes written.

    Raises:
        FileNotFoundError: If the parent directory does not exist.
    """
    if not path.parent.is_dir():
        raise FileNotFoundError(f"Destination directory does not exist: {path.parent}")

    encoded: bytes = content.encode("utf-8")

    if atomic:
        fd: int
        tmp_path: str
        fd, tmp_path = tempfile.mkstemp(
            dir=str(path.parent),
            prefix=f".{path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(encoded)
            os.chmod(tmp_path, 0o644)
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
    else:
        path.write_bytes(encoded)

    logger.debug("Wrote %d bytes to %s", len(encoded), path)
    return len(encoded)


# ---------------------------------------------------------------------------
# Metrics
# ---------------------------------------------------------------------------


def sha256_hex(content: str) -> str:
    """Return SHA-256 hex digest of a string. O(n)."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def count_lines(content: str) -> int:
    """Count the number of lines in a string. O(n)."""
    if not content:
        return 0
    return content.count("\n") + (1 if not content.endswith("\n") else 0)


# ---------------------------------------------------------------------------
# Timer context manager
# ---------------------------------------------------------------------------


class Timer:
    """
    Simple context-manager timer for profiling generation steps.

    Usage:
        with Timer("parse") as t:
            ...
        print(t.elapsed)
    """

    __slots__ = ("label", "start_time", "end_time", "elapsed")

    def __init__(self, label: str = "operation") -> None:
        self.label: str = label
        self.start_time: float = 0.0
        self.end_time: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[object],
    ) -> None:
        self.end_time = time.perf_counter()
        self.elapsed = self.end_time - self.start_time
        logger.debug("Timer [%s]: %.4f seconds", self.label, self.elapsed)

    def __repr__(self) -> str:
        return f"<Timer {self.label}: {self.elapsed:.4f}s>"


__all__: List[str] = [
    "discover_go_files",
    "write_file",
    "count_lines",
    "sha256_hex",
    "Timer",
]
