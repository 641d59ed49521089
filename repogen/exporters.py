# File: repogen/exporters.py
"""
repogen - Repository File Exporter
====================================
Writes rendered ``RepositoryFile`` values to
``<output_root>/<repository_dir>/<Type><file_suffix>``.

Key features:
    - Atomic writes via temp file + rename (no partial files on crash).
    - Existing files are overwritten; the destination directory is never
      created, so a missing ``repository/`` directory is an ``ExportError``.
    - Dry-run mode renders and records files without touching the disk.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List

from repogen.exceptions import ExportError
from repogen.templates import RepositoryFile
from repogen.utils import count_lines, sha256_hex, write_file

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("repogen.exporters")


@dataclass(frozen=True, slots=True)
class FileRecord:
    """Immutable record of a single exported file."""

    structure: str
    relative_path: str
    absolute_path: str
    size_bytes: int
    line_count: int
    sha256: str
    written: bool


class RepositoryExporter:
    """
    Writes repository files under one output root.

    Usage::

        exporter = RepositoryExporter(Path("."))
        record = exporter.export(repo_file)
    """

    def __init__(
        self,
        output_root: Path,
        *,
        atomic_writes: bool = True,
        dry_run: bool = False,
    ) -> None:
        self._output_root: Path = output_root
        self._atomic_writes: bool = atomic_writes
        self._dry_run: bool = dry_run

        logger.debug(
            "RepositoryExporter initialised: output_root=%s, atomic=%s, dry_run=%s.",
            output_root,
            atomic_writes,
            dry_run,
        )

    @property
    def output_root(self) -> Path:
        return self._output_root

    def destination_for(self, repo_file: RepositoryFile) -> Path:
        try:
            return (self._output_root / repo_file.relative_path).resolve()
        except (OSError, RuntimeError) as exc:
            raise ExportError(
                f"Cannot resolve destination for {repo_file.relative_path}: {exc}"
            ) from exc

    def export(self, repo_file: RepositoryFile) -> FileRecord:
        """
        Render *repo_file* and write it to its destination.

        Raises:
            ExportError: If the destination directory is missing or the
                         write fails.
        """
        destination: Path = self.destination_for(repo_file)
        content: str = repo_file.render()
        size_bytes: int = len(content.encode("utf-8"))

        if self._dry_run:
            logger.info("Dry-run: would write %s (%d bytes).", destination, size_bytes)
        else:
            try:
                write_file(destination, content, atomic=self._atomic_writes)
            except OSError as exc:
                raise ExportError(
                    f"Failed to write {destination}: {type(exc).__name__}: {exc}"
                ) from exc
            logger.info("Wrote %s (%d bytes).", destination, size_bytes)

        return FileRecord(
            structure=repo_file.structure.name,
            relative_path=repo_file.relative_path,
            absolute_path=str(destination),
            size_bytes=size_bytes,
            line_count=count_lines(content),
            sha256=sha256_hex(content),
            written=not self._dry_run,
        )


__all__: List[str] = [
    "FileRecord",
    "RepositoryExporter",
]
