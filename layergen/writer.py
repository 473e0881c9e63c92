# File: layergen/writer.py
"""
LayerGen - Output Writer (File-System Manager)
===============================================

Responsible for:
    1. Creating artifact folders on demand.
    2. Applying the skip-if-exists policy: an existing file is never
       touched unless overwrite was requested.
    3. Writing content with scoped handle acquisition (``with`` blocks), so
       the handle is released on every exit path.
    4. Keeping a record of what was written and skipped.

Repeated runs with ``overwrite=False`` are non-destructive: the second run
finds every file in place and writes nothing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from layergen.utils import count_lines, ensure_directory, sha256_hex

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("layergen.writer")


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FileRecord:
    """Immutable record of a single written file."""

    path: str
    size_bytes: int
    line_count: int
    sha256: str


@dataclass(frozen=False, slots=True)
class WriteStats:
    """Running totals kept by an ``OutputWriter``."""

    written: int = 0
    skipped: int = 0
    records: List[FileRecord] = field(default_factory=list)
    skipped_paths: List[str] = field(default_factory=list)

    @property
    def total_bytes(self) -> int:
        return sum(r.size_bytes for r in self.records)

    @property
    def total_lines(self) -> int:
        return sum(r.line_count for r in self.records)


# ---------------------------------------------------------------------------
# OutputWriter
# ---------------------------------------------------------------------------


class OutputWriter:
    """
    Writes generated files under an output root.

    Usage::

        writer = OutputWriter(Path("./generated"))
        writer.write(writer.root / "Models" / "User.cs", content)
        print(writer.stats.written, writer.stats.skipped)

    Thread-safety: NOT thread-safe.  Use one writer per output root.
    """

    def __init__(self, root: Path, *, encoding: str = "utf-8") -> None:
        self.root: Path = Path(root)
        self._encoding: str = encoding
        self.stats: WriteStats = WriteStats()

        logger.debug("OutputWriter initialised: root=%s.", self.root)

    def write(self, path: Path, content: str, overwrite: bool = False) -> bool:
        """
        Write *content* to *path* unless the file exists and *overwrite*
        is False.

        Returns True when the file was written, False when it was skipped.
        I/O errors propagate to the caller.
        """
        path = Path(path)
        ensure_directory(path.parent)

        if path.exists() and not overwrite:
            self.stats.skipped += 1
            self.stats.skipped_paths.append(str(path))
            logger.debug("Skipped existing file: %s", path)
            return False

        with open(path, "w", encoding=self._encoding, newline="") as handle:
            handle.write(content)
            handle.flush()

        record: FileRecord = FileRecord(
            path=str(path),
            size_bytes=len(content.encode(self._encoding)),
            line_count=count_lines(content),
            sha256=sha256_hex(content),
        )
        self.stats.records.append(record)
        self.stats.written += 1

        logger.debug(
            "Wrote file: %s (%d bytes, %d lines).",
            path,
            record.size_bytes,
            record.line_count,
        )
        return True

    def __repr__(self) -> str:
        return (
            f"<OutputWriter {self.root}: "
            f"{self.stats.written} written, {self.stats.skipped} skipped>"
        )


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "OutputWriter",
    "WriteStats",
    "FileRecord",
]

logger.debug("layergen.writer loaded.")
