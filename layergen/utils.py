# File: layergen/utils.py
"""
LayerGen - Utility Functions & Helpers
=======================================
Naming transforms, content metrics and a small profiling timer used
throughout the generation pipeline.

All string-conversion functions are decorated with
``@lru_cache(maxsize=None)``: the same table and column names are converted
once per artifact, so repeated calls are served from the cache.
"""

from __future__ import annotations

import functools
import hashlib
import logging
import re
import time
from pathlib import Path
from typing import List, Optional

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("layergen.utils")

# ---------------------------------------------------------------------------
# Pre-compiled regex patterns (compiled once at module load)
# ---------------------------------------------------------------------------

_SEPARATOR_RE: re.Pattern[str] = re.compile(r"[\s\-]+")
_INVALID_CHARS_RE: re.Pattern[str] = re.compile(r"[^_a-zA-Z0-9]")
# "USER" → "User": an all-caps word keeps only its first capital
_UPPER_RUN_TAIL_RE: re.Pattern[str] = re.compile(r"(?<=[A-Z])[A-Z0-9]+$")
# "2fa" → "2Fa"
_LOWER_AFTER_DIGIT_RE: re.Pattern[str] = re.compile(r"(?<=[0-9])[a-z]")
# "HTTPResponse" → "HttpResponse"
_UPPER_INSIDE_RE: re.Pattern[str] = re.compile(
    r"(?<=[A-Z])[A-Z]+?((?=[A-Z][a-z])|(?=[0-9]))"
)


# ---------------------------------------------------------------------------
# Naming transform
# ---------------------------------------------------------------------------


def _lower(match: re.Match) -> str:
    return match.group(0).lower()


def _upper(match: re.Match) -> str:
    return match.group(0).upper()


@functools.lru_cache(maxsize=None)
def to_pascal_case(name: str) -> str:
    """
    Convert a raw schema identifier to PascalCase.

    Examples:
        >>> to_pascal_case("user_name")
        'UserName'
        >>> to_pascal_case("UserName")
        'UserName'
        >>> to_pascal_case("USER_ID")
        'UserId'
        >>> to_pascal_case("order-item line")
        'OrderItemLine'
        >>> to_pascal_case("")
        ''

    Already-PascalCase input is returned unchanged.
    """
    if not name:
        return ""
    cleaned: str = _INVALID_CHARS_RE.sub("", _SEPARATOR_RE.sub("_", name))
    words: List[str] = []
    for word in cleaned.split("_"):
        if not word:
            continue
        word = word[0].upper() + word[1:]
        word = _UPPER_RUN_TAIL_RE.sub(_lower, word)
        word = _LOWER_AFTER_DIGIT_RE.sub(_upper, word)
        word = _UPPER_INSIDE_RE.sub(_lower, word)
        words.append(word)
    return "".join(words)


def apply_naming(name: str, is_pascal_case: bool) -> str:
    """Apply the naming-case policy: PascalCase when enabled, else unchanged."""
    if is_pascal_case:
        return to_pascal_case(name)
    return name


# ---------------------------------------------------------------------------
# File helpers
# ---------------------------------------------------------------------------


def ensure_directory(path: Path) -> None:
    """Create directory (and parents) if it doesn't exist."""
    path.mkdir(parents=True, exist_ok=True)
    logger.debug("Ensured directory exists: %s", path)


def read_file(path: Path) -> str:
    """Read a file and return its content as a string."""
    return path.read_text(encoding="utf-8")


# ---------------------------------------------------------------------------
# Checksum & metrics
# ---------------------------------------------------------------------------


def sha256_hex(content: str) -> str:
    """Return SHA-256 hex digest of a string."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def count_lines(content: str) -> int:
    """Count the number of lines in a string."""
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
        with Timer("generate tables") as t:
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
        logger.info("Timer [%s]: %.4f seconds", self.label, self.elapsed)

    def __repr__(self) -> str:
        return f"<Timer {self.label}: {self.elapsed:.4f}s>"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "to_pascal_case",
    "apply_naming",
    "ensure_directory",
    "read_file",
    "sha256_hex",
    "count_lines",
    "Timer",
]

logger.debug("layergen.utils loaded — %d public symbols.", len(__all__))
