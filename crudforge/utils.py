# File: crudforge/utils.py
"""
crudforge - Utility Functions & Helpers
=========================================
Naming transformations, file I/O and small metrics helpers used throughout
the generation pipeline.

- String conversions are ``@lru_cache``'d: the same model names are
  converted over and over by every generator.
- File writes go through a temporary file and an atomic rename.
"""

from __future__ import annotations

import functools
import hashlib
import logging
import os
import re
import shutil
import tempfile
import time
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("crudforge.utils")

# ---------------------------------------------------------------------------
# Pre-compiled regex patterns
# ---------------------------------------------------------------------------

_NON_ALPHANUM_RE: re.Pattern[str] = re.compile(r"[^a-zA-Z0-9]")
_SPLIT_WORDS_RE: re.Pattern[str] = re.compile(
    r"[A-Z]?[a-z]+|[A-Z]+(?=[A-Z][a-z]|\d|\b)|[A-Z]|\d+"
)

_IRREGULAR_PLURALS: Dict[str, str] = {
    "person": "people",
    "child": "children",
    "man": "men",
    "woman": "women",
    "mouse": "mice",
    "datum": "data",
    "index": "indices",
    "matrix": "matrices",
    "vertex": "vertices",
    "axis": "axes",
    "analysis": "analyses",
    "status": "statuses",
    "address": "addresses",
}


# ---------------------------------------------------------------------------
# Cached string transformation functions
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=None)
def _extract_words(name: str) -> Tuple[str, ...]:
    """Split any casing style into lowercase words."""
    cleaned: str = _NON_ALPHANUM_RE.sub(" ", name)
    words: List[str] = _SPLIT_WORDS_RE.findall(cleaned)
    return tuple(w.lower() for w in words if w)


@functools.lru_cache(maxsize=None)
def to_kebab_case(name: str) -> str:
    """
    Convert any string to kebab-case (used in URL paths).

        >>> to_kebab_case("BlogPost")
        'blog-post'
    """
    if not name:
        return ""
    return "-".join(_extract_words(name))


@functools.lru_cache(maxsize=None)
def lower_first(name: str) -> str:
    """``BlogPost`` -> ``blogPost``; the casing of the Prisma client delegate."""
    if not name:
        return ""
    return name[0].lower() + name[1:]


@functools.lru_cache(maxsize=None)
def to_plural(name: str) -> str:
    """
    Naive English pluralisation sufficient for handler names.

        >>> to_plural("Post")
        'Posts'
        >>> to_plural("Category")
        'Categories'
        >>> to_plural("Address")
        'Addresses'
    """
    if not name:
        return ""

    lower: str = name.lower()
    for singular, plural in _IRREGULAR_PLURALS.items():
        if lower.endswith(singular):
            stem: str = name[: len(name) - len(singular)]
            tail: str = name[len(name) - len(singular):]
            # Only whole words: "BlogPerson" yes, "Human" no.
            if stem and not tail[0].isupper():
                continue
            replacement: str = plural
            if tail[0].isupper():
                replacement = plural[0].upper() + plural[1:]
            return stem + replacement

    if lower.endswith(("sh", "ch", "x", "z", "ss")):
        return name + "es"
    if lower.endswith("y") and len(name) > 1 and lower[-2] not in "aeiou":
        return name[:-1] + "ies"
    if lower.endswith("s"):
        return name + "es"
    return name + "s"


# ---------------------------------------------------------------------------
# Code formatting helpers
# ---------------------------------------------------------------------------


def indent_lines(lines: Sequence[str], level: int = 1, size: int = 2) -> List[str]:
    """Indent a list of lines, leaving blank lines untouched."""
    prefix: str = " " * (level * size)
    return [prefix + line if line.strip() else line for line in lines]


def ts_string(value: str) -> str:
    """Single-quoted TypeScript string literal."""
    escaped: str = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


# ---------------------------------------------------------------------------
# File I/O helpers
# ---------------------------------------------------------------------------


def ensure_directory(path: Path) -> None:
    """Create directory (and parents) if it doesn't exist."""
    path.mkdir(parents=True, exist_ok=True)
    logger.debug("Ensured directory exists: %s", path)


def write_file(path: Path, content: str, atomic: bool = True) -> int:
    """
    Write *content* to *path*.

    When *atomic* is True the content goes to a temporary file in the same
    directory first and is then renamed over the target, so readers never
    observe a half-written file.

    Returns the number of bytes written.
    """
    ensure_directory(path.parent)

    encoded: bytes = content.encode("utf-8")
    byte_count: int = len(encoded)

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
            os.replace(tmp_path, str(path))
        except OSError:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
    else:
        path.write_bytes(encoded)

    logger.debug("Wrote %d bytes to %s", byte_count, path)
    return byte_count


def clean_directory(path: Path, keep_git: bool = True) -> None:
    """
    Remove all contents of a directory without removing the directory itself.

    If *keep_git* is True, ``.git`` and ``.gitignore`` are preserved.
    """
    if not path.exists():
        return

    for item in path.iterdir():
        if keep_git and item.name in {".git", ".gitignore"}:
            continue
        if item.is_dir():
            shutil.rmtree(item)
        else:
            item.unlink()

    logger.debug("Cleaned directory: %s (keep_git=%s)", path, keep_git)


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
    Context-manager timer for profiling generation steps.

    Usage:
        with Timer("generate Post") as t:
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
    "to_kebab_case",
    "lower_first",
    "to_plural",
    "indent_lines",
    "ts_string",
    "ensure_directory",
    "write_file",
    "clean_directory",
    "sha256_hex",
    "count_lines",
    "Timer",
]

logger.debug("crudforge.utils loaded: %d public symbols.", len(__all__))
