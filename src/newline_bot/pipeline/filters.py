"""Eligibility checks for changed files: ignore globs and text detection."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

BINARY_SAMPLE_SIZE = 8192
# Directories that are never part of the working tree listing.
ALWAYS_EXCLUDED_DIRS = frozenset({".git"})


class SkipReason(str, Enum):
    IGNORED = "ignored"
    BINARY = "binary"
    TERMINATED = "terminated"


@dataclass(frozen=True, slots=True)
class Eligibility:
    """Outcome of filtering a single changed file."""

    path: str
    reason: SkipReason | None = None

    @property
    def eligible(self) -> bool:
        return self.reason is None


def list_candidate_files(root: Path, ignore_patterns: Iterable[str]) -> frozenset[str]:
    """Return repo-relative POSIX paths of every non-ignored file under ``root``.

    Patterns are globs relative to ``root``; a leading ``/`` anchors to
    ``root`` as well. A pattern matching a directory excludes every file
    beneath it.
    """

    root = root.resolve()
    ignored_files: set[Path] = set()
    ignored_dirs: set[Path] = set()
    for pattern in ignore_patterns:
        relative_pattern = pattern.lstrip("/")
        if not relative_pattern:
            continue
        for match in root.glob(relative_pattern):
            if match.is_dir():
                ignored_dirs.add(match.relative_to(root))
            elif match.is_file():
                ignored_files.add(match.relative_to(root))

    return frozenset(
        relative.as_posix()
        for relative in _iter_files(root)
        if relative not in ignored_files and ignored_dirs.isdisjoint(relative.parents)
    )


def _iter_files(root: Path) -> Iterator[Path]:
    """Yield root-relative paths of every file, walking the tree once."""

    for path in root.rglob("*"):
        relative = path.relative_to(root)
        if relative.parts and relative.parts[0] in ALWAYS_EXCLUDED_DIRS:
            continue
        if path.is_file():
            yield relative


def is_binary_content(data: bytes) -> bool:
    """Classify ``data`` by content: NUL bytes or invalid UTF-8 mean binary."""

    if not data:
        return False
    if b"\x00" in data[:BINARY_SAMPLE_SIZE]:
        return True
    try:
        data.decode("utf-8")
    except UnicodeDecodeError:
        return True
    return False


class PathFilter:
    """Decides whether a changed file may be rewritten."""

    def __init__(self, root: Path, ignore_patterns: Iterable[str]) -> None:
        self.root = root.resolve()
        self.ignore_patterns = tuple(ignore_patterns)
        self._candidates = list_candidate_files(self.root, self.ignore_patterns)

    def check(self, filename: str) -> Eligibility:
        if filename not in self._candidates:
            return Eligibility(filename, SkipReason.IGNORED)
        if is_binary_content((self.root / filename).read_bytes()):
            return Eligibility(filename, SkipReason.BINARY)
        return Eligibility(filename)


__all__ = [
    "BINARY_SAMPLE_SIZE",
    "Eligibility",
    "PathFilter",
    "SkipReason",
    "is_binary_content",
    "list_candidate_files",
]
