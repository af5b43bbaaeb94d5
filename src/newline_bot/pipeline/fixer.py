"""Detection and repair of a missing final line terminator."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

_LOGGER = logging.getLogger(__name__)


class LineTerminator(str, Enum):
    LF = "\n"
    CR = "\r"
    CRLF = "\r\n"

    @property
    def label(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class FixResult:
    """A file that was missing its final terminator and has been repaired."""

    path: str
    content: str
    terminator: LineTerminator

    def __post_init__(self) -> None:
        if not self.content.endswith(self.terminator.value):
            raise ValueError("content must end with the recorded terminator")


def has_final_terminator(content: str) -> bool:
    return content.endswith(("\n", "\r"))


def infer_terminator(content: str) -> LineTerminator:
    """Infer the terminator style already used by ``content``.

    The first character is never considered a line boundary, so the search
    for ``\\n`` starts at index 1.
    """

    index = content.find("\n", 1)
    if index == -1:
        return LineTerminator.CR if "\r" in content else LineTerminator.LF
    if content[index - 1] == "\r":
        return LineTerminator.CRLF
    return LineTerminator.LF


def fix_content(content: str) -> tuple[str, LineTerminator] | None:
    """Return the repaired content and its terminator, or None if already terminated."""

    if has_final_terminator(content):
        return None
    terminator = infer_terminator(content)
    return content + terminator.value, terminator


class TerminatorFixer:
    """Repairs files in the working copy, one at a time."""

    def __init__(self, root: Path) -> None:
        self.root = root.resolve()

    def fix(self, filename: str) -> FixResult | None:
        """Append the inferred terminator to ``filename`` and persist it.

        Files are decoded and re-encoded as UTF-8 without newline translation,
        so existing bytes are preserved exactly. Returns None when the file
        already ends with a terminator.
        """

        path = self.root / filename
        content = path.read_bytes().decode("utf-8")
        fixed = fix_content(content)
        if fixed is None:
            return None
        new_content, terminator = fixed
        path.write_bytes(new_content.encode("utf-8"))
        _LOGGER.debug("%s: appended %s terminator", filename, terminator.label)
        return FixResult(path=filename, content=new_content, terminator=terminator)


__all__ = [
    "FixResult",
    "LineTerminator",
    "TerminatorFixer",
    "fix_content",
    "has_final_terminator",
    "infer_terminator",
]
