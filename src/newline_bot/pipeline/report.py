"""Markdown report posted on the pull request."""

from __future__ import annotations

from collections.abc import Sequence

from newline_bot.pipeline.fixer import FixResult

FIXED_SUMMARY = "had their final line ending fixed"
MISSING_SUMMARY = "are missing a line break at their end"


def render_report(fixes: Sequence[FixResult], auto_commit: bool) -> str:
    summary = FIXED_SUMMARY if auto_commit else MISSING_SUMMARY
    lines = [f"{len(fixes)} file(s) {summary}:", ""]
    lines.extend(f"- `{fix.path}`" for fix in fixes)
    return "\n".join(lines) + "\n"


__all__ = ["render_report"]
