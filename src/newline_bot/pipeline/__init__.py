"""Remediation pipeline: enumerate, filter, fix, commit, report."""

from __future__ import annotations

from .changes import enumerate_changed_files  # noqa: F401
from .commit import BOT_IDENTITY, COMMIT_MESSAGE, CommitBuilder  # noqa: F401
from .filters import Eligibility, PathFilter, SkipReason, is_binary_content, list_candidate_files  # noqa: F401
from .fixer import FixResult, LineTerminator, TerminatorFixer, fix_content, infer_terminator  # noqa: F401
from .report import render_report  # noqa: F401
from .runner import PipelineResult, RunOutcome, RunStatus, run_pipeline, run_remediation  # noqa: F401
