"""Sequencing of the remediation pipeline and the top-level error boundary."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from newline_bot.config import Config, RuntimeSettings, load_config
from newline_bot.context import ContextError, context_from_event, load_event, should_handle
from newline_bot.github_client.client import RepositoryClient
from newline_bot.github_client.transport import GitHubTransport, HttpGitHubTransport, log_request
from newline_bot.github_client.types import ApiError, PullRequestContext
from newline_bot.pipeline.changes import enumerate_changed_files
from newline_bot.pipeline.commit import CommitBuilder
from newline_bot.pipeline.filters import PathFilter, SkipReason
from newline_bot.pipeline.fixer import FixResult, TerminatorFixer
from newline_bot.pipeline.report import render_report

_LOGGER = logging.getLogger(__name__)


class RunStatus(str, Enum):
    SUCCEEDED = "succeeded"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class PipelineResult:
    fixes: tuple[FixResult, ...]
    report: str
    commit_sha: str | None = None
    skipped: dict[str, SkipReason] = field(default_factory=dict)

    @property
    def fixed_paths(self) -> list[str]:
        return [fix.path for fix in self.fixes]


@dataclass(frozen=True, slots=True)
class RunOutcome:
    """Explicit result of a run, mapped to an exit code by the CLI."""

    status: RunStatus
    fixed_paths: tuple[str, ...] = ()
    report: str | None = None
    commit_sha: str | None = None
    error: Exception | None = None

    @property
    def failed(self) -> bool:
        return self.status is RunStatus.FAILED


async def collect_fixes(
    client: RepositoryClient,
    context: PullRequestContext,
    config: Config,
    root: Path,
) -> tuple[list[FixResult], dict[str, SkipReason]]:
    """Enumerate, filter and fix changed files strictly in listing order."""

    changed = await enumerate_changed_files(client, context)
    path_filter = PathFilter(root, config.ignore_paths)
    fixer = TerminatorFixer(root)

    fixes: list[FixResult] = []
    skipped: dict[str, SkipReason] = {}
    for record in changed:
        verdict = path_filter.check(record.filename)
        if verdict.reason is not None:
            skipped[record.filename] = verdict.reason
            _LOGGER.info("%s is %s. Skipping...", record.filename, _describe(verdict.reason))
            continue
        fix = fixer.fix(record.filename)
        if fix is None:
            skipped[record.filename] = SkipReason.TERMINATED
            _LOGGER.info("%s is not compromised. Skipping...", record.filename)
            continue
        _LOGGER.info("%s is compromised. Fixed with %s.", record.filename, fix.terminator.label)
        fixes.append(fix)
    return fixes, skipped


async def run_pipeline(
    client: RepositoryClient,
    context: PullRequestContext,
    config: Config,
    root: Path,
) -> PipelineResult:
    """Run the remediation for one pull request. Errors propagate."""

    fixes, skipped = await collect_fixes(client, context, config, root)
    report = render_report(fixes, config.auto_commit)
    if not fixes:
        _LOGGER.info("No compromised files found. Skipping...")
        return PipelineResult(fixes=(), report=report, skipped=skipped)

    commit_sha: str | None = None
    if config.auto_commit:
        _LOGGER.info("Committing %d file(s)...", len(fixes))
        commit_sha = await CommitBuilder(client).commit(fixes, context)
    else:
        _LOGGER.info("Auto commit is disabled. Skipping...")

    _LOGGER.info("Leaving comment on PR...")
    await client.create_issue_comment(context.pr_number, report)
    return PipelineResult(fixes=tuple(fixes), report=report, commit_sha=commit_sha, skipped=skipped)


async def run_remediation(
    settings: RuntimeSettings,
    *,
    transport: GitHubTransport | None = None,
) -> RunOutcome:
    """Resolve the pull request, run the pipeline and convert failures to an outcome.

    This is the only place errors are caught: API, context and filesystem
    failures all become a ``FAILED`` outcome carrying the exception.
    """

    try:
        if settings.event_path is None:
            raise ContextError("GITHUB_EVENT_PATH is not set")
        event = load_event(settings.event_path)
        if not should_handle(settings.event_name, event):
            _LOGGER.info("This action is supposed to run for pushes to pull requests only. Skipping...")
            return RunOutcome(status=RunStatus.SKIPPED)
        context = context_from_event(event)
        config = load_config(settings.resolved_config_path)

        if transport is None:
            async with HttpGitHubTransport(
                settings.token, base_url=settings.api_url, logger=log_request
            ) as http_transport:
                result = await run_pipeline(
                    RepositoryClient.for_context(http_transport, context), context, config, settings.workspace
                )
        else:
            result = await run_pipeline(
                RepositoryClient.for_context(transport, context), context, config, settings.workspace
            )
    except (ApiError, ContextError, OSError, UnicodeDecodeError) as exc:
        _LOGGER.error("%s", exc)
        _LOGGER.debug("run failed", exc_info=exc)
        return RunOutcome(status=RunStatus.FAILED, error=exc)

    return RunOutcome(
        status=RunStatus.SUCCEEDED,
        fixed_paths=tuple(result.fixed_paths),
        report=result.report,
        commit_sha=result.commit_sha,
    )


def _describe(reason: SkipReason) -> str:
    if reason is SkipReason.BINARY:
        return "not a text file"
    if reason is SkipReason.IGNORED:
        return "ignored"
    return "already terminated"


__all__ = [
    "PipelineResult",
    "RunOutcome",
    "RunStatus",
    "collect_fixes",
    "run_pipeline",
    "run_remediation",
]
