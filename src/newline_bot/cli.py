"""Console entrypoint for newline-bot.

Meant to run as a step of a GitHub Actions workflow triggered by
``pull_request`` events. Inputs come from flags or the Actions environment;
the exit code is the failure signal seen by the runner.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Any

from pydantic import ValidationError

from newline_bot import __version__
from newline_bot.config import LogLevel, load_runtime_settings
from newline_bot.logging import configure_logging
from newline_bot.pipeline.runner import RunOutcome, RunStatus, run_remediation


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="newline-bot",
        description="Restore missing final line endings on pull request files",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
        help="Show version and exit.",
    )
    parser.add_argument("--token", help="GitHub token (defaults to INPUT_GITHUB-TOKEN or GITHUB_TOKEN)")
    parser.add_argument(
        "--config-path",
        dest="config_path",
        help="Repository-relative path of the YAML config (default .github/newline.yml)",
    )
    parser.add_argument("--workspace", help="Checked-out repository root (defaults to GITHUB_WORKSPACE)")
    parser.add_argument(
        "--log-level",
        dest="log_level",
        choices=[e.value for e in LogLevel],
        help="Log level override",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_runtime_settings(_collect_overrides(args))
    except ValidationError as exc:
        print(f"::error::invalid inputs: {_first_error(exc)}", file=sys.stderr)
        return 2

    logger = configure_logging(settings.log_level)
    logger.debug("workspace=%s config=%s", settings.workspace, settings.config_path)

    outcome = asyncio.run(run_remediation(settings))
    return _exit_code(outcome)


def _exit_code(outcome: RunOutcome) -> int:
    if outcome.status is RunStatus.FAILED:
        print(f"::error::{outcome.error}", file=sys.stderr)
        return 1
    return 0


def _collect_overrides(args: argparse.Namespace) -> dict[str, Any]:
    return {
        "token": args.token,
        "config_path": args.config_path,
        "workspace": args.workspace,
        "log_level": args.log_level,
    }


def _first_error(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc)
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first.get('msg', '')}" if location else str(first.get("msg", ""))


if __name__ == "__main__":
    sys.exit(main())
