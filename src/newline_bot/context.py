"""Pull request context resolution from the GitHub Actions event payload."""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from newline_bot.github_client.types import PullRequestContext

HANDLED_EVENT = "pull_request"
HANDLED_ACTIONS = frozenset({"opened", "synchronize"})


class ContextError(Exception):
    """Raised when the run cannot be tied to a pull request."""


def load_event(path: Path | str) -> dict[str, Any]:
    """Read the webhook payload written by the Actions runner."""

    event_path = Path(path)
    try:
        with event_path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
    except (OSError, json.JSONDecodeError) as exc:
        raise ContextError(f"cannot read event payload at {event_path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise ContextError(f"event payload at {event_path} is not an object")
    return payload


def should_handle(event_name: str | None, event: Mapping[str, Any]) -> bool:
    """Only new pushes to a pull request are remediated."""

    return event_name == HANDLED_EVENT and event.get("action") in HANDLED_ACTIONS


def context_from_event(event: Mapping[str, Any]) -> PullRequestContext:
    pull_request = _section(event, "pull_request")
    head = _section(pull_request, "head")
    repository = _section(event, "repository")
    owner = _section(repository, "owner")

    try:
        return PullRequestContext(
            owner=_text(owner, "login"),
            repo=_text(repository, "name"),
            pr_number=int(pull_request.get("number") or 0),
            head_sha=_text(head, "sha"),
            head_ref=_text(head, "ref"),
        )
    except (TypeError, ValueError) as exc:
        raise ContextError(f"event payload has no usable pull request: {exc}") from exc


def _section(payload: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = payload.get(key)
    if not isinstance(value, Mapping):
        raise ContextError(f"event payload is missing '{key}'")
    return value


def _text(payload: Mapping[str, Any], key: str) -> str:
    value = payload.get(key)
    return value if isinstance(value, str) else ""


__all__ = [
    "ContextError",
    "HANDLED_ACTIONS",
    "HANDLED_EVENT",
    "context_from_event",
    "load_event",
    "should_handle",
]
