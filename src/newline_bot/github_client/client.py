"""GitHub repository client used by the remediation pipeline."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

import httpx

from newline_bot.github_client.transport import GitHubTransport
from newline_bot.github_client.types import (
    ApiAuthError,
    ApiClientError,
    ApiConflictError,
    ApiError,
    ApiNotFoundError,
    ApiRateLimitError,
    ApiResponseError,
    ApiServerError,
    ApiTimeoutError,
    ChangedFileRecord,
    GitIdentity,
    PullRequestContext,
    TreeEntry,
)

PAGE_SIZE = 100


class RepositoryClient:
    """Async client bound to a single repository.

    Every method performs exactly one request; nothing is retried. Transport
    and HTTP failures are re-raised as :class:`ApiError` subclasses.
    """

    def __init__(self, transport: GitHubTransport, owner: str, repo: str) -> None:
        self._transport = transport
        self.owner = owner
        self.repo = repo

    @classmethod
    def for_context(cls, transport: GitHubTransport, context: PullRequestContext) -> RepositoryClient:
        return cls(transport, context.owner, context.repo)

    async def list_pull_request_files(
        self, pr_number: int, *, page: int, per_page: int = PAGE_SIZE
    ) -> list[ChangedFileRecord]:
        rows = await self._call(
            "GET",
            f"pulls/{pr_number}/files",
            params={"per_page": per_page, "page": page},
        )
        if not isinstance(rows, list):
            raise ApiResponseError(f"expected a list of files for page {page}")
        records: list[ChangedFileRecord] = []
        for row in rows:
            filename = _require_str(row, "filename")
            status = row.get("status") if isinstance(row, dict) else None
            records.append(ChangedFileRecord(filename=filename, status=status or "modified"))
        return records

    async def create_blob(self, content: str, *, encoding: str = "utf-8") -> str:
        data = await self._call("POST", "git/blobs", json={"content": content, "encoding": encoding})
        return _require_str(data, "sha")

    async def get_commit_tree(self, commit_sha: str) -> str:
        data = await self._call("GET", f"git/commits/{commit_sha}")
        tree = data.get("tree") if isinstance(data, dict) else None
        return _require_str(tree, "sha")

    async def create_tree(self, base_tree: str, entries: Sequence[TreeEntry]) -> str:
        payload = {"base_tree": base_tree, "tree": [entry.as_payload() for entry in entries]}
        data = await self._call("POST", "git/trees", json=payload)
        return _require_str(data, "sha")

    async def create_commit(
        self,
        *,
        message: str,
        tree: str,
        parents: Sequence[str],
        author: GitIdentity,
    ) -> str:
        payload = {
            "message": message,
            "tree": tree,
            "parents": list(parents),
            "author": author.as_payload(),
        }
        data = await self._call("POST", "git/commits", json=payload)
        return _require_str(data, "sha")

    async def get_branch_head(self, branch: str) -> str:
        data = await self._call("GET", f"git/ref/heads/{branch}")
        obj = data.get("object") if isinstance(data, dict) else None
        return _require_str(obj, "sha")

    async def update_branch(self, branch: str, sha: str, *, force: bool = False) -> str:
        data = await self._call("PATCH", f"git/refs/heads/{branch}", json={"sha": sha, "force": force})
        obj = data.get("object") if isinstance(data, dict) else None
        return _require_str(obj, "sha")

    async def create_issue_comment(self, issue_number: int, body: str) -> int | None:
        data = await self._call("POST", f"issues/{issue_number}/comments", json={"body": body})
        comment_id = data.get("id") if isinstance(data, dict) else None
        return comment_id if isinstance(comment_id, int) else None

    async def _call(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json: Mapping[str, Any] | None = None,
    ) -> Any:
        full_path = f"repos/{self.owner}/{self.repo}/{path}"
        try:
            return await self._transport.request(method, full_path, params=params, json=json)
        except httpx.TimeoutException as exc:
            raise ApiTimeoutError(f"{method} {full_path} timed out") from exc
        except httpx.HTTPStatusError as exc:
            raise _map_status_error(exc, f"{method} {full_path}") from exc
        except httpx.RequestError as exc:
            raise ApiClientError(f"{method} {full_path} failed: {exc}") from exc
        except ValueError as exc:
            raise ApiResponseError(f"{method} {full_path} returned a non-JSON body") from exc


def _require_str(payload: Any, key: str) -> str:
    value = payload.get(key) if isinstance(payload, dict) else None
    if not isinstance(value, str) or not value:
        raise ApiResponseError(f"response is missing '{key}'")
    return value


def _map_status_error(exc: httpx.HTTPStatusError, endpoint: str) -> ApiError:
    status = exc.response.status_code
    body = exc.response.text if exc.response is not None else ""
    suffix = f" body={body}" if body else ""
    if status in (401, 403):
        if exc.response.headers.get("x-ratelimit-remaining") == "0":
            return ApiRateLimitError(f"{endpoint} rate limited{suffix}")
        return ApiAuthError(f"{endpoint} auth failed with status {status}{suffix}")
    if status == 404:
        return ApiNotFoundError(f"{endpoint} not found{suffix}")
    if status in (409, 422):
        return ApiConflictError(f"{endpoint} rejected with status {status}{suffix}")
    if status == 429:
        return ApiRateLimitError(f"{endpoint} rate limited{suffix}")
    if status >= 500:
        return ApiServerError(f"{endpoint} server error {status}{suffix}")
    return ApiClientError(f"{endpoint} failed with status {status}{suffix}")


__all__ = ["PAGE_SIZE", "RepositoryClient", "_map_status_error"]
