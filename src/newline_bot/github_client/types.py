"""Domain models for the GitHub repository client."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

REGULAR_FILE_MODE = "100644"
BLOB_TYPE = "blob"


@dataclass(frozen=True, slots=True)
class PullRequestContext:
    """Identifies the pull request a run operates on."""

    owner: str
    repo: str
    pr_number: int
    head_sha: str
    head_ref: str

    def __post_init__(self) -> None:
        if not self.owner.strip():
            raise ValueError("owner cannot be empty")
        if not self.repo.strip():
            raise ValueError("repo cannot be empty")
        if self.pr_number <= 0:
            raise ValueError("pr_number must be positive")
        if not self.head_sha.strip():
            raise ValueError("head_sha cannot be empty")
        if not self.head_ref.strip():
            raise ValueError("head_ref cannot be empty")


@dataclass(frozen=True, slots=True)
class ChangedFileRecord:
    """Single entry of the pull request files listing."""

    filename: str
    status: str

    def __post_init__(self) -> None:
        if not self.filename.strip():
            raise ValueError("filename cannot be empty")


@dataclass(frozen=True, slots=True)
class TreeEntry:
    """Overlay entry sent to the git trees endpoint."""

    path: str
    sha: str
    mode: str = REGULAR_FILE_MODE
    type: str = BLOB_TYPE

    def __post_init__(self) -> None:
        if not self.path or self.path.startswith("/"):
            raise ValueError("tree entry path must be repo-relative")
        if not self.sha.strip():
            raise ValueError("tree entry sha cannot be empty")

    def as_payload(self) -> dict[str, Any]:
        return {"path": self.path, "mode": self.mode, "type": self.type, "sha": self.sha}


@dataclass(frozen=True, slots=True)
class GitIdentity:
    name: str
    email: str

    def as_payload(self) -> dict[str, str]:
        return {"name": self.name, "email": self.email}


class ApiError(Exception):
    """Base class for GitHub API failures. Always fatal to a run."""


class ApiAuthError(ApiError):
    """Authentication/authorization error."""


class ApiNotFoundError(ApiError):
    """Resource does not exist or is not visible to the token."""


class ApiConflictError(ApiError):
    """Request rejected as conflicting, e.g. a non fast-forward ref update."""


class ApiRateLimitError(ApiError):
    """Rate limit exceeded."""


class ApiTimeoutError(ApiError):
    """Network timeout."""


class ApiServerError(ApiError):
    """5xx server error."""


class ApiClientError(ApiError):
    """4xx client-side error not covered by other errors, or a failed request."""


class ApiResponseError(ApiError):
    """Response body is missing a field the client depends on."""


__all__ = [
    "ApiAuthError",
    "ApiClientError",
    "ApiConflictError",
    "ApiError",
    "ApiNotFoundError",
    "ApiRateLimitError",
    "ApiResponseError",
    "ApiServerError",
    "ApiTimeoutError",
    "BLOB_TYPE",
    "ChangedFileRecord",
    "GitIdentity",
    "PullRequestContext",
    "REGULAR_FILE_MODE",
    "TreeEntry",
]
