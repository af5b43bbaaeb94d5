"""GitHub REST client package."""

from __future__ import annotations

from .client import PAGE_SIZE, RepositoryClient  # noqa: F401
from .transport import DEFAULT_API_URL, GitHubTransport, HttpGitHubTransport, log_request  # noqa: F401
from .types import (  # noqa: F401
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
