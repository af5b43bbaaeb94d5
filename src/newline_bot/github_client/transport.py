"""Transport abstraction for the GitHub REST client."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from typing import Any, Protocol

import httpx

from newline_bot import __version__

DEFAULT_API_URL = "https://api.github.com"
GITHUB_API_VERSION = "2022-11-28"
DEFAULT_TIMEOUT = httpx.Timeout(30.0, connect=5.0)

_LOGGER = logging.getLogger(__name__)


def log_request(event: str, fields: dict[str, object]) -> None:
    """Request hook that writes one DEBUG line per completed API call."""

    _LOGGER.debug(
        "%s %s %s status=%s request_id=%s duration=%.3fs",
        event,
        fields.get("method"),
        fields.get("path"),
        fields.get("status"),
        fields.get("request_id"),
        fields.get("duration_sec", 0.0),
    )


class GitHubTransport(Protocol):
    """Protocol for JSON requests against the GitHub REST API."""

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json: Mapping[str, Any] | None = None,
    ) -> Any:
        """Send one request and return the decoded JSON body."""


class HttpGitHubTransport:
    """httpx-based transport for the real GitHub REST API."""

    def __init__(
        self,
        token: str,
        *,
        base_url: str = DEFAULT_API_URL,
        timeout: httpx.Timeout | float | None = None,
        client: httpx.AsyncClient | None = None,
        user_agent: str | None = f"newline-bot/{__version__}",
        logger: Callable[[str, dict[str, object]], None] | None = None,
    ) -> None:
        if not token.strip():
            raise ValueError("token cannot be empty")

        self.token = token.strip()
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout or DEFAULT_TIMEOUT
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=self.timeout)
        self._user_agent = user_agent
        self._logger = logger

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json: Mapping[str, Any] | None = None,
    ) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        headers = {
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {self.token}",
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
        }
        if self._user_agent:
            headers["User-Agent"] = self._user_agent

        start = time.perf_counter()
        response = await self._client.request(
            method,
            url,
            params=dict(params) if params else None,
            json=dict(json) if json is not None else None,
            headers=headers,
            timeout=self.timeout,
        )
        response.raise_for_status()
        if self._logger:
            self._logger(
                "request_complete",
                {
                    "method": method,
                    "path": path,
                    "status": response.status_code,
                    "request_id": response.headers.get("x-github-request-id"),
                    "duration_sec": time.perf_counter() - start,
                },
            )
        if not response.content:
            return None
        return response.json()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> HttpGitHubTransport:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


__all__ = [
    "DEFAULT_API_URL",
    "GITHUB_API_VERSION",
    "GitHubTransport",
    "HttpGitHubTransport",
    "log_request",
]
