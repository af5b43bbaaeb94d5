import json
import logging
import pathlib
import sys
from collections.abc import Iterable
from typing import Any

import httpx
import pytest
import pytest_asyncio

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"

# Ensure src/ is importable when running tests without installing the package.
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from newline_bot.github_client import HttpGitHubTransport, PullRequestContext, RepositoryClient  # noqa: E402

OWNER = "octo"
REPO = "widgets"
PR_NUMBER = 7
HEAD_SHA = "head000"
HEAD_TREE = "tree000"
HEAD_REF = "feature/eol"


# ============================================================================
# In-memory GitHub
# ============================================================================


class FakeGitHub:
    """Minimal stateful stand-in for the GitHub REST endpoints the bot uses.

    ``fail`` maps ``"METHOD route"`` (for example ``"POST git/commits"``) to an
    HTTP status returned instead of the normal response.
    """

    def __init__(
        self,
        files: Iterable[str | dict[str, Any]] = (),
        *,
        head_sha: str = HEAD_SHA,
        head_tree: str = HEAD_TREE,
    ) -> None:
        self.files = [f if isinstance(f, dict) else {"filename": f, "status": "modified"} for f in files]
        self.refs: dict[str, str] = {HEAD_REF: head_sha}
        self.commits: dict[str, dict[str, Any]] = {head_sha: {"tree": head_tree, "parents": []}}
        self.blobs: dict[str, dict[str, Any]] = {}
        self.trees: dict[str, dict[str, Any]] = {}
        self.comments: list[str] = []
        self.requests: list[tuple[str, str, dict[str, Any] | None]] = []
        self.fail: dict[str, int] = {}
        self.page_requests: list[int] = []
        self.fail_pages: dict[int, int] = {}

    def set_files(self, names: Iterable[str]) -> None:
        self.files = [{"filename": name, "status": "modified"} for name in names]

    @property
    def prefix(self) -> str:
        return f"/repos/{OWNER}/{REPO}/"

    def routes(self, method: str | None = None) -> list[str]:
        return [route for m, route, _ in self.requests if method is None or m == method]

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        assert path.startswith(self.prefix), path
        route = path[len(self.prefix) :]
        body = json.loads(request.content) if request.content else None
        self.requests.append((request.method, route, body))

        key = f"{request.method} {_route_key(route)}"
        if key in self.fail:
            return httpx.Response(self.fail[key], json={"message": "boom"}, request=request)

        if request.method == "GET" and route == f"pulls/{PR_NUMBER}/files":
            page = int(request.url.params["page"])
            per_page = int(request.url.params["per_page"])
            self.page_requests.append(page)
            if page in self.fail_pages:
                return httpx.Response(self.fail_pages[page], json={"message": "boom"}, request=request)
            chunk = self.files[(page - 1) * per_page : page * per_page]
            return httpx.Response(200, json=chunk, request=request)

        if request.method == "POST" and route == "git/blobs":
            sha = f"blob{len(self.blobs) + 1:03d}"
            self.blobs[sha] = body
            return httpx.Response(201, json={"sha": sha}, request=request)

        if request.method == "GET" and route.startswith("git/commits/"):
            sha = route.rsplit("/", 1)[-1]
            if sha not in self.commits:
                return httpx.Response(404, json={"message": "Not Found"}, request=request)
            return httpx.Response(200, json={"sha": sha, "tree": {"sha": self.commits[sha]["tree"]}}, request=request)

        if request.method == "POST" and route == "git/trees":
            sha = f"tree{len(self.trees) + 1:03d}"
            self.trees[sha] = body
            return httpx.Response(201, json={"sha": sha}, request=request)

        if request.method == "POST" and route == "git/commits":
            sha = f"commit{len(self.commits):03d}"
            self.commits[sha] = body
            return httpx.Response(201, json={"sha": sha}, request=request)

        if request.method == "GET" and route.startswith("git/ref/heads/"):
            branch = route[len("git/ref/heads/") :]
            return httpx.Response(200, json={"object": {"sha": self.refs[branch]}}, request=request)

        if request.method == "PATCH" and route.startswith("git/refs/heads/"):
            branch = route[len("git/refs/heads/") :]
            new_sha = body["sha"]
            parents = self.commits.get(new_sha, {}).get("parents", [])
            if not body.get("force") and self.refs[branch] not in parents:
                return httpx.Response(422, json={"message": "Update is not a fast forward"}, request=request)
            self.refs[branch] = new_sha
            return httpx.Response(200, json={"object": {"sha": new_sha}}, request=request)

        if request.method == "POST" and route == f"issues/{PR_NUMBER}/comments":
            self.comments.append(body["body"])
            return httpx.Response(201, json={"id": len(self.comments)}, request=request)

        return httpx.Response(404, json={"message": "Not Found"}, request=request)


def _route_key(route: str) -> str:
    if route.startswith("git/commits/"):
        return "git/commits/{sha}"
    if route.startswith("git/ref/heads/"):
        return "git/ref"
    if route.startswith("git/refs/heads/"):
        return "git/refs"
    return route


@pytest.fixture(autouse=True)
def _isolate_package_logger():
    """Undo handler, level and propagation changes made by configure_logging."""

    logger = logging.getLogger("newline_bot")
    saved = (list(logger.handlers), logger.level, logger.propagate)
    yield
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handlers, level, propagate = saved
    for handler in handlers:
        logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = propagate


@pytest.fixture
def pr_context() -> PullRequestContext:
    return PullRequestContext(owner=OWNER, repo=REPO, pr_number=PR_NUMBER, head_sha=HEAD_SHA, head_ref=HEAD_REF)


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub()


@pytest_asyncio.fixture
async def github_transport(fake_github: FakeGitHub):
    client = httpx.AsyncClient(transport=httpx.MockTransport(fake_github.handler))
    transport = HttpGitHubTransport(token="test-token", client=client)
    yield transport
    await client.aclose()


@pytest.fixture
def repo_client(github_transport: HttpGitHubTransport) -> RepositoryClient:
    return RepositoryClient(github_transport, OWNER, REPO)


# ============================================================================
# Workspace / event fixtures
# ============================================================================


@pytest.fixture
def workspace(tmp_path: pathlib.Path) -> pathlib.Path:
    root = tmp_path / "repo"
    root.mkdir()
    return root


def write_bytes(root: pathlib.Path, relative: str, data: bytes) -> pathlib.Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    return path


def pull_request_event(action: str = "synchronize") -> dict[str, Any]:
    return {
        "action": action,
        "pull_request": {"number": PR_NUMBER, "head": {"sha": HEAD_SHA, "ref": HEAD_REF}},
        "repository": {"name": REPO, "owner": {"login": OWNER}},
    }


@pytest.fixture
def event_file(tmp_path: pathlib.Path) -> pathlib.Path:
    path = tmp_path / "event.json"
    path.write_text(json.dumps(pull_request_event()), encoding="utf-8")
    return path
