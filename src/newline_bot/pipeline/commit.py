"""Folds a set of fixes into one commit on the pull request branch."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from newline_bot.github_client.client import RepositoryClient
from newline_bot.github_client.types import GitIdentity, PullRequestContext, TreeEntry
from newline_bot.pipeline.fixer import FixResult

_LOGGER = logging.getLogger(__name__)

BOT_IDENTITY = GitIdentity(name="newline-bot", email="newline-bot@users.noreply.github.com")
COMMIT_MESSAGE = "Fixed final line endings with newline-bot."


class CommitBuilder:
    """Creates blobs, a tree and a commit, then moves the branch ref.

    The ref update is the last request and only happens once every object
    exists. A failure earlier may leave orphaned blobs or trees on the host but
    never a moved branch.
    """

    def __init__(
        self,
        client: RepositoryClient,
        *,
        author: GitIdentity = BOT_IDENTITY,
        message: str = COMMIT_MESSAGE,
    ) -> None:
        self._client = client
        self.author = author
        self.message = message

    async def build_tree_entries(self, fixes: Sequence[FixResult]) -> list[TreeEntry]:
        entries: list[TreeEntry] = []
        for fix in fixes:
            sha = await self._client.create_blob(fix.content, encoding="utf-8")
            _LOGGER.debug("blob %s for %s", sha, fix.path)
            entries.append(TreeEntry(path=fix.path, sha=sha))
        return entries

    async def commit(self, fixes: Sequence[FixResult], context: PullRequestContext) -> str:
        """Commit ``fixes`` on top of the pull request head and return the new sha."""

        if not fixes:
            raise ValueError("no fixes to commit")

        entries = await self.build_tree_entries(fixes)
        base_tree = await self._client.get_commit_tree(context.head_sha)
        tree_sha = await self._client.create_tree(base_tree, entries)
        _LOGGER.debug("tree %s on base %s", tree_sha, base_tree)
        commit_sha = await self._client.create_commit(
            message=self.message,
            tree=tree_sha,
            parents=[context.head_sha],
            author=self.author,
        )
        _LOGGER.debug("commit %s", commit_sha)
        await self._client.update_branch(context.head_ref, commit_sha, force=False)
        _LOGGER.info("Branch %s moved to %s.", context.head_ref, commit_sha)
        return commit_sha


__all__ = ["BOT_IDENTITY", "COMMIT_MESSAGE", "CommitBuilder"]
