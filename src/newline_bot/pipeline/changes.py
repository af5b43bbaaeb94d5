"""Paginated enumeration of the files changed by a pull request."""

from __future__ import annotations

import logging

from newline_bot.github_client.client import PAGE_SIZE, RepositoryClient
from newline_bot.github_client.types import ChangedFileRecord, PullRequestContext

_LOGGER = logging.getLogger(__name__)


async def enumerate_changed_files(
    client: RepositoryClient,
    context: PullRequestContext,
    *,
    page_size: int = PAGE_SIZE,
) -> list[ChangedFileRecord]:
    """Return every changed file of the pull request in listing order.

    Pages are fetched until one comes back shorter than ``page_size``. A file
    listed more than once keeps its first position. Any failure propagates and
    nothing is returned.
    """

    records: list[ChangedFileRecord] = []
    seen: set[str] = set()
    page = 0
    _LOGGER.info("Looking for changed files...")
    while True:
        page += 1
        batch = await client.list_pull_request_files(context.pr_number, page=page, per_page=page_size)
        _LOGGER.info("Page %d: %d file(s)", page, len(batch))
        for record in batch:
            if record.filename in seen:
                continue
            seen.add(record.filename)
            records.append(record)
        if len(batch) < page_size:
            return records


__all__ = ["enumerate_changed_files"]
