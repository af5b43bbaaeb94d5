import pytest

from newline_bot.github_client import ApiServerError
from newline_bot.pipeline.changes import enumerate_changed_files


@pytest.mark.asyncio
async def test_full_page_then_empty_page(fake_github, repo_client, pr_context) -> None:
    fake_github.set_files(f"file{i}.txt" for i in range(100))

    records = await enumerate_changed_files(repo_client, pr_context)

    assert len(records) == 100
    assert fake_github.page_requests == [1, 2]


@pytest.mark.asyncio
async def test_stops_on_short_page(fake_github, repo_client, pr_context) -> None:
    fake_github.set_files(f"file{i}.txt" for i in range(240))

    records = await enumerate_changed_files(repo_client, pr_context)

    assert len(records) == 240
    assert fake_github.page_requests == [1, 2, 3]
    assert [r.filename for r in records[:2]] == ["file0.txt", "file1.txt"]
    assert records[-1].filename == "file239.txt"


@pytest.mark.asyncio
async def test_single_short_page(fake_github, repo_client, pr_context) -> None:
    fake_github.files = [
        {"filename": "b.txt", "status": "added"},
        {"filename": "a.txt", "status": "removed"},
    ]

    records = await enumerate_changed_files(repo_client, pr_context)

    assert [(r.filename, r.status) for r in records] == [("b.txt", "added"), ("a.txt", "removed")]
    assert fake_github.page_requests == [1]


@pytest.mark.asyncio
async def test_duplicates_keep_first_position(fake_github, repo_client, pr_context) -> None:
    fake_github.set_files(["a.txt", "b.txt", "a.txt"])

    records = await enumerate_changed_files(repo_client, pr_context)

    assert [r.filename for r in records] == ["a.txt", "b.txt"]


@pytest.mark.asyncio
async def test_page_failure_aborts(fake_github, repo_client, pr_context) -> None:
    fake_github.set_files(f"file{i}.txt" for i in range(150))
    fake_github.fail_pages[2] = 502

    with pytest.raises(ApiServerError):
        await enumerate_changed_files(repo_client, pr_context)

    assert fake_github.page_requests == [1, 2]
