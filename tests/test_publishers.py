"""Tests for the GitHub and local publishers."""

import base64
from unittest.mock import patch

import aiohttp
import pytest

from articlebot.clients.github import GitHubPublisher, parse_repo
from articlebot.clients.local import LocalPublisher
from articlebot.core.exceptions import InvalidInput, PublishFailed

SESSION = "articlebot.clients.github.aiohttp.ClientSession"
API = "https://api.github.com/repos/octo/blog"


def commit_sequence(parent="base111", new="new333"):
    return [
        (200, {"sha": parent, "tree": {"sha": "tree000"}}),
        (201, {"sha": "blob1"}),
        (201, {"sha": "blob2"}),
        (201, {"sha": "tree222"}),
        (201, {"sha": new}),
        (200, {"ref": "refs/heads/main", "object": {"sha": new}}),
    ]


@pytest.mark.parametrize("repo", ["", "octo", "octo/", "/blog", "a/b/c", None])
def test_parse_repo_rejects_malformed(repo):
    with pytest.raises(InvalidInput):
        parse_repo(repo)


def test_publisher_requires_token():
    with pytest.raises(InvalidInput):
        GitHubPublisher("", "octo/blog")


@pytest.mark.asyncio
async def test_publish_resolves_branch_and_commits_all_files(fake_session, mock_settings):
    session = fake_session(
        (200, {"ref": "refs/heads/main", "object": {"sha": "base111"}}),
        *commit_sequence(),
    )
    publisher = GitHubPublisher("gh-token", "octo/blog", "main", settings=mock_settings)
    files = {
        "src/content/blog/a.md": "# Hi".encode("utf-8"),
        "public/covers/a.png": b"\x89PNG\r\n",
    }

    with patch(SESSION, session):
        sha = await publisher.publish(files)

    assert sha == "new333"
    calls = [(method, url) for method, url, _ in session.calls]
    assert calls == [
        ("GET", f"{API}/git/ref/heads/main"),
        ("GET", f"{API}/git/commits/base111"),
        ("POST", f"{API}/git/blobs"),
        ("POST", f"{API}/git/blobs"),
        ("POST", f"{API}/git/trees"),
        ("POST", f"{API}/git/commits"),
        ("PATCH", f"{API}/git/refs/heads/main"),
    ]

    image_blob = session.calls[3][2]["json"]
    assert image_blob["encoding"] == "base64"
    assert base64.b64decode(image_blob["content"]) == b"\x89PNG\r\n"

    tree = session.calls[4][2]["json"]
    assert tree["base_tree"] == "tree000"
    assert [entry["path"] for entry in tree["tree"]] == list(files)
    assert {entry["sha"] for entry in tree["tree"]} == {"blob1", "blob2"}

    commit = session.calls[5][2]["json"]
    assert commit["parents"] == ["base111"]
    assert commit["tree"] == "tree222"
    assert commit["message"] == "Add generated article and cover image"

    assert session.calls[6][2]["json"] == {"sha": "new333", "force": False}
    assert session.calls[0][2]["headers"]["Authorization"] == "Bearer gh-token"


@pytest.mark.asyncio
async def test_publish_with_base_ref_skips_branch_lookup(fake_session):
    session = fake_session(*commit_sequence(parent="prev999", new="next444"))
    publisher = GitHubPublisher("gh-token", "octo/blog")

    with patch(SESSION, session):
        sha = await publisher.publish({"a.md": b"a", "a.png": b"b"}, base_ref="prev999")

    assert sha == "next444"
    assert session.calls[0][1] == f"{API}/git/commits/prev999"
    assert session.calls[4][2]["json"]["parents"] == ["prev999"]


@pytest.mark.asyncio
async def test_publish_raises_with_status_on_api_error(fake_session):
    session = fake_session((404, {"message": "Not Found"}))
    publisher = GitHubPublisher("gh-token", "octo/blog")

    with patch(SESSION, session):
        with pytest.raises(PublishFailed) as excinfo:
            await publisher.publish({"a.md": b"a"})

    assert excinfo.value.status == 404


@pytest.mark.asyncio
async def test_publish_does_not_move_branch_when_commit_fails(fake_session):
    responses = commit_sequence()[:4] + [(422, {"message": "Invalid"})]
    session = fake_session(*responses)
    publisher = GitHubPublisher("gh-token", "octo/blog")

    with patch(SESSION, session):
        with pytest.raises(PublishFailed):
            await publisher.publish({"a.md": b"a", "a.png": b"b"}, base_ref="base111")

    assert all(method != "PATCH" for method, _, _ in session.calls)


@pytest.mark.asyncio
async def test_publish_wraps_network_errors(fake_session):
    session = fake_session(aiohttp.ClientConnectionError("down"))
    publisher = GitHubPublisher("gh-token", "octo/blog")

    with patch(SESSION, session):
        with pytest.raises(PublishFailed):
            await publisher.publish({"a.md": b"a"}, base_ref="base111")


@pytest.mark.asyncio
async def test_publish_wraps_non_json_responses(fake_session):
    session = fake_session((200, None))
    session.responses[0].json.side_effect = ValueError("Expecting value")
    publisher = GitHubPublisher("gh-token", "octo/blog")

    with patch(SESSION, session):
        with pytest.raises(PublishFailed):
            await publisher.publish({"a.md": b"a"})


@pytest.mark.asyncio
async def test_local_publisher_writes_files(tmp_path):
    publisher = LocalPublisher(str(tmp_path))
    files = {"src/content/blog/a.md": b"# A", "public/covers/a.png": b"png"}

    first = await publisher.publish(files)
    second = await publisher.publish(files, base_ref=first)

    assert (tmp_path / "src/content/blog/a.md").read_bytes() == b"# A"
    assert (tmp_path / "public/covers/a.png").read_bytes() == b"png"
    assert first != second
    assert publisher.target_name == str(tmp_path)
