"""Tests for multi-round generation."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from articlebot.clients.github import GitHubPublisher
from articlebot.clients.local import LocalPublisher
from articlebot.core.exceptions import InvalidInput, PublishFailed, RenderFailed
from articlebot.core.generator import ArticleGenerator
from articlebot.models.content import ArticleRequest, GeneratedArticle


def make_article(index):
    return GeneratedArticle(
        title=f"📝 Article {index}",
        content=f"# Article {index}",
        image=b"png",
        article_path=f"src/content/blog/article-{index}.md",
        image_path=f"public/covers/article-{index}.png",
        cover_url=f"/covers/article-{index}.png",
    )


@pytest.fixture
def assembler():
    assembler = MagicMock()
    assembler.assemble = AsyncMock(side_effect=[make_article(i) for i in range(1, 6)])
    return assembler


@pytest.fixture
def publisher():
    publisher = MagicMock()
    publisher.target_name = "octo/blog@main"
    publisher.publish = AsyncMock(side_effect=["sha1", "sha2", "sha3", "sha4", "sha5"])
    return publisher


@pytest.mark.asyncio
async def test_rounds_chain_base_refs(mock_settings, assembler, publisher):
    generator = ArticleGenerator(mock_settings, assembler, publisher)

    report = await generator.generate(ArticleRequest(prompt="x", num_articles=3))

    assert report.success
    assert report.message == "Generated 3 article(s) successfully"
    assert [r.commit_sha for r in report.rounds] == ["sha1", "sha2", "sha3"]
    base_refs = [call.args[1] for call in publisher.publish.await_args_list]
    assert base_refs == [None, "sha1", "sha2"]


@pytest.mark.asyncio
async def test_round_publishes_article_and_image_together(mock_settings, assembler, publisher):
    generator = ArticleGenerator(mock_settings, assembler, publisher)

    await generator.generate(ArticleRequest(prompt="x"))

    files = publisher.publish.await_args.args[0]
    assert files == {
        "src/content/blog/article-1.md": "# Article 1".encode("utf-8"),
        "public/covers/article-1.png": b"png",
    }


@pytest.mark.asyncio
async def test_render_failure_skips_publish_and_stops(mock_settings, assembler, publisher):
    assembler.assemble.side_effect = [make_article(1), RenderFailed("bad font"), make_article(3)]
    generator = ArticleGenerator(mock_settings, assembler, publisher)

    report = await generator.generate(ArticleRequest(prompt="x", num_articles=3))

    assert not report.success
    assert [r.success for r in report.rounds] == [True, False]
    assert report.rounds[1].index == 2
    assert "RenderFailed" in report.rounds[1].error
    assert publisher.publish.await_count == 1


@pytest.mark.asyncio
async def test_publish_failure_is_reported(mock_settings, assembler, publisher):
    publisher.publish.side_effect = PublishFailed("conflict", status=422)
    generator = ArticleGenerator(mock_settings, assembler, publisher)

    report = await generator.generate(ArticleRequest(prompt="x", num_articles=2))

    assert len(report.rounds) == 1
    assert "status 422" in report.rounds[0].error


@pytest.mark.asyncio
async def test_unexpected_error_reported_with_round_index(mock_settings, assembler, publisher):
    assembler.assemble.side_effect = [make_article(1), RuntimeError("kaboom")]
    generator = ArticleGenerator(mock_settings, assembler, publisher)

    report = await generator.generate(ArticleRequest(prompt="x", num_articles=2))

    assert report.rounds[0].success
    assert report.rounds[1].index == 2
    assert report.rounds[1].error == "Unexpected error: kaboom"


@pytest.mark.asyncio
async def test_too_many_articles_rejected(mock_settings, assembler, publisher):
    generator = ArticleGenerator(mock_settings, assembler, publisher)
    request = ArticleRequest(prompt="x", num_articles=mock_settings.max_articles + 1)

    with pytest.raises(InvalidInput):
        await generator.generate(request)

    assembler.assemble.assert_not_called()


def test_from_request_prefers_request_values(mock_settings):
    request = ArticleRequest(
        prompt="x", repo="other/site", branch="drafts", githubToken="req-token"
    )
    generator = ArticleGenerator.from_request(mock_settings, request)

    assert isinstance(generator.publisher, GitHubPublisher)
    assert generator.publisher.target_name == "other/site@drafts"
    assert generator.publisher.headers["Authorization"] == "Bearer req-token"


def test_from_request_uses_settings_defaults(mock_settings):
    generator = ArticleGenerator.from_request(mock_settings, ArticleRequest(prompt="x"))
    assert generator.publisher.target_name == "octo/blog@main"


def test_from_request_dry_run_writes_locally(mock_settings, tmp_path):
    generator = ArticleGenerator.from_request(
        mock_settings, ArticleRequest(prompt="x"), dry_run=True, output_dir=str(tmp_path)
    )
    assert isinstance(generator.publisher, LocalPublisher)


def test_from_request_requires_openai_key(mock_settings):
    settings = mock_settings.model_copy(update={"openai_api_key": None})
    with pytest.raises(InvalidInput):
        ArticleGenerator.from_request(settings, ArticleRequest(prompt="x"))
