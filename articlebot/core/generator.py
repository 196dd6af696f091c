"""Multi-round article generation and publishing."""

import logging
from typing import Optional

from articlebot.clients.github import GitHubPublisher
from articlebot.clients.interfaces import ArticlePublisher
from articlebot.clients.local import LocalPublisher
from articlebot.clients.openai import OpenAIClient
from articlebot.core.assembler import ArticleAssembler
from articlebot.core.exceptions import ArticleBotError, InvalidInput
from articlebot.core.utils import normalize_tags
from articlebot.models.content import ArticleRequest, GenerationReport, RoundResult
from articlebot.models.settings import Settings

logger = logging.getLogger(__name__)


class ArticleGenerator:
    """Runs generation rounds one after another and publishes each result.

    Each round commits on top of the previous round's commit, so rounds must
    not run concurrently against the same branch.
    """

    def __init__(
        self,
        settings: Settings,
        assembler: ArticleAssembler,
        publisher: ArticlePublisher,
    ):
        self.settings = settings
        self.assembler = assembler
        self.publisher = publisher

    @classmethod
    def from_request(
        cls,
        settings: Settings,
        request: ArticleRequest,
        dry_run: bool = False,
        output_dir: str = "out",
    ) -> "ArticleGenerator":
        """Build a generator with clients for a request.

        Keys, repository and branch given in the request take precedence over
        the configured ones.

        Raises:
            InvalidInput: If publishing credentials or target are missing
        """
        api_key = request.openai_key or settings.openai_api_key
        if not api_key:
            raise InvalidInput("OpenAI API key not configured")

        text_client = OpenAIClient(api_key, settings=settings)
        assembler = ArticleAssembler(text_client, settings=settings)

        if dry_run:
            publisher = LocalPublisher(output_dir)
        else:
            publisher = GitHubPublisher(
                request.github_token or settings.github_token,
                request.repo or settings.github_repo,
                request.branch or settings.github_branch,
                settings=settings,
            )

        return cls(settings, assembler, publisher)

    def validate(self, request: ArticleRequest) -> None:
        """Reject requests before any external call is made.

        Raises:
            InvalidInput: If tags or the article count are invalid
        """
        normalize_tags(request.tags)
        if request.num_articles > self.settings.max_articles:
            raise InvalidInput(
                f"At most {self.settings.max_articles} articles per request "
                f"(requested {request.num_articles})"
            )

    async def generate(self, request: ArticleRequest) -> GenerationReport:
        """Run all requested rounds.

        A failed round stops the run; rounds published before it stay
        published.

        Raises:
            InvalidInput: If the request is rejected by :meth:`validate`
        """
        self.validate(request)
        report = GenerationReport(requested=request.num_articles)
        base_ref: Optional[str] = None

        logger.info(
            f"Generating {request.num_articles} article(s) for "
            f"{self.publisher.target_name}"
        )

        for index in range(1, request.num_articles + 1):
            result, base_ref = await self._run_round(index, request, base_ref)
            report.rounds.append(result)
            if not result.success:
                break

        if report.success:
            logger.info(f"✅ {report.message}")
        else:
            logger.error(report.message)
        return report

    async def _run_round(
        self, index: int, request: ArticleRequest, base_ref: Optional[str]
    ):
        logger.info(f"Round {index}/{request.num_articles}")
        try:
            article = await self.assembler.assemble(request)
            files = {
                article.article_path: article.content.encode("utf-8"),
                article.image_path: article.image,
            }
            new_ref = await self.publisher.publish(files, base_ref)

        except ArticleBotError as e:
            logger.error(f"Round {index} failed: {type(e).__name__}: {e}")
            return (
                RoundResult(index=index, success=False, error=f"{type(e).__name__}: {e}"),
                base_ref,
            )
        except Exception as e:
            logger.exception(f"Unexpected error in round {index}")
            return (
                RoundResult(index=index, success=False, error=f"Unexpected error: {e}"),
                base_ref,
            )

        logger.info(f"📦 Published {article.article_path}")
        result = RoundResult(
            index=index,
            success=True,
            title=article.title,
            article_path=article.article_path,
            image_path=article.image_path,
            commit_sha=new_ref,
        )
        return result, new_ref
