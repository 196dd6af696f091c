"""One article generation round, from prompt to finished files."""

import asyncio
import logging
import re
from datetime import date
from typing import List, Optional

from articlebot.core.cover import CoverRenderer
from articlebot.core.policy import get_policy
from articlebot.core.reconciler import MetadataReconciler
from articlebot.core.utils import (
    escape_header_value,
    make_article_basename,
    normalize_tags,
)
from articlebot.models.content import ArticleRequest, GeneratedArticle

logger = logging.getLogger(__name__)

COVER_LINE_REGEX = re.compile(r"^cover:.*$", re.MULTILINE)

SYSTEM_PROMPT_TEMPLATE = """You are an expert article writer. Write a high-quality article in Markdown with proper YAML frontmatter for Astro.

Structure the frontmatter exactly like this:
---
title: "Your Article Title"
description: "A brief description of the article"
date: {date}
tags: [{tags}]
cover: "/covers/image-name.png"
---

# Your Article Title

Your article content here...

Important:
- Use proper YAML syntax with quotes around strings
- Do not include "Title:" or "Summary:" in the body content
- Do not use bold markers (**)
- Make sure the title in the frontmatter matches the H1 title in the body
- Keep the description concise and engaging"""


def replace_cover(text: str, cover: str) -> str:
    """Point the header's ``cover:`` line at a new path.

    Only the first ``cover:`` line, which is the header's, is rewritten.
    """
    line = f"cover: {escape_header_value(cover)}"
    return COVER_LINE_REGEX.sub(lambda _: line, text, count=1)


def build_system_prompt(today: str, tags: List[str]) -> str:
    quoted = ", ".join(escape_header_value(tag) for tag in tags)
    return SYSTEM_PROMPT_TEMPLATE.format(date=today, tags=quoted)


def build_user_prompt(prompt: str, tone: str, affiliate_links: List[str]) -> str:
    user_prompt = f"{prompt}\n\nTone: {tone}."
    if affiliate_links:
        links = "\n".join(f"- {link}" for link in affiliate_links)
        user_prompt += f"\n\n## Affiliate Links\n{links}"
    return user_prompt


class ArticleAssembler:
    """Runs generation, reconciliation and cover rendering for one article."""

    def __init__(
        self,
        text_client,
        renderer: Optional[CoverRenderer] = None,
        settings=None,
        reconciler: Optional[MetadataReconciler] = None,
    ):
        """Initialize the assembler.

        Args:
            text_client: Client with ``generate_article`` and ``suggest_emojis``
            renderer: Cover renderer
            settings: Settings instance for paths and policy
            reconciler: Metadata reconciler (built from settings if omitted)
        """
        self.text_client = text_client
        self.settings = settings

        if settings:
            self.content_dir = settings.content_dir
            self.covers_dir = settings.covers_dir
            self.cover_url_prefix = settings.cover_url_prefix
            policy = get_policy(settings.fallback_policy_version)
            self.renderer = renderer or CoverRenderer(
                settings.title_font_path, settings.emoji_font_path
            )
        else:
            self.content_dir = "src/content/blog"
            self.covers_dir = "public/covers"
            self.cover_url_prefix = "/covers"
            policy = get_policy()
            self.renderer = renderer or CoverRenderer()

        self.reconciler = reconciler or MetadataReconciler(policy)

    async def assemble(
        self, request: ArticleRequest, today: Optional[date] = None
    ) -> GeneratedArticle:
        """Produce one finished article and its cover image.

        Raises:
            InvalidInput: If the request tags are malformed
            GenerationFailed: If the text generation call fails
            RenderFailed: If the cover cannot be rendered
        """
        today = today or date.today()
        tags = normalize_tags(request.tags)

        system_prompt = build_system_prompt(today.isoformat(), tags)
        user_prompt = build_user_prompt(
            request.prompt, request.tone, request.affiliate_links
        )

        logger.info("✍️  Requesting article text...")
        raw_text = await self.text_client.generate_article(
            system_prompt, user_prompt, model=request.model
        )

        article = self.reconciler.reconcile(raw_text, today, tags, request.prompt)
        logger.info(f"Reconciled article: {article.title}")

        basename = make_article_basename(today)
        article_path = f"{self.content_dir}/{basename}.md"
        image_name = f"{basename}.png"
        image_path = f"{self.covers_dir}/{image_name}"
        cover_url = f"{self.cover_url_prefix}/{image_name}"

        emojis = await self.text_client.suggest_emojis(article.title, tags)

        logger.info("🎨 Rendering cover image...")
        image = await asyncio.to_thread(
            self.renderer.render, article.title, tags, emojis
        )

        return GeneratedArticle(
            title=article.title,
            content=replace_cover(article.text, cover_url),
            image=image,
            article_path=article_path,
            image_path=image_path,
            cover_url=cover_url,
            emojis=emojis,
        )
