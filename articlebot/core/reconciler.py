"""Metadata reconciliation for generated articles.

Model output is treated as untrusted text. The reconciler merges whatever
fields it can extract with the caller's canonical date and tags and always
produces a complete header plus a cleaned body whose first line is the title
heading. Missing fields degrade to the constants of a versioned
:class:`~articlebot.core.policy.FallbackPolicy`.
"""

import logging
import re
from typing import Optional, Sequence

from articlebot.core.emoji import decorate_title
from articlebot.core.extractor import (
    HEADING_MARKER_REGEX,
    extract_fields,
    resolve_description,
    resolve_title,
)
from articlebot.core.policy import FallbackPolicy, get_policy
from articlebot.core.sanitizer import TextSanitizer
from articlebot.core.utils import normalize_date, normalize_tags
from articlebot.models.content import MetadataHeader, ReconciledArticle

logger = logging.getLogger(__name__)

# Leading run of symbols, such as a topic emoji, before the title words
EMOJI_PREFIX_REGEX = re.compile(r"^[^\w\s]+\s+")


def _single_line(text: Optional[str], sanitizer: TextSanitizer) -> str:
    if not text:
        return ""
    return " ".join(sanitizer.strip_emphasis(text).split())


def _restates_title(line: str, title: str, plain_title: str) -> bool:
    text = HEADING_MARKER_REGEX.sub("", line.strip()).strip()
    if not text:
        return False
    if text in (title, plain_title):
        return True
    return bool(plain_title) and EMOJI_PREFIX_REGEX.sub("", text) == plain_title


def ensure_title_heading(body: str, title: str, plain_title: str = "") -> str:
    """Make the body start with ``# <title>``.

    A leading line that restates the title, with or without heading markers
    or an emoji prefix, is replaced. Any other first line, including a
    different heading, is kept below a prepended title heading.
    """
    heading = f"# {title}"
    if not body:
        return heading

    first, _, rest = body.partition("\n")
    if _restates_title(first, title, plain_title):
        rest = rest.lstrip("\n")
        return f"{heading}\n\n{rest}".rstrip() if rest else heading

    return f"{heading}\n\n{body}"


class MetadataReconciler:
    """Turns raw model output into a normalized article."""

    def __init__(
        self,
        policy: Optional[FallbackPolicy] = None,
        sanitizer: Optional[TextSanitizer] = None,
    ):
        self.policy = policy or get_policy()
        self.sanitizer = sanitizer or TextSanitizer()

    def reconcile(
        self,
        raw_text: Optional[str],
        canonical_date,
        canonical_tags: Sequence[str],
        prompt_text: str = "",
    ) -> ReconciledArticle:
        """Reconcile one draft.

        Args:
            raw_text: Model output; may be empty or malformed
            canonical_date: Publication date (``date`` or ``YYYY-MM-DD``)
            canonical_tags: Tags to emit, in order
            prompt_text: The user's prompt, used for emoji matching

        Returns:
            ReconciledArticle with a complete header

        Raises:
            InvalidInput: If the canonical date or tags are malformed
        """
        tags = normalize_tags(canonical_tags)
        date_value = normalize_date(canonical_date)
        policy = self.policy

        fields = extract_fields(raw_text or "", unwrap_fence=policy.unwrap_code_fence)
        body = self.sanitizer.sanitize(fields.body)

        plain_title = _single_line(fields.title, self.sanitizer)
        if not plain_title:
            plain_title = resolve_title(body, policy.placeholder_title)
            logger.debug(f"Title resolved from body: {plain_title!r}")

        description = _single_line(fields.description, self.sanitizer)
        if not description:
            description = resolve_description(
                body,
                plain_title,
                template=policy.description_template,
                from_body=policy.derive_description_from_body,
            )
            logger.debug(f"Description resolved from body: {description!r}")

        title = plain_title
        if policy.decorate_title:
            title = decorate_title(
                plain_title,
                tags,
                prompt_text,
                table=policy.emoji_table,
                fallback=policy.fallback_emoji,
            )

        body = ensure_title_heading(body, title, plain_title)

        header = MetadataHeader(
            title=title,
            description=description,
            date=date_value,
            tags=tags,
            cover=fields.cover or "",
        )
        return ReconciledArticle(header=header, title=title, body=body)


def reconcile(
    raw_text: Optional[str],
    canonical_date,
    canonical_tags: Sequence[str],
    prompt_text: str = "",
    policy: Optional[FallbackPolicy] = None,
) -> ReconciledArticle:
    """Reconcile a draft with a one-off reconciler."""
    return MetadataReconciler(policy).reconcile(
        raw_text, canonical_date, canonical_tags, prompt_text
    )
