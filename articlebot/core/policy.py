"""Versioned fallback policies for metadata reconciliation."""

from typing import Dict, Tuple

from pydantic import BaseModel, ConfigDict, Field

from articlebot.core.emoji import DEFAULT_EMOJI_TABLE, FALLBACK_EMOJI

CURRENT_POLICY_VERSION = "2"


class FallbackPolicy(BaseModel):
    """Every constant the reconciler falls back to when a draft is incomplete."""

    model_config = ConfigDict(frozen=True)

    version: str = Field(..., description="Policy identifier")
    placeholder_title: str = Field(
        "Untitled Article", description="Title used when the draft has no text"
    )
    description_template: str = Field(
        "Learn more about {title}.",
        description="Description used when no paragraph follows the heading; "
        "{title} is the lowercased resolved title",
    )
    derive_description_from_body: bool = Field(
        True, description="Use the first paragraph after the heading as description"
    )
    decorate_title: bool = Field(True, description="Prefix the title with an emoji")
    emoji_table: Tuple[Tuple[str, str], ...] = Field(
        DEFAULT_EMOJI_TABLE, description="Ordered keyword to emoji pairs"
    )
    fallback_emoji: str = Field(FALLBACK_EMOJI, description="Emoji when nothing matches")
    unwrap_code_fence: bool = Field(
        True, description="Strip a Markdown code fence wrapping the whole draft"
    )


POLICIES: Dict[str, FallbackPolicy] = {
    # Constants of the first server variant, kept for regenerating old articles.
    "1": FallbackPolicy(
        version="1",
        placeholder_title="Article",
        description_template="Generated article",
        derive_description_from_body=False,
        decorate_title=False,
        unwrap_code_fence=False,
    ),
    "2": FallbackPolicy(version="2"),
}


def get_policy(version: str = CURRENT_POLICY_VERSION) -> FallbackPolicy:
    """Look up a fallback policy by version.

    Raises:
        KeyError: If no policy with that version exists
    """
    try:
        return POLICIES[version]
    except KeyError:
        known = ", ".join(sorted(POLICIES))
        raise KeyError(f"Unknown fallback policy '{version}' (known: {known})") from None
