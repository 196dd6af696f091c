"""Error types raised by the article pipeline."""

from typing import Optional


class ArticleBotError(Exception):
    """Base class for article pipeline errors."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status

    def __str__(self) -> str:
        message = super().__str__()
        if self.status is not None:
            return f"{message} (status {self.status})"
        return message


class MalformedDraft(ArticleBotError):
    """Model output could not be parsed. Recovered by the reconciler."""


class InvalidInput(ArticleBotError):
    """Canonical values or request parameters are missing or malformed."""


class GenerationFailed(ArticleBotError):
    """The text generation service returned a hard failure."""


class EmojiSuggestionFailed(ArticleBotError):
    """The emoji suggestion call failed. Recovered with a default pair."""


class RenderFailed(ArticleBotError):
    """The cover image could not be rendered."""


class PublishFailed(ArticleBotError):
    """The repository commit sequence failed."""
