"""Content models for article generation."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from articlebot.core.utils import escape_header_value

HEADER_DELIMITER = "---"


class MetadataHeader(BaseModel):
    """The normalized header block at the top of an article."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(..., min_length=1, description="Decorated article title")
    description: str = Field(..., min_length=1, description="Short summary")
    date: str = Field(..., description="Canonical publication date, YYYY-MM-DD")
    tags: List[str] = Field(default_factory=list, description="Canonical tags")
    cover: str = Field("", description="Public path of the cover image")

    def render(self) -> str:
        """Serialize to the header wire format, delimiters included."""
        tags = ", ".join(escape_header_value(tag) for tag in self.tags)
        lines = [
            HEADER_DELIMITER,
            f"title: {escape_header_value(self.title)}",
            f"description: {escape_header_value(self.description)}",
            f"date: {self.date}",
            f"tags: [{tags}]",
            f"cover: {escape_header_value(self.cover)}",
            HEADER_DELIMITER,
        ]
        return "\n".join(lines)

    def with_cover(self, cover: str) -> "MetadataHeader":
        return self.model_copy(update={"cover": cover})


class ReconciledArticle(BaseModel):
    """Header, title and cleaned body produced from one draft."""

    header: MetadataHeader
    title: str = Field(..., description="Decorated title, equal to header.title")
    body: str = Field(..., description="Cleaned body starting with the title heading")

    @property
    def text(self) -> str:
        return f"{self.header.render()}\n\n{self.body}"


class ArticleRequest(BaseModel):
    """Parameters for one generation request."""

    model_config = ConfigDict(populate_by_name=True)

    prompt: str = Field(..., min_length=1, description="Topic or writing brief")
    tone: str = Field("informative", description="Requested writing tone")
    tags: List[str] = Field(default_factory=list, description="Canonical tags")
    affiliate_links: List[str] = Field(
        default_factory=list, alias="affiliateLinks", description="Links to append"
    )
    model: Optional[str] = Field(None, description="Requested model name")
    num_articles: int = Field(1, ge=1, alias="numArticles", description="Rounds to run")
    repo: Optional[str] = Field(None, description="Target repository, owner/name")
    branch: Optional[str] = Field(None, description="Target branch")
    openai_key: Optional[str] = Field(None, alias="openaiKey", description="API key")
    github_token: Optional[str] = Field(None, alias="githubToken", description="Token")

    @field_validator("tags", "affiliate_links", mode="before")
    @classmethod
    def split_comma_separated(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @field_validator("tags", "affiliate_links")
    @classmethod
    def drop_blank_entries(cls, value: List[str]) -> List[str]:
        return [item.strip() for item in value if item and item.strip()]


class GeneratedArticle(BaseModel):
    """Output of one round: the finished article and its cover image."""

    title: str = Field(..., description="Decorated title")
    content: str = Field(..., description="Article text with final cover path")
    image: bytes = Field(..., description="PNG cover image")
    article_path: str = Field(..., description="Repository path of the article")
    image_path: str = Field(..., description="Repository path of the cover image")
    cover_url: str = Field(..., description="Public cover path written to the header")
    emojis: str = Field("", description="Emoji text drawn on the cover")
    created_at: datetime = Field(
        default_factory=datetime.now, description="Generation time"
    )


class RoundResult(BaseModel):
    """Outcome of one generation round."""

    index: int = Field(..., ge=1, description="1-based round number")
    success: bool = Field(..., description="Whether the round was published")
    title: Optional[str] = Field(None, description="Decorated title")
    article_path: Optional[str] = Field(None, description="Published article path")
    image_path: Optional[str] = Field(None, description="Published image path")
    commit_sha: Optional[str] = Field(None, description="Commit created by the round")
    error: Optional[str] = Field(None, description="Failure message")


class GenerationReport(BaseModel):
    """Outcome of a multi-round request."""

    requested: int = Field(..., ge=0, description="Rounds requested")
    rounds: List[RoundResult] = Field(default_factory=list, description="Round results")

    @property
    def published(self) -> int:
        return sum(1 for result in self.rounds if result.success)

    @property
    def success(self) -> bool:
        return self.published == self.requested

    @property
    def message(self) -> str:
        if self.success:
            return f"Generated {self.published} article(s) successfully"
        failed = next((r for r in self.rounds if not r.success), None)
        detail = f": round {failed.index} failed: {failed.error}" if failed else ""
        return f"Generated {self.published} of {self.requested} article(s){detail}"
