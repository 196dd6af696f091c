"""Settings and configuration management."""

import logging
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables or a .env file."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Text generation
    openai_api_key: Optional[str] = Field(None, description="OpenAI key")
    openai_base_url: str = Field(
        "https://api.openai.com/v1", description="Chat completions API base URL"
    )
    openai_model: str = Field("gpt-3.5-turbo", description="Default article model")
    openai_emoji_model: str = Field(
        "gpt-3.5-turbo", description="Model used for cover emoji suggestions"
    )
    openai_timeout: float = Field(
        60.0, ge=5.0, le=300.0, description="OpenAI API request timeout in seconds"
    )
    openai_max_tokens: int = Field(
        2048, ge=256, le=8192, description="Maximum tokens per article"
    )
    openai_temperature: float = Field(
        0.7, ge=0.0, le=2.0, description="Sampling temperature for articles"
    )

    # Publishing
    github_token: Optional[str] = Field(None, description="GitHub token")
    github_repo: Optional[str] = Field(None, description="Target repo, owner/name")
    github_branch: str = Field("main", description="Target branch")
    github_api_url: str = Field("https://api.github.com", description="GitHub API URL")
    github_timeout: float = Field(
        30.0, ge=5.0, le=120.0, description="GitHub API request timeout in seconds"
    )
    github_commit_message: str = Field(
        "Add generated article and cover image",
        min_length=1,
        description="Commit message for each round",
    )

    # Article layout in the target repository
    content_dir: str = Field("src/content/blog", description="Article directory")
    covers_dir: str = Field("public/covers", description="Cover image directory")
    cover_url_prefix: str = Field("/covers", description="Public path of covers")

    # Generation
    max_articles: int = Field(
        10, ge=1, le=50, description="Maximum articles per request"
    )
    fallback_policy_version: str = Field(
        "2", description="Fallback policy used by the metadata reconciler"
    )
    title_font_path: Optional[str] = Field(None, description="Cover title font")
    emoji_font_path: Optional[str] = Field(None, description="Cover emoji font")

    # Web server
    host: str = Field("0.0.0.0", description="Bind address")
    port: int = Field(3000, ge=1, le=65535, description="HTTP port")
    static_dir: Optional[str] = Field(
        None, description="Directory served at /; defaults to the bundled UI"
    )

    # Application Settings
    debug: bool = Field(False, description="Debug mode")
    log_level: str = Field("INFO", description="Log level")

    @field_validator("fallback_policy_version")
    @classmethod
    def check_policy_version(cls, value: str) -> str:
        from articlebot.core.policy import POLICIES

        if value not in POLICIES:
            raise ValueError(
                f"Unknown fallback policy '{value}' (known: {', '.join(sorted(POLICIES))})"
            )
        return value

    @field_validator("content_dir", "covers_dir")
    @classmethod
    def strip_slashes(cls, value: str) -> str:
        return value.strip("/")

    @field_validator("cover_url_prefix")
    @classmethod
    def normalize_prefix(cls, value: str) -> str:
        return "/" + value.strip("/") if value.strip("/") else ""
