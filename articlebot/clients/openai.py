"""OpenAI chat completions client for article text and emoji suggestions."""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Type

import aiohttp

from articlebot.core.emoji import DEFAULT_EMOJI_PAIR
from articlebot.core.exceptions import (
    ArticleBotError,
    EmojiSuggestionFailed,
    GenerationFailed,
)

logger = logging.getLogger(__name__)


class OpenAIClient:
    """Client for an OpenAI-compatible chat completions API."""

    # Requested model names that are passed through; anything else maps to
    # the configured default model.
    SUPPORTED_MODELS = ("gpt-4", "gpt-3.5-turbo")

    def __init__(self, api_key: str, settings=None, model: str = None):
        """Initialize OpenAI client.

        Args:
            api_key: OpenAI API key
            settings: Settings instance for configuration values
            model: Default model (overrides settings)
        """
        self.api_key = api_key
        self.headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

        if settings:
            self.base_url = settings.openai_base_url.rstrip("/")
            self.default_model = model or settings.openai_model
            self.emoji_model = settings.openai_emoji_model
            self.timeout = settings.openai_timeout
            self.max_tokens = settings.openai_max_tokens
            self.temperature = settings.openai_temperature
        else:
            self.base_url = "https://api.openai.com/v1"
            self.default_model = model or "gpt-3.5-turbo"
            self.emoji_model = "gpt-3.5-turbo"
            self.timeout = 60.0
            self.max_tokens = 2048
            self.temperature = 0.7

    def resolve_model(self, requested: Optional[str]) -> str:
        """Map a requested model name onto a supported one."""
        if requested in self.SUPPORTED_MODELS:
            return requested
        if requested:
            logger.debug(f"Model '{requested}' not supported, using {self.default_model}")
        return self.default_model

    async def generate_article(
        self, system_prompt: str, user_prompt: str, model: str = None
    ) -> str:
        """Generate article text.

        Args:
            system_prompt: Instructions describing the article format
            user_prompt: Topic, tone and extra sections
            model: Requested model name

        Returns:
            Model text; empty when the response had no content

        Raises:
            GenerationFailed: On a non-success status or network failure
        """
        if not self.api_key:
            raise GenerationFailed("OpenAI API key not configured")

        payload = {
            "model": self.resolve_model(model),
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }
        data = await self._post_chat(payload, GenerationFailed)
        content = self._extract_content(data)
        if not content:
            logger.warning("OpenAI returned no article content")
        return content

    async def suggest_emojis(self, title: str, tags: List[str]) -> str:
        """Suggest a short run of emojis for a cover image.

        Never fails: an empty or failed response gives the default pair.
        """
        try:
            emojis = await self._request_emojis(title, tags)
        except EmojiSuggestionFailed as e:
            logger.warning(f"Emoji suggestion failed: {e} - using default")
            return DEFAULT_EMOJI_PAIR

        if not emojis:
            logger.debug("Empty emoji suggestion - using default")
            return DEFAULT_EMOJI_PAIR
        return emojis

    async def _request_emojis(self, title: str, tags: List[str]) -> str:
        if not self.api_key:
            raise EmojiSuggestionFailed("OpenAI API key not configured")

        prompt = (
            f'Suggest 2-4 relevant emojis for an article titled "{title}" '
            f"with tags: {', '.join(tags)}. Return only the emojis, no text."
        )
        payload = {
            "model": self.emoji_model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": 50,
            "temperature": 0.7,
        }
        data = await self._post_chat(payload, EmojiSuggestionFailed)
        return self._extract_content(data)

    def _extract_content(self, data: Dict[str, Any]) -> str:
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            return ""
        return (content or "").strip()

    async def _post_chat(
        self, payload: Dict[str, Any], error_cls: Type[ArticleBotError]
    ) -> Dict[str, Any]:
        """POST a chat completion request.

        Raises:
            error_cls: On a non-200 status, network failure or unreadable body
        """
        url = f"{self.base_url}/chat/completions"
        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(
                    url,
                    headers=self.headers,
                    json=payload,
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                ) as response:
                    if response.status == 200:
                        return await response.json()

                    error_text = await response.text()
                    logger.error(f"OpenAI API error: {response.status} - {error_text}")
                    raise error_cls(
                        f"OpenAI API error: {response.reason or 'request failed'}",
                        status=response.status,
                    )

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Network error in OpenAI API request: {e}")
            raise error_cls(f"Network error calling OpenAI: {e}") from e
        except (KeyError, ValueError, TypeError) as e:
            logger.error(f"Data parsing error in OpenAI API response: {e}")
            raise error_cls(f"Unreadable OpenAI response: {e}") from e
