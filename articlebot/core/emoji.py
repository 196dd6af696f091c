"""Topic emoji table and title decoration."""

import logging
import re
from typing import Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

# Ordered: the first matching keyword wins.
DEFAULT_EMOJI_TABLE: Tuple[Tuple[str, str], ...] = (
    ("tech", "💻"),
    ("technology", "💻"),
    ("ai", "🤖"),
    ("artificial intelligence", "🤖"),
    ("machine learning", "🤖"),
    ("programming", "⌨️"),
    ("coding", "⌨️"),
    ("software", "⌨️"),
    ("data", "📊"),
    ("security", "🔒"),
    ("crypto", "🪙"),
    ("writing", "✍️"),
    ("blogging", "✍️"),
    ("books", "📚"),
    ("education", "🎓"),
    ("learning", "🎓"),
    ("business", "💼"),
    ("startup", "🚀"),
    ("marketing", "📈"),
    ("finance", "💰"),
    ("money", "💰"),
    ("investing", "💰"),
    ("productivity", "⏱️"),
    ("career", "🧭"),
    ("health", "🩺"),
    ("fitness", "💪"),
    ("wellness", "🧘"),
    ("nutrition", "🥗"),
    ("food", "🍽️"),
    ("cooking", "🍳"),
    ("science", "🔬"),
    ("space", "🚀"),
    ("nature", "🌿"),
    ("environment", "🌍"),
    ("climate", "🌍"),
    ("travel", "✈️"),
    ("music", "🎵"),
    ("art", "🎨"),
    ("design", "🎨"),
    ("photography", "📷"),
    ("gaming", "🎮"),
    ("sports", "🏅"),
    ("history", "🏛️"),
    ("politics", "🗳️"),
    ("news", "📰"),
    ("lifestyle", "🌟"),
)

FALLBACK_EMOJI = "📝"

# Returned when the emoji suggestion call comes back empty.
DEFAULT_EMOJI_PAIR = "📝📄"


def find_topic_emoji(
    tags: Sequence[str],
    prompt: str,
    table: Sequence[Tuple[str, str]] = DEFAULT_EMOJI_TABLE,
) -> Optional[str]:
    """Find the emoji for the first tag, then prompt keyword, found in the table.

    Tags are compared whole and case-insensitively, in tag order. The prompt
    is scanned for whole-word keyword hits in table order.
    """
    lookup = {}
    for keyword, symbol in table:
        lookup.setdefault(keyword, symbol)

    for tag in tags:
        symbol = lookup.get(tag.strip().lower())
        if symbol:
            logger.debug(f"Tag '{tag}' matched emoji {symbol}")
            return symbol

    prompt_lower = (prompt or "").lower()
    for keyword, symbol in table:
        if re.search(rf"\b{re.escape(keyword)}\b", prompt_lower):
            logger.debug(f"Prompt keyword '{keyword}' matched emoji {symbol}")
            return symbol

    return None


def is_decorated(
    title: str,
    table: Sequence[Tuple[str, str]] = DEFAULT_EMOJI_TABLE,
    fallback: str = FALLBACK_EMOJI,
) -> bool:
    """Check whether a title already starts with one of the known emojis."""
    symbols = {symbol for _, symbol in table}
    symbols.add(fallback)
    return any(title.startswith(f"{symbol} ") for symbol in symbols)


def decorate_title(
    title: str,
    tags: Sequence[str],
    prompt: str,
    table: Sequence[Tuple[str, str]] = DEFAULT_EMOJI_TABLE,
    fallback: str = FALLBACK_EMOJI,
) -> str:
    """Prefix a title with its topic emoji.

    Titles that already carry a known emoji prefix are returned unchanged so
    a draft is only ever decorated once.
    """
    if is_decorated(title, table, fallback):
        return title

    symbol = find_topic_emoji(tags, prompt, table) or fallback
    return f"{symbol} {title}"
