"""Helpers for canonical values, header escaping and file naming."""

from __future__ import annotations

import re
import secrets
import string
from collections.abc import Sequence
from datetime import date, datetime

from articlebot.core.exceptions import InvalidInput

ISO_DATE_REGEX = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TOKEN_ALPHABET = string.ascii_lowercase + string.digits


def normalize_tags(tags) -> list[str]:
    """Validate canonical tags and return them trimmed, in order.

    Raises:
        InvalidInput: If tags is not a sequence of strings
    """
    if tags is None or isinstance(tags, (str, bytes)) or not isinstance(tags, Sequence):
        raise InvalidInput(f"Tags must be a list of strings, got {type(tags).__name__}")

    normalized = []
    for tag in tags:
        if not isinstance(tag, str):
            raise InvalidInput(f"Tag must be a string, got {type(tag).__name__}")
        normalized.append(tag.strip())
    return normalized


def normalize_date(value) -> str:
    """Validate a canonical date and return it as ``YYYY-MM-DD``.

    Raises:
        InvalidInput: If the date is missing or not an ISO calendar date
    """
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str) and ISO_DATE_REGEX.match(value.strip()):
        try:
            return date.fromisoformat(value.strip()).isoformat()
        except ValueError:
            pass
    raise InvalidInput(f"Date must be an ISO date (YYYY-MM-DD), got {value!r}")


def escape_header_value(value: str) -> str:
    """Quote a string for the article header, collapsing line breaks to spaces."""
    value = re.sub(r"[ \t]*[\r\n]+[ \t]*", " ", value or "").strip()
    value = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{value}"'


def random_token(length: int = 6) -> str:
    """Short lowercase alphanumeric token for file names."""
    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(length))


def make_article_basename(today: date | None = None, token: str | None = None) -> str:
    """Collision-resistant base name, e.g. ``article-2024-01-01-k3x9qa``."""
    today = today or date.today()
    return f"article-{today.isoformat()}-{token or random_token()}"
