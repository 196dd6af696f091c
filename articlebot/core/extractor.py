"""Best-effort field extraction from generated article drafts."""

import logging
import re
from dataclasses import dataclass
from typing import Optional, Tuple

from articlebot.core.exceptions import MalformedDraft

logger = logging.getLogger(__name__)

RECOGNIZED_KEYS = ("title", "description", "cover")

PLACEHOLDER_TITLE = "Untitled Article"
DESCRIPTION_TEMPLATE = "Learn more about {title}."

DELIMITER_REGEX = re.compile(r"^[ \t]*---[ \t]*$", re.MULTILINE)
HEADER_LINE_REGEX = re.compile(r"^\s*([A-Za-z_][\w-]*)\s*:(.*)$")
H1_REGEX = re.compile(r"^#[ \t]+(.+)$", re.MULTILINE)
HEADING_MARKER_REGEX = re.compile(r"^#+\s*")
CODE_FENCE_REGEX = re.compile(r"^\s*```[\w-]*[ \t]*\n(.*)\n[ \t]*```\s*$", re.DOTALL)
INNER_FENCE_REGEX = re.compile(r"^[ \t]*```", re.MULTILINE)
LINE_BREAK_REGEX = re.compile(r"\r\n?")


@dataclass
class ExtractedFields:
    """Fields recovered from a draft. ``None`` means the draft did not set it."""

    title: Optional[str] = None
    description: Optional[str] = None
    cover: Optional[str] = None
    body: str = ""


def unwrap_code_fence(text: str) -> str:
    """Remove a Markdown code fence wrapping the entire text.

    Text holding more than one fenced block is left alone.
    """
    match = CODE_FENCE_REGEX.match(text)
    if not match or INNER_FENCE_REGEX.search(match.group(1)):
        return text
    logger.debug("Unwrapped draft from a code fence")
    return match.group(1)


def split_header(text: str) -> Tuple[str, str]:
    """Split text into (header block, body).

    The header block sits between the first two delimiter lines. Without two
    delimiters the header is empty and the whole text is the body.
    """
    delimiters = []
    for match in DELIMITER_REGEX.finditer(text):
        delimiters.append(match)
        if len(delimiters) == 2:
            break

    if len(delimiters) < 2:
        return "", text

    opening, closing = delimiters
    return text[opening.end() : closing.start()], text[closing.end() :]


def strip_quotes(value: str) -> str:
    """Strip surrounding quote characters from a header value."""
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] == '"':
        inner = value[1:-1]
        return re.sub(r'\\(["\\])', r"\1", inner).strip()
    if len(value) >= 2 and value[0] == value[-1] == "'":
        return value[1:-1].replace("''", "'").strip()
    return value.strip("\"'").strip()


def parse_header_line(line: str) -> Tuple[str, Optional[str]]:
    """Parse one ``key: value`` header line.

    Returns:
        Tuple of (lowercased key, value or None when the value is empty)

    Raises:
        MalformedDraft: If the line is not a ``key: value`` pair
    """
    match = HEADER_LINE_REGEX.match(line)
    if not match:
        raise MalformedDraft(f"Not a header field: {line[:60]!r}")

    value = strip_quotes(match.group(2))
    return match.group(1).lower(), value or None


def parse_header(header: str) -> dict:
    """Collect recognized fields from a header block; the first occurrence wins."""
    fields = {}
    for line in header.splitlines():
        if not line.strip():
            continue
        try:
            key, value = parse_header_line(line)
        except MalformedDraft as e:
            logger.debug(f"Skipping header line: {e}")
            continue

        if key not in RECOGNIZED_KEYS:
            continue
        if value is not None and key not in fields:
            fields[key] = value
    return fields


def extract_fields(text: str, unwrap_fence: bool = True) -> ExtractedFields:
    """Pull title, description and cover out of raw model text.

    Only ``title``, ``description`` and ``cover`` are read from the header;
    any ``date`` or ``tags`` the model emitted are ignored.
    """
    text = LINE_BREAK_REGEX.sub("\n", text or "")
    if unwrap_fence:
        text = unwrap_code_fence(text)

    header, body = split_header(text)
    fields = parse_header(header)
    if not header:
        logger.debug("Draft has no header block")

    return ExtractedFields(
        title=fields.get("title"),
        description=fields.get("description"),
        cover=fields.get("cover"),
        body=body,
    )


def resolve_title(body: str, placeholder: str = PLACEHOLDER_TITLE) -> str:
    """Derive a title from body text.

    Uses the first top-level heading, then the first non-blank line with
    heading markers stripped, then the placeholder.
    """
    for match in H1_REGEX.finditer(body):
        heading = match.group(1).strip()
        if heading:
            return heading

    for line in body.splitlines():
        candidate = HEADING_MARKER_REGEX.sub("", line.strip()).strip()
        if candidate:
            return candidate

    return placeholder


def resolve_description(
    body: str,
    title: str,
    template: str = DESCRIPTION_TEMPLATE,
    from_body: bool = True,
) -> str:
    """Derive a description from body text.

    Uses the first non-blank, non-heading line after the first top-level
    heading, then the template filled with the lowercased title.
    """
    if from_body:
        heading = H1_REGEX.search(body)
        if heading:
            for line in body[heading.end() :].splitlines():
                candidate = line.strip()
                if candidate and not candidate.startswith("#"):
                    return candidate

    return template.format(title=title.lower())
