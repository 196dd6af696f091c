"""Body text sanitization for generated articles."""

import logging
import re

logger = logging.getLogger(__name__)


class TextSanitizer:
    """Removes model artifacts from article body text."""

    # Lines where the model restates the title or summary as a label
    REDUNDANT_LABEL_PATTERN = r"^[ \t]*(?:#+[ \t]*)?(?:title|summary)[ \t]*:.*(?:\r?\n|$)"

    # Bold wrappers; the enclosed text is kept. Underscore pairs only count
    # outside words and inline code, so snake__case and `__init__` survive.
    EMPHASIS_PATTERNS = [
        r"\*\*(.+?)\*\*",
        r"(?<![\w`])__(?=\S)(.+?)(?<=\S)__(?![\w`])",
    ]

    # Three or more line breaks, whitespace-only lines included
    BLANK_RUN_PATTERN = r"\n(?:[ \t]*\n){2,}"

    # Guards against pathological nesting
    MAX_EMPHASIS_PASSES = 10

    def __init__(self) -> None:
        self.label_regex = re.compile(
            self.REDUNDANT_LABEL_PATTERN, re.IGNORECASE | re.MULTILINE
        )
        self.emphasis_regexes = [re.compile(p) for p in self.EMPHASIS_PATTERNS]
        self.blank_run_regex = re.compile(self.BLANK_RUN_PATTERN)

    def sanitize(self, text: str) -> str:
        """Return the cleaned body text. Never fails; empty input gives ''."""
        if not text:
            return ""

        text = text.replace("\r\n", "\n").replace("\r", "\n")

        text, removed = self.label_regex.subn("", text)
        if removed:
            logger.debug(f"Removed {removed} redundant label line(s)")

        text = self.strip_emphasis(text)
        text = self.blank_run_regex.sub("\n\n", text)

        return text.strip()

    def strip_emphasis(self, text: str) -> str:
        """Remove emphasis marker pairs, repeating until nested pairs are gone."""
        for _ in range(self.MAX_EMPHASIS_PASSES):
            previous = text
            for regex in self.emphasis_regexes:
                text = regex.sub(r"\1", text)
            if text == previous:
                break
        return text


_default_sanitizer = TextSanitizer()


def sanitize_body(text: str) -> str:
    """Sanitize body text with the shared default sanitizer."""
    return _default_sanitizer.sanitize(text)
