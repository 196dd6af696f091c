"""Cover image rendering."""

import logging
import os
from io import BytesIO
from typing import List, Optional, Sequence

from PIL import Image, ImageDraw, ImageFont
from PIL.PngImagePlugin import PngInfo

from articlebot.core.exceptions import RenderFailed

logger = logging.getLogger(__name__)

CANVAS_WIDTH = 1200
CANVAS_HEIGHT = 630
BACKGROUND = "#000000"
FOREGROUND = "#FFFFFF"

TITLE_FONT_SIZE = 48
TITLE_MAX_WIDTH = 1000
TITLE_TOP = 150
TITLE_LINE_HEIGHT = 60

EMOJI_FONT_SIZE = 120
# Bitmap color emoji fonts only load at their native strike size
EMOJI_BITMAP_SIZE = 109
EMOJI_BASELINE = 400

TITLE_FONT_CANDIDATES = [
    "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf",
    "/usr/share/fonts/TTF/DejaVuSans-Bold.ttf",
    "/Library/Fonts/Arial Bold.ttf",
    "/System/Library/Fonts/Supplemental/Arial Bold.ttf",
    "C:/Windows/Fonts/arialbd.ttf",
]

EMOJI_FONT_CANDIDATES = [
    "/usr/share/fonts/truetype/noto/NotoColorEmoji.ttf",
    "/usr/share/fonts/noto/NotoColorEmoji.ttf",
    "/System/Library/Fonts/Apple Color Emoji.ttc",
    "C:/Windows/Fonts/seguiemj.ttf",
]


def _load_font(
    candidates: Sequence[str], sizes: Sequence[int]
) -> ImageFont.FreeTypeFont:
    for font_path in candidates:
        if not font_path or not os.path.exists(font_path):
            continue
        for size in sizes:
            try:
                font = ImageFont.truetype(font_path, size)
                logger.debug(f"Using font: {font_path} ({size}px)")
                return font
            except (IOError, OSError):
                continue

    logger.debug("No system font found - using Pillow default font")
    return ImageFont.load_default(size=sizes[0])


def wrap_title(
    draw: ImageDraw.ImageDraw, title: str, font, max_width: int = TITLE_MAX_WIDTH
) -> List[str]:
    """Greedy word wrap; a single over-long word gets its own line."""
    words = title.split()
    if not words:
        return [""]

    lines = []
    current = words[0]
    for word in words[1:]:
        candidate = f"{current} {word}"
        if draw.textlength(candidate, font=font) > max_width:
            lines.append(current)
            current = word
        else:
            current = candidate
    lines.append(current)
    return lines


class CoverRenderer:
    """Draws the title and emojis onto a fixed-size black canvas."""

    def __init__(
        self,
        title_font_path: Optional[str] = None,
        emoji_font_path: Optional[str] = None,
    ):
        self.title_font_paths = [title_font_path] + TITLE_FONT_CANDIDATES
        self.emoji_font_paths = [emoji_font_path] + EMOJI_FONT_CANDIDATES
        self._title_font = None
        self._emoji_font = None

    @property
    def title_font(self):
        if self._title_font is None:
            self._title_font = _load_font(self.title_font_paths, [TITLE_FONT_SIZE])
        return self._title_font

    @property
    def emoji_font(self):
        if self._emoji_font is None:
            self._emoji_font = _load_font(
                self.emoji_font_paths, [EMOJI_FONT_SIZE, EMOJI_BITMAP_SIZE]
            )
        return self._emoji_font

    def render(self, title: str, tags: Sequence[str], emojis: str) -> bytes:
        """Render a PNG cover.

        Args:
            title: Decorated article title
            tags: Canonical tags, stored as PNG keywords
            emojis: Emoji text drawn below the title

        Returns:
            PNG image bytes

        Raises:
            RenderFailed: If drawing or encoding fails
        """
        try:
            img = Image.new("RGB", (CANVAS_WIDTH, CANVAS_HEIGHT), BACKGROUND)
            draw = ImageDraw.Draw(img)
            center_x = CANVAS_WIDTH // 2

            lines = wrap_title(draw, title, self.title_font)
            for index, line in enumerate(lines):
                draw.text(
                    (center_x, TITLE_TOP + index * TITLE_LINE_HEIGHT),
                    line,
                    font=self.title_font,
                    fill=FOREGROUND,
                    anchor="ms",
                )

            if emojis:
                draw.text(
                    (center_x, EMOJI_BASELINE),
                    emojis,
                    font=self.emoji_font,
                    fill=FOREGROUND,
                    anchor="ms",
                    embedded_color=True,
                )

            metadata = PngInfo()
            metadata.add_text("Title", title)
            metadata.add_text("Keywords", ", ".join(tags))

            buffer = BytesIO()
            img.save(buffer, format="PNG", pnginfo=metadata)
            logger.debug(f"Rendered cover with {len(lines)} title line(s)")
            return buffer.getvalue()

        except (IOError, OSError, ValueError, TypeError) as e:
            logger.error(f"Error rendering cover image: {e}")
            raise RenderFailed(f"Cover rendering failed: {e}") from e
