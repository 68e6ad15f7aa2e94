"""
Text Processing Utilities
Greedy word-wrap, headline font sizing and vertical centring for the canvas.
"""

import re
from typing import List


# Headline sizing: (length threshold, font size) checked in order
BASE_FONT_SIZE = 72
FONT_SIZE_TIERS = ((50, 56), (100, 44), (150, 36))
LINE_HEIGHT_FACTOR = 1.3
HEADLINE_MARGIN = 80


def clean_text(text: str) -> str:
    """Collapse whitespace runs and strip the ends."""
    if not text:
        return ""
    return re.sub(r'\s+', ' ', text).strip()


def wrap_text(text: str, font, max_width: float) -> List[str]:
    """
    Greedy word-wrap: pack as many words per line as fit within max_width.

    A single word wider than max_width is kept whole on its own line, so that
    line overflows the limit. Words are never split, dropped or reordered.
    `font` only needs a `getlength(str)` method.
    """
    lines = []
    current_line = ""

    for word in text.split():
        test_line = f"{current_line} {word}" if current_line else word
        if font.getlength(test_line) > max_width and current_line:
            lines.append(current_line)
            current_line = word
        else:
            current_line = test_line

    if current_line:
        lines.append(current_line)
    return lines


def headline_font_size(text: str) -> int:
    """Pick the headline size from the raw character count (72/56/44/36)."""
    font_size = BASE_FONT_SIZE
    for threshold, size in FONT_SIZE_TIERS:
        if len(text) > threshold:
            font_size = size
    return font_size


def line_height_for(font_size: int) -> float:
    return font_size * LINE_HEIGHT_FACTOR


def first_baseline(line_count: int, line_height: float, canvas_height: int) -> float:
    """Middle of the first line when the block of lines is centred vertically."""
    total_height = line_count * line_height
    return (canvas_height - total_height) / 2 + line_height / 2


def baselines(line_count: int, line_height: float, canvas_height: int) -> List[float]:
    start = first_baseline(line_count, line_height, canvas_height)
    return [start + i * line_height for i in range(line_count)]
