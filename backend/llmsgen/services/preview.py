"""Split generated content into a free visible part and a masked locked part."""

import math
import re
from dataclasses import dataclass

MASK_CHAR = "#"
MIN_LOCKED_LINES = 4

_NON_WHITESPACE = re.compile(r"\S")


@dataclass(frozen=True)
class PreviewSlices:
    visible: str
    locked: str


def mask_line(line: str) -> str:
    """Replace every non-whitespace character, keeping the line's shape."""
    return _NON_WHITESPACE.sub(MASK_CHAR, line)


def build_preview_slices(content: str) -> PreviewSlices:
    """Show roughly the first half of the lines, always locking at least four.

    The locked part starts with a newline when both parts are non-empty so
    ``visible + locked`` renders with the original line structure.
    """
    lines = content.split("\n")
    total = len(lines)
    visible_count = math.ceil(total / 2)

    if total - visible_count < MIN_LOCKED_LINES:
        visible_count = max(1, total - MIN_LOCKED_LINES)

    visible = "\n".join(lines[:visible_count])
    masked = "\n".join(mask_line(line) for line in lines[visible_count:])
    locked = f"\n{masked}" if masked and visible else masked

    return PreviewSlices(visible=visible, locked=locked)
