"""Inline style application for a single line of block text.

Ranges are applied right to left so that markers inserted for one range do
not move the positions of ranges still waiting to be applied. Ranges that
cross each other (e.g. BOLD 0-10 with ITALIC 5-15) are spliced literally and
give valid but unspecified markup; no nesting is inferred.
"""

from __future__ import annotations

from bisect import bisect_left
from typing import Iterable

from app.providers.content_types import StyleRange

STYLE_MARKERS = {
    "BOLD": "**",
    "ITALIC": "*",
}


def _utf16_offsets(text: str) -> list[int]:
    """Prefix table: UTF-16 code-unit position of each character index."""
    positions = [0]
    for ch in text:
        positions.append(positions[-1] + (2 if ord(ch) > 0xFFFF else 1))
    return positions


def _to_index(positions: list[int], units: int) -> int:
    """Map a UTF-16 offset to a str index, clamped to the text."""
    if units <= 0:
        return 0
    if units >= positions[-1]:
        return len(positions) - 1
    return bisect_left(positions, units)


def apply_inline_styles(text: str, ranges: Iterable[StyleRange]) -> str:
    """Wrap each styled span of `text` in its Markdown marker.

    Args:
        text: Raw block text.
        ranges: Style ranges with offsets in UTF-16 code units.

    Returns:
        Text with `**` / `*` markers inserted. Unknown styles and
        zero-length ranges leave the text unchanged.
    """
    ordered = sorted(ranges, key=lambda r: r.offset, reverse=True)

    result = text
    for style_range in ordered:
        marker = STYLE_MARKERS.get(style_range.style)
        if marker is None or style_range.length <= 0:
            continue

        positions = _utf16_offsets(result)
        start = _to_index(positions, style_range.offset)
        end = _to_index(positions, style_range.offset + style_range.length)
        if end <= start:
            continue

        result = result[:start] + marker + result[start:end] + marker + result[end:]

    return result
