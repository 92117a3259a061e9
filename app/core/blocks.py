"""Render single rich-text blocks as Markdown fragments."""

from __future__ import annotations

from typing import Mapping

from app.core.styles import apply_inline_styles
from app.providers.content_types import BlockType, ContentBlock

HEADING_PREFIXES = {
    BlockType.HEADER_ONE: "#",
    BlockType.HEADER_TWO: "##",
    BlockType.HEADER_THREE: "###",
}

# Every ordered item gets the same marker; no counter is kept across blocks.
ORDERED_LIST_MARKER = "1."


def render_block(block: ContentBlock, media_urls: Mapping[str, str]) -> str:
    """Convert one block to its Markdown fragment.

    Args:
        block: The block to render.
        media_urls: Entity key -> image URL, as built by `resolve_media`.

    Returns:
        The fragment, or "" when the block contributes nothing (an atomic
        block whose media cannot be resolved).
    """
    block_type = block.type

    if block_type in HEADING_PREFIXES:
        return f"{HEADING_PREFIXES[block_type]} {block.text}\n\n"

    if block_type == BlockType.BLOCKQUOTE:
        return f"> {block.text}\n\n"

    if block_type == BlockType.UNORDERED_LIST_ITEM:
        return f"- {block.text}\n"

    if block_type == BlockType.ORDERED_LIST_ITEM:
        return f"{ORDERED_LIST_MARKER} {block.text}\n"

    if block_type == BlockType.ATOMIC:
        if not block.entity_ranges:
            return ""
        url = media_urls.get(block.entity_ranges[0].key)
        if url is None:
            return ""
        return f"\n![]({url})\n\n"

    # unstyled, and anything else
    if not block.text.strip():
        return "\n"
    return f"{apply_inline_styles(block.text, block.inline_style_ranges)}\n\n"
