"""Assemble saved Markdown documents from posts, threads and articles."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Sequence

from app.core.blocks import render_block
from app.core.frontmatter import render_frontmatter
from app.core.media import resolve_media
from app.providers.content_types import ContentBlock, Tweet, parse_document

logger = logging.getLogger(__name__)

STATUS_URL_BASE = "https://x.com"

# "Wed Oct 15 12:00:00 +0000 2025" -> month, day, year
POST_DATE_RE = re.compile(r"(\w{3}) (\d+) .* (\d{4})")

_FILENAME_UNSAFE_RE = re.compile(r"[^A-Za-z0-9_-]")

SEPARATOR = "---"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def status_url(author: str, tweet_id: str) -> str:
    return f"{STATUS_URL_BASE}/{author}/status/{tweet_id}"


def format_post_date(created_at: str | None, now: datetime | None = None) -> str:
    """Reformat a post timestamp as `{year}-{Mon}-{day}`.

    Falls back to the ISO date of `now` (UTC by default) when the timestamp
    does not match.
    """
    match = POST_DATE_RE.search(created_at or "")
    if match:
        month, day, year = match.groups()
        return f"{year}-{month}-{day}"
    return (now or _utcnow()).date().isoformat()


def build_filename(
    created_at: str | None,
    author: str,
    tweet_id: str,
    now: datetime | None = None,
) -> str:
    """Derive the stable `{date}_{author}_{id}.md` filename of a save."""
    safe_author = _FILENAME_UNSAFE_RE.sub("_", author) or "unknown"
    return f"{format_post_date(created_at, now)}_{safe_author}_{tweet_id}.md"


def format_saved_at(now: datetime | None = None) -> str:
    """UTC timestamp with millisecond precision and a `Z` suffix."""
    moment = (now or _utcnow()).astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def assemble_body(blocks: Iterable[ContentBlock], media_urls: Mapping[str, str]) -> str:
    """Concatenate the Markdown fragments of all blocks, in order."""
    return "".join(render_block(block, media_urls) for block in blocks)


def render_article_body(raw: Any) -> str | None:
    """Convert an article's raw rich-text structure to a Markdown body.

    Returns None when the structure has no `content_state` or no `blocks`;
    callers fall back to the post's plain text in that case.
    """
    document = parse_document(raw)
    if document is None:
        return None
    media_urls = resolve_media(document.media_entities, document.entity_map)
    return assemble_body(document.blocks, media_urls)


def render_thread_body(tweets: Iterable[Tweet]) -> str:
    """Each post's text followed by a separator, in source order."""
    return "".join(f"{tweet.text}\n\n{SEPARATOR}\n\n" for tweet in tweets)


def build_header_fields(
    tweets: Sequence[Tweet],
    tweet_id: str,
    *,
    now: datetime | None = None,
) -> dict[str, str | None]:
    """Front-matter fields of a save, in their written order."""
    first = tweets[0]
    author = first.author.username
    article = first.article
    return {
        "author": f"@{author}",
        "author_name": first.author.name,
        "tweet_id": tweet_id,
        "url": status_url(author, tweet_id),
        "type": "article" if article is not None else "thread",
        "title": article.title if article is not None else None,
        "cover_image": article.cover_image if article is not None else None,
        "saved_at": format_saved_at(now),
    }


def render_document(
    tweets: Sequence[Tweet],
    tweet_id: str,
    *,
    now: datetime | None = None,
) -> str:
    """Render the complete saved document for a thread or an article.

    Args:
        tweets: The article post alone, or the author's posts of a thread.
        tweet_id: Id the save was requested for.
        now: Clock override for `saved_at` and the date fallback.

    Raises:
        ValueError: If `tweets` is empty.
    """
    if not tweets:
        raise ValueError("At least one post is required")

    first = tweets[0]
    author = first.author.username
    article = first.article
    date_str = format_post_date(first.created_at, now)
    url = status_url(author, tweet_id)

    parts = [render_frontmatter(build_header_fields(tweets, tweet_id, now=now)), "\n"]

    if article is not None:
        if article.title:
            parts.append(f"# {article.title}\n\n")
    else:
        parts.append(f"# Thread by @{author}\n\n")

    parts.append(f"*{first.author.name}* · [{date_str}]({url})\n\n")

    if article is not None and article.cover_image:
        parts.append(f"![]({article.cover_image})\n\n")

    parts.append(f"{SEPARATOR}\n\n")

    if article is not None:
        body = render_article_body(article.raw)
        if not body:
            logger.info(f"No rich-text content for {tweet_id}, using post text")
            body = f"{first.text}\n"
        parts.append(body)
    else:
        parts.append(render_thread_body(tweets))

    return "".join(parts)
