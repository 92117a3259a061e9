"""Save pipeline: post URL -> fetched thread or article -> Markdown on disk."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from app.core.markdown import build_filename, render_document
from app.core.storage import ThreadStore
from app.providers.bird import BirdClient
from app.providers.content_types import Tweet

logger = logging.getLogger(__name__)

TWEET_ID_RE = re.compile(r"(\d{15,})")


class CaptureError(Exception):
    """Base exception for save requests that cannot be processed."""


class InvalidTweetUrlError(CaptureError):
    """The URL carries no post id."""


@dataclass(frozen=True)
class SaveResult:
    """Outcome of a save, returned to the caller for its own response."""

    success: bool
    filename: str
    author: str
    author_name: str
    tweet_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "filename": self.filename,
            "author": self.author,
            "authorName": self.author_name,
            "tweetCount": self.tweet_count,
        }


def extract_tweet_id(url: str) -> str:
    """Pull the numeric post id (15+ digits) out of a status URL.

    Raises:
        InvalidTweetUrlError: If the URL has no such id.
    """
    match = TWEET_ID_RE.search(url or "")
    if not match:
        raise InvalidTweetUrlError("Invalid Twitter URL")
    return match.group(1)


def filter_author_posts(tweets: list[Tweet]) -> list[Tweet]:
    """Keep only the posts written by the thread's first author (drops replies)."""
    if not tweets:
        return []
    author_id = tweets[0].author_id
    return [t for t in tweets if t.author_id == author_id]


def fetch_posts(client: BirdClient, tweet_id: str) -> list[Tweet]:
    """Fetch the posts to render for a post id.

    An article is rendered on its own; anything else pulls the full thread.

    Raises:
        TweetNotFoundError: If the post cannot be found.
        BirdError: On any other bird failure.
    """
    first = client.read(tweet_id)
    if first.is_article:
        return [first]

    tweets = filter_author_posts(client.thread(tweet_id))
    logger.info(f"Thread {tweet_id}: {len(tweets)} posts by @{tweets[0].author.username}")
    return tweets


def save_thread(
    url: str,
    *,
    client: BirdClient,
    store: ThreadStore,
    now: datetime | None = None,
) -> SaveResult:
    """Fetch the post behind `url`, render it and write it to the store.

    Raises:
        InvalidTweetUrlError: If `url` has no post id.
        TweetNotFoundError: If the post cannot be found.
        BirdError: On any other bird failure.
        OSError: If the document cannot be written.
    """
    tweet_id = extract_tweet_id(url)
    tweets = fetch_posts(client, tweet_id)

    first = tweets[0]
    filename = build_filename(first.created_at, first.author.username, tweet_id, now)
    content = render_document(tweets, tweet_id, now=now)
    store.save(filename, content)

    return SaveResult(
        success=True,
        filename=filename,
        author=first.author.username,
        author_name=first.author.name,
        tweet_count=len(tweets),
    )
