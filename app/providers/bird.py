"""Client for the `bird` CLI, which reads posts and threads from X as JSON."""

from __future__ import annotations

import json
import logging
import subprocess
from typing import Any

from app.core.settings import Settings
from app.providers.content_types import Tweet, parse_tweet

logger = logging.getLogger(__name__)


class BirdError(Exception):
    """Base exception for bird invocation errors."""


class TweetNotFoundError(BirdError):
    """The requested post does not exist or could not be read."""


class BirdClient:
    """Runs `bird read` / `bird thread` and parses their JSON output."""

    def __init__(
        self,
        bird_bin: str = "bird",
        *,
        timeout: float = 30.0,
        env: dict[str, str] | None = None,
    ) -> None:
        self._bird_bin = bird_bin
        self._timeout = timeout
        self._env = env

    @classmethod
    def from_settings(cls, settings: Settings) -> "BirdClient":
        return cls(
            settings.bird_bin,
            timeout=float(settings.bird_timeout),
            env=settings.bird_env(),
        )

    def _run(self, command: str, tweet_id: str) -> Any:
        """Run one bird subcommand and return its decoded JSON output.

        Raises:
            BirdError: If bird is missing, times out, fails or prints non-JSON.
        """
        args = [self._bird_bin, command, tweet_id, "--json"]
        try:
            proc = subprocess.run(
                args,
                env=self._env,
                capture_output=True,
                text=True,
                timeout=self._timeout,
            )
        except FileNotFoundError as e:
            raise BirdError(f"bird executable not found: {self._bird_bin}") from e
        except subprocess.TimeoutExpired as e:
            raise BirdError(f"bird {command} timed out after {self._timeout:.0f}s") from e

        if proc.returncode != 0:
            stderr = (proc.stderr or "").strip()
            logger.warning(f"bird {command} {tweet_id} exited with {proc.returncode}: {stderr}")
            raise BirdError(stderr or f"bird {command} exited with status {proc.returncode}")

        try:
            return json.loads(proc.stdout)
        except json.JSONDecodeError as e:
            raise BirdError(f"bird {command} returned invalid JSON: {e}") from e

    def read(self, tweet_id: str) -> Tweet:
        """Fetch a single post.

        Raises:
            TweetNotFoundError: If bird returns nothing for the id.
        """
        tweet = parse_tweet(self._run("read", tweet_id), default_id=tweet_id)
        if tweet is None:
            raise TweetNotFoundError(f"Tweet {tweet_id} not found")
        return tweet

    def thread(self, tweet_id: str) -> list[Tweet]:
        """Fetch the whole conversation containing a post, in order."""
        data = self._run("thread", tweet_id)
        if not isinstance(data, list):
            data = [data] if isinstance(data, dict) else []

        tweets = [t for t in (parse_tweet(item) for item in data) if t is not None]
        if not tweets:
            raise TweetNotFoundError(f"Thread {tweet_id} not found")
        return tweets
