from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from app.core.frontmatter import parse_frontmatter
from app.core.settings import Settings

logger = logging.getLogger(__name__)

DOCUMENT_SUFFIX = ".md"


class StorageError(Exception):
    """Base exception for saved-thread storage errors."""


class InvalidFilenameError(StorageError):
    """Filename is not a plain `.md` name inside the threads directory."""


class ThreadNotFoundError(StorageError):
    """No saved thread with that filename."""


@dataclass(frozen=True)
class SavedThread:
    """A saved document as read back from disk."""

    filename: str
    meta: dict[str, str] = field(default_factory=dict)
    content: str = ""

    @property
    def saved_at(self) -> str:
        return self.meta.get("saved_at", "")

    def to_dict(self) -> dict[str, Any]:
        """Flatten to {filename, **meta, content} for JSON responses."""
        return {"filename": self.filename, **self.meta, "content": self.content}


def validate_filename(filename: str) -> str:
    """Reject anything that is not a bare `.md` filename."""
    if (
        not filename.endswith(DOCUMENT_SUFFIX)
        or ".." in filename
        or "/" in filename
        or "\\" in filename
        or filename.startswith(".")
    ):
        raise InvalidFilenameError(f"Invalid filename: {filename!r}")
    return filename


@dataclass
class ThreadStore:
    """Directory of saved Markdown documents."""

    root: Path

    def init(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)

    def path_for(self, filename: str) -> Path:
        return self.root / validate_filename(filename)

    def save(self, filename: str, content: str) -> Path:
        """Write a document atomically.

        The content goes to a unique temp file in the same directory which
        is then renamed over the target, so readers never see a partial
        `.md` file. Same-name saves are last-writer-wins.
        """
        path = self.path_for(filename)
        self.init()

        fd, temp_name = tempfile.mkstemp(dir=self.root, prefix=f".{filename}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_name, path)
        except BaseException:
            if os.path.exists(temp_name):
                os.unlink(temp_name)
            raise

        logger.info(f"Saved {filename} ({len(content)} chars)")
        return path

    def read(self, filename: str) -> SavedThread:
        path = self.path_for(filename)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise ThreadNotFoundError(f"File not found: {filename}") from e
        meta, content = parse_frontmatter(text)
        return SavedThread(filename=filename, meta=meta, content=content)

    def list_threads(self) -> list[SavedThread]:
        """All saved documents, newest `saved_at` first."""
        if not self.root.exists():
            return []

        threads = []
        for entry in self.root.iterdir():
            name = entry.name
            if not name.endswith(DOCUMENT_SUFFIX) or name.startswith(".") or not entry.is_file():
                continue
            try:
                threads.append(self.read(name))
            except ThreadNotFoundError:
                # deleted between iterdir() and read()
                continue
            except UnicodeDecodeError as e:
                logger.warning(f"Skipping {name}: not valid UTF-8 ({e})")
                continue

        threads.sort(key=lambda t: t.saved_at, reverse=True)
        return threads

    def delete(self, filename: str) -> None:
        path = self.path_for(filename)
        try:
            path.unlink()
        except FileNotFoundError as e:
            raise ThreadNotFoundError(f"File not found: {filename}") from e
        logger.info(f"Deleted {filename}")


_store: ThreadStore | None = None


def init_store(settings: Settings | None = None) -> ThreadStore:
    global _store
    s = settings or Settings.from_env()
    _store = ThreadStore(root=Path(s.threads_dir))
    _store.init()
    return _store


def get_store() -> ThreadStore:
    assert _store is not None, "Store not initialized"
    return _store
