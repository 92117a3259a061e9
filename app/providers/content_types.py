"""Content types for posts, threads and rich-text articles.

The parsers here accept the loosely shaped JSON emitted by the fetch
collaborator and never raise on well-formed JSON of the wrong shape:
unusable entries are skipped, missing structure yields None.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class BlockType(str, Enum):
    """Block tags of the rich-text editor model. Unknown tags parse as UNSTYLED."""

    HEADER_ONE = "header-one"
    HEADER_TWO = "header-two"
    HEADER_THREE = "header-three"
    BLOCKQUOTE = "blockquote"
    UNORDERED_LIST_ITEM = "unordered-list-item"
    ORDERED_LIST_ITEM = "ordered-list-item"
    ATOMIC = "atomic"
    UNSTYLED = "unstyled"

    @classmethod
    def _missing_(cls, value: object) -> "BlockType":
        return cls.UNSTYLED


@dataclass(frozen=True)
class StyleRange:
    """Inline style over [offset, offset + length), offsets in UTF-16 code units."""

    offset: int
    length: int
    style: str


@dataclass(frozen=True)
class EntityRange:
    key: str


@dataclass(frozen=True)
class ContentBlock:
    type: BlockType
    text: str = ""
    inline_style_ranges: tuple[StyleRange, ...] = ()
    entity_ranges: tuple[EntityRange, ...] = ()


@dataclass(frozen=True)
class Entity:
    key: str
    type: str
    media_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class MediaItem:
    media_id: str
    media_url: str


@dataclass(frozen=True)
class Document:
    """A rich-text document: blocks plus the entity and media tables they reference."""

    blocks: tuple[ContentBlock, ...]
    entity_map: dict[str, Entity] = field(default_factory=dict)
    media_entities: tuple[MediaItem, ...] = ()


@dataclass(frozen=True)
class Author:
    username: str = "unknown"
    name: str = "Unknown"


@dataclass(frozen=True)
class ArticleInfo:
    """Article payload attached to a post."""

    title: str | None = None
    cover_image: str | None = None
    raw: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Tweet:
    """A single post as returned by the fetch collaborator."""

    id: str
    text: str = ""
    author_id: str | None = None
    created_at: str = ""
    author: Author = field(default_factory=Author)
    article: ArticleInfo | None = None

    @property
    def is_article(self) -> bool:
        return self.article is not None


def _as_int(value: Any) -> int | None:
    # bool is an int subclass but never a valid offset
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def _as_key(value: Any) -> str | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (str, int)):
        return str(value)
    return None


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _as_text(value: Any, default: str) -> str:
    return value if isinstance(value, str) and value else default


def parse_style_range(data: Any) -> StyleRange | None:
    if not isinstance(data, dict):
        return None
    offset = _as_int(data.get("offset"))
    length = _as_int(data.get("length"))
    style = data.get("style")
    if offset is None or length is None or not isinstance(style, str):
        return None
    return StyleRange(offset=offset, length=length, style=style)


def parse_block(data: Any) -> ContentBlock | None:
    """Convert one raw block dict, or None if it is not a dict."""
    if not isinstance(data, dict):
        return None

    text = data.get("text")
    if not isinstance(text, str):
        text = ""

    styles = []
    for item in _as_list(data.get("inlineStyleRanges")):
        style_range = parse_style_range(item)
        if style_range is not None:
            styles.append(style_range)

    entities = []
    for item in _as_list(data.get("entityRanges")):
        if isinstance(item, dict):
            key = _as_key(item.get("key"))
            if key is not None:
                entities.append(EntityRange(key=key))

    return ContentBlock(
        type=BlockType(data.get("type")),
        text=text,
        inline_style_ranges=tuple(styles),
        entity_ranges=tuple(entities),
    )


def _parse_entity(key: str, value: Any) -> Entity | None:
    if not isinstance(value, dict):
        return None
    entity_type = value.get("type")
    data = value.get("data")
    media_ids: list[str] = []
    if isinstance(data, dict):
        for item in _as_list(data.get("mediaItems")):
            if isinstance(item, dict):
                media_id = _as_key(item.get("mediaId", item.get("media_id")))
                if media_id is not None:
                    media_ids.append(media_id)
    return Entity(
        key=key,
        type=entity_type if isinstance(entity_type, str) else "",
        media_ids=tuple(media_ids),
    )


def parse_entity_map(data: Any) -> dict[str, Entity]:
    """Accept either [{key, value}, ...] or {key: value}."""
    if isinstance(data, dict):
        pairs = list(data.items())
    elif isinstance(data, list):
        pairs = [
            (item.get("key"), item.get("value"))
            for item in data
            if isinstance(item, dict)
        ]
    else:
        return {}

    entities: dict[str, Entity] = {}
    for raw_key, value in pairs:
        key = _as_key(raw_key)
        if key is None:
            continue
        entity = _parse_entity(key, value)
        if entity is not None:
            entities[key] = entity
    return entities


def parse_media_item(data: Any) -> MediaItem | None:
    if not isinstance(data, dict):
        return None
    media_id = _as_key(data.get("mediaId", data.get("media_id")))
    url = data.get("mediaUrl") or data.get("media_url")
    if not url:
        info = data.get("media_info")
        if isinstance(info, dict):
            url = info.get("original_img_url")
    if media_id is None or not isinstance(url, str) or not url:
        return None
    return MediaItem(media_id=media_id, media_url=url)


def parse_document(raw: Any) -> Document | None:
    """Build a Document from an article's raw structure.

    Returns None when `content_state` or its `blocks` list is missing.
    """
    if not isinstance(raw, dict):
        return None
    content_state = raw.get("content_state")
    if not isinstance(content_state, dict):
        return None
    raw_blocks = content_state.get("blocks")
    if not isinstance(raw_blocks, list):
        return None

    blocks = [b for b in (parse_block(item) for item in raw_blocks) if b is not None]
    media = [
        m for m in (parse_media_item(item) for item in _as_list(raw.get("media_entities")))
        if m is not None
    ]

    return Document(
        blocks=tuple(blocks),
        entity_map=parse_entity_map(content_state.get("entityMap")),
        media_entities=tuple(media),
    )


def _parse_cover_image(article: dict) -> str | None:
    cover = article.get("coverImage") or article.get("cover_image")
    if isinstance(cover, str) and cover:
        return cover
    media = article.get("cover_media")
    if isinstance(media, dict):
        info = media.get("media_info")
        if isinstance(info, dict):
            url = info.get("original_img_url")
            if isinstance(url, str) and url:
                return url
    return None


def parse_article(data: Any) -> ArticleInfo | None:
    """Convert the `article` payload of a post.

    The rich-text structure may sit on the article itself or under `raw`.
    """
    if not isinstance(data, dict):
        return None
    title = data.get("title")
    raw = data.get("raw") if isinstance(data.get("raw"), dict) else data
    return ArticleInfo(
        title=title if isinstance(title, str) and title else None,
        cover_image=_parse_cover_image(data),
        raw=raw,
    )


def parse_tweet(data: Any, default_id: str = "") -> Tweet | None:
    """Convert one post dict to a Tweet DTO, or None for null/non-dict input."""
    if not isinstance(data, dict):
        return None

    author_data = data.get("author")
    author = Author()
    if isinstance(author_data, dict):
        author = Author(
            username=_as_text(author_data.get("username"), "unknown"),
            name=_as_text(author_data.get("name"), "Unknown"),
        )

    text = data.get("text")
    created_at = data.get("createdAt")

    return Tweet(
        id=_as_key(data.get("id")) or default_id,
        text=text if isinstance(text, str) else "",
        author_id=_as_key(data.get("authorId")),
        created_at=created_at if isinstance(created_at, str) else "",
        author=author,
        article=parse_article(data.get("article")),
    )
