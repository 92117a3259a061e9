"""Resolve media entities referenced by atomic blocks to image URLs."""

from __future__ import annotations

from typing import Iterable, Mapping

from app.providers.content_types import Entity, MediaItem

MEDIA_ENTITY_TYPE = "MEDIA"


def build_media_index(media_entities: Iterable[MediaItem]) -> dict[str, str]:
    """Map media id -> URL. Later duplicates win."""
    return {item.media_id: item.media_url for item in media_entities}


def resolve_media(
    media_entities: Iterable[MediaItem],
    entity_map: Mapping[str, Entity],
) -> dict[str, str]:
    """Map entity key -> media URL for every resolvable MEDIA entity.

    Only the first media id of each entity is considered. Entities whose
    media id has no matching media item are left out.
    """
    urls_by_media_id = build_media_index(media_entities)

    resolved: dict[str, str] = {}
    for key, entity in entity_map.items():
        if entity.type != MEDIA_ENTITY_TYPE or not entity.media_ids:
            continue
        url = urls_by_media_id.get(entity.media_ids[0])
        if url is not None:
            resolved[key] = url
    return resolved
