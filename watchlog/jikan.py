"""
Jikan (MyAnimeList) API client
"""

import logging
from typing import Any, List

import requests

from .base_client import BaseCatalogClient
from .models import AnimeRecord, Relation, RelationTarget

logger = logging.getLogger(__name__)

DEFAULT_JIKAN_URL = "https://api.jikan.moe/v4"


def _optional_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def parse_relations(raw_relations: Any) -> List[Relation]:
    """Parse the relations array of a full anime payload"""
    relations = []
    if not isinstance(raw_relations, list):
        return relations

    for raw in raw_relations:
        if not isinstance(raw, dict):
            continue
        targets = []
        # A relation without an entry list contributes nothing
        for entry in raw.get("entry") or []:
            if not isinstance(entry, dict):
                continue
            targets.append(
                RelationTarget(
                    mal_id=_optional_int(entry.get("mal_id")),
                    type=entry.get("type"),
                    name=entry.get("name"),
                )
            )
        relations.append(Relation(kind=raw.get("relation") or "Other", targets=targets))

    return relations


def parse_anime_record(data: dict) -> AnimeRecord:
    """
    Build an AnimeRecord from a Jikan anime payload

    Optional fields (episodes, aired dates, English title, relations) may be
    null or missing.

    Raises:
        ValueError: if the payload has no usable id or title
    """
    mal_id = _optional_int(data.get("mal_id"))
    title = data.get("title") or data.get("title_english")
    if mal_id is None or not title:
        raise ValueError("Anime payload is missing mal_id or title")

    aired = data.get("aired") or {}
    aired_from = aired.get("from") if isinstance(aired, dict) else None
    images = (data.get("images") or {}).get("jpg") or {}
    score = data.get("score")

    return AnimeRecord(
        mal_id=mal_id,
        title=title,
        title_english=data.get("title_english"),
        episodes=_optional_int(data.get("episodes")),
        aired_from=aired_from if isinstance(aired_from, str) else None,
        media_type=data.get("type"),
        relations=parse_relations(data.get("relations")),
        image_url=images.get("large_image_url") or images.get("image_url"),
        score=float(score) if isinstance(score, (int, float)) else None,
    )


class JikanClient(BaseCatalogClient[AnimeRecord]):
    """Client to fetch anime metadata from the Jikan API"""

    def __init__(self, url: str = DEFAULT_JIKAN_URL, sequencer=None, timeout: float = 10):
        super().__init__(url, sequencer=sequencer, timeout=timeout)

    def fetch(self, item_id: int) -> AnimeRecord | None:
        """
        Fetch one anime with its relations

        Any lookup failure (network error, timeout, not found, malformed
        payload) is logged and returned as None. Only RunCancelled from the
        sequencer is raised.

        Args:
            item_id: MyAnimeList id

        Returns:
            AnimeRecord, or None if nothing could be fetched
        """
        try:
            payload = self._get(f"anime/{item_id}/full")
        except requests.exceptions.RequestException as e:
            logger.warning(f"Failed to fetch anime {item_id}: {e}")
            return None
        except ValueError as e:
            logger.warning(f"Invalid JSON for anime {item_id}: {e}")
            return None

        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, dict):
            logger.warning(f"No data returned for anime {item_id}")
            return None

        try:
            return parse_anime_record(data)
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning(f"Malformed payload for anime {item_id}: {e}")
            return None

    def search(self, query: str, limit: int = 10) -> List[AnimeRecord]:
        """Search the catalog by title"""
        if not query.strip():
            return []

        try:
            payload = self._get("anime", params={"q": query, "limit": limit})
        except requests.exceptions.RequestException as e:
            logger.error(f"Error searching Jikan for '{query}': {e}")
            return []
        except ValueError as e:
            logger.error(f"Invalid JSON searching Jikan for '{query}': {e}")
            return []

        items = payload.get("data") if isinstance(payload, dict) else None
        results = []
        for item in items or []:
            try:
                results.append(parse_anime_record(item))
            except (ValueError, TypeError, AttributeError) as e:
                logger.debug(f"Skipping malformed search result: {e}")

        return results
