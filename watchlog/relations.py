"""
Relation graph walker - collects every entry of a franchise
"""

import logging
from collections import deque
from typing import Dict, List, Protocol

from .exceptions import RunCancelled
from .models import AnimeRecord

logger = logging.getLogger(__name__)


class MetadataFetcher(Protocol):
    def fetch(self, item_id: int) -> AnimeRecord | None: ...


class RelationWalker:
    """
    Breadth-first walk over Sequel/Prequel/Season relations

    Each id is fetched at most once per walk, so cyclic relation graphs
    terminate. A failed fetch still marks its id as visited and ends
    traversal along that branch.
    """

    def __init__(self, fetcher: MetadataFetcher):
        self.fetcher = fetcher
        self.last_cache: Dict[int, AnimeRecord] = {}
        self.last_visited: List[int] = []

    def walk(self, seed_id: int) -> List[AnimeRecord]:
        """
        Collect the seed and all entries reachable through tracked relations

        Args:
            seed_id: Catalog id the walk starts from

        Returns:
            One record per successfully fetched id, in visit order

        Raises:
            RunCancelled: if the run is cancelled between fetches
        """
        to_visit = deque([seed_id])
        queued = {seed_id}
        visited: set = set()
        order: List[int] = []
        cache: Dict[int, AnimeRecord] = {}

        while to_visit:
            current_id = to_visit.popleft()
            queued.discard(current_id)
            if current_id in visited:
                continue

            visited.add(current_id)
            order.append(current_id)
            record = self._fetch(current_id)
            if record is None:
                continue

            cache[current_id] = record
            for related_id in record.related_ids():
                if related_id in queued or related_id in visited:
                    continue
                to_visit.append(related_id)
                queued.add(related_id)

        logger.debug(
            f"Relation walk from {seed_id}: visited {len(visited)}, fetched {len(cache)}"
        )
        self.last_cache = cache
        self.last_visited = order
        return list(cache.values())

    def _fetch(self, item_id: int) -> AnimeRecord | None:
        try:
            return self.fetcher.fetch(item_id)
        except RunCancelled:
            raise
        except Exception as e:
            logger.warning(f"Skipping anime {item_id} during relation walk: {e}")
            return None
