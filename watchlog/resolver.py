"""
Season resolution run: walk the relation graph, then assemble seasons
"""

import logging

from .assembler import assemble
from .exceptions import RunCancelled
from .models import AnimeRecord, ResolutionResult, ResolutionState, SeasonEntry
from .relations import MetadataFetcher, RelationWalker

logger = logging.getLogger(__name__)


class SeasonResolver:
    """
    Resolves a selected catalog title into numbered seasons

    One resolver instance handles one run at a time; the walker cache and the
    state belong to that run only.
    """

    def __init__(self, fetcher: MetadataFetcher):
        self.fetcher = fetcher
        self.state = ResolutionState.IDLE

    def resolve(self, seed: AnimeRecord) -> ResolutionResult:
        """
        Resolve the seasons of the show the user picked

        Args:
            seed: The record the user selected (usually a search result)

        Returns:
            ResolutionResult in state DONE, or FALLBACK with a single season
            when the seed itself could not be fetched or assembled

        Raises:
            RunCancelled: if the run was abandoned; nothing is returned
        """
        seed_title = seed.display_title
        self.state = ResolutionState.WALKING
        logger.info(f"Resolving seasons for {seed_title} (MAL {seed.mal_id})")

        walker = RelationWalker(self.fetcher)
        try:
            records = walker.walk(seed.mal_id)
        except RunCancelled:
            self.state = ResolutionState.IDLE
            logger.info(f"Season resolution for {seed_title} cancelled")
            raise

        fetched_seed = walker.last_cache.get(seed.mal_id)
        if fetched_seed is None:
            logger.warning(
                f"Could not fetch details for {seed_title}, using basic data"
            )
            return self._fallback(seed)

        self.state = ResolutionState.ASSEMBLING
        try:
            seasons = assemble(records, seed_title)
        except Exception as e:
            logger.warning(f"Season assembly failed for {seed_title}: {e}")
            return self._fallback(seed)

        if not seasons:
            logger.info(f"No season entries found for {seed_title}, using basic data")
            return self._fallback(seed)

        self.state = ResolutionState.DONE
        logger.info(f"Found {len(seasons)} season(s) for {seed_title}")
        return ResolutionResult(
            seed_id=seed.mal_id,
            title=seed_title,
            seasons=seasons,
            state=self.state,
            cover_image=seed.image_url or fetched_seed.image_url,
            score=seed.score if seed.score is not None else fetched_seed.score,
            total_episodes=seed.episodes,
        )

    def _fallback(self, seed: AnimeRecord) -> ResolutionResult:
        self.state = ResolutionState.FALLBACK
        season = SeasonEntry(
            mal_id=seed.mal_id,
            season_number=1,
            title=seed.display_title,
            episodes=seed.episodes,
            selected=True,
            episodes_watched=seed.episodes or 0,
        )
        return ResolutionResult(
            seed_id=seed.mal_id,
            title=seed.display_title,
            seasons=[season],
            state=self.state,
            cover_image=seed.image_url,
            score=seed.score,
            total_episodes=seed.episodes,
        )
