"""
Season assembler - turns a franchise's records into numbered seasons
"""

import logging
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Tuple

from .classifier import extract_season_info
from .models import AnimeRecord, SeasonCandidate, SeasonEntry

logger = logging.getLogger(__name__)


def parse_air_date(value: str | None) -> float:
    """Return the air date as a POSIX timestamp, or 0.0 if absent/unparsable"""
    if not value:
        return 0.0
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, TypeError, ValueError):
        logger.debug(f"Unparsable air date: {value!r}")
        return 0.0
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


def to_candidate(record: AnimeRecord) -> SeasonCandidate:
    title = record.display_title
    return SeasonCandidate(
        mal_id=record.mal_id,
        title=title,
        episodes=record.episodes,
        aired_from=record.aired_from,
        media_type=record.media_type,
        season_info=extract_season_info(title),
    )


def is_season_candidate(candidate: SeasonCandidate) -> bool:
    """Movies and single-episode entries without a season marker are not seasons"""
    if candidate.media_type == "Movie":
        return False
    if candidate.episodes == 1 and candidate.season_info.season is None:
        return False
    return True


def sort_key(candidate: SeasonCandidate) -> Tuple[float, str]:
    return parse_air_date(candidate.aired_from), candidate.title.casefold()


def assemble(records: Iterable[AnimeRecord], seed_title: str) -> List[SeasonEntry]:
    """
    Order records chronologically and assign sequential season numbers

    Records whose titles carry the same extracted season number share one
    assigned number (the later ones are parts/cours of that season). Records
    without a season number each get the next free number.

    Args:
        records: Records collected by the relation walk
        seed_title: Title shown for every season of the show

    Returns:
        SeasonEntry list in chronological order, numbered from 1
    """
    candidates = [to_candidate(r) for r in records]
    kept = [c for c in candidates if is_season_candidate(c)]
    dropped = len(candidates) - len(kept)
    if dropped:
        logger.debug(f"Dropped {dropped} movie/special entries")

    kept.sort(key=sort_key)

    season_map: Dict[int, int] = {}
    next_number = 1
    entries = []

    for candidate in kept:
        extracted = candidate.season_info.season
        if extracted is not None and extracted in season_map:
            assigned = season_map[extracted]
        else:
            assigned = next_number
            next_number += 1
            if extracted is not None:
                season_map[extracted] = assigned

        entries.append(
            SeasonEntry(
                mal_id=candidate.mal_id,
                season_number=assigned,
                title=seed_title,
                episodes=candidate.episodes,
                selected=True,
                episodes_watched=candidate.episodes or 0,
            )
        )

    return entries
