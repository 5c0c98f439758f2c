"""
Update checker - detects new episodes and new sequel seasons of tracked shows
"""

import logging
from typing import Any, Dict, List

from .assembler import sort_key, to_candidate
from .classifier import extract_season_info, is_new_season
from .exceptions import RunCancelled, StorageError
from .models import (
    EPISODE_RELEASE,
    SEASON_RELEASE,
    AnimeRecord,
    TrackedSeason,
    UpdateReport,
)
from .relations import MetadataFetcher, RelationWalker
from .storage import WatchlistStore

logger = logging.getLogger(__name__)

# Media types never offered as a new season
EXCLUDED_SEQUEL_TYPES = ("Movie", "OVA", "ONA")


def episode_release_message(title: str, season_number: int, episode_number: int) -> str:
    return f"{title} Season {season_number} Episode {episode_number} has been released!"


def season_release_message(title: str, season_number: int) -> str:
    return f"{title} Season {season_number} has been released!"


class UpdateChecker:
    """Re-checks tracked shows against the catalog"""

    def __init__(self, fetcher: MetadataFetcher, store: WatchlistStore):
        self.fetcher = fetcher
        self.store = store

    def check(self, user_id: str) -> UpdateReport:
        """
        Check every tracked show of a user for new episodes and seasons

        Nothing is written until every show has been checked. New episode
        counts, release notifications and stub rows for new seasons are then
        saved in one transaction, so an abandoned run leaves the watchlist as
        it was and the next run reports the same releases. A show that fails
        to check is logged and skipped.

        Raises:
            StorageError: if the database cannot be read or written
            RunCancelled: if the run was abandoned
        """
        report = UpdateReport()
        episode_counts: Dict[str, int] = {}
        new_rows: List[Dict[str, Any]] = []

        shows = self.store.list_entries_by_show_title(user_id)
        for title, seasons in shows.items():
            tracked = [s for s in seasons if s.mal_id is not None]
            if not tracked:
                continue

            logger.info(f"Checking updates for {title}")
            checkpoint = (
                len(report.notifications),
                report.episode_updates,
                report.new_seasons,
            )
            try:
                counts = self._check_episodes(title, tracked, report)
                rows = self._find_new_seasons(user_id, title, seasons, report)
            except (RunCancelled, StorageError):
                raise
            except Exception as e:
                logger.error(f"Error checking updates for {title}: {e}")
                # Drop whatever this show produced before failing
                del report.notifications[checkpoint[0] :]
                report.episode_updates, report.new_seasons = checkpoint[1:]
                report.failed_shows.append(title)
                continue

            episode_counts.update(counts)
            new_rows.extend(rows)

        if report.notifications or episode_counts or new_rows:
            self.store.save_update_results(
                user_id, report.notifications, episode_counts, new_rows
            )

        logger.info(
            f"Update check finished: {report.episode_updates} episode update(s), "
            f"{report.new_seasons} new season(s)"
        )
        return report

    def _check_episodes(
        self, title: str, seasons: List[TrackedSeason], report: UpdateReport
    ) -> Dict[str, int]:
        """Return the new episode count per tracked season id"""
        counts = {}
        for season in seasons:
            if season.total_episodes is None:
                continue

            record = self.fetcher.fetch(season.mal_id)
            if record is None or record.episodes is None:
                continue

            if record.episodes > season.total_episodes:
                logger.info(
                    f"{title} S{season.season_number}: "
                    f"{season.total_episodes} -> {record.episodes} episodes"
                )
                report.notifications.append(
                    {
                        "anime_id": season.id,
                        "anime_title": title,
                        "season_number": season.season_number,
                        "episode_number": record.episodes,
                        "notification_type": EPISODE_RELEASE,
                        "message": episode_release_message(
                            title, season.season_number, record.episodes
                        ),
                    }
                )
                counts[season.id] = record.episodes
                report.episode_updates += 1
        return counts

    def _find_new_seasons(
        self,
        user_id: str,
        title: str,
        seasons: List[TrackedSeason],
        report: UpdateReport,
    ) -> List[Dict[str, Any]]:
        tracked = sorted(
            (s for s in seasons if s.mal_id is not None), key=lambda s: s.season_number
        )
        first = tracked[0]
        known_ids = {s.mal_id for s in seasons if s.mal_id is not None}
        max_season = max(s.season_number for s in seasons)

        records = RelationWalker(self.fetcher).walk(first.mal_id)
        records.sort(key=lambda r: sort_key(to_candidate(r)))

        rows = []
        for record in records:
            if record.mal_id in known_ids:
                continue

            season_number = self._accept_new_season(record, title, max_season)
            if season_number is None:
                continue

            known_ids.add(record.mal_id)
            max_season = max(max_season, season_number)
            logger.info(f"New season found for {title}: Season {season_number}")

            report.notifications.append(
                {
                    "anime_id": first.id,
                    "anime_title": title,
                    "season_number": season_number,
                    "episode_number": 1,
                    "notification_type": SEASON_RELEASE,
                    "message": season_release_message(title, season_number),
                }
            )
            rows.append(
                {
                    "user_id": user_id,
                    "title": title,
                    "season_number": season_number,
                    "mal_id": record.mal_id,
                    "episodes_watched": 0,
                    "total_episodes": record.episodes,
                    "status": "watching",
                    "rating": None,
                    "notes": None,
                    "cover_image": record.image_url or first.cover_image,
                }
            )
            report.new_seasons += 1

        return rows

    @staticmethod
    def _accept_new_season(
        record: AnimeRecord, tracked_title: str, max_season: int
    ) -> int | None:
        """Return the season number to track the record under, or None"""
        if record.media_type in EXCLUDED_SEQUEL_TYPES:
            return None
        # Skip entries whose episode count is not published yet
        if not record.episodes:
            return None

        sequel_title = record.display_title
        extracted = extract_season_info(sequel_title).season
        if extracted is not None:
            return extracted if extracted > max_season else None

        if is_new_season(sequel_title, tracked_title):
            return max_season + 1
        return None
