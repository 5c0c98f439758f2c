"""
Watchlist operations - adding shows and recording progress
"""

import logging
from typing import Any, Dict, List

from .classifier import strip_season_markers
from .exceptions import ValidationError
from .models import WATCH_STATUSES, ResolutionResult, TrackedSeason
from .storage import WatchlistStore

logger = logging.getLogger(__name__)


def _validate_common(status: str, rating: int | None):
    if status not in WATCH_STATUSES:
        raise ValidationError(
            f"Invalid status '{status}'. Valid statuses: {', '.join(WATCH_STATUSES)}"
        )
    if rating is not None and not 1 <= rating <= 10:
        raise ValidationError("Rating must be between 1 and 10")


def _validate_progress(watched: int, total: int | None, label: str):
    if watched < 0:
        raise ValidationError(f"{label}: episodes watched cannot be negative")
    if total is not None and watched > total:
        raise ValidationError(
            f"{label}: episodes watched ({watched}) exceeds episode count ({total})"
        )


def build_tracked_rows(
    user_id: str,
    result: ResolutionResult,
    status: str = "watching",
    rating: int | None = None,
    notes: str | None = None,
) -> List[Dict[str, Any]]:
    """
    Validate a resolution result and turn its selected seasons into rows

    Raises:
        ValidationError: if nothing is selected or a field is invalid
    """
    selected = result.selected_seasons
    if not selected:
        raise ValidationError("Please select at least one season to add")

    _validate_common(status, rating)

    rows = []
    for season in selected:
        _validate_progress(
            season.episodes_watched, season.episodes, f"Season {season.season_number}"
        )
        rows.append(
            {
                "user_id": user_id,
                "title": result.title,
                "season_number": season.season_number,
                "mal_id": season.mal_id,
                "episodes_watched": season.episodes_watched,
                "total_episodes": season.episodes,
                "status": status,
                "rating": rating,
                "notes": notes,
                "cover_image": result.cover_image,
            }
        )
    return rows


def add_show(
    store: WatchlistStore,
    user_id: str,
    result: ResolutionResult,
    status: str = "watching",
    rating: int | None = None,
    notes: str | None = None,
) -> List[TrackedSeason]:
    """
    Track the selected seasons of a resolved show

    Everything is validated before the first write, so a rejected show
    leaves the watchlist untouched.
    """
    rows = build_tracked_rows(user_id, result, status, rating, notes)
    created = store.create_entries(rows)
    logger.info(f"Added {len(created)} season(s) of {result.title} for {user_id}")
    return created


def add_manual_show(
    store: WatchlistStore,
    user_id: str,
    title: str,
    number_of_seasons: int = 1,
    total_episodes: int | None = None,
    episodes_watched: int = 0,
    status: str = "watching",
    rating: int | None = None,
    notes: str | None = None,
    cover_image: str | None = None,
) -> List[TrackedSeason]:
    """
    Track a show without catalog data, creating seasons 1..N

    Season and part markers are stripped from the title ("Show Season 2"
    is stored as "Show") so the rows group with the rest of the show.
    """
    if not title or not title.strip():
        raise ValidationError("Title is required")
    if number_of_seasons < 1:
        raise ValidationError("Number of seasons must be at least 1")
    _validate_common(status, rating)
    _validate_progress(episodes_watched, total_episodes, title)
    base_title = strip_season_markers(title.strip())

    rows = [
        {
            "user_id": user_id,
            "title": base_title,
            "season_number": number,
            "mal_id": None,
            "episodes_watched": episodes_watched,
            "total_episodes": total_episodes,
            "status": status,
            "rating": rating,
            "notes": notes,
            "cover_image": cover_image,
        }
        for number in range(1, number_of_seasons + 1)
    ]
    return store.create_entries(rows)


def update_progress(
    store: WatchlistStore, entry_id: str, episodes_watched: int
) -> TrackedSeason:
    """Record watched episodes, completing the season when all are watched"""
    entry = store.get_entry(entry_id)
    if entry is None:
        raise ValidationError(f"No tracked season with id {entry_id}")

    _validate_progress(
        episodes_watched, entry.total_episodes, f"{entry.title} S{entry.season_number}"
    )

    fields: Dict[str, Any] = {"episodes_watched": episodes_watched}
    if entry.total_episodes and episodes_watched == entry.total_episodes:
        fields["status"] = "completed"
    elif entry.status == "completed" and episodes_watched < (entry.total_episodes or 0):
        fields["status"] = "watching"

    updated = store.update_entry(entry_id, **fields)
    if updated is None:
        raise ValidationError(f"No tracked season with id {entry_id}")
    return updated


def edit_entry(
    store: WatchlistStore,
    entry_id: str,
    status: str | None = None,
    rating: int | None = None,
    notes: str | None = None,
) -> TrackedSeason:
    """
    Change the status, rating or notes of a tracked season

    Only the given fields are changed.

    Raises:
        ValidationError: if nothing is given, a value is invalid or the
            season does not exist
    """
    fields: Dict[str, Any] = {}
    if status is not None:
        fields["status"] = status
    if rating is not None:
        fields["rating"] = rating
    if notes is not None:
        fields["notes"] = notes
    if not fields:
        raise ValidationError("Nothing to change: give a status, rating or notes")

    entry = store.get_entry(entry_id)
    if entry is None:
        raise ValidationError(f"No tracked season with id {entry_id}")
    _validate_common(fields.get("status", entry.status), rating)

    updated = store.update_entry(entry_id, **fields)
    if updated is None:
        raise ValidationError(f"No tracked season with id {entry_id}")
    logger.info(f"Edited {updated.title} S{updated.season_number}: {', '.join(fields)}")
    return updated


def remove_entry(store: WatchlistStore, entry_id: str) -> TrackedSeason:
    """Stop tracking a season; its notifications are removed with it"""
    entry = store.get_entry(entry_id)
    if entry is None or not store.delete_entry(entry_id):
        raise ValidationError(f"No tracked season with id {entry_id}")
    logger.info(f"Removed {entry.title} S{entry.season_number}")
    return entry
