"""
Data models for watchlog
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List

# Relation kinds followed when walking a franchise
TRAVERSED_RELATIONS = ("Sequel", "Prequel", "Season")

WATCH_STATUSES = ("watching", "completed", "plan_to_watch", "on_hold", "dropped")

EPISODE_RELEASE = "episode_release"
SEASON_RELEASE = "season_release"


@dataclass
class RelationTarget:
    """One catalog entry referenced by a relation"""

    mal_id: int | None
    type: str | None = None
    name: str | None = None


@dataclass
class Relation:
    """A relation kind and the entries it points at"""

    kind: str
    targets: List[RelationTarget] = field(default_factory=list)

    @property
    def is_traversable(self) -> bool:
        return self.kind in TRAVERSED_RELATIONS


@dataclass
class AnimeRecord:
    """Represents an anime entry in the external catalog"""

    mal_id: int
    title: str
    title_english: str | None = None
    episodes: int | None = None
    aired_from: str | None = None
    media_type: str | None = None
    relations: List[Relation] = field(default_factory=list)
    image_url: str | None = None
    score: float | None = None

    @property
    def display_title(self) -> str:
        return self.title_english or self.title

    def related_ids(self) -> Iterator[int]:
        """Yield ids referenced through Sequel/Prequel/Season relations"""
        for relation in self.relations:
            if not relation.is_traversable:
                continue
            for target in relation.targets:
                if target.mal_id is not None:
                    yield target.mal_id


@dataclass
class SeasonInfo:
    """Season and part numbers extracted from a title"""

    season: int | None = None
    part: int | None = None

    @property
    def is_part(self) -> bool:
        return self.part is not None


@dataclass
class SeasonCandidate:
    """Normalized view of an AnimeRecord used for ordering"""

    mal_id: int
    title: str
    episodes: int | None
    aired_from: str | None
    media_type: str | None
    season_info: SeasonInfo


@dataclass
class SeasonEntry:
    """A numbered season offered to the user for tracking"""

    mal_id: int | None
    season_number: int
    title: str
    episodes: int | None
    selected: bool = True
    episodes_watched: int = 0


class ResolutionState(str, Enum):
    """Lifecycle of a single season resolution run"""

    IDLE = "idle"
    WALKING = "walking"
    ASSEMBLING = "assembling"
    DONE = "done"
    FALLBACK = "fallback"


@dataclass
class ResolutionResult:
    """Outcome of resolving a selected title into seasons"""

    seed_id: int
    title: str
    seasons: List[SeasonEntry]
    state: ResolutionState
    cover_image: str | None = None
    score: float | None = None
    total_episodes: int | None = None

    @property
    def selected_seasons(self) -> List[SeasonEntry]:
        return [s for s in self.seasons if s.selected]


@dataclass
class TrackedSeason:
    """Represents one tracked season row in the watchlist"""

    id: str
    user_id: str
    title: str
    season_number: int
    mal_id: int | None = None
    episodes_watched: int = 0
    total_episodes: int | None = None
    status: str = "watching"
    rating: int | None = None
    notes: str | None = None
    cover_image: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


@dataclass
class Notification:
    """Release notification stored for a user"""

    id: str
    user_id: str
    anime_title: str
    notification_type: str
    message: str
    anime_id: str | None = None
    season_number: int | None = None
    episode_number: int | None = None
    read: bool = False
    created_at: str | None = None


@dataclass
class UpdateReport:
    """Update check result"""

    episode_updates: int = 0
    new_seasons: int = 0
    notifications: List[dict] = field(default_factory=list)
    failed_shows: List[str] = field(default_factory=list)
