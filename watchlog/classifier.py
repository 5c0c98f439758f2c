"""
Title classifier - season and part/cour detection from catalog titles

Every function in this module is a pure function of its arguments.
"""

import re

from .models import SeasonInfo

_SEASON_PATTERNS = (
    re.compile(r"season\s*(\d+)", re.IGNORECASE),
    re.compile(r"(\d+)(?:st|nd|rd|th)\s*season", re.IGNORECASE),
)

_PART_PATTERNS = (
    re.compile(r"part\s*(\d+)", re.IGNORECASE),
    re.compile(r"cour\s*(\d+)", re.IGNORECASE),
    re.compile(r"(\d+)(?:nd|rd|th)\s*(?:cour|part)", re.IGNORECASE),
)

# Markers meaning "same season, next block of episodes"
CONTINUATION_MARKERS = (
    "part 2",
    "part 3",
    "part 4",
    "cour 2",
    "cour 3",
    "2nd cour",
    "second cour",
    "second part",
)

# Markers meaning "a new season"
NEW_SEASON_MARKERS = (
    "season 2",
    "season 3",
    "season 4",
    "2nd season",
    "3rd season",
    "4th season",
    "second season",
    "third season",
)

_BARE_MARKER = re.compile(r"^(part|cour|season)\s*\d+$", re.IGNORECASE)

_STRIP_PATTERNS = (
    re.compile(r"\b\d+(?:st|nd|rd|th)\s*(?:season|cour|part)\b", re.IGNORECASE),
    re.compile(r"\b(?:season|part|cour)\s*\d+\b", re.IGNORECASE),
    re.compile(r"\b(?:second|third|fourth)\s+(?:season|cour|part)\b", re.IGNORECASE),
)


def _first_number(patterns, title: str) -> int | None:
    for pattern in patterns:
        match = pattern.search(title)
        if match:
            return int(match.group(1))
    return None


def extract_season_info(title: str) -> SeasonInfo:
    """
    Extract an explicit season number and part/cour number from a title

    "Season 2", "2nd Season" and "Season 3 Part 2" all carry a season
    number; "Part 2", "Cour 2" and "2nd Cour" carry a part number.
    The first matching pattern wins.
    """
    return SeasonInfo(
        season=_first_number(_SEASON_PATTERNS, title),
        part=_first_number(_PART_PATTERNS, title),
    )


def is_new_season(title: str, base_title: str) -> bool:
    """
    Decide whether a title is a new season rather than a part/cour

    Explicit continuation markers win over season markers. When neither is
    present this falls back to a heuristic: whatever is left of the title once
    the base title is removed must be something other than a bare
    "part/cour/season N" token. Without a base-title remainder the answer is
    False. The fallback can misjudge distinct shows with similar titles.
    """
    lower_title = title.lower()

    if any(marker in lower_title for marker in CONTINUATION_MARKERS):
        return False

    if any(marker in lower_title for marker in NEW_SEASON_MARKERS):
        return True

    remainder = lower_title.replace(base_title.lower(), "").strip()
    if remainder and not _BARE_MARKER.match(remainder):
        return True

    return False


def strip_season_markers(title: str) -> str:
    """Remove season/part/cour markers, leaving the base show title"""
    base = title
    for pattern in _STRIP_PATTERNS:
        base = pattern.sub("", base)
    # Drop separators left dangling at the end ("Show: " -> "Show")
    base = re.sub(r"\s+", " ", base)
    return base.strip(" :-–") or title.strip()
