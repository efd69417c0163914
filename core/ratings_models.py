"""Rating records, lookup subjects and cache key builders."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping, Optional

SUBJECT_MOVIE = "movie"
SUBJECT_SHOW = "show"
SUBJECT_TYPES = (SUBJECT_MOVIE, SUBJECT_SHOW)

# Field names of the persisted JSON object, shared with caches written by earlier clients.
_WIRE_FIELDS = {
    "external_id": "imdbId",
    "primary_rating": "imdbRating",
    "vote_count": "imdbVotes",
    "secondary_score": "metascore",
    "tertiary_score": "rottenTomatoes",
    "fetched_at": "fetchedAt",
}


@dataclass(frozen=True)
class RatingRecord:
    fetched_at: int
    external_id: Optional[str] = None
    primary_rating: Optional[str] = None
    vote_count: Optional[str] = None
    secondary_score: Optional[str] = None
    tertiary_score: Optional[str] = None

    @property
    def is_miss(self) -> bool:
        return not any(
            (self.primary_rating, self.vote_count, self.secondary_score, self.tertiary_score)
        )

    def to_dict(self) -> Dict[str, Any]:
        return {_WIRE_FIELDS[name]: value for name, value in asdict(self).items()}

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> Optional["RatingRecord"]:
        """Build a record from its persisted shape; ``None`` when ``fetchedAt`` is unusable."""
        if not isinstance(raw, Mapping):
            return None
        fetched_at = raw.get("fetchedAt")
        if isinstance(fetched_at, bool) or not isinstance(fetched_at, (int, float)):
            return None
        values: Dict[str, Any] = {"fetched_at": int(fetched_at)}
        for name, wire_name in _WIRE_FIELDS.items():
            if name == "fetched_at":
                continue
            value = raw.get(wire_name)
            values[name] = str(value) if value not in (None, "") else None
        return cls(**values)


def confirmed_miss(external_id: Optional[str], fetched_at: int) -> RatingRecord:
    return RatingRecord(fetched_at=fetched_at, external_id=external_id)


@dataclass(frozen=True)
class RatingSubject:
    """What to look up: a movie, a show, or one episode of a show.

    For episodes ``subject_type`` is ``show`` and ``subject_id`` is the show's
    TMDB id; ``external_id`` may carry an already known IMDb id of the show.
    """

    subject_type: str
    subject_id: int
    season: Optional[int] = None
    episode: Optional[int] = None
    external_id: Optional[str] = None

    def __post_init__(self) -> None:
        if self.subject_type not in SUBJECT_TYPES:
            raise ValueError(f"Unsupported subject type: {self.subject_type!r}")
        if (self.season is None) != (self.episode is None):
            raise ValueError("season and episode must be given together")

    @property
    def is_episode(self) -> bool:
        return self.season is not None


def subject_key(subject_type: str, subject_id: int) -> str:
    return f"{subject_type}:{subject_id}"


def episode_key(show_id: int, season: int, episode: int) -> str:
    return f"episode:{show_id}:{season}:{episode}"


def cache_key_for(subject: RatingSubject) -> str:
    if subject.is_episode:
        return episode_key(subject.subject_id, subject.season, subject.episode)
    return subject_key(subject.subject_type, subject.subject_id)


def normalize_subject_type(value: str) -> Optional[str]:
    """Map user/provider spellings (``tv``, ``series``, ``film``) onto the closed set."""
    text = (value or "").strip().lower()
    if text in ("movie", "movies", "film"):
        return SUBJECT_MOVIE
    if text in ("show", "shows", "tv", "series"):
        return SUBJECT_SHOW
    return None


RatingsMap = Dict[str, RatingRecord]


def ratings_map_to_json(ratings: Mapping[str, RatingRecord]) -> Dict[str, Dict[str, Any]]:
    return {key: record.to_dict() for key, record in ratings.items()}


def ratings_map_from_json(raw: Any) -> RatingsMap:
    """Decode a persisted map, skipping entries that cannot be read."""
    if not isinstance(raw, dict):
        return {}
    result: RatingsMap = {}
    for key, value in raw.items():
        if not isinstance(key, str):
            continue
        record = RatingRecord.from_dict(value) if isinstance(value, dict) else None
        if record is not None:
            result[key] = record
    return result


__all__ = [
    "SUBJECT_MOVIE",
    "SUBJECT_SHOW",
    "SUBJECT_TYPES",
    "RatingRecord",
    "RatingSubject",
    "RatingsMap",
    "confirmed_miss",
    "subject_key",
    "episode_key",
    "cache_key_for",
    "normalize_subject_type",
    "ratings_map_to_json",
    "ratings_map_from_json",
]
