"""OMDb rating lookups and payload parsing."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Optional

import requests

from core.config import OMDB_BASE_URL, OMDB_TIMEOUT_SECONDS
from core.http import request_json_with_retry
from core.ratings_models import RatingRecord

logger = logging.getLogger(__name__)

_ROTTEN_LABEL = "rotten"
_METACRITIC_LABEL = "metacritic"


class OMDbRatingProvider:
    def __init__(
        self,
        base_url: str = OMDB_BASE_URL,
        timeout_seconds: float = OMDB_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url
        self.timeout_seconds = timeout_seconds
        self.session = session

    def lookup(
        self,
        external_id: str,
        api_key: str,
        season: Optional[int] = None,
        episode: Optional[int] = None,
    ) -> Optional[Dict[str, Any]]:
        """Fetch the OMDb payload for a title, or for one episode when season/episode are set.

        Returns ``None`` when OMDb answers ``Response: False`` (unknown id,
        episode missing, ...). Transport errors propagate.
        """
        params: Dict[str, object] = {"i": external_id, "apikey": api_key, "r": "json"}
        if season is not None and episode is not None:
            params["Season"] = str(season)
            params["Episode"] = str(episode)
        payload = request_json_with_retry(
            self.base_url,
            params=params,
            timeout_seconds=self.timeout_seconds,
            source="omdb",
            session=self.session,
        )
        if str(payload.get("Response", "")).strip().lower() != "true":
            logger.info("OMDb has no data for %s: %s", external_id, payload.get("Error") or "no response flag")
            return None
        return payload


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    if not text or text.upper() == "N/A":
        return None
    return text


def _score_by_label(ratings: Any, label: str) -> Optional[str]:
    if not isinstance(ratings, Iterable) or isinstance(ratings, (str, bytes, dict)):
        return None
    for item in ratings:
        if not isinstance(item, dict):
            continue
        source = str(item.get("Source") or "").lower()
        if label in source:
            return _clean(item.get("Value"))
    return None


def parse_rating_payload(
    payload: Dict[str, Any],
    external_id: Optional[str],
    fetched_at: int,
) -> RatingRecord:
    ratings = payload.get("Ratings")
    metascore = _clean(payload.get("Metascore"))
    if metascore is None:
        # Ratings lists Metacritic as "73/100".
        metacritic = _score_by_label(ratings, _METACRITIC_LABEL)
        if metacritic:
            metascore = metacritic.split("/", 1)[0].strip() or None
    return RatingRecord(
        fetched_at=fetched_at,
        external_id=external_id,
        primary_rating=_clean(payload.get("imdbRating")),
        vote_count=_clean(payload.get("imdbVotes")),
        secondary_score=metascore,
        tertiary_score=_score_by_label(ratings, _ROTTEN_LABEL),
    )


__all__ = ["OMDbRatingProvider", "parse_rating_payload"]
