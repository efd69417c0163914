"""TMDB external-id lookups (TMDB id -> IMDb id)."""

from __future__ import annotations

import logging
from typing import Dict, Optional

import requests

from core.config import TMDB_API_KEY, TMDB_BASE_URL, TMDB_TIMEOUT_SECONDS
from core.http import request_json_with_retry
from core.ratings_models import SUBJECT_MOVIE, SUBJECT_SHOW

logger = logging.getLogger(__name__)

_TMDB_MEDIA_PATHS = {SUBJECT_MOVIE: "movie", SUBJECT_SHOW: "tv"}


class TMDBExternalIdResolver:
    def __init__(
        self,
        api_key: str,
        base_url: str = TMDB_BASE_URL,
        timeout_seconds: float = TMDB_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.session = session

    @classmethod
    def from_config(cls) -> "TMDBExternalIdResolver":
        return cls(api_key=TMDB_API_KEY)

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def external_ids(self, subject_type: str, subject_id: int) -> Dict:
        media_path = _TMDB_MEDIA_PATHS.get(subject_type)
        if media_path is None:
            raise ValueError(f"Unsupported subject type: {subject_type!r}")
        return request_json_with_retry(
            f"{self.base_url}/{media_path}/{int(subject_id)}/external_ids",
            params={"api_key": self.api_key},
            timeout_seconds=self.timeout_seconds,
            source="tmdb",
            session=self.session,
        )

    def resolve(self, subject_type: str, subject_id: int) -> Optional[str]:
        """Return the IMDb id of a movie or show, ``None`` when TMDB has none.

        Transport and provider errors propagate to the caller.
        """
        if not self.enabled:
            return None
        payload = self.external_ids(subject_type, subject_id)
        imdb_id = str(payload.get("imdb_id") or "").strip()
        if not imdb_id.startswith("tt"):
            logger.debug("TMDB has no IMDb id for %s:%s", subject_type, subject_id)
            return None
        return imdb_id


__all__ = ["TMDBExternalIdResolver"]
