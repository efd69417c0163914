"""Personal library: favorites, watchlist and the user's own 1-10 ratings."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional

from core.local_store import JsonFileStore
from core.ratings_models import SUBJECT_TYPES, subject_key

logger = logging.getLogger(__name__)

MIN_USER_RATING = 1
MAX_USER_RATING = 10


@dataclass(frozen=True)
class LibraryItem:
    media_type: str
    tmdb_id: int
    title: str = ""
    year: Optional[int] = None

    @property
    def key(self) -> str:
        return subject_key(self.media_type, self.tmdb_id)

    @classmethod
    def from_dict(cls, raw: Any) -> Optional["LibraryItem"]:
        if not isinstance(raw, dict):
            return None
        media_type = raw.get("media_type")
        try:
            tmdb_id = int(raw.get("tmdb_id"))
        except (TypeError, ValueError):
            return None
        if media_type not in SUBJECT_TYPES:
            return None
        year = raw.get("year")
        return cls(
            media_type=media_type,
            tmdb_id=tmdb_id,
            title=str(raw.get("title") or ""),
            year=year if isinstance(year, int) and not isinstance(year, bool) else None,
        )


def _clamp_rating(value: int) -> int:
    return max(MIN_USER_RATING, min(MAX_USER_RATING, int(value)))


class Library:
    def __init__(self, store: JsonFileStore, user_id: str) -> None:
        self.store = store
        self.user_id = str(user_id)
        self._favorites: List[LibraryItem] = []
        self._watchlist: List[LibraryItem] = []
        self._user_ratings: Dict[str, int] = {}
        self._listeners: List[Callable[[], None]] = []
        self.load_payload(self._read_payload(), persist=False)

    @property
    def storage_key(self) -> str:
        return f"library:{self.user_id}"

    @property
    def favorites(self) -> List[LibraryItem]:
        return list(self._favorites)

    @property
    def watchlist(self) -> List[LibraryItem]:
        return list(self._watchlist)

    @property
    def user_ratings(self) -> Dict[str, int]:
        return dict(self._user_ratings)

    def is_favorite(self, item_key: str) -> bool:
        return any(item.key == item_key for item in self._favorites)

    def in_watchlist(self, item_key: str) -> bool:
        return any(item.key == item_key for item in self._watchlist)

    def toggle_favorite(self, item: LibraryItem) -> bool:
        present = self._toggle(self._favorites, item)
        self._changed()
        return present

    def toggle_watchlist(self, item: LibraryItem) -> bool:
        present = self._toggle(self._watchlist, item)
        self._changed()
        return present

    @staticmethod
    def _toggle(items: List[LibraryItem], item: LibraryItem) -> bool:
        for index, existing in enumerate(items):
            if existing.key == item.key:
                del items[index]
                return False
        items.append(item)
        return True

    def rate_item(self, item_key: str, rating: int) -> int:
        value = _clamp_rating(rating)
        self._user_ratings[item_key] = value
        self._changed()
        return value

    def clear_rating(self, item_key: str) -> bool:
        if self._user_ratings.pop(item_key, None) is None:
            return False
        self._changed()
        return True

    def to_payload(self) -> Dict[str, Any]:
        return {
            "favorites": [asdict(item) for item in self._favorites],
            "watchlist": [asdict(item) for item in self._watchlist],
            "userRatings": dict(self._user_ratings),
        }

    def load_payload(self, payload: Optional[Mapping[str, Any]], *, persist: bool = True) -> None:
        """Replace the whole library; unreadable parts load as empty."""
        payload = payload if isinstance(payload, Mapping) else {}
        self._favorites = _decode_items(payload.get("favorites"))
        self._watchlist = _decode_items(payload.get("watchlist"))
        self._user_ratings = _decode_ratings(payload.get("userRatings"))
        if persist:
            self._persist()

    def add_listener(self, callback: Callable[[], None]) -> None:
        self._listeners.append(callback)

    def _changed(self) -> None:
        self._persist()
        for callback in list(self._listeners):
            try:
                callback()
            except Exception:
                logger.exception("Library listener failed.")

    def _read_payload(self) -> Optional[Dict[str, Any]]:
        try:
            raw = self.store.get(self.storage_key)
            return json.loads(raw) if raw else None
        except Exception as exc:
            logger.warning("LIBRARY READ ERROR: %s %s", type(exc).__name__, exc)
            return None

    def _persist(self) -> None:
        try:
            self.store.set(self.storage_key, json.dumps(self.to_payload(), ensure_ascii=False))
        except Exception as exc:
            logger.warning("LIBRARY WRITE ERROR: %s %s", type(exc).__name__, exc)


def _decode_items(raw: Any) -> List[LibraryItem]:
    if not isinstance(raw, list):
        return []
    items: List[LibraryItem] = []
    seen = set()
    for entry in raw:
        item = LibraryItem.from_dict(entry)
        if item is None or item.key in seen:
            continue
        seen.add(item.key)
        items.append(item)
    return items


def _decode_ratings(raw: Any) -> Dict[str, int]:
    if not isinstance(raw, dict):
        return {}
    result: Dict[str, int] = {}
    for key, value in raw.items():
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            continue
        result[str(key)] = _clamp_rating(value)
    return result


__all__ = [
    "MIN_USER_RATING",
    "MAX_USER_RATING",
    "LibraryItem",
    "Library",
]
