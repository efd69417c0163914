"""Durable local key-value storage and the ratings map persistence adapter."""

from __future__ import annotations

import json
import logging
import os
import threading
import uuid
from pathlib import Path
from typing import Dict, Mapping, Optional

from core.config import DATA_DIR
from core.ratings_models import RatingRecord, RatingsMap, ratings_map_from_json, ratings_map_to_json

logger = logging.getLogger(__name__)

RATINGS_STORAGE_KEY = "omdb_ratings_cache_v1"
_STORE_FILE_NAME = "local_store.json"


def default_store_path() -> Path:
    return DATA_DIR / _STORE_FILE_NAME


class JsonFileStore:
    """String key -> string value store kept in one JSON file.

    The whole file is rewritten atomically on every ``set``/``remove``.
    An unreadable file is treated as empty, the next write replaces it.
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = Path(path) if path is not None else default_store_path()
        self._lock = threading.RLock()
        self._data: Optional[Dict[str, str]] = None

    def _load_unlocked(self) -> Dict[str, str]:
        if self._data is not None:
            return self._data
        data: Dict[str, str] = {}
        if self.path.exists():
            try:
                with self.path.open("r", encoding="utf-8") as handle:
                    raw = json.load(handle)
            except (OSError, json.JSONDecodeError) as exc:
                logger.warning("LOCAL STORE READ ERROR: %s %s", type(exc).__name__, exc)
                raw = {}
            if isinstance(raw, dict):
                data = {key: value for key, value in raw.items() if isinstance(value, str)}
        self._data = data
        return data

    def _write_unlocked(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.parent / f"{self.path.stem}.{uuid.uuid4().hex}.tmp"
        try:
            with tmp_path.open("x", encoding="utf-8") as handle:
                json.dump(data, handle, ensure_ascii=False)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_path, self.path)
        finally:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._load_unlocked().get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            data = dict(self._load_unlocked())
            data[key] = value
            self._write_unlocked(data)
            self._data = data

    def remove(self, key: str) -> None:
        with self._lock:
            data = dict(self._load_unlocked())
            if data.pop(key, None) is None and not self.path.exists():
                return
            self._write_unlocked(data)
            self._data = data


class RatingsPersistence:
    """Serializes the whole ratings map under one storage key."""

    def __init__(self, store: JsonFileStore, storage_key: str = RATINGS_STORAGE_KEY) -> None:
        self.store = store
        self.storage_key = storage_key

    def load(self) -> RatingsMap:
        try:
            raw = self.store.get(self.storage_key)
        except Exception as exc:
            logger.warning("RATINGS CACHE READ ERROR: %s %s", type(exc).__name__, exc)
            return {}
        if not raw:
            return {}
        try:
            decoded = json.loads(raw)
        except ValueError as exc:
            logger.warning("RATINGS CACHE CORRUPT: %s %s", type(exc).__name__, exc)
            return {}
        ratings = ratings_map_from_json(decoded)
        logger.debug("Loaded %s cached ratings", len(ratings))
        return ratings

    def save(self, ratings: Mapping[str, RatingRecord]) -> bool:
        try:
            payload = json.dumps(ratings_map_to_json(ratings), ensure_ascii=False, separators=(",", ":"))
            self.store.set(self.storage_key, payload)
        except Exception as exc:
            logger.warning("RATINGS CACHE WRITE ERROR: %s %s", type(exc).__name__, exc)
            return False
        return True

    def erase(self) -> None:
        try:
            self.store.remove(self.storage_key)
        except Exception as exc:
            logger.warning("RATINGS CACHE ERASE ERROR: %s %s", type(exc).__name__, exc)


__all__ = [
    "RATINGS_STORAGE_KEY",
    "JsonFileStore",
    "RatingsPersistence",
    "default_store_path",
]
