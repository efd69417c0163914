"""Process-wide service instances.

One ratings cache per process, shared by every handler.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Optional

from core.cloud_store import SheetDocumentStore
from core.cloud_sync import CloudSync
from core.config import ACCOUNT_ID, CLOUD_SYNC_ENABLED, OMDB_API_KEY
from core.library import Library
from core.local_store import JsonFileStore, RatingsPersistence
from core.omdb import OMDbRatingProvider
from core.ratings_cache import RatingsCache
from core.tmdb import TMDBExternalIdResolver

logger = logging.getLogger(__name__)

_SERVICES_LOCK = threading.RLock()
_SERVICES: Optional["AppServices"] = None


@dataclass
class AppServices:
    store: JsonFileStore
    ratings: RatingsCache
    library: Library
    cloud_sync: Optional[CloudSync] = None

    async def start(self) -> None:
        if self.cloud_sync is None:
            return
        if await self.cloud_sync.sign_in(ACCOUNT_ID):
            logger.info("Cloud sync active for account %s", ACCOUNT_ID)
        else:
            logger.warning("Cloud sync unavailable, continuing with the local cache only.")

    async def close(self) -> None:
        await self.ratings.close()
        if self.cloud_sync is not None:
            await self.cloud_sync.close()


def build_services(store: Optional[JsonFileStore] = None) -> AppServices:
    store = store or JsonFileStore()
    ratings = RatingsCache(
        TMDBExternalIdResolver.from_config(),
        OMDbRatingProvider(),
        omdb_api_key=OMDB_API_KEY,
        persistence=RatingsPersistence(store),
    )
    library = Library(store, ACCOUNT_ID)
    cloud_sync = None
    if CLOUD_SYNC_ENABLED:
        cloud_sync = CloudSync(ratings, SheetDocumentStore(), library=library)
    return AppServices(store=store, ratings=ratings, library=library, cloud_sync=cloud_sync)


def get_services() -> AppServices:
    global _SERVICES
    with _SERVICES_LOCK:
        if _SERVICES is None:
            _SERVICES = build_services()
        return _SERVICES


async def shutdown_services() -> None:
    global _SERVICES
    with _SERVICES_LOCK:
        services = _SERVICES
        _SERVICES = None
    if services is not None:
        await services.close()


__all__ = [
    "AppServices",
    "build_services",
    "get_services",
    "shutdown_services",
]
