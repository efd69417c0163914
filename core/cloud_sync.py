"""Keeps the local ratings cache (and library) in step with the account's cloud document.

On sign-in the remote ratings map is merged into the cache (last write wins)
and, after a short delay, the merged map is written back so the cloud holds
the local entries too. Later cache changes are pushed after a debounce; only
the last change inside the window triggers an upload.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from core.cloud_store import CloudDocumentStore
from core.config import CLOUD_MERGE_DELAY_SECONDS, CLOUD_UPLOAD_DEBOUNCE_SECONDS
from core.library import Library
from core.ratings_cache import RatingsCache
from core.ratings_merge import merge_ratings_maps
from core.ratings_models import RatingsMap
from core.runtime_monitor import record_error

logger = logging.getLogger(__name__)


class _Debouncer:
    """Runs ``action`` once ``delay_seconds`` after the last ``schedule`` call."""

    def __init__(self, delay_seconds: float, action: Callable[[], Awaitable[object]]) -> None:
        self.delay_seconds = delay_seconds
        self._action = action
        self._task: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def schedule(self) -> None:
        self.cancel()
        self._task = asyncio.get_running_loop().create_task(self._fire())

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def _fire(self) -> None:
        await asyncio.sleep(self.delay_seconds)
        # Detach first so a change arriving mid-upload schedules a new run instead of cancelling this one.
        self._task = None
        await self._action()


class CloudSync:
    def __init__(
        self,
        cache: RatingsCache,
        store: CloudDocumentStore,
        *,
        library: Optional[Library] = None,
        merge_delay_seconds: float = CLOUD_MERGE_DELAY_SECONDS,
        upload_debounce_seconds: float = CLOUD_UPLOAD_DEBOUNCE_SECONDS,
    ) -> None:
        self.cache = cache
        self.store = store
        self.library = library
        self.merge_delay_seconds = merge_delay_seconds
        self.user_id: Optional[str] = None
        self._ratings_dirty = False
        self._library_dirty = False
        self._write_back: Optional[asyncio.Task] = None
        self._ratings_upload = _Debouncer(upload_debounce_seconds, self.upload)
        self._library_upload = _Debouncer(upload_debounce_seconds, self.upload_library)
        cache.add_listener(self._on_ratings_changed)
        if library is not None:
            library.add_listener(self._on_library_changed)

    @property
    def signed_in(self) -> bool:
        return self.user_id is not None

    async def sign_in(self, user_id: str) -> bool:
        """Merge the remote copy into the cache; ``False`` when the cloud is unreachable."""
        if self.user_id is not None and self.user_id != str(user_id):
            self.sign_out()
        try:
            remote = await asyncio.to_thread(self.store.fetch, str(user_id))
        except Exception as exc:
            logger.error("CLOUD SYNC ERROR: %s %s", type(exc).__name__, exc)
            record_error("cloud_sync", exc)
            return False

        self.user_id = str(user_id)
        merged = merge_ratings_maps(self.cache.snapshot(), remote)
        self.cache.import_map(merged, notify=False)
        logger.info(
            "Cloud ratings merged for %s: %s local+remote entries",
            self.user_id,
            len(merged),
        )
        if self.library is not None:
            await self._sync_library_on_sign_in()

        self._ratings_dirty = True
        self._write_back = asyncio.get_running_loop().create_task(self._delayed_write_back())
        return True

    def sign_out(self) -> None:
        self._ratings_upload.cancel()
        self._library_upload.cancel()
        if self._write_back is not None and not self._write_back.done():
            self._write_back.cancel()
        self._write_back = None
        self.user_id = None
        self._ratings_dirty = False
        self._library_dirty = False

    async def _delayed_write_back(self) -> None:
        await asyncio.sleep(self.merge_delay_seconds)
        # Push the map as it is now, including changes made during the delay.
        await self.upload()

    async def _sync_library_on_sign_in(self) -> None:
        try:
            remote = await asyncio.to_thread(self.store.fetch_library, self.user_id)
        except Exception as exc:
            logger.error("CLOUD LIBRARY ERROR: %s %s", type(exc).__name__, exc)
            record_error("cloud_sync", exc)
            return
        if remote is not None:
            self.library.load_payload(remote)
            return
        await self.upload_library()

    def _on_ratings_changed(self) -> None:
        if self.user_id is None:
            return
        self._ratings_dirty = True
        self._ratings_upload.schedule()

    def _on_library_changed(self) -> None:
        if self.user_id is None:
            return
        self._library_dirty = True
        self._library_upload.schedule()

    async def upload(self) -> bool:
        if self.user_id is None:
            return False
        self._ratings_dirty = False
        ok = await self._write_ratings(self.cache.snapshot())
        if not ok:
            self._ratings_dirty = True
        return ok

    async def upload_library(self) -> bool:
        if self.user_id is None or self.library is None:
            return False
        self._library_dirty = False
        try:
            await asyncio.to_thread(self.store.write_library, self.user_id, self.library.to_payload())
        except Exception as exc:
            logger.error("CLOUD LIBRARY ERROR: %s %s", type(exc).__name__, exc)
            record_error("cloud_sync", exc)
            self._library_dirty = True
            return False
        return True

    async def _write_ratings(self, ratings: RatingsMap) -> bool:
        user_id = self.user_id
        if user_id is None:
            return False
        try:
            await asyncio.to_thread(self.store.write, user_id, ratings)
        except Exception as exc:
            logger.error("CLOUD SYNC ERROR: %s %s", type(exc).__name__, exc)
            record_error("cloud_sync", exc)
            return False
        logger.debug("Pushed %s ratings to the cloud for %s", len(ratings), user_id)
        return True

    async def close(self) -> None:
        """Cancel timers and push whatever has not reached the cloud yet."""
        ratings_pending = self._ratings_dirty or self._ratings_upload.pending
        library_pending = self._library_dirty or self._library_upload.pending
        self._ratings_upload.cancel()
        self._library_upload.cancel()
        if self._write_back is not None and not self._write_back.done():
            self._write_back.cancel()
        self._write_back = None
        if ratings_pending:
            await self.upload()
        if library_pending:
            await self.upload_library()
        self.cache.remove_listener(self._on_ratings_changed)


__all__ = ["CloudSync"]
