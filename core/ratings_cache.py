"""TTL-cached, rate-limited OMDb rating lookups.

One ``RatingsCache`` per process holds every known rating record in memory,
persists the whole map after each change, and refreshes stale entries in the
background. Network work goes through a semaphore-bounded worker pool: at most
``max_concurrent`` refreshes run at once, and each finished job keeps its slot
for a short polite delay so OMDb never sees a burst. Concurrent refreshes of
the same key share one task.

Blocking provider calls (``requests``) run in the loop's default executor. A
call that outlives the lookup timeout keeps its slot until its thread returns.
All cache state is touched from the event loop only.
"""

from __future__ import annotations

import asyncio
import logging
import time
from functools import partial
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol, Set

from core.config import (
    OMDB_API_KEY,
    RATINGS_CACHE_TTL_SECONDS,
    RATINGS_ENSURE_LIMIT,
    RATINGS_FETCH_DELAY_SECONDS,
    RATINGS_LOOKUP_TIMEOUT_SECONDS,
    RATINGS_MAX_CONCURRENT,
)
from core.local_store import RatingsPersistence
from core.omdb import parse_rating_payload
from core.ratings_models import (
    SUBJECT_SHOW,
    RatingRecord,
    RatingsMap,
    RatingSubject,
    cache_key_for,
    confirmed_miss,
    episode_key,
    subject_key,
)
from core.runtime_monitor import record_error

logger = logging.getLogger(__name__)


class ExternalIdResolver(Protocol):
    def resolve(self, subject_type: str, subject_id: int) -> Optional[str]:
        ...


class RatingProvider(Protocol):
    def lookup(
        self,
        external_id: str,
        api_key: str,
        season: Optional[int] = None,
        episode: Optional[int] = None,
    ) -> Optional[Dict[str, Any]]:
        ...


class RatingsLookup(Protocol):
    """What views need from the ratings cache."""

    def get_cached(self, key: str) -> Optional[RatingRecord]:
        ...

    async def refresh(
        self, key: str, subject: RatingSubject, force: bool = False
    ) -> Optional[RatingRecord]:
        ...

    def ensure_for_list(
        self, subjects: Iterable[RatingSubject], max_to_enqueue: Optional[int] = None
    ) -> int:
        ...

    def clear_cache(self) -> None:
        ...


def now_ms() -> int:
    return int(time.time() * 1000)


class RatingsCache:
    def __init__(
        self,
        resolver: ExternalIdResolver,
        provider: RatingProvider,
        *,
        omdb_api_key: str = OMDB_API_KEY,
        persistence: Optional[RatingsPersistence] = None,
        ttl_seconds: float = RATINGS_CACHE_TTL_SECONDS,
        max_concurrent: int = RATINGS_MAX_CONCURRENT,
        fetch_delay_seconds: float = RATINGS_FETCH_DELAY_SECONDS,
        lookup_timeout_seconds: float = RATINGS_LOOKUP_TIMEOUT_SECONDS,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._resolver = resolver
        self._provider = provider
        self._omdb_api_key = omdb_api_key or ""
        self._persistence = persistence
        self._ttl_ms = int(ttl_seconds * 1000)
        self._max_concurrent = max(1, int(max_concurrent))
        self._fetch_delay_seconds = max(0.0, float(fetch_delay_seconds))
        self._lookup_timeout_seconds = lookup_timeout_seconds
        self._clock = clock

        self._ratings: RatingsMap = persistence.load() if persistence is not None else {}
        self._slots = asyncio.Semaphore(self._max_concurrent)
        self._in_flight: Dict[str, "asyncio.Task[RatingRecord]"] = {}
        self._background: Set[asyncio.Task] = set()
        self._listeners: List[Callable[[], None]] = []
        self._active_jobs = 0

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_cached(self, key: str) -> Optional[RatingRecord]:
        return self._ratings.get(key)

    def get_episode_cached(self, show_id: int, season: int, episode: int) -> Optional[RatingRecord]:
        return self._ratings.get(episode_key(show_id, season, episode))

    def snapshot(self) -> RatingsMap:
        return dict(self._ratings)

    def is_fresh(self, record: RatingRecord, now: Optional[int] = None) -> bool:
        current = self._clock() if now is None else now
        return current - record.fetched_at < self._ttl_ms

    def stats(self) -> Dict[str, int]:
        misses = sum(1 for record in self._ratings.values() if record.is_miss)
        return {
            "entries": len(self._ratings),
            "misses": misses,
            "in_flight": len(self._in_flight),
            "active": self._active_jobs,
            "max_concurrent": self._max_concurrent,
        }

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------

    async def refresh(
        self, key: str, subject: RatingSubject, force: bool = False
    ) -> Optional[RatingRecord]:
        existing = self._ratings.get(key)
        if not force and existing is not None and self.is_fresh(existing):
            return existing

        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.get_running_loop().create_task(self._run_job(key, subject))
            self._in_flight[key] = task
            task.add_done_callback(partial(self._forget_in_flight, key))
        # A caller giving up must not cancel the shared job.
        return await asyncio.shield(task)

    async def refresh_episode(
        self,
        show_id: int,
        season: int,
        episode: int,
        force: bool = False,
        show_external_id: Optional[str] = None,
    ) -> Optional[RatingRecord]:
        subject = RatingSubject(
            SUBJECT_SHOW,
            show_id,
            season=season,
            episode=episode,
            external_id=show_external_id,
        )
        return await self.refresh(cache_key_for(subject), subject, force=force)

    def ensure_for_list(
        self, subjects: Iterable[RatingSubject], max_to_enqueue: Optional[int] = None
    ) -> int:
        """Queue forced refreshes for missing/stale subjects and return how many were queued.

        Must be called from a running event loop. Completion is not exposed.
        """
        limit = RATINGS_ENSURE_LIMIT if max_to_enqueue is None else max(0, int(max_to_enqueue))
        loop = asyncio.get_running_loop()
        now = self._clock()
        enqueued = 0
        for subject in subjects:
            if enqueued >= limit:
                break
            key = cache_key_for(subject)
            existing = self._ratings.get(key)
            if existing is not None and self.is_fresh(existing, now):
                continue
            task = loop.create_task(self.refresh(key, subject, force=True))
            self._background.add(task)
            task.add_done_callback(self._background.discard)
            enqueued += 1
        if enqueued:
            logger.debug("Queued %s rating refreshes", enqueued)
        return enqueued

    def _forget_in_flight(self, key: str, task: asyncio.Task) -> None:
        if self._in_flight.get(key) is task:
            del self._in_flight[key]

    async def _run_job(self, key: str, subject: RatingSubject) -> RatingRecord:
        await self._slots.acquire()
        self._active_jobs += 1
        calls: List[asyncio.Future] = []
        try:
            record = await self._fetch_record(key, subject, calls)
        finally:
            self._active_jobs -= 1
            self._release_slot_after(calls)
        self._store(key, record)
        return record

    def _release_slot_after(self, calls: List[asyncio.Future]) -> None:
        running = [call for call in calls if not call.done()]
        if not running:
            self._release_slot_later()
            return
        # A timed-out lookup keeps its thread (and the provider) busy until it returns.
        logger.debug("Holding a ratings slot for %s abandoned lookup(s)", len(running))
        waiter = asyncio.gather(*running, return_exceptions=True)
        waiter.add_done_callback(lambda _: self._release_slot_later())

    def _release_slot_later(self) -> None:
        if self._fetch_delay_seconds <= 0:
            self._slots.release()
            return
        asyncio.get_running_loop().call_later(self._fetch_delay_seconds, self._slots.release)

    def _known_external_id(self, key: str, subject: RatingSubject) -> Optional[str]:
        if subject.external_id:
            return subject.external_id
        existing = self._ratings.get(key)
        if existing is not None and existing.external_id:
            return existing.external_id
        if subject.is_episode:
            show_record = self._ratings.get(subject_key(subject.subject_type, subject.subject_id))
            if show_record is not None and show_record.external_id:
                return show_record.external_id
        return None

    async def _call(self, calls: List[asyncio.Future], func: Callable[..., Any], *args: Any) -> Any:
        future = asyncio.get_running_loop().run_in_executor(None, func, *args)
        calls.append(future)
        # Only the wait is bounded; the thread itself cannot be interrupted.
        return await asyncio.wait_for(
            asyncio.shield(future),
            timeout=self._lookup_timeout_seconds,
        )

    async def _fetch_record(
        self, key: str, subject: RatingSubject, calls: List[asyncio.Future]
    ) -> RatingRecord:
        external_id = self._known_external_id(key, subject)
        try:
            if not external_id:
                external_id = await self._call(
                    calls, self._resolver.resolve, subject.subject_type, subject.subject_id
                )
            if not external_id or not self._omdb_api_key:
                return confirmed_miss(external_id, self._clock())
            payload = await self._call(
                calls,
                self._provider.lookup,
                external_id,
                self._omdb_api_key,
                subject.season,
                subject.episode,
            )
            if payload is None:
                return confirmed_miss(external_id, self._clock())
            return parse_rating_payload(payload, external_id, self._clock())
        except asyncio.TimeoutError:
            logger.warning("RATINGS TIMEOUT: %s after %.1fs", key, self._lookup_timeout_seconds)
            record_error("ratings", f"Timeout while refreshing {key}")
        except Exception as exc:
            logger.error("RATINGS ERROR: %s %s %s", key, type(exc).__name__, exc)
            record_error("ratings", exc)
        return confirmed_miss(external_id, self._clock())

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def _store(self, key: str, record: RatingRecord) -> None:
        self._ratings[key] = record
        self._persist()
        self._notify()

    def import_map(self, ratings: RatingsMap, *, notify: bool = True) -> None:
        self._ratings = dict(ratings)
        self._persist()
        if notify:
            self._notify()

    def clear_cache(self) -> None:
        self._ratings = {}
        if self._persistence is not None:
            self._persistence.erase()
        self._notify()

    def _persist(self) -> None:
        if self._persistence is not None:
            self._persistence.save(self._ratings)

    def add_listener(self, callback: Callable[[], None]) -> None:
        self._listeners.append(callback)

    def remove_listener(self, callback: Callable[[], None]) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _notify(self) -> None:
        for callback in list(self._listeners):
            try:
                callback()
            except Exception:
                logger.exception("Ratings cache listener failed.")

    async def close(self, timeout_seconds: float = 5.0) -> None:
        """Let running refreshes finish (bounded) and write the map one last time."""
        pending = set(self._in_flight.values()) | set(self._background)
        if pending:
            _, still_running = await asyncio.wait(pending, timeout=timeout_seconds)
            if still_running:
                logger.warning("%s rating refreshes still running at shutdown", len(still_running))
        self._persist()


__all__ = [
    "ExternalIdResolver",
    "RatingProvider",
    "RatingsLookup",
    "RatingsCache",
    "now_ms",
]
