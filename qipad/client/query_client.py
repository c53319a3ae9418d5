"""Query Client - process-wide cache of server state keyed by endpoint path.

Invariants:
    - Keys are tuples of path segments; ("/api/communities", id) is fetched
      from "/api/communities/<id>" by the default fetcher
    - Entries never go stale by age; only invalidate() marks them stale
    - invalidate(prefix) matches every key that starts with the prefix tuple
    - Stale entries with observers refetch immediately; unobserved ones refetch
      on their next get()
    - Removing the last observer evicts the entry
    - At most one fetch per key and generation is in flight; concurrent get()
      calls share it
    - invalidate() bumps the entry's generation: a fetch started before it
      never writes the entry, and callers waiting on it are handed the
      result of a fresh fetch instead
    - A failed fetch keeps the previous value, records the error and sets
      status ERROR; nothing is retried

Design Decisions:
    - Observers are plain callables invoked with the entry after every state
      change: a "mounted view" is anything that subscribed
    - 401 handling is per query: THROW raises, RETURN_NULL caches None
      (used by the current-user query so logged-out is a value, not an error)
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Iterable

from qipad.core.errors import ApiRequestError

logger = logging.getLogger(__name__)

QueryKey = tuple[str, ...]
QueryKeyLike = str | tuple | list
Fetcher = Callable[[QueryKey], Awaitable[Any]]
Observer = Callable[["CacheEntry"], None]


class QueryStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class UnauthorizedBehavior(str, Enum):
    THROW = "throw"
    RETURN_NULL = "return_null"


@dataclass
class CacheEntry:
    key: QueryKey
    data: Any = None
    status: QueryStatus = QueryStatus.IDLE
    is_stale: bool = True
    error: Exception | None = None
    updated_at: float | None = None
    fetch_count: int = 0
    on_unauthorized: UnauthorizedBehavior = UnauthorizedBehavior.THROW
    fetcher: Fetcher | None = None
    observers: list[Observer] = field(default_factory=list)
    in_flight: asyncio.Task | None = None
    generation: int = 0
    in_flight_generation: int = 0


def make_key(key: QueryKeyLike) -> QueryKey:
    if isinstance(key, str):
        return (key,)
    return tuple(str(part) for part in key)


def key_to_path(key: QueryKey) -> str:
    return "/".join(key)


class QueryClient:
    """Cache of server state with observer-driven refetch."""

    def __init__(self, default_fetcher: Fetcher | None = None):
        self._default_fetcher = default_fetcher
        self._entries: dict[QueryKey, CacheEntry] = {}

    # --- Entry access -------------------------------------------

    def _entry(
        self,
        key: QueryKey,
        fetcher: Fetcher | None = None,
        on_unauthorized: UnauthorizedBehavior | None = None,
    ) -> CacheEntry:
        entry = self._entries.get(key)
        if entry is None:
            entry = CacheEntry(key=key)
            self._entries[key] = entry
        if fetcher is not None:
            entry.fetcher = fetcher
        if on_unauthorized is not None:
            entry.on_unauthorized = UnauthorizedBehavior(on_unauthorized)
        return entry

    def get_entry(self, key: QueryKeyLike) -> CacheEntry | None:
        return self._entries.get(make_key(key))

    def keys(self) -> list[QueryKey]:
        return list(self._entries)

    # --- Reads --------------------------------------------------

    async def get(
        self,
        key: QueryKeyLike,
        *,
        fetcher: Fetcher | None = None,
        on_unauthorized: UnauthorizedBehavior | str | None = None,
    ) -> Any:
        """Cached value, fetching first when the entry is absent or stale."""
        entry = self._entry(make_key(key), fetcher, on_unauthorized)
        if not entry.is_stale and entry.status == QueryStatus.SUCCESS:
            return entry.data
        return await self._fetch(entry)

    def get_query_data(self, key: QueryKeyLike) -> Any:
        entry = self._entries.get(make_key(key))
        return entry.data if entry is not None else None

    def set_query_data(self, key: QueryKeyLike, value: Any) -> None:
        entry = self._entry(make_key(key))
        entry.data = value
        entry.status = QueryStatus.SUCCESS
        entry.is_stale = False
        entry.error = None
        entry.updated_at = time.time()
        self._notify(entry)

    # --- Observers ----------------------------------------------

    def subscribe(
        self,
        key: QueryKeyLike,
        observer: Observer,
        *,
        fetcher: Fetcher | None = None,
        on_unauthorized: UnauthorizedBehavior | str | None = None,
    ) -> Callable[[], None]:
        """Register an observer; returns the unsubscribe handle."""
        entry = self._entry(make_key(key), fetcher, on_unauthorized)
        entry.observers.append(observer)

        def unsubscribe() -> None:
            if observer in entry.observers:
                entry.observers.remove(observer)
            if not entry.observers and self._entries.get(entry.key) is entry:
                del self._entries[entry.key]

        return unsubscribe

    # --- Invalidation -------------------------------------------

    async def invalidate(self, *prefixes: QueryKeyLike) -> list[QueryKey]:
        """Mark matching entries stale and refetch the observed ones."""
        normalized = [make_key(p) for p in prefixes]
        matched = [
            entry for key, entry in self._entries.items()
            if any(key[:len(p)] == p for p in normalized)
        ]
        for entry in matched:
            entry.is_stale = True
            entry.generation += 1
            logger.debug(
                "Invalidated query", extra={"query_key": key_to_path(entry.key)},
            )
        observed = [e for e in matched if e.observers]
        if observed:
            results = await asyncio.gather(
                *(self._fetch(e) for e in observed), return_exceptions=True,
            )
            for entry, result in zip(observed, results):
                if isinstance(result, Exception):
                    logger.warning(
                        f"Refetch after invalidation failed: {result}",
                        extra={"query_key": key_to_path(entry.key)},
                    )
        return [e.key for e in matched]

    def remove(self, key: QueryKeyLike) -> None:
        self._entries.pop(make_key(key), None)

    def clear(self) -> None:
        # in-flight fetches finish into detached entries and are dropped
        self._entries.clear()

    # --- Fetching -----------------------------------------------

    async def _fetch(self, entry: CacheEntry) -> Any:
        while True:
            task = entry.in_flight
            if (
                task is None
                or task.done()
                or entry.in_flight_generation != entry.generation
            ):
                entry.in_flight_generation = entry.generation
                task = asyncio.ensure_future(
                    self._run_fetch(entry, entry.generation),
                )
                entry.in_flight = task
            generation = entry.in_flight_generation
            try:
                data = await asyncio.shield(task)
            except Exception:
                if generation == entry.generation:
                    raise
                continue
            if generation == entry.generation:
                return data
            # invalidated while waiting: the value predates the write

    def _outdated(self, entry: CacheEntry, generation: int) -> bool:
        if generation == entry.generation:
            return False
        logger.debug(
            "Discarded result of an invalidated fetch",
            extra={"query_key": key_to_path(entry.key)},
        )
        return True

    async def _run_fetch(self, entry: CacheEntry, generation: int) -> Any:
        fetcher = entry.fetcher or self._default_fetcher
        if fetcher is None:
            raise RuntimeError(f"No fetcher for query {entry.key!r}")

        entry.status = QueryStatus.LOADING
        entry.fetch_count += 1
        self._notify(entry)
        try:
            data = await fetcher(entry.key)
        except ApiRequestError as e:
            if (
                e.status == 401
                and entry.on_unauthorized == UnauthorizedBehavior.RETURN_NULL
            ):
                data = None
            else:
                if not self._outdated(entry, generation):
                    self._record_error(entry, e)
                raise
        except Exception as e:
            if not self._outdated(entry, generation):
                self._record_error(entry, e)
            raise

        if self._outdated(entry, generation):
            return data
        entry.data = data
        entry.status = QueryStatus.SUCCESS
        entry.is_stale = False
        entry.error = None
        entry.updated_at = time.time()
        self._notify(entry)
        return data

    def _record_error(self, entry: CacheEntry, error: Exception) -> None:
        entry.status = QueryStatus.ERROR
        entry.error = error
        logger.info(
            f"Query failed: {error}", extra={"query_key": key_to_path(entry.key)},
        )
        self._notify(entry)

    def _notify(self, entry: CacheEntry) -> None:
        for observer in list(entry.observers):
            try:
                observer(entry)
            except Exception:
                logger.exception(
                    "Query observer failed",
                    extra={"query_key": key_to_path(entry.key)},
                )


def api_fetcher(api) -> Fetcher:
    """Default fetcher: GET the joined key through an ApiClient."""

    async def fetch(key: QueryKey) -> Any:
        return await api.get_json(key_to_path(key))

    return fetch
