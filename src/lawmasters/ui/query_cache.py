"""Keyed cache for dashboard queries.

Entries are identified by tuple keys whose first element is the endpoint
path, e.g. ("/api/ecourts/causelist", "Delhi High Court"). Invalidating a
prefix marks every key starting with it as stale, so the next fetch goes
back to the server.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Hashable
from dataclasses import dataclass
from typing import Any

from lawmasters.logging_config import get_logger
from lawmasters.store.clock import Clock, system_clock

logger = get_logger(__name__)

QueryKey = tuple[Hashable, ...]
Fetcher = Callable[[], Awaitable[Any]]


@dataclass(frozen=True, slots=True)
class QueryOptions:
    """Freshness rules for one query, in milliseconds.

    When refetch_interval is set the entry is refreshed once it is that old
    (and refetch_due() will poll it); otherwise it is fresh for stale_time.
    A stale_time of 0 means every fetch goes to the server.
    """

    stale_time: int = 0
    refetch_interval: int | None = None

    @property
    def max_age(self) -> int:
        if self.refetch_interval is not None:
            return self.refetch_interval
        return self.stale_time


@dataclass(slots=True)
class QueryEntry:
    data: Any
    updated_at: int
    options: QueryOptions
    fetcher: Fetcher | None = None
    invalidated: bool = False


def _matches(key: QueryKey, prefix: QueryKey) -> bool:
    return key[: len(prefix)] == prefix


class QueryCache:
    def __init__(self, clock: Clock = system_clock) -> None:
        self._clock = clock
        self._entries: dict[QueryKey, QueryEntry] = {}
        self._inflight: dict[QueryKey, asyncio.Task[Any]] = {}
        # Bumped by invalidate so a fetch that was in flight at the time
        # stores its result already stale.
        self._generations: dict[QueryKey, int] = {}

    def __contains__(self, key: QueryKey) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def keys(self) -> list[QueryKey]:
        return list(self._entries)

    def get_data(self, key: QueryKey) -> Any:
        entry = self._entries.get(key)
        return entry.data if entry is not None else None

    def set_data(
        self, key: QueryKey, data: Any, options: QueryOptions | None = None
    ) -> None:
        existing = self._entries.get(key)
        self._entries[key] = QueryEntry(
            data=data,
            updated_at=self._clock(),
            options=options or (existing.options if existing else QueryOptions()),
            fetcher=existing.fetcher if existing else None,
        )

    def is_stale(self, key: QueryKey) -> bool:
        entry = self._entries.get(key)
        if entry is None or entry.invalidated:
            return True
        return self._clock() - entry.updated_at >= entry.options.max_age

    async def fetch(
        self,
        key: QueryKey,
        fetcher: Fetcher,
        options: QueryOptions | None = None,
    ) -> Any:
        """Return cached data while fresh, otherwise run fetcher.

        Concurrent fetches of the same key share one request. Fetcher errors
        propagate and leave any previous data in place.
        """
        options = options or QueryOptions()
        entry = self._entries.get(key)
        if entry is not None:
            entry.options = options
            entry.fetcher = fetcher
            if not self.is_stale(key):
                return entry.data

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._load(key, fetcher, options))
            self._inflight[key] = task
            task.add_done_callback(lambda _: self._inflight.pop(key, None))
        return await asyncio.shield(task)

    async def _load(self, key: QueryKey, fetcher: Fetcher, options: QueryOptions) -> Any:
        generation = self._generations.get(key, 0)
        data = await fetcher()
        self._entries[key] = QueryEntry(
            data=data,
            updated_at=self._clock(),
            options=options,
            fetcher=fetcher,
            invalidated=self._generations.get(key, 0) != generation,
        )
        logger.debug("query_fetched", key=str(key[0]), max_age=options.max_age)
        return data

    def invalidate(self, *prefix: Hashable) -> int:
        """Mark every entry whose key starts with prefix as stale."""
        count = 0
        for key, entry in self._entries.items():
            if _matches(key, prefix):
                entry.invalidated = True
                count += 1
        for key in set(self._entries) | set(self._inflight):
            if _matches(key, prefix):
                self._generations[key] = self._generations.get(key, 0) + 1
        logger.debug("queries_invalidated", prefix=str(prefix), count=count)
        return count

    def due_for_refetch(self) -> list[QueryKey]:
        """Keys with a refetch interval that have gone stale."""
        return [
            key
            for key, entry in self._entries.items()
            if entry.options.refetch_interval is not None
            and entry.fetcher is not None
            and self.is_stale(key)
        ]

    async def refetch_due(self) -> list[QueryKey]:
        """Re-run the fetchers of every entry due for its interval refetch.

        A failing fetch is logged and its previous data kept; the other
        refetches still run.
        """
        refreshed: list[QueryKey] = []
        for key in self.due_for_refetch():
            entry = self._entries[key]
            assert entry.fetcher is not None
            try:
                await self.fetch(key, entry.fetcher, entry.options)
            except Exception:
                logger.exception("query_refetch_failed", key=str(key[0]))
                continue
            refreshed.append(key)
        return refreshed

    def remove(self, key: QueryKey) -> None:
        self._entries.pop(key, None)
        self._generations.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()
        self._generations.clear()
