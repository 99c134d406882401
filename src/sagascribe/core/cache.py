"""
Query cache for timeline reads.

Fetched lists (a series' events, a character's events, a book list) are kept
under tuple keys that mirror the REST path, e.g.
``("/api/series", 7, "timeline")``. Mutations never patch cached data; they
invalidate the affected keys and the next read refetches.

The cache is passed explicitly to whatever needs it (see
:class:`~sagascribe.core.timeline.service.TimelineService`), so tests can
substitute their own :class:`CacheStore`.

API
---
- ``get(key, default=None)`` / ``put(key, value)``
- ``fetch(key, loader)``: return the cached value or load, store and return it.
- ``invalidate(prefix)``: drop every key starting with ``prefix``; returns the
  number of dropped entries. Every mutation bumps ``revision``.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol, TypeVar, cast

from sagascribe.core.settings import get_logger

T = TypeVar("T")
CacheKey = tuple[object, ...]

logger = get_logger(__name__)


def series_timeline_key(series_id: int) -> CacheKey:
    return ("/api/series", series_id, "timeline")


def series_books_key(series_id: int) -> CacheKey:
    return ("/api/series", series_id, "books")


def book_timeline_key(book_id: int) -> CacheKey:
    return ("/api/books", book_id, "timeline")


def character_timeline_key(character_id: int) -> CacheKey:
    return ("/api/characters", character_id, "timeline")


#: Prefix matching every character timeline; reorders and edits can change any of them.
ALL_CHARACTER_TIMELINES: CacheKey = ("/api/characters",)


class CacheStore(Protocol):
    """What the timeline service needs from a cache."""

    def get(self, key: CacheKey, default: T | None = None) -> T | None: ...

    def put(self, key: CacheKey, value: Any) -> None: ...

    def fetch(self, key: CacheKey, loader: Callable[[], T]) -> T: ...

    def invalidate(self, prefix: CacheKey) -> int: ...


class QueryCache:
    """
    In-memory key-value cache with a revision counter.

    Attributes
    ----------
    _store : dict[CacheKey, Any]
        Cached values.
    _rev : int
        Monotonically increasing revision (bumps on every put or invalidation
        that removed something).
    """

    __slots__ = ("_store", "_rev")

    def __init__(self) -> None:
        self._store: dict[CacheKey, Any] = {}
        self._rev: int = 0

    @property
    def revision(self) -> int:
        return self._rev

    def put(self, key: CacheKey, value: Any) -> None:
        self._store[key] = value
        self._rev += 1

    def get(self, key: CacheKey, default: T | None = None) -> T | None:
        if key in self._store:
            return cast(T | None, self._store[key])
        return default

    def fetch(self, key: CacheKey, loader: Callable[[], T]) -> T:
        """Return the cached value for ``key``, loading it on a miss.

        Loader exceptions propagate and leave the cache untouched.
        """
        if key in self._store:
            return cast(T, self._store[key])
        value = loader()
        self.put(key, value)
        return value

    def invalidate(self, prefix: CacheKey) -> int:
        """Drop every entry whose key starts with ``prefix``."""
        n = len(prefix)
        stale = [k for k in self._store if k[:n] == prefix]
        for k in stale:
            del self._store[k]
        if stale:
            self._rev += 1
            logger.debug("Invalidated %d cache entries under %r", len(stale), prefix)
        return len(stale)

    def keys(self) -> tuple[CacheKey, ...]:
        """Return the current keys sorted by their text form (stable for tests)."""
        return tuple(sorted(self._store, key=repr))

    def __contains__(self, key: object) -> bool:
        return key in self._store

    def __len__(self) -> int:  # pragma: no cover - trivial
        return len(self._store)


__all__ = [
    "CacheKey",
    "CacheStore",
    "QueryCache",
    "series_timeline_key",
    "series_books_key",
    "book_timeline_key",
    "character_timeline_key",
    "ALL_CHARACTER_TIMELINES",
]
