"""Unit tests for the query cache and the notifier."""

from __future__ import annotations

import logging

import pytest

from sagascribe.core.cache import (
    ALL_CHARACTER_TIMELINES,
    QueryCache,
    book_timeline_key,
    character_timeline_key,
    series_books_key,
    series_timeline_key,
)
from sagascribe.core.notify import Notifier


def test_put_get_and_keys() -> None:
    cache = QueryCache()
    cache.put(series_timeline_key(1), [1, 2])
    cache.put(series_books_key(1), ["Ashfall"])
    assert cache.get(series_timeline_key(1)) == [1, 2]
    assert cache.get(book_timeline_key(9), default="miss") == "miss"
    assert set(cache.keys()) == {series_timeline_key(1), series_books_key(1)}
    assert cache.revision == 2


def test_fetch_loads_once() -> None:
    cache = QueryCache()
    calls: list[int] = []

    def loader() -> list[int]:
        calls.append(1)
        return [42]

    assert cache.fetch(series_timeline_key(3), loader) == [42]
    assert cache.fetch(series_timeline_key(3), loader) == [42]
    assert len(calls) == 1


def test_fetch_failure_leaves_cache_untouched() -> None:
    cache = QueryCache()

    def loader() -> list[int]:
        raise RuntimeError("offline")

    with pytest.raises(RuntimeError):
        cache.fetch(series_timeline_key(3), loader)
    assert series_timeline_key(3) not in cache
    assert cache.revision == 0


def test_invalidate_by_prefix() -> None:
    cache = QueryCache()
    cache.put(series_timeline_key(1), "a")
    cache.put(series_timeline_key(10), "b")
    cache.put(series_books_key(1), "c")
    cache.put(character_timeline_key(4), "d")
    cache.put(character_timeline_key(5), "e")

    # a full key drops only that entry, not series 10 or the book list
    assert cache.invalidate(series_timeline_key(1)) == 1
    assert series_timeline_key(10) in cache
    assert series_books_key(1) in cache

    assert cache.invalidate(ALL_CHARACTER_TIMELINES) == 2
    assert cache.invalidate(ALL_CHARACTER_TIMELINES) == 0


def test_invalidate_miss_does_not_bump_revision() -> None:
    cache = QueryCache()
    cache.put(series_timeline_key(1), "a")
    rev = cache.revision
    cache.invalidate(book_timeline_key(1))
    assert cache.revision == rev


def test_notifier_records_and_logs(caplog: pytest.LogCaptureFixture) -> None:
    logger = logging.getLogger("sagascribe.tests.notify")
    logger.propagate = True
    notifier = Notifier(logger=logger)

    with caplog.at_level(logging.INFO, logger=logger.name):
        ok_notice = notifier.success("Event deleted", "gone")
        bad_notice = notifier.error("Failed to reorder timeline events: boom")

    assert not ok_notice.is_error
    assert bad_notice.is_error and bad_notice.title == "Error"
    assert notifier.notices == (ok_notice, bad_notice)
    assert notifier.last is bad_notice
    assert [r.levelno for r in caplog.records] == [logging.INFO, logging.WARNING]

    notifier.clear()
    assert notifier.last is None
