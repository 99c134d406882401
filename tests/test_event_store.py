"""Unit tests for the in-memory event store behind the REST API."""

from __future__ import annotations

import pytest
from conftest import SAMPLE_SEED

from sagascribe.api.event_store import EventStore
from sagascribe.core.contracts.timeline import (
    PositionUpdate,
    TimelineEvent,
    TimelineEventDraft,
    TimelineEventUpdate,
)
from sagascribe.core.errors import NotFoundError


@pytest.fixture  # type: ignore[misc]
def store() -> EventStore:
    s = EventStore()
    s.load_seed(SAMPLE_SEED)
    return s


def _ids(events: list[TimelineEvent]) -> list[int]:
    return [e.id for e in events]


def test_seed_lists_by_position_then_id(store: EventStore) -> None:
    assert _ids(store.list_series_events(1)) == [1, 2, 5, 6, 3, 4]
    assert _ids(store.list_book_events(7)) == [2, 3, 4]
    assert _ids(store.list_character_events(1)) == [2, 5, 3]
    assert [b.id for b in store.list_books(1)] == [7, 3, 5]


def test_unknown_references_raise_not_found(store: EventStore) -> None:
    with pytest.raises(NotFoundError, match="Series not found"):
        store.list_series_events(99)
    with pytest.raises(NotFoundError):
        store.list_book_events(99)
    with pytest.raises(NotFoundError):
        store.list_character_events(99)
    with pytest.raises(NotFoundError, match="Timeline event 99 not found"):
        store.get_event(99)


def test_create_appends_to_end_of_book_group(store: EventStore) -> None:
    created = store.create_event(TimelineEventDraft(series_id=1, title="Epilogue", book_id=7))
    assert created.id == 7
    assert created.position == 4
    assert _ids(store.list_book_events(7)) == [2, 3, 4, 7]


def test_create_general_event_uses_general_group(store: EventStore) -> None:
    created = store.create_event(TimelineEventDraft(series_id=1, title="Prologue"))
    assert created.book_id is None and created.position == 2


def test_create_keeps_explicit_position(store: EventStore) -> None:
    created = store.create_event(
        TimelineEventDraft(series_id=1, title="Early", book_id=3, position=0)
    )
    assert created.position == 0
    assert _ids(store.list_book_events(3)) == [created.id, 5]


def test_create_rejects_book_of_another_series(store: EventStore) -> None:
    with pytest.raises(ValueError, match="not part of series 1"):
        store.create_event(TimelineEventDraft(series_id=1, title="x", book_id=404))


def test_update_applies_only_set_fields(store: EventStore) -> None:
    updated = store.update_event(4, TimelineEventUpdate(title="Tobin's vow", book_id=3))
    assert updated.title == "Tobin's vow"
    assert updated.book_id == 3
    assert updated.date == "Year 1241"
    assert updated.series_id == 1
    assert store.get_event(4) == updated


def test_delete_then_lookup_fails(store: EventStore) -> None:
    store.delete_event(6)
    with pytest.raises(NotFoundError):
        store.get_event(6)
    with pytest.raises(NotFoundError):
        store.delete_event(6)


def test_reorder_applies_whole_batch(store: EventStore) -> None:
    batch = [
        PositionUpdate(id=4, position=1),
        PositionUpdate(id=2, position=2),
        PositionUpdate(id=3, position=3),
    ]
    out = store.reorder(batch)
    assert [(e.id, e.position) for e in out] == [(4, 1), (2, 2), (3, 3)]
    assert _ids(store.list_book_events(7)) == [4, 2, 3]
    # other groups untouched
    assert store.get_event(5).position == 1


def test_reorder_with_unknown_id_changes_nothing(store: EventStore) -> None:
    before = {e.id: e.position for e in store.list_series_events(1)}
    with pytest.raises(NotFoundError, match=r"\[99\]"):
        store.reorder([PositionUpdate(id=2, position=9), PositionUpdate(id=99, position=1)])
    after = {e.id: e.position for e in store.list_series_events(1)}
    assert after == before


def test_reset_clears_everything(store: EventStore) -> None:
    store.reset()
    with pytest.raises(NotFoundError):
        store.get_series(1)
    store.load_seed(SAMPLE_SEED)
    assert store.create_event(TimelineEventDraft(series_id=1, title="t")).id == 7


def test_moving_to_another_book_appends_to_that_group(store: EventStore) -> None:
    moved = store.update_event(4, TimelineEventUpdate(book_id=3))
    assert moved.position == 2
    assert _ids(store.list_book_events(3)) == [5, 4]


def test_full_form_edit_that_moves_book_still_appends(store: EventStore) -> None:
    # an edit form resends the unchanged position of the old group
    moved = store.update_event(2, TimelineEventUpdate(book_id=3, position=1, title="Flight"))
    assert moved.position == 2
    assert moved.title == "Flight"
    assert _ids(store.list_book_events(3)) == [5, 2]


def test_moving_with_a_new_position_keeps_it(store: EventStore) -> None:
    moved = store.update_event(4, TimelineEventUpdate(book_id=3, position=0))
    assert moved.position == 0
    assert _ids(store.list_book_events(3)) == [4, 5]


def test_blank_title_edit_is_rejected() -> None:
    with pytest.raises(ValueError, match="Title is required"):
        TimelineEventUpdate(title="   ")
