"""Tests for the View Projector.

Covers the three views and the ordering rules that are easy to get wrong:

1. Chronological order is a *stable* string sort with missing dates first.
2. Narrative order is two-level: book-list order for groups (General Events
   first), ``position`` inside a group. Numeric book ids never matter.
3. The character view keeps server order, and falls back to chronological
   when no character is selected.
"""

from __future__ import annotations

import pytest

from sagascribe.core.contracts.series import Book
from sagascribe.core.contracts.timeline import TimelineEvent
from sagascribe.core.timeline.projector import (
    filter_by_character,
    group_narrative,
    project,
    sort_chronological,
)


def _event(
    event_id: int,
    *,
    date: str | None = None,
    book_id: int | None = None,
    position: int = 0,
    characters: list[int] | None = None,
) -> TimelineEvent:
    return TimelineEvent(
        id=event_id,
        series_id=1,
        title=f"E{event_id}",
        date=date,
        book_id=book_id,
        position=position,
        character_ids=characters or [],
    )


def _ids(events: list[TimelineEvent]) -> list[int]:
    return [e.id for e in events]


BOOKS = [
    Book(id=7, series_id=1, title="Ashfall", position=1),
    Book(id=3, series_id=1, title="Cinder Throne", position=2),
    Book(id=5, series_id=1, title="Last Light", position=3),
]


# --------------------------------------------------------------------------- #
# Chronological
# --------------------------------------------------------------------------- #


def test_empty_date_sorts_first_and_ties_keep_input_order() -> None:
    """Dates ["2020", "", "2020"] for [E1, E2, E3] project to [E2, E1, E3]."""
    events = [_event(1, date="2020"), _event(2, date=""), _event(3, date="2020")]
    view = project(events, "chronological")
    assert view.groups is None
    assert _ids(view.events or []) == [2, 1, 3]


def test_missing_and_empty_dates_are_equal_and_stable() -> None:
    events = [_event(1, date=""), _event(2, date=None), _event(3, date="A"), _event(4)]
    assert _ids(sort_chronological(events)) == [1, 2, 4, 3]


def test_dates_compare_as_plain_strings() -> None:
    """No calendar semantics: "Year 10" sorts before "Year 9"."""
    events = [_event(1, date="Year 9"), _event(2, date="Year 10")]
    assert _ids(sort_chronological(events)) == [2, 1]


def test_resorting_an_already_sorted_list_does_not_reshuffle_ties() -> None:
    events = [_event(i, date=d) for i, d in enumerate(["b", "a", "b", "a", ""], start=1)]
    once = sort_chronological(events)
    twice = sort_chronological(once)
    assert _ids(once) == _ids(twice) == [5, 2, 4, 1, 3]


def test_projection_does_not_mutate_input() -> None:
    events = [_event(1, date="z"), _event(2, date="a")]
    before = list(events)
    project(events, "chronological")
    project(events, "narrative", books=BOOKS)
    assert events == before


# --------------------------------------------------------------------------- #
# Narrative
# --------------------------------------------------------------------------- #


def test_group_order_follows_book_list_not_book_ids() -> None:
    events = [
        _event(10, book_id=5, position=1),
        _event(11, book_id=3, position=1),
        _event(12, book_id=7, position=1),
        _event(13, position=4),
    ]
    groups = group_narrative(events, BOOKS)

    assert [g.book_id for g in groups] == [None, 7, 3, 5]
    assert groups[0].title == "General Events"
    assert groups[0].key == 0
    assert [g.title for g in groups[1:]] == ["Ashfall", "Cinder Throne", "Last Light"]
    assert [_ids(g.events) for g in groups] == [[13], [12], [11], [10]]


def test_reversing_book_list_reverses_groups_only() -> None:
    events = [_event(1, book_id=7, position=2), _event(2, book_id=7, position=1)]
    groups = group_narrative(events, list(reversed(BOOKS)))
    assert [g.book_id for g in groups] == [None, 5, 3, 7]
    assert _ids(groups[3].events) == [2, 1]


def test_position_orders_within_group_and_ties_are_stable() -> None:
    events = [
        _event(1, book_id=7, position=3),
        _event(2, book_id=7, position=1),
        _event(3, book_id=7, position=3),
        _event(4, book_id=7, position=2),
    ]
    groups = group_narrative(events, BOOKS)
    assert _ids(groups[1].events) == [2, 4, 1, 3]


def test_general_group_is_first_even_with_large_positions() -> None:
    events = [_event(1, book_id=7, position=1), _event(2, position=99)]
    groups = project(events, "narrative", books=BOOKS).groups or []
    assert groups[0].book is None and _ids(groups[0].events) == [2]


def test_empty_groups_are_kept_as_drop_targets() -> None:
    groups = group_narrative([], BOOKS)
    assert [g.book_id for g in groups] == [None, 7, 3, 5]
    assert all(g.events == [] for g in groups)


def test_events_of_unlisted_books_trail_in_first_appearance_order() -> None:
    events = [
        _event(1, book_id=42, position=2),
        _event(2, book_id=7, position=1),
        _event(3, book_id=41, position=1),
        _event(4, book_id=42, position=1),
    ]
    groups = group_narrative(events, BOOKS)
    assert [g.book_id for g in groups] == [None, 7, 3, 5, 41, 42]
    assert groups[-1].book is None
    assert groups[-1].title == "Book #42"
    assert _ids(groups[-1].events) == [4, 1]


def test_flatten_returns_render_order() -> None:
    events = [_event(1, book_id=3, position=1), _event(2, book_id=7, position=1), _event(3)]
    view = project(events, "narrative", books=BOOKS)
    assert _ids(view.flatten()) == [3, 2, 1]


# --------------------------------------------------------------------------- #
# Character
# --------------------------------------------------------------------------- #


def test_character_view_without_selection_is_chronological() -> None:
    events = [_event(1, date="b"), _event(2, date="a", characters=[9])]
    view = project(events, "character", selected_character_id=None)
    assert _ids(view.events or []) == [2, 1]
    assert view.selected_character_id is None


def test_character_view_filters_and_keeps_server_order() -> None:
    events = [
        _event(1, date="c", characters=[9]),
        _event(2, date="a", characters=[8]),
        _event(3, date="b", characters=[8, 9]),
    ]
    view = project(events, "character", selected_character_id=9)
    assert _ids(view.events or []) == [1, 3]
    assert view.selected_character_id == 9


def test_filter_is_idempotent_on_prefiltered_input() -> None:
    events = [_event(1, characters=[9]), _event(2, characters=[9, 4])]
    once = filter_by_character(events, 9)
    assert _ids(filter_by_character(once, 9)) == [1, 2]


def test_unknown_view_mode_raises() -> None:
    with pytest.raises(ValueError, match="Unknown view mode"):
        project([], "calendar")  # type: ignore[arg-type]
