"""
View Projector: pure projections of a series' timeline events.

Given the flat event list for a series and a view mode, produce the ordered
(and, for the narrative view, grouped) sequence a renderer should show.

Views
-----
- **chronological**: stable sort by the in-story ``date`` label. A missing
  date is the empty string and therefore sorts first. Dates are compared as
  plain strings.
- **narrative**: two-level ordering. Groups follow the *book list order*
  (General Events first), and ``position`` only orders events inside a
  group. Numeric ``bookId`` values never influence group order.
- **character**: events come pre-filtered and pre-ordered by the server and
  are kept in that order. Without a selected character the view falls back
  to the chronological list.

Every function takes all of its inputs as parameters and returns new lists;
the caller's lists are never mutated.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from sagascribe.core.contracts.series import Book
from sagascribe.core.contracts.timeline import TimelineEvent
from sagascribe.core.contracts.view import NarrativeGroup, TimelineView, ViewMode


def _date_key(event: TimelineEvent) -> str:
    return event.date or ""


def sort_chronological(events: Iterable[TimelineEvent]) -> list[TimelineEvent]:
    """Return events ordered by ``date``; equal dates keep their input order."""
    # sorted() is stable, which is what keeps equal-date events in place.
    return sorted(events, key=_date_key)


def sort_by_position(events: Iterable[TimelineEvent]) -> list[TimelineEvent]:
    """Return events ordered by ``position``; equal positions keep input order."""
    return sorted(events, key=lambda e: e.position)


def group_narrative(
    events: Iterable[TimelineEvent],
    books: Sequence[Book],
) -> list[NarrativeGroup]:
    """
    Group events by book for the narrative view.

    Parameters
    ----------
    events:
        Events of one series, in any order.
    books:
        The series' book list in the order it was fetched. This order, not
        the books' ids, decides group order.

    Returns
    -------
    list[NarrativeGroup]
        The General Events group first, then one group per listed book (empty
        groups included), then one trailing group per ``bookId`` that is not
        in ``books``, in order of first appearance. Events inside each group
        are sorted by ``position``.
    """
    ordered = sort_by_position(events)

    general: list[TimelineEvent] = []
    by_book: dict[int, list[TimelineEvent]] = {}
    for event in ordered:
        if event.book_id is None:
            general.append(event)
        else:
            by_book.setdefault(event.book_id, []).append(event)

    groups = [NarrativeGroup(book=None, book_id=None, events=general)]
    listed: set[int] = set()
    for book in books:
        if book.id in listed:
            continue
        listed.add(book.id)
        groups.append(NarrativeGroup(book=book, book_id=book.id, events=by_book.get(book.id, [])))

    # dict preserves insertion order, i.e. first appearance in position order
    for book_id, orphaned in by_book.items():
        if book_id not in listed:
            groups.append(NarrativeGroup(book=None, book_id=book_id, events=orphaned))

    return groups


def filter_by_character(
    events: Iterable[TimelineEvent],
    character_id: int,
) -> list[TimelineEvent]:
    """Keep events that involve ``character_id``, preserving input order."""
    return [e for e in events if e.involves(character_id)]


def project(
    events: Sequence[TimelineEvent],
    view_mode: ViewMode,
    books: Sequence[Book] = (),
    selected_character_id: int | None = None,
) -> TimelineView:
    """
    Project ``events`` into the presentation for ``view_mode``.

    Raises
    ------
    ValueError
        If ``view_mode`` is not one of the three known views.
    """
    if view_mode == "chronological":
        return TimelineView(mode=view_mode, events=sort_chronological(events))

    if view_mode == "narrative":
        return TimelineView(mode=view_mode, groups=group_narrative(events, books))

    if view_mode == "character":
        if selected_character_id is None:
            return TimelineView(mode=view_mode, events=sort_chronological(events))
        return TimelineView(
            mode=view_mode,
            selected_character_id=selected_character_id,
            events=filter_by_character(events, selected_character_id),
        )

    raise ValueError(f"Unknown view mode: {view_mode!r}")


__all__ = [
    "sort_chronological",
    "sort_by_position",
    "group_narrative",
    "filter_by_character",
    "project",
]
