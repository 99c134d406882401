"""
Reorder Coordinator: drag-and-drop gestures to durable position updates.

A drag inside one book group of the narrative view produces the group's events
in their new order. The coordinator renumbers the *whole* group
(``position = index + 1``) and submits every ``{id, position}`` pair in one
request. Positions are never diffed, interpolated or spread with gaps.

Positions are scoped to a (seriesId, bookId) group, so a batch only ever
touches events of a single group; other groups keep their positions. Group
order in the narrative view comes from the book list, not from positions.

Outcome handling
----------------
Whatever the outcome, the series, book and character timeline cache keys are
invalidated so the next read refetches. A failure publishes an error notice
and leaves local state as it was; the refetch shows the pre-drag order.
"""

from __future__ import annotations

from collections.abc import Sequence

from sagascribe.core.cache import (
    ALL_CHARACTER_TIMELINES,
    CacheStore,
    book_timeline_key,
    series_timeline_key,
)
from sagascribe.core.contracts.timeline import PositionUpdate, TimelineEvent
from sagascribe.core.errors import ApiError, MutationError
from sagascribe.core.notify import Notifier
from sagascribe.core.result import Result, err, ok
from sagascribe.core.settings import get_logger
from sagascribe.core.timeline.ports import TimelineGateway

logger = get_logger(__name__)


def move_event(
    events: Sequence[TimelineEvent],
    from_index: int,
    to_index: int,
) -> list[TimelineEvent]:
    """Return a copy of ``events`` with the item at ``from_index`` moved to ``to_index``.

    Raises
    ------
    IndexError
        If either index is outside the list.
    """
    n = len(events)
    if not (0 <= from_index < n and 0 <= to_index < n):
        raise IndexError(f"move {from_index} -> {to_index} outside a list of {n} events")
    out = list(events)
    out.insert(to_index, out.pop(from_index))
    return out


def move_by_id(
    events: Sequence[TimelineEvent],
    active_id: int,
    over_id: int | None,
) -> list[TimelineEvent] | None:
    """Apply a drag-end gesture: drop the ``active_id`` event onto ``over_id``.

    Returns ``None`` for a no-op gesture (dropped outside the list or onto
    itself), otherwise the reordered list.
    """
    if over_id is None or over_id == active_id:
        return None
    ids = [e.id for e in events]
    try:
        old_index = ids.index(active_id)
        new_index = ids.index(over_id)
    except ValueError as exc:
        raise ValueError(f"event {active_id} or {over_id} is not in this group") from exc
    return move_event(events, old_index, new_index)


def renumber(events: Sequence[TimelineEvent]) -> list[PositionUpdate]:
    """
    Assign ``position = index + 1`` to every event of one group, in order.

    Raises
    ------
    ValueError
        If the events span more than one (seriesId, bookId) group or list the
        same id twice.
    """
    groups = {e.group_key for e in events}
    if len(groups) > 1:
        raise ValueError(f"reorder spans several timeline groups: {sorted(groups, key=repr)}")
    ids = [e.id for e in events]
    if len(ids) != len(set(ids)):
        raise ValueError("reorder lists the same event more than once")
    return [PositionUpdate(id=e.id, position=i + 1) for i, e in enumerate(events)]


def apply_positions(
    events: Sequence[TimelineEvent],
    updates: Sequence[PositionUpdate],
) -> list[TimelineEvent]:
    """Return copies of ``events`` with positions from ``updates`` applied.

    Events not mentioned in ``updates`` are copied unchanged.
    """
    new_pos = {u.id: u.position for u in updates}
    return [
        e.model_copy(update={"position": new_pos[e.id]}) if e.id in new_pos else e.model_copy()
        for e in events
    ]


class ReorderCoordinator:
    """Submits renumbered groups and keeps the query cache honest."""

    def __init__(self, gateway: TimelineGateway, cache: CacheStore, notifier: Notifier) -> None:
        self._gateway = gateway
        self._cache = cache
        self._notifier = notifier

    def reorder(
        self,
        series_id: int,
        reordered: Sequence[TimelineEvent],
    ) -> Result[list[TimelineEvent], MutationError]:
        """
        Persist the dragged order of one book group.

        Parameters
        ----------
        series_id:
            Series whose timeline is being edited; scopes cache invalidation.
        reordered:
            The group's events in their new order.

        Returns
        -------
        Result[list[TimelineEvent], MutationError]
            ``Ok`` with the events returned by the store, or ``Err`` when the
            request failed. An empty group is an ``Ok([])`` without a request.
        """
        updates = renumber(reordered)
        if not updates:
            return ok([])
        if reordered[0].series_id != series_id:
            raise ValueError(f"events belong to series {reordered[0].series_id}, not {series_id}")

        book_id = reordered[0].book_id
        logger.info(
            "Reordering %d events of series %s, book %s", len(updates), series_id, book_id
        )
        try:
            saved = self._gateway.reorder_events(updates)
        except ApiError as exc:
            failure = MutationError.from_api("reorder timeline events", exc)
            self._notifier.error(failure.describe())
            return err(failure)
        finally:
            self._invalidate(series_id, book_id)

        return ok(saved)

    def _invalidate(self, series_id: int, book_id: int | None) -> None:
        self._cache.invalidate(series_timeline_key(series_id))
        if book_id is not None:
            self._cache.invalidate(book_timeline_key(book_id))
        self._cache.invalidate(ALL_CHARACTER_TIMELINES)


__all__ = ["move_event", "move_by_id", "renumber", "apply_positions", "ReorderCoordinator"]
