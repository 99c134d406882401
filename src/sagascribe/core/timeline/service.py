"""
Timeline service: the client-side façade over the timeline subsystem.

Wires a :class:`~sagascribe.core.timeline.ports.TimelineGateway` (normally the
REST client), a query cache and a notifier into the operations a timeline
screen performs:

- reads through the cache (``series_events``, ``character_events``,
  ``book_events``, ``books``) and projections (``view``, ``group_events``),
- mutations (``reorder``, ``move``, ``delete_event``, ``dialog()``) that
  invalidate the affected cache keys and report failures as notices.

Every dependency is passed in; nothing here is a module-level singleton.
"""

from __future__ import annotations

from collections.abc import Sequence

from sagascribe.core.cache import (
    ALL_CHARACTER_TIMELINES,
    CacheStore,
    QueryCache,
    book_timeline_key,
    character_timeline_key,
    series_books_key,
    series_timeline_key,
)
from sagascribe.core.contracts.series import Book
from sagascribe.core.contracts.timeline import TimelineEvent
from sagascribe.core.contracts.view import TimelineView, ViewMode
from sagascribe.core.errors import ApiError, MutationError
from sagascribe.core.notify import Notifier
from sagascribe.core.result import Result, err, ok
from sagascribe.core.settings import get_logger
from sagascribe.core.timeline.dialog import TimelineEventDialog
from sagascribe.core.timeline.ports import TimelineGateway
from sagascribe.core.timeline.projector import project
from sagascribe.core.timeline.reorder import ReorderCoordinator, move_by_id

logger = get_logger(__name__)


class TimelineService:
    """Reads, projections and mutations for one user's timelines."""

    def __init__(
        self,
        gateway: TimelineGateway,
        cache: CacheStore | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        self.gateway = gateway
        self.cache: CacheStore = cache if cache is not None else QueryCache()
        self.notifier = notifier if notifier is not None else Notifier()
        self._reorderer = ReorderCoordinator(gateway, self.cache, self.notifier)

    # ------------------------------------------------------------------ reads

    def series_events(self, series_id: int) -> list[TimelineEvent]:
        return self.cache.fetch(
            series_timeline_key(series_id),
            lambda: self.gateway.list_series_events(series_id),
        )

    def character_events(self, character_id: int) -> list[TimelineEvent]:
        return self.cache.fetch(
            character_timeline_key(character_id),
            lambda: self.gateway.list_character_events(character_id),
        )

    def book_events(self, book_id: int) -> list[TimelineEvent]:
        return self.cache.fetch(
            book_timeline_key(book_id),
            lambda: self.gateway.list_book_events(book_id),
        )

    def books(self, series_id: int) -> list[Book]:
        return self.cache.fetch(
            series_books_key(series_id),
            lambda: self.gateway.list_books(series_id),
        )

    def view(
        self,
        series_id: int,
        mode: ViewMode,
        selected_character_id: int | None = None,
    ) -> TimelineView:
        """Fetch (through the cache) and project one series' timeline.

        The character view with a selected character reads the server-filtered
        character timeline, restricted to this series.
        """
        if mode == "character" and selected_character_id is not None:
            events = [
                e
                for e in self.character_events(selected_character_id)
                if e.series_id == series_id
            ]
        else:
            events = self.series_events(series_id)
        books = self.books(series_id) if mode == "narrative" else []
        return project(events, mode, books=books, selected_character_id=selected_character_id)

    def group_events(self, series_id: int, book_id: int | None) -> list[TimelineEvent]:
        """Events of one narrative group, in their rendered order."""
        for group in self.view(series_id, "narrative").groups or []:
            if group.book_id == book_id:
                return list(group.events)
        return []

    # -------------------------------------------------------------- mutations

    def reorder(
        self,
        series_id: int,
        reordered: Sequence[TimelineEvent],
    ) -> Result[list[TimelineEvent], MutationError]:
        return self._reorderer.reorder(series_id, reordered)

    def move(
        self,
        series_id: int,
        book_id: int | None,
        active_id: int,
        over_id: int | None,
    ) -> Result[list[TimelineEvent], MutationError] | None:
        """Drop ``active_id`` onto ``over_id`` inside one book group.

        Returns ``None`` when the gesture does not change anything.
        """
        moved = move_by_id(self.group_events(series_id, book_id), active_id, over_id)
        if moved is None:
            return None
        return self.reorder(series_id, moved)

    def delete_event(self, event: TimelineEvent) -> Result[None, MutationError]:
        try:
            self.gateway.delete_event(event.id)
        except ApiError as exc:
            failure = MutationError.from_api("delete timeline event", exc)
            self.notifier.error(failure.describe())
            return err(failure)

        self.cache.invalidate(series_timeline_key(event.series_id))
        if event.book_id is not None:
            self.cache.invalidate(book_timeline_key(event.book_id))
        self.cache.invalidate(ALL_CHARACTER_TIMELINES)
        self.notifier.success(
            "Event deleted", "The timeline event has been removed from your timeline."
        )
        return ok(None)

    def dialog(self) -> TimelineEventDialog:
        """Return a fresh create/edit dialog bound to this service's cache."""
        return TimelineEventDialog(self.gateway, self.cache, self.notifier)


__all__ = ["TimelineService"]
