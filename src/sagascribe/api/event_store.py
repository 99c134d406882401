"""
In-Memory Event Store for series timelines.

This module implements the store behind the timeline REST API. It holds the
seeded reference entities (series, books, characters) and the timeline events,
and owns the server-side ordering rules.

Responsibilities
----------------
- **Read**: list events of a series, a book or a character ordered by
  ``position`` (ties by id); list books in series order.
- **Write**: create, edit and delete events; new events without a position
  are appended to the end of their book group, and so is an event whose
  edit moves it to another book without choosing a new position.
- **Reorder**: apply a whole ``{id, position}`` batch atomically. If any id is
  unknown nothing changes.

Note on Persistence
-------------------
This is a volatile memory store guarded by a re-entrant lock. If the server
restarts, everything not in the seed file is lost.
"""

from __future__ import annotations

import json
import threading
from collections.abc import Iterable
from pathlib import Path
from typing import ClassVar, cast

from sagascribe.api.schemas import SeedDocument
from sagascribe.core.contracts.series import Book, Character, Series
from sagascribe.core.contracts.timeline import (
    PositionUpdate,
    TimelineEvent,
    TimelineEventDraft,
    TimelineEventUpdate,
)
from sagascribe.core.errors import NotFoundError
from sagascribe.core.settings import get_logger

logger = get_logger(__name__)


def _by_position(events: Iterable[TimelineEvent]) -> list[TimelineEvent]:
    return sorted(events, key=lambda e: (e.position, e.id))


class EventStore:
    """
    Dictionary-backed store for series, books, characters and timeline events.
    """

    # Singleton instance placeholder (initialized in app startup)
    _instance: ClassVar[EventStore | None] = None

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._series: dict[int, Series] = {}
        self._books: dict[int, Book] = {}
        self._characters: dict[int, Character] = {}
        self._events: dict[int, TimelineEvent] = {}
        self._next_id = 1

    @classmethod
    def get_instance(cls) -> EventStore:
        """Accessor for the global singleton instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def reset(self) -> None:
        """Drop all data (used by tests and before re-seeding)."""
        with self._lock:
            self._series.clear()
            self._books.clear()
            self._characters.clear()
            self._events.clear()
            self._next_id = 1

    # ------------------------------------------------------------------ seed

    def seed(self, doc: SeedDocument) -> None:
        """Load reference entities and events. Existing ids are overwritten."""
        with self._lock:
            for s in doc.series:
                self._series[s.id] = s
            for b in doc.books:
                self._books[b.id] = b
            for c in doc.characters:
                self._characters[c.id] = c
            for e in doc.events:
                self._events[e.id] = e
            if self._events:
                self._next_id = max(self._next_id, max(self._events) + 1)
        logger.info(
            "Seeded %d series, %d books, %d characters, %d events",
            len(doc.series),
            len(doc.books),
            len(doc.characters),
            len(doc.events),
        )

    def load_seed(self, path: Path) -> None:
        with path.open("r", encoding="utf-8") as f:
            self.seed(SeedDocument.model_validate(json.load(f)))

    def add_series(self, series: Series) -> Series:
        with self._lock:
            self._series[series.id] = series
        return series

    def add_book(self, book: Book) -> Book:
        with self._lock:
            self._require_series(book.series_id)
            self._books[book.id] = book
        return book

    def add_character(self, character: Character) -> Character:
        with self._lock:
            self._require_series(character.series_id)
            self._characters[character.id] = character
        return character

    # ---------------------------------------------------------------- lookups

    def _require_series(self, series_id: int) -> Series:
        series = self._series.get(series_id)
        if series is None:
            raise NotFoundError("Series not found")
        return series

    def _require_event(self, event_id: int) -> TimelineEvent:
        event = self._events.get(event_id)
        if event is None:
            raise NotFoundError(f"Timeline event {event_id} not found")
        return event

    def _check_book(self, series_id: int, book_id: int | None) -> None:
        if book_id is None:
            return
        book = self._books.get(book_id)
        if book is None or book.series_id != series_id:
            raise ValueError(f"Book {book_id} is not part of series {series_id}")

    def get_series(self, series_id: int) -> Series:
        with self._lock:
            return self._require_series(series_id)

    def get_event(self, event_id: int) -> TimelineEvent:
        with self._lock:
            return self._require_event(event_id)

    def list_books(self, series_id: int) -> list[Book]:
        """Books of a series in reading order (``position``, then id)."""
        with self._lock:
            self._require_series(series_id)
            books = [b for b in self._books.values() if b.series_id == series_id]
        return sorted(books, key=lambda b: (b.position, b.id))

    def list_series_events(self, series_id: int) -> list[TimelineEvent]:
        with self._lock:
            self._require_series(series_id)
            return _by_position(e for e in self._events.values() if e.series_id == series_id)

    def list_book_events(self, book_id: int) -> list[TimelineEvent]:
        with self._lock:
            if book_id not in self._books:
                raise NotFoundError("Book not found")
            return _by_position(e for e in self._events.values() if e.book_id == book_id)

    def list_character_events(self, character_id: int) -> list[TimelineEvent]:
        with self._lock:
            if character_id not in self._characters:
                raise NotFoundError("Character not found")
            return _by_position(e for e in self._events.values() if e.involves(character_id))

    # -------------------------------------------------------------- mutations

    def _next_position(self, series_id: int, book_id: int | None) -> int:
        group = [
            e.position
            for e in self._events.values()
            if e.series_id == series_id and e.book_id == book_id
        ]
        return max(group, default=0) + 1

    def create_event(self, draft: TimelineEventDraft) -> TimelineEvent:
        with self._lock:
            self._require_series(draft.series_id)
            self._check_book(draft.series_id, draft.book_id)

            fields = draft.model_dump()
            if fields["position"] is None:
                fields["position"] = self._next_position(draft.series_id, draft.book_id)

            event = TimelineEvent(id=self._next_id, **fields)
            self._events[event.id] = event
            self._next_id += 1

        logger.info("Created timeline event %d in series %d", event.id, event.series_id)
        return event

    def update_event(self, event_id: int, update: TimelineEventUpdate) -> TimelineEvent:
        changes = update.changes()
        with self._lock:
            current = self._require_event(event_id)
            book_id = cast(int | None, changes.get("book_id", current.book_id))
            if book_id != current.book_id:
                self._check_book(current.series_id, book_id)
                # the old group's position means nothing in the new group
                if changes.get("position") in (None, current.position):
                    changes["position"] = self._next_position(current.series_id, book_id)
            updated = TimelineEvent.model_validate({**current.model_dump(), **changes})
            self._events[event_id] = updated

        logger.info("Updated timeline event %d (%s)", event_id, ", ".join(sorted(changes)))
        return updated

    def delete_event(self, event_id: int) -> None:
        with self._lock:
            self._require_event(event_id)
            del self._events[event_id]
        logger.info("Deleted timeline event %d", event_id)

    def reorder(self, updates: list[PositionUpdate]) -> list[TimelineEvent]:
        """
        Apply a position batch in one step.

        Returns
        -------
        list[TimelineEvent]
            The updated events in batch order.

        Raises
        ------
        NotFoundError
            If any id in the batch is unknown; no position is changed then.
        """
        with self._lock:
            missing = [u.id for u in updates if u.id not in self._events]
            if missing:
                raise NotFoundError(f"Timeline events not found: {missing}")

            updated: list[TimelineEvent] = []
            for u in updates:
                event = self._events[u.id].model_copy(update={"position": u.position})
                self._events[u.id] = event
                updated.append(event)

        logger.info("Reordered %d timeline events", len(updated))
        return updated


# Global accessor for convenience
def get_event_store() -> EventStore:
    return EventStore.get_instance()


__all__ = ["EventStore", "get_event_store"]
