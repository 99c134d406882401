"""Shared fixtures: an in-memory gateway fake and a seeded API client.

- ``gateway``: a :class:`FakeGateway` recording every call, with switchable
  failures, for unit tests of the coordinator, dialog and service.
- ``api_client``: a ``TestClient`` over a fresh app seeded from
  ``samples/ember_crown.json``.

Sample layout (series 1; book list order is Ashfall(7), Cinder Throne(3),
Last Light(5), which is deliberately not numeric order):

- General Events: 1
- Ashfall (7):    2, 3, 4  (positions 1, 2, 3)
- Cinder (3):     5
- Last Light (5): 6        (no date)
"""

from __future__ import annotations

from collections.abc import Callable, Generator, Iterable
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient

from sagascribe.api.app import create_app
from sagascribe.api.event_store import get_event_store
from sagascribe.core.contracts.series import Book
from sagascribe.core.contracts.timeline import (
    PositionUpdate,
    TimelineEvent,
    TimelineEventDraft,
    TimelineEventUpdate,
)
from sagascribe.core.errors import ApiError

SAMPLE_SEED = Path(__file__).resolve().parent.parent / "samples" / "ember_crown.json"


class FakeGateway:
    """In-memory stand-in for the REST client."""

    def __init__(self) -> None:
        self.events: dict[int, TimelineEvent] = {}
        self.books: list[Book] = []
        self.calls: list[tuple[str, Any]] = []
        self.fail_with: ApiError | None = None
        self.on_call: Callable[[str], None] | None = None
        self._next_id = 100

    def _enter(self, name: str, arg: Any) -> None:
        self.calls.append((name, arg))
        if self.on_call is not None:
            self.on_call(name)
        if self.fail_with is not None:
            raise self.fail_with

    def add(self, event: TimelineEvent) -> TimelineEvent:
        self.events[event.id] = event
        return event

    def list_series_events(self, series_id: int) -> list[TimelineEvent]:
        self._enter("list_series_events", series_id)
        return sorted(
            (e for e in self.events.values() if e.series_id == series_id),
            key=lambda e: (e.position, e.id),
        )

    def list_character_events(self, character_id: int) -> list[TimelineEvent]:
        self._enter("list_character_events", character_id)
        return sorted(
            (e for e in self.events.values() if e.involves(character_id)),
            key=lambda e: (e.position, e.id),
        )

    def list_book_events(self, book_id: int) -> list[TimelineEvent]:
        self._enter("list_book_events", book_id)
        return [e for e in self.events.values() if e.book_id == book_id]

    def list_books(self, series_id: int) -> list[Book]:
        self._enter("list_books", series_id)
        return [b for b in self.books if b.series_id == series_id]

    def create_event(self, draft: TimelineEventDraft) -> TimelineEvent:
        self._enter("create_event", draft)
        fields = draft.model_dump()
        fields["position"] = fields["position"] or 0
        event = TimelineEvent(id=self._next_id, **fields)
        self._next_id += 1
        return self.add(event)

    def update_event(self, event_id: int, update: TimelineEventUpdate) -> TimelineEvent:
        self._enter("update_event", (event_id, update))
        current = self.events[event_id]
        updated = TimelineEvent.model_validate({**current.model_dump(), **update.changes()})
        return self.add(updated)

    def delete_event(self, event_id: int) -> None:
        self._enter("delete_event", event_id)
        self.events.pop(event_id, None)

    def reorder_events(self, updates: Iterable[PositionUpdate]) -> list[TimelineEvent]:
        batch = list(updates)
        self._enter("reorder_events", batch)
        out = []
        for u in batch:
            out.append(self.add(self.events[u.id].model_copy(update={"position": u.position})))
        return out

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]


@pytest.fixture  # type: ignore[misc]
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture  # type: ignore[misc]
def api_client() -> Generator[TestClient, None, None]:
    """A TestClient over a freshly seeded app (lifespan runs inside the block)."""
    get_event_store().reset()
    app = create_app(seed_file=SAMPLE_SEED)
    with TestClient(app) as c:
        yield c
    get_event_store().reset()
