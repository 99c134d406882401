"""Ports the timeline core calls out to."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from sagascribe.core.contracts.series import Book
from sagascribe.core.contracts.timeline import (
    PositionUpdate,
    TimelineEvent,
    TimelineEventDraft,
    TimelineEventUpdate,
)


class TimelineGateway(Protocol):
    """The event store as seen from the client side.

    :class:`~sagascribe.client.http.TimelineApiClient` implements it over HTTP.
    Implementations raise :class:`~sagascribe.core.errors.ApiError` on failure.
    """

    def list_series_events(self, series_id: int) -> list[TimelineEvent]: ...

    def list_character_events(self, character_id: int) -> list[TimelineEvent]: ...

    def list_book_events(self, book_id: int) -> list[TimelineEvent]: ...

    def list_books(self, series_id: int) -> list[Book]: ...

    def create_event(self, draft: TimelineEventDraft) -> TimelineEvent: ...

    def update_event(self, event_id: int, update: TimelineEventUpdate) -> TimelineEvent: ...

    def delete_event(self, event_id: int) -> None: ...

    def reorder_events(self, updates: Iterable[PositionUpdate]) -> list[TimelineEvent]: ...


__all__ = ["TimelineGateway"]
