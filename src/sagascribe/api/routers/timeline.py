"""
API Routes for series timelines.

Endpoints
---------
- `GET /api/series/{seriesId}/timeline`: events of a series, by position.
- `GET /api/series/{seriesId}/timeline/view`: server-side projection.
- `GET /api/series/{seriesId}/books`: books in reading order.
- `GET /api/books/{bookId}/timeline`: events of one book, by position.
- `GET /api/characters/{characterId}/timeline`: events involving a character.
- `POST /api/timeline-events` and `POST /api/series/{seriesId}/timeline`: create.
- `PUT /api/timeline-events/{eventId}`: edit.
- `DELETE /api/timeline-events/{eventId}`: delete (204).
- `POST /api/timeline-events/reorder`: apply a position batch atomically.

Store errors are translated by the app-level exception handlers
(`NotFoundError` -> 404, `ValueError` -> 400).
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query, Response, status

from sagascribe.api.event_store import get_event_store
from sagascribe.core.contracts.series import Book
from sagascribe.core.contracts.timeline import (
    ReorderRequest,
    TimelineEvent,
    TimelineEventDraft,
    TimelineEventUpdate,
)
from sagascribe.core.contracts.view import TimelineView, ViewMode
from sagascribe.core.timeline.projector import project

router = APIRouter(prefix="/api", tags=["Timeline"])


@router.get(
    "/series/{series_id}/timeline",
    response_model=list[TimelineEvent],
    summary="List a series' timeline events",
)
async def list_series_timeline(series_id: int) -> list[TimelineEvent]:
    return get_event_store().list_series_events(series_id)


@router.get(
    "/series/{series_id}/timeline/view",
    response_model=TimelineView,
    summary="Project a series' timeline into one view",
)
async def view_series_timeline(
    series_id: int,
    mode: ViewMode = "chronological",
    character_id: Annotated[int | None, Query(alias="characterId")] = None,
) -> TimelineView:
    """
    Return the chronological, narrative or character view of a series.

    The character view with `characterId` starts from that character's
    server-filtered timeline, restricted to this series.
    """
    store = get_event_store()
    if mode == "character" and character_id is not None:
        store.get_series(series_id)
        events = [
            e for e in store.list_character_events(character_id) if e.series_id == series_id
        ]
    else:
        events = store.list_series_events(series_id)
    books = store.list_books(series_id) if mode == "narrative" else []
    return project(events, mode, books=books, selected_character_id=character_id)


@router.get(
    "/series/{series_id}/books",
    response_model=list[Book],
    summary="List a series' books in reading order",
)
async def list_series_books(series_id: int) -> list[Book]:
    return get_event_store().list_books(series_id)


@router.get(
    "/books/{book_id}/timeline",
    response_model=list[TimelineEvent],
    summary="List one book's timeline events",
)
async def list_book_timeline(book_id: int) -> list[TimelineEvent]:
    return get_event_store().list_book_events(book_id)


@router.get(
    "/characters/{character_id}/timeline",
    response_model=list[TimelineEvent],
    summary="List timeline events involving a character",
)
async def list_character_timeline(character_id: int) -> list[TimelineEvent]:
    return get_event_store().list_character_events(character_id)


@router.post(
    "/timeline-events",
    response_model=TimelineEvent,
    status_code=status.HTTP_201_CREATED,
    summary="Create a timeline event",
)
async def create_timeline_event(draft: TimelineEventDraft) -> TimelineEvent:
    return get_event_store().create_event(draft)


@router.post(
    "/series/{series_id}/timeline",
    response_model=TimelineEvent,
    status_code=status.HTTP_201_CREATED,
    summary="Create a timeline event in a series",
)
async def create_series_timeline_event(
    series_id: int,
    draft: TimelineEventDraft,
) -> TimelineEvent:
    """Same as `POST /api/timeline-events`; the path's series wins over the body's."""
    return get_event_store().create_event(draft.model_copy(update={"series_id": series_id}))


# Declared before the `{event_id}` routes so "reorder" is never read as an id.
@router.post(
    "/timeline-events/reorder",
    response_model=list[TimelineEvent],
    summary="Apply a batch of position updates",
)
async def reorder_timeline_events(request: ReorderRequest) -> list[TimelineEvent]:
    return get_event_store().reorder(request.events)


@router.put(
    "/timeline-events/{event_id}",
    response_model=TimelineEvent,
    summary="Edit a timeline event",
)
async def update_timeline_event(event_id: int, update: TimelineEventUpdate) -> TimelineEvent:
    return get_event_store().update_event(event_id, update)


@router.delete(
    "/timeline-events/{event_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete a timeline event",
)
async def delete_timeline_event(event_id: int) -> Response:
    get_event_store().delete_event(event_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["router"]
