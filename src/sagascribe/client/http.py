"""
Typed REST client for the timeline API.

The client wraps an injected ``httpx.Client``. Production code builds one from
settings (:meth:`TimelineApiClient.from_settings`); tests pass FastAPI's
``TestClient`` (itself an ``httpx.Client``) so the same code runs against the
in-process app.

Failures
--------
Any non-2xx response raises :class:`~sagascribe.core.errors.ApiError` carrying
the server-provided message (``message`` first, then ``detail``) or the
generic fallback. Transport errors (connection refused, timeout) become an
``ApiError`` with status code 0. A 2xx body that is not the expected JSON
(a proxy's HTML page, a truncated payload) raises ``ApiError`` with the
response status and ``INVALID_RESPONSE``, so callers only ever handle one
failure type.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any, TypeVar

import httpx
from pydantic import TypeAdapter

from sagascribe.core.contracts.series import Book
from sagascribe.core.contracts.timeline import (
    PositionUpdate,
    ReorderRequest,
    TimelineEvent,
    TimelineEventDraft,
    TimelineEventUpdate,
)
from sagascribe.core.contracts.view import TimelineView, ViewMode
from sagascribe.core.errors import ApiError
from sagascribe.core.settings import Settings, get_logger, load_settings

logger = get_logger(__name__)

_EVENTS = TypeAdapter(list[TimelineEvent])
_BOOKS = TypeAdapter(list[Book])

T = TypeVar("T")

INVALID_RESPONSE = "Invalid response from the timeline service"


def _error_message(response: httpx.Response) -> str | None:
    """Extract the server-provided message from an error response, if any."""
    try:
        body = response.json()
    except ValueError:
        return response.text.strip() or None
    if not isinstance(body, dict):
        return None
    for field in ("message", "detail"):
        value = body.get(field)
        if isinstance(value, str) and value:
            return value
        if isinstance(value, list) and value:
            # FastAPI validation errors: [{"loc": [...], "msg": "..."}]
            return "; ".join(
                str(item.get("msg", item) if isinstance(item, dict) else item)
                for item in value
                if item
            )
    return None


def _decode(response: httpx.Response, parse: Callable[[Any], T]) -> T:
    """Parse a 2xx body; a body that is not the expected JSON becomes an ``ApiError``."""
    try:
        return parse(response.json())
    except (ValueError, TypeError) as exc:
        # ValueError covers both JSONDecodeError and pydantic ValidationError
        logger.warning("Unparseable %d response: %s", response.status_code, exc)
        raise ApiError(response.status_code, INVALID_RESPONSE) from exc


class TimelineApiClient:
    """Synchronous client for the Saga Scribe timeline endpoints."""

    def __init__(self, http: httpx.Client) -> None:
        self._http = http

    @classmethod
    def from_settings(cls, s: Settings | None = None) -> TimelineApiClient:
        s = s or load_settings()
        return cls(httpx.Client(base_url=s.api_url, timeout=s.http_timeout))

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> TimelineApiClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = self._http.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise ApiError(0, f"Could not reach the timeline service: {exc}") from exc

        if response.is_error:
            message = _error_message(response)
            logger.warning("%s %s -> %d %s", method, path, response.status_code, message)
            raise ApiError(response.status_code, message)
        return response

    def health(self) -> dict[str, Any]:
        return _decode(self._request("GET", "/health"), dict)

    def list_series_events(self, series_id: int) -> list[TimelineEvent]:
        resp = self._request("GET", f"/api/series/{series_id}/timeline")
        return _decode(resp, _EVENTS.validate_python)

    def list_character_events(self, character_id: int) -> list[TimelineEvent]:
        resp = self._request("GET", f"/api/characters/{character_id}/timeline")
        return _decode(resp, _EVENTS.validate_python)

    def list_book_events(self, book_id: int) -> list[TimelineEvent]:
        resp = self._request("GET", f"/api/books/{book_id}/timeline")
        return _decode(resp, _EVENTS.validate_python)

    def list_books(self, series_id: int) -> list[Book]:
        resp = self._request("GET", f"/api/series/{series_id}/books")
        return _decode(resp, _BOOKS.validate_python)

    def get_view(
        self,
        series_id: int,
        mode: ViewMode,
        character_id: int | None = None,
    ) -> TimelineView:
        params: dict[str, Any] = {"mode": mode}
        if character_id is not None:
            params["characterId"] = character_id
        resp = self._request("GET", f"/api/series/{series_id}/timeline/view", params=params)
        return _decode(resp, TimelineView.model_validate)

    def create_event(self, draft: TimelineEventDraft) -> TimelineEvent:
        resp = self._request(
            "POST",
            "/api/timeline-events",
            json=draft.model_dump(mode="json", by_alias=True, exclude_none=True),
        )
        return _decode(resp, TimelineEvent.model_validate)

    def update_event(self, event_id: int, update: TimelineEventUpdate) -> TimelineEvent:
        resp = self._request(
            "PUT",
            f"/api/timeline-events/{event_id}",
            json=update.model_dump(mode="json", by_alias=True, exclude_unset=True),
        )
        return _decode(resp, TimelineEvent.model_validate)

    def delete_event(self, event_id: int) -> None:
        self._request("DELETE", f"/api/timeline-events/{event_id}")

    def reorder_events(self, updates: Iterable[PositionUpdate]) -> list[TimelineEvent]:
        """Submit one reorder batch. The server applies all of it or none of it."""
        body = ReorderRequest(events=list(updates))
        resp = self._request("POST", "/api/timeline-events/reorder", json=body.to_wire())
        return _decode(resp, _EVENTS.validate_python)


__all__ = ["TimelineApiClient"]
