"""Timeline contracts: events, drafts, and position batches.

- :class:`TimelineEvent`: a persisted event as returned by the store.
- :class:`TimelineEventDraft`: the create payload collected by the event dialog.
- :class:`TimelineEventUpdate`: the edit payload; only fields that were set are sent.
- :class:`PositionUpdate` / :class:`ReorderRequest`: the reorder batch body.

Ordering fields
---------------
``position`` orders events *within* their (seriesId, bookId) group only.
``date`` is a free-form in-story label ("Year 1242, Day 3") compared as a plain
string; it carries no calendar semantics.
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator, model_validator

from .base import EntityId, WireModel

EventType = Literal["plot", "character", "world"]
Importance = Literal["major", "medium", "minor"]

EVENT_TYPES: tuple[str, ...] = ("plot", "character", "world")
IMPORTANCE_LEVELS: tuple[str, ...] = ("major", "medium", "minor")


def _dedupe(ids: list[int]) -> list[int]:
    """Drop repeated ids, keeping the first occurrence."""
    seen: set[int] = set()
    out: list[int] = []
    for i in ids:
        if i not in seen:
            seen.add(i)
            out.append(i)
    return out


class TimelineEvent(WireModel):
    """A story event on a series timeline."""

    id: EntityId
    series_id: EntityId
    title: str = Field(min_length=1)
    description: str | None = None
    event_type: EventType = "plot"
    date: str | None = Field(default=None, description="In-story chronology label.")
    book_id: int | None = Field(default=None, description="Null for series-level events.")
    chapter_id: int | None = None
    character_ids: list[int] = Field(default_factory=list)
    location_id: int | None = None
    importance: Importance = "medium"
    color: str | None = None
    position: int = Field(default=0, ge=0)
    is_plot_point: bool = False

    @field_validator("character_ids")
    @classmethod
    def _unique_characters(cls, v: list[int]) -> list[int]:
        return _dedupe(v)

    @property
    def group_key(self) -> tuple[int, int | None]:
        """The (seriesId, bookId) partition that scopes ``position``."""
        return (self.series_id, self.book_id)

    def involves(self, character_id: int) -> bool:
        return character_id in self.character_ids


class TimelineEventDraft(WireModel):
    """Fields collected when creating an event.

    ``position`` may be omitted; the store then appends the event to the end
    of its book group.
    """

    series_id: EntityId
    title: str = Field(min_length=1)
    description: str | None = None
    event_type: EventType = "plot"
    date: str | None = None
    book_id: int | None = None
    chapter_id: int | None = None
    character_ids: list[int] = Field(default_factory=list)
    location_id: int | None = None
    importance: Importance = "medium"
    color: str | None = None
    position: int | None = Field(default=None, ge=0)
    is_plot_point: bool = False

    @field_validator("title")
    @classmethod
    def _strip_title(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Title is required")
        return v

    @field_validator("character_ids")
    @classmethod
    def _unique_characters(cls, v: list[int]) -> list[int]:
        return _dedupe(v)


class TimelineEventUpdate(WireModel):
    """Partial edit of an event. ``seriesId`` is never changed by an edit."""

    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    event_type: EventType | None = None
    date: str | None = None
    book_id: int | None = None
    chapter_id: int | None = None
    character_ids: list[int] | None = None
    location_id: int | None = None
    importance: Importance | None = None
    color: str | None = None
    position: int | None = Field(default=None, ge=0)
    is_plot_point: bool | None = None

    @field_validator("title")
    @classmethod
    def _strip_title(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            raise ValueError("Title is required")
        return v

    @field_validator("character_ids")
    @classmethod
    def _unique_characters(cls, v: list[int] | None) -> list[int] | None:
        return None if v is None else _dedupe(v)

    def changes(self) -> dict[str, object]:
        """Return the explicitly set fields keyed by attribute name."""
        return self.model_dump(exclude_unset=True)


class PositionUpdate(WireModel):
    """One entry of a reorder batch."""

    id: EntityId
    position: int = Field(ge=0)


class ReorderRequest(WireModel):
    """Body of ``POST /api/timeline-events/reorder``."""

    events: list[PositionUpdate] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_ids(self) -> ReorderRequest:
        ids = [u.id for u in self.events]
        if len(ids) != len(set(ids)):
            raise ValueError("reorder batch lists the same event more than once")
        return self


__all__ = [
    "EventType",
    "Importance",
    "EVENT_TYPES",
    "IMPORTANCE_LEVELS",
    "TimelineEvent",
    "TimelineEventDraft",
    "TimelineEventUpdate",
    "PositionUpdate",
    "ReorderRequest",
]
