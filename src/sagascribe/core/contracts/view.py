"""Projection contracts: what the View Projector hands to a renderer."""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from .base import WireModel
from .series import Book
from .timeline import TimelineEvent

ViewMode = Literal["chronological", "narrative", "character"]
VIEW_MODES: tuple[str, ...] = ("chronological", "narrative", "character")

#: Group key of the synthetic "General Events" group (events without a book).
GENERAL_GROUP_KEY = 0
GENERAL_GROUP_TITLE = "General Events"


class NarrativeGroup(WireModel):
    """One book section of the narrative view.

    ``book`` is ``None`` for the General Events group and for events whose
    ``bookId`` is not in the fetched book list; ``book_id`` tells them apart.
    """

    book: Book | None = None
    book_id: int | None = None
    events: list[TimelineEvent] = Field(default_factory=list)

    @property
    def key(self) -> int:
        return self.book_id if self.book_id is not None else GENERAL_GROUP_KEY

    @property
    def title(self) -> str:
        if self.book is not None:
            return self.book.title
        if self.book_id is None:
            return GENERAL_GROUP_TITLE
        return f"Book #{self.book_id}"


class TimelineView(WireModel):
    """Serializable projection result.

    Narrative mode fills ``groups``; chronological and character modes fill
    ``events``.
    """

    mode: ViewMode
    selected_character_id: int | None = None
    events: list[TimelineEvent] | None = None
    groups: list[NarrativeGroup] | None = None

    def flatten(self) -> list[TimelineEvent]:
        """Events in render order regardless of mode."""
        if self.groups is not None:
            return [e for g in self.groups for e in g.events]
        return list(self.events or [])


__all__ = [
    "ViewMode",
    "VIEW_MODES",
    "GENERAL_GROUP_KEY",
    "GENERAL_GROUP_TITLE",
    "NarrativeGroup",
    "TimelineView",
]
