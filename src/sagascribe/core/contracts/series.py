"""Reference entities read by the timeline: series, books, characters.

These are owned by other parts of the product; the timeline only reads them
(book order drives narrative grouping, characters drive the character view).
"""

from __future__ import annotations

from pydantic import Field

from .base import EntityId, WireModel


class Series(WireModel):
    """Top-level container for one author's multi-book project."""

    id: EntityId
    title: str
    description: str | None = None


class Book(WireModel):
    """A book within a series. ``position`` is the book's reading order."""

    id: EntityId
    series_id: EntityId
    title: str
    position: int = Field(default=1, ge=0)


class Character(WireModel):
    id: EntityId
    series_id: EntityId
    name: str


__all__ = ["Series", "Book", "Character"]
