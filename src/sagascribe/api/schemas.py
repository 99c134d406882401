"""
API-only payloads: health check and the store seed document.

The timeline resources themselves use the shared contracts in
``sagascribe.core.contracts``.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from sagascribe.core.contracts.base import WireModel
from sagascribe.core.contracts.series import Book, Character, Series
from sagascribe.core.contracts.timeline import TimelineEvent


class HealthPayload(BaseModel):
    status: str = "ok"
    environment: str
    version: str


class SeedDocument(WireModel):
    """
    JSON document loaded into the event store at startup.

    Example
    -------
    ``{"series": [{"id": 1, "title": "The Ember Crown"}],
    "books": [{"id": 4, "seriesId": 1, "title": "Ashfall", "position": 1}],
    "characters": [], "events": []}``
    """

    series: list[Series] = Field(default_factory=list)
    books: list[Book] = Field(default_factory=list)
    characters: list[Character] = Field(default_factory=list)
    events: list[TimelineEvent] = Field(default_factory=list)


__all__ = ["HealthPayload", "SeedDocument"]
