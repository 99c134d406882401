"""REST client for the timeline service."""

from __future__ import annotations

from .http import TimelineApiClient

__all__ = ["TimelineApiClient"]
