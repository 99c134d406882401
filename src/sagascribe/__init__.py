"""Saga Scribe timeline package.

Ordering core (projections, reordering, event dialog), a typed REST client with
an injectable query cache, and the FastAPI event store that serves the timeline.
"""

from __future__ import annotations

__all__ = ["__version__"]
__version__ = "0.3.0"
