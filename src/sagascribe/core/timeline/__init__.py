"""Timeline ordering core: projections, reordering and the event dialog."""

from __future__ import annotations

from .projector import project
from .reorder import ReorderCoordinator, renumber

__all__ = ["project", "renumber", "ReorderCoordinator"]
