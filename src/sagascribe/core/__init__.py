"""Core package initializer for Saga Scribe.

Downstream code imports the pieces it needs directly, e.g.:
    from sagascribe.core.settings import settings, load_settings, Settings, get_logger
    from sagascribe.core.timeline.projector import project
"""

from __future__ import annotations

__all__ = ["__doc__"]
