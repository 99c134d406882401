"""Transient notices ("toasts") published after timeline mutations."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Literal

from sagascribe.core.settings import get_logger

Variant = Literal["default", "destructive"]


@dataclass(frozen=True, slots=True)
class Notice:
    title: str
    description: str
    variant: Variant = "default"
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def is_error(self) -> bool:
        return self.variant == "destructive"


class Notifier:
    """Collects notices for the current session and mirrors them to the log."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._notices: list[Notice] = []
        self._logger = logger or get_logger(__name__)

    def success(self, title: str, description: str = "") -> Notice:
        return self._publish(Notice(title=title, description=description))

    def error(self, description: str, title: str = "Error") -> Notice:
        return self._publish(Notice(title=title, description=description, variant="destructive"))

    def _publish(self, notice: Notice) -> Notice:
        self._notices.append(notice)
        level = logging.WARNING if notice.is_error else logging.INFO
        self._logger.log(level, "%s: %s", notice.title, notice.description)
        return notice

    @property
    def notices(self) -> tuple[Notice, ...]:
        return tuple(self._notices)

    @property
    def last(self) -> Notice | None:
        return self._notices[-1] if self._notices else None

    def clear(self) -> None:
        self._notices.clear()


__all__ = ["Notice", "Notifier", "Variant"]
