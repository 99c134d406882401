"""
Timeline Event Dialog: the modal form that creates and edits events.

State machine
-------------
::

    closed -> creating -> submitting -> closed
                              |
                              +-> error -> creating
    closed -> editing  -> submitting -> closed
                              |
                              +-> error -> editing

- The mode (``create`` / ``edit``) is fixed when the dialog opens; a dialog
  never switches mode.
- ``submit()`` validates first. Invalid input keeps the dialog in its mode
  state with ``field_errors`` filled and sends nothing.
- While ``submitting`` the submit control is disabled and ``cancel()`` is
  refused.
- ``closed`` is terminal for one lifecycle (success or cancel); the same
  object can be opened again.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ValidationError

from sagascribe.core.cache import (
    ALL_CHARACTER_TIMELINES,
    CacheStore,
    book_timeline_key,
    series_timeline_key,
)
from sagascribe.core.contracts.timeline import (
    TimelineEvent,
    TimelineEventDraft,
    TimelineEventUpdate,
)
from sagascribe.core.errors import ApiError, DialogStateError, MutationError
from sagascribe.core.notify import Notifier
from sagascribe.core.result import Result, err, ok
from sagascribe.core.settings import get_logger
from sagascribe.core.timeline.ports import TimelineGateway

logger = get_logger(__name__)

DialogMode = Literal["create", "edit"]

#: Form fields the dialog collects (attribute names, not wire aliases).
FORM_FIELDS: tuple[str, ...] = (
    "title",
    "description",
    "event_type",
    "date",
    "book_id",
    "chapter_id",
    "character_ids",
    "location_id",
    "importance",
    "color",
    "position",
    "is_plot_point",
)


class DialogState(str, Enum):
    CLOSED = "closed"
    CREATING = "creating"
    EDITING = "editing"
    SUBMITTING = "submitting"
    ERROR = "error"


def _field_errors(model: type[BaseModel], exc: ValidationError) -> dict[str, str]:
    """Map a validation error to ``{attribute_name: message}``."""
    by_alias = {(f.alias or name): name for name, f in model.model_fields.items()}
    out: dict[str, str] = {}
    for e in exc.errors():
        head = str(e["loc"][0]) if e["loc"] else "__root__"
        out.setdefault(by_alias.get(head, head), e["msg"])
    return out


class TimelineEventDialog:
    """Create/edit form for one timeline event."""

    def __init__(self, gateway: TimelineGateway, cache: CacheStore, notifier: Notifier) -> None:
        self._gateway = gateway
        self._cache = cache
        self._notifier = notifier
        self._reset()

    def _reset(self) -> None:
        self.state: DialogState = DialogState.CLOSED
        self.mode: DialogMode | None = None
        self.series_id: int | None = None
        self.event: TimelineEvent | None = None
        self.values: dict[str, Any] = {}
        self.field_errors: dict[str, str] = {}
        self.last_error: MutationError | None = None

    @property
    def is_open(self) -> bool:
        return self.state is not DialogState.CLOSED

    @property
    def submit_disabled(self) -> bool:
        return self.state is DialogState.SUBMITTING

    @property
    def _mode_state(self) -> DialogState:
        return DialogState.CREATING if self.mode == "create" else DialogState.EDITING

    def _require(self, *allowed: DialogState) -> None:
        if self.state not in allowed:
            names = ", ".join(s.value for s in allowed)
            raise DialogStateError(f"dialog is {self.state.value}; expected one of: {names}")

    def open_create(self, series_id: int, book_id: int | None = None) -> None:
        self._require(DialogState.CLOSED)
        self._reset()
        self.mode = "create"
        self.series_id = series_id
        self.values = {
            "title": "",
            "description": "",
            "event_type": "plot",
            "date": "",
            "book_id": book_id,
            "chapter_id": None,
            "character_ids": [],
            "location_id": None,
            "importance": "medium",
            "color": None,
            "position": None,
            "is_plot_point": False,
        }
        self.state = DialogState.CREATING

    def open_edit(self, event: TimelineEvent) -> None:
        self._require(DialogState.CLOSED)
        self._reset()
        self.mode = "edit"
        self.series_id = event.series_id
        self.event = event
        self.values = {name: getattr(event, name) for name in FORM_FIELDS}
        self.values["character_ids"] = list(event.character_ids)
        self.state = DialogState.EDITING

    def set_field(self, name: str, value: Any) -> None:
        self._require(DialogState.CREATING, DialogState.EDITING, DialogState.ERROR)
        if name not in FORM_FIELDS:
            raise ValueError(f"unknown form field: {name!r}")
        self.values[name] = value
        self.field_errors.pop(name, None)
        self.state = self._mode_state

    def dismiss_error(self) -> None:
        self._require(DialogState.ERROR)
        self.state = self._mode_state

    def cancel(self) -> None:
        if self.state is DialogState.SUBMITTING:
            raise DialogStateError("cannot cancel while the request is in flight")
        self._reset()

    def submit(self) -> Result[TimelineEvent, MutationError]:
        """
        Validate and send the form.

        Returns
        -------
        Result[TimelineEvent, MutationError]
            ``Ok`` with the saved event (the dialog is then closed), or
            ``Err`` for invalid input (no request sent, ``status_code`` is
            ``None``) or a failed request (the dialog is in ``error``).
        """
        self._require(DialogState.CREATING, DialogState.EDITING, DialogState.ERROR)
        mode = self.mode
        action = f"{mode} timeline event"

        payload: TimelineEventDraft | TimelineEventUpdate
        try:
            if mode == "create":
                payload = TimelineEventDraft.model_validate(
                    {**self.values, "series_id": self.series_id}
                )
            else:
                payload = TimelineEventUpdate.model_validate(self.values)
        except ValidationError as exc:
            model = TimelineEventDraft if mode == "create" else TimelineEventUpdate
            self.field_errors = _field_errors(model, exc)
            self.state = self._mode_state
            first = next(iter(self.field_errors.values()), "invalid input")
            return err(MutationError(action=action, message=first))

        self.field_errors = {}
        self.state = DialogState.SUBMITTING
        try:
            if isinstance(payload, TimelineEventDraft):
                saved = self._gateway.create_event(payload)
            elif self.event is not None:
                saved = self._gateway.update_event(self.event.id, payload)
            else:
                raise DialogStateError("edit dialog has no event attached")
        except ApiError as exc:
            failure = MutationError.from_api(action, exc)
            self.last_error = failure
            self.state = DialogState.ERROR
            self._notifier.error(failure.describe())
            return err(failure)
        except Exception:
            # never leave the form locked in submitting
            logger.exception("Unexpected failure while saving timeline event (%s)", mode)
            self.state = DialogState.ERROR
            raise

        self._invalidate(saved)
        if mode == "create":
            self._notifier.success(
                "Event created successfully",
                "The timeline event has been added to your timeline.",
            )
        else:
            self._notifier.success(
                "Event updated successfully",
                "The timeline event has been updated in your timeline.",
            )
        logger.info("Timeline event %s saved (%s)", saved.id, mode)
        self._reset()
        return ok(saved)

    def _invalidate(self, saved: TimelineEvent) -> None:
        self._cache.invalidate(series_timeline_key(saved.series_id))
        touched = {saved.book_id}
        if self.event is not None:
            touched.add(self.event.book_id)
        for book_id in touched:
            if book_id is not None:
                self._cache.invalidate(book_timeline_key(book_id))
        self._cache.invalidate(ALL_CHARACTER_TIMELINES)


__all__ = ["DialogState", "DialogMode", "FORM_FIELDS", "TimelineEventDialog"]
