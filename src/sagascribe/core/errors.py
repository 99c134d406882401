"""Exception types shared by the store, the REST client and the timeline core."""

from __future__ import annotations

from dataclasses import dataclass

GENERIC_FAILURE = "Request failed with status {status}"


class SagaScribeError(Exception):
    """Base class for all package errors."""


class NotFoundError(SagaScribeError):
    """A referenced series, book, character or event does not exist."""


class ApiError(SagaScribeError):
    """Non-2xx response (or transport failure, status 0) from the timeline API."""

    def __init__(self, status_code: int, message: str | None = None) -> None:
        self.status_code = status_code
        self.message = message or GENERIC_FAILURE.format(status=status_code)
        super().__init__(self.message)


class DialogStateError(SagaScribeError):
    """An event dialog operation was attempted from a state that forbids it."""


@dataclass(frozen=True)
class MutationError:
    """The single user-facing failure category: a mutation did not go through."""

    action: str
    message: str
    status_code: int | None = None

    @classmethod
    def from_api(cls, action: str, exc: ApiError) -> MutationError:
        return cls(action=action, message=exc.message, status_code=exc.status_code)

    def describe(self) -> str:
        return f"Failed to {self.action}: {self.message}"


__all__ = [
    "SagaScribeError",
    "NotFoundError",
    "ApiError",
    "DialogStateError",
    "MutationError",
    "GENERIC_FAILURE",
]
