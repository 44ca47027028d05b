"""Exception hierarchy shared by the API client, calendar and booking wizard."""

from typing import Optional


class SchedulerError(Exception):
    """Base class for all scheduling-core errors."""


class ApiError(SchedulerError):
    """A request to the scheduling backend did not succeed.

    ``message`` is always safe to show in a user notification.
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class TransportError(ApiError):
    """The request raised before a usable response arrived."""


class BusinessRejection(ApiError):
    """The backend answered with ``success: false`` or a non-2xx status."""


class NotFoundError(BusinessRejection):
    """The addressed appointment or time block no longer exists."""


class ConflictError(BusinessRejection):
    """The write was based on a stale version of the entity."""


class FormValidationError(SchedulerError):
    """Client-side validation failed; no request was sent."""

    def __init__(self, errors: dict[str, str]) -> None:
        self.errors = dict(errors)
        summary = "; ".join(f"{name}: {msg}" for name, msg in self.errors.items())
        super().__init__(summary or "Invalid input")


class InvalidTransitionError(SchedulerError):
    """Raised when a wizard transition is not valid from the current step."""
