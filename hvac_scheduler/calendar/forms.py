"""
Staff-side forms: time-block creation and appointment details.

Both forms validate locally and report ``{field: message}`` errors, so an
invalid window (end before start, malformed time) never costs a request.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Optional, Union

from hvac_scheduler.catalog import block_type_color
from hvac_scheduler.calendar.events import seed_window
from hvac_scheduler.errors import FormValidationError
from hvac_scheduler.schemas.appointment_schema import Appointment, AppointmentUpdate
from hvac_scheduler.schemas.enums import AppointmentStatus, BlockType
from hvac_scheduler.schemas.time_block_schema import (
    DESCRIPTION_MAX_LENGTH,
    NOTES_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    TimeBlockCreate,
)
from hvac_scheduler.utils import is_valid_hhmm, minutes_between, parse_day, parse_hhmm

logger = logging.getLogger(__name__)


def _window_errors(day: str, start: str, end: str) -> dict[str, str]:
    errors: dict[str, str] = {}
    try:
        parse_day(day)
    except ValueError:
        errors["scheduled_date"] = "Enter a valid date (YYYY-MM-DD)."
    if not is_valid_hhmm(start):
        errors["start_time"] = "Enter a valid start time (HH:MM)."
    if not is_valid_hhmm(end):
        errors["end_time"] = "Enter a valid end time (HH:MM)."
    if "start_time" not in errors and "end_time" not in errors:
        if parse_hhmm(end) <= parse_hhmm(start):
            errors["end_time"] = "End time must be after start time."
    return errors


@dataclass
class TimeBlockForm:
    """Creation form for a time block, opened by clicking an empty cell."""

    scheduled_date: str
    start_time: str
    end_time: str
    title: str = ""
    description: str = ""
    block_type: BlockType = BlockType.INTERNAL
    notes: str = ""
    color: str = field(default_factory=lambda: block_type_color(BlockType.INTERNAL))
    errors: dict[str, str] = field(default_factory=dict)
    submit_error: Optional[str] = None
    is_open: bool = True

    @classmethod
    def seeded(cls, clicked: Union[date, datetime]) -> "TimeBlockForm":
        day, start, end = seed_window(clicked)
        return cls(scheduled_date=day.isoformat(), start_time=start, end_time=end)

    def set_block_type(self, block_type: Union[BlockType, str]) -> None:
        """Switching the type also switches the color to the type's color."""
        self.block_type = BlockType(block_type)
        self.color = block_type_color(self.block_type)

    def validate(self) -> dict[str, str]:
        errors = _window_errors(self.scheduled_date, self.start_time, self.end_time)
        title = self.title.strip()
        if not title:
            errors["title"] = "Title is required."
        elif len(title) > TITLE_MAX_LENGTH:
            errors["title"] = f"Title must be at most {TITLE_MAX_LENGTH} characters."
        if len(self.description) > DESCRIPTION_MAX_LENGTH:
            errors["description"] = (
                f"Description must be at most {DESCRIPTION_MAX_LENGTH} characters."
            )
        if len(self.notes) > NOTES_MAX_LENGTH:
            errors["notes"] = f"Notes must be at most {NOTES_MAX_LENGTH} characters."
        self.errors = errors
        return errors

    def to_create(self, created_by: Optional[str] = None) -> TimeBlockCreate:
        """Build the request body.

        Raises:
            FormValidationError: If any field is invalid.
        """
        errors = self.validate()
        if errors:
            raise FormValidationError(errors)
        return TimeBlockCreate(
            title=self.title.strip(),
            description=self.description.strip() or None,
            scheduled_date=parse_day(self.scheduled_date),
            start_time=self.start_time,
            end_time=self.end_time,
            block_type=self.block_type,
            notes=self.notes.strip() or None,
            color=self.color,
            created_by=created_by,
        )

    def close(self) -> None:
        self.is_open = False


@dataclass
class AppointmentDetailsForm:
    """Edit view opened by clicking an appointment event."""

    appointment: Appointment
    status: AppointmentStatus
    scheduled_date: str
    start_time: str
    end_time: str
    errors: dict[str, str] = field(default_factory=dict)
    is_open: bool = True

    @classmethod
    def from_appointment(cls, appointment: Appointment) -> "AppointmentDetailsForm":
        return cls(
            appointment=appointment,
            status=appointment.status,
            scheduled_date=appointment.scheduled_date.isoformat(),
            start_time=appointment.start_time,
            end_time=appointment.end_time,
        )

    def changes(self) -> dict[str, Any]:
        """Only the fields that differ from the loaded appointment."""
        original = self.appointment
        diff: dict[str, Any] = {}
        if AppointmentStatus(self.status) != original.status:
            diff["status"] = AppointmentStatus(self.status)
        if self.scheduled_date != original.scheduled_date.isoformat():
            diff["scheduled_date"] = self.scheduled_date
        if self.start_time != original.start_time:
            diff["start_time"] = self.start_time
        if self.end_time != original.end_time:
            diff["end_time"] = self.end_time
        return diff

    def rebase(self, appointment: Appointment) -> None:
        """Point the form at a fresher copy, keeping whatever the user edited."""
        edits = self.changes()
        self.appointment = appointment
        self.status = edits.get("status", appointment.status)
        self.scheduled_date = edits.get("scheduled_date", appointment.scheduled_date.isoformat())
        self.start_time = edits.get("start_time", appointment.start_time)
        self.end_time = edits.get("end_time", appointment.end_time)

    @property
    def has_changes(self) -> bool:
        return bool(self.changes())

    def validate(self) -> dict[str, str]:
        self.errors = _window_errors(self.scheduled_date, self.start_time, self.end_time)
        return self.errors

    def to_update(self) -> AppointmentUpdate:
        """Partial update carrying only changed fields.

        When the window changes, the recomputed duration rides along.

        Raises:
            FormValidationError: If the edited window is invalid.
        """
        errors = self.validate()
        if errors:
            raise FormValidationError(errors)
        diff = self.changes()
        if "start_time" in diff or "end_time" in diff:
            diff["duration"] = minutes_between(self.start_time, self.end_time)
        return AppointmentUpdate.model_validate(diff)

    def close(self) -> None:
        self.is_open = False
