"""Availability query results and the response envelope."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, model_validator

from hvac_scheduler.schemas.base import WallClock
from hvac_scheduler.schemas.enums import ServiceType
from hvac_scheduler.utils import minutes_between, parse_hhmm


class TimeSlot(BaseModel):
    """One bookable window. Query result only: no identity, never persisted."""

    model_config = ConfigDict(frozen=True)

    start: WallClock
    end: WallClock

    @model_validator(mode="after")
    def check_start_before_end(self) -> "TimeSlot":
        if parse_hhmm(self.start) >= parse_hhmm(self.end):
            raise ValueError(f"slot start {self.start} must be before end {self.end}")
        return self

    @property
    def duration_minutes(self) -> int:
        return minutes_between(self.start, self.end)


class AppointmentTypeInfo(BaseModel):
    """Entry of the appointment-types listing."""
    type: ServiceType
    duration: int
    color: str


class ApiEnvelope(BaseModel):
    """Every backend response: ``{success, data | message}``."""
    success: bool
    data: Any = None
    message: Optional[str] = None
