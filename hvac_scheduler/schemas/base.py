"""Shared pydantic configuration and time-window validation."""

from datetime import date
from typing import Annotated, Any, Optional

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, model_validator
from pydantic.alias_generators import to_camel

from hvac_scheduler.utils import is_valid_hhmm, parse_day, parse_hhmm


def _coerce_day(value: Any) -> Any:
    if isinstance(value, str):
        return parse_day(value)
    return value


def _check_hhmm(value: str) -> str:
    value = value.strip()
    if not is_valid_hhmm(value):
        raise ValueError(f"time must be HH:MM, got {value!r}")
    return value


Day = Annotated[date, BeforeValidator(_coerce_day)]
WallClock = Annotated[str, AfterValidator(_check_hhmm)]


class SchedulingModel(BaseModel):
    """Base model: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready dict using wire names, without unset optional fields."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class TimeWindowModel(SchedulingModel):
    """A date plus a start/end wall-clock pair with ``start < end``."""

    scheduled_date: Day
    start_time: WallClock
    end_time: WallClock

    @model_validator(mode="after")
    def check_start_before_end(self) -> "TimeWindowModel":
        if parse_hhmm(self.start_time) >= parse_hhmm(self.end_time):
            raise ValueError(
                f"start time {self.start_time} must be before end time {self.end_time}"
            )
        return self


class PartialWindowModel(SchedulingModel):
    """Optional date/time fields for partial updates."""

    scheduled_date: Optional[Day] = None
    start_time: Optional[WallClock] = None
    end_time: Optional[WallClock] = None

    @model_validator(mode="after")
    def check_start_before_end(self) -> "PartialWindowModel":
        if self.start_time and self.end_time:
            if parse_hhmm(self.start_time) >= parse_hhmm(self.end_time):
                raise ValueError(
                    f"start time {self.start_time} must be before end time {self.end_time}"
                )
        return self
