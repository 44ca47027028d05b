"""
Visual calendar events and the gestures that move them.

Appointments and time blocks are mapped into ``CalendarEvent`` objects
positioned on the grid. A drag or resize changes the event in place right
away and returns a ``Gesture`` that remembers the previous position, so
the mutation protocol can snap it back with ``revert()``.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Optional, Union

from hvac_scheduler.catalog import LOCK_INDICATOR, service_label, status_colors
from hvac_scheduler.config import settings
from hvac_scheduler.schemas.appointment_schema import Appointment
from hvac_scheduler.schemas.time_block_schema import TimeBlock
from hvac_scheduler.utils import combine, to_hhmm

APPOINTMENT_PREFIX = "apt-"
TIME_BLOCK_PREFIX = "block-"


class EventKind(str, Enum):
    APPOINTMENT = "appointment"
    TIME_BLOCK = "time-block"


class GestureKind(str, Enum):
    MOVE = "move"
    RESIZE = "resize"


@dataclass
class CalendarEvent:
    """One positioned, colored entry on the calendar grid."""
    id: str
    kind: EventKind
    title: str
    start: datetime
    end: datetime
    background_color: str
    border_color: str
    entity: Union[Appointment, TimeBlock]
    text_color: str = settings.calendar.event_text_color
    editable: bool = True

    @property
    def entity_id(self) -> str:
        return self.entity.id

    @property
    def day(self) -> date:
        return self.start.date()

    @property
    def start_time(self) -> str:
        return to_hhmm(self.start)

    @property
    def end_time(self) -> str:
        return to_hhmm(self.end)


@dataclass
class Gesture:
    """A visual change already applied to an event, not yet persisted."""
    kind: GestureKind
    event: CalendarEvent
    old_start: datetime
    old_end: datetime
    reverted: bool = field(default=False, init=False)

    @property
    def new_start(self) -> datetime:
        return self.event.start

    @property
    def new_end(self) -> datetime:
        return self.event.end

    def revert(self) -> None:
        """Put the event back where it was before the gesture."""
        self.event.start = self.old_start
        self.event.end = self.old_end
        self.reverted = True


def appointment_event(appointment: Appointment) -> CalendarEvent:
    background, border = status_colors(appointment.status)
    return CalendarEvent(
        id=f"{APPOINTMENT_PREFIX}{appointment.id}",
        kind=EventKind.APPOINTMENT,
        title=f"{appointment.customer.name} - {service_label(appointment.service_type)}",
        start=combine(appointment.scheduled_date, appointment.start_time),
        end=combine(appointment.scheduled_date, appointment.end_time),
        background_color=background,
        border_color=border,
        entity=appointment,
    )


def time_block_event(block: TimeBlock) -> CalendarEvent:
    color = block.color or "#6B7280"
    return CalendarEvent(
        id=f"{TIME_BLOCK_PREFIX}{block.id}",
        kind=EventKind.TIME_BLOCK,
        title=f"{LOCK_INDICATOR} {block.title}",
        start=combine(block.scheduled_date, block.start_time),
        end=combine(block.scheduled_date, block.end_time),
        background_color=color + settings.calendar.block_fill_alpha,
        border_color=color,
        entity=block,
    )


def build_events(
    appointments: list[Appointment], time_blocks: list[TimeBlock]
) -> list[CalendarEvent]:
    """All events in array order: appointments first, then time blocks.

    No sorting is applied; overlap layout is the grid's concern.
    """
    return [appointment_event(a) for a in appointments] + [time_block_event(b) for b in time_blocks]


def move(event: CalendarEvent, new_start: datetime, new_end: Optional[datetime] = None) -> Gesture:
    """Drag ``event`` to ``new_start``; the length is kept unless ``new_end`` is given."""
    gesture = Gesture(GestureKind.MOVE, event, event.start, event.end)
    length = event.end - event.start
    event.start = new_start
    event.end = new_end if new_end is not None else new_start + length
    return gesture


def resize(event: CalendarEvent, new_end: datetime) -> Gesture:
    """Stretch or shrink ``event`` by moving its end."""
    gesture = Gesture(GestureKind.RESIZE, event, event.start, event.end)
    event.end = new_end
    return gesture


def seed_window(clicked: Union[date, datetime]) -> tuple[date, str, str]:
    """Creation window for a click on an empty cell.

    A click with a time component starts the window there; a bare date
    (month view) uses the configured default start. The window lasts the
    configured default length and never runs past 23:59. A click so late
    that the clamp would leave nothing starts at the top of the hour.
    """
    cal = settings.calendar
    if isinstance(clicked, datetime):
        start = clicked.replace(second=0, microsecond=0)
    else:
        start = combine(clicked, cal.default_block_start)
    end = start + timedelta(minutes=cal.default_block_minutes)
    if end.date() != start.date():
        end = start.replace(hour=23, minute=59)
        if end <= start:
            start = start.replace(minute=0)
    return start.date(), to_hhmm(start), to_hhmm(end)
