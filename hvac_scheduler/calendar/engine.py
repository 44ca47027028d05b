"""
Calendar engine: composes appointments and time blocks into one view and
routes user gestures to the mutation protocol.

The engine owns no data of its own. After every protocol call it rebuilds
its event list from the stores, so whatever the server last returned is
what the grid shows.
"""

import logging
from datetime import date, datetime
from typing import Optional, Union

from hvac_scheduler.catalog import calendar_legend, status_counts
from hvac_scheduler.calendar.events import (
    APPOINTMENT_PREFIX,
    TIME_BLOCK_PREFIX,
    CalendarEvent,
    build_events,
    move,
    resize,
)
from hvac_scheduler.calendar.forms import AppointmentDetailsForm, TimeBlockForm
from hvac_scheduler.calendar.mutations import MutationOutcome, MutationProtocol
from hvac_scheduler.calendar.store import SchedulingStores
from hvac_scheduler.client.api_client import SchedulingApiClient
from hvac_scheduler.config import settings
from hvac_scheduler.notifications import NotificationChannel
from hvac_scheduler.schemas.enums import AppointmentStatus

logger = logging.getLogger(__name__)


class CalendarEngine:
    """Staff calendar over both entity collections."""

    def __init__(
        self,
        client: SchedulingApiClient,
        channel: NotificationChannel,
        view: Optional[str] = None,
    ) -> None:
        self.stores = SchedulingStores(client)
        self.protocol = MutationProtocol(client, self.stores, channel)
        self.channel = channel
        self.view = view or settings.calendar.initial_view
        self.visible_hours = (settings.calendar.slot_min_time, settings.calendar.slot_max_time)
        self.events: list[CalendarEvent] = []
        self.details: Optional[AppointmentDetailsForm] = None
        self.block_form: Optional[TimeBlockForm] = None

    async def load(self) -> list[CalendarEvent]:
        await self.stores.load_all()
        return self.render()

    def render(self) -> list[CalendarEvent]:
        self.events = build_events(self.stores.appointments.items, self.stores.time_blocks.items)
        return self.events

    def find_event(self, event_id: str) -> Optional[CalendarEvent]:
        for event in self.events:
            if event.id == event_id:
                return event
        return None

    def events_on(self, day: date) -> list[CalendarEvent]:
        return [e for e in self.events if e.day == day]

    # ------------------------------------------------------------------ #
    # Clicks
    # ------------------------------------------------------------------ #

    async def handle_event_click(self, event_id: str) -> Optional[MutationOutcome]:
        """Appointment: open the details view. Time block: offer to delete it."""
        if event_id.startswith(APPOINTMENT_PREFIX):
            appointment = self.stores.appointments.get(event_id[len(APPOINTMENT_PREFIX):])
            if appointment is None:
                logger.warning("Clicked unknown appointment %s", event_id)
                return None
            self.details = AppointmentDetailsForm.from_appointment(appointment)
            return None
        if event_id.startswith(TIME_BLOCK_PREFIX):
            block = self.stores.time_blocks.get(event_id[len(TIME_BLOCK_PREFIX):])
            if block is None:
                logger.warning("Clicked unknown time block %s", event_id)
                return None
            outcome = await self.protocol.delete_time_block(block)
            self.render()
            return outcome
        logger.warning("Unrecognised event id %s", event_id)
        return None

    def handle_date_click(self, clicked: Union[date, datetime]) -> TimeBlockForm:
        """Open the time-block form seeded from the clicked cell."""
        self.block_form = TimeBlockForm.seeded(clicked)
        return self.block_form

    # ------------------------------------------------------------------ #
    # Gestures
    # ------------------------------------------------------------------ #

    async def drop_event(
        self, event_id: str, new_start: datetime, new_end: Optional[datetime] = None
    ) -> MutationOutcome:
        event = self._require(event_id)
        outcome = await self.protocol.commit_gesture(move(event, new_start, new_end))
        self.render()
        return outcome

    async def resize_event(self, event_id: str, new_end: datetime) -> MutationOutcome:
        event = self._require(event_id)
        outcome = await self.protocol.commit_gesture(resize(event, new_end))
        self.render()
        return outcome

    # ------------------------------------------------------------------ #
    # Forms
    # ------------------------------------------------------------------ #

    async def submit_time_block(self, created_by: Optional[str] = None) -> MutationOutcome:
        form = self.block_form
        if form is None:
            raise RuntimeError("No time block form is open")
        outcome = await self.protocol.create_time_block(form, created_by=created_by)
        if not form.is_open:
            self.block_form = None
        self.render()
        return outcome

    async def save_details(self) -> MutationOutcome:
        form = self._require_details()
        outcome = await self.protocol.save_appointment(form)
        if not form.is_open:
            self.details = None
        self.render()
        return outcome

    async def delete_details(self) -> MutationOutcome:
        form = self._require_details()
        outcome = await self.protocol.delete_appointment(form)
        if not form.is_open:
            self.details = None
        self.render()
        return outcome

    def close_details(self) -> None:
        if self.details is not None:
            self.details.close()
        self.details = None

    # ------------------------------------------------------------------ #
    # Summary
    # ------------------------------------------------------------------ #

    def legend(self) -> list[dict[str, str]]:
        return calendar_legend(alpha=settings.calendar.block_fill_alpha)

    def status_counts(self) -> dict[AppointmentStatus, int]:
        return status_counts(a.status for a in self.stores.appointments.items)

    def _require(self, event_id: str) -> CalendarEvent:
        event = self.find_event(event_id)
        if event is None:
            raise KeyError(f"No event {event_id!r} on the calendar")
        return event

    def _require_details(self) -> AppointmentDetailsForm:
        if self.details is None:
            raise RuntimeError("No appointment details are open")
        return self.details
