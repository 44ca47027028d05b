"""
Public booking wizard: service -> date/time -> customer details -> submitted.

The wizard holds every value the customer has entered. Going back never
clears anything; changing the date or the service type re-queries
availability and drops the chosen slot only if it is no longer offered.

Usage:
    wizard = BookingWizard(client, channel)
    await wizard.select_service(ServiceType.MAINTENANCE)
    ok, msg = await wizard.set_date(date(2026, 10, 20))
    wizard.select_slot(wizard.slots[0])
    wizard.continue_to_details()
    for name, value in customer_inputs.items():
        wizard.set_detail(name, value)
    appointment = await wizard.submit()
"""

from datetime import date
from typing import Callable, Optional, Union

from hvac_scheduler.booking.details import CustomerDetails
from hvac_scheduler.booking.state_machine import WizardStateMachine, WizardStep, WizardTrigger
from hvac_scheduler.catalog import default_duration
from hvac_scheduler.client.api_client import SchedulingApiClient
from hvac_scheduler.client.availability import SlotAvailabilityResolver
from hvac_scheduler.config import settings
from hvac_scheduler.errors import ApiError, InvalidTransitionError
from hvac_scheduler.logging_context import get_interaction_logger, new_interaction_id
from hvac_scheduler.messages import SUCCESS_MESSAGES, build_booking_summary, failure_message
from hvac_scheduler.notifications import NotificationChannel
from hvac_scheduler.schemas.appointment_schema import Appointment, AppointmentCreate
from hvac_scheduler.schemas.availability_schema import TimeSlot
from hvac_scheduler.schemas.enums import AppointmentStatus, ServiceType
from hvac_scheduler.utils import format_long_date, min_booking_date

logger = get_interaction_logger(__name__)


class BookingWizard:
    """Turns one customer's choices into one pending appointment."""

    def __init__(
        self,
        client: SchedulingApiClient,
        channel: NotificationChannel,
        today: Optional[Callable[[], date]] = None,
        lead_days: Optional[int] = None,
    ) -> None:
        self._client = client
        self.resolver = SlotAvailabilityResolver(client)
        self.channel = channel
        self._today = today or date.today
        self.lead_days = settings.booking.min_lead_days if lead_days is None else lead_days
        self.service_options: list[dict] = []
        self._start()

    def _start(self) -> None:
        self.interaction_id = new_interaction_id("BOOKING")
        self.machine = WizardStateMachine(
            has_slot=lambda: self.selected_slot is not None,
            details_complete=lambda: self.details.all_required_filled(),
        )
        self.service_type: Optional[ServiceType] = None
        self.duration: Optional[int] = None
        self.scheduled_date: Optional[date] = None
        self.slots: list[TimeSlot] = []
        self.selected_slot: Optional[TimeSlot] = None
        self.details = CustomerDetails()
        self.errors: dict[str, str] = {}
        self.submit_error: Optional[str] = None
        self.appointment: Optional[Appointment] = None

    @property
    def step(self) -> WizardStep:
        return self.machine.current_step

    @property
    def min_date(self) -> date:
        return min_booking_date(self._today(), self.lead_days)

    @property
    def can_continue(self) -> bool:
        return self.machine.can(WizardTrigger.SLOT_CHOSEN)

    def _require_step(self, step: WizardStep) -> None:
        if self.step != step:
            raise InvalidTransitionError(
                f"Action requires step '{step.value}', wizard is at '{self.step.value}'"
            )

    # ------------------------------------------------------------------ #
    # Step 1: service
    # ------------------------------------------------------------------ #

    async def load_services(self) -> list[dict]:
        self.service_options = await self.resolver.get_service_options()
        return self.service_options

    async def select_service(self, service_type: Union[ServiceType, str]) -> WizardStep:
        """Store the service and its default duration, then move on to date/time."""
        self._require_step(WizardStep.SELECT_SERVICE)
        self._apply_service(service_type)
        self.machine.transition(WizardTrigger.SERVICE_SELECTED)
        if self.scheduled_date is not None:
            await self.refresh_slots()
        return self.step

    def _apply_service(self, service_type: Union[ServiceType, str]) -> None:
        self.service_type = ServiceType(service_type)
        self.duration = self._offered_duration(self.service_type)
        logger.info("Service selected: %s (%d min)", self.service_type.value, self.duration)

    def _offered_duration(self, service_type: ServiceType) -> int:
        """Duration shown with the loaded service options, else the catalog default."""
        for option in self.service_options:
            if option["type"] == service_type:
                return option["duration"]
        return default_duration(service_type)

    # ------------------------------------------------------------------ #
    # Step 2: date and time
    # ------------------------------------------------------------------ #

    async def set_date(self, day: date) -> tuple[bool, str]:
        """
        Choose the appointment date and re-query availability.

        Returns:
            (success, message): dates before ``min_date`` are refused.
        """
        self._require_step(WizardStep.SELECT_DATE_TIME)
        if day < self.min_date:
            return False, f"Please choose a date from {self.min_date.isoformat()} onwards."
        self.scheduled_date = day
        await self.refresh_slots()
        if not self.slots:
            return True, f"No times available on {format_long_date(day)}."
        return True, f"{len(self.slots)} times available on {format_long_date(day)}."

    async def set_service_type(self, service_type: Union[ServiceType, str]) -> list[TimeSlot]:
        """Change the service from the date/time step; availability is re-queried."""
        self._require_step(WizardStep.SELECT_DATE_TIME)
        self._apply_service(service_type)
        return await self.refresh_slots()

    async def refresh_slots(self) -> list[TimeSlot]:
        if self.scheduled_date is None or self.service_type is None:
            self.slots = []
            return self.slots
        self.slots = await self.resolver.get_available_slots(
            self.scheduled_date, self.service_type
        )
        if self.selected_slot is not None and self.selected_slot not in self.slots:
            logger.info(
                "Chosen slot %s-%s no longer offered",
                self.selected_slot.start, self.selected_slot.end,
            )
            self.selected_slot = None
        return self.slots

    def select_slot(self, slot: Union[TimeSlot, str]) -> tuple[bool, str]:
        """Pick one of the offered slots, by value or by its start time."""
        self._require_step(WizardStep.SELECT_DATE_TIME)
        for offered in self.slots:
            if offered == slot or offered.start == slot:
                self.selected_slot = offered
                return True, f"Selected {offered.start} - {offered.end}"
        label = slot.start if isinstance(slot, TimeSlot) else slot
        return False, f"{label} is not an available time."

    def continue_to_details(self) -> WizardStep:
        """
        Raises:
            InvalidTransitionError: If no slot has been selected.
        """
        return self.machine.transition(WizardTrigger.SLOT_CHOSEN)

    def back(self) -> WizardStep:
        return self.machine.transition(WizardTrigger.BACK)

    # ------------------------------------------------------------------ #
    # Step 3: details and submission
    # ------------------------------------------------------------------ #

    def set_detail(self, name: str, value: str) -> tuple[bool, str]:
        ok, message = self.details.set_field(name, value)
        if ok:
            self.errors.pop(name, None)
        else:
            self.errors[name] = message
        return ok, message

    def build_request(self) -> AppointmentCreate:
        slot = self.selected_slot
        return AppointmentCreate(
            service_type=self.service_type,
            status=AppointmentStatus.PENDING,
            customer=self.details.to_customer(),
            scheduled_date=self.scheduled_date,
            start_time=slot.start,
            end_time=slot.end,
            duration=self.duration,
            service_details=self.details.to_service_details(),
        )

    async def submit(self) -> Optional[Appointment]:
        """
        Post the booking as a new pending appointment.

        Blank required fields stop the submission before any request. A
        failed request leaves the wizard on the details step with the
        error in ``submit_error``.
        """
        self._require_step(WizardStep.ENTER_DETAILS)
        self.errors = self.details.validate()
        if self.errors:
            logger.debug("Booking details incomplete: %s", sorted(self.errors))
            return None

        try:
            appointment = await self._client.book_appointment(self.build_request())
        except ApiError as exc:
            self.submit_error = failure_message(exc, "book_appointment")
            self.channel.error(self.submit_error)
            return None

        self.submit_error = None
        self.appointment = appointment
        self.machine.transition(WizardTrigger.BOOKING_CREATED)
        logger.info("Booked appointment %s", appointment.id)
        self.channel.success(SUCCESS_MESSAGES["book_appointment"])
        return appointment

    # ------------------------------------------------------------------ #
    # Submitted
    # ------------------------------------------------------------------ #

    def confirmation_summary(self) -> str:
        self._require_step(WizardStep.SUBMITTED)
        return build_booking_summary(
            self.service_type,
            self.scheduled_date,
            self.selected_slot.start,
            self.details.get_value("email"),
            settings.business.support_email,
        )

    def book_another(self) -> WizardStep:
        """Start over from the service step with everything cleared."""
        self.machine.transition(WizardTrigger.BOOK_ANOTHER)
        self._start()
        return self.step

    def get_trace(self) -> list[str]:
        return self.machine.get_step_trace()
