"""
Slot availability resolver.

Free-window computation lives in the backend. This wrapper only forwards
the query and turns every failure into "no availability", so callers can
simply re-issue the query when the date or service type changes.
"""

import logging
from datetime import date

from hvac_scheduler.catalog import get_service_options
from hvac_scheduler.client.api_client import SchedulingApiClient
from hvac_scheduler.errors import ApiError
from hvac_scheduler.schemas.availability_schema import TimeSlot
from hvac_scheduler.schemas.enums import ServiceType

logger = logging.getLogger(__name__)


class SlotAvailabilityResolver:
    """Read-only view of bookable capacity."""

    def __init__(self, client: SchedulingApiClient) -> None:
        self._client = client

    async def get_available_slots(self, day: date, service_type: ServiceType) -> list[TimeSlot]:
        """Return the backend's slots for ``day`` in the order received.

        Overlap and conflict checks are never repeated here; the response
        is authoritative. Any failure yields an empty list.
        """
        try:
            slots = await self._client.get_available_slots(day, service_type)
        except ApiError as exc:
            logger.warning(
                "Availability query failed for %s on %s: %s",
                ServiceType(service_type).value, day.isoformat(), exc.message,
            )
            return []
        logger.debug(
            "%d slots available for %s on %s",
            len(slots), ServiceType(service_type).value, day.isoformat(),
        )
        return slots

    async def get_service_options(self) -> list[dict]:
        """Service types for the booking wizard, backend durations and colors first.

        Falls back to the local catalog defaults when the listing fails.
        """
        try:
            types = await self._client.get_appointment_types()
        except ApiError as exc:
            logger.warning("Appointment types unavailable, using catalog defaults: %s", exc.message)
            return get_service_options()
        overrides = {t.type: {"duration": t.duration, "color": t.color} for t in types}
        offered = set(overrides)
        return [opt for opt in get_service_options(overrides) if opt["type"] in offered]
