"""Tests for the offline in-memory backend."""

from dataclasses import replace

import pytest

from hvac_scheduler.backend.memory import InMemorySchedulingBackend
from hvac_scheduler.errors import BusinessRejection
from hvac_scheduler.schemas.appointment_schema import AppointmentCreate, Customer
from hvac_scheduler.schemas.enums import AppointmentStatus, ServiceType
from tests.conftest import (
    SATURDAY,
    STANDARD_HOURS,
    SUNDAY,
    TODAY,
    TOMORROW,
    customer_fields,
    seed_appointment,
    seed_time_block,
)


def booking(start: str, end: str, day=TOMORROW) -> AppointmentCreate:
    return AppointmentCreate(
        service_type=ServiceType.MAINTENANCE,
        customer=Customer(**customer_fields()),
        scheduled_date=day,
        start_time=start,
        end_time=end,
    )


class TestSlotGeneration:
    def test_weekday_hours(self, backend):
        slots = backend.compute_slots(TOMORROW, ServiceType.INSTALLATION)
        assert slots[0] == ("08:00", "12:00")
        assert slots[-1] == ("14:00", "18:00")

    def test_saturday_hours(self, backend):
        slots = backend.compute_slots(SATURDAY, ServiceType.REPAIR)
        assert slots[0] == ("09:00", "11:00")
        assert slots[-1] == ("12:00", "14:00")

    def test_sunday_closed(self, backend):
        assert backend.compute_slots(SUNDAY, ServiceType.QUOTATION) == []

    def test_time_block_removes_slots(self, backend):
        seed_time_block(backend, start_time="08:00", end_time="17:00")
        assert backend.compute_slots(TOMORROW, ServiceType.GAS_REFILL) == [("17:00", "18:00")]

    def test_cancelled_appointment_frees_time(self, backend):
        seed_appointment(
            backend, status=AppointmentStatus.CANCELLED, start_time="08:00", end_time="18:00"
        )
        assert backend.compute_slots(TOMORROW, ServiceType.GAS_REFILL)[0] == ("08:00", "09:00")

    def test_buffer_widens_busy_range(self):
        backend = InMemorySchedulingBackend(
            today=TODAY, hours=replace(STANDARD_HOURS, buffer_minutes=30)
        )
        seed_appointment(backend, start_time="10:00", end_time="11:30")
        slots = backend.compute_slots(TOMORROW, ServiceType.GAS_REFILL)
        assert ("09:00", "10:00") not in slots
        assert ("08:30", "09:30") in slots
        assert ("12:00", "13:00") in slots
        assert ("11:30", "12:30") not in slots


class TestPublicBooking:
    @pytest.mark.asyncio
    async def test_overlap_rejected(self, backend, client):
        seed_appointment(backend, start_time="09:00", end_time="10:30")
        with pytest.raises(BusinessRejection, match="no longer available"):
            await client.book_appointment(booking("10:00", "11:30"))

    @pytest.mark.asyncio
    async def test_past_date_rejected(self, client):
        with pytest.raises(BusinessRejection, match="past"):
            await client.book_appointment(booking("10:00", "11:30", day=TODAY.replace(day=1)))

    @pytest.mark.asyncio
    async def test_status_forced_to_pending(self, client):
        body = booking("10:00", "11:30")
        body.status = AppointmentStatus.CONFIRMED
        created = await client.book_appointment(body)
        assert created.status == AppointmentStatus.PENDING


class TestBookkeeping:
    @pytest.mark.asyncio
    async def test_requests_are_logged(self, backend, client):
        await client.list_appointments()
        await client.list_time_blocks()
        assert backend.count_requests() == 2
        assert backend.count_requests("GET") == 2
        assert backend.count_requests("PUT") == 0

    @pytest.mark.asyncio
    async def test_rejection_is_one_shot(self, backend, client):
        backend.reject_next("GET", "/api/time-blocks", "Maintenance window")
        with pytest.raises(BusinessRejection, match="Maintenance window"):
            await client.list_time_blocks()
        assert await client.list_time_blocks() == []

    @pytest.mark.asyncio
    async def test_invalid_window_on_update_rejected(self, backend, client):
        block = seed_time_block(backend)
        with pytest.raises(BusinessRejection):
            await client.update_time_block(block.id, {"end_time": "13:00"})
        assert backend.time_blocks[block.id].end_time == "16:00"
