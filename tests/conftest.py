"""Shared test fixtures and helpers."""

from datetime import date
from typing import Any

import pytest

from hvac_scheduler.backend.memory import InMemorySchedulingBackend
from hvac_scheduler.booking import BookingWizard
from hvac_scheduler.calendar import CalendarEngine
from hvac_scheduler.client import SchedulingApiClient
from hvac_scheduler.config import BackendConfig
from hvac_scheduler.notifications import QueuedNotificationChannel, ScriptedNotificationChannel
from hvac_scheduler.schemas.appointment_schema import Appointment
from hvac_scheduler.schemas.enums import AppointmentStatus, BlockType, ServiceType
from hvac_scheduler.schemas.time_block_schema import TimeBlock

# Monday; tomorrow is the earliest bookable day
TODAY = date(2026, 10, 19)
TOMORROW = date(2026, 10, 20)
SATURDAY = date(2026, 10, 24)
SUNDAY = date(2026, 10, 25)

BASE_URL = "http://scheduler.test"

STANDARD_HOURS = BackendConfig(
    weekday_open="08:00",
    weekday_close="18:00",
    saturday_open="09:00",
    saturday_close="14:00",
    slot_step_minutes=30,
    buffer_minutes=0,
)


@pytest.fixture
def backend():
    return InMemorySchedulingBackend(today=TODAY, hours=STANDARD_HOURS)


@pytest.fixture
def client(backend):
    return SchedulingApiClient(base_url=BASE_URL, transport=backend.transport())


@pytest.fixture
def channel():
    """Approves every confirmation."""
    return ScriptedNotificationChannel()


@pytest.fixture
def declining_channel():
    return ScriptedNotificationChannel(default=False)


@pytest.fixture
def queued_channel():
    return QueuedNotificationChannel()


@pytest.fixture
def engine(client, channel):
    return CalendarEngine(client, channel)


@pytest.fixture
def wizard(client, channel):
    return BookingWizard(client, channel, today=lambda: TODAY)


def customer_fields(**overrides: Any) -> dict[str, Any]:
    fields = {
        "name": "Laura Gomez",
        "email": "laura@example.com",
        "phone": "3001234567",
        "address": "Calle 10 #43-12, Medellin",
    }
    fields.update(overrides)
    return fields


def seed_appointment(backend: InMemorySchedulingBackend, **overrides: Any) -> Appointment:
    """Store a confirmed maintenance visit tomorrow 09:00-10:30 unless overridden."""
    fields: dict[str, Any] = {
        "service_type": ServiceType.MAINTENANCE,
        "status": AppointmentStatus.CONFIRMED,
        "scheduled_date": TOMORROW,
        "start_time": "09:00",
        "end_time": "10:30",
        "customer": customer_fields(),
    }
    fields.update(overrides)
    return backend.add_appointment(**fields)


def seed_time_block(backend: InMemorySchedulingBackend, **overrides: Any) -> TimeBlock:
    """Store a corporate-contract block tomorrow 14:00-16:00 unless overridden."""
    fields: dict[str, Any] = {
        "title": "Mall contract",
        "block_type": BlockType.CORPORATE_CONTRACT,
        "scheduled_date": TOMORROW,
        "start_time": "14:00",
        "end_time": "16:00",
    }
    fields.update(overrides)
    return backend.add_time_block(**fields)
