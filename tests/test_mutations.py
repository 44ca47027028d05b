"""Tests for the optimistic confirm / commit / reconcile-or-revert protocol."""

from datetime import datetime

import httpx
import pytest

from hvac_scheduler.calendar import CalendarEngine, MutationOutcome, MutationProtocol, SchedulingStores
from hvac_scheduler.calendar.events import appointment_event, move, resize, time_block_event
from hvac_scheduler.calendar.forms import TimeBlockForm
from hvac_scheduler.client import SchedulingApiClient
from hvac_scheduler.messages import APPOINTMENT_DELETE_PROMPT, CONFLICT_MESSAGE
from hvac_scheduler.notifications import ConfirmTone, NoticeLevel, ScriptedNotificationChannel
from hvac_scheduler.schemas.enums import AppointmentStatus
from tests.conftest import BASE_URL, seed_appointment, seed_time_block


def at(hour: int, minute: int = 0, day: int = 20) -> datetime:
    return datetime(2026, 10, day, hour, minute)


@pytest.fixture
def protocol(client, channel):
    return MutationProtocol(client, SchedulingStores(client), channel)


class TestDeclined:
    @pytest.mark.asyncio
    async def test_declined_move_sends_nothing_and_reverts(self, backend, client, declining_channel):
        appointment = seed_appointment(backend)
        engine = CalendarEngine(client, declining_channel)
        await engine.load()

        outcome = await engine.drop_event(f"apt-{appointment.id}", at(13))

        assert outcome == MutationOutcome.DECLINED
        assert backend.count_requests("PUT") == 0
        assert engine.find_event(f"apt-{appointment.id}").start == at(9)
        assert declining_channel.notices == []

    @pytest.mark.asyncio
    async def test_declined_gesture_is_reverted_in_place(self, backend, client, declining_channel):
        protocol = MutationProtocol(client, SchedulingStores(client), declining_channel)
        event = appointment_event(seed_appointment(backend))
        gesture = move(event, at(15))

        assert await protocol.commit_gesture(gesture) == MutationOutcome.DECLINED
        assert gesture.reverted
        assert (event.start, event.end) == (at(9), at(10, 30))


class TestCommitted:
    @pytest.mark.asyncio
    async def test_move_prompt_and_commit(self, backend, engine, channel):
        appointment = seed_appointment(backend)
        await engine.load()

        outcome = await engine.drop_event(f"apt-{appointment.id}", at(13, day=21))

        assert outcome == MutationOutcome.COMMITTED
        assert channel.confirmations[0].message == (
            "Move appointment of Laura Gomez to 2026-10-21 13:00-14:30?"
        )
        stored = backend.appointments[appointment.id]
        assert (stored.scheduled_date.isoformat(), stored.start_time, stored.end_time) == (
            "2026-10-21", "13:00", "14:30",
        )
        assert stored.duration == 90
        assert channel.notices[-1].level == NoticeLevel.SUCCESS
        assert channel.notices[-1].message == "Appointment moved"

    @pytest.mark.asyncio
    async def test_success_refetches_collection(self, backend, engine):
        appointment = seed_appointment(backend)
        await engine.load()
        gets_before = backend.count_requests("GET")

        await engine.drop_event(f"apt-{appointment.id}", at(13))

        assert backend.count_requests("GET") == gets_before + 1
        assert engine.stores.appointments.get(appointment.id).version == 1
        assert engine.find_event(f"apt-{appointment.id}").start == at(13)

    @pytest.mark.asyncio
    async def test_resize_asks_and_sends_end_and_duration(self, backend, engine, channel):
        appointment = seed_appointment(backend)
        await engine.load()

        outcome = await engine.resize_event(f"apt-{appointment.id}", at(11))

        assert outcome == MutationOutcome.COMMITTED
        assert channel.confirmations[0].message == (
            "Change the duration of appointment of Laura Gomez to 09:00-11:00?"
        )
        stored = backend.appointments[appointment.id]
        assert (stored.start_time, stored.end_time, stored.duration) == ("09:00", "11:00", 120)

    @pytest.mark.asyncio
    async def test_time_block_resize(self, backend, engine, channel):
        block = seed_time_block(backend)
        await engine.load()

        outcome = await engine.resize_event(f"block-{block.id}", at(17))

        assert outcome == MutationOutcome.COMMITTED
        assert 'block "Mall contract"' in channel.confirmations[0].message
        assert backend.time_blocks[block.id].end_time == "17:00"
        assert channel.notices[-1].message == "Duration updated"


class TestFailure:
    @pytest.mark.asyncio
    async def test_rejection_reverts_and_shows_server_message(self, backend, engine, channel):
        appointment = seed_appointment(backend)
        await engine.load()
        gets_before = backend.count_requests("GET")
        backend.reject_next("PUT", "/api/appointments", "Technician unavailable")

        outcome = await engine.drop_event(f"apt-{appointment.id}", at(13))

        assert outcome == MutationOutcome.FAILED
        assert channel.notices[-1].level == NoticeLevel.ERROR
        assert channel.notices[-1].message == "Technician unavailable"
        assert engine.find_event(f"apt-{appointment.id}").start == at(9)
        assert backend.count_requests("GET") == gets_before

    @pytest.mark.asyncio
    async def test_transport_failure_uses_generic_message(self, backend, channel):
        appointment = seed_appointment(backend)

        def handler(request):
            if request.method == "PUT":
                raise httpx.ConnectError("network down", request=request)
            return backend.handle(request)

        client = SchedulingApiClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))
        protocol = MutationProtocol(client, SchedulingStores(client), channel)
        event = appointment_event(appointment)
        gesture = resize(event, at(12))

        assert await protocol.commit_gesture(gesture) == MutationOutcome.FAILED
        assert channel.notices[-1].message == "Could not change the duration"
        assert event.end == at(10, 30)

    @pytest.mark.asyncio
    async def test_stale_version_conflict(self, backend, client, engine, channel):
        appointment = seed_appointment(backend)
        await engine.load()
        # someone else edits the appointment after our load
        await client.update_appointment(
            appointment.id, {"status": AppointmentStatus.COMPLETED}, version=0
        )

        outcome = await engine.drop_event(f"apt-{appointment.id}", at(13))

        assert outcome == MutationOutcome.CONFLICT
        assert channel.notices[-1].level == NoticeLevel.CONFLICT
        assert channel.notices[-1].message == CONFLICT_MESSAGE
        refreshed = engine.stores.appointments.get(appointment.id)
        assert refreshed.status == AppointmentStatus.COMPLETED
        assert engine.find_event(f"apt-{appointment.id}").start == at(9)
        assert backend.appointments[appointment.id].start_time == "09:00"


class TestInvalidGestures:
    @pytest.mark.asyncio
    async def test_move_across_midnight(self, backend, engine, channel):
        appointment = seed_appointment(backend)
        await engine.load()

        outcome = await engine.drop_event(f"apt-{appointment.id}", at(23))

        assert outcome == MutationOutcome.INVALID
        assert channel.confirmations == []
        assert backend.count_requests("PUT") == 0
        assert channel.notices[-1].level == NoticeLevel.ERROR
        assert engine.find_event(f"apt-{appointment.id}").start == at(9)

    @pytest.mark.asyncio
    async def test_resize_before_start(self, backend, protocol, channel):
        event = time_block_event(seed_time_block(backend))
        gesture = resize(event, at(13))

        assert await protocol.commit_gesture(gesture) == MutationOutcome.INVALID
        assert event.end == at(16)
        assert backend.count_requests() == 0


class TestTimeBlockCrud:
    @pytest.mark.asyncio
    async def test_create_closes_form_and_refreshes(self, backend, protocol, channel):
        form = TimeBlockForm.seeded(at(7))
        form.title = "Van service"

        outcome = await protocol.create_time_block(form, created_by="admin")

        assert outcome == MutationOutcome.COMMITTED
        assert not form.is_open
        assert len(backend.time_blocks) == 1
        assert channel.notices[-1].message == "Block created"

    @pytest.mark.asyncio
    async def test_create_failure_keeps_form_open(self, backend, protocol, channel):
        form = TimeBlockForm.seeded(at(7))
        form.title = "Van service"
        backend.reject_next("POST", "/api/time-blocks", "Calendar is locked")

        outcome = await protocol.create_time_block(form)

        assert outcome == MutationOutcome.FAILED
        assert form.is_open
        assert form.submit_error == "Calendar is locked"
        assert channel.notices[-1].level == NoticeLevel.ERROR

    @pytest.mark.asyncio
    async def test_invalid_form_sends_nothing(self, backend, protocol):
        form = TimeBlockForm.seeded(at(7))

        assert await protocol.create_time_block(form) == MutationOutcome.INVALID
        assert "title" in form.errors
        assert backend.count_requests() == 0

    @pytest.mark.asyncio
    async def test_end_before_start_rejected_before_submission(self, backend, protocol):
        form = TimeBlockForm.seeded(at(14))
        form.title = "Contrato ABC"
        form.end_time = "13:00"

        assert await protocol.create_time_block(form) == MutationOutcome.INVALID
        assert form.errors["end_time"] == "End time must be after start time."
        assert form.is_open
        assert backend.count_requests() == 0

    @pytest.mark.asyncio
    async def test_delete_prompt_reads_back_block(self, backend, protocol, channel):
        block = seed_time_block(backend, description="Quarterly maintenance")

        outcome = await protocol.delete_time_block(block)

        assert outcome == MutationOutcome.COMMITTED
        prompt = channel.confirmations[0]
        assert prompt.tone == ConfirmTone.DANGER
        assert "Title: Mall contract" in prompt.message
        assert "Type: Corporate Contract" in prompt.message
        assert "Time: 14:00 - 16:00" in prompt.message
        assert "Description: Quarterly maintenance" in prompt.message
        assert prompt.message.endswith("Delete this block?")
        assert backend.time_blocks == {}

    @pytest.mark.asyncio
    async def test_declined_delete_keeps_block(self, backend, client, declining_channel):
        block = seed_time_block(backend)
        protocol = MutationProtocol(client, SchedulingStores(client), declining_channel)

        assert await protocol.delete_time_block(block) == MutationOutcome.DECLINED
        assert block.id in backend.time_blocks
        assert backend.count_requests("DELETE") == 0


class TestAppointmentDetails:
    @pytest.mark.asyncio
    async def test_save_sends_only_changes(self, backend, engine, channel):
        appointment = seed_appointment(backend)
        await engine.load()
        await engine.handle_event_click(f"apt-{appointment.id}")
        engine.details.status = AppointmentStatus.IN_PROGRESS

        outcome = await engine.save_details()

        assert outcome == MutationOutcome.COMMITTED
        assert engine.details is None
        assert backend.appointments[appointment.id].status == AppointmentStatus.IN_PROGRESS
        assert channel.notices[-1].message == "Appointment updated"

    @pytest.mark.asyncio
    async def test_save_without_changes_sends_nothing(self, backend, engine):
        appointment = seed_appointment(backend)
        await engine.load()
        await engine.handle_event_click(f"apt-{appointment.id}")

        assert await engine.save_details() == MutationOutcome.UNCHANGED
        assert backend.count_requests("PUT") == 0

    @pytest.mark.asyncio
    async def test_delete_asks_first(self, backend, engine, channel):
        appointment = seed_appointment(backend)
        await engine.load()
        await engine.handle_event_click(f"apt-{appointment.id}")

        outcome = await engine.delete_details()

        assert outcome == MutationOutcome.COMMITTED
        assert channel.confirmations[0].message == APPOINTMENT_DELETE_PROMPT
        assert backend.appointments == {}
        assert engine.events == []

    @pytest.mark.asyncio
    async def test_declined_delete_keeps_details_open(self, backend, client):
        appointment = seed_appointment(backend)
        engine = CalendarEngine(client, ScriptedNotificationChannel(default=False))
        await engine.load()
        await engine.handle_event_click(f"apt-{appointment.id}")

        assert await engine.delete_details() == MutationOutcome.DECLINED
        assert engine.details is not None
        assert appointment.id in backend.appointments

    @pytest.mark.asyncio
    async def test_conflict_keeps_edits_and_retry_commits(self, backend, client, engine, channel):
        appointment = seed_appointment(backend)
        await engine.load()
        await engine.handle_event_click(f"apt-{appointment.id}")
        await client.update_appointment(
            appointment.id, {"status": AppointmentStatus.COMPLETED}, version=0
        )
        engine.details.start_time = "11:00"
        engine.details.end_time = "12:30"

        first = await engine.save_details()

        assert first == MutationOutcome.CONFLICT
        assert channel.notices[-1].level == NoticeLevel.CONFLICT
        assert engine.details is not None
        assert engine.details.appointment.version == 1
        assert engine.details.status == AppointmentStatus.COMPLETED
        assert (engine.details.start_time, engine.details.end_time) == ("11:00", "12:30")

        second = await engine.save_details()

        assert second == MutationOutcome.COMMITTED
        stored = backend.appointments[appointment.id]
        assert (stored.start_time, stored.end_time, stored.status) == (
            "11:00", "12:30", AppointmentStatus.COMPLETED,
        )
        assert engine.details is None

    @pytest.mark.asyncio
    async def test_conflict_on_deleted_appointment_closes_details(self, backend, engine):
        appointment = seed_appointment(backend)
        await engine.load()
        await engine.handle_event_click(f"apt-{appointment.id}")
        del backend.appointments[appointment.id]
        backend.reject_next("PUT", "/api/appointments", "Appointment was changed", status=409)
        engine.details.status = AppointmentStatus.CANCELLED

        assert await engine.save_details() == MutationOutcome.CONFLICT
        assert engine.details is None
