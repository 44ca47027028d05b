"""Tests for the time-block and appointment-details forms."""

from datetime import date, datetime

import pytest

from hvac_scheduler.calendar.forms import AppointmentDetailsForm, TimeBlockForm
from hvac_scheduler.errors import FormValidationError
from hvac_scheduler.schemas.enums import AppointmentStatus, BlockType
from tests.conftest import seed_appointment


@pytest.fixture
def block_form():
    form = TimeBlockForm.seeded(datetime(2026, 10, 22, 10, 0))
    form.title = "Supplier visit"
    return form


class TestTimeBlockForm:
    def test_seeded_from_click(self):
        form = TimeBlockForm.seeded(date(2026, 10, 22))
        assert (form.scheduled_date, form.start_time, form.end_time) == ("2026-10-22", "09:00", "10:00")
        assert form.block_type == BlockType.INTERNAL
        assert form.is_open

    def test_type_change_sets_color(self, block_form):
        block_form.set_block_type("corporate-contract")
        assert block_form.color == "#9333EA"

    def test_valid_form(self, block_form):
        assert block_form.validate() == {}

    def test_title_required(self, block_form):
        block_form.title = "   "
        assert "title" in block_form.validate()

    def test_title_length(self, block_form):
        block_form.title = "x" * 101
        assert "title" in block_form.validate()

    def test_description_and_notes_length(self, block_form):
        block_form.description = "d" * 501
        block_form.notes = "n" * 1001
        errors = block_form.validate()
        assert "description" in errors
        assert "notes" in errors

    def test_end_before_start(self, block_form):
        block_form.end_time = "09:00"
        assert block_form.validate()["end_time"] == "End time must be after start time."

    def test_malformed_time(self, block_form):
        block_form.start_time = "9am"
        assert "start_time" in block_form.validate()

    def test_to_create_builds_body(self, block_form):
        block_form.set_block_type(BlockType.PERSONAL_DEAL)
        body = block_form.to_create(created_by="admin")
        assert body.title == "Supplier visit"
        assert body.scheduled_date == date(2026, 10, 22)
        assert body.color == "#10B981"
        assert body.created_by == "admin"
        assert body.description is None

    def test_to_create_raises_with_errors(self, block_form):
        block_form.title = ""
        with pytest.raises(FormValidationError) as excinfo:
            block_form.to_create()
        assert "title" in excinfo.value.errors
        assert block_form.errors == excinfo.value.errors


class TestAppointmentDetailsForm:
    def test_no_changes(self, backend):
        form = AppointmentDetailsForm.from_appointment(seed_appointment(backend))
        assert form.changes() == {}
        assert not form.has_changes

    def test_only_changed_fields(self, backend):
        form = AppointmentDetailsForm.from_appointment(seed_appointment(backend))
        form.status = AppointmentStatus.COMPLETED
        assert form.changes() == {"status": AppointmentStatus.COMPLETED}
        assert form.to_update().to_payload() == {"status": "completed"}

    def test_window_change_carries_duration(self, backend):
        form = AppointmentDetailsForm.from_appointment(seed_appointment(backend))
        form.end_time = "11:00"
        assert form.to_update().to_payload() == {"endTime": "11:00", "duration": 120}

    def test_date_change(self, backend):
        form = AppointmentDetailsForm.from_appointment(seed_appointment(backend))
        form.scheduled_date = "2026-10-23"
        assert form.to_update().to_payload() == {"scheduledDate": "2026-10-23"}

    def test_any_status_transition_allowed(self, backend):
        appointment = seed_appointment(backend, status=AppointmentStatus.COMPLETED)
        form = AppointmentDetailsForm.from_appointment(appointment)
        form.status = "pending"
        assert form.to_update().status == AppointmentStatus.PENDING

    def test_invalid_window_raises(self, backend):
        form = AppointmentDetailsForm.from_appointment(seed_appointment(backend))
        form.start_time = "12:00"
        with pytest.raises(FormValidationError):
            form.to_update()
