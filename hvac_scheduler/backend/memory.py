"""
In-memory scheduling backend served through ``httpx.MockTransport``.

Implements the same REST contract as the production API so the console
demo and the test-suite run without a network. Availability is computed
from configurable business hours minus existing appointments and time
blocks; writes bump a per-entity version and reject stale ``If-Match``.
"""

import json
import logging
import uuid
from datetime import date, datetime, timezone
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from hvac_scheduler.catalog import SERVICE_CATALOG, default_duration
from hvac_scheduler.config import BackendConfig, settings
from hvac_scheduler.schemas.appointment_schema import Appointment, AppointmentCreate
from hvac_scheduler.schemas.enums import AppointmentStatus, ServiceType
from hvac_scheduler.schemas.time_block_schema import TimeBlock, TimeBlockCreate
from hvac_scheduler.utils import format_hhmm, parse_day, parse_hhmm

logger = logging.getLogger(__name__)

SUNDAY = 6
SATURDAY = 5


def _ok(data: Any = None, status: int = 200) -> httpx.Response:
    return httpx.Response(status, json={"success": True, "data": data})


def _fail(message: str, status: int = 400) -> httpx.Response:
    return httpx.Response(status, json={"success": False, "message": message})


def _first_error(exc: ValidationError) -> str:
    error = exc.errors()[0]
    location = ".".join(str(part) for part in error.get("loc", ()))
    return f"{location}: {error['msg']}" if location else error["msg"]


class InMemorySchedulingBackend:
    """Offline stand-in for the scheduling API."""

    def __init__(
        self,
        today: Optional[date] = None,
        hours: Optional[BackendConfig] = None,
        durations: Optional[dict[ServiceType, int]] = None,
    ) -> None:
        self.today = today or date.today()
        self.hours = hours or settings.backend
        self.durations = {st: default_duration(st) for st in SERVICE_CATALOG}
        self.durations.update(durations or {})
        self.appointments: dict[str, Appointment] = {}
        self.time_blocks: dict[str, TimeBlock] = {}
        self.requests: list[tuple[str, str]] = []
        self._rejections: list[tuple[str, str, str, int]] = []
        self._api = settings.api

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    # ------------------------------------------------------------------ #
    # Fixtures and fault injection
    # ------------------------------------------------------------------ #

    def add_appointment(self, **fields: Any) -> Appointment:
        """Store an appointment directly, bypassing HTTP."""
        created = AppointmentCreate.model_validate(fields)
        appointment = Appointment.model_validate(
            {**created.model_dump(), "id": self._new_id(), "created_at": self._now()}
        )
        self.appointments[appointment.id] = appointment
        return appointment

    def add_time_block(self, **fields: Any) -> TimeBlock:
        """Store a time block directly, bypassing HTTP."""
        created = TimeBlockCreate.model_validate(fields)
        block = TimeBlock.model_validate(
            {**created.model_dump(), "id": self._new_id(), "created_at": self._now()}
        )
        self.time_blocks[block.id] = block
        return block

    def reject_next(
        self, method: str, path_prefix: str, message: str, status: int = 400
    ) -> None:
        """Make the next matching request fail with a business rejection."""
        self._rejections.append((method.upper(), path_prefix, message, status))

    def count_requests(self, method: Optional[str] = None) -> int:
        if method is None:
            return len(self.requests)
        return sum(1 for m, _ in self.requests if m == method.upper())

    # ------------------------------------------------------------------ #
    # Routing
    # ------------------------------------------------------------------ #

    def handle(self, request: httpx.Request) -> httpx.Response:
        method = request.method.upper()
        path = request.url.path.rstrip("/")
        self.requests.append((method, path))
        logger.debug("Backend %s %s", method, path)

        for index, (r_method, prefix, message, status) in enumerate(self._rejections):
            if r_method == method and path.startswith(prefix):
                del self._rejections[index]
                return _fail(message, status)

        try:
            body = json.loads(request.content) if request.content else {}
        except ValueError:
            return _fail("Malformed JSON body")

        api = self._api
        if path == api.available_slots_path and method == "GET":
            return self._available_slots(request.url.params)
        if path == api.appointment_types_path and method == "GET":
            return self._appointment_types()
        if path == api.public_appointments_path and method == "POST":
            return self._create_appointment(body, public=True)
        if path == api.appointments_path:
            if method == "GET":
                return self._list_appointments(request.url.params)
            if method == "POST":
                return self._create_appointment(body, public=False)
        if path.startswith(api.appointments_path + "/"):
            entity_id = path[len(api.appointments_path) + 1:]
            return self._item(
                method, entity_id, body, request, self.appointments, Appointment, "Appointment"
            )
        if path == api.time_blocks_path:
            if method == "GET":
                return _ok([self._dump(b) for b in self.time_blocks.values()])
            if method == "POST":
                return self._create_time_block(body)
        if path.startswith(api.time_blocks_path + "/"):
            entity_id = path[len(api.time_blocks_path) + 1:]
            return self._item(
                method, entity_id, body, request, self.time_blocks, TimeBlock, "Time block"
            )
        return _fail(f"No route for {method} {path}", 404)

    # ------------------------------------------------------------------ #
    # Handlers
    # ------------------------------------------------------------------ #

    def _list_appointments(self, params: httpx.QueryParams) -> httpx.Response:
        items = list(self.appointments.values())
        if params.get("status"):
            items = [a for a in items if a.status.value == params["status"]]
        if params.get("type"):
            items = [a for a in items if a.service_type.value == params["type"]]
        if params.get("date"):
            try:
                day = parse_day(params["date"])
            except ValueError:
                return _fail("Invalid date filter")
            items = [a for a in items if a.scheduled_date == day]
        return _ok([self._dump(a) for a in items])

    def _create_appointment(self, body: dict, public: bool) -> httpx.Response:
        try:
            created = AppointmentCreate.model_validate(body)
        except ValidationError as exc:
            return _fail(_first_error(exc))
        if public:
            if created.scheduled_date < self.today:
                return _fail("Appointments cannot be booked in the past")
            if self._overlaps(created.scheduled_date, created.start_time, created.end_time):
                return _fail("The selected time is no longer available")
            created.status = AppointmentStatus.PENDING
        appointment = Appointment.model_validate(
            {**created.model_dump(), "id": self._new_id(), "created_at": self._now()}
        )
        self.appointments[appointment.id] = appointment
        logger.info("Backend stored appointment %s", appointment.id)
        return _ok(self._dump(appointment), 201)

    def _create_time_block(self, body: dict) -> httpx.Response:
        try:
            created = TimeBlockCreate.model_validate(body)
        except ValidationError as exc:
            return _fail(_first_error(exc))
        block = TimeBlock.model_validate(
            {**created.model_dump(), "id": self._new_id(), "created_at": self._now()}
        )
        self.time_blocks[block.id] = block
        logger.info("Backend stored time block %s", block.id)
        return _ok(self._dump(block), 201)

    def _item(
        self,
        method: str,
        entity_id: str,
        body: dict,
        request: httpx.Request,
        store: dict,
        model: type,
        label: str,
    ) -> httpx.Response:
        current = store.get(entity_id)
        if current is None:
            return _fail(f"{label} not found", 404)
        if method == "GET":
            return _ok(self._dump(current))
        if method == "DELETE":
            del store[entity_id]
            return _ok({"id": entity_id})
        if method != "PUT":
            return _fail(f"Method {method} not allowed", 405)

        expected = request.headers.get("If-Match")
        if expected is not None and expected != str(current.version):
            return _fail(f"{label} was modified by another user", 409)

        merged = {**current.model_dump(by_alias=True, mode="json"), **body}
        merged["version"] = current.version + 1
        merged["updatedAt"] = self._now().isoformat()
        try:
            updated = model.model_validate(merged)
        except ValidationError as exc:
            return _fail(_first_error(exc))
        store[entity_id] = updated
        return _ok(self._dump(updated))

    def _appointment_types(self) -> httpx.Response:
        return _ok([
            {"type": st.value, "duration": self.durations[st], "color": info["color"]}
            for st, info in SERVICE_CATALOG.items()
        ])

    def _available_slots(self, params: httpx.QueryParams) -> httpx.Response:
        try:
            day = parse_day(params.get("date", ""))
            service_type = ServiceType(params.get("serviceType", ""))
        except ValueError:
            return _fail("date and serviceType are required")
        if day < self.today:
            return _fail("Date is in the past")
        return _ok([
            {"start": start, "end": end}
            for start, end in self.compute_slots(day, service_type)
        ])

    # ------------------------------------------------------------------ #
    # Availability
    # ------------------------------------------------------------------ #

    def business_hours(self, day: date) -> Optional[tuple[int, int]]:
        weekday = day.weekday()
        if weekday == SUNDAY:
            return None
        if weekday == SATURDAY:
            return parse_hhmm(self.hours.saturday_open), parse_hhmm(self.hours.saturday_close)
        return parse_hhmm(self.hours.weekday_open), parse_hhmm(self.hours.weekday_close)

    def compute_slots(self, day: date, service_type: ServiceType) -> list[tuple[str, str]]:
        hours = self.business_hours(day)
        if hours is None:
            return []
        open_at, close_at = hours
        length = self.durations[service_type]
        busy = self._busy_ranges(day)
        slots = []
        start = open_at
        while start + length <= close_at:
            end = start + length
            if not any(start < b_end and b_start < end for b_start, b_end in busy):
                slots.append((format_hhmm(start), format_hhmm(end)))
            start += self.hours.slot_step_minutes
        return slots

    def _busy_ranges(self, day: date) -> list[tuple[int, int]]:
        buffer = self.hours.buffer_minutes
        busy = [
            (parse_hhmm(a.start_time) - buffer, parse_hhmm(a.end_time) + buffer)
            for a in self.appointments.values()
            if a.scheduled_date == day and a.status != AppointmentStatus.CANCELLED
        ]
        busy.extend(
            (parse_hhmm(b.start_time), parse_hhmm(b.end_time))
            for b in self.time_blocks.values()
            if b.scheduled_date == day
        )
        return busy

    def _overlaps(self, day: date, start: str, end: str) -> bool:
        s, e = parse_hhmm(start), parse_hhmm(end)
        return any(s < b_end and b_start < e for b_start, b_end in self._busy_ranges(day))

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _dump(entity: Any) -> dict:
        return entity.model_dump(by_alias=True, mode="json", exclude_none=True)

    @staticmethod
    def _new_id() -> str:
        return uuid.uuid4().hex[:24]

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)
