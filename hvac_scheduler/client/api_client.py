"""
Async HTTP client for the scheduling backend.

Every response is an envelope ``{success, data | message}``. This module
turns the envelope into either the ``data`` payload or one of the
``ApiError`` subclasses, so callers only deal with typed models and
typed failures. No call is retried here.
"""

import logging
from datetime import date
from typing import Any, Optional, Union

import httpx
from pydantic import ValidationError

from hvac_scheduler.config import settings
from hvac_scheduler.errors import (
    BusinessRejection,
    ConflictError,
    NotFoundError,
    TransportError,
)
from hvac_scheduler.schemas.appointment_schema import (
    Appointment,
    AppointmentCreate,
    AppointmentUpdate,
)
from hvac_scheduler.schemas.availability_schema import (
    ApiEnvelope,
    AppointmentTypeInfo,
    TimeSlot,
)
from hvac_scheduler.schemas.enums import AppointmentStatus, ServiceType
from hvac_scheduler.schemas.time_block_schema import (
    TimeBlock,
    TimeBlockCreate,
    TimeBlockUpdate,
)

logger = logging.getLogger(__name__)

GENERIC_FAILURE = "The request could not be completed"


class SchedulingApiClient:
    """Typed access to appointments, time blocks and availability."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        cookies: Optional[dict[str, str]] = None,
    ) -> None:
        self._api = settings.api
        self._http = httpx.AsyncClient(
            base_url=base_url or self._api.base_url,
            timeout=timeout if timeout is not None else self._api.timeout_sec,
            transport=transport,
            cookies=cookies,
        )

    async def __aenter__(self) -> "SchedulingApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ------------------------------------------------------------------ #
    # Envelope handling
    # ------------------------------------------------------------------ #

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[dict[str, Any]] = None,
        params: Optional[dict[str, str]] = None,
        version: Optional[int] = None,
    ) -> Any:
        headers = {"If-Match": str(version)} if version is not None else None
        try:
            response = await self._http.request(
                method, path, json=json, params=params, headers=headers
            )
        except httpx.HTTPError as exc:
            logger.error("%s %s failed: %s", method, path, exc)
            raise TransportError(GENERIC_FAILURE) from exc

        try:
            envelope = ApiEnvelope.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            logger.error(
                "%s %s returned an unreadable body (status %s)",
                method, path, response.status_code,
            )
            if response.is_success:
                raise TransportError(GENERIC_FAILURE, response.status_code) from exc
            envelope = ApiEnvelope(success=False)

        if response.is_success and envelope.success:
            return envelope.data

        message = envelope.message or GENERIC_FAILURE
        status = response.status_code
        logger.warning("%s %s rejected (%s): %s", method, path, status, message)
        if status == 409:
            raise ConflictError(message, status)
        if status == 404:
            raise NotFoundError(message, status)
        raise BusinessRejection(message, status)

    # ------------------------------------------------------------------ #
    # Appointments
    # ------------------------------------------------------------------ #

    async def list_appointments(
        self,
        status: Optional[AppointmentStatus] = None,
        service_type: Optional[ServiceType] = None,
        day: Optional[date] = None,
    ) -> list[Appointment]:
        params: dict[str, str] = {}
        if status:
            params["status"] = AppointmentStatus(status).value
        if service_type:
            params["type"] = ServiceType(service_type).value
        if day:
            params["date"] = day.isoformat()
        data = await self._request("GET", self._api.appointments_path, params=params or None)
        return _parse_many(Appointment, data)

    async def get_appointment(self, appointment_id: str) -> Appointment:
        data = await self._request("GET", f"{self._api.appointments_path}/{appointment_id}")
        return _parse_one(Appointment, data)

    async def create_appointment(self, appointment: AppointmentCreate) -> Appointment:
        data = await self._request(
            "POST", self._api.appointments_path, json=appointment.to_payload()
        )
        return _parse_one(Appointment, data)

    async def book_appointment(self, appointment: AppointmentCreate) -> Appointment:
        """Public booking endpoint used by the customer-facing wizard."""
        data = await self._request(
            "POST", self._api.public_appointments_path, json=appointment.to_payload()
        )
        return _parse_one(Appointment, data)

    async def update_appointment(
        self,
        appointment_id: str,
        changes: Union[AppointmentUpdate, dict[str, Any]],
        version: Optional[int] = None,
    ) -> Appointment:
        update = _coerce(AppointmentUpdate, changes)
        data = await self._request(
            "PUT",
            f"{self._api.appointments_path}/{appointment_id}",
            json=update.to_payload(),
            version=version,
        )
        return _parse_one(Appointment, data)

    async def delete_appointment(self, appointment_id: str) -> None:
        await self._request("DELETE", f"{self._api.appointments_path}/{appointment_id}")

    # ------------------------------------------------------------------ #
    # Time blocks
    # ------------------------------------------------------------------ #

    async def list_time_blocks(self) -> list[TimeBlock]:
        data = await self._request("GET", self._api.time_blocks_path)
        return _parse_many(TimeBlock, data)

    async def create_time_block(self, block: TimeBlockCreate) -> TimeBlock:
        data = await self._request("POST", self._api.time_blocks_path, json=block.to_payload())
        return _parse_one(TimeBlock, data)

    async def update_time_block(
        self,
        block_id: str,
        changes: Union[TimeBlockUpdate, dict[str, Any]],
        version: Optional[int] = None,
    ) -> TimeBlock:
        update = _coerce(TimeBlockUpdate, changes)
        data = await self._request(
            "PUT",
            f"{self._api.time_blocks_path}/{block_id}",
            json=update.to_payload(),
            version=version,
        )
        return _parse_one(TimeBlock, data)

    async def delete_time_block(self, block_id: str) -> None:
        await self._request("DELETE", f"{self._api.time_blocks_path}/{block_id}")

    # ------------------------------------------------------------------ #
    # Availability
    # ------------------------------------------------------------------ #

    async def get_available_slots(
        self, day: date, service_type: ServiceType
    ) -> list[TimeSlot]:
        data = await self._request(
            "GET",
            self._api.available_slots_path,
            params={"date": day.isoformat(), "serviceType": ServiceType(service_type).value},
        )
        return _parse_many(TimeSlot, data)

    async def get_appointment_types(self) -> list[AppointmentTypeInfo]:
        data = await self._request("GET", self._api.appointment_types_path)
        return _parse_many(AppointmentTypeInfo, data)


def _parse_one(model: type, data: Any) -> Any:
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        logger.error("Backend returned an invalid %s: %s", model.__name__, exc)
        raise TransportError(GENERIC_FAILURE) from exc


def _parse_many(model: type, data: Any) -> list:
    if not isinstance(data, list):
        logger.error("Expected a list of %s, got %s", model.__name__, type(data).__name__)
        raise TransportError(GENERIC_FAILURE)
    return [_parse_one(model, item) for item in data]


def _coerce(model: type, changes: Any) -> Any:
    if isinstance(changes, model):
        return changes
    return model.model_validate(changes)
