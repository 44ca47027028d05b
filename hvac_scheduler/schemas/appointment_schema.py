"""Appointment data models."""

from datetime import datetime
from typing import Optional

from pydantic import Field, model_validator

from hvac_scheduler.catalog import default_duration
from hvac_scheduler.schemas.base import PartialWindowModel, SchedulingModel, TimeWindowModel
from hvac_scheduler.schemas.enums import AppointmentStatus, ServiceType


class Customer(SchedulingModel):
    """The person requesting the service."""
    name: str = Field(min_length=1)
    email: str = Field(min_length=1)
    phone: str = Field(min_length=1)
    address: str = Field(min_length=1)
    notes: Optional[str] = None


class TechnicianRef(SchedulingModel):
    """Back-reference to an assigned staff member."""
    id: str
    name: str


class ServiceDetails(SchedulingModel):
    """Free-form equipment metadata."""
    equipment_type: Optional[str] = None
    brand: Optional[str] = None
    model: Optional[str] = None
    issue: Optional[str] = None


class AppointmentFields(TimeWindowModel):
    service_type: ServiceType = Field(alias="type")
    status: AppointmentStatus = AppointmentStatus.PENDING
    customer: Customer
    duration: Optional[int] = Field(default=None, gt=0)
    technician: Optional[TechnicianRef] = None
    service_details: Optional[ServiceDetails] = None

    @model_validator(mode="after")
    def fill_default_duration(self) -> "AppointmentFields":
        if self.duration is None:
            self.duration = default_duration(self.service_type)
        return self


class AppointmentCreate(AppointmentFields):
    """Body of a create request: every field except the server-assigned ones."""


class Appointment(AppointmentFields):
    """A persisted customer appointment."""
    id: str = Field(alias="_id")
    version: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AppointmentUpdate(PartialWindowModel):
    """Partial update; only fields that are set are sent."""
    service_type: Optional[ServiceType] = Field(default=None, alias="type")
    status: Optional[AppointmentStatus] = None
    customer: Optional[Customer] = None
    duration: Optional[int] = Field(default=None, gt=0)
    technician: Optional[TechnicianRef] = None
    service_details: Optional[ServiceDetails] = None
