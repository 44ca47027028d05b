"""
Customer details collected in the last wizard step.

Each field has a definition (required or not, how to normalize it) and a
status. Required fields only need to be non-empty; the email address is
not checked beyond that.

Usage:
    details = CustomerDetails()
    ok, msg = details.set_field("name", "Laura Gomez")
    if not details.all_required_filled():
        missing = details.get_missing_fields()
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from hvac_scheduler.schemas.appointment_schema import Customer, ServiceDetails
from hvac_scheduler.utils import normalize_phone

logger = logging.getLogger(__name__)


class FieldStatus(str, Enum):
    EMPTY = "empty"
    FILLED = "filled"


def _phone(value: str) -> str:
    normalized = normalize_phone(value)
    return normalized if any(ch.isdigit() for ch in normalized) else value


@dataclass(frozen=True)
class FieldDefinition:
    """Schema for one customer input."""
    name: str
    display_name: str
    required: bool = True
    normalizer: Optional[Callable[[str], str]] = None


@dataclass
class FieldValue:
    raw_value: Optional[str] = None
    value: Optional[str] = None
    status: FieldStatus = FieldStatus.EMPTY


class CustomerDetails:
    """Tracks the details form and builds the customer part of a booking."""

    FIELD_DEFINITIONS: list[FieldDefinition] = [
        FieldDefinition("name", "full name"),
        FieldDefinition("email", "email"),
        FieldDefinition("phone", "phone", normalizer=_phone),
        FieldDefinition("address", "address"),
        FieldDefinition("notes", "additional notes", required=False),
        FieldDefinition("equipment_type", "equipment type", required=False),
        FieldDefinition("brand", "brand", required=False),
        FieldDefinition("model", "model", required=False),
        FieldDefinition("issue", "problem description", required=False),
    ]

    def __init__(self) -> None:
        self.fields: dict[str, FieldValue] = {
            defn.name: FieldValue() for defn in self.FIELD_DEFINITIONS
        }

    def _get_definition(self, name: str) -> FieldDefinition:
        for defn in self.FIELD_DEFINITIONS:
            if defn.name == name:
                return defn
        raise ValueError(f"Unknown field: {name}")

    def set_field(self, name: str, raw_value: str) -> tuple[bool, str]:
        """
        Store a field value.

        Returns:
            (success, message): success is False when a required field is blank.
        """
        defn = self._get_definition(name)
        field_value = self.fields[name]
        field_value.raw_value = raw_value
        stripped = (raw_value or "").strip()

        if not stripped:
            field_value.value = None
            field_value.status = FieldStatus.EMPTY
            if defn.required:
                return False, f"Please enter your {defn.display_name}."
            return True, f"Cleared {defn.display_name}"

        field_value.value = defn.normalizer(stripped) if defn.normalizer else stripped
        field_value.status = FieldStatus.FILLED
        logger.debug("Field '%s' set", name)
        return True, f"Got {defn.display_name}: {field_value.value}"

    def get_value(self, name: str) -> Optional[str]:
        return self.fields[name].value

    def get_missing_fields(self) -> list[FieldDefinition]:
        return [
            defn
            for defn in self.FIELD_DEFINITIONS
            if defn.required and self.fields[defn.name].status == FieldStatus.EMPTY
        ]

    def all_required_filled(self) -> bool:
        return not self.get_missing_fields()

    def validate(self) -> dict[str, str]:
        """``{field: message}`` for every blank required field."""
        return {
            defn.name: f"Please enter your {defn.display_name}."
            for defn in self.get_missing_fields()
        }

    def to_customer(self) -> Customer:
        return Customer(
            name=self.get_value("name"),
            email=self.get_value("email"),
            phone=self.get_value("phone"),
            address=self.get_value("address"),
            notes=self.get_value("notes"),
        )

    def to_service_details(self) -> Optional[ServiceDetails]:
        values = {
            name: self.get_value(name)
            for name in ("equipment_type", "brand", "model", "issue")
            if self.get_value(name)
        }
        return ServiceDetails(**values) if values else None

    def to_dict(self) -> dict[str, Any]:
        return {
            name: fv.value for name, fv in self.fields.items() if fv.value is not None
        }
