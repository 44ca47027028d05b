"""Tagged variants for service types, appointment statuses and block types."""

from enum import Enum


class ServiceType(str, Enum):
    MAINTENANCE = "maintenance"
    INSTALLATION = "installation"
    REPAIR = "repair"
    QUOTATION = "quotation"
    EMERGENCY = "emergency"
    DEEP_CLEAN = "deep-clean"
    GAS_REFILL = "gas-refill"


class AppointmentStatus(str, Enum):
    """Appointment lifecycle status.

    Staff may move an appointment from any status to any other; there is
    deliberately no transition table here.
    """
    PENDING = "pending"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no-show"


class BlockType(str, Enum):
    CORPORATE_CONTRACT = "corporate-contract"
    PERSONAL_DEAL = "personal-deal"
    INTERNAL = "internal"
    MAINTENANCE = "maintenance"
    OTHER = "other"
