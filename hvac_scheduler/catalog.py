"""Service catalog with durations, descriptions and calendar colors."""

import logging
from collections import Counter
from typing import Iterable, Optional, Union

from hvac_scheduler.schemas.enums import AppointmentStatus, BlockType, ServiceType

logger = logging.getLogger(__name__)

SERVICE_CATALOG: dict[ServiceType, dict] = {
    ServiceType.MAINTENANCE: {
        "label": "Maintenance",
        "description": "Preventive and corrective maintenance of air conditioning equipment.",
        "duration": 90,
        "color": "#0EA5E9",
    },
    ServiceType.INSTALLATION: {
        "label": "Installation",
        "description": "Professional installation of air conditioning systems.",
        "duration": 240,
        "color": "#10B981",
    },
    ServiceType.REPAIR: {
        "label": "Repair",
        "description": "Diagnosis and repair of faults and breakdowns.",
        "duration": 120,
        "color": "#F59E0B",
    },
    ServiceType.QUOTATION: {
        "label": "Quotation",
        "description": "No-commitment site visit and quote for your project.",
        "duration": 45,
        "color": "#6366F1",
    },
    ServiceType.EMERGENCY: {
        "label": "Emergency",
        "description": "24/7 emergency service.",
        "duration": 90,
        "color": "#EF4444",
    },
    ServiceType.DEEP_CLEAN: {
        "label": "Deep Clean",
        "description": "Deep cleaning of equipment and ducts.",
        "duration": 150,
        "color": "#14B8A6",
    },
    ServiceType.GAS_REFILL: {
        "label": "Gas Refill",
        "description": "Refrigerant gas refill.",
        "duration": 60,
        "color": "#A855F7",
    },
}

STATUS_COLORS: dict[AppointmentStatus, str] = {
    AppointmentStatus.PENDING: "#FEF3C7",
    AppointmentStatus.CONFIRMED: "#DBEAFE",
    AppointmentStatus.IN_PROGRESS: "#E9D5FF",
    AppointmentStatus.COMPLETED: "#D1FAE5",
    AppointmentStatus.CANCELLED: "#FEE2E2",
    AppointmentStatus.NO_SHOW: "#F3F4F6",
}

STATUS_BORDER_COLORS: dict[AppointmentStatus, str] = {
    AppointmentStatus.PENDING: "#F59E0B",
    AppointmentStatus.CONFIRMED: "#3B82F6",
    AppointmentStatus.IN_PROGRESS: "#A855F7",
    AppointmentStatus.COMPLETED: "#10B981",
    AppointmentStatus.CANCELLED: "#EF4444",
    AppointmentStatus.NO_SHOW: "#6B7280",
}

STATUS_LABELS: dict[AppointmentStatus, str] = {
    AppointmentStatus.PENDING: "Pending",
    AppointmentStatus.CONFIRMED: "Confirmed",
    AppointmentStatus.IN_PROGRESS: "In Progress",
    AppointmentStatus.COMPLETED: "Completed",
    AppointmentStatus.CANCELLED: "Cancelled",
    AppointmentStatus.NO_SHOW: "No Show",
}

BLOCK_TYPE_CATALOG: dict[BlockType, dict[str, str]] = {
    BlockType.CORPORATE_CONTRACT: {"label": "Corporate Contract", "color": "#9333EA"},
    BlockType.PERSONAL_DEAL: {"label": "Personal Deal", "color": "#10B981"},
    BlockType.INTERNAL: {"label": "Internal", "color": "#6B7280"},
    BlockType.MAINTENANCE: {"label": "Maintenance", "color": "#F59E0B"},
    BlockType.OTHER: {"label": "Other", "color": "#0EA5E9"},
}

LOCK_INDICATOR = "\N{LOCK}"


def default_duration(service_type: Union[ServiceType, str]) -> int:
    """Default appointment length in minutes for a service type."""
    return SERVICE_CATALOG[ServiceType(service_type)]["duration"]


def service_label(service_type: Union[ServiceType, str]) -> str:
    return SERVICE_CATALOG[ServiceType(service_type)]["label"]


def status_colors(status: Union[AppointmentStatus, str]) -> tuple[str, str]:
    """Return ``(background, border)`` colors for an appointment status."""
    status = AppointmentStatus(status)
    return STATUS_COLORS[status], STATUS_BORDER_COLORS[status]


def block_type_color(block_type: Union[BlockType, str]) -> str:
    return BLOCK_TYPE_CATALOG[BlockType(block_type)]["color"]


def block_type_label(block_type: Union[BlockType, str]) -> str:
    return BLOCK_TYPE_CATALOG[BlockType(block_type)]["label"]


def get_service_options(
    overrides: Optional[dict[ServiceType, dict]] = None,
) -> list[dict]:
    """Return every service type with label, description, duration and color.

    ``overrides`` lets backend-provided durations and colors win over the
    local defaults while labels and descriptions stay local.
    """
    overrides = overrides or {}
    options = []
    for service_type, info in SERVICE_CATALOG.items():
        remote = overrides.get(service_type, {})
        options.append({
            "type": service_type,
            "label": info["label"],
            "description": info["description"],
            "duration": remote.get("duration", info["duration"]),
            "color": remote.get("color", info["color"]),
        })
    return options


def calendar_legend(blocked_color: str = "#6B7280", alpha: str = "40") -> list[dict[str, str]]:
    """Legend entries shown above the calendar: one per status plus blocked time."""
    legend = [
        {
            "label": STATUS_LABELS[status],
            "background": STATUS_COLORS[status],
            "border": STATUS_BORDER_COLORS[status],
        }
        for status in (
            AppointmentStatus.PENDING,
            AppointmentStatus.CONFIRMED,
            AppointmentStatus.IN_PROGRESS,
            AppointmentStatus.COMPLETED,
            AppointmentStatus.CANCELLED,
        )
    ]
    legend.append({
        "label": f"{LOCK_INDICATOR} Blocked",
        "background": blocked_color + alpha,
        "border": blocked_color,
    })
    return legend


def status_counts(statuses: Iterable[Union[AppointmentStatus, str]]) -> dict[AppointmentStatus, int]:
    """Count appointments per status, including zero counts."""
    counts = Counter(AppointmentStatus(s) for s in statuses)
    return {status: counts.get(status, 0) for status in AppointmentStatus}
