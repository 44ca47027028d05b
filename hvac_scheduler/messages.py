"""User-facing confirmation and notification texts."""

from datetime import date
from typing import Optional

from hvac_scheduler.catalog import LOCK_INDICATOR, block_type_label, service_label
from hvac_scheduler.errors import ApiError, BusinessRejection
from hvac_scheduler.utils import format_long_date


def build_move_prompt(subject: str, new_date: date, start: str, end: str) -> str:
    """Confirmation asked before committing a drag-move."""
    return f"Move {subject} to {new_date.isoformat()} {start}-{end}?"


def build_resize_prompt(subject: str, start: str, end: str) -> str:
    """Confirmation asked before committing a resize."""
    return f"Change the duration of {subject} to {start}-{end}?"


def appointment_subject(customer_name: str) -> str:
    return f"appointment of {customer_name}"


def time_block_subject(title: str) -> str:
    return f'block "{title}"'


def build_block_delete_prompt(
    title: str,
    block_type: str,
    start: str,
    end: str,
    description: Optional[str] = None,
) -> str:
    """Read-back shown when a time block is clicked."""
    lines = [
        f"{LOCK_INDICATOR} Time Block",
        "",
        f"Title: {title}",
        f"Type: {block_type_label(block_type)}",
        f"Time: {start} - {end}",
    ]
    if description:
        lines.append(f"Description: {description}")
    lines.append("")
    lines.append("Delete this block?")
    return "\n".join(lines)


APPOINTMENT_DELETE_PROMPT = "Are you sure you want to delete this appointment?"

GENERIC_FAILURES = {
    "move_appointment": "Could not move the appointment",
    "move_time_block": "Could not move the block",
    "resize_appointment": "Could not change the duration",
    "resize_time_block": "Could not change the duration",
    "update_appointment": "Could not update the appointment",
    "delete_appointment": "Could not delete the appointment",
    "create_time_block": "Could not create the block",
    "delete_time_block": "Could not delete the block",
    "book_appointment": "Could not book the appointment. Please try again.",
}

SUCCESS_MESSAGES = {
    "move_appointment": "Appointment moved",
    "move_time_block": "Block moved",
    "resize_appointment": "Duration updated",
    "resize_time_block": "Duration updated",
    "update_appointment": "Appointment updated",
    "delete_appointment": "Appointment deleted",
    "create_time_block": "Block created",
    "delete_time_block": "Block deleted",
    "book_appointment": "Appointment requested",
}

CONFLICT_MESSAGE = (
    "This entry was changed by someone else in the meantime. "
    "The calendar has been refreshed; please review and try again."
)


def failure_message(exc: ApiError, action: str) -> str:
    """Server-supplied text for rejections, a generic text for transport failures."""
    if isinstance(exc, BusinessRejection):
        return exc.message
    return GENERIC_FAILURES[action]


def build_booking_summary(
    service_type: str, day: date, start_time: str, email: str, support_email: str
) -> str:
    """Summary shown once the public booking is submitted."""
    return "\n".join([
        "We have received your appointment request for:",
        f"  Service: {service_label(service_type)}",
        f"  Date: {format_long_date(day)}",
        f"  Time: {start_time}",
        "",
        f"You will receive a confirmation email at {email}",
        f"Questions? Write to us at {support_email}",
    ])
