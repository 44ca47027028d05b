"""Shared utilities for phone numbers and wall-clock times."""

import re
from datetime import date, datetime, time, timedelta

HHMM_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")
MINUTES_PER_DAY = 24 * 60


def normalize_phone(value: str) -> str:
    """Normalize a phone number by stripping everything except digits and a leading +.

    Examples:
        >>> normalize_phone("300 123 4567")
        '3001234567'
        >>> normalize_phone("+57 (300) 123-4567")
        '+573001234567'
    """
    value = value.strip()
    if value.startswith("+"):
        return "+" + re.sub(r"[^\d]", "", value[1:])
    return re.sub(r"[^\d]", "", value)


def is_valid_hhmm(value: str) -> bool:
    return bool(HHMM_PATTERN.match(value))


def parse_hhmm(value: str) -> int:
    """Convert ``HH:MM`` into minutes after midnight.

    Raises:
        ValueError: If the string is not a zero-padded 24h time.
    """
    match = HHMM_PATTERN.match(value)
    if not match:
        raise ValueError(f"Invalid time {value!r}, expected HH:MM")
    return int(match.group(1)) * 60 + int(match.group(2))


def format_hhmm(minutes: int) -> str:
    """Convert minutes after midnight back into ``HH:MM``."""
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise ValueError(f"Minutes out of range for a single day: {minutes}")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def minutes_between(start: str, end: str) -> int:
    return parse_hhmm(end) - parse_hhmm(start)


def combine(day: date, hhmm: str) -> datetime:
    """Build a naive local datetime from a date and an ``HH:MM`` string."""
    minutes = parse_hhmm(hhmm)
    return datetime.combine(day, time(minutes // 60, minutes % 60))


def to_hhmm(moment: datetime) -> str:
    return moment.strftime("%H:%M")


def parse_day(value: str) -> date:
    """Parse ``YYYY-MM-DD`` or an ISO timestamp, keeping only the date part.

    Timestamps are cut at ``T`` instead of being converted so that a
    midnight UTC value never shifts to the previous local day.
    """
    return datetime.strptime(value.split("T", 1)[0].strip(), "%Y-%m-%d").date()


def min_booking_date(today: date, lead_days: int) -> date:
    return today + timedelta(days=lead_days)


def format_long_date(day: date) -> str:
    """Human readable date, e.g. ``Tuesday, October 20, 2026``."""
    return f"{day.strftime('%A')}, {day.strftime('%B')} {day.day}, {day.year}"
