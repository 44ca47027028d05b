"""
Centralized configuration with environment variable overrides.

API endpoints, calendar display defaults, booking rules and the offline
backend's business hours are all configurable here. Nothing is hardcoded
in the calendar or wizard logic.
"""

import logging
import os
import re
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

_HHMM = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


@dataclass(frozen=True)
class BusinessConfig:
    """Business-specific settings loaded from environment or defaults."""

    name: str = os.getenv("BUSINESS_NAME", "Trebol Climate Services")
    support_email: str = os.getenv("SUPPORT_EMAIL", "citas@trebolclima.co")


@dataclass(frozen=True)
class ApiConfig:
    """Backend location and endpoint paths."""

    base_url: str = os.getenv("SCHEDULER_API_URL", "http://localhost:5000")
    timeout_sec: float = _safe_float("API_TIMEOUT", "5.0")
    appointments_path: str = os.getenv("APPOINTMENTS_PATH", "/api/appointments")
    public_appointments_path: str = os.getenv(
        "PUBLIC_APPOINTMENTS_PATH", "/api/public/appointments"
    )
    appointment_types_path: str = os.getenv(
        "APPOINTMENT_TYPES_PATH", "/api/public/appointment-types"
    )
    available_slots_path: str = os.getenv(
        "AVAILABLE_SLOTS_PATH", "/api/public/available-slots"
    )
    time_blocks_path: str = os.getenv("TIME_BLOCKS_PATH", "/api/time-blocks")


@dataclass(frozen=True)
class CalendarConfig:
    """Calendar grid and rendering defaults."""

    slot_min_time: str = os.getenv("CALENDAR_SLOT_MIN", "07:00")
    slot_max_time: str = os.getenv("CALENDAR_SLOT_MAX", "21:00")
    default_block_start: str = os.getenv("DEFAULT_BLOCK_START", "09:00")
    default_block_minutes: int = _safe_int("DEFAULT_BLOCK_MINUTES", "60")
    block_fill_alpha: str = os.getenv("BLOCK_FILL_ALPHA", "40")
    event_text_color: str = os.getenv("EVENT_TEXT_COLOR", "#1F2937")
    initial_view: str = os.getenv("CALENDAR_INITIAL_VIEW", "month")


@dataclass(frozen=True)
class BookingConfig:
    """Public booking wizard rules."""

    min_lead_days: int = _safe_int("BOOKING_MIN_LEAD_DAYS", "1")


@dataclass(frozen=True)
class BackendConfig:
    """Business hours and slot generation for the offline in-memory backend."""

    weekday_open: str = os.getenv("WEEKDAY_OPEN", "08:00")
    weekday_close: str = os.getenv("WEEKDAY_CLOSE", "18:00")
    saturday_open: str = os.getenv("SATURDAY_OPEN", "09:00")
    saturday_close: str = os.getenv("SATURDAY_CLOSE", "14:00")
    slot_step_minutes: int = _safe_int("SLOT_STEP_MINUTES", "30")
    buffer_minutes: int = _safe_int("BUFFER_MINUTES", "0")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    business: BusinessConfig = field(default_factory=BusinessConfig)
    api: ApiConfig = field(default_factory=ApiConfig)
    calendar: CalendarConfig = field(default_factory=CalendarConfig)
    booking: BookingConfig = field(default_factory=BookingConfig)
    backend: BackendConfig = field(default_factory=BackendConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if config.api.timeout_sec <= 0:
        raise ValueError(f"API_TIMEOUT must be > 0, got {config.api.timeout_sec}")
    if not config.api.base_url.startswith(("http://", "https://")):
        raise ValueError(
            f"SCHEDULER_API_URL must be an http(s) URL, got {config.api.base_url!r}"
        )
    if config.booking.min_lead_days < 0:
        raise ValueError(
            f"BOOKING_MIN_LEAD_DAYS must be >= 0, got {config.booking.min_lead_days}"
        )
    if config.calendar.default_block_minutes < 1:
        raise ValueError(
            "DEFAULT_BLOCK_MINUTES must be >= 1, "
            f"got {config.calendar.default_block_minutes}"
        )
    if config.backend.slot_step_minutes < 5:
        raise ValueError(
            f"SLOT_STEP_MINUTES must be >= 5, got {config.backend.slot_step_minutes}"
        )
    if config.backend.buffer_minutes < 0:
        raise ValueError(
            f"BUFFER_MINUTES must be >= 0, got {config.backend.buffer_minutes}"
        )

    for name, value in [
        ("CALENDAR_SLOT_MIN", config.calendar.slot_min_time),
        ("CALENDAR_SLOT_MAX", config.calendar.slot_max_time),
        ("DEFAULT_BLOCK_START", config.calendar.default_block_start),
        ("WEEKDAY_OPEN", config.backend.weekday_open),
        ("WEEKDAY_CLOSE", config.backend.weekday_close),
        ("SATURDAY_OPEN", config.backend.saturday_open),
        ("SATURDAY_CLOSE", config.backend.saturday_close),
    ]:
        if not _HHMM.match(value):
            raise ValueError(f"{name} must be HH:MM, got {value!r}")

    if config.calendar.slot_min_time >= config.calendar.slot_max_time:
        raise ValueError(
            "CALENDAR_SLOT_MIN must be before CALENDAR_SLOT_MAX, "
            f"got {config.calendar.slot_min_time}-{config.calendar.slot_max_time}"
        )


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logger.info("Configuration loaded for '%s'", config.business.name)
    return config


# Singleton instance
settings = load_config()
