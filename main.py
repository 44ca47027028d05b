"""
Command-line entry point for the scheduling core.

Usage:
    Offline demo:     python main.py console [booking|calendar|all]
    Free slots:       python main.py slots 2026-10-20 maintenance
    Calendar agenda:  python main.py agenda
"""

import asyncio
import logging
import sys

from hvac_scheduler.config import settings

logger = logging.getLogger(__name__)

USAGE = __doc__


async def _print_slots(day_text: str, service_text: str) -> None:
    """Query the configured API for one day's free slots."""
    from hvac_scheduler.client import SchedulingApiClient, SlotAvailabilityResolver
    from hvac_scheduler.schemas.enums import ServiceType
    from hvac_scheduler.utils import format_long_date, parse_day

    day = parse_day(day_text)
    service_type = ServiceType(service_text)
    async with SchedulingApiClient() as client:
        slots = await SlotAvailabilityResolver(client).get_available_slots(day, service_type)
    print(f"{service_type.value} on {format_long_date(day)}: {len(slots)} slots")
    for slot in slots:
        print(f"  {slot.start} - {slot.end}")


async def _print_agenda() -> None:
    """Load both collections from the configured API and list the rendered events."""
    from hvac_scheduler.calendar import CalendarEngine
    from hvac_scheduler.client import SchedulingApiClient
    from hvac_scheduler.notifications import QueuedNotificationChannel

    async with SchedulingApiClient() as client:
        engine = CalendarEngine(client, QueuedNotificationChannel())
        events = await engine.load()
        start, end = engine.visible_hours
        print(f"Visible hours: {start}-{end}")
        for store in (engine.stores.appointments, engine.stores.time_blocks):
            if store.last_error:
                print(f"Could not load {store.name}: {store.last_error}")
    for event in sorted(events, key=lambda e: e.start):
        print(f"{event.start:%Y-%m-%d %H:%M}-{event.end:%H:%M}  {event.title}")


def _run_console_mode(scenario: str) -> None:
    """Start the offline console demo (no server required)."""
    from console_demo import run

    asyncio.run(run(scenario))


if __name__ == "__main__":
    args = sys.argv[1:]
    logger.debug("Starting %s with %s", settings.business.name, args)
    if not args or args[0] == "console":
        _run_console_mode(args[1] if len(args) > 1 else "booking")
    elif args[0] == "slots" and len(args) == 3:
        asyncio.run(_print_slots(args[1], args[2]))
    elif args[0] == "agenda":
        asyncio.run(_print_agenda())
    else:
        print(USAGE)
        sys.exit(2)
