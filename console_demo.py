"""
Offline console demo: books an appointment and drives the staff calendar
without a server.

Everything runs against the in-memory backend through the real API client,
wizard, calendar engine and mutation protocol. Confirmation dialogs are
answered from a script so each scenario is reproducible.

Usage:
    python console_demo.py
    python console_demo.py --scenario calendar
    python console_demo.py --scenario all
"""

import argparse
import asyncio
from datetime import date, datetime, timedelta
from typing import Optional

from hvac_scheduler.backend.memory import InMemorySchedulingBackend
from hvac_scheduler.booking import BookingWizard
from hvac_scheduler.calendar import CalendarEngine
from hvac_scheduler.client import SchedulingApiClient
from hvac_scheduler.config import settings
from hvac_scheduler.notifications import Notice, NotificationChannel, ScriptedNotificationChannel
from hvac_scheduler.schemas.enums import AppointmentStatus, BlockType, ServiceType
from hvac_scheduler.utils import combine

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"

NOTICE_COLORS = {"success": GREEN, "error": RED, "conflict": YELLOW}


def next_workday(after: date) -> date:
    day = after
    while day.weekday() >= 5:
        day += timedelta(days=1)
    return day


class ConsoleDemo:
    """Replays scripted scheduling scenarios in the terminal."""

    SCENARIOS = ("booking", "calendar")

    def __init__(self, today: Optional[date] = None) -> None:
        self.today = today or date.today()
        self.backend = InMemorySchedulingBackend(today=self.today)
        self._printed = 0

    def _client(self) -> SchedulingApiClient:
        return SchedulingApiClient(base_url="http://scheduler.local", transport=self.backend.transport())

    def banner(self, title: str) -> None:
        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  HVAC SCHEDULER - {title}{RESET}")
        print(f"{BOLD}  Business: {settings.business.name}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

    def say(self, actor: str, text: str) -> None:
        print(f"{BLUE}{BOLD}[{actor}]{RESET} {text}")

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    def flush(self, channel: NotificationChannel) -> None:
        """Print every channel command sent since the last flush."""
        for command in channel.history[self._printed:]:
            if isinstance(command, Notice):
                color = NOTICE_COLORS.get(command.level.value, RESET)
                print(f"  {color}[{command.level.value}] {command.message}{RESET}")
            else:
                prompt = command.message.replace("\n", " | ")
                print(f"  {YELLOW}[confirm] {command.title}: {prompt}{RESET}")
        self._printed = len(channel.history)

    async def run_scenario(self, scenario: str) -> None:
        if scenario == "booking":
            await self.booking_scenario()
        elif scenario == "calendar":
            await self.calendar_scenario()
        else:
            print(f"{RED}Unknown scenario: {scenario}{RESET}")

    # ------------------------------------------------------------------ #
    # Booking
    # ------------------------------------------------------------------ #

    async def booking_scenario(self) -> None:
        self.banner("Scenario: booking")
        self._printed = 0
        channel = ScriptedNotificationChannel()
        day = next_workday(self.today + timedelta(days=settings.booking.min_lead_days))

        async with self._client() as client:
            wizard = BookingWizard(client, channel, today=lambda: self.today)
            options = await wizard.load_services()
            self.say("Wizard", "Services: " + ", ".join(
                f"{o['label']} ({o['duration']} min)" for o in options
            ))

            await wizard.select_service(ServiceType.MAINTENANCE)
            self.system_log(f"Step: {wizard.step.value}, duration {wizard.duration} min")

            ok, msg = await wizard.set_date(self.today)
            self.say("Customer", f"Same day please ({self.today.isoformat()})")
            self.say("Wizard", msg)

            ok, msg = await wizard.set_date(day)
            self.say("Customer", f"{day.isoformat()} then")
            self.say("Wizard", msg)
            if not wizard.slots:
                return

            ok, msg = wizard.select_slot(wizard.slots[2] if len(wizard.slots) > 2 else wizard.slots[0])
            self.say("Wizard", msg)
            wizard.continue_to_details()
            self.system_log(f"Step: {wizard.step.value}")

            for name, value in {
                "name": "Laura Gomez",
                "email": "laura@example.com",
                "phone": "+57 (300) 123-4567",
                "address": "Calle 10 #43-12, Medellin",
                "issue": "Indoor unit dripping water",
            }.items():
                wizard.set_detail(name, value)

            appointment = await wizard.submit()
            self.flush(channel)
            if appointment is None:
                self.say("Wizard", wizard.submit_error or "Booking failed")
                return
            print()
            print(wizard.confirmation_summary())
            self.system_log(f"Appointment {appointment.id}: {appointment.status.value}")

        print(f"\n{DIM}  Step trace: {' -> '.join(wizard.get_trace())}{RESET}")
        print(f"{DIM}  Requests: {self.backend.count_requests()}{RESET}")

    # ------------------------------------------------------------------ #
    # Calendar
    # ------------------------------------------------------------------ #

    async def calendar_scenario(self) -> None:
        self.banner("Scenario: calendar")
        self._printed = 0
        day = next_workday(self.today + timedelta(days=1))
        appointment = self.backend.add_appointment(
            service_type=ServiceType.REPAIR,
            status=AppointmentStatus.CONFIRMED,
            scheduled_date=day,
            start_time="10:00",
            end_time="12:00",
            customer={
                "name": "Carlos Ruiz",
                "email": "carlos@example.com",
                "phone": "3001112233",
                "address": "Carrera 7 #12-30",
            },
        )
        self.backend.add_time_block(
            title="Mall contract",
            block_type=BlockType.CORPORATE_CONTRACT,
            scheduled_date=day,
            start_time="14:00",
            end_time="16:00",
        )
        # declined move, accepted move, rejected resize, then whatever follows
        channel = ScriptedNotificationChannel(answers=[False, True, True])

        async with self._client() as client:
            engine = CalendarEngine(client, channel)
            events = await engine.load()
            self.system_log(f"View: {engine.view}, hours {engine.visible_hours[0]}-{engine.visible_hours[1]}")
            for event in events:
                self.system_log(f"{event.id}: {event.title} {event.start:%Y-%m-%d %H:%M}-{event.end:%H:%M}")

            apt_id = f"apt-{appointment.id}"
            self.say("Staff", "Drag the repair to 08:00 (then cancel)")
            outcome = await engine.drop_event(apt_id, combine(day, "08:00"))
            self.flush(channel)
            self.system_log(f"Outcome: {outcome.value}, requests so far: {self.backend.count_requests('PUT')} PUT")

            self.say("Staff", "Drag the repair to 08:00 (confirm)")
            outcome = await engine.drop_event(apt_id, combine(day, "08:00"))
            self.flush(channel)
            self.system_log(f"Outcome: {outcome.value}, now {engine.find_event(apt_id).start:%H:%M}")

            self.backend.reject_next("PUT", "/api/appointments", "Technician unavailable at that time")
            self.say("Staff", "Stretch the repair until 11:00 (backend refuses)")
            outcome = await engine.resize_event(apt_id, combine(day, "11:00"))
            self.flush(channel)
            self.system_log(f"Outcome: {outcome.value}, end stays {engine.find_event(apt_id).end:%H:%M}")

            self.say("Staff", "Drag across midnight")
            outcome = await engine.drop_event(apt_id, datetime.combine(day, datetime.min.time()) + timedelta(hours=23))
            self.flush(channel)
            self.system_log(f"Outcome: {outcome.value}")

            self.say("Staff", f"Click {day.isoformat()} to block time")
            form = engine.handle_date_click(day)
            form.title = "Van service"
            form.set_block_type(BlockType.MAINTENANCE)
            outcome = await engine.submit_time_block(created_by="demo")
            self.flush(channel)
            self.system_log(f"Outcome: {outcome.value}, {len(engine.events)} events on the calendar")

            counts = {s.value: n for s, n in engine.status_counts().items() if n}
            self.system_log(f"Status counts: {counts}")

            self.say("Staff", "Open the repair, look, and close it")
            await engine.handle_event_click(apt_id)
            details = engine.details
            self.system_log(f"Details: {details.status.value} {details.scheduled_date} {details.start_time}-{details.end_time}")
            engine.close_details()
            self.system_log(f"Details open: {engine.details is not None}")

        print(f"\n{DIM}  Requests: {self.backend.requests}{RESET}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Offline scheduling demo")
    parser.add_argument(
        "--scenario",
        choices=[*ConsoleDemo.SCENARIOS, "all"],
        default="booking",
        help="Which scripted scenario to replay",
    )
    args = parser.parse_args()
    asyncio.run(run(args.scenario))


async def run(scenario: str) -> None:
    demo = ConsoleDemo()
    scenarios = ConsoleDemo.SCENARIOS if scenario == "all" else (scenario,)
    for name in scenarios:
        await demo.run_scenario(name)


if __name__ == "__main__":
    main()
