from hvac_scheduler.calendar.engine import CalendarEngine
from hvac_scheduler.calendar.events import CalendarEvent, EventKind, Gesture, GestureKind
from hvac_scheduler.calendar.forms import AppointmentDetailsForm, TimeBlockForm
from hvac_scheduler.calendar.mutations import MutationOutcome, MutationProtocol
from hvac_scheduler.calendar.store import EntityStore, SchedulingStores

__all__ = [
    "CalendarEngine",
    "CalendarEvent",
    "EventKind",
    "Gesture",
    "GestureKind",
    "AppointmentDetailsForm",
    "TimeBlockForm",
    "MutationOutcome",
    "MutationProtocol",
    "EntityStore",
    "SchedulingStores",
]
