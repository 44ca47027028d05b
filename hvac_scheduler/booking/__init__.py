from hvac_scheduler.booking.details import CustomerDetails, FieldStatus
from hvac_scheduler.booking.state_machine import WizardStateMachine, WizardStep, WizardTrigger
from hvac_scheduler.booking.wizard import BookingWizard

__all__ = [
    "BookingWizard",
    "CustomerDetails",
    "FieldStatus",
    "WizardStateMachine",
    "WizardStep",
    "WizardTrigger",
]
