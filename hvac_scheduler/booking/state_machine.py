"""
Finite state machine for the public booking wizard.

Four steps, explicit transitions, optional guards. A step can only be left
through a transition listed in the table; anything else is rejected with
the list of triggers that would have been accepted.

Usage:
    sm = WizardStateMachine(has_slot=lambda: wizard.selected_slot is not None)
    sm.transition(WizardTrigger.SERVICE_SELECTED)
    assert sm.current_step == WizardStep.SELECT_DATE_TIME
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional

from hvac_scheduler.errors import InvalidTransitionError

logger = logging.getLogger(__name__)


class WizardStep(str, Enum):
    SELECT_SERVICE = "select_service"
    SELECT_DATE_TIME = "select_date_time"
    ENTER_DETAILS = "enter_details"
    SUBMITTED = "submitted"


class WizardTrigger(str, Enum):
    SERVICE_SELECTED = "service_selected"
    SLOT_CHOSEN = "slot_chosen"
    BOOKING_CREATED = "booking_created"
    BACK = "back"
    BOOK_ANOTHER = "book_another"


@dataclass
class Transition:
    """A single valid step transition."""
    from_step: WizardStep
    to_step: WizardStep
    trigger: WizardTrigger
    guard: Optional[Callable[[], bool]] = None


@dataclass
class StepEntry:
    """Recorded history entry for a step visit."""
    step: WizardStep
    entered_at: datetime
    trigger: Optional[WizardTrigger] = None


class WizardStateMachine:
    """
    Deterministic step controller for the booking wizard.

    ``has_slot`` gates the move to details entry and ``details_complete``
    gates submission; both are evaluated at transition time.
    """

    def __init__(
        self,
        has_slot: Optional[Callable[[], bool]] = None,
        details_complete: Optional[Callable[[], bool]] = None,
    ) -> None:
        self.transitions: list[Transition] = [
            Transition(WizardStep.SELECT_SERVICE, WizardStep.SELECT_DATE_TIME,
                       WizardTrigger.SERVICE_SELECTED),
            Transition(WizardStep.SELECT_DATE_TIME, WizardStep.ENTER_DETAILS,
                       WizardTrigger.SLOT_CHOSEN, has_slot),
            Transition(WizardStep.ENTER_DETAILS, WizardStep.SUBMITTED,
                       WizardTrigger.BOOKING_CREATED, details_complete),

            # --- Back navigation keeps every collected value ---
            Transition(WizardStep.SELECT_DATE_TIME, WizardStep.SELECT_SERVICE,
                       WizardTrigger.BACK),
            Transition(WizardStep.ENTER_DETAILS, WizardStep.SELECT_DATE_TIME,
                       WizardTrigger.BACK),

            # --- Terminal, except for starting over ---
            Transition(WizardStep.SUBMITTED, WizardStep.SELECT_SERVICE,
                       WizardTrigger.BOOK_ANOTHER),
        ]
        self._current_step = WizardStep.SELECT_SERVICE
        self._history: list[StepEntry] = [
            StepEntry(step=WizardStep.SELECT_SERVICE, entered_at=datetime.now(timezone.utc))
        ]

    @property
    def current_step(self) -> WizardStep:
        return self._current_step

    def transition(self, trigger: WizardTrigger) -> WizardStep:
        """
        Execute a step transition.

        Raises:
            InvalidTransitionError: If no transition exists for ``trigger``
                from the current step, or its guard refuses.
        """
        blocked = False
        for t in self.transitions:
            if t.from_step == self._current_step and t.trigger == trigger:
                if t.guard is not None and not t.guard():
                    blocked = True
                    continue

                old_step = self._current_step
                self._current_step = t.to_step
                self._history.append(StepEntry(
                    step=self._current_step,
                    entered_at=datetime.now(timezone.utc),
                    trigger=trigger,
                ))
                logger.debug(
                    "Wizard step: %s -> %s (trigger: %s)",
                    old_step.value, self._current_step.value, trigger.value,
                )
                return self._current_step

        if blocked:
            raise InvalidTransitionError(
                f"Trigger '{trigger.value}' is not allowed yet from "
                f"'{self._current_step.value}'"
            )
        valid = [t.value for t in self.get_valid_triggers()]
        raise InvalidTransitionError(
            f"No valid transition from '{self._current_step.value}' "
            f"with trigger '{trigger.value}'. Valid triggers: {valid}"
        )

    def can(self, trigger: WizardTrigger) -> bool:
        """True if ``trigger`` would succeed right now, guards included."""
        return any(
            t.from_step == self._current_step
            and t.trigger == trigger
            and (t.guard is None or t.guard())
            for t in self.transitions
        )

    def get_valid_triggers(self) -> list[WizardTrigger]:
        return [t.trigger for t in self.transitions if t.from_step == self._current_step]

    def get_history(self) -> list[StepEntry]:
        return list(self._history)

    def get_step_trace(self) -> list[str]:
        """Ordered list of step names visited."""
        return [entry.step.value for entry in self._history]

    def is_terminal(self) -> bool:
        return self._current_step == WizardStep.SUBMITTED
