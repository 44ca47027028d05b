"""
Optimistic mutation protocol for calendar gestures and staff edits.

Drag/resize sequence:
    1. The event has already moved on screen (see ``events.move/resize``).
    2. The new date/start/end are read off the moved event.
    3. The user must confirm; declining reverts and sends nothing.
    4. A partial update is sent with the entity's version.
    5. Success: notify, then re-fetch the whole collection of that kind.
    6. Failure: notify, revert. Stale version: conflict notice, revert,
       re-fetch so the winning write becomes visible.

Nothing is retried; every failure hands control back to the user.
"""

from enum import Enum
from typing import Any, Optional, Union

from hvac_scheduler.calendar.events import EventKind, Gesture, GestureKind
from hvac_scheduler.calendar.forms import AppointmentDetailsForm, TimeBlockForm
from hvac_scheduler.calendar.store import SchedulingStores
from hvac_scheduler.client.api_client import SchedulingApiClient
from hvac_scheduler.errors import ApiError, ConflictError, FormValidationError
from hvac_scheduler.logging_context import get_interaction_logger, new_interaction_id
from hvac_scheduler.messages import (
    APPOINTMENT_DELETE_PROMPT,
    CONFLICT_MESSAGE,
    SUCCESS_MESSAGES,
    failure_message,
    appointment_subject,
    build_block_delete_prompt,
    build_move_prompt,
    build_resize_prompt,
    time_block_subject,
)
from hvac_scheduler.notifications import ConfirmTone, NotificationChannel
from hvac_scheduler.schemas.appointment_schema import Appointment
from hvac_scheduler.schemas.time_block_schema import TimeBlock

logger = get_interaction_logger(__name__)


class MutationOutcome(str, Enum):
    COMMITTED = "committed"
    DECLINED = "declined"
    FAILED = "failed"
    CONFLICT = "conflict"
    INVALID = "invalid"
    UNCHANGED = "unchanged"


class MutationProtocol:
    """Confirm, commit, reconcile or revert. One instance per calendar."""

    def __init__(
        self,
        client: SchedulingApiClient,
        stores: SchedulingStores,
        channel: NotificationChannel,
    ) -> None:
        self._client = client
        self._stores = stores
        self._channel = channel

    # ------------------------------------------------------------------ #
    # Drag / resize
    # ------------------------------------------------------------------ #

    async def commit_gesture(self, gesture: Gesture) -> MutationOutcome:
        event = gesture.event
        action = f"{gesture.kind.value}_{_kind_key(event.kind)}"
        new_interaction_id(gesture.kind.value.upper())

        problem = _window_problem(gesture)
        if problem:
            logger.info("Rejected %s of %s: %s", gesture.kind.value, event.id, problem)
            self._channel.error(problem)
            gesture.revert()
            return MutationOutcome.INVALID

        day, start, end = event.day, event.start_time, event.end_time
        subject = (
            appointment_subject(event.entity.customer.name)
            if event.kind == EventKind.APPOINTMENT
            else time_block_subject(event.entity.title)
        )
        if gesture.kind == GestureKind.MOVE:
            prompt = build_move_prompt(subject, day, start, end)
            changes: dict[str, Any] = {
                "scheduled_date": day,
                "start_time": start,
                "end_time": end,
            }
        else:
            prompt = build_resize_prompt(subject, start, end)
            changes = {"end_time": end}
        if event.kind == EventKind.APPOINTMENT:
            changes["duration"] = int((gesture.new_end - gesture.new_start).total_seconds() // 60)

        approved = await self._channel.confirm(action.replace("_", " ").capitalize(), prompt)
        if not approved:
            logger.info("User declined %s of %s", gesture.kind.value, event.id)
            gesture.revert()
            return MutationOutcome.DECLINED

        try:
            await self._update(event.kind, event.entity, changes)
        except ConflictError:
            self._channel.conflict(CONFLICT_MESSAGE)
            gesture.revert()
            await self._reconcile(event.kind)
            return MutationOutcome.CONFLICT
        except ApiError as exc:
            self._channel.error(failure_message(exc, action))
            gesture.revert()
            return MutationOutcome.FAILED

        logger.info("%s %s -> %s %s-%s", action, event.entity_id, day, start, end)
        self._channel.success(SUCCESS_MESSAGES[action])
        await self._reconcile(event.kind)
        return MutationOutcome.COMMITTED

    # ------------------------------------------------------------------ #
    # Time blocks
    # ------------------------------------------------------------------ #

    async def create_time_block(
        self, form: TimeBlockForm, created_by: Optional[str] = None
    ) -> MutationOutcome:
        """Single-shot create: close and re-fetch on success, keep the form open on failure."""
        new_interaction_id("CREATE")
        try:
            body = form.to_create(created_by)
        except FormValidationError as exc:
            logger.debug("Time block form invalid: %s", exc.errors)
            return MutationOutcome.INVALID

        try:
            created = await self._client.create_time_block(body)
        except ApiError as exc:
            message = failure_message(exc, "create_time_block")
            form.submit_error = message
            self._channel.error(message)
            return MutationOutcome.FAILED

        logger.info("Time block %s created", created.id)
        form.submit_error = None
        form.close()
        self._channel.success(SUCCESS_MESSAGES["create_time_block"])
        await self._reconcile(EventKind.TIME_BLOCK)
        return MutationOutcome.COMMITTED

    async def delete_time_block(self, block: TimeBlock) -> MutationOutcome:
        new_interaction_id("DELETE")
        prompt = build_block_delete_prompt(
            block.title, block.block_type, block.start_time, block.end_time, block.description
        )
        if not await self._channel.confirm("Delete time block", prompt, ConfirmTone.DANGER):
            return MutationOutcome.DECLINED
        return await self._delete(EventKind.TIME_BLOCK, block.id, "delete_time_block")

    # ------------------------------------------------------------------ #
    # Appointments (details view)
    # ------------------------------------------------------------------ #

    async def save_appointment(self, form: AppointmentDetailsForm) -> MutationOutcome:
        new_interaction_id("UPDATE")
        if not form.has_changes:
            return MutationOutcome.UNCHANGED
        try:
            update = form.to_update()
        except FormValidationError:
            return MutationOutcome.INVALID

        appointment = form.appointment
        try:
            await self._client.update_appointment(
                appointment.id, update, version=appointment.version
            )
        except ConflictError:
            self._channel.conflict(CONFLICT_MESSAGE)
            await self._reconcile(EventKind.APPOINTMENT)
            fresh = self._stores.appointments.get(appointment.id)
            if fresh is None:
                form.close()
            else:
                form.rebase(fresh)
            return MutationOutcome.CONFLICT
        except ApiError as exc:
            self._channel.error(failure_message(exc, "update_appointment"))
            return MutationOutcome.FAILED

        logger.info("Appointment %s updated: %s", appointment.id, sorted(form.changes()))
        self._channel.success(SUCCESS_MESSAGES["update_appointment"])
        await self._reconcile(EventKind.APPOINTMENT)
        form.close()
        return MutationOutcome.COMMITTED

    async def delete_appointment(
        self, target: Union[Appointment, AppointmentDetailsForm]
    ) -> MutationOutcome:
        new_interaction_id("DELETE")
        form = target if isinstance(target, AppointmentDetailsForm) else None
        appointment = form.appointment if form else target
        if not await self._channel.confirm(
            "Delete appointment", APPOINTMENT_DELETE_PROMPT, ConfirmTone.DANGER
        ):
            return MutationOutcome.DECLINED
        outcome = await self._delete(EventKind.APPOINTMENT, appointment.id, "delete_appointment")
        if form and outcome == MutationOutcome.COMMITTED:
            form.close()
        return outcome

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    async def _update(
        self, kind: EventKind, entity: Union[Appointment, TimeBlock], changes: dict[str, Any]
    ) -> None:
        if kind == EventKind.APPOINTMENT:
            await self._client.update_appointment(entity.id, changes, version=entity.version)
        else:
            await self._client.update_time_block(entity.id, changes, version=entity.version)

    async def _delete(self, kind: EventKind, entity_id: str, action: str) -> MutationOutcome:
        try:
            if kind == EventKind.APPOINTMENT:
                await self._client.delete_appointment(entity_id)
            else:
                await self._client.delete_time_block(entity_id)
        except ApiError as exc:
            self._channel.error(failure_message(exc, action))
            return MutationOutcome.FAILED
        logger.info("%s %s", action, entity_id)
        self._channel.success(SUCCESS_MESSAGES[action])
        await self._reconcile(kind)
        return MutationOutcome.COMMITTED

    async def _reconcile(self, kind: EventKind) -> None:
        if kind == EventKind.APPOINTMENT:
            await self._stores.appointments.refresh()
        else:
            await self._stores.time_blocks.refresh()


def _kind_key(kind: EventKind) -> str:
    return "appointment" if kind == EventKind.APPOINTMENT else "time_block"


def _window_problem(gesture: Gesture) -> str:
    if gesture.new_end.date() != gesture.new_start.date():
        return "Events must start and end on the same day."
    if gesture.new_end <= gesture.new_start:
        return "End time must be after start time."
    return ""
