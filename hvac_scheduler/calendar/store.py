"""In-memory caches of appointments and time blocks, refreshed wholesale."""

import asyncio
import logging
from typing import Awaitable, Callable, Generic, Optional, TypeVar

from hvac_scheduler.client.api_client import SchedulingApiClient
from hvac_scheduler.errors import ApiError
from hvac_scheduler.schemas.appointment_schema import Appointment
from hvac_scheduler.schemas.time_block_schema import TimeBlock

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EntityStore(Generic[T]):
    """A single cached collection.

    ``refresh()`` discards local state and replaces it with the server's
    full list. A failed fetch keeps the previous items untouched.
    """

    def __init__(self, name: str, fetch: Callable[[], Awaitable[list[T]]]) -> None:
        self.name = name
        self._fetch = fetch
        self.items: list[T] = []
        self.loaded = False
        self.last_error: Optional[str] = None

    async def refresh(self) -> bool:
        try:
            items = await self._fetch()
        except ApiError as exc:
            self.last_error = exc.message
            logger.error("Failed to load %s: %s", self.name, exc.message)
            return False
        self.items = list(items)
        self.loaded = True
        self.last_error = None
        logger.debug("Loaded %d %s", len(self.items), self.name)
        return True

    def get(self, entity_id: str) -> Optional[T]:
        for item in self.items:
            if getattr(item, "id", None) == entity_id:
                return item
        return None

    def __len__(self) -> int:
        return len(self.items)


class SchedulingStores:
    """The two independent collections the calendar composes."""

    def __init__(self, client: SchedulingApiClient) -> None:
        self.appointments: EntityStore[Appointment] = EntityStore(
            "appointments", client.list_appointments
        )
        self.time_blocks: EntityStore[TimeBlock] = EntityStore(
            "time blocks", client.list_time_blocks
        )

    async def load_all(self) -> bool:
        results = await asyncio.gather(self.appointments.refresh(), self.time_blocks.refresh())
        return all(results)
