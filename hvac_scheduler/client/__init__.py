from hvac_scheduler.client.api_client import SchedulingApiClient
from hvac_scheduler.client.availability import SlotAvailabilityResolver

__all__ = ["SchedulingApiClient", "SlotAvailabilityResolver"]
