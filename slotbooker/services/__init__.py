"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .availability import AvailabilityService
from .booking import BookingService, build_event_payload
from .cancellation import CancellationService
from .gateway import CalendarGateway

__all__ = [
    "AvailabilityService",
    "BookingService",
    "CalendarGateway",
    "CancellationService",
    "build_event_payload",
]
