"""
Domain layer - Pure business logic without external dependencies.
"""

from .models import (
    BookingRequest,
    BookingResult,
    BookingStatus,
    TimeRange,
    TimeSlot,
    WorkingHours,
)
from .slot_calculator import SlotCalculator

__all__ = [
    "BookingRequest",
    "BookingResult",
    "BookingStatus",
    "TimeRange",
    "TimeSlot",
    "WorkingHours",
    "SlotCalculator",
]
