"""
Availability queries against the calendar.

The service resolves the working window of a day, fetches that window's
busy ranges with a single gateway call, and delegates the slot split to
the domain-level ``SlotCalculator``. Nothing is cached between calls; the
calendar can change at any time.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, List, Optional

import pendulum
from pendulum import Date, DateTime

from ..config import ScheduleConfig
from ..domain.exceptions import AvailabilityError, CalendarGatewayError
from ..domain.models import TimeRange, TimeSlot
from .gateway import CalendarGateway

logger = logging.getLogger(__name__)


GENERIC_AVAILABILITY_ERROR = "Could not load calendar availability. Please try again later."

Clock = Callable[[], DateTime]


class AvailabilityService:
    """
    Computes bookable slots and dates for one schedule.

    The clock is injectable so tests can pin "now".
    """

    def __init__(
        self,
        gateway: CalendarGateway,
        schedule: ScheduleConfig,
        clock: Optional[Clock] = None,
    ) -> None:
        self._gateway = gateway
        self._schedule = schedule
        self._calculator = schedule.slot_calculator()
        self._clock = clock or (lambda: pendulum.now(schedule.timezone))

    @property
    def schedule(self) -> ScheduleConfig:
        return self._schedule

    def now(self) -> DateTime:
        return self._clock().in_timezone(self._schedule.timezone)

    def to_local_day(self, day: date) -> DateTime:
        """
        Return local midnight of ``day`` in the schedule's timezone.

        Aware datetimes are converted into the schedule's timezone first;
        the time of day is ignored.
        """
        timezone = self._schedule.timezone

        if isinstance(day, datetime) and day.tzinfo is not None:
            day = pendulum.instance(day).in_timezone(timezone)

        return pendulum.datetime(day.year, day.month, day.day, tz=timezone)

    def get_available_slots(self, day: date) -> List[TimeSlot]:
        """
        List the slots of one day with their availability.

        Args:
            day: Requested calendar day

        Returns:
            Slots in ascending start order; empty on non-working days

        Raises:
            AvailabilityError: If the calendar could not be read
        """
        local_day = self.to_local_day(day)
        window = self._calculator.get_working_window(local_day)

        if window is None:
            logger.debug("%s is not a working day", local_day.to_date_string())
            return []

        busy_ranges = self._fetch_busy_ranges(window)

        return self._calculator.split_window(window, busy_ranges, self.now())

    def get_available_dates(self) -> List[Date]:
        """List the working days within the booking window, starting tomorrow."""
        return self._calculator.available_dates(self.now().date())

    def find_available_slot(self, time_range: TimeRange) -> Optional[TimeSlot]:
        """
        Return the available slot matching ``time_range`` exactly, if any.

        Raises:
            AvailabilityError: If the calendar could not be read
        """
        for slot in self.get_available_slots(time_range.start):
            if slot.available and slot.start == time_range.start and slot.end == time_range.end:
                return slot
        return None

    def _fetch_busy_ranges(self, window: TimeRange) -> List[TimeRange]:
        try:
            return self._gateway.list_busy_intervals(window.start, window.end)
        except CalendarGatewayError as exc:
            logger.error("Failed to fetch busy intervals for %s: %s", window, exc, exc_info=True)
            raise AvailabilityError(GENERIC_AVAILABILITY_ERROR) from None
