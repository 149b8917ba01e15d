"""
Core business logic for calculating bookable time slots.

This is the heart of the application - pure domain logic without any
external dependencies (no API calls, no database, no I/O). Busy ranges and
the current instant are passed in by the caller.
"""

from typing import List, Sequence

from pendulum import Date, DateTime

from .models import TimeRange, TimeSlot, WorkingHours


class SlotCalculator:
    """
    Splits a day's working window into fixed-length slots.

    Algorithm:
    1. Resolve the working window for the day (nothing on non-working days)
    2. Walk forward from the window start in steps of duration + buffer
    3. Emit a slot for every step that still ends inside the window
    4. Flag a slot available when it overlaps no busy range and has not
       started yet
    """

    def __init__(
        self,
        working_hours: WorkingHours,
        slot_duration_minutes: int = 30,
        buffer_minutes: int = 15,
        booking_window_days: int = 14
    ):
        if slot_duration_minutes <= 0:
            raise ValueError("slot_duration_minutes must be greater than zero")
        if buffer_minutes < 0:
            raise ValueError("buffer_minutes must not be negative")
        if booking_window_days <= 0:
            raise ValueError("booking_window_days must be greater than zero")

        self.working_hours = working_hours
        self.slot_duration_minutes = slot_duration_minutes
        self.buffer_minutes = buffer_minutes
        self.booking_window_days = booking_window_days

    def get_working_window(self, day: DateTime) -> TimeRange | None:
        """Return the working window of ``day`` or None on a non-working day."""
        return self.working_hours.get_working_hours_for_day(day.start_of("day"))

    def generate_slots(
        self,
        day: DateTime,
        busy_ranges: Sequence[TimeRange],
        now: DateTime
    ) -> List[TimeSlot]:
        """
        Generate all slots of one day.

        Args:
            day: Any instant on the requested day, in the schedule's timezone
            busy_ranges: Occupied ranges overlapping the day's working window
            now: Current instant; slots starting at or before it are unavailable

        Returns:
            Slots in ascending start order, available or not
        """
        window = self.get_working_window(day)

        if window is None:
            return []

        return self.split_window(window, busy_ranges, now)

    def split_window(
        self,
        window: TimeRange,
        busy_ranges: Sequence[TimeRange],
        now: DateTime
    ) -> List[TimeSlot]:
        """
        Split a working window into slots and flag their availability.

        Example (30 min slots, 15 min buffer, busy 12:00-13:00):
        10:00-10:30 free, 10:45-11:15 free, 11:30-12:00 free,
        12:15-12:45 busy, 13:00-13:30 free, ...
        """
        slots: List[TimeSlot] = []
        relevant_busy = [busy for busy in busy_ranges if window.overlaps(busy)]

        current = window.start

        while current.add(minutes=self.slot_duration_minutes) <= window.end:
            slot_range = TimeRange(
                start=current,
                end=current.add(minutes=self.slot_duration_minutes)
            )

            is_free = not any(slot_range.overlaps(busy) for busy in relevant_busy)
            has_not_started = slot_range.start > now

            slots.append(TimeSlot(time_range=slot_range, available=is_free and has_not_started))

            current = slot_range.end.add(minutes=self.buffer_minutes)

        return slots

    def available_dates(self, today: Date) -> List[Date]:
        """
        List the working days within the booking window.

        The window starts tomorrow and covers ``booking_window_days`` days.
        """
        dates: List[Date] = []

        for offset in range(1, self.booking_window_days + 1):
            candidate = today.add(days=offset)
            if candidate.day_of_week in self.working_hours.working_days:
                dates.append(candidate)

        return dates
