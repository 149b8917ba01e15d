"""
Domain models for time ranges, slots and bookings.
"""

from dataclasses import dataclass
from datetime import time
from enum import Enum
from typing import Any, Dict, List, Optional

from pendulum import DateTime


@dataclass(frozen=True)
class TimeRange:
    """
    Represents an immutable time range with start and end datetime.

    Invariant: start must be before end. The end is exclusive.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start time {self.start} must be before end time {self.end}")

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((self.end - self.start).total_seconds() / 60)

    def overlaps(self, other: "TimeRange") -> bool:
        """Check if this range overlaps with another (touching ranges do not)."""
        return self.start < other.end and self.end > other.start

    def __str__(self) -> str:
        return f"{self.start.format('DD.MM.YYYY HH:mm')} - {self.end.format('HH:mm')}"


@dataclass
class WorkingHours:
    """
    Daily working window and the weekdays it applies to.
    """
    start_time: time
    end_time: time
    working_days: List[int]  # 0=Monday, 6=Sunday
    timezone: str = "Asia/Seoul"

    def is_working_day(self, dt: DateTime) -> bool:
        """Check if a given datetime falls on a working day."""
        return dt.day_of_week in self.working_days

    def get_working_hours_for_day(self, date: DateTime) -> TimeRange | None:
        """
        Get the working hours range for a specific day.
        Returns None if it's not a working day.
        """
        if not self.is_working_day(date):
            return None

        start = date.set(
            hour=self.start_time.hour,
            minute=self.start_time.minute,
            second=0,
            microsecond=0
        )
        end = date.set(
            hour=self.end_time.hour,
            minute=self.end_time.minute,
            second=0,
            microsecond=0
        )

        return TimeRange(start=start, end=end)


@dataclass(frozen=True)
class TimeSlot:
    """
    A fixed-length slot inside the working window.

    Unavailable slots are still returned; callers must check ``available``.
    """
    time_range: TimeRange
    available: bool

    @property
    def id(self) -> str:
        return f"slot-{self.start.in_timezone('UTC').to_iso8601_string()}"

    @property
    def start(self) -> DateTime:
        return self.time_range.start

    @property
    def end(self) -> DateTime:
        return self.time_range.end

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "start_time": self.start.to_iso8601_string(),
            "end_time": self.end.to_iso8601_string(),
            "available": self.available,
        }


class BookingStatus(str, Enum):
    """Outcome of a single booking attempt."""
    CONFIRMED = "confirmed"
    FAILED = "failed"


def _clean_optional(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass(frozen=True)
class BookingRequest:
    """
    A reservation request for one time range.

    Company, phone and message are optional; blank strings count as absent.
    """
    name: str
    email: str
    time_range: TimeRange
    company: Optional[str] = None
    phone: Optional[str] = None
    message: Optional[str] = None

    def __post_init__(self):
        name = (self.name or "").strip()
        email = (self.email or "").strip()
        if not name:
            raise ValueError("Booking request requires a name")
        if not email:
            raise ValueError("Booking request requires an email address")

        object.__setattr__(self, "name", name)
        object.__setattr__(self, "email", email)
        for field_name in ("company", "phone", "message"):
            object.__setattr__(self, field_name, _clean_optional(getattr(self, field_name)))

    @property
    def start(self) -> DateTime:
        return self.time_range.start

    @property
    def end(self) -> DateTime:
        return self.time_range.end


@dataclass(frozen=True)
class BookingResult:
    """
    Outcome of a single booking attempt.

    ``error`` only ever carries a user-facing message.
    """
    success: bool
    event_id: Optional[str] = None
    html_link: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def confirmed(cls, event_id: Optional[str], html_link: Optional[str]) -> "BookingResult":
        return cls(success=True, event_id=event_id, html_link=html_link)

    @classmethod
    def failed(cls, error: str) -> "BookingResult":
        return cls(success=False, error=error)

    @property
    def status(self) -> BookingStatus:
        return BookingStatus.CONFIRMED if self.success else BookingStatus.FAILED

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"success": self.success}
        if self.event_id:
            data["eventId"] = self.event_id
        if self.html_link:
            data["htmlLink"] = self.html_link
        if self.error:
            data["error"] = self.error
        return data
