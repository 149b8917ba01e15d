"""
Booking orchestration: event payload construction and submission.
"""

from __future__ import annotations

import hashlib
import logging
from typing import Any, Dict, List, Optional

from ..config import BookingConfig, ScheduleConfig
from ..domain.exceptions import AvailabilityError, CalendarGatewayError
from ..domain.models import BookingRequest, BookingResult
from .availability import AvailabilityService
from .gateway import CalendarGateway

logger = logging.getLogger(__name__)


GENERIC_BOOKING_ERROR = "Could not create the booking. Please try again."
SLOT_TAKEN_ERROR = "The selected time is no longer available. Please choose another slot."


def build_description(request: BookingRequest, footer: str = "") -> str:
    """
    Compose the human-readable event description.

    Optional fields that were not provided are left out entirely.
    """
    lines: List[str] = [
        "Booked by:",
        f"- Name: {request.name}",
        f"- Email: {request.email}",
    ]
    if request.company:
        lines.append(f"- Company: {request.company}")
    if request.phone:
        lines.append(f"- Phone: {request.phone}")
    if request.message:
        lines.extend(["", "Message:", request.message])
    if footer:
        lines.extend(["", "---", footer])

    return "\n".join(lines)


def conference_request_id(request: BookingRequest, calendar_id: str, prefix: str) -> str:
    """
    Derive the conference request key from the request content.

    Resubmitting the same booking yields the same key.
    """
    material = "|".join([
        calendar_id,
        request.email.lower(),
        request.start.in_timezone("UTC").to_iso8601_string(),
        request.end.in_timezone("UTC").to_iso8601_string(),
    ])
    digest = hashlib.sha256(material.encode("utf-8")).hexdigest()
    return f"{prefix}-{digest[:32]}"


def build_event_payload(
    request: BookingRequest,
    schedule: ScheduleConfig,
    booking: BookingConfig,
) -> Dict[str, Any]:
    """Build the Google Calendar event resource for a booking request."""
    timezone = schedule.timezone

    event: Dict[str, Any] = {
        "summary": booking.summary_template.format(name=request.name),
        "description": build_description(request, booking.description_footer),
        "start": {
            "dateTime": request.start.in_timezone(timezone).to_iso8601_string(),
            "timeZone": timezone,
        },
        "end": {
            "dateTime": request.end.in_timezone(timezone).to_iso8601_string(),
            "timeZone": timezone,
        },
        "attendees": [
            {"email": request.email, "displayName": request.name},
        ],
        "reminders": {
            "useDefault": False,
            "overrides": [
                {"method": reminder.method, "minutes": reminder.minutes}
                for reminder in booking.reminders
            ],
        },
    }

    if booking.conference:
        event["conferenceData"] = {
            "createRequest": {
                "requestId": conference_request_id(
                    request, schedule.calendar_id, booking.request_id_prefix
                ),
                "conferenceSolutionKey": {"type": "hangoutsMeet"},
            }
        }

    return event


class BookingService:
    """
    Creates calendar events for booking requests.

    Gateway failures never escape: they are logged and turned into a
    failed ``BookingResult`` carrying a generic message. There is no retry.
    """

    def __init__(
        self,
        gateway: CalendarGateway,
        schedule: ScheduleConfig,
        booking: Optional[BookingConfig] = None,
        availability: Optional[AvailabilityService] = None,
    ) -> None:
        self._gateway = gateway
        self._schedule = schedule
        self._booking = booking or BookingConfig()

        if availability is None and self._booking.require_slot_match:
            availability = AvailabilityService(gateway, schedule)
        self._availability = availability

    def create_booking(self, request: BookingRequest) -> BookingResult:
        """
        Submit a booking request to the calendar.

        Args:
            request: The reservation to create

        Returns:
            Confirmed result with event id and link, or a failed result
        """
        if self._booking.require_slot_match:
            rejection = self._check_slot(request)
            if rejection is not None:
                return BookingResult.failed(rejection)

        event = build_event_payload(request, self._schedule, self._booking)

        try:
            created = self._gateway.insert_event(event, send_updates="all")
        except CalendarGatewayError as exc:
            logger.error(
                "Failed to create calendar event for %s - %s: %s",
                request.start, request.end, exc,
                exc_info=True,
            )
            return BookingResult.failed(GENERIC_BOOKING_ERROR)

        logger.info("Booked %s - %s as event %s", request.start, request.end, created.get("id"))

        return BookingResult.confirmed(
            event_id=created.get("id"),
            html_link=created.get("htmlLink"),
        )

    def _check_slot(self, request: BookingRequest) -> Optional[str]:
        """Return an error message unless the request matches a free slot."""
        try:
            slot = self._availability.find_available_slot(request.time_range)
        except AvailabilityError:
            return GENERIC_BOOKING_ERROR

        if slot is None:
            logger.warning(
                "Rejected booking for %s - %s: no matching available slot",
                request.start, request.end,
            )
            return SLOT_TAKEN_ERROR

        return None
