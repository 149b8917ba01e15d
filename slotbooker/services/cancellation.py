"""
Cancellation of previously booked events.
"""

from __future__ import annotations

import logging

from ..domain.exceptions import CalendarGatewayError
from .gateway import CalendarGateway

logger = logging.getLogger(__name__)


class CancellationService:
    """Deletes booked events; attendees are notified by the calendar."""

    def __init__(self, gateway: CalendarGateway) -> None:
        self._gateway = gateway

    def cancel_booking(self, event_id: str) -> bool:
        """
        Delete the event with ``event_id``.

        Returns:
            True when the calendar accepted the deletion, False otherwise.
            Failure details are logged, never raised.
        """
        event_id = (event_id or "").strip()
        if not event_id:
            logger.warning("Refusing to cancel a booking without an event id")
            return False

        try:
            self._gateway.delete_event(event_id, send_updates="all")
        except CalendarGatewayError as exc:
            logger.error("Failed to cancel event %s: %s", event_id, exc, exc_info=True)
            return False

        logger.info("Cancelled event %s", event_id)
        return True
