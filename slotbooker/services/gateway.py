"""
The calendar capability the services depend on.
"""

from __future__ import annotations

from typing import Any, Dict, List, Protocol

from pendulum import DateTime

from ..domain.models import TimeRange


class CalendarGateway(Protocol):
    """
    Protocol describing the calendar behaviour needed by the services.

    Implementations raise ``CalendarGatewayError`` for every failure.
    """

    def list_busy_intervals(self, start: DateTime, end: DateTime) -> List[TimeRange]:
        """Return busy ranges overlapping ``[start, end)``."""

    def insert_event(self, event: Dict[str, Any], send_updates: str = "all") -> Dict[str, Any]:
        """Create an event and return the created resource."""

    def delete_event(self, event_id: str, send_updates: str = "all") -> None:
        """Delete an event by id."""

    def test_connection(self) -> Dict[str, Any]:
        """Fetch calendar metadata to prove the credentials work."""
