"""
In-memory calendar client for testing without Google credentials.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pendulum import DateTime

from ..domain.exceptions import CalendarGatewayError
from ..domain.models import TimeRange
from .google_calendar_client import events_to_busy_ranges


class MockCalendarClient:
    """
    Mock client that keeps calendar events in memory.

    Events use the Google Calendar resource shape. Fixture files may also
    use plain ISO strings for ``start`` and ``end``. Every call is recorded
    in ``calls``; setting ``fail_with`` makes the next calls raise it.
    """

    def __init__(
        self,
        timezone: str = "Asia/Seoul",
        events: Optional[List[Dict[str, Any]]] = None,
        data_file: Optional[Path] = None
    ):
        """
        Initialize the mock client.

        Args:
            timezone: IANA timezone used to interpret event times
            events: Optional events to start with
            data_file: Optional JSON file with a list of events
        """
        self.timezone = timezone
        self.events: Dict[str, Dict[str, Any]] = {}
        self.calls: List[Tuple[str, Any]] = []
        self.fail_with: Optional[CalendarGatewayError] = None
        self._next_id = 1

        if data_file is not None:
            self._load_calendar_data(data_file)

        for event in events or []:
            self._store(event)

    def _load_calendar_data(self, data_file: Path) -> None:
        """Load mock calendar data from JSON file."""
        with open(data_file, "r", encoding="utf-8") as f:
            data = json.load(f)

        if not isinstance(data, list):
            raise ValueError(f"Mock calendar data in {data_file} must be a list of events")

        for event in data:
            self._store(event)

    def _store(self, event: Dict[str, Any]) -> Dict[str, Any]:
        stored = dict(event)
        for key in ("start", "end"):
            if isinstance(stored.get(key), str):
                stored[key] = {"dateTime": stored[key]}

        event_id = stored.get("id") or f"mock-{self._next_id}"
        self._next_id += 1
        stored["id"] = event_id
        stored.setdefault("status", "confirmed")
        stored.setdefault("htmlLink", f"https://calendar.google.com/calendar/event?eid={event_id}")

        self.events[event_id] = stored
        return stored

    def _record(self, name: str, payload: Any) -> None:
        self.calls.append((name, payload))
        if self.fail_with is not None:
            raise self.fail_with

    def call_count(self, name: str) -> int:
        return sum(1 for call_name, _ in self.calls if call_name == name)

    def list_busy_intervals(self, start: DateTime, end: DateTime) -> List[TimeRange]:
        """Return stored events overlapping ``[start, end)`` as busy ranges."""
        self._record("list_busy_intervals", (start, end))

        window = TimeRange(start=start, end=end)
        busy_ranges = events_to_busy_ranges(list(self.events.values()), self.timezone)

        return sorted(
            (busy for busy in busy_ranges if busy.overlaps(window)),
            key=lambda r: r.start
        )

    def insert_event(self, event: Dict[str, Any], send_updates: str = "all") -> Dict[str, Any]:
        """Store the event and return it with id and link filled in."""
        self._record("insert_event", (event, send_updates))

        stored = self._store(event)
        if "conferenceData" in event:
            stored["hangoutLink"] = f"https://meet.google.com/mock-{stored['id']}"

        return dict(stored)

    def delete_event(self, event_id: str, send_updates: str = "all") -> None:
        """Remove a stored event; unknown ids fail like the real API does."""
        self._record("delete_event", (event_id, send_updates))

        if event_id not in self.events:
            raise CalendarGatewayError(f"Event not found: {event_id}")

        del self.events[event_id]

    def test_connection(self) -> Dict[str, Any]:
        """
        Mock connection test.

        Returns:
            Mock calendar metadata
        """
        self._record("test_connection", None)
        return {
            "id": "mock",
            "summary": "Mock Calendar",
            "timeZone": self.timezone
        }
