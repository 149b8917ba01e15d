"""
Google Calendar API client authenticated with a service account.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httplib2
import pendulum
from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
from google_auth_httplib2 import AuthorizedHttp
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from pendulum import DateTime

from ..domain.exceptions import AuthenticationError, CalendarGatewayError
from ..domain.models import TimeRange

logger = logging.getLogger(__name__)


SCOPES = ["https://www.googleapis.com/auth/calendar"]
TOKEN_URI = "https://oauth2.googleapis.com/token"


def _parse_event_time(value: Dict[str, Any], timezone: str) -> DateTime:
    """
    Parse an event's start or end into the given timezone.

    All-day events only carry a ``date`` and start at local midnight.
    """
    raw = value.get("dateTime") or value.get("date")
    if not raw:
        raise ValueError("Event time has neither dateTime nor date")

    dt = pendulum.parse(raw, tz=timezone)

    if isinstance(dt, DateTime):
        return dt.in_timezone(timezone)

    raise ValueError(f"Could not parse datetime: {raw}")


def event_to_time_range(event: Dict[str, Any], timezone: str) -> Optional[TimeRange]:
    """
    Convert an event resource into the busy range it occupies.

    Returns None for events that do not block time (cancelled, or shown
    as free). Raises ValueError for events that cannot be parsed.
    """
    if event.get("status") == "cancelled":
        return None
    if event.get("transparency") == "transparent":
        return None

    start = _parse_event_time(event.get("start") or {}, timezone)
    end = _parse_event_time(event.get("end") or {}, timezone)

    return TimeRange(start=start, end=end)


def events_to_busy_ranges(events: List[Dict[str, Any]], timezone: str) -> List[TimeRange]:
    """Convert event resources to busy ranges, skipping unusable events."""
    busy_ranges: List[TimeRange] = []

    for event in events:
        try:
            busy = event_to_time_range(event, timezone)
        except ValueError as exc:
            logger.warning("Could not parse event %s: %s", event.get("id", "<unknown>"), exc)
            continue

        if busy is not None:
            busy_ranges.append(busy)

    return busy_ranges


class GoogleCalendarClient:
    """
    Client for Google Calendar v3 event operations on a single calendar.

    Use ``from_service_account`` to authenticate once and build the
    underlying API service; the constructor accepts an already built
    service so tests can pass a mock.
    """

    def __init__(self, service: Any, calendar_id: str = "primary", timezone: str = "Asia/Seoul"):
        self.service = service
        self.calendar_id = calendar_id
        self.timezone = timezone

    @classmethod
    def from_service_account(
        cls,
        client_email: str,
        private_key: str,
        calendar_id: str = "primary",
        timezone: str = "Asia/Seoul",
        timeout_seconds: float = 30.0,
        delegated_user: str | None = None
    ) -> "GoogleCalendarClient":
        """
        Authenticate with service-account material and build the client.

        Args:
            client_email: Service-account email address
            private_key: PEM encoded private key
            calendar_id: Calendar to read and write
            timezone: IANA timezone for parsing and event payloads
            timeout_seconds: Socket timeout for every API request
            delegated_user: Optional user to impersonate (domain-wide delegation)

        Raises:
            AuthenticationError: If the credential material is missing or malformed
        """
        if not client_email or not private_key:
            raise AuthenticationError("Service-account email and private key are required")

        info = {
            "type": "service_account",
            "client_email": client_email,
            "private_key": private_key,
            "token_uri": TOKEN_URI,
        }

        try:
            credentials = service_account.Credentials.from_service_account_info(
                info,
                scopes=SCOPES
            )
        except (ValueError, KeyError, GoogleAuthError) as exc:
            raise AuthenticationError(f"Invalid service-account credentials: {exc}") from exc

        if delegated_user:
            credentials = credentials.with_subject(delegated_user)

        http = AuthorizedHttp(credentials, http=httplib2.Http(timeout=timeout_seconds))
        service = build("calendar", "v3", http=http, cache_discovery=False)

        logger.info("Google Calendar client ready for calendar %s", calendar_id)
        return cls(service=service, calendar_id=calendar_id, timezone=timezone)

    def _execute(self, request: Any, action: str) -> Any:
        """Run an API request and translate failures into gateway errors."""
        try:
            return request.execute()
        except HttpError as exc:
            status = exc.resp.status if exc.resp is not None else None
            if status == 401:
                raise AuthenticationError(
                    f"Google Calendar rejected the credentials while trying to {action}"
                ) from exc
            raise CalendarGatewayError(
                f"Google Calendar API error while trying to {action} (HTTP {status})"
            ) from exc
        except GoogleAuthError as exc:
            raise AuthenticationError(
                f"Could not obtain an access token while trying to {action}: {exc}"
            ) from exc
        except (httplib2.HttpLib2Error, OSError) as exc:
            raise CalendarGatewayError(
                f"Could not reach Google Calendar while trying to {action}: {exc}"
            ) from exc

    def list_events(self, start: DateTime, end: DateTime) -> List[Dict[str, Any]]:
        """List single events overlapping ``[start, end)``, following pagination."""
        events: List[Dict[str, Any]] = []
        page_token: Optional[str] = None

        while True:
            params: Dict[str, Any] = {
                "calendarId": self.calendar_id,
                "timeMin": start.in_timezone("UTC").to_iso8601_string(),
                "timeMax": end.in_timezone("UTC").to_iso8601_string(),
                "singleEvents": True,
                "orderBy": "startTime",
            }
            if page_token:
                params["pageToken"] = page_token

            response = self._execute(self.service.events().list(**params), "list events")
            events.extend(response.get("items", []))

            page_token = response.get("nextPageToken")
            if not page_token:
                return events

    def list_busy_intervals(self, start: DateTime, end: DateTime) -> List[TimeRange]:
        """Return busy ranges overlapping ``[start, end)``."""
        events = self.list_events(start, end)
        busy_ranges = events_to_busy_ranges(events, self.timezone)
        logger.debug("Calendar %s has %d busy range(s) in %s - %s",
                     self.calendar_id, len(busy_ranges), start, end)
        return busy_ranges

    def insert_event(self, event: Dict[str, Any], send_updates: str = "all") -> Dict[str, Any]:
        """
        Create an event.

        Conference data is only honoured by the API with conferenceDataVersion=1.
        """
        params: Dict[str, Any] = {
            "calendarId": self.calendar_id,
            "body": event,
            "sendUpdates": send_updates,
        }
        if "conferenceData" in event:
            params["conferenceDataVersion"] = 1

        created = self._execute(self.service.events().insert(**params), "create event")

        logger.info("Created event %s", created.get("id"))
        return created

    def delete_event(self, event_id: str, send_updates: str = "all") -> None:
        """Delete an event by id."""
        self._execute(
            self.service.events().delete(
                calendarId=self.calendar_id,
                eventId=event_id,
                sendUpdates=send_updates
            ),
            "delete event"
        )
        logger.info("Deleted event %s", event_id)

    def test_connection(self) -> Dict[str, Any]:
        """
        Test the connection and authentication by fetching calendar metadata.

        Returns:
            Calendar resource
        """
        return self._execute(
            self.service.calendars().get(calendarId=self.calendar_id),
            "fetch calendar metadata"
        )
