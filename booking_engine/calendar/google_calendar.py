"""
Google Calendar gateway backed by a service account.

Handles:
- Service-account credentials from a key file or environment variables
- Busy-interval lookup on the booking calendar (optionally every calendar
  the service account can see)
- Idempotent event creation keyed by request id

The API client is built once by ``build_calendar_service`` and injected;
blocking ``googleapiclient`` calls run in a worker thread.
"""

import asyncio
import hashlib
import os
from datetime import date, datetime, time, timezone, tzinfo
from typing import Any, Optional

import httplib2
from google.auth.exceptions import RefreshError, TransportError
from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from booking_engine.calendar.gateway import (
    CalendarAuthError,
    CalendarError,
    CalendarEvent,
    CalendarGateway,
    CalendarUnavailableError,
    CreatedEvent,
    MalformedCalendarDataError,
)
from booking_engine.config import CalendarConfig
from booking_engine.logging_context import get_request_logger
from booking_engine.schemas.scheduling_schema import BookedInterval
from booking_engine.utils import normalize_private_key

logger = get_request_logger(__name__)

# Scopes needed for reading events and inserting bookings
SCOPES = ["https://www.googleapis.com/auth/calendar"]
TOKEN_URI = "https://oauth2.googleapis.com/token"
PAGE_SIZE = 250


def build_credentials(config: CalendarConfig) -> service_account.Credentials:
    """
    Load service-account credentials.

    The key file (GOOGLE_SERVICE_ACCOUNT_KEY_PATH) wins over the
    GOOGLE_CLIENT_EMAIL / GOOGLE_PRIVATE_KEY pair.

    Raises:
        CalendarAuthError: If no usable credentials are configured
    """
    key_path = config.service_account_key_path
    if key_path and os.path.exists(key_path):
        logger.info("Using service account key file: %s", key_path)
        try:
            return service_account.Credentials.from_service_account_file(key_path, scopes=SCOPES)
        except (ValueError, OSError) as e:
            raise CalendarAuthError(f"Invalid service account key file {key_path}: {e}") from e

    if key_path:
        logger.warning("GOOGLE_SERVICE_ACCOUNT_KEY_PATH set but file not found: %s", key_path)

    if config.client_email and config.private_key:
        logger.info("Using service account credentials from environment variables")
        info = {
            "type": "service_account",
            "client_email": config.client_email,
            "private_key": normalize_private_key(config.private_key),
            "token_uri": TOKEN_URI,
        }
        if config.project_id:
            info["project_id"] = config.project_id
        try:
            return service_account.Credentials.from_service_account_info(info, scopes=SCOPES)
        except ValueError as e:
            raise CalendarAuthError(f"Invalid service account credentials: {e}") from e

    raise CalendarAuthError(
        "Google Calendar credentials not found. Set GOOGLE_SERVICE_ACCOUNT_KEY_PATH to a "
        "service account JSON file or configure GOOGLE_CLIENT_EMAIL and GOOGLE_PRIVATE_KEY."
    )


def build_calendar_service(config: CalendarConfig) -> Any:
    """Build the Google Calendar API client. Call once at process start."""
    credentials = build_credentials(config)
    return build("calendar", "v3", credentials=credentials, cache_discovery=False)


def event_id_for_request(request_id: str) -> str:
    """Deterministic Google event id for a request id.

    Event ids must use base32hex characters; a hex digest qualifies.
    """
    return hashlib.sha1(request_id.encode("utf-8")).hexdigest()


def _translate_http_error(e: HttpError, action: str) -> CalendarError:
    status = getattr(e.resp, "status", None)
    if status in (401, 403):
        return CalendarAuthError(f"Calendar access denied while {action} (HTTP {status})")
    return CalendarUnavailableError(f"Calendar API error while {action} (HTTP {status}): {e}")


def _parse_event_time(value: dict, zone: tzinfo) -> datetime:
    """Read a Google ``start``/``end`` object; all-day dates start at local midnight."""
    if value.get("dateTime"):
        parsed = datetime.fromisoformat(value["dateTime"].replace("Z", "+00:00"))
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=zone)
        return parsed
    if value.get("date"):
        return datetime.combine(date.fromisoformat(value["date"]), time(0), tzinfo=zone)
    raise ValueError("event time has neither dateTime nor date")


def parse_busy_interval(event: dict, zone: tzinfo) -> Optional[BookedInterval]:
    """
    Convert a Google event resource into a BookedInterval.

    Returns None for events that do not block time: cancelled, marked
    "free", or zero-length.

    Raises:
        MalformedCalendarDataError: If start/end cannot be read
    """
    if event.get("status") == "cancelled" or event.get("transparency") == "transparent":
        return None
    try:
        start = _parse_event_time(event["start"], zone)
        end = _parse_event_time(event["end"], zone)
    except (KeyError, TypeError, ValueError) as e:
        raise MalformedCalendarDataError(
            f"Unreadable event {event.get('id', '<no id>')}: {e}"
        ) from e
    if end <= start:
        logger.debug("Skipping zero-length event %s", event.get("id"))
        return None
    return BookedInterval(start=start, end=end, label=event.get("summary") or "Busy")


class GoogleCalendarGateway(CalendarGateway):
    def __init__(
        self,
        service: Any,
        calendar_id: str,
        zone: tzinfo,
        include_shared_calendars: bool = False,
    ) -> None:
        self._service = service
        self._calendar_id = calendar_id
        self._zone = zone
        self._include_shared = include_shared_calendars

    async def _execute(self, request: Any, action: str) -> dict:
        try:
            return await asyncio.to_thread(request.execute)
        except HttpError as e:
            logger.error("Google Calendar request failed while %s: %s", action, e)
            raise _translate_http_error(e, action) from e
        except RefreshError as e:
            logger.error("Google Calendar credentials rejected while %s: %s", action, e)
            raise CalendarAuthError(f"Credential refresh failed while {action}: {e}") from e
        except (TransportError, httplib2.HttpLib2Error, OSError) as e:
            logger.error("Google Calendar unreachable while %s: %s", action, e)
            raise CalendarUnavailableError(f"Calendar unreachable while {action}: {e}") from e

    async def _calendar_ids(self) -> list[str]:
        response = await self._execute(
            self._service.calendarList().list(), "listing calendars"
        )
        ids = [item["id"] for item in response.get("items", []) if item.get("id")]
        if self._calendar_id not in ids:
            ids.insert(0, self._calendar_id)
        return ids

    async def _list_calendar(
        self, calendar_id: str, start: datetime, end: datetime
    ) -> list[BookedInterval]:
        busy: list[BookedInterval] = []
        page_token: Optional[str] = None
        while True:
            request = self._service.events().list(
                calendarId=calendar_id,
                timeMin=start.astimezone(timezone.utc).isoformat(),
                timeMax=end.astimezone(timezone.utc).isoformat(),
                singleEvents=True,
                orderBy="startTime",
                maxResults=PAGE_SIZE,
                pageToken=page_token,
            )
            response = await self._execute(request, f"listing events of {calendar_id}")
            for event in response.get("items", []):
                interval = parse_busy_interval(event, self._zone)
                if interval is not None:
                    busy.append(interval)
            page_token = response.get("nextPageToken")
            if not page_token:
                return busy

    async def list_busy_intervals(
        self, start: datetime, end: datetime
    ) -> list[BookedInterval]:
        if not self._include_shared:
            busy = await self._list_calendar(self._calendar_id, start, end)
            return sorted(busy, key=lambda b: b.start)

        calendar_ids = await self._calendar_ids()
        logger.info("Checking busy intervals across %d calendar(s)", len(calendar_ids))
        busy = []
        for calendar_id in calendar_ids:
            try:
                busy.extend(await self._list_calendar(calendar_id, start, end))
            except CalendarError as e:
                if calendar_id == self._calendar_id:
                    raise
                # Shared calendars are best effort; the booking calendar is not.
                logger.warning("Could not check calendar %s: %s", calendar_id, e)
        return sorted(busy, key=lambda b: b.start)

    def _event_body(self, event: CalendarEvent, event_id: Optional[str]) -> dict:
        body: dict[str, Any] = {
            "summary": event.summary,
            "description": event.description,
            "start": {"dateTime": event.start.isoformat(), "timeZone": event.time_zone},
            "end": {"dateTime": event.end.isoformat(), "timeZone": event.time_zone},
        }
        properties = dict(event.properties)
        if event.attendee_email:
            properties["attendeeEmail"] = event.attendee_email
        if event.attendee_name:
            properties["attendeeName"] = event.attendee_name
        if properties:
            body["extendedProperties"] = {"private": properties}
        if event_id:
            body["id"] = event_id
        return body

    def _created(self, data: dict, event: CalendarEvent) -> CreatedEvent:
        if not data or not data.get("id"):
            raise MalformedCalendarDataError("Calendar event creation returned no event id.")
        return CreatedEvent(
            event_id=data["id"],
            start=event.start,
            end=event.end,
            html_link=data.get("htmlLink"),
        )

    async def create_event(
        self, event: CalendarEvent, request_id: Optional[str] = None
    ) -> CreatedEvent:
        event_id = event_id_for_request(request_id) if request_id else None
        request = self._service.events().insert(
            calendarId=self._calendar_id,
            body=self._event_body(event, event_id),
            sendUpdates="none",
        )
        try:
            data = await self._execute(request, "creating event")
        except CalendarUnavailableError as e:
            # A 409 on a keyed insert means an earlier attempt already wrote it.
            cause = e.__cause__
            if event_id and isinstance(cause, HttpError) and cause.resp.status == 409:
                logger.info("Event %s already exists, returning it", event_id)
                data = await self._execute(
                    self._service.events().get(calendarId=self._calendar_id, eventId=event_id),
                    "fetching existing event",
                )
            else:
                raise

        created = self._created(data, event)
        logger.info("Created Google Calendar event: %s", created.event_id)
        return created
