"""Tests for the Google Calendar gateway against a fake discovery client."""

import hashlib
from dataclasses import replace
from datetime import timedelta, timezone

import httplib2
import pytest
from googleapiclient.errors import HttpError

from booking_engine.calendar import (
    CalendarAuthError,
    CalendarEvent,
    CalendarUnavailableError,
    MalformedCalendarDataError,
)
from booking_engine.calendar.google_calendar import (
    GoogleCalendarGateway,
    build_credentials,
    event_id_for_request,
    parse_busy_interval,
)
from tests.conftest import SATURDAY, SUNDAY, ZONE, local, make_config

CALENDAR_ID = "bookings@example.com"


def http_error(status: int) -> HttpError:
    return HttpError(httplib2.Response({"status": status}), b'{"error": {"message": "nope"}}')


def timed_event(event_id, start, end, **extra):
    return {
        "id": event_id,
        "summary": f"Job {event_id}",
        "start": {"dateTime": start.isoformat()},
        "end": {"dateTime": end.isoformat()},
        **extra,
    }


class FakeRequest:
    def __init__(self, result=None, error=None):
        self._result = result
        self._error = error

    def execute(self):
        if self._error is not None:
            raise self._error
        return self._result


class FakeEvents:
    def __init__(self, service):
        self._service = service

    def list(self, **kwargs):
        self._service.list_calls.append(kwargs)
        pages = self._service.pages.get(kwargs["calendarId"], [{"items": []}])
        if isinstance(pages, Exception):
            return FakeRequest(error=pages)
        index = int(kwargs.get("pageToken") or 0)
        response = dict(pages[index])
        if index + 1 < len(pages):
            response["nextPageToken"] = str(index + 1)
        return FakeRequest(response)

    def insert(self, **kwargs):
        self._service.insert_calls.append(kwargs)
        if self._service.insert_error is not None:
            return FakeRequest(error=self._service.insert_error)
        body = kwargs["body"]
        return FakeRequest({"id": body.get("id", "generated123"), "htmlLink": "https://cal/e"})

    def get(self, **kwargs):
        self._service.get_calls.append(kwargs)
        return FakeRequest({"id": kwargs["eventId"], "htmlLink": "https://cal/existing"})


class FakeCalendarList:
    def __init__(self, service):
        self._service = service

    def list(self, **kwargs):
        return FakeRequest({"items": [{"id": cid} for cid in self._service.visible_calendars]})


class FakeCalendarService:
    """Stands in for the object returned by ``googleapiclient.discovery.build``."""

    def __init__(self, pages=None, visible_calendars=(), insert_error=None):
        self.pages = pages or {}
        self.visible_calendars = list(visible_calendars)
        self.insert_error = insert_error
        self.list_calls = []
        self.insert_calls = []
        self.get_calls = []

    def events(self):
        return FakeEvents(self)

    def calendarList(self):
        return FakeCalendarList(self)


def make_gateway(service, include_shared=False):
    return GoogleCalendarGateway(
        service, calendar_id=CALENDAR_ID, zone=ZONE, include_shared_calendars=include_shared
    )


def make_event():
    start = local(SATURDAY, 9)
    return CalendarEvent(
        summary="Carpet cleaning",
        start=start,
        end=start + timedelta(minutes=90),
        time_zone="America/New_York",
        attendee_email="jane@example.com",
        properties={"bookingId": "REQ-1"},
    )


class TestParseBusyInterval:
    def test_timed_event(self):
        interval = parse_busy_interval(
            timed_event("a", local(SATURDAY, 9), local(SATURDAY, 10)), ZONE
        )
        assert interval.start == local(SATURDAY, 9).astimezone(timezone.utc)
        assert interval.label == "Job a"

    def test_z_suffix(self):
        event = {
            "id": "z",
            "start": {"dateTime": "2025-03-15T13:00:00Z"},
            "end": {"dateTime": "2025-03-15T14:00:00Z"},
        }
        interval = parse_busy_interval(event, ZONE)
        assert interval.start == local(SATURDAY, 9)
        assert interval.label == "Busy"

    def test_all_day_event_blocks_local_day(self):
        event = {"id": "d", "start": {"date": "2025-03-15"}, "end": {"date": "2025-03-16"}}
        interval = parse_busy_interval(event, ZONE)
        assert interval.start == local(SATURDAY, 0)
        assert interval.end == local(SUNDAY, 0)

    @pytest.mark.parametrize("extra", [{"status": "cancelled"}, {"transparency": "transparent"}])
    def test_non_blocking_events_skipped(self, extra):
        event = timed_event("x", local(SATURDAY, 9), local(SATURDAY, 10), **extra)
        assert parse_busy_interval(event, ZONE) is None

    def test_zero_length_skipped(self):
        event = timed_event("x", local(SATURDAY, 9), local(SATURDAY, 9))
        assert parse_busy_interval(event, ZONE) is None

    def test_missing_times_raise(self):
        with pytest.raises(MalformedCalendarDataError, match="broken"):
            parse_busy_interval({"id": "broken", "start": {}}, ZONE)


class TestListBusyIntervals:
    @pytest.mark.asyncio
    async def test_pages_are_combined_and_sorted(self):
        service = FakeCalendarService(pages={
            CALENDAR_ID: [
                {"items": [timed_event("late", local(SATURDAY, 14), local(SATURDAY, 15))]},
                {"items": [timed_event("early", local(SATURDAY, 8), local(SATURDAY, 9))]},
            ]
        })
        busy = await make_gateway(service).list_busy_intervals(local(SATURDAY, 0), local(SUNDAY, 0))
        assert [b.label for b in busy] == ["Job early", "Job late"]
        assert len(service.list_calls) == 2
        assert service.list_calls[1]["pageToken"] == "1"

    @pytest.mark.asyncio
    async def test_query_uses_utc_and_single_events(self):
        service = FakeCalendarService()
        await make_gateway(service).list_busy_intervals(local(SATURDAY, 0), local(SUNDAY, 0))
        call = service.list_calls[0]
        assert call["timeMin"] == "2025-03-15T04:00:00+00:00"
        assert call["singleEvents"] is True
        assert call["orderBy"] == "startTime"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status,error_type", [
        (401, CalendarAuthError),
        (403, CalendarAuthError),
        (500, CalendarUnavailableError),
    ])
    async def test_http_errors_translated(self, status, error_type):
        service = FakeCalendarService(pages={CALENDAR_ID: http_error(status)})
        with pytest.raises(error_type):
            await make_gateway(service).list_busy_intervals(local(SATURDAY, 0), local(SUNDAY, 0))

    @pytest.mark.asyncio
    async def test_network_error_translated(self):
        service = FakeCalendarService(pages={CALENDAR_ID: OSError("connection reset")})
        with pytest.raises(CalendarUnavailableError, match="unreachable"):
            await make_gateway(service).list_busy_intervals(local(SATURDAY, 0), local(SUNDAY, 0))

    @pytest.mark.asyncio
    async def test_dns_failure_translated(self):
        error = httplib2.ServerNotFoundError("Unable to find the server at www.googleapis.com")
        service = FakeCalendarService(pages={CALENDAR_ID: error})
        with pytest.raises(CalendarUnavailableError, match="unreachable"):
            await make_gateway(service).list_busy_intervals(local(SATURDAY, 0), local(SUNDAY, 0))

    @pytest.mark.asyncio
    async def test_shared_calendars_are_merged(self):
        service = FakeCalendarService(
            visible_calendars=["team@example.com"],
            pages={
                CALENDAR_ID: [{"items": [timed_event("own", local(SATURDAY, 10), local(SATURDAY, 11))]}],
                "team@example.com": [
                    {"items": [timed_event("team", local(SATURDAY, 8), local(SATURDAY, 9))]}
                ],
            },
        )
        busy = await make_gateway(service, include_shared=True).list_busy_intervals(
            local(SATURDAY, 0), local(SUNDAY, 0)
        )
        assert [b.label for b in busy] == ["Job team", "Job own"]

    @pytest.mark.asyncio
    async def test_failing_shared_calendar_is_skipped(self):
        service = FakeCalendarService(
            visible_calendars=[CALENDAR_ID, "locked@example.com"],
            pages={
                CALENDAR_ID: [{"items": [timed_event("own", local(SATURDAY, 10), local(SATURDAY, 11))]}],
                "locked@example.com": http_error(403),
            },
        )
        busy = await make_gateway(service, include_shared=True).list_busy_intervals(
            local(SATURDAY, 0), local(SUNDAY, 0)
        )
        assert [b.label for b in busy] == ["Job own"]

    @pytest.mark.asyncio
    async def test_failing_booking_calendar_raises(self):
        service = FakeCalendarService(
            visible_calendars=["team@example.com"],
            pages={CALENDAR_ID: http_error(500)},
        )
        with pytest.raises(CalendarUnavailableError):
            await make_gateway(service, include_shared=True).list_busy_intervals(
                local(SATURDAY, 0), local(SUNDAY, 0)
            )


class TestCreateEvent:
    @pytest.mark.asyncio
    async def test_insert_body(self):
        service = FakeCalendarService()
        created = await make_gateway(service).create_event(make_event(), request_id="REQ-1")

        call = service.insert_calls[0]
        body = call["body"]
        assert call["calendarId"] == CALENDAR_ID
        assert call["sendUpdates"] == "none"
        assert body["id"] == hashlib.sha1(b"REQ-1").hexdigest()
        assert body["start"] == {
            "dateTime": "2025-03-15T09:00:00-04:00",
            "timeZone": "America/New_York",
        }
        assert body["extendedProperties"]["private"] == {
            "bookingId": "REQ-1",
            "attendeeEmail": "jane@example.com",
        }
        assert created.event_id == body["id"]
        assert created.html_link == "https://cal/e"

    @pytest.mark.asyncio
    async def test_without_request_id_google_assigns_id(self):
        service = FakeCalendarService()
        created = await make_gateway(service).create_event(make_event())
        assert "id" not in service.insert_calls[0]["body"]
        assert created.event_id == "generated123"

    @pytest.mark.asyncio
    async def test_conflict_on_retry_returns_existing(self):
        service = FakeCalendarService(insert_error=http_error(409))
        created = await make_gateway(service).create_event(make_event(), request_id="REQ-1")
        assert created.event_id == event_id_for_request("REQ-1")
        assert created.html_link == "https://cal/existing"
        assert service.get_calls[0]["eventId"] == event_id_for_request("REQ-1")

    @pytest.mark.asyncio
    async def test_conflict_without_request_id_raises(self):
        service = FakeCalendarService(insert_error=http_error(409))
        with pytest.raises(CalendarUnavailableError):
            await make_gateway(service).create_event(make_event())

    @pytest.mark.asyncio
    async def test_auth_failure_on_insert(self):
        service = FakeCalendarService(insert_error=http_error(403))
        with pytest.raises(CalendarAuthError):
            await make_gateway(service).create_event(make_event(), request_id="REQ-1")


class TestCredentials:
    def test_event_id_is_stable_hex(self):
        event_id = event_id_for_request("REQ-abc")
        assert event_id == event_id_for_request("REQ-abc")
        assert all(c in "0123456789abcdef" for c in event_id)

    def test_missing_credentials(self):
        with pytest.raises(CalendarAuthError, match="credentials not found"):
            build_credentials(make_config().calendar)

    def test_missing_key_file_falls_through(self, tmp_path):
        calendar = replace(
            make_config().calendar,
            service_account_key_path=str(tmp_path / "missing.json"),
        )
        with pytest.raises(CalendarAuthError):
            build_credentials(calendar)
