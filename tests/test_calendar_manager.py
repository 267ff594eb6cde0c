from datetime import datetime, timedelta
from unittest.mock import MagicMock
from zoneinfo import ZoneInfo

import pytest

from meeting_scheduler.calendar.calendar_manager import (
    CalendarManager,
    free_busy_window,
    get_calendar_manager,
)
from meeting_scheduler.calendar.event_store import LocalEventStore
from meeting_scheduler.calendar.events import parse_datetime
from meeting_scheduler.calendar.mock_calendar_manager import MockCalendarManager, local_timezone_name
from meeting_scheduler.exceptions import CalendarUnavailableError


class TestMockCalendarManager:

    def test_demo_events_are_sorted(self, config):
        manager = MockCalendarManager(config, LocalEventStore())
        events = manager.fetch_calendar_events()

        assert [e.event_id for e in events] == ["event-1", "event-3", "event-2"]
        tomorrow = (datetime.now() + timedelta(days=1)).date()
        assert events[0].start_datetime.astimezone().date() == tomorrow
        assert events[0].start["timeZone"] == config.MOCK_TIMEZONE

    def test_created_event_is_stored_and_listed(self, config, meeting):
        store = LocalEventStore()
        manager = MockCalendarManager(config, store)

        event = manager.create_calendar_event(meeting)

        assert event.event_id.startswith("mock-event-id-")
        assert event.source is None
        assert store.load()[0]["id"] == event.event_id
        assert event.event_id in [e.event_id for e in manager.fetch_calendar_events()]

    def test_delete_stored_and_demo_events(self, config, meeting):
        manager = MockCalendarManager(config, LocalEventStore())
        event = manager.create_calendar_event(meeting)

        assert manager.delete_event(event.event_id) is True
        assert manager.delete_event("event-2") is True
        assert manager.delete_event("does-not-exist") is False

        ids = [e.event_id for e in manager.fetch_calendar_events()]
        assert event.event_id not in ids
        assert "event-2" not in ids

    def test_demo_event_is_deleted_only_once(self, config):
        manager = MockCalendarManager(config, LocalEventStore())

        assert manager.delete_event("event-1") is True
        assert manager.delete_event("event-1") is False

    def test_everyone_is_busy_for_the_next_hour(self, config):
        manager = MockCalendarManager(config, LocalEventStore())
        calendars = manager.check_free_busy(["a@example.com", "b@example.com"])

        assert set(calendars) == {"a@example.com", "b@example.com"}
        period = calendars["a@example.com"]["busy"][0]
        assert parse_datetime(period["end"]) - parse_datetime(period["start"]) == timedelta(hours=1)


class TestCalendarManager:

    @pytest.fixture
    def service(self):
        return MagicMock()

    @pytest.fixture
    def store(self):
        return LocalEventStore()

    @pytest.fixture
    def manager(self, live_config, store, service):
        return CalendarManager(live_config, store, service=service)

    def test_create_event_inserts_and_caches(self, manager, service, store, meeting, sample_google_event):
        service.events.return_value.insert.return_value.execute.return_value = sample_google_event

        event = manager.create_calendar_event(meeting)

        kwargs = service.events.return_value.insert.call_args.kwargs
        assert kwargs["calendarId"] == "primary"
        assert kwargs["sendUpdates"] == "all"
        assert kwargs["body"]["summary"] == "Quarterly Planning"
        assert kwargs["body"]["attendees"] == [{"email": "alice@example.com"}, {"email": "bob@example.com"}]
        assert event.event_id == "google-event-1"
        assert store.load()[0]["source"] == "google"

    def test_create_event_sends_iana_time_zone(self, manager, service, live_config, meeting, sample_google_event):
        live_config.TIMEZONE = "America/Los_Angeles"
        service.events.return_value.insert.return_value.execute.return_value = sample_google_event

        manager.create_calendar_event(meeting)

        body = service.events.return_value.insert.call_args.kwargs["body"]
        assert body["start"]["timeZone"] == "America/Los_Angeles"
        assert body["end"]["timeZone"] == "America/Los_Angeles"
        ZoneInfo(body["start"]["timeZone"])

    def test_create_event_falls_back_to_mock(self, manager, service, store, meeting):
        service.events.return_value.insert.return_value.execute.side_effect = RuntimeError("quota")

        event = manager.create_calendar_event(meeting)

        assert event.event_id.startswith("mock-event-id-")
        assert event.source == "mock_fallback"
        assert store.load()[0]["source"] == "mock_fallback"

    def test_fetch_merges_google_and_local_events(self, manager, service, store, sample_google_event):
        store.save([
            dict(sample_google_event, source="google"),
            {"id": "stale-google", "source": "google", "start": {"dateTime": "2030-01-01T09:00:00Z"}},
            {"id": "local-1", "summary": "Local", "source": "mock_fallback",
             "start": {"dateTime": "2030-01-14T09:00:00Z"}, "end": {"dateTime": "2030-01-14T10:00:00Z"}},
        ])
        service.events.return_value.list.return_value.execute.return_value = {"items": [sample_google_event]}

        events = manager.fetch_calendar_events(14)

        assert [e.event_id for e in events] == ["local-1", "google-event-1"]
        assert [e["id"] for e in store.load()] == ["local-1"]
        kwargs = service.events.return_value.list.call_args.kwargs
        assert kwargs["singleEvents"] is True
        assert kwargs["orderBy"] == "startTime"
        assert parse_datetime(kwargs["timeMax"]) - parse_datetime(kwargs["timeMin"]) == timedelta(days=14)

    def test_fetch_falls_back_to_mock_events(self, manager, service):
        service.events.return_value.list.return_value.execute.side_effect = RuntimeError("offline")
        assert [e.event_id for e in manager.fetch_calendar_events()] == ["event-1", "event-3", "event-2"]

    def test_free_busy_returns_calendars(self, manager, service):
        service.freebusy.return_value.query.return_value.execute.return_value = {
            "calendars": {"a@example.com": {"busy": []}}
        }

        result = manager.check_free_busy(["a@example.com"], "2030-01-01T00:00:00Z", "2030-01-02T00:00:00Z")

        assert result == {"a@example.com": {"busy": []}}
        body = service.freebusy.return_value.query.call_args.kwargs["body"]
        assert body["items"] == [{"id": "a@example.com"}]

    def test_free_busy_falls_back_to_mock(self, manager, service):
        service.freebusy.return_value.query.return_value.execute.side_effect = RuntimeError("offline")
        result = manager.check_free_busy(["a@example.com"])
        assert len(result["a@example.com"]["busy"]) == 1

    def test_delete_only_touches_local_cache(self, manager, service, store):
        store.append({"id": "local-1"})
        assert manager.delete_event("local-1") is True
        service.events.return_value.delete.assert_not_called()

    def test_missing_token_file_is_reported(self, live_config, tmp_path):
        live_config.CALENDAR_TOKEN_PATH = str(tmp_path / "missing.json")
        with pytest.raises(CalendarUnavailableError):
            CalendarManager(live_config, LocalEventStore())._build_calendar_service()

    def test_missing_token_falls_back_to_mock(self, live_config, tmp_path):
        live_config.CALENDAR_TOKEN_PATH = str(tmp_path / "missing.json")
        manager = CalendarManager(live_config, LocalEventStore())
        assert len(manager.fetch_calendar_events()) == 3


def test_free_busy_window_defaults():
    start, end = free_busy_window(None, None, 7)
    assert end - start == timedelta(days=7)

    start, end = free_busy_window("2030-01-01T00:00:00Z", None, 2)
    assert end == parse_datetime("2030-01-03T00:00:00Z")


def test_get_calendar_manager_follows_mock_flag(config):
    assert isinstance(get_calendar_manager(config), MockCalendarManager)
    config.USE_MOCK_DATA = False
    assert isinstance(get_calendar_manager(config), CalendarManager)


def test_local_timezone_name_rejects_abbreviations(config):
    config.TIMEZONE = "Europe/Berlin"
    assert local_timezone_name(config) == "Europe/Berlin"

    config.TIMEZONE = "PDT"
    assert local_timezone_name(config) == "UTC"
