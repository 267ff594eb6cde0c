import json
from datetime import datetime, timezone

import pytest

from meeting_scheduler.calendar.event_store import LocalEventStore
from meeting_scheduler.calendar.events import (
    CalendarEvent,
    MeetingDetails,
    dedupe_events,
    parse_datetime,
    sort_events,
    split_attendees,
    to_utc_iso,
)


def _event(event_id, start):
    return CalendarEvent(event_id, f"Event {event_id}", {"dateTime": start}, {"dateTime": start})


class TestDatetimes:

    def test_parse_datetime_accepts_zulu_suffix(self):
        assert parse_datetime("2025-04-21T09:00:00Z") == datetime(2025, 4, 21, 9, tzinfo=timezone.utc)

    def test_parse_datetime_makes_naive_values_aware(self):
        assert parse_datetime("2025-04-21T09:00:00").tzinfo is not None

    def test_parse_datetime_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_datetime("next tuesday")

    def test_to_utc_iso_uses_milliseconds(self):
        assert to_utc_iso("2025-04-21T11:30:00+02:00") == "2025-04-21T09:30:00.000Z"


class TestMeetingDetails:

    def test_split_attendees_accepts_comma_string(self):
        assert split_attendees(" a@example.com, ,b@example.com ") == ["a@example.com", "b@example.com"]
        assert split_attendees(None) == []

    def test_from_dict_reads_camel_case_payload(self):
        meeting = MeetingDetails.from_dict({
            "title": "Sync",
            "startTime": "2025-04-21T09:00:00Z",
            "endTime": "2025-04-21T09:45:00Z",
            "attendees": "a@example.com, b@example.com",
            "duration": "45",
        })

        assert meeting.attendees == ["a@example.com", "b@example.com"]
        assert meeting.description == ""
        assert meeting.duration == 45
        assert meeting.duration_minutes == 45
        assert meeting.to_dict()["startTime"] == "2025-04-21T09:00:00Z"


class TestCalendarEvent:

    def test_from_dict_reads_google_resource(self, sample_google_event):
        event = CalendarEvent.from_dict(sample_google_event)

        assert event.event_id == "google-event-1"
        assert event.attendees == ["john@example.com", "jane@example.com"]
        assert event.num_attendees == 2
        assert not event.is_all_day

        data = event.to_dict()
        assert data["attendees"] == [{"email": "john@example.com"}, {"email": "jane@example.com"}]
        assert data["htmlLink"] == sample_google_event["htmlLink"]
        assert "source" not in data

    def test_all_day_event(self):
        event = CalendarEvent.from_dict({"id": "x", "start": {"date": "2030-01-15"}, "end": {"date": "2030-01-16"}})
        assert event.is_all_day
        assert event.summary == "Untitled Event"
        assert event.start_datetime.date().isoformat() == "2030-01-15"

    def test_from_meeting_fills_defaults(self, meeting):
        meeting.location = ""
        event = CalendarEvent.from_meeting(meeting, "mock-1", "UTC", "Virtual Meeting", source="mock_fallback")
        data = event.to_dict()

        assert data["location"] == "Virtual Meeting"
        assert data["status"] == "confirmed"
        assert data["source"] == "mock_fallback"
        assert data["start"] == {"dateTime": "2025-04-21T09:00:00.000Z", "timeZone": "UTC"}

    def test_sort_and_dedupe(self):
        later = _event("b", "2030-01-02T09:00:00Z")
        earlier = _event("a", "2030-01-01T09:00:00Z")
        duplicate = _event("b", "2030-01-03T09:00:00Z")

        unique = dedupe_events([later, earlier, duplicate])
        assert unique == [later, earlier]
        assert [e.event_id for e in sort_events(unique)] == ["a", "b"]


class TestLocalEventStore:

    def test_in_memory_store(self):
        store = LocalEventStore()
        store.append({"id": "1"})
        store.append({"id": "2"})

        assert store.remove("1") is True
        assert store.remove("1") is False
        assert store.load() == [{"id": "2"}]

    def test_load_returns_copies(self):
        store = LocalEventStore()
        store.append({"id": "1"})
        store.load()[0]["id"] = "changed"
        assert store.load() == [{"id": "1"}]

    def test_persists_to_file(self, tmp_path):
        path = tmp_path / "events" / "store.json"
        store = LocalEventStore(str(path))
        store.append({"id": "1", "summary": "Kickoff"})

        assert json.loads(path.read_text()) == [{"id": "1", "summary": "Kickoff"}]
        assert LocalEventStore(str(path)).load() == [{"id": "1", "summary": "Kickoff"}]

        store.save([])
        assert LocalEventStore(str(path)).load() == []

    def test_corrupt_file_starts_empty(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("{not json")
        assert LocalEventStore(str(path)).load() == []
